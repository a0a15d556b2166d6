"""Domain models for ingredient analysis results."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IngredientRecord:
    """Single ingredient recovered from analysis prose."""

    name: str
    description: str
    health_score: int


@dataclass(frozen=True)
class AnalysisResult:
    """Scored ingredient list for one analysis request."""

    ingredients: tuple[IngredientRecord, ...]
    overall_score: int
    raw_text: str
