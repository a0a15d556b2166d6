"""Aggregate scoring and score classification."""

from collections.abc import Sequence

from label_analyzer.domain.analysis import IngredientRecord

_RATINGS = (
    (80, "Excellent"),
    (60, "Good"),
    (40, "Fair"),
    (20, "Poor"),
)
_GUIDANCE = (
    (70, "Safe for consumption"),
    (40, "Consume in moderation"),
)


def overall_score(ingredients: Sequence[IngredientRecord]) -> int:
    """Return the mean health score, rounding halves up.

    Uses integer arithmetic so 57.5 always becomes 58.
    """
    if not ingredients:
        raise ValueError("overall_score requires at least one ingredient")
    total = sum(ingredient.health_score for ingredient in ingredients)
    count = len(ingredients)
    return (2 * total + count) // (2 * count)


def score_rating(score: int) -> str:
    """Return the rating label for a health score."""
    for threshold, label in _RATINGS:
        if score >= threshold:
            return label
    return "Harmful"


def score_guidance(score: int) -> str:
    """Return consumption guidance for a health score."""
    for threshold, guidance in _GUIDANCE:
        if score >= threshold:
            return guidance
    return "Limit or avoid"
