"""Pydantic models for the analysis API."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from label_analyzer.domain.analysis import AnalysisResult, IngredientRecord
from label_analyzer.services.scoring import score_guidance, score_rating


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TextAnalysisRequest(BaseModel):
    """Text-mode request payload."""

    text: str | None = None


class ImageAnalysisRequest(BaseModel):
    """Photo-mode request payload with a data URL or bare base64 image."""

    image: str | None = None


class IngredientPayload(_CamelModel):
    """Single scored ingredient."""

    name: str
    description: str
    health_score: int = Field(ge=0, le=100)
    rating: str
    guidance: str

    @classmethod
    def from_record(cls, record: IngredientRecord) -> "IngredientPayload":
        return cls(
            name=record.name,
            description=record.description,
            health_score=record.health_score,
            rating=score_rating(record.health_score),
            guidance=score_guidance(record.health_score),
        )


class AnalysisResponse(_CamelModel):
    """Scored analysis for one label."""

    ingredients: list[IngredientPayload]
    overall_score: int = Field(ge=0, le=100)
    overall_rating: str
    raw_text: str

    @classmethod
    def from_result(cls, result: AnalysisResult) -> "AnalysisResponse":
        return cls(
            ingredients=[
                IngredientPayload.from_record(record) for record in result.ingredients
            ],
            overall_score=result.overall_score,
            overall_rating=score_rating(result.overall_score),
            raw_text=result.raw_text,
        )


class ErrorResponse(BaseModel):
    """Error payload returned for analysis failures."""

    error: str
    message: str
