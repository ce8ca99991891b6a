"""Pydantic schemas for collaborator payloads and HTTP request bodies."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from models.personas import DEFAULT_PERSONA


class GeneratedQuery(BaseModel):
    """One query proposed by the generative backend."""

    query: str = Field(min_length=1)
    confidence: float
    reasoning: str = ""

    @field_validator("confidence")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return max(0.0, min(1.0, value))

    @field_validator("query")
    @classmethod
    def _strip(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("query must not be blank")
        return stripped


class QueryGenerationResponse(BaseModel):
    """Expected JSON object inside the generator's free-text answer."""

    queries: List[GeneratedQuery]


class CatalogSearchInput(BaseModel):
    """Input contract for catalog searches."""

    query: str = Field(min_length=1)
    results: int = Field(default=5, ge=1, le=100)
    sort: Literal["score", "-score", "price", "-price", "review_count", "-review_count"] = "-score"
    price_from: Optional[int] = Field(default=None, ge=0)
    price_to: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_price_range(self) -> "CatalogSearchInput":
        if self.price_from is not None and self.price_to is not None and self.price_from > self.price_to:
            raise ValueError("price_from must not exceed price_to")
        return self


class AnalyzeRequest(BaseModel):
    image_base64: str = Field(min_length=1, alias="imageBase64")
    filename: Optional[str] = None

    model_config = {"populate_by_name": True}


class RecommendationRequest(BaseModel):
    detected_items: List[Dict[str, Any]] = Field(alias="detectedItems")
    vision_result: Optional[Dict[str, Any]] = Field(default=None, alias="visionResult")
    persona: str = Field(default=DEFAULT_PERSONA, alias="characterPersonality")

    model_config = {"populate_by_name": True}


class ValidationResult(BaseModel):
    """Error body for a request rejected by validation."""

    status: Literal["invalid_request"] = "invalid_request"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate pydantic errors into the 400 response body."""

    return ValidationResult(message=message, details=exc.errors(include_url=False, include_context=False)).model_dump(mode="json")


__all__ = [
    "AnalyzeRequest",
    "CatalogSearchInput",
    "GeneratedQuery",
    "QueryGenerationResponse",
    "RecommendationRequest",
    "ValidationResult",
    "validation_failure",
]
