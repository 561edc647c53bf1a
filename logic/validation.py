"""Pydantic schemas and helpers for validating wardrobe payloads."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from logic.prompts import normalize_constraint
from models.taxonomy import (
    SEASONS,
    Category,
    Color,
    normalize_color_name,
    normalize_occasion,
    normalize_season,
    parse_category,
)


class ClothingItemInput(BaseModel):
    """Upload contract for a new garment or accessory."""

    name: str = Field(min_length=1, max_length=200)
    category: Category
    color: Optional[Color] = None
    season: Optional[str] = None
    occasion: Optional[str] = None
    image_ref: Optional[str] = None
    max_uses: Optional[int] = Field(default=None, gt=0)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped

    @field_validator("category", mode="before")
    @classmethod
    def _parse_category(cls, value: Any) -> Category:
        return parse_category(value)

    @field_validator("color", mode="before")
    @classmethod
    def _parse_color(cls, value: Any) -> Optional[Color]:
        return normalize_color_name(value)

    @field_validator("season", mode="before")
    @classmethod
    def _parse_season(cls, value: Any) -> Optional[str]:
        season = normalize_season(value)
        if season is not None and season not in SEASONS:
            raise ValueError(f"season must be one of {SEASONS}")
        return season

    @field_validator("occasion", mode="before")
    @classmethod
    def _parse_occasion(cls, value: Any) -> Optional[str]:
        return normalize_occasion(value)


class RecommendationQuery(BaseModel):
    """Optional occasion/weather constraints; ``any`` and blanks mean unconstrained."""

    occasion: Optional[str] = None
    weather: Optional[str] = None

    @field_validator("occasion", "weather", mode="before")
    @classmethod
    def _normalise(cls, value: Any) -> Optional[str]:
        return normalize_constraint(value) if value is not None else None


class OutfitQuery(RecommendationQuery):
    """Outfit request; extra base items join the path item as outfit anchors."""

    extra_base_item_ids: List[str] = Field(default_factory=list)


class SaveOutfitRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = ""
    occasion: Optional[str] = None
    item_ids: List[str] = Field(min_length=1)


class CleanRequest(BaseModel):
    """``item_ids`` omitted means every item currently in the wash."""

    item_ids: Optional[List[str]] = None


class ValidationResult(BaseModel):
    """Wrapper returned to callers when validation fails."""

    status: Literal["needs_review"] = "needs_review"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent review payload."""

    details = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]} for error in exc.errors()
    ]
    return ValidationResult(message=message, details=details).model_dump()


__all__ = [
    "CleanRequest",
    "ClothingItemInput",
    "OutfitQuery",
    "RecommendationQuery",
    "SaveOutfitRequest",
    "ValidationResult",
    "validation_failure",
]
