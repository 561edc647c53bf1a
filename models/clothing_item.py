"""Clothing item data model and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from models.taxonomy import (
    Category,
    Color,
    normalize_color_name,
    normalize_occasion,
    normalize_season,
    parse_category,
)

DEFAULT_MAX_USES = 10


def utc_now() -> str:
    """Return the current UTC time as an ISO-8601 string."""

    return datetime.now(timezone.utc).isoformat()


@dataclass
class ClothingItem:
    """A garment or accessory in a user's wardrobe.

    ``current_uses`` counts wears since the last wash; once it reaches
    ``max_uses`` the item is flagged ``in_wash`` and drops out of every
    recommendation pool until it is marked clean.
    """

    item_id: str
    user_id: str
    name: str
    category: Category
    color: Optional[Color] = None
    season: Optional[str] = None
    occasion: Optional[str] = None
    image_ref: Optional[str] = None
    current_uses: int = 0
    max_uses: int = DEFAULT_MAX_USES
    in_wash: bool = False
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        self.name = str(self.name).strip()
        if not self.name:
            raise ValueError("ClothingItem name must not be empty")
        self.category = parse_category(self.category)
        self.color = normalize_color_name(self.color)
        self.season = normalize_season(self.season)
        self.occasion = normalize_occasion(self.occasion)
        self.current_uses = int(self.current_uses or 0)
        self.max_uses = int(self.max_uses if self.max_uses is not None else DEFAULT_MAX_USES)
        self.in_wash = bool(self.in_wash)
        if self.current_uses < 0:
            raise ValueError("current_uses cannot be negative")
        if self.max_uses <= 0:
            raise ValueError("max_uses must be positive")

    @property
    def needs_wash(self) -> bool:
        return self.current_uses >= self.max_uses

    def describe_color(self) -> str:
        return self.color.value if self.color else "color not specified"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_id": self.item_id,
            "user_id": self.user_id,
            "name": self.name,
            "category": self.category.value,
            "color": self.color.value if self.color else None,
            "season": self.season,
            "occasion": self.occasion,
            "image_ref": self.image_ref,
            "current_uses": self.current_uses,
            "max_uses": self.max_uses,
            "in_wash": self.in_wash,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def from_raw_metadata(metadata: Dict[str, Any], default_max_uses: int = DEFAULT_MAX_USES) -> ClothingItem:
    """Factory to build a :class:`ClothingItem` from loose upload metadata."""

    required_fields = ["user_id", "name", "category"]
    missing = [key for key in required_fields if not metadata.get(key)]
    if missing:
        raise ValueError(f"Missing required fields for ClothingItem: {missing}")

    max_uses = metadata.get("max_uses")
    return ClothingItem(
        item_id=str(metadata.get("item_id") or uuid4().hex),
        user_id=str(metadata["user_id"]),
        name=str(metadata["name"]),
        category=metadata["category"],
        color=metadata.get("color"),
        season=metadata.get("season"),
        occasion=metadata.get("occasion"),
        image_ref=metadata.get("image_ref"),
        current_uses=metadata.get("current_uses") or 0,
        max_uses=default_max_uses if max_uses is None else max_uses,
        in_wash=bool(metadata.get("in_wash", False)),
    )


__all__ = ["ClothingItem", "DEFAULT_MAX_USES", "from_raw_metadata", "utc_now"]
