"""Canonical taxonomy definitions for wardrobe items.

This module centralises the closed sets used across the service: garment
categories, the named colour palette, seasons and occasions. Every value that
enters from outside (uploads, HTTP payloads, reasoning replies) goes through
one of the normalisers here, so the rest of the code only ever compares enum
members and canonical strings.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


def _normalize_key(value: str) -> str:
    """Normalise a free-form string into a taxonomy key."""

    return value.strip().lower().replace("-", "_").replace(" ", "_")


class Category(str, Enum):
    """Closed set of garment categories with an explicit catch-all."""

    TOPS = "tops"
    BOTTOMS = "bottoms"
    DRESSES = "dresses"
    OUTERWEAR = "outerwear"
    SHOES = "shoes"
    BAGS = "bags"
    JEWELRY = "jewelry"
    WATCHES = "watches"
    BELTS = "belts"
    SCARVES = "scarves"
    HATS = "hats"
    SUNGLASSES = "sunglasses"
    TIES = "ties"
    HAIR_ACCESSORIES = "hair_accessories"
    GLOVES = "gloves"
    SOCKS = "socks"
    UNDERWEAR = "underwear"
    OTHER = "other"


class Color(str, Enum):
    """Named colour palette; declaration order is the classifier tie-break order."""

    BLACK = "black"
    WHITE = "white"
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    YELLOW = "yellow"
    PURPLE = "purple"
    ORANGE = "orange"
    PINK = "pink"
    BROWN = "brown"
    GREY = "grey"
    NAVY = "navy"
    BEIGE = "beige"
    OTHER = "other"


ACCESSORY_CATEGORIES = frozenset(
    {
        Category.BAGS,
        Category.JEWELRY,
        Category.WATCHES,
        Category.BELTS,
        Category.SCARVES,
        Category.HATS,
        Category.SUNGLASSES,
    }
)

NEUTRAL_COLORS = frozenset(
    {Color.BLACK, Color.WHITE, Color.GREY, Color.BROWN, Color.BEIGE, Color.NAVY}
)

SEASONS = ["spring", "summer", "fall", "winter", "all_season"]
ALL_SEASON = "all_season"

# Sentinel sent by selection widgets meaning "no constraint".
ANY_SENTINEL = "any"

CATEGORY_ALIASES: Dict[str, Category] = {
    "shirt": Category.TOPS,
    "shirts": Category.TOPS,
    "t_shirt": Category.TOPS,
    "t_shirts": Category.TOPS,
    "tshirt": Category.TOPS,
    "top": Category.TOPS,
    "sweater": Category.TOPS,
    "sweaters": Category.TOPS,
    "hoodie": Category.TOPS,
    "hoodies": Category.TOPS,
    "blouse": Category.TOPS,
    "bottom": Category.BOTTOMS,
    "pants": Category.BOTTOMS,
    "trousers": Category.BOTTOMS,
    "jeans": Category.BOTTOMS,
    "skirt": Category.BOTTOMS,
    "skirts": Category.BOTTOMS,
    "shorts": Category.BOTTOMS,
    "dress": Category.DRESSES,
    "jacket": Category.OUTERWEAR,
    "jackets": Category.OUTERWEAR,
    "coat": Category.OUTERWEAR,
    "coats": Category.OUTERWEAR,
    "sneakers": Category.SHOES,
    "boots": Category.SHOES,
    "bag": Category.BAGS,
    "jewellery": Category.JEWELRY,
    "watch": Category.WATCHES,
    "belt": Category.BELTS,
    "scarf": Category.SCARVES,
    "hat": Category.HATS,
    "hair_accessory": Category.HAIR_ACCESSORIES,
}

COLOR_ALIASES: Dict[str, Color] = {
    "gray": Color.GREY,
    "charcoal": Color.GREY,
    "silver": Color.GREY,
    "navy_blue": Color.NAVY,
    "light_blue": Color.BLUE,
    "sky_blue": Color.BLUE,
    "denim": Color.BLUE,
    "off_white": Color.WHITE,
    "ivory": Color.WHITE,
    "cream": Color.BEIGE,
    "tan": Color.BEIGE,
    "khaki": Color.BEIGE,
    "camel": Color.BROWN,
    "olive": Color.GREEN,
    "burgundy": Color.RED,
    "maroon": Color.RED,
    "violet": Color.PURPLE,
    "lilac": Color.PURPLE,
    "gold": Color.YELLOW,
    "mustard": Color.YELLOW,
    "coral": Color.ORANGE,
    "rose": Color.PINK,
}

SEASON_ALIASES: Dict[str, str] = {
    "autumn": "fall",
    "all": ALL_SEASON,
    "all_seasons": ALL_SEASON,
    "all_year": ALL_SEASON,
    "any_season": ALL_SEASON,
}


def parse_category(value: str | Category | None) -> Category:
    """Map a raw category label onto the closed enum, ``OTHER`` when unknown."""

    if isinstance(value, Category):
        return value
    if not value or not str(value).strip():
        return Category.OTHER
    key = _normalize_key(str(value))
    try:
        return Category(key)
    except ValueError:
        return CATEGORY_ALIASES.get(key, Category.OTHER)


def normalize_color_name(value: str | Color | None) -> Optional[Color]:
    """Map a raw colour label to a palette colour.

    Returns ``None`` when no colour was supplied and ``Color.OTHER`` for free
    text that does not resolve to the palette.
    """

    if isinstance(value, Color):
        return value
    if value is None or not str(value).strip():
        return None
    key = _normalize_key(str(value))
    try:
        return Color(key)
    except ValueError:
        return COLOR_ALIASES.get(key, Color.OTHER)


def normalize_season(value: str | None) -> Optional[str]:
    """Return a canonical season tag, or ``None`` when absent."""

    if value is None or not str(value).strip():
        return None
    key = _normalize_key(str(value))
    return SEASON_ALIASES.get(key, key)


def normalize_occasion(value: str | None) -> Optional[str]:
    """Return a canonical occasion tag; blanks and the ``any`` sentinel mean none."""

    if value is None or not str(value).strip():
        return None
    key = _normalize_key(str(value))
    if key == ANY_SENTINEL:
        return None
    return key


def is_accessory(category: Category | str) -> bool:
    """Return True for categories that belong to the accessory pool."""

    return parse_category(category) in ACCESSORY_CATEGORIES


__all__ = [
    "ACCESSORY_CATEGORIES",
    "ALL_SEASON",
    "ANY_SENTINEL",
    "Category",
    "Color",
    "NEUTRAL_COLORS",
    "SEASONS",
    "is_accessory",
    "normalize_color_name",
    "normalize_occasion",
    "normalize_season",
    "parse_category",
]
