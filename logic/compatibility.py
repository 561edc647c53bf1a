"""Colour complementarity and category diversity heuristics.

Everything here is pure: no I/O, no logging above DEBUG, no randomness. The
basic matcher and the outfit fallback build on these, and the scores double as
a tie-break signal for remote results.
"""
from __future__ import annotations

import logging
from typing import Optional

from models.clothing_item import ClothingItem
from models.taxonomy import ALL_SEASON, Color, normalize_color_name

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 100

EXACT_COLOR_POINTS = 30
COMPLEMENTARY_COLOR_POINTS = 25
OCCASION_POINTS = 20
SEASON_POINTS = 15
CATEGORY_POINTS = 10

_COMPLEMENTARY_PAIRS = frozenset(
    {
        frozenset({Color.BLACK, Color.WHITE}),
        frozenset({Color.NAVY, Color.BEIGE}),
        frozenset({Color.BLUE, Color.ORANGE}),
        frozenset({Color.RED, Color.GREEN}),
        frozenset({Color.PURPLE, Color.YELLOW}),
        frozenset({Color.PINK, Color.GREY}),
    }
)


def _known(color: Color | str | None) -> Optional[Color]:
    resolved = normalize_color_name(color)
    if resolved is None or resolved is Color.OTHER:
        return None
    return resolved


def clamp_score(value: float) -> int:
    """Clamp a raw score into the 0-100 range shown to users."""

    return int(max(MIN_SCORE, min(MAX_SCORE, value)))


def is_complementary(color_a: Color | str | None, color_b: Color | str | None) -> bool:
    """Return True when the two colours form one of the fixed complementary pairs."""

    a, b = _known(color_a), _known(color_b)
    if a is None or b is None or a == b:
        return False
    return frozenset({a, b}) in _COMPLEMENTARY_PAIRS


def same_color(color_a: Color | str | None, color_b: Color | str | None) -> bool:
    a, b = _known(color_a), _known(color_b)
    return a is not None and a == b


def category_differs(a: ClothingItem, b: ClothingItem) -> bool:
    return a.category != b.category


def _occasion_matches(a: ClothingItem, b: ClothingItem) -> bool:
    return a.occasion is not None and a.occasion == b.occasion


def _season_matches(a: ClothingItem, b: ClothingItem) -> bool:
    if a.season == ALL_SEASON or b.season == ALL_SEASON:
        return True
    return a.season is not None and a.season == b.season


def score_shallow(target: ClothingItem, candidate: ClothingItem) -> int:
    """Rule score of ``candidate`` as a companion for ``target``.

    Not bounded above; callers clamp with :func:`clamp_score`.
    """

    score = 0
    if same_color(target.color, candidate.color):
        score += EXACT_COLOR_POINTS
    elif is_complementary(target.color, candidate.color):
        score += COMPLEMENTARY_COLOR_POINTS
    if _occasion_matches(target, candidate):
        score += OCCASION_POINTS
    if _season_matches(target, candidate):
        score += SEASON_POINTS
    if category_differs(target, candidate):
        score += CATEGORY_POINTS
    logger.debug("score_shallow %s -> %s = %s", target.item_id, candidate.item_id, score)
    return score


def colors_harmonise(color_a: Color | str | None, color_b: Color | str | None) -> bool:
    return same_color(color_a, color_b) or is_complementary(color_a, color_b)


def occasion_allows(candidate: ClothingItem, base: ClothingItem, occasion: Optional[str] = None) -> bool:
    """Lenient occasion check: a missing occasion on either side never excludes."""

    if occasion:
        return candidate.occasion is None or candidate.occasion == occasion
    return candidate.occasion is None or base.occasion is None or candidate.occasion == base.occasion


def is_compatible(base: ClothingItem, candidate: ClothingItem, occasion: Optional[str] = None) -> bool:
    """Candidate filter shared by the basic matcher and the outfit fallback."""

    if not category_differs(base, candidate):
        return False
    return colors_harmonise(base.color, candidate.color) or occasion_allows(candidate, base, occasion)


__all__ = [
    "MAX_SCORE",
    "MIN_SCORE",
    "category_differs",
    "clamp_score",
    "colors_harmonise",
    "is_compatible",
    "is_complementary",
    "occasion_allows",
    "same_color",
    "score_shallow",
]
