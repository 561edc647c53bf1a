"""Prompt construction for the reasoning service.

Pool numbering in these prompts is the contract the reply parser relies on:
main garments are numbered from 1 in pool order and accessories carry an
``A`` prefix. Any change here must be mirrored in ``logic.reply_parsing``.
"""
from __future__ import annotations

from typing import Optional, Sequence

from models.clothing_item import ClothingItem
from models.preferences import PreferenceSnapshot
from models.taxonomy import ANY_SENTINEL

LIKED_MARKER = " [LIKED BY USER]"
MATCH_REPLY_FORMAT = "ITEM_NUMBER|SCORE|REASONING|ADVICE"
OUTFIT_REPLY_FORMAT = "OUTFIT_1|CLOTHING:1,2,3|ACCESSORIES:A1,A2|TIPS:styling advice here"
ACCESSORY_PREFIX = "A"
OUTFIT_COUNT = 3


def normalize_constraint(value: Optional[str]) -> Optional[str]:
    """Treat blanks and the ``any`` sentinel as "no constraint"."""

    if value is None:
        return None
    stripped = value.strip()
    if not stripped or stripped.lower() == ANY_SENTINEL:
        return None
    return stripped


def describe_item(item: ClothingItem) -> str:
    return (
        f"{item.name} ({item.category.value}, {item.describe_color()}, "
        f"{item.season or 'any season'}, {item.occasion or 'any occasion'})"
    )


def _constraint_lines(occasion: Optional[str], weather: Optional[str]) -> str:
    lines = []
    if occasion:
        lines.append(f"The occasion is: {occasion}")
    if weather:
        lines.append(f"The weather is: {weather}")
    return "\n".join(lines)


def build_match_prompt(
    target: ClothingItem,
    pool: Sequence[ClothingItem],
    occasion: Optional[str] = None,
    weather: Optional[str] = None,
    preferences: PreferenceSnapshot | None = None,
    limit: int = 6,
) -> str:
    """Describe the target, the numbered candidate pool and the reply format."""

    preferences = preferences or PreferenceSnapshot.empty()
    occasion = normalize_constraint(occasion)
    weather = normalize_constraint(weather)
    item_lines = "\n".join(
        f"{index}. {describe_item(item)}{LIKED_MARKER if preferences.is_liked(item.item_id) else ''}"
        for index, item in enumerate(pool, start=1)
    )
    liked_note = ""
    if any(preferences.is_liked(item.item_id) for item in pool):
        liked_note = (
            f"Note: Items marked with{LIKED_MARKER} are preferred by the user and should be "
            "prioritized when suitable.\n\n"
        )
    constraints = _constraint_lines(occasion, weather)
    if constraints:
        constraints += "\n\n"

    return (
        f'I have a {target.category.value} called "{target.name}" that is {target.describe_color()} '
        f"and suitable for {target.season or 'any season'} and {target.occasion or 'any occasion'}.\n\n"
        f"{constraints}"
        "Here are my available clothing items and accessories:\n"
        f"{item_lines}\n\n"
        f"{liked_note}"
        f"Please recommend the best {limit} items that would go well with my {target.category.value}, considering:\n"
        "1. Color coordination and complementary colors\n"
        "2. Style compatibility and fashion rules\n"
        "3. Occasion appropriateness\n"
        "4. Seasonal suitability\n"
        "5. Accessory pairing (bags, jewelry, shoes, etc.)\n"
        "6. Overall outfit cohesion\n"
        "7. User preferences (prioritize liked items when appropriate)\n\n"
        "For each recommendation, provide:\n"
        "- Item number (from the list above)\n"
        "- Match score (1-100)\n"
        "- Brief reasoning for why it matches\n"
        "- Style advice for wearing them together\n\n"
        "Format your response as:\n"
        f"{MATCH_REPLY_FORMAT}\n\n"
        "Example:\n"
        "1|95|The black leather jacket complements the blue jeans perfectly, creating a classic casual look|"
        "Pair with white sneakers for a relaxed vibe or boots for an edgier style\n"
    )


def _short(item: ClothingItem) -> str:
    return f"{item.name} ({item.category.value}, {item.describe_color()})"


def build_outfit_prompt(
    base_items: Sequence[ClothingItem],
    main_pool: Sequence[ClothingItem],
    accessory_pool: Sequence[ClothingItem],
    occasion: Optional[str] = None,
    weather: Optional[str] = None,
) -> str:
    """Ask for exactly three outfits indexed into the main and accessory pools."""

    occasion = normalize_constraint(occasion)
    weather = normalize_constraint(weather)
    base_text = ", ".join(_short(item) for item in base_items)
    main_text = ", ".join(f"{i}. {_short(item)}" for i, item in enumerate(main_pool, start=1))
    accessory_text = ", ".join(
        f"{ACCESSORY_PREFIX}{i}. {_short(item)}" for i, item in enumerate(accessory_pool, start=1)
    )
    constraints = []
    if occasion:
        constraints.append(f"Occasion: {occasion}")
    if weather:
        constraints.append(f"Weather: {weather}")
    constraint_text = "\n".join(constraints) + "\n\n" if constraints else ""

    return (
        f"Create {OUTFIT_COUNT} complete outfit suggestions using these base items: {base_text}\n\n"
        f"Available clothing: {main_text or 'none'}\n\n"
        f"Available accessories: {accessory_text or 'none'}\n\n"
        f"{constraint_text}"
        "For each outfit, suggest:\n"
        "1. Main clothing items that work together with the base items as a complete outfit "
        "(use numbers from the list)\n"
        "2. Accessories that complement the ENTIRE outfit, not individual pieces "
        f"(use {ACCESSORY_PREFIX} numbers from the list)\n"
        "3. Styling tips explaining how the accessories work with the complete outfit\n\n"
        "Consider color harmony across all pieces - accessories should complement the overall "
        "color scheme of the outfit.\n\n"
        f"Format: {OUTFIT_REPLY_FORMAT}\n"
    )


__all__ = [
    "ACCESSORY_PREFIX",
    "LIKED_MARKER",
    "MATCH_REPLY_FORMAT",
    "OUTFIT_COUNT",
    "OUTFIT_REPLY_FORMAT",
    "build_match_prompt",
    "build_outfit_prompt",
    "describe_item",
    "normalize_constraint",
]
