"""Deterministic outfit assembly used when the reasoning service is unavailable."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from logic.compatibility import colors_harmonise, is_compatible
from models.clothing_item import ClothingItem
from models.outfit import OutfitSuggestion
from models.taxonomy import NEUTRAL_COLORS, is_accessory

logger = logging.getLogger(__name__)

MAX_OUTFITS = 3
MAX_ACCESSORIES = 2


@dataclass(frozen=True)
class OutfitPools:
    main: List[ClothingItem]
    accessories: List[ClothingItem]


def partition_pools(items: Iterable[ClothingItem]) -> OutfitPools:
    """Split candidates into main garments and accessories, keeping order."""

    main: List[ClothingItem] = []
    accessories: List[ClothingItem] = []
    for item in items:
        (accessories if is_accessory(item.category) else main).append(item)
    return OutfitPools(main=main, accessories=accessories)


def split_base_items(base_items: Sequence[ClothingItem]) -> Tuple[List[ClothingItem], List[ClothingItem]]:
    pools = partition_pools(base_items)
    return pools.main, pools.accessories


def _accessory_fits(accessory: ClothingItem, paired: Sequence[ClothingItem], occasion: Optional[str]) -> bool:
    if accessory.color is None:
        return False
    harmony = accessory.color in NEUTRAL_COLORS or any(
        colors_harmonise(accessory.color, item.color) for item in paired
    )
    occasion_ok = not occasion or accessory.occasion is None or accessory.occasion == occasion
    return harmony and occasion_ok


def pick_accessories(
    paired: Sequence[ClothingItem],
    accessories: Sequence[ClothingItem],
    occasion: Optional[str] = None,
    limit: int = MAX_ACCESSORIES,
) -> List[ClothingItem]:
    """Accessories matching or complementing any paired garment, or neutral."""

    return [acc for acc in accessories if _accessory_fits(acc, paired, occasion)][:limit]


def styling_tip(base: ClothingItem, partner: ClothingItem, occasion: Optional[str] = None) -> str:
    tip = (
        f"Complete outfit coordination: {base.name} ({base.describe_color()}) paired with "
        f"{partner.name} ({partner.describe_color()}). Accessories chosen to complement both pieces "
        "for a cohesive look."
    )
    if occasion:
        tip += f" Perfect for {occasion} occasions."
    return tip


def basic_outfits(
    base: ClothingItem,
    main_pool: Sequence[ClothingItem],
    accessory_pool: Sequence[ClothingItem],
    occasion: Optional[str] = None,
    limit: int = MAX_OUTFITS,
) -> List[OutfitSuggestion]:
    """Pair ``base`` with successive compatible garments and dress each pairing.

    Pools must already exclude in-wash, disliked and base items.
    """

    compatible = [item for item in main_pool if is_compatible(base, item, occasion)]
    suggestions: List[OutfitSuggestion] = []
    base_is_accessory = is_accessory(base.category)
    for partner in compatible[: min(limit, len(main_pool))]:
        paired = [base, partner]
        picked = pick_accessories(paired, accessory_pool, occasion)
        suggestions.append(
            OutfitSuggestion(
                clothing=[partner] if base_is_accessory else paired,
                accessories=[base] + picked if base_is_accessory else picked,
                styling_tips=styling_tip(base, partner, occasion),
            )
        )
    logger.info(
        "Built %s basic outfits from %s compatible garments", len(suggestions), len(compatible)
    )
    return suggestions


__all__ = [
    "MAX_ACCESSORIES",
    "MAX_OUTFITS",
    "OutfitPools",
    "basic_outfits",
    "partition_pools",
    "pick_accessories",
    "split_base_items",
    "styling_tip",
]
