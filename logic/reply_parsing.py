"""Parsers for the reasoning service's pipe-delimited replies.

Match replies carry one recommendation per line::

    <1-based item number>|<integer score>|<reasoning>|<advice>

Outfit replies carry one outfit per line with labelled segments::

    OUTFIT_1|CLOTHING:1,2|ACCESSORIES:A1,A2|TIPS:free text

Parsing is lenient per line and strict per field: anything that cannot be
resolved against the pools sent in the prompt is dropped without failing the
whole reply.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from logic.basic_matching import MAX_MATCHES, rank_matches
from logic.compatibility import clamp_score
from logic.outfit_builder import MAX_OUTFITS
from logic.prompts import ACCESSORY_PREFIX
from models.clothing_item import ClothingItem
from models.outfit import MatchResult, OutfitSuggestion
from models.preferences import PreferenceSnapshot

logger = logging.getLogger(__name__)

FIELD_DELIMITER = "|"
CLOTHING_LABEL = "CLOTHING:"
ACCESSORIES_LABEL = "ACCESSORIES:"
TIPS_LABEL = "TIPS:"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_leading_int(raw: str) -> Optional[int]:
    """Read the integer at the start of ``raw`` (``"95 points"`` -> 95), else None."""

    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else None


def _resolve(index: Optional[int], pool: Sequence[ClothingItem]) -> Optional[ClothingItem]:
    if index is None or not 1 <= index <= len(pool):
        return None
    return pool[index - 1]


def parse_match_reply(
    reply: str,
    pool: Sequence[ClothingItem],
    preferences: PreferenceSnapshot | None = None,
    limit: int = MAX_MATCHES,
) -> List[MatchResult]:
    """Turn a match reply into ranked results against the pool the prompt listed."""

    matches: List[MatchResult] = []
    dropped = 0
    for line in reply.splitlines():
        if FIELD_DELIMITER not in line:
            continue
        parts = line.split(FIELD_DELIMITER)
        if len(parts) < 4:
            dropped += 1
            continue
        item = _resolve(parse_leading_int(parts[0]), pool)
        score = parse_leading_int(parts[1])
        if item is None or score is None:
            dropped += 1
            continue
        matches.append(
            MatchResult(
                item=item,
                match_score=clamp_score(score),
                reasoning=parts[2].strip(),
                style_advice=parts[3].strip(),
            )
        )
    if dropped:
        logger.info("Dropped %s unusable match reply lines", dropped)
    return rank_matches(matches, preferences, limit)


def _segment(parts: Sequence[str], label: str) -> Optional[str]:
    for part in parts:
        if part.startswith(label):
            return part[len(label):]
    return None


def _resolve_indices(raw: str, pool: Sequence[ClothingItem], prefix: str = "") -> List[ClothingItem]:
    resolved: List[ClothingItem] = []
    seen = set()
    for token in raw.split(","):
        token = token.strip()
        if prefix and token.upper().startswith(prefix):
            token = token[len(prefix):]
        item = _resolve(parse_leading_int(token), pool)
        if item is not None and item.item_id not in seen:
            resolved.append(item)
            seen.add(item.item_id)
    return resolved


def parse_outfit_reply(
    reply: str,
    main_pool: Sequence[ClothingItem],
    accessory_pool: Sequence[ClothingItem],
    limit: int = MAX_OUTFITS,
) -> List[OutfitSuggestion]:
    """Turn an outfit reply into suggestions with at least one main garment each."""

    outfits: List[OutfitSuggestion] = []
    for line in reply.splitlines():
        if FIELD_DELIMITER not in line:
            continue
        parts = [part.strip() for part in line.split(FIELD_DELIMITER)]
        if len(parts) < 3:
            continue
        clothing_raw = _segment(parts, CLOTHING_LABEL)
        accessories_raw = _segment(parts, ACCESSORIES_LABEL)
        tips_raw = _segment(parts, TIPS_LABEL)
        if clothing_raw is None or accessories_raw is None or tips_raw is None:
            continue

        clothing = _resolve_indices(clothing_raw, main_pool)
        if not clothing:
            logger.info("Dropping outfit line without resolvable clothing")
            continue
        outfits.append(
            OutfitSuggestion(
                clothing=clothing,
                accessories=_resolve_indices(accessories_raw, accessory_pool, prefix=ACCESSORY_PREFIX),
                styling_tips=tips_raw.strip(),
            )
        )
    return outfits[:limit]


__all__ = [
    "ACCESSORIES_LABEL",
    "CLOTHING_LABEL",
    "FIELD_DELIMITER",
    "TIPS_LABEL",
    "parse_leading_int",
    "parse_match_reply",
    "parse_outfit_reply",
]
