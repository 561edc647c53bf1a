"""Deterministic rule-based matcher used when the reasoning service is unavailable."""
from __future__ import annotations

import logging
import random
from typing import Iterable, List, Optional, Sequence

from logic.compatibility import (
    category_differs,
    clamp_score,
    is_compatible,
    is_complementary,
    same_color,
    score_shallow,
)
from models.clothing_item import ClothingItem
from models.outfit import MatchResult
from models.preferences import PreferenceSnapshot

logger = logging.getLogger(__name__)

MAX_MATCHES = 6
RANDOMIZED_SCORE_RANGE = (70, 100)


def candidate_pool(
    target: Optional[ClothingItem],
    items: Iterable[ClothingItem],
    preferences: PreferenceSnapshot | None = None,
    exclude_ids: Iterable[str] = (),
) -> List[ClothingItem]:
    """Return the items eligible to be recommended alongside ``target``.

    Drops the target itself, anything in the wash and anything disliked, then
    moves liked items to the front while keeping the incoming order otherwise.
    """

    preferences = preferences or PreferenceSnapshot.empty()
    excluded = set(exclude_ids)
    if target is not None:
        excluded.add(target.item_id)
    pool = [item for item in items if item.item_id not in excluded and not item.in_wash]
    return preferences.liked_first(preferences.drop_disliked(pool))


def rank_matches(
    matches: Sequence[MatchResult], preferences: PreferenceSnapshot | None = None, limit: int = MAX_MATCHES
) -> List[MatchResult]:
    """Sort by score, liked items first on equal scores, preserving input order otherwise."""

    preferences = preferences or PreferenceSnapshot.empty()
    ranked = sorted(
        matches,
        key=lambda match: (-match.match_score, 0 if preferences.is_liked(match.item.item_id) else 1),
    )
    return ranked[:limit]


def explain_match(target: ClothingItem, candidate: ClothingItem) -> str:
    reasons = []
    if same_color(target.color, candidate.color):
        reasons.append(f"shares the {candidate.color.value} tone")
    elif is_complementary(target.color, candidate.color):
        reasons.append(f"{candidate.color.value} complements {target.color.value}")
    if target.occasion and target.occasion == candidate.occasion:
        reasons.append(f"both suit {target.occasion} occasions")
    if category_differs(target, candidate):
        reasons.append("adds a different piece to the look")
    if not reasons:
        return f"Matches well with {target.name} based on color and style compatibility."
    return f"Matches {target.name}: " + "; ".join(reasons) + "."


def basic_matches(
    target: ClothingItem,
    pool: Sequence[ClothingItem],
    preferences: PreferenceSnapshot | None = None,
    *,
    limit: int = MAX_MATCHES,
    scoring: str = "rule",
    rng: random.Random | None = None,
) -> List[MatchResult]:
    """Score compatible candidates against ``target`` and return the best ``limit``.

    ``scoring="randomized"`` replaces the rule score with a draw from
    ``RANDOMIZED_SCORE_RANGE``; the candidate filter and ordering rules are the
    same either way.
    """

    eligible = candidate_pool(target, pool, preferences)
    compatible = [item for item in eligible if is_compatible(target, item)]
    rng = rng or random.Random()

    results: List[MatchResult] = []
    for item in compatible:
        if scoring == "randomized":
            score = rng.randint(*RANDOMIZED_SCORE_RANGE)
        else:
            score = clamp_score(score_shallow(target, item))
        results.append(
            MatchResult(
                item=item,
                match_score=score,
                reasoning=explain_match(target, item),
                style_advice=f"This {item.category.value} complements your {target.category.value} nicely.",
            )
        )
    ranked = rank_matches(results, preferences, limit)
    logger.info(
        "Basic matching kept %s of %s candidates (scoring=%s)", len(ranked), len(eligible), scoring
    )
    return ranked


__all__ = ["MAX_MATCHES", "RANDOMIZED_SCORE_RANGE", "basic_matches", "candidate_pool", "explain_match", "rank_matches"]
