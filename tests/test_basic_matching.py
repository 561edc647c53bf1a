"""Rule-based matching engine tests."""

from __future__ import annotations

import random
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fakes import make_item
from logic.basic_matching import RANDOMIZED_SCORE_RANGE, basic_matches, candidate_pool
from models.preferences import PreferenceSnapshot


def _denim_wardrobe():
    jacket = make_item("denim_jacket", "outerwear", "blue", name="Blue Denim Jacket")
    tee = make_item("white_tee", "tops", "white")
    jeans = make_item("black_jeans", "bottoms", "black")
    dress = make_item("red_dress", "dresses", "red", in_wash=True)
    return jacket, [jacket, tee, jeans, dress]


def test_fallback_excludes_items_in_the_wash() -> None:
    jacket, wardrobe = _denim_wardrobe()
    matches = basic_matches(jacket, wardrobe)
    assert [match.item.item_id for match in matches] == ["white_tee", "black_jeans"]
    assert all(0 <= match.match_score <= 100 for match in matches)


def test_candidate_pool_drops_self_and_disliked_and_fronts_liked() -> None:
    jacket, wardrobe = _denim_wardrobe()
    prefs = PreferenceSnapshot(liked={"black_jeans"}, disliked={"white_tee"})
    pool = candidate_pool(jacket, wardrobe, prefs)
    assert [item.item_id for item in pool] == ["black_jeans"]


def test_ordering_is_score_then_liked_then_pool_order() -> None:
    target = make_item("shirt", "tops", "white", occasion="work")
    pool = [
        make_item("trousers", "bottoms", "grey"),
        make_item("skirt", "bottoms", "grey"),
        make_item("loafers", "shoes", "black", occasion="work"),
    ]
    prefs = PreferenceSnapshot(liked={"skirt"})
    matches = basic_matches(target, pool, prefs)
    assert [match.item.item_id for match in matches] == ["loafers", "skirt", "trousers"]
    assert matches[0].match_score == 25 + 20 + 10


def test_results_are_capped_at_six() -> None:
    target = make_item("coat", "outerwear", "black")
    pool = [make_item(f"tee_{i}", "tops", "white") for i in range(10)]
    assert len(basic_matches(target, pool)) == 6


def test_randomized_scoring_uses_injected_rng() -> None:
    jacket, wardrobe = _denim_wardrobe()
    first = basic_matches(jacket, wardrobe, scoring="randomized", rng=random.Random(7))
    second = basic_matches(jacket, wardrobe, scoring="randomized", rng=random.Random(7))
    low, high = RANDOMIZED_SCORE_RANGE
    assert [m.match_score for m in first] == [m.match_score for m in second]
    assert all(low <= m.match_score <= high for m in first)


def test_style_advice_names_both_categories() -> None:
    jacket, wardrobe = _denim_wardrobe()
    advice = basic_matches(jacket, wardrobe)[0].style_advice
    assert advice == "This tops complements your outerwear nicely."
