"""Compatibility rule tests."""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fakes import make_item
from logic.compatibility import (
    clamp_score,
    is_compatible,
    is_complementary,
    occasion_allows,
    score_shallow,
)
from models.taxonomy import Color


def test_complementary_pairs_are_symmetric() -> None:
    assert is_complementary("black", "white")
    assert is_complementary(Color.WHITE, Color.BLACK)
    assert is_complementary("navy", "beige")
    assert not is_complementary("black", "black")
    assert not is_complementary("red", "blue")


def test_unknown_or_missing_colours_never_match() -> None:
    assert not is_complementary(None, "white")
    assert not is_complementary("other", "other")


def test_score_adds_every_rule() -> None:
    target = make_item("blazer", "outerwear", "navy", occasion="work", season="fall")
    candidate = make_item("chinos", "bottoms", "navy", occasion="work", season="fall")
    assert score_shallow(target, candidate) == 30 + 20 + 15 + 10


def test_score_complementary_and_all_season() -> None:
    target = make_item("tee", "tops", "black", season="summer")
    candidate = make_item("sneakers", "shoes", "white", season="all season")
    assert score_shallow(target, candidate) == 25 + 15 + 10


def test_missing_occasions_do_not_score() -> None:
    target = make_item("tee", "tops", "black")
    candidate = make_item("jeans", "bottoms", "blue")
    assert score_shallow(target, candidate) == 10


def test_clamp_score_bounds() -> None:
    assert clamp_score(150) == 100
    assert clamp_score(-5) == 0
    assert clamp_score(42.9) == 42


def test_same_category_is_never_compatible() -> None:
    a = make_item("tee_a", "tops", "black")
    b = make_item("tee_b", "tops", "white")
    assert not is_compatible(a, b)


def test_occasion_leniency() -> None:
    base = make_item("dress", "dresses", "red", occasion="party")
    office_shoes = make_item("loafers", "shoes", "blue", occasion="work")
    plain_shoes = make_item("flats", "shoes", "blue")
    assert not is_compatible(base, office_shoes)
    assert is_compatible(base, plain_shoes)
    assert occasion_allows(office_shoes, base, occasion="work")
    assert not occasion_allows(office_shoes, base, occasion="party")
