"""Prompt construction tests."""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fakes import make_item
from logic.prompts import (
    LIKED_MARKER,
    MATCH_REPLY_FORMAT,
    build_match_prompt,
    build_outfit_prompt,
    normalize_constraint,
)
from logic.safety import MATCH_ROLE, system_instruction
from models.preferences import PreferenceSnapshot


def test_normalize_constraint() -> None:
    assert normalize_constraint("any") is None
    assert normalize_constraint("  ANY ") is None
    assert normalize_constraint("") is None
    assert normalize_constraint(None) is None
    assert normalize_constraint(" rainy ") == "rainy"


def test_match_prompt_lists_pool_with_liked_markers() -> None:
    target = make_item("jacket", "outerwear", "blue", name="Blue Denim Jacket")
    pool = [
        make_item("tee", "tops", "white", name="White Tee", season="summer", occasion="casual"),
        make_item("scarf", "scarves", None, name="Silk Scarf"),
    ]
    prompt = build_match_prompt(target, pool, occasion="any", weather="rainy", preferences=PreferenceSnapshot(liked={"scarf"}))

    assert "1. White Tee (tops, white, summer, casual)\n" in prompt
    assert f"2. Silk Scarf (scarves, color not specified, any season, any occasion){LIKED_MARKER}" in prompt
    assert "The weather is: rainy" in prompt
    assert "The occasion is" not in prompt
    assert MATCH_REPLY_FORMAT in prompt
    assert "Items marked with [LIKED BY USER]" in prompt


def test_match_prompt_without_liked_items_has_no_note() -> None:
    target = make_item("jacket", "outerwear", "blue")
    prompt = build_match_prompt(target, [make_item("tee", "tops", "white")])
    assert LIKED_MARKER not in prompt


def test_outfit_prompt_prefixes_accessories() -> None:
    base = [make_item("jacket", "outerwear", "blue", name="Blue Jacket")]
    main = [make_item("tee", "tops", "white", name="White Tee")]
    accessories = [make_item("belt", "belts", "brown", name="Brown Belt")]
    prompt = build_outfit_prompt(base, main, accessories, occasion="work")

    assert "Create 3 complete outfit suggestions using these base items: Blue Jacket (outerwear, blue)" in prompt
    assert "1. White Tee (tops, white)" in prompt
    assert "A1. Brown Belt (belts, brown)" in prompt
    assert "Occasion: work" in prompt
    assert "OUTFIT_1|CLOTHING:1,2,3|ACCESSORIES:A1,A2|TIPS:" in prompt


def test_system_instruction_carries_guardrails() -> None:
    text = system_instruction(MATCH_ROLE)
    assert text.startswith("You are a professional fashion stylist")
    assert "never invent garments" in text
