"""Outfit composer tests covering the remote and fallback paths."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from agents.outfit_agent import OutfitComposerAgent
from fakes import FakeReasoningClient, make_item
from logic.outfit_builder import basic_outfits, pick_accessories
from models.outfit import DegradeReason, MatchStatus
from models.preferences import PreferenceSnapshot
from tools.reasoning_client import ReasoningUnavailable
from tools.wardrobe_store import SQLiteWardrobeStore
from wardrobe_app.config import AppConfig

ORDER = [f"2024-01-{day:02d}T00:00:00+00:00" for day in range(28, 0, -1)]


def _seeded_store(tmp_path: Path) -> SQLiteWardrobeStore:
    store = SQLiteWardrobeStore(tmp_path / "wardrobe.db")
    items = [
        make_item("jeans", "bottoms", "blue"),
        make_item("tee", "tops", "white"),
        make_item("shirt", "tops", "black", occasion="work"),
        make_item("sneakers", "shoes", "white"),
        make_item("belt", "belts", "brown"),
        make_item("bag", "bags", "red"),
        make_item("scarf", "scarves", None),
        make_item("hoodie", "tops", "grey", in_wash=True),
    ]
    for item, created_at in zip(items, ORDER):
        item.created_at = created_at
        asyncio.run(store.create_item(item))
    return store


def _compose(agent: OutfitComposerAgent, store: SQLiteWardrobeStore, base_ids, **kwargs):
    async def scenario():
        base = [await store.get_item("demo", item_id) for item_id in base_ids]
        return await agent.compose_outfits("demo", base, **kwargs)

    return asyncio.run(scenario())


def test_remote_outfits_include_base_items(tmp_path: Path) -> None:
    store = _seeded_store(tmp_path)
    client = FakeReasoningClient(
        replies=["OUTFIT_1|CLOTHING:1,3|ACCESSORIES:A1|TIPS:Easy weekend look\nnot an outfit line"]
    )
    agent = OutfitComposerAgent(AppConfig(), store, client)

    response = _compose(agent, store, ["jeans"], occasion="casual")

    assert response.status is MatchStatus.OK
    outfit = response.outfits[0]
    assert [item.item_id for item in outfit.clothing] == ["jeans", "tee", "sneakers"]
    assert [item.item_id for item in outfit.accessories] == ["belt"]
    prompt = client.calls[0]["prompt"]
    assert "1. Tee (tops, white), 2. Shirt (tops, black), 3. Sneakers (shoes, white)" in prompt
    assert "A1. Belt (belts, brown), A2. Bag (bags, red), A3. Scarf (scarves, color not specified)" in prompt
    assert "Hoodie" not in prompt
    assert client.calls[0]["temperature"] == 0.8


def test_fallback_pairs_base_with_compatible_garments(tmp_path: Path) -> None:
    store = _seeded_store(tmp_path)
    agent = OutfitComposerAgent(AppConfig(), store, FakeReasoningClient(error=ReasoningUnavailable("down")))

    response = _compose(agent, store, ["jeans"], occasion="casual")

    assert response.status is MatchStatus.DEGRADED
    assert response.degrade_reason is DegradeReason.UNAVAILABLE
    assert [[item.item_id for item in o.clothing] for o in response.outfits] == [
        ["jeans", "tee"],
        ["jeans", "sneakers"],
    ]
    # Neutral or harmonising colours only; the uncoloured scarf never qualifies.
    assert [item.item_id for item in response.outfits[0].accessories] == ["belt"]
    assert response.outfits[0].styling_tips.endswith("Perfect for casual occasions.")


def test_disliked_items_are_left_out(tmp_path: Path) -> None:
    store = _seeded_store(tmp_path)
    agent = OutfitComposerAgent(AppConfig(), store, None)
    response = _compose(agent, store, ["jeans"], preferences=PreferenceSnapshot(disliked={"tee", "belt"}))
    assert all("tee" not in [i.item_id for i in o.clothing] for o in response.outfits)
    assert all("belt" not in [i.item_id for i in o.accessories] for o in response.outfits)


def test_accessory_base_lands_in_accessory_list(tmp_path: Path) -> None:
    store = _seeded_store(tmp_path)
    agent = OutfitComposerAgent(AppConfig(), store, None)
    response = _compose(agent, store, ["bag"])
    assert response.outfits
    for outfit in response.outfits:
        assert outfit.accessories[0].item_id == "bag"
        assert "bag" not in [item.item_id for item in outfit.clothing]


def test_no_base_items_means_no_results(tmp_path: Path) -> None:
    store = _seeded_store(tmp_path)
    client = FakeReasoningClient()
    response = asyncio.run(OutfitComposerAgent(AppConfig(), store, client).compose_outfits("demo", []))
    assert response.status is MatchStatus.NO_RESULTS
    assert client.calls == []


def test_basic_outfits_is_capped_by_main_pool() -> None:
    base = make_item("jeans", "bottoms", "blue")
    main = [make_item("tee", "tops", "white")]
    assert len(basic_outfits(base, main, [])) == 1


def test_pick_accessories_respects_occasion_and_limit() -> None:
    paired = [make_item("tee", "tops", "white"), make_item("jeans", "bottoms", "black")]
    accessories = [
        make_item("gala_clutch", "bags", "black", occasion="formal"),
        make_item("belt", "belts", "brown"),
        make_item("watch", "watches", "grey"),
        make_item("cap", "hats", "navy"),
    ]
    picked = pick_accessories(paired, accessories, occasion="casual")
    assert [item.item_id for item in picked] == ["belt", "watch"]
