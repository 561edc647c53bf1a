"""App wiring tests: uploads, smart match and superseded queries."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest
from PIL import Image
from pydantic import ValidationError

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fakes import FakeReasoningClient, GatedReasoningClient
from models.outfit import MatchStatus
from tools.wardrobe_store import ItemNotFoundError
from wardrobe_app.app import SmartWardrobeApp
from wardrobe_app.config import AppConfig


def _app(tmp_path: Path, client=None, **overrides) -> SmartWardrobeApp:
    config = AppConfig(
        wardrobe_db_path=str(tmp_path / "wardrobe.db"),
        preference_store_path=str(tmp_path / "prefs"),
        **overrides,
    )
    return SmartWardrobeApp(config=config, reasoning_client=client)


def _seed(app: SmartWardrobeApp) -> None:
    async def scenario():
        await app.add_item("demo", {"name": "Blue Denim Jacket", "category": "jacket", "color": "blue"})
        await app.add_item("demo", {"name": "White Tee", "category": "tops", "color": "white"})
        await app.add_item("demo", {"name": "Black Jeans", "category": "jeans", "color": "black"})

    asyncio.run(scenario())


def _item_id(app: SmartWardrobeApp, name: str) -> str:
    items = asyncio.run(app.list_items("demo"))
    return next(item.item_id for item in items if item.name == name)


def test_add_item_validates_and_applies_default_max_uses(tmp_path: Path) -> None:
    app = _app(tmp_path, default_max_uses=7)
    item = asyncio.run(app.add_item("demo", {"name": " Linen Shirt ", "category": "shirt", "color": "Off White"}))
    assert item.name == "Linen Shirt"
    assert item.category.value == "tops"
    assert item.color.value == "white"
    assert item.max_uses == 7
    with pytest.raises(ValidationError):
        asyncio.run(app.add_item("demo", {"name": "", "category": "tops"}))
    with pytest.raises(ValidationError):
        asyncio.run(app.add_item("demo", {"name": "Socks", "category": "socks", "max_uses": 0}))
    with pytest.raises(ValidationError):
        asyncio.run(app.add_item("demo", {"name": "Parka", "category": "coat", "season": "monsoon"}))
    parka = asyncio.run(app.add_item("demo", {"name": "Parka", "category": "coat", "season": "Autumn"}))
    assert parka.season == "fall"


def test_add_item_detects_colour_from_image(tmp_path: Path) -> None:
    image_path = tmp_path / "red.png"
    Image.new("RGBA", (40, 40), (250, 5, 5, 255)).save(image_path)
    app = _app(tmp_path)
    item = asyncio.run(app.add_item("demo", {"name": "Red Scarf", "category": "scarf", "image_ref": str(image_path)}))
    assert item.color.value == "red"


def test_add_item_survives_unreadable_image(tmp_path: Path) -> None:
    app = _app(tmp_path)
    item = asyncio.run(app.add_item("demo", {"name": "Mystery", "category": "tops", "image_ref": str(tmp_path / "nope.png")}))
    assert item.color is None


def test_add_item_survives_opaque_image_key(tmp_path: Path) -> None:
    app = _app(tmp_path)
    item = asyncio.run(app.add_item("demo", {"name": "Tee", "category": "tops", "image_ref": "k" * 300}))
    assert item.color is None
    assert asyncio.run(app.require_item("demo", item.item_id)).image_ref == "k" * 300


def test_smart_match_without_client_is_degraded(tmp_path: Path) -> None:
    app = _app(tmp_path)
    _seed(app)
    report = asyncio.run(app.smart_match("demo", _item_id(app, "Blue Denim Jacket"), occasion="any"))
    assert report.status is MatchStatus.DEGRADED
    assert [m.item.name for m in report.matches.matches] == ["Black Jeans", "White Tee"]
    assert report.outfits.outfits


def test_smart_match_uses_liked_preferences(tmp_path: Path) -> None:
    client = FakeReasoningClient(replies=["1|80|a|b\n2|80|c|d", ""])
    app = _app(tmp_path, client=client)
    _seed(app)
    jacket = _item_id(app, "Blue Denim Jacket")
    tee = _item_id(app, "White Tee")
    asyncio.run(app.preferences.like("demo", tee))

    report = asyncio.run(app.smart_match("demo", jacket))

    assert [m.item.name for m in report.matches.matches] == ["White Tee", "Black Jeans"]
    assert "White Tee (tops, white, any season, any occasion) [LIKED BY USER]" in client.calls[0]["prompt"]
    assert report.outfits.status is MatchStatus.NO_RESULTS


def test_newer_query_supersedes_older_one(tmp_path: Path) -> None:
    client = GatedReasoningClient()
    app = _app(tmp_path, client=client)
    _seed(app)
    jacket = _item_id(app, "Blue Denim Jacket")

    async def scenario():
        first = asyncio.create_task(app.smart_match("demo", jacket))
        await client.entered.wait()
        second = asyncio.create_task(app.smart_match("demo", jacket))
        await asyncio.sleep(0)
        client.release.set()
        return await first, await second

    first, second = asyncio.run(scenario())
    assert first.status is MatchStatus.SUPERSEDED
    assert first.matches.matches == []
    assert second.status is not MatchStatus.SUPERSEDED


def test_newer_match_query_supersedes_older_one(tmp_path: Path) -> None:
    client = GatedReasoningClient()
    app = _app(tmp_path, client=client)
    _seed(app)
    jacket = _item_id(app, "Blue Denim Jacket")

    async def scenario():
        first = asyncio.create_task(app.find_matches("demo", jacket, occasion="work"))
        await client.entered.wait()
        second = asyncio.create_task(app.find_matches("demo", jacket, occasion="casual"))
        await asyncio.sleep(0)
        client.release.set()
        return await first, await second

    first, second = asyncio.run(scenario())
    assert first.status is MatchStatus.SUPERSEDED
    assert first.matches == []
    assert first.to_dict()["status"] == "superseded"
    assert second.status is not MatchStatus.SUPERSEDED


def test_newer_outfit_query_supersedes_older_one(tmp_path: Path) -> None:
    client = GatedReasoningClient()
    app = _app(tmp_path, client=client)
    _seed(app)
    jacket = _item_id(app, "Blue Denim Jacket")

    async def scenario():
        first = asyncio.create_task(app.compose_outfits("demo", [jacket]))
        await client.entered.wait()
        second = asyncio.create_task(app.compose_outfits("demo", [jacket], occasion="work"))
        await asyncio.sleep(0)
        client.release.set()
        return await first, await second

    first, second = asyncio.run(scenario())
    assert first.status is MatchStatus.SUPERSEDED
    assert first.outfits == []
    assert second.status is not MatchStatus.SUPERSEDED


def test_match_and_outfit_queries_do_not_supersede_each_other(tmp_path: Path) -> None:
    client = GatedReasoningClient()
    app = _app(tmp_path, client=client)
    _seed(app)
    jacket = _item_id(app, "Blue Denim Jacket")

    async def scenario():
        matches = asyncio.create_task(app.find_matches("demo", jacket))
        await client.entered.wait()
        outfits = asyncio.create_task(app.compose_outfits("demo", [jacket]))
        await asyncio.sleep(0)
        client.release.set()
        return await matches, await outfits

    matches, outfits = asyncio.run(scenario())
    assert matches.status is not MatchStatus.SUPERSEDED
    assert outfits.status is not MatchStatus.SUPERSEDED


def test_unknown_item_raises_not_found(tmp_path: Path) -> None:
    app = _app(tmp_path)
    with pytest.raises(ItemNotFoundError):
        asyncio.run(app.find_matches("demo", "ghost"))


def test_delete_item_forgets_preferences(tmp_path: Path) -> None:
    app = _app(tmp_path)
    _seed(app)
    tee = _item_id(app, "White Tee")
    asyncio.run(app.preferences.dislike("demo", tee))
    assert asyncio.run(app.delete_item("demo", tee)) is True
    assert not asyncio.run(app.preferences.snapshot("demo")).is_disliked(tee)
