"""Wear counting and wash state transitions for wardrobe items."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from models.clothing_item import ClothingItem
from tools.observability import instrument_operation
from tools.wardrobe_store import ItemTransition, WardrobeStore
from wardrobe_app.logging_config import get_logger, log_event

logger = get_logger(__name__)


class ItemState(str, Enum):
    AVAILABLE = "available"
    IN_WASH = "in_wash"


def state_of(item: ClothingItem) -> ItemState:
    return ItemState.IN_WASH if item.in_wash else ItemState.AVAILABLE


@dataclass(frozen=True)
class LifecycleEvent:
    """Outcome of one lifecycle action on a single item."""

    item: ClothingItem
    previous_state: ItemState
    new_state: ItemState
    auto_washed: bool = False

    @classmethod
    def from_transition(cls, transition: ItemTransition, auto_washed: bool = False) -> "LifecycleEvent":
        return cls(
            item=transition.after,
            previous_state=state_of(transition.before),
            new_state=state_of(transition.after),
            auto_washed=auto_washed,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "item": self.item.to_dict(),
            "previous_state": self.previous_state.value,
            "new_state": self.new_state.value,
            "auto_washed": self.auto_washed,
        }


@dataclass
class WashSummary:
    items: List[ClothingItem]

    @property
    def auto_washed(self) -> List[ClothingItem]:
        return [item for item in self.items if item.needs_wash]

    @property
    def manually_sent(self) -> List[ClothingItem]:
        return [item for item in self.items if not item.needs_wash]

    def to_dict(self) -> Dict[str, object]:
        return {
            "total": len(self.items),
            "auto_washed": len(self.auto_washed),
            "manually_sent": len(self.manually_sent),
            "items": [item.to_dict() for item in self.items],
        }


class LifecycleTracker:
    """Moves items between Available and InWash.

    Every transition is a single store transaction; a failed write leaves the
    item exactly as it was.
    """

    def __init__(self, store: WardrobeStore) -> None:
        self.store = store

    @instrument_operation("lifecycle.record_use")
    async def record_use(self, user_id: str, item_id: str) -> LifecycleEvent:
        """Count one wear; the item goes to the wash once it reaches ``max_uses``."""

        transition = await self.store.increment_uses(user_id, item_id)
        auto_washed = not transition.before.in_wash and transition.after.in_wash
        event = LifecycleEvent.from_transition(transition, auto_washed=auto_washed)
        if auto_washed:
            log_event(
                logger,
                logging.INFO,
                "item_auto_washed",
                item_id=item_id,
                current_uses=event.item.current_uses,
                max_uses=event.item.max_uses,
            )
        return event

    @instrument_operation("lifecycle.send_to_wash")
    async def send_to_wash(self, user_id: str, item_id: str) -> LifecycleEvent:
        transition = await self.store.send_to_wash(user_id, item_id)
        return LifecycleEvent.from_transition(transition)

    async def mark_clean(self, user_id: str, item_id: str) -> LifecycleEvent:
        """Return an item to Available with its wear count reset to zero."""

        before = await self.store.get_item(user_id, item_id)
        cleaned = await self.mark_clean_many(user_id, [item_id])
        previous = state_of(before) if before else ItemState.IN_WASH
        return LifecycleEvent(item=cleaned[0], previous_state=previous, new_state=ItemState.AVAILABLE)

    @instrument_operation("lifecycle.mark_clean_many")
    async def mark_clean_many(self, user_id: str, item_ids: Optional[Sequence[str]] = None) -> List[ClothingItem]:
        """Clean the given items, or every item in the wash when ``item_ids`` is None."""

        cleaned = await self.store.reset_wash(user_id, item_ids)
        log_event(logger, logging.INFO, "items_marked_clean", count=len(cleaned))
        return cleaned

    async def wash_summary(self, user_id: str) -> WashSummary:
        return WashSummary(items=await self.store.list_items(user_id, in_wash=True))


__all__ = ["ItemState", "LifecycleEvent", "LifecycleTracker", "WashSummary", "state_of"]
