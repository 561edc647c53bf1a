"""Immutable like/dislike snapshot handed to each recommendation query."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PreferenceSnapshot:
    """Liked and disliked item ids captured at query time.

    Snapshots are values: updating a preference returns a new snapshot, so
    concurrent queries never observe each other's changes.
    """

    liked: FrozenSet[str] = field(default_factory=frozenset)
    disliked: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "liked", frozenset(self.liked))
        object.__setattr__(self, "disliked", frozenset(self.disliked))
        overlap = self.liked & self.disliked
        if overlap:
            raise ValueError(f"Items cannot be both liked and disliked: {sorted(overlap)}")

    @classmethod
    def empty(cls) -> "PreferenceSnapshot":
        return cls()

    def is_liked(self, item_id: str) -> bool:
        return item_id in self.liked

    def is_disliked(self, item_id: str) -> bool:
        return item_id in self.disliked

    def with_like(self, item_id: str) -> "PreferenceSnapshot":
        return PreferenceSnapshot(liked=self.liked | {item_id}, disliked=self.disliked - {item_id})

    def with_dislike(self, item_id: str) -> "PreferenceSnapshot":
        return PreferenceSnapshot(liked=self.liked - {item_id}, disliked=self.disliked | {item_id})

    def without(self, item_id: str) -> "PreferenceSnapshot":
        return PreferenceSnapshot(liked=self.liked - {item_id}, disliked=self.disliked - {item_id})

    def liked_first(self, items: Iterable[T], key=lambda item: item.item_id) -> list:
        """Stable re-order putting liked items ahead of the rest."""

        return sorted(items, key=lambda item: 0 if key(item) in self.liked else 1)

    def drop_disliked(self, items: Sequence[T], key=lambda item: item.item_id) -> list:
        return [item for item in items if key(item) not in self.disliked]


__all__ = ["PreferenceSnapshot"]
