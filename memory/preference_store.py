"""Per-user like/dislike memory backed by JSON files."""

import asyncio
import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from models.preferences import PreferenceSnapshot


@dataclass
class PreferenceRecord:
    user_id: str
    liked: List[str] = field(default_factory=list)
    disliked: List[str] = field(default_factory=list)


class PreferenceStore:
    """JSON-backed preference memory.

    Reads hand out immutable :class:`PreferenceSnapshot` values; writes are
    serialised per store so concurrent toggles never lose an update.
    """

    def __init__(self, base_dir: str = "data/preferences") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        return self._locks.setdefault(user_id, asyncio.Lock())

    def _profile_path(self, user_id: str) -> Path:
        # Hashed so distinct user ids can never share a file.
        digest = hashlib.sha256(user_id.encode("utf-8")).hexdigest()
        return self.base_dir / f"{digest}.json"

    def _read(self, user_id: str) -> PreferenceSnapshot:
        path = self._profile_path(user_id)
        if not path.exists():
            return PreferenceSnapshot.empty()
        data = json.loads(path.read_text())
        liked = set(data.get("liked", []))
        disliked = set(data.get("disliked", [])) - liked
        return PreferenceSnapshot(liked=frozenset(liked), disliked=frozenset(disliked))

    def _write(self, user_id: str, snapshot: PreferenceSnapshot) -> None:
        record = PreferenceRecord(
            user_id=user_id,
            liked=sorted(snapshot.liked),
            disliked=sorted(snapshot.disliked),
        )
        path = self._profile_path(user_id)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(record.__dict__, indent=2))
        tmp_path.replace(path)

    async def snapshot(self, user_id: str) -> PreferenceSnapshot:
        return await asyncio.to_thread(self._read, user_id)

    async def _update(self, user_id: str, change) -> PreferenceSnapshot:
        async with self._lock_for(user_id):
            current = await asyncio.to_thread(self._read, user_id)
            updated = change(current)
            await asyncio.to_thread(self._write, user_id, updated)
            return updated

    async def like(self, user_id: str, item_id: str) -> PreferenceSnapshot:
        """Mark ``item_id`` liked, clearing any dislike."""

        return await self._update(user_id, lambda snap: snap.with_like(item_id))

    async def dislike(self, user_id: str, item_id: str) -> PreferenceSnapshot:
        return await self._update(user_id, lambda snap: snap.with_dislike(item_id))

    async def clear(self, user_id: str, item_id: str) -> PreferenceSnapshot:
        return await self._update(user_id, lambda snap: snap.without(item_id))

    async def forget_item(self, user_id: str, item_id: str) -> None:
        """Drop an item id from both lists, e.g. after the item is deleted."""

        snapshot = await self.snapshot(user_id)
        if snapshot.is_liked(item_id) or snapshot.is_disliked(item_id):
            await self.clear(user_id, item_id)


__all__ = ["PreferenceRecord", "PreferenceStore"]
