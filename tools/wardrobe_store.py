"""Wardrobe storage abstractions and SQLite implementation.

The public API is async; the SQLite work itself is synchronous and runs on a
worker thread. Every mutating method is a single write transaction, so a
failure never leaves half of a compound change behind.
"""
from __future__ import annotations

import asyncio
import contextlib
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, TypeVar
from uuid import uuid4

from models.clothing_item import ClothingItem, utc_now
from models.outfit import SavedOutfit
from models.taxonomy import normalize_color_name, normalize_occasion, normalize_season, parse_category
from tools.observability import instrument_operation

T = TypeVar("T")


class WardrobeStoreError(RuntimeError):
    """Raised when the persisted store cannot be read or written."""


class ItemNotFoundError(LookupError):
    """Raised when an item id does not exist in the caller's wardrobe."""

    def __init__(self, user_id: str, item_id: str) -> None:
        super().__init__(f"Item {item_id} not found")
        self.user_id = user_id
        self.item_id = item_id


@dataclass(frozen=True)
class ItemTransition:
    """Item state before and after one atomic update."""

    before: ClothingItem
    after: ClothingItem


class WardrobeStore:
    """Persistence interface for wardrobe items and saved outfits."""

    async def create_item(self, item: ClothingItem) -> ClothingItem:
        raise NotImplementedError

    async def get_item(self, user_id: str, item_id: str) -> Optional[ClothingItem]:
        raise NotImplementedError

    async def list_items(self, user_id: str, in_wash: Optional[bool] = None) -> List[ClothingItem]:
        raise NotImplementedError

    async def search_items(self, user_id: str, filters: Dict[str, object]) -> List[ClothingItem]:
        raise NotImplementedError

    async def delete_item(self, user_id: str, item_id: str) -> bool:
        raise NotImplementedError

    async def increment_uses(self, user_id: str, item_id: str) -> ItemTransition:
        raise NotImplementedError

    async def send_to_wash(self, user_id: str, item_id: str) -> ItemTransition:
        raise NotImplementedError

    async def reset_wash(self, user_id: str, item_ids: Optional[Sequence[str]] = None) -> List[ClothingItem]:
        raise NotImplementedError

    async def save_outfit(
        self,
        user_id: str,
        name: str,
        description: str,
        occasion: Optional[str],
        item_ids: Sequence[str],
    ) -> SavedOutfit:
        raise NotImplementedError

    async def list_outfits(self, user_id: str) -> List[SavedOutfit]:
        raise NotImplementedError


class SQLiteWardrobeStore(WardrobeStore):
    """Local SQLite-backed store for wardrobe items."""

    def __init__(self, database_path: str | Path = "data/wardrobe.db", timeout_seconds: float = 5.0) -> None:
        self.database_path = Path(database_path)
        self.timeout_seconds = timeout_seconds
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    @contextlib.contextmanager
    def _transaction(self, write: bool = False) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.database_path, timeout=self.timeout_seconds, isolation_level=None)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("BEGIN IMMEDIATE" if write else "BEGIN")
            yield conn
            conn.execute("COMMIT")
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.Error as exc:
            raise WardrobeStoreError(f"Wardrobe store operation failed: {exc}") from exc

    def _ensure_tables(self) -> None:
        with self._transaction(write=True) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS clothing_items (
                    user_id TEXT NOT NULL,
                    item_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    category TEXT NOT NULL,
                    color TEXT,
                    season TEXT,
                    occasion TEXT,
                    image_ref TEXT,
                    current_uses INTEGER NOT NULL DEFAULT 0 CHECK (current_uses >= 0),
                    max_uses INTEGER NOT NULL DEFAULT 10 CHECK (max_uses > 0),
                    in_wash INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (user_id, item_id)
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS outfits (
                    outfit_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    description TEXT,
                    occasion TEXT,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS outfit_items (
                    outfit_id TEXT NOT NULL REFERENCES outfits(outfit_id) ON DELETE CASCADE,
                    item_id TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    PRIMARY KEY (outfit_id, item_id)
                )
                """
            )

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> ClothingItem:
        return ClothingItem(
            item_id=row["item_id"],
            user_id=row["user_id"],
            name=row["name"],
            category=row["category"],
            color=row["color"],
            season=row["season"],
            occasion=row["occasion"],
            image_ref=row["image_ref"],
            current_uses=row["current_uses"],
            max_uses=row["max_uses"],
            in_wash=bool(row["in_wash"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _item_params(item: ClothingItem) -> tuple:
        return (
            item.user_id,
            item.item_id,
            item.name,
            item.category.value,
            item.color.value if item.color else None,
            item.season,
            item.occasion,
            item.image_ref,
            item.current_uses,
            item.max_uses,
            int(item.in_wash),
            item.created_at,
            item.updated_at,
        )

    def _fetch(self, conn: sqlite3.Connection, user_id: str, item_id: str) -> ClothingItem:
        row = conn.execute(
            "SELECT * FROM clothing_items WHERE user_id = ? AND item_id = ?",
            (user_id, item_id),
        ).fetchone()
        if row is None:
            raise ItemNotFoundError(user_id, item_id)
        return self._row_to_item(row)

    # Items

    def _create_item(self, item: ClothingItem) -> ClothingItem:
        with self._transaction(write=True) as conn:
            conn.execute(
                """
                INSERT INTO clothing_items (
                    user_id, item_id, name, category, color, season, occasion, image_ref,
                    current_uses, max_uses, in_wash, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._item_params(item),
            )
        return item

    @instrument_operation("store.create_item")
    async def create_item(self, item: ClothingItem) -> ClothingItem:
        return await self._run(self._create_item, item)

    def _get_item(self, user_id: str, item_id: str) -> Optional[ClothingItem]:
        with self._transaction() as conn:
            try:
                return self._fetch(conn, user_id, item_id)
            except ItemNotFoundError:
                return None

    async def get_item(self, user_id: str, item_id: str) -> Optional[ClothingItem]:
        return await self._run(self._get_item, user_id, item_id)

    def _select_items(self, user_id: str, clauses: List[str], params: List[object]) -> List[ClothingItem]:
        where = " AND ".join(["user_id = ?"] + clauses)
        with self._transaction() as conn:
            rows = conn.execute(
                f"SELECT * FROM clothing_items WHERE {where} ORDER BY created_at DESC, rowid DESC",
                [user_id, *params],
            ).fetchall()
        return [self._row_to_item(row) for row in rows]

    async def list_items(self, user_id: str, in_wash: Optional[bool] = None) -> List[ClothingItem]:
        """List a user's items newest first, optionally filtered by wash state."""

        clauses: List[str] = []
        params: List[object] = []
        if in_wash is not None:
            clauses.append("in_wash = ?")
            params.append(int(in_wash))
        return await self._run(self._select_items, user_id, clauses, params)

    async def search_items(self, user_id: str, filters: Dict[str, object]) -> List[ClothingItem]:
        """Filter by category, color, season, occasion and wash state."""

        filters = filters or {}
        clauses: List[str] = []
        params: List[object] = []
        if filters.get("category"):
            clauses.append("category = ?")
            params.append(parse_category(str(filters["category"])).value)
        if filters.get("color"):
            color = normalize_color_name(str(filters["color"]))
            clauses.append("color = ?")
            params.append(color.value if color else None)
        if filters.get("season"):
            clauses.append("season = ?")
            params.append(normalize_season(str(filters["season"])))
        if filters.get("occasion"):
            occasion = normalize_occasion(str(filters["occasion"]))
            if occasion:
                clauses.append("occasion = ?")
                params.append(occasion)
        if filters.get("in_wash") is not None:
            clauses.append("in_wash = ?")
            params.append(int(bool(filters["in_wash"])))
        return await self._run(self._select_items, user_id, clauses, params)

    def _delete_item(self, user_id: str, item_id: str) -> bool:
        with self._transaction(write=True) as conn:
            cursor = conn.execute(
                "DELETE FROM clothing_items WHERE user_id = ? AND item_id = ?",
                (user_id, item_id),
            )
            return cursor.rowcount > 0

    @instrument_operation("store.delete_item")
    async def delete_item(self, user_id: str, item_id: str) -> bool:
        return await self._run(self._delete_item, user_id, item_id)

    # Lifecycle

    def _increment_uses(self, user_id: str, item_id: str) -> ItemTransition:
        with self._transaction(write=True) as conn:
            before = self._fetch(conn, user_id, item_id)
            # SET expressions see the pre-update row, so the flip uses the new count.
            conn.execute(
                """
                UPDATE clothing_items
                SET current_uses = current_uses + 1,
                    in_wash = CASE WHEN in_wash = 1 OR current_uses + 1 >= max_uses THEN 1 ELSE 0 END,
                    updated_at = ?
                WHERE user_id = ? AND item_id = ?
                """,
                (utc_now(), user_id, item_id),
            )
            after = self._fetch(conn, user_id, item_id)
        return ItemTransition(before=before, after=after)

    async def increment_uses(self, user_id: str, item_id: str) -> ItemTransition:
        """Atomically count one wear, flagging the item for washing at ``max_uses``."""

        return await self._run(self._increment_uses, user_id, item_id)

    def _send_to_wash(self, user_id: str, item_id: str) -> ItemTransition:
        with self._transaction(write=True) as conn:
            before = self._fetch(conn, user_id, item_id)
            conn.execute(
                "UPDATE clothing_items SET in_wash = 1, updated_at = ? WHERE user_id = ? AND item_id = ?",
                (utc_now(), user_id, item_id),
            )
            after = self._fetch(conn, user_id, item_id)
        return ItemTransition(before=before, after=after)

    async def send_to_wash(self, user_id: str, item_id: str) -> ItemTransition:
        return await self._run(self._send_to_wash, user_id, item_id)

    def _reset_wash(self, user_id: str, item_ids: Optional[Sequence[str]]) -> List[ClothingItem]:
        with self._transaction(write=True) as conn:
            if item_ids is None:
                target_ids = [
                    row["item_id"]
                    for row in conn.execute(
                        "SELECT item_id FROM clothing_items WHERE user_id = ? AND in_wash = 1",
                        (user_id,),
                    ).fetchall()
                ]
            else:
                target_ids = list(dict.fromkeys(item_ids))
                for item_id in target_ids:
                    self._fetch(conn, user_id, item_id)
            if not target_ids:
                return []
            placeholders = ", ".join("?" for _ in target_ids)
            conn.execute(
                f"""
                UPDATE clothing_items
                SET in_wash = 0, current_uses = 0, updated_at = ?
                WHERE user_id = ? AND item_id IN ({placeholders})
                """,
                (utc_now(), user_id, *target_ids),
            )
            return [self._fetch(conn, user_id, item_id) for item_id in target_ids]

    async def reset_wash(self, user_id: str, item_ids: Optional[Sequence[str]] = None) -> List[ClothingItem]:
        """Mark items clean in one statement; ``None`` means every item in the wash."""

        return await self._run(self._reset_wash, user_id, item_ids)

    # Saved outfits

    def _save_outfit(
        self,
        user_id: str,
        name: str,
        description: str,
        occasion: Optional[str],
        item_ids: Sequence[str],
    ) -> SavedOutfit:
        outfit = SavedOutfit(
            outfit_id=uuid4().hex,
            user_id=user_id,
            name=name,
            description=description,
            occasion=normalize_occasion(occasion),
            item_ids=list(dict.fromkeys(item_ids)),
        )
        with self._transaction(write=True) as conn:
            for item_id in outfit.item_ids:
                self._fetch(conn, user_id, item_id)
            conn.execute(
                "INSERT INTO outfits (outfit_id, user_id, name, description, occasion, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (outfit.outfit_id, user_id, outfit.name, outfit.description, outfit.occasion, outfit.created_at),
            )
            conn.executemany(
                "INSERT INTO outfit_items (outfit_id, item_id, position) VALUES (?, ?, ?)",
                [(outfit.outfit_id, item_id, position) for position, item_id in enumerate(outfit.item_ids)],
            )
        return outfit

    @instrument_operation("store.save_outfit")
    async def save_outfit(
        self,
        user_id: str,
        name: str,
        description: str,
        occasion: Optional[str],
        item_ids: Sequence[str],
    ) -> SavedOutfit:
        return await self._run(self._save_outfit, user_id, name, description, occasion, item_ids)

    def _list_outfits(self, user_id: str) -> List[SavedOutfit]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM outfits WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
                (user_id,),
            ).fetchall()
            outfits = []
            for row in rows:
                item_rows = conn.execute(
                    "SELECT item_id FROM outfit_items WHERE outfit_id = ? ORDER BY position",
                    (row["outfit_id"],),
                ).fetchall()
                outfits.append(
                    SavedOutfit(
                        outfit_id=row["outfit_id"],
                        user_id=row["user_id"],
                        name=row["name"],
                        description=row["description"] or "",
                        occasion=row["occasion"],
                        item_ids=[item_row["item_id"] for item_row in item_rows],
                        created_at=row["created_at"],
                    )
                )
        return outfits

    async def list_outfits(self, user_id: str) -> List[SavedOutfit]:
        return await self._run(self._list_outfits, user_id)


__all__ = [
    "ItemNotFoundError",
    "ItemTransition",
    "SQLiteWardrobeStore",
    "WardrobeStore",
    "WardrobeStoreError",
]
