"""Shared test doubles and item builders."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

sys.path.append(str(Path(__file__).resolve().parents[1]))

from models.clothing_item import ClothingItem
from tools.reasoning_client import ReasoningClient


def make_item(item_id: str, category: str, color: Optional[str] = None, **fields) -> ClothingItem:
    fields.setdefault("user_id", "demo")
    fields.setdefault("name", item_id.replace("_", " ").title())
    return ClothingItem(item_id=item_id, category=category, color=color, **fields)


class FakeReasoningClient(ReasoningClient):
    """Returns canned replies in order, or raises the configured error."""

    def __init__(self, replies: Optional[List[str]] = None, error: Optional[Exception] = None) -> None:
        self.replies = list(replies or [])
        self.error = error
        self.calls: List[dict] = []

    async def complete(self, system_instruction, prompt, temperature, max_output_tokens) -> str:
        self.calls.append(
            {
                "system_instruction": system_instruction,
                "prompt": prompt,
                "temperature": temperature,
                "max_output_tokens": max_output_tokens,
            }
        )
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else ""


class GatedReasoningClient(FakeReasoningClient):
    """Blocks each call until ``release`` is set, to interleave concurrent queries."""

    def __init__(self, replies: Optional[List[str]] = None) -> None:
        super().__init__(replies)
        self.release = asyncio.Event()
        self.entered = asyncio.Event()

    async def complete(self, system_instruction, prompt, temperature, max_output_tokens) -> str:
        self.entered.set()
        await self.release.wait()
        return await super().complete(system_instruction, prompt, temperature, max_output_tokens)
