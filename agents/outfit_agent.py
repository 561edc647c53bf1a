"""Outfit composer agent: complete outfits around one or more base items."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from agents.match_agent import degrade_reason_for
from logic.basic_matching import candidate_pool
from logic.outfit_builder import OutfitPools, basic_outfits, partition_pools, split_base_items
from logic.prompts import build_outfit_prompt, normalize_constraint
from logic.reply_parsing import parse_outfit_reply
from logic.safety import OUTFIT_ROLE, system_instruction
from models.clothing_item import ClothingItem
from models.outfit import DegradeReason, OutfitResponse, OutfitSuggestion
from models.preferences import PreferenceSnapshot
from models.taxonomy import is_accessory, normalize_occasion
from tools.reasoning_client import ReasoningClient, ReasoningServiceError
from tools.wardrobe_store import WardrobeStore
from wardrobe_app.config import AppConfig
from wardrobe_app.logging_config import get_logger, log_event, operation_context

logger = get_logger(__name__)


def with_base_items(outfit: OutfitSuggestion, base_items: Sequence[ClothingItem]) -> OutfitSuggestion:
    """Put the base items at the front of the matching outfit list."""

    base_main, base_accessories = split_base_items(base_items)
    present = {item.item_id for item in outfit.clothing + outfit.accessories}
    return OutfitSuggestion(
        clothing=[item for item in base_main if item.item_id not in present] + outfit.clothing,
        accessories=[item for item in base_accessories if item.item_id not in present] + outfit.accessories,
        styling_tips=outfit.styling_tips,
    )


class OutfitComposerAgent:
    """Builds up to ``max_outfits`` outfits with accessories."""

    def __init__(
        self,
        config: AppConfig,
        store: WardrobeStore,
        client: Optional[ReasoningClient] = None,
    ) -> None:
        self.config = config
        self.store = store
        self.client = client
        self.system_instruction = system_instruction(OUTFIT_ROLE)

    async def _pools(
        self, user_id: str, base_items: Sequence[ClothingItem], preferences: PreferenceSnapshot
    ) -> OutfitPools:
        items = await self.store.list_items(user_id)
        base_ids = [item.item_id for item in base_items]
        return partition_pools(candidate_pool(None, items, preferences, exclude_ids=base_ids))

    async def compose_outfits(
        self,
        user_id: str,
        base_items: Sequence[ClothingItem],
        occasion: Optional[str] = None,
        weather: Optional[str] = None,
        preferences: Optional[PreferenceSnapshot] = None,
    ) -> OutfitResponse:
        preferences = preferences or PreferenceSnapshot.empty()
        occasion = normalize_occasion(occasion)
        weather = normalize_constraint(weather)
        base_items = list(base_items)
        with operation_context("agent:outfit.compose_outfits", user_id=user_id) as correlation_id:
            if not base_items:
                log_event(logger, logging.INFO, "outfit_skipped", reason="no_base_items", correlation_id=correlation_id)
                return OutfitResponse()

            pools = await self._pools(user_id, base_items, preferences)
            log_event(
                logger,
                logging.INFO,
                "agent_call_started",
                agent="outfit",
                method="compose_outfits",
                correlation_id=correlation_id,
                base_count=len(base_items),
                main_pool=len(pools.main),
                accessory_pool=len(pools.accessories),
            )
            if not pools.main:
                return OutfitResponse()

            if self.client is None:
                return self._fallback(base_items, pools, occasion, DegradeReason.NOT_CONFIGURED)

            prompt = build_outfit_prompt(base_items, pools.main, pools.accessories, occasion, weather)
            try:
                reply = await self.client.complete(
                    self.system_instruction,
                    prompt,
                    temperature=self.config.outfit_temperature,
                    max_output_tokens=self.config.outfit_max_output_tokens,
                )
            except ReasoningServiceError as exc:
                return self._fallback(base_items, pools, occasion, degrade_reason_for(exc))

            outfits = [
                with_base_items(outfit, base_items)
                for outfit in parse_outfit_reply(
                    reply, pools.main, pools.accessories, limit=self.config.max_outfits
                )
            ]
            log_event(
                logger,
                logging.INFO,
                "agent_call_completed",
                agent="outfit",
                method="compose_outfits",
                correlation_id=correlation_id,
                outfit_count=len(outfits),
            )
            return OutfitResponse(outfits=outfits)

    def _fallback(
        self,
        base_items: List[ClothingItem],
        pools: OutfitPools,
        occasion: Optional[str],
        reason: DegradeReason,
    ) -> OutfitResponse:
        log_event(logger, logging.WARNING, "outfit_degraded", reason=reason.value, base_count=len(base_items))
        # The rule engine anchors on the first garment; other base items ride along.
        anchor = next((item for item in base_items if not is_accessory(item.category)), base_items[0])
        outfits = basic_outfits(
            anchor, pools.main, pools.accessories, occasion, limit=self.config.max_outfits
        )
        return OutfitResponse(
            outfits=[with_base_items(outfit, base_items) for outfit in outfits],
            degrade_reason=reason,
        )


__all__ = ["OutfitComposerAgent", "with_base_items"]
