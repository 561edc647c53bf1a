"""Smart match agent: companion items for one target garment."""
from __future__ import annotations

import logging
import random
from typing import Optional

from logic.basic_matching import basic_matches, candidate_pool
from logic.prompts import build_match_prompt, normalize_constraint
from logic.reply_parsing import parse_match_reply
from logic.safety import MATCH_ROLE, system_instruction
from models.clothing_item import ClothingItem
from models.outfit import DegradeReason, MatchResponse
from models.preferences import PreferenceSnapshot
from models.taxonomy import normalize_occasion
from tools.reasoning_client import (
    ReasoningClient,
    ReasoningDeclined,
    ReasoningRateLimited,
    ReasoningServiceError,
)
from tools.wardrobe_store import WardrobeStore
from wardrobe_app.config import AppConfig
from wardrobe_app.logging_config import get_logger, log_event, operation_context

logger = get_logger(__name__)


def degrade_reason_for(exc: ReasoningServiceError) -> DegradeReason:
    if isinstance(exc, ReasoningRateLimited):
        return DegradeReason.RATE_LIMITED
    if isinstance(exc, ReasoningDeclined):
        return DegradeReason.DECLINED
    return DegradeReason.UNAVAILABLE


class SmartMatchAgent:
    """Ranks wardrobe items that go with a target item.

    The reasoning service is tried first; when it is missing or fails, the
    rule-based engine answers instead and the response is marked degraded.
    """

    def __init__(
        self,
        config: AppConfig,
        store: WardrobeStore,
        client: Optional[ReasoningClient] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config
        self.store = store
        self.client = client
        self.rng = rng or random.Random()
        self.system_instruction = system_instruction(MATCH_ROLE)

    async def find_matches(
        self,
        user_id: str,
        target: Optional[ClothingItem],
        occasion: Optional[str] = None,
        weather: Optional[str] = None,
        preferences: Optional[PreferenceSnapshot] = None,
    ) -> MatchResponse:
        """Return up to ``max_matches`` companions for ``target``."""

        preferences = preferences or PreferenceSnapshot.empty()
        occasion = normalize_occasion(occasion)
        weather = normalize_constraint(weather)
        with operation_context("agent:match.find_matches", user_id=user_id) as correlation_id:
            if target is None:
                log_event(logger, logging.INFO, "match_skipped", reason="no_target", correlation_id=correlation_id)
                return MatchResponse()

            items = await self.store.list_items(user_id)
            pool = candidate_pool(target, items, preferences)
            log_event(
                logger,
                logging.INFO,
                "agent_call_started",
                agent="match",
                method="find_matches",
                correlation_id=correlation_id,
                target_id=target.item_id,
                pool_size=len(pool),
                occasion=occasion,
                weather=weather,
            )
            if not pool:
                return MatchResponse()

            if self.client is None:
                return self._fallback(target, pool, preferences, DegradeReason.NOT_CONFIGURED)

            prompt = build_match_prompt(
                target, pool, occasion, weather, preferences, limit=self.config.max_matches
            )
            try:
                reply = await self.client.complete(
                    self.system_instruction,
                    prompt,
                    temperature=self.config.match_temperature,
                    max_output_tokens=self.config.match_max_output_tokens,
                )
            except ReasoningServiceError as exc:
                return self._fallback(target, pool, preferences, degrade_reason_for(exc))

            matches = parse_match_reply(reply, pool, preferences, limit=self.config.max_matches)
            log_event(
                logger,
                logging.INFO,
                "agent_call_completed",
                agent="match",
                method="find_matches",
                correlation_id=correlation_id,
                match_count=len(matches),
            )
            return MatchResponse(matches=matches)

    def _fallback(
        self,
        target: ClothingItem,
        pool,
        preferences: PreferenceSnapshot,
        reason: DegradeReason,
    ) -> MatchResponse:
        log_event(logger, logging.WARNING, "match_degraded", reason=reason.value, target_id=target.item_id)
        matches = basic_matches(
            target,
            pool,
            preferences,
            limit=self.config.max_matches,
            scoring=self.config.fallback_scoring,
            rng=self.rng,
        )
        return MatchResponse(matches=matches, degrade_reason=reason)


__all__ = ["SmartMatchAgent", "degrade_reason_for"]
