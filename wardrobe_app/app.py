"""Smart Wardrobe app bootstrap."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from google import generativeai as genai
from pydantic import ValidationError

from agents.match_agent import SmartMatchAgent
from agents.outfit_agent import OutfitComposerAgent
from logic.lifecycle import LifecycleTracker
from logic.validation import ClothingItemInput, RecommendationQuery
from memory.preference_store import PreferenceStore
from models.clothing_item import ClothingItem, from_raw_metadata
from models.outfit import MatchResponse, MatchStatus, OutfitResponse
from tools.image_colors import ImageAnalysisError, dominant_colors, load_image_bytes
from tools.reasoning_client import GeminiReasoningClient, ReasoningClient
from tools.wardrobe_store import ItemNotFoundError, SQLiteWardrobeStore, WardrobeStore
from wardrobe_app.config import AppConfig
from wardrobe_app.logging_config import configure_logging, get_logger, log_event, operation_context
from wardrobe_app.request_tokens import QueryTracker

LOGGER = get_logger(__name__)


@dataclass
class SmartMatchReport:
    """Matches and outfits produced by one smart-match action."""

    matches: MatchResponse = field(default_factory=MatchResponse)
    outfits: OutfitResponse = field(default_factory=OutfitResponse)
    superseded: bool = False

    @property
    def status(self) -> MatchStatus:
        if self.superseded:
            return MatchStatus.SUPERSEDED
        if self.matches.degraded or self.outfits.degraded:
            return MatchStatus.DEGRADED
        if self.matches.matches or self.outfits.outfits:
            return MatchStatus.OK
        return MatchStatus.NO_RESULTS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "matches": self.matches.to_dict(),
            "outfits": self.outfits.to_dict(),
        }

    @classmethod
    def superseded_report(cls) -> "SmartMatchReport":
        return cls(
            matches=MatchResponse(superseded=True),
            outfits=OutfitResponse(superseded=True),
            superseded=True,
        )


class SmartWardrobeApp:
    """Wires together storage, preference memory, agents and lifecycle tracking."""

    def __init__(
        self,
        config: AppConfig | None = None,
        store: WardrobeStore | None = None,
        preference_store: PreferenceStore | None = None,
        reasoning_client: ReasoningClient | None = None,
    ) -> None:
        self.config = config or AppConfig.from_env()
        configure_logging()

        if reasoning_client is None and self.config.api_key:
            genai.configure(api_key=self.config.api_key)
            reasoning_client = GeminiReasoningClient(model=self.config.model)
        if reasoning_client is None:
            log_event(LOGGER, logging.WARNING, "reasoning_not_configured", model=self.config.model)
        self.reasoning_client = reasoning_client

        self.store = store or SQLiteWardrobeStore(self.config.wardrobe_db_path)
        self.preferences = preference_store or PreferenceStore(self.config.preference_store_path)
        self.match_agent = SmartMatchAgent(config=self.config, store=self.store, client=self.reasoning_client)
        self.outfit_agent = OutfitComposerAgent(config=self.config, store=self.store, client=self.reasoning_client)
        self.lifecycle = LifecycleTracker(self.store)
        self.query_tracker = QueryTracker()

    async def add_item(self, user_id: str, payload: Dict[str, Any]) -> ClothingItem:
        """Validate an upload and persist it, sampling the image when no colour is given."""

        with operation_context("app:add_item", user_id=user_id) as correlation_id:
            try:
                item_input = ClothingItemInput.model_validate(payload)
            except ValidationError:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "app_request_invalid",
                    agent="app",
                    method="add_item",
                    correlation_id=correlation_id,
                )
                raise

            metadata = item_input.model_dump()
            metadata["user_id"] = user_id
            if metadata["color"] is None and item_input.image_ref:
                metadata["color"] = await self._detect_color(item_input.image_ref)
            item = from_raw_metadata(metadata, default_max_uses=self.config.default_max_uses)
            return await self.store.create_item(item)

    async def _detect_color(self, image_ref: str):
        try:
            data = await self._load_image(image_ref)
            colors = await dominant_colors(data)
        except ImageAnalysisError as exc:
            log_event(LOGGER, logging.WARNING, "color_analysis_failed", error=str(exc))
            return None
        return colors[0] if colors else None

    async def _load_image(self, image_ref: str) -> bytes:
        return await asyncio.to_thread(load_image_bytes, image_ref)

    async def require_item(self, user_id: str, item_id: str) -> ClothingItem:
        item = await self.store.get_item(user_id, item_id)
        if item is None:
            raise ItemNotFoundError(user_id, item_id)
        return item

    async def delete_item(self, user_id: str, item_id: str) -> bool:
        deleted = await self.store.delete_item(user_id, item_id)
        if deleted:
            await self.preferences.forget_item(user_id, item_id)
        return deleted

    async def find_matches(
        self, user_id: str, item_id: str, occasion: Optional[str] = None, weather: Optional[str] = None
    ) -> MatchResponse:
        """Matches for one item, dropped if a newer match query started meanwhile."""

        token = self.query_tracker.issue(f"{user_id}:matches")
        with operation_context("app:find_matches", user_id=user_id) as correlation_id:
            target = await self.require_item(user_id, item_id)
            preferences = await self.preferences.snapshot(user_id)
            response = await self.match_agent.find_matches(user_id, target, occasion, weather, preferences)
            if not self.query_tracker.is_current(token):
                self._log_superseded(correlation_id, "find_matches")
                return MatchResponse(superseded=True)
            return response

    async def compose_outfits(
        self,
        user_id: str,
        item_ids: Sequence[str],
        occasion: Optional[str] = None,
        weather: Optional[str] = None,
    ) -> OutfitResponse:
        token = self.query_tracker.issue(f"{user_id}:outfits")
        with operation_context("app:compose_outfits", user_id=user_id) as correlation_id:
            base_items = [await self.require_item(user_id, item_id) for item_id in dict.fromkeys(item_ids)]
            preferences = await self.preferences.snapshot(user_id)
            response = await self.outfit_agent.compose_outfits(user_id, base_items, occasion, weather, preferences)
            if not self.query_tracker.is_current(token):
                self._log_superseded(correlation_id, "compose_outfits")
                return OutfitResponse(superseded=True)
            return response

    async def smart_match(
        self,
        user_id: str,
        item_id: str,
        occasion: Optional[str] = None,
        weather: Optional[str] = None,
    ) -> SmartMatchReport:
        """Matches then outfits for one item, dropped if a newer query started meanwhile."""

        token = self.query_tracker.issue(f"{user_id}:smart_match")
        query = RecommendationQuery(occasion=occasion, weather=weather)
        with operation_context("app:smart_match", user_id=user_id) as correlation_id:
            target = await self.require_item(user_id, item_id)
            preferences = await self.preferences.snapshot(user_id)
            matches = await self.match_agent.find_matches(
                user_id, target, query.occasion, query.weather, preferences
            )
            if not self.query_tracker.is_current(token):
                return self._superseded(correlation_id)
            outfits = await self.outfit_agent.compose_outfits(
                user_id, [target], query.occasion, query.weather, preferences
            )
            if not self.query_tracker.is_current(token):
                return self._superseded(correlation_id)
            return SmartMatchReport(matches=matches, outfits=outfits)

    def _superseded(self, correlation_id: str) -> SmartMatchReport:
        self._log_superseded(correlation_id, "smart_match")
        return SmartMatchReport.superseded_report()

    def _log_superseded(self, correlation_id: str, action: str) -> None:
        log_event(LOGGER, logging.INFO, "query_superseded", action=action, correlation_id=correlation_id)

    async def list_items(self, user_id: str, in_wash: Optional[bool] = None) -> List[ClothingItem]:
        return await self.store.list_items(user_id, in_wash=in_wash)


__all__ = ["SmartMatchReport", "SmartWardrobeApp"]
