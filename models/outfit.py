"""Recommendation result schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from models.clothing_item import ClothingItem, utc_now


class MatchStatus(str, Enum):
    OK = "ok"
    NO_RESULTS = "no_results"
    DEGRADED = "degraded"
    SUPERSEDED = "superseded"


class DegradeReason(str, Enum):
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    DECLINED = "declined"
    NOT_CONFIGURED = "not_configured"


NOTICES = {
    MatchStatus.OK: None,
    MatchStatus.NO_RESULTS: "No matches found - try adjusting the occasion or weather filters.",
    MatchStatus.DEGRADED: "Service degraded - basic matching used.",
    MatchStatus.SUPERSEDED: None,
}
ERROR_NOTICE = "An error occurred - please retry."


@dataclass
class MatchResult:
    """A companion item for a target garment with its score and rationale."""

    item: ClothingItem
    match_score: int
    reasoning: str
    style_advice: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item": self.item.to_dict(),
            "match_score": self.match_score,
            "reasoning": self.reasoning,
            "style_advice": self.style_advice,
        }


@dataclass
class OutfitSuggestion:
    clothing: List[ClothingItem]
    accessories: List[ClothingItem]
    styling_tips: str

    def item_ids(self) -> List[str]:
        return [item.item_id for item in self.clothing + self.accessories]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clothing": [item.to_dict() for item in self.clothing],
            "accessories": [item.to_dict() for item in self.accessories],
            "styling_tips": self.styling_tips,
        }


def _status_for(results: list, degrade_reason: Optional[DegradeReason]) -> MatchStatus:
    if degrade_reason is not None:
        return MatchStatus.DEGRADED
    return MatchStatus.OK if results else MatchStatus.NO_RESULTS


@dataclass
class MatchResponse:
    """Companion matches plus the signal the UI needs to pick its message.

    A degraded response may still be empty; callers check ``status`` rather
    than the length of ``matches`` to tell the two apart.
    """

    matches: List[MatchResult] = field(default_factory=list)
    degrade_reason: Optional[DegradeReason] = None
    superseded: bool = False

    @property
    def status(self) -> MatchStatus:
        if self.superseded:
            return MatchStatus.SUPERSEDED
        return _status_for(self.matches, self.degrade_reason)

    @property
    def degraded(self) -> bool:
        return self.degrade_reason is not None

    @property
    def notice(self) -> Optional[str]:
        return NOTICES[self.status]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "degraded": self.degraded,
            "degrade_reason": self.degrade_reason.value if self.degrade_reason else None,
            "notice": self.notice,
            "matches": [match.to_dict() for match in self.matches],
        }


@dataclass
class OutfitResponse:
    outfits: List[OutfitSuggestion] = field(default_factory=list)
    degrade_reason: Optional[DegradeReason] = None
    superseded: bool = False

    @property
    def status(self) -> MatchStatus:
        if self.superseded:
            return MatchStatus.SUPERSEDED
        return _status_for(self.outfits, self.degrade_reason)

    @property
    def degraded(self) -> bool:
        return self.degrade_reason is not None

    @property
    def notice(self) -> Optional[str]:
        return NOTICES[self.status]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "degraded": self.degraded,
            "degrade_reason": self.degrade_reason.value if self.degrade_reason else None,
            "notice": self.notice,
            "outfits": [outfit.to_dict() for outfit in self.outfits],
        }


@dataclass
class SavedOutfit:
    """An outfit suggestion the user chose to keep."""

    outfit_id: str
    user_id: str
    name: str
    description: str
    occasion: Optional[str]
    item_ids: List[str] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outfit_id": self.outfit_id,
            "user_id": self.user_id,
            "name": self.name,
            "description": self.description,
            "occasion": self.occasion,
            "item_ids": list(self.item_ids),
            "created_at": self.created_at,
        }


__all__ = [
    "DegradeReason",
    "ERROR_NOTICE",
    "MatchResponse",
    "MatchResult",
    "MatchStatus",
    "OutfitResponse",
    "OutfitSuggestion",
    "SavedOutfit",
]
