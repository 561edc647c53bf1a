"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.clothing_item import ClothingItem, from_raw_metadata
from models.outfit import MatchResult, OutfitSuggestion
from models.preferences import PreferenceSnapshot

__all__ = ["ClothingItem", "MatchResult", "OutfitSuggestion", "PreferenceSnapshot", "from_raw_metadata"]
