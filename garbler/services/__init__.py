"""
Statistical word-generation services.
"""

from .occurrence import OccurrenceList
from .char_map import (
    CaseFoldingMap,
    DecimalCharMap,
    IntegerCharMap,
    OccurrenceMap,
    RecommendationMap,
    balanced_map,
    rebalance_map,
    trim_map,
)
from .character_profile import CharacterProfile
from .stats_library import StatsLibrary
from .stats_cruncher import EndingsCache, StatsCruncher
from .word_builder import WordBuilder

__all__ = [
    "OccurrenceList",
    "CaseFoldingMap",
    "DecimalCharMap",
    "IntegerCharMap",
    "OccurrenceMap",
    "RecommendationMap",
    "balanced_map",
    "rebalance_map",
    "trim_map",
    "CharacterProfile",
    "StatsLibrary",
    "EndingsCache",
    "StatsCruncher",
    "WordBuilder",
]
