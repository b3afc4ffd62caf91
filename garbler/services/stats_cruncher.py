"""
Statistics cruncher for word building.

Turns influence maps from a StatsLibrary into next-character recommendations
using an aging algorithm, keeps a two-tier cache of recommendations keyed by
word ending, and estimates how likely a sequence is to be a complete word.

Aging:
    w = 0
    for i from len-1 down to 0:
        w = w * (1 - pref) + pref * count[i]

so an observation at distance i weighs roughly pref * (1 - pref)^i.
"""
from __future__ import annotations

import logging
import math
from collections import deque
from typing import Deque, Dict, List, Optional, Tuple

from garbler import config

from .char_map import DecimalCharMap, OccurrenceMap, RecommendationMap, balanced_map
from .stats_library import StatsLibrary

logger = logging.getLogger(__name__)


def _setting(name: str):
    """Current default for a factor, e.g. ending_length -> ENDING_LENGTH."""
    return getattr(config.settings, name.upper())


def _whole_number(name: str, value) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{name} must be a whole number")
    return int(value)


def _check_size(size: int) -> int:
    size = _whole_number("size", size)
    if size < 0:
        raise ValueError("Size less than zero")
    return size


class EndingsCache:
    """
    Two-tier cache of recommendation maps keyed by word ending.

    New entries always land in the secondary tier, a bounded queue with the
    newest entry first. An entry found there on a later lookup moves to the
    primary tier while it has room. The primary tier never evicts; shrinking
    it only stops new promotions.
    """

    def __init__(
        self,
        primary_size: Optional[int] = None,
        secondary_size: Optional[int] = None,
    ):
        if primary_size is None:
            primary_size = _setting("primary_cache_size")
        if secondary_size is None:
            secondary_size = _setting("secondary_cache_size")
        self._primary_size = _check_size(primary_size)
        self._secondary_size = _check_size(secondary_size)
        self._primary: Dict[str, DecimalCharMap] = {}
        self._secondary: Deque[Tuple[str, DecimalCharMap]] = deque()

    @property
    def primary_size(self) -> int:
        return self._primary_size

    @primary_size.setter
    def primary_size(self, size: int):
        self._primary_size = _check_size(size)

    @property
    def secondary_size(self) -> int:
        return self._secondary_size

    @secondary_size.setter
    def secondary_size(self, size: int):
        self._secondary_size = _check_size(size)
        while len(self._secondary) > self._secondary_size:
            self._secondary.pop()

    def get(self, key: str) -> Optional[DecimalCharMap]:
        """Look up ``key``, promoting a secondary hit when the primary has room."""
        value = self._primary.get(key)
        if value is not None:
            return value

        for entry in self._secondary:
            if entry[0] == key:
                if len(self._primary) < self._primary_size:
                    self._primary[key] = entry[1]
                    self._secondary.remove(entry)
                    logger.debug(f"[Garbler] Promoted ending {key!r} to primary cache")
                return entry[1]
        return None

    def push(self, key: str, value: DecimalCharMap):
        """Insert into the secondary tier, dropping the oldest entry when full."""
        if self._secondary_size == 0:
            return
        self._secondary.appendleft((key, value))
        while len(self._secondary) > self._secondary_size:
            self._secondary.pop()

    def primary_contents(self) -> List[str]:
        return sorted(self._primary)

    def secondary_contents(self) -> List[str]:
        return [key for key, _ in self._secondary]

    def clear(self) -> int:
        removed = len(self._primary) + len(self._secondary)
        self._primary.clear()
        self._secondary.clear()
        return removed

    def __len__(self) -> int:
        return len(self._primary) + len(self._secondary)


class StatsCruncher:
    """
    Reduces character statistics into recommendations.

    Tunable factors:
    - close_character_preference: aging factor in [0, 1]
    - same_character_weight_adjust: multiplier (>= 0) for repeating the last
      character
    - eow_factor_threshold: score in [0, 1] treated as a certain word ending
    - ending_length: length (>= 1) of the cached word ending
    - primary_cache_size / secondary_cache_size: cache capacities (>= 0)
    """

    FACTORS = (
        "close_character_preference",
        "same_character_weight_adjust",
        "eow_factor_threshold",
        "ending_length",
        "primary_cache_size",
        "secondary_cache_size",
    )

    def __init__(
        self,
        library: Optional[StatsLibrary] = None,
        close_character_preference: Optional[float] = None,
        same_character_weight_adjust: Optional[float] = None,
        eow_factor_threshold: Optional[float] = None,
        ending_length: Optional[int] = None,
        primary_cache_size: Optional[int] = None,
        secondary_cache_size: Optional[int] = None,
    ):
        """
        Initialize cruncher.

        Factors left as None take their value from the service settings.

        Args:
            library: Statistics to crunch (a new empty library when omitted)
            close_character_preference: Aging factor
            same_character_weight_adjust: Repeated-character multiplier
            eow_factor_threshold: End-of-word saturation point
            ending_length: Cached ending length
            primary_cache_size: Capacity of the permanent cache
            secondary_cache_size: Capacity of the temporary cache
        """
        self.library = library if library is not None else StatsLibrary()
        self.cache = EndingsCache()
        self.primary_character_distribution = DecimalCharMap()
        self._close_character_preference = None

        given = {
            "close_character_preference": close_character_preference,
            "same_character_weight_adjust": same_character_weight_adjust,
            "eow_factor_threshold": eow_factor_threshold,
            "ending_length": ending_length,
            "primary_cache_size": primary_cache_size,
            "secondary_cache_size": secondary_cache_size,
        }
        for name in self.FACTORS:
            value = given[name]
            setattr(self, name, _setting(name) if value is None else value)

        self.recalculate_metrics()

    # --- configuration ---
    @property
    def close_character_preference(self) -> float:
        return self._close_character_preference

    @close_character_preference.setter
    def close_character_preference(self, value: float):
        if not 0.0 <= value <= 1.0:
            raise ValueError("close_character_preference must be between 0 and 1")
        value = float(value)
        # Cached ending maps were aged with the previous preference.
        if value != self._close_character_preference:
            self.cache.clear()
        self._close_character_preference = value

    @property
    def same_character_weight_adjust(self) -> float:
        return self._same_character_weight_adjust

    @same_character_weight_adjust.setter
    def same_character_weight_adjust(self, value: float):
        if not (value >= 0.0 and math.isfinite(value)):
            raise ValueError("same_character_weight_adjust must be a finite value of 0.0 or greater")
        self._same_character_weight_adjust = float(value)

    @property
    def eow_factor_threshold(self) -> float:
        return self._eow_factor_threshold

    @eow_factor_threshold.setter
    def eow_factor_threshold(self, value: float):
        if not 0.0 <= value <= 1.0:
            raise ValueError("eow_factor_threshold must be between 0 and 1")
        self._eow_factor_threshold = float(value)

    @property
    def ending_length(self) -> int:
        return self._ending_length

    @ending_length.setter
    def ending_length(self, value: int):
        value = _whole_number("ending_length", value)
        if value < 1:
            raise ValueError("ending_length must be at least 1")
        self._ending_length = value

    @property
    def primary_cache_size(self) -> int:
        return self.cache.primary_size

    @primary_cache_size.setter
    def primary_cache_size(self, value: int):
        self.cache.primary_size = value

    @property
    def secondary_cache_size(self) -> int:
        return self.cache.secondary_size

    @secondary_cache_size.setter
    def secondary_cache_size(self, value: int):
        self.cache.secondary_size = value

    def configure(self, name: str, value):
        """Set a tunable factor by name."""
        if name not in self.FACTORS:
            raise ValueError(f"Unknown factor: {name}")
        setattr(self, name, value)

    def factors(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in self.FACTORS}

    def reset(self):
        """
        Restore every factor to its configured default.

        Cached endings survive unless the aging preference changes.
        """
        for name in self.FACTORS:
            setattr(self, name, _setting(name))

    def recalculate_metrics(self):
        """
        Recompute the first-character distribution.

        Expensive and nearly constant, so call it once after bulk ingestion
        rather than per word.
        """
        self.primary_character_distribution = balanced_map(self.library.first_char_counts)
        logger.debug(
            f"[Garbler] First-character distribution over {len(self.primary_character_distribution)} characters"
        )

    # --- cache ---
    def primary_cache_contents(self) -> List[str]:
        return self.cache.primary_contents()

    def secondary_cache_contents(self) -> List[str]:
        return self.cache.secondary_contents()

    def clear_cache(self) -> int:
        return self.cache.clear()

    # --- crunching ---
    def reduce_influence_map(self, influence: OccurrenceMap) -> DecimalCharMap:
        """
        Collapse each character's distance histogram into one aged weight.

        Returns:
            Unnormalized character → weight map
        """
        pref = self._close_character_preference
        inverse = 1.0 - pref
        results = DecimalCharMap(influence.case_sensitive)

        for c, occurrences in influence.items():
            weighted = 0.0
            # Oldest first, so nearer samples are aged the least.
            for i in range(len(occurrences) - 1, -1, -1):
                weighted = weighted * inverse + pref * occurrences.get_count(i)
            results.raw_put(c, weighted)

        return results

    def generate_append_recommendations(self, sequence: str) -> RecommendationMap:
        """
        Recommend characters to append to ``sequence``.

        The trailing ending is served from the cache when possible and the
        rest of the sequence is crunched fresh. The result is not normalized;
        rebalance (and optionally trim) it before sampling.
        """
        results = RecommendationMap(self.library.case_sensitive)
        if not sequence:
            return results

        length = len(sequence)
        ending = sequence[-self._ending_length:] if length >= self._ending_length else sequence

        ending_map = self.cache.get(ending)
        if ending_map is None:
            ending_map = self.reduce_influence_map(self.library.influence_map(ending))
            self.cache.push(ending, ending_map)

        word_map = self.reduce_influence_map(
            self.library.influence_map(sequence, self._ending_length)
        )

        for c, weight in ending_map.items():
            results.raw_put(c, weight)
        for c, weight in word_map.items():
            existing = results.get(c)
            results.put(c, weight if existing is None else existing + weight)

        last = sequence[-1]
        if last in results:
            results[last] = results[last] * self._same_character_weight_adjust

        return results

    def eow_factor(self, sequence: str) -> float:
        """
        Estimated probability that ``sequence`` ends a word.

        Each character's chance of sitting at its current distance from the
        end is aged left to right, scaled by the threshold and capped at 1.0.
        """
        pref = self._close_character_preference
        inverse = 1.0 - pref
        length = len(sequence)
        result = 0.0

        for i, c in enumerate(sequence):
            stats = self.library.profile(c)
            mass = stats.end_distances.probability_mass(length - i - 1) if stats is not None else 0.0
            result = result * inverse + pref * mass

        if self._eow_factor_threshold == 0.0:
            return 1.0 if result > 0.0 else 0.0
        return min(1.0, result / self._eow_factor_threshold)
