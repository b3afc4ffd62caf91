"""
Word builder.

Generates words one character at a time: the first character is drawn from
the first-character distribution, then each step either stops (with the
end-of-word probability) or samples the next character from the cruncher's
recommendations.
"""
from __future__ import annotations

import random
from typing import List, Optional

from .char_map import CaseFoldingMap, rebalance_map, trim_map
from .stats_cruncher import StatsCruncher

# Trailing characters used as the query window for each step.
WINDOW_SIZE = 6


class WordBuilder:
    """Builds words from a StatsCruncher using weighted random sampling."""

    def __init__(
        self,
        cruncher: StatsCruncher,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize builder.

        Args:
            cruncher: Cruncher wrapping the trained StatsLibrary
            seed: Seed for a private random generator
            rng: Explicit random generator (takes precedence over seed)
        """
        self.cruncher = cruncher
        self.rng = rng if rng is not None else random.Random(seed)

    @property
    def library(self):
        return self.cruncher.library

    def generate_word(self, max_length: int, trim_threshold: float = 1.0) -> str:
        """
        Generate a single word of at most ``max_length`` characters.

        Args:
            max_length: Upper bound on the word length
            trim_threshold: Recommendations worth at most this share of the
                total are dropped before sampling; 1.0 or more disables trimming

        Returns:
            Generated word. It may be shorter than max_length, and is empty
            when nothing has been learned.
        """
        if max_length < 0:
            raise ValueError("max_length must be non-negative")
        if max_length == 0:
            return ""

        first = self.pick_from_distribution(self.cruncher.primary_character_distribution)
        if first is None:
            return ""
        word = first

        while len(word) < max_length:
            window = word[-WINDOW_SIZE:]

            if self.rng.random() < self.cruncher.eow_factor(window):
                return word

            recommendations = self.cruncher.generate_append_recommendations(window)
            if trim_threshold < 1.0:
                trim_map(recommendations, trim_threshold)
            rebalance_map(recommendations)

            next_char = self.pick_from_distribution(recommendations)
            if next_char is None:
                return word
            word += next_char

        return word

    def generate_words(self, count: int, max_length: int, trim_threshold: float = 1.0) -> List[str]:
        return [self.generate_word(max_length, trim_threshold) for _ in range(count)]

    def pick_from_distribution(self, distribution: CaseFoldingMap[float]) -> Optional[str]:
        """
        Pick a character from a distribution summing to 1.0.

        Entries are scanned in character order. If rounding leaves the running
        sum short of the draw, the last character is returned. A distribution
        with no weight at all yields None.
        """
        items = distribution.items()
        if not items or sum(probability for _, probability in items) <= 0.0:
            return None

        pick = self.rng.random()
        running = 0.0
        for c, probability in items:
            running += probability
            if pick <= running:
                return c
        return items[-1][0]
