"""
Character statistics library.

Reads training text one word at a time and keeps, for every character seen,
where it tends to sit inside a word and which characters tend to follow it.
The influence map built from these profiles is what the cruncher turns into
next-character recommendations.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional

from garbler import config

from .char_map import CaseFoldingMap, IntegerCharMap, OccurrenceMap
from .character_profile import CharacterProfile
from .occurrence import OccurrenceList

logger = logging.getLogger(__name__)


def _merge_profiles(old: CharacterProfile, new: CharacterProfile) -> CharacterProfile:
    return old.merge(new)


class StatsLibrary:
    """
    Library of per-character statistics.

    Holds one CharacterProfile per observed character, the distribution of
    word lengths (index = length - 1) and the first-character counts.
    """

    def __init__(self, case_sensitive: Optional[bool] = None):
        """
        Args:
            case_sensitive: When False, words are lower-cased before parsing.
                Defaults to the CASE_SENSITIVE setting.
        """
        if case_sensitive is None:
            case_sensitive = config.settings.CASE_SENSITIVE
        self.profiles: CaseFoldingMap[CharacterProfile] = CaseFoldingMap(
            case_sensitive, merge=_merge_profiles
        )
        self.word_lengths = OccurrenceList()
        self.first_char_counts = IntegerCharMap(case_sensitive)
        self.words_parsed = 0

    @property
    def case_sensitive(self) -> bool:
        return self.profiles.case_sensitive

    @case_sensitive.setter
    def case_sensitive(self, active: bool):
        self.profiles.case_sensitive = active
        self.first_char_counts.case_sensitive = active
        for profile in self.profiles.values():
            profile.case_sensitive = active

    # --- ingestion ---
    def parse_word(self, word: str):
        """
        Add a single word to the statistics.

        Args:
            word: Training word; empty strings are ignored
        """
        if not word:
            return
        if not self.case_sensitive:
            word = word.lower()

        self.word_lengths.increment(len(word) - 1)
        self.first_char_counts.increment(word[0])
        self.words_parsed += 1

        for i, c in enumerate(word):
            profile = self.profiles.get(c)
            if profile is None:
                profile = CharacterProfile(c, self.case_sensitive)
                self.profiles.put(c, profile)
            profile.observe(word, i)

    def parse_line(self, line: str, delimiters: str = ""):
        """
        Split a line into words and parse each of them.

        Args:
            line: A line of text
            delimiters: Characters to split on in addition to whitespace
        """
        pattern = r"[\s" + re.escape(delimiters) + r"]+" if delimiters else r"\s+"
        words = [w for w in re.split(pattern, line) if w]
        for word in words:
            self.parse_word(word)
        logger.debug(f"[Garbler] Parsed {len(words)} words, alphabet size {len(self.profiles)}")

    # --- retrieval ---
    def profile(self, c: str) -> Optional[CharacterProfile]:
        return self.profiles.get(c)

    def alphabet(self) -> List[str]:
        return self.profiles.alphabet()

    def influence_map(self, sequence: str, offset: int = 0) -> OccurrenceMap:
        """
        Aggregate what every character of ``sequence`` says about the next one.

        Walking backward from the end, the character at distance ``position``
        from the end contributes each correlation it has at exactly that
        distance, accumulated under ``position`` in the result.

        Args:
            sequence: Characters written so far
            offset: Number of trailing characters to leave out

        Returns:
            Map of candidate next character → counts by distance from the end.
            Characters with no influence are not included.
        """
        if offset < 0:
            raise ValueError("Negative offset passed")

        length = len(sequence)
        results = OccurrenceMap(self.case_sensitive)

        for i in range(length - 1 - offset, -1, -1):
            position = length - 1 - i
            stats = self.profiles.get(sequence[i])
            if stats is None:
                continue
            for c, occurrences in stats.correlations_at_distance(position).items():
                results.ensure(c).increment(position, occurrences.get_count(position))

        return results

    # --- modifiers ---
    def compact(self):
        """Merge upper-case profiles and correlations into their lower-case forms."""
        self.profiles.compact()
        self.first_char_counts.compact()
        for c, profile in self.profiles.items():
            profile.char = c
            profile.collapse()

    def clear(self):
        self.profiles.clear()
        self.word_lengths.clear()
        self.first_char_counts.clear()
        self.words_parsed = 0
