"""
Per-character statistics gathered while reading training words.
"""
from __future__ import annotations

from typing import List, Optional

from .char_map import OccurrenceMap
from .occurrence import OccurrenceList


class CharacterProfile:
    """
    Statistics for a single character.

    Tracks:
    - start_distances: 0-based distance from the start of the word
    - end_distances: 0-based distance from the end of the word
    - correlations: for each later character C, how many positions after
      this one it appeared (index = distance - 1)
    """

    def __init__(self, char: str, case_sensitive: bool = False):
        if not isinstance(char, str) or len(char) != 1:
            raise ValueError(f"Profile needs a single character, got {char!r}")
        self.char = char
        self.occurrences = 0
        self.start_distances = OccurrenceList()
        self.end_distances = OccurrenceList()
        self.correlations = OccurrenceMap(case_sensitive)

    @property
    def case_sensitive(self) -> bool:
        return self.correlations.case_sensitive

    @case_sensitive.setter
    def case_sensitive(self, active: bool):
        self.correlations.case_sensitive = active

    def _fold(self, c: str) -> str:
        return c if self.case_sensitive else c.lower()

    def observe(self, word: str, index: int) -> bool:
        """
        Record one occurrence of this character inside ``word``.

        Args:
            word: Training word
            index: Position of this character within the word

        Returns:
            False when the character at ``index`` is not this one (nothing is
            recorded), True otherwise
        """
        if index < 0 or index >= len(word):
            raise IndexError(f"index {index} out of range for {word!r}")
        if self._fold(word[index]) != self._fold(self.char):
            return False

        length = len(word)
        self.start_distances.increment(index)
        self.end_distances.increment(length - index - 1)
        self.occurrences += 1

        for j in range(index + 1, length):
            self.correlations.ensure(word[j]).increment(j - index - 1)
        return True

    def correlations_at_distance(self, distance: int) -> OccurrenceMap:
        """Characters seen exactly ``distance + 1`` positions after this one."""
        relevant = OccurrenceMap(self.case_sensitive)
        for c, occurrences in self.correlations.items():
            if occurrences.get_count(distance) > 0:
                relevant.raw_put(c, occurrences)
        return relevant

    def correlations_for(self, c: str) -> Optional[OccurrenceList]:
        return self.correlations.get(c)

    def alphabet(self) -> List[str]:
        return self.correlations.alphabet()

    # --- modifiers ---
    def merge(self, other: "CharacterProfile") -> "CharacterProfile":
        """Fold another profile's statistics into this one."""
        if other is self:
            return self
        if other.case_sensitive:
            self.case_sensitive = True
        for c, occurrences in other.correlations.items():
            self.correlations.ensure(c).merge(occurrences)
        self.start_distances.merge(other.start_distances)
        self.end_distances.merge(other.end_distances)
        self.occurrences += other.occurrences
        return self

    def copy(self) -> "CharacterProfile":
        return CharacterProfile(self.char, self.case_sensitive).merge(self)

    def prepare(self, c: str) -> OccurrenceList:
        return self.correlations.ensure(c)

    def reset_correlation(self, c: str):
        occurrences = self.correlations.get(c)
        if occurrences is not None:
            occurrences.clear()

    def reset(self):
        self.occurrences = 0
        self.start_distances.clear()
        self.end_distances.clear()
        self.correlations.clear()

    def collapse(self):
        self.correlations.compact()

    def __repr__(self) -> str:
        return f"CharacterProfile({self.char!r}, alphabet={self.alphabet()}, occurrences={self.occurrences})"
