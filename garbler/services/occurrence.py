"""
Occurrence counting for character statistics.

An OccurrenceList is a growable vector of non-negative counts indexed by
distance: entry ``i`` says how many times some event happened ``i`` positions
away. The running total is kept alongside the counts so probability lookups
stay cheap.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

import numpy as np


class OccurrenceList:
    """
    Growable integer counter vector.

    Supports:
    - Increment with automatic growth
    - Strict (``get``) and tolerant (``get_count``) reads
    - Element-wise merge
    - Mean, variance and probability mass
    """

    def __init__(self, values: Optional[Iterable[int]] = None, size: int = 1):
        """
        Initialize the list.

        Args:
            values: Optional initial counts (must be non-negative)
            size: Initial length when no values are given
        """
        if values is not None:
            counts = np.array(list(values), dtype=np.int64)
            if (counts < 0).any():
                raise ValueError("Negative values not allowed")
        else:
            if size < 0:
                raise ValueError("Size must be non-negative")
            counts = np.zeros(size, dtype=np.int64)

        self._counts = counts
        self._total = int(counts.sum())

    # --- structure ---
    def increment(self, index: int, amount: int = 1) -> int:
        """Add ``amount`` at ``index``, growing the list if needed."""
        if index < 0:
            raise IndexError(f"index {index} out of range")
        if index >= len(self._counts):
            self.resize(index + 1)
        self._counts[index] += amount
        self._total += amount
        return int(self._counts[index])

    def reset(self, index: int):
        """Zero out a single entry."""
        self._check_bounds(index)
        self._total -= int(self._counts[index])
        self._counts[index] = 0

    def resize(self, new_size: int):
        if new_size < 0:
            raise ValueError("Size must be non-negative")
        if new_size == len(self._counts):
            return
        resized = np.zeros(new_size, dtype=np.int64)
        keep = min(new_size, len(self._counts))
        resized[:keep] = self._counts[:keep]
        self._counts = resized
        self._total = int(resized.sum())

    def clear(self):
        self._counts[:] = 0
        self._total = 0

    def get(self, index: int) -> int:
        """Strict read, raises IndexError outside the list."""
        self._check_bounds(index)
        return int(self._counts[index])

    def get_count(self, index: int) -> int:
        """Tolerant read, 0 outside the list."""
        if index < 0 or index >= len(self._counts):
            return 0
        return int(self._counts[index])

    @property
    def total(self) -> int:
        return self._total

    def values(self) -> List[int]:
        return [int(v) for v in self._counts]

    def merge(self, other: "OccurrenceList") -> "OccurrenceList":
        """
        Add another list into this one, element by element.

        The result is as long as the longer of the two lists.
        """
        if len(other._counts) > len(self._counts):
            self.resize(len(other._counts))
        self._counts[: len(other._counts)] += other._counts
        self._total += other._total
        return self

    def copy(self) -> "OccurrenceList":
        return OccurrenceList(self._counts)

    # --- lookups ---
    def first_nonzero(self) -> int:
        hits = np.flatnonzero(self._counts)
        return int(hits[0]) if hits.size else -1

    def last_nonzero(self) -> int:
        hits = np.flatnonzero(self._counts)
        return int(hits[-1]) if hits.size else -1

    def index_of_max(self) -> int:
        return int(np.argmax(self._counts)) if len(self._counts) else -1

    def index_of_min(self) -> int:
        return int(np.argmin(self._counts)) if len(self._counts) else -1

    # --- statistics ---
    @property
    def average(self) -> float:
        if not len(self._counts):
            return 0.0
        return self._total / len(self._counts)

    @property
    def variance(self) -> float:
        """E[x^2] - E[x]^2 over the raw counts."""
        if not len(self._counts):
            return 0.0
        counts = self._counts.astype(np.float64)
        mean = counts.mean()
        return float((counts * counts).mean() - mean * mean)

    def probability_mass(self, index: int) -> float:
        """
        Share of all occurrences found at ``index``.

        An empty list is treated as uniform so callers never divide by zero.
        """
        if index < 0 or index >= len(self._counts):
            return 0.0
        if self._total == 0:
            return 1.0 / len(self._counts)
        return int(self._counts[index]) / self._total

    # --- helpers ---
    def _check_bounds(self, index: int):
        if index < 0 or index >= len(self._counts):
            raise IndexError(f"index {index} out of range for length {len(self._counts)}")

    def __len__(self) -> int:
        return len(self._counts)

    def __iter__(self):
        return iter(self.values())

    def __eq__(self, other) -> bool:
        if not isinstance(other, OccurrenceList):
            return NotImplemented
        return np.array_equal(self._counts, other._counts)

    def __lt__(self, other: "OccurrenceList") -> bool:
        return len(self) < len(other)

    def __repr__(self) -> str:
        return f"OccurrenceList({self.values()})"
