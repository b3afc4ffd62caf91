"""
Character-keyed maps with optional case folding.

A CaseFoldingMap routes every key through a normalization step (lower-case
when case-insensitive) and resolves collisions with a merge strategy that the
owner injects at construction. Iteration is always in character-code order.
"""
from __future__ import annotations

from typing import Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from .occurrence import OccurrenceList

V = TypeVar("V")

MergeFn = Callable[[V, V], V]


def _check_key(c: str):
    if not isinstance(c, str) or len(c) != 1:
        raise ValueError(f"Key must be a single character, got {c!r}")


def _same_entry(a, b) -> bool:
    # Numbers are values, not shared entries; equal counts still need merging.
    return a is b and not isinstance(a, (int, float))


class CaseFoldingMap(Generic[V]):
    """
    Map from a single character to a value.

    Supports:
    - Case-insensitive access (keys folded to lower case)
    - Lazy folding of stored upper-case keys via compact()
    - Merging another map through the injected merge strategy
    """

    def __init__(self, case_sensitive: bool = False, merge: Optional[MergeFn] = None):
        """
        Args:
            case_sensitive: When False, 'A' and 'a' address the same entry
            merge: Called as merge(existing, incoming) on collisions and must
                return the value to keep. Without one, collisions raise.
        """
        self._data: Dict[str, V] = {}
        self._case_sensitive = case_sensitive
        self._merge = merge

    @property
    def case_sensitive(self) -> bool:
        return self._case_sensitive

    @case_sensitive.setter
    def case_sensitive(self, active: bool):
        # Stored keys are left alone; call compact() to fold them.
        self._case_sensitive = active

    def key(self, c: str) -> str:
        _check_key(c)
        return c if self._case_sensitive else c.lower()

    def merge_values(self, old: V, new: V) -> V:
        if self._merge is None:
            raise ArithmeticError(
                f"{type(self).__name__} has no merge strategy for colliding values"
            )
        return self._merge(old, new)

    # --- access ---
    def get(self, c: str, default: Optional[V] = None) -> Optional[V]:
        return self._data.get(self.key(c), default)

    def put(self, c: str, value: V) -> Optional[V]:
        k = self.key(c)
        previous = self._data.get(k)
        self._data[k] = value
        return previous

    def raw_put(self, c: str, value: V):
        """Store under ``c`` exactly as given, bypassing case folding."""
        _check_key(c)
        self._data[c] = value

    def remove(self, c: str) -> Optional[V]:
        return self._data.pop(self.key(c), None)

    def clear(self):
        self._data.clear()

    def __getitem__(self, c: str) -> V:
        return self._data[self.key(c)]

    def __setitem__(self, c: str, value: V):
        self.put(c, value)

    def __delitem__(self, c: str):
        del self._data[self.key(c)]

    def __contains__(self, c) -> bool:
        if not isinstance(c, str) or len(c) != 1:
            return False
        return self.key(c) in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def keys(self) -> List[str]:
        return sorted(self._data)

    def values(self) -> List[V]:
        return [self._data[k] for k in self.keys()]

    def items(self) -> List[Tuple[str, V]]:
        return [(k, self._data[k]) for k in self.keys()]

    def alphabet(self) -> List[str]:
        return self.keys()

    def to_dict(self) -> Dict[str, V]:
        return {k: v for k, v in self.items()}

    # --- compaction ---
    def compact(self):
        """
        Fold every upper-case key into its lower-case sibling.

        When both exist and hold different objects the merge strategy decides
        what is kept under the lower-case key. The upper-case entry is always
        removed.
        """
        upper = [(k, v) for k, v in self._data.items() if k.isupper()]
        for high, value in upper:
            low = high.lower()
            existing = self._data.get(low)
            if existing is None:
                self._data[low] = value
            elif not _same_entry(existing, value):
                self._data[low] = self.merge_values(existing, value)
            del self._data[high]

    def merge_all(self, other: "CaseFoldingMap[V]") -> "CaseFoldingMap[V]":
        """
        Add every entry of ``other``; collisions go through the merge strategy.

        Values copied in are copies when they support it, so later merges into
        this map never reach back into ``other``.
        """
        for c, value in other.items():
            existing = self.get(c)
            if existing is None:
                self.put(c, value.copy() if hasattr(value, "copy") else value)
            elif not _same_entry(existing, value):
                self.put(c, self.merge_values(existing, value))
        return self

    def copy(self) -> "CaseFoldingMap[V]":
        clone = type(self).__new__(type(self))
        clone._data = dict(self._data)
        clone._case_sensitive = self._case_sensitive
        clone._merge = self._merge
        return clone

    def __eq__(self, other) -> bool:
        if not isinstance(other, CaseFoldingMap):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()})"


def _add(old, new):
    return old + new


def _union(old: OccurrenceList, new: OccurrenceList) -> OccurrenceList:
    return old.merge(new)


class DecimalCharMap(CaseFoldingMap[float]):
    """Character → float weights, merged by addition."""

    def __init__(self, case_sensitive: bool = False):
        super().__init__(case_sensitive, merge=_add)

    def increment(self, c: str, amount: float) -> float:
        value = self.get(c, 0.0) + amount
        self.put(c, value)
        return value

    def total(self) -> float:
        return float(sum(self._data.values()))


class IntegerCharMap(CaseFoldingMap[int]):
    """Character → int counts, merged by addition."""

    def __init__(self, case_sensitive: bool = False):
        super().__init__(case_sensitive, merge=_add)

    def increment(self, c: str, amount: int = 1) -> int:
        value = self.get(c, 0) + amount
        self.put(c, value)
        return value

    def total(self) -> int:
        return int(sum(self._data.values()))

    def to_decimal(self) -> DecimalCharMap:
        result = DecimalCharMap(self.case_sensitive)
        for c, count in self.items():
            result.raw_put(c, float(count))
        return result


class OccurrenceMap(CaseFoldingMap[OccurrenceList]):
    """Character → OccurrenceList, merged by element-wise addition."""

    def __init__(self, case_sensitive: bool = False):
        super().__init__(case_sensitive, merge=_union)

    def ensure(self, c: str) -> OccurrenceList:
        """Fetch the list for ``c``, creating an empty one if needed."""
        existing = self.get(c)
        if existing is None:
            existing = OccurrenceList()
            self.put(c, existing)
        return existing


def _illegal_percentage_merge(old: float, new: float) -> float:
    # Pairwise addition of percentages needs a full rebalance afterwards.
    raise ArithmeticError("Illegal percentages merge")


class RecommendationMap(CaseFoldingMap[float]):
    """Next-character weights. Merging two of these is not allowed."""

    def __init__(self, case_sensitive: bool = False):
        super().__init__(case_sensitive, merge=_illegal_percentage_merge)

    def total(self) -> float:
        return float(sum(self._data.values()))


# --- weight map helpers ---
def rebalance_map(weights: CaseFoldingMap[float]) -> CaseFoldingMap[float]:
    """
    Scale values in place so they sum to 1.0.

    Relative proportions are preserved. A map whose values sum to zero is
    returned unchanged.
    """
    total = sum(weights.values())
    if total <= 0:
        return weights
    for c, value in weights.items():
        weights.raw_put(c, value / total)
    return weights


def trim_map(weights: CaseFoldingMap, threshold: float) -> int:
    """
    Remove entries worth at most ``threshold`` of the map's total.

    Args:
        weights: Map to trim in place
        threshold: Proportion of the total, strictly between 0 and 1

    Returns:
        Number of entries removed
    """
    if threshold <= 0.0 or threshold >= 1.0:
        raise ValueError("Threshold must be between 0.0 and 1.0")

    cutoff = threshold * sum(weights.values())
    trash = [c for c, value in weights.items() if value <= cutoff]
    for c in trash:
        weights._data.pop(c, None)
    return len(trash)


def balanced_map(counts: CaseFoldingMap[int]) -> DecimalCharMap:
    """New DecimalCharMap holding each count's share of the total."""
    result = DecimalCharMap(counts.case_sensitive)
    total = sum(counts.values())
    if total <= 0:
        return result
    for c, count in counts.items():
        result.raw_put(c, count / total)
    return result
