"""Exact distinct counter backed by a set.

Stores every distinct str(value), so memory grows linearly with the
cardinality. Used as the ground truth the approximate estimators are
compared against.
"""
from __future__ import annotations

import sys
from collections.abc import Sequence

from cardinality_lite.base import CardinalityEstimator


class HashCounter(CardinalityEstimator):
    """Exact cardinality via a set of canonical string forms."""

    def __init__(self, values: set[str] | None = None) -> None:
        self._set: set[str] = values if values is not None else set()

    def offer(self, value: object) -> bool:
        key = str(value)
        if key in self._set:
            return False
        self._set.add(key)
        return True

    def cardinality(self) -> int:
        return len(self._set)

    def sizeof(self) -> int:
        # set.__sizeof__ doesn't include the strings themselves
        return sys.getsizeof(self._set) + sum(sys.getsizeof(s) for s in self._set)

    def copy(self) -> HashCounter:
        return HashCounter(set(self._set))

    @classmethod
    def merge_estimators(cls, counters: Sequence[HashCounter]) -> HashCounter:
        """Return a new counter holding the union of every counter's values."""
        counters = list(counters)
        if not counters:
            raise ValueError("At least one counter is required to merge")
        merged: set[str] = set()
        for counter in counters:
            merged |= counter._set
        return cls(merged)
