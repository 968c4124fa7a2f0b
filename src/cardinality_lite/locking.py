"""Coarse lock wrapper around a single estimator.

Estimators assume one writer. When several threads have to feed the
same estimator, wrap it here: every method takes the same
threading.Lock. Simple and correct, but every thread serializes on
one contention point. For heavy ingestion prefer one estimator per
thread and merge_estimators() at the end.
"""
from __future__ import annotations

import threading
from collections.abc import Sequence

from cardinality_lite.base import CardinalityEstimator
from cardinality_lite.errors import CardinalityMergeError


class LockedEstimator(CardinalityEstimator):
    """Any CardinalityEstimator behind one lock."""

    def __init__(self, estimator: CardinalityEstimator) -> None:
        self._estimator = estimator
        self._lock = threading.Lock()

    def offer(self, value: object) -> bool:
        with self._lock:
            return self._estimator.offer(value)

    def cardinality(self) -> int:
        with self._lock:
            return self._estimator.cardinality()

    def sizeof(self) -> int:
        with self._lock:
            return self._estimator.sizeof()

    def copy(self) -> LockedEstimator:
        with self._lock:
            return LockedEstimator(self._estimator.copy())

    @classmethod
    def merge_estimators(cls, counters: Sequence[LockedEstimator]) -> LockedEstimator:
        """Merge the wrapped estimators while holding every wrapper's lock.

        Locks are taken in a fixed (id) order so two concurrent merges
        over the same wrappers cannot deadlock.
        """
        counters = list(counters)
        if not counters:
            raise ValueError("At least one counter is required to merge")
        for c in counters:
            if not isinstance(c, LockedEstimator):
                raise CardinalityMergeError(
                    -1, -1, f"Cannot merge {type(c).__name__} into LockedEstimator"
                )
        unique = {id(c): c for c in counters}
        ordered = [unique[key] for key in sorted(unique)]
        for c in ordered:
            c._lock.acquire()
        try:
            inner = [c._estimator for c in counters]
            merged = type(inner[0]).merge_estimators(inner)
        finally:
            for c in reversed(ordered):
                c._lock.release()
        if merged is counters[0]._estimator:
            return counters[0]
        return cls(merged)

    @property
    def estimator(self) -> CardinalityEstimator:
        """The wrapped estimator. Not locked; don't use it concurrently."""
        return self._estimator
