"""Grouped approximate COUNT(DISTINCT ...).

Keeps one estimator per group key, created on first use:

    SELECT group, COUNT(DISTINCT value) FROM stream GROUP BY group

An exact answer needs a set per group that grows with the data. Here
each group costs a fixed number of bytes (whatever the estimator
factory builds) no matter how many values pass through.

Aggregators built with the same factory can be merged, so a stream
can be split across workers, aggregated per worker and combined at
the end.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterator

from cardinality_lite.base import CardinalityEstimator
from cardinality_lite.hyperloglog import HyperLogLog

log = logging.getLogger(__name__)

DEFAULT_K = 11


def _default_factory() -> CardinalityEstimator:
    return HyperLogLog(DEFAULT_K)


class DistinctCountAggregator:
    """Per-group distinct counting.

    Parameters:
        factory: Zero-argument callable returning a fresh estimator for a
            new group (default HyperLogLog with k=11). Every estimator it
            builds must have the same configuration for merge() to work.
    """

    def __init__(
        self,
        factory: Callable[[], CardinalityEstimator] | None = None,
    ) -> None:
        self._factory = factory or _default_factory
        self._groups: dict[Hashable, CardinalityEstimator] = {}
        self._values_offered = 0

    def offer(self, group: Hashable, value: object) -> bool:
        """Count `value` under `group`. True if that group's state changed."""
        estimator = self._groups.get(group)
        if estimator is None:
            estimator = self._factory()
            self._groups[group] = estimator
        self._values_offered += 1
        return estimator.offer(value)

    def cardinality(self, group: Hashable) -> int:
        """Estimated distinct values for `group`. 0 if never seen."""
        estimator = self._groups.get(group)
        if estimator is None:
            return 0
        return estimator.cardinality()

    def groups(self) -> Iterator[Hashable]:
        return iter(self._groups)

    def estimator(self, group: Hashable) -> CardinalityEstimator | None:
        return self._groups.get(group)

    def total_cardinality(self) -> int:
        """Estimated distinct values across every group.

        Merges copies of the per-group estimators, so the groups
        themselves are not modified.
        """
        if not self._groups:
            return 0
        copies = [e.copy() for e in self._groups.values()]
        merged = type(copies[0]).merge_estimators(copies)
        return merged.cardinality()

    def merge(self, other: DistinctCountAggregator) -> None:
        """Fold another aggregator into this one, group by group.

        Groups only present in `other` are copied in. Raises
        CardinalityMergeError if two estimators for the same group have
        different configurations; in that case neither aggregator changes.
        """
        # Merge into copies first so a failure leaves self untouched
        staged: dict[Hashable, CardinalityEstimator] = {}
        for group, theirs in other._groups.items():
            mine = self._groups.get(group)
            if mine is None:
                staged[group] = theirs.copy()
            else:
                staged[group] = type(mine).merge_estimators([mine.copy(), theirs])
        self._groups.update(staged)
        self._values_offered += other._values_offered
        log.debug(
            "Merged aggregator with %d groups, now %d groups",
            len(other._groups), len(self._groups),
        )

    @property
    def values_offered(self) -> int:
        return self._values_offered

    def __len__(self) -> int:
        return len(self._groups)

    def memory_report(self) -> dict[str, int]:
        """Report packed estimator memory across all groups."""
        total = sum(e.sizeof() for e in self._groups.values())
        return {
            "groups": len(self._groups),
            "estimator_bytes": total,
            "values_offered": self._values_offered,
        }
