"""Approximate distinct counting for data streams.

Public API:
    HyperLogLog: harmonic-mean register estimator (~1.04/sqrt(m) error)
    LogLog: arithmetic-mean register estimator (~1.30/sqrt(m) error)
    LinearCounter: bitmap estimator, sized by LinearCounterBuilder
    HashCounter: exact set-backed baseline
    DistinctCountAggregator: per-group COUNT(DISTINCT) over any estimator
    LockedEstimator: one lock around one estimator for shared use
    CardinalityMergeError: merging estimators of different sizes
"""

from cardinality_lite.aggregate import DistinctCountAggregator
from cardinality_lite.base import CardinalityEstimator
from cardinality_lite.errors import CardinalityMergeError
from cardinality_lite.hash_counter import HashCounter
from cardinality_lite.hyperloglog import HyperLogLog
from cardinality_lite.linear import LinearCounter, LinearCounterBuilder
from cardinality_lite.locking import LockedEstimator
from cardinality_lite.loglog import LogLog
from cardinality_lite.register_set import RegisterSet

__all__ = [
    "CardinalityEstimator",
    "CardinalityMergeError",
    "DistinctCountAggregator",
    "HashCounter",
    "HyperLogLog",
    "LinearCounter",
    "LinearCounterBuilder",
    "LockedEstimator",
    "LogLog",
    "RegisterSet",
]
