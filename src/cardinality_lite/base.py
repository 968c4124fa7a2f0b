"""Abstract base for cardinality estimators.

HyperLogLog, LogLog, LinearCounter and the exact HashCounter all
implement this interface, so calling code (the aggregator, the CLI,
the comparison report) can swap one for another without changes.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import TypeVar

E = TypeVar("E", bound="CardinalityEstimator")


class CardinalityEstimator(ABC):
    """Interface every cardinality estimator implements."""

    @abstractmethod
    def offer(self, value: object) -> bool:
        """Add a value (hashed via str()). True if the state changed."""
        ...

    @abstractmethod
    def cardinality(self) -> int:
        """Current estimate of the number of distinct values offered."""
        ...

    @abstractmethod
    def sizeof(self) -> int:
        """Bytes used by the packed state, excluding object overhead."""
        ...

    @abstractmethod
    def copy(self: E) -> E:
        """Independent estimator with the same configuration and state."""
        ...

    @classmethod
    @abstractmethod
    def merge_estimators(cls: type[E], counters: Sequence[E]) -> E:
        """Union of same-configuration estimators.

        Raises ValueError for an empty sequence and CardinalityMergeError
        if the configurations differ; nothing is modified in that case.
        """
        ...

    def offer_all(self, values: Iterable[object]) -> bool:
        """Offer every value. True if any of them changed the state."""
        modified = False
        for value in values:
            if self.offer(value):
                modified = True
        return modified
