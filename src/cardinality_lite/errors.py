"""Errors raised by cardinality estimators."""
from __future__ import annotations


class CardinalityMergeError(Exception):
    """Raised when estimators with different configurations are merged.

    Carries the register (or bit) count of the first estimator and the
    count of the first estimator that did not match it.
    """

    def __init__(self, expected: int, actual: int, message: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            message
            or f"Cannot merge counters of different sizes: {expected} vs {actual}"
        )
