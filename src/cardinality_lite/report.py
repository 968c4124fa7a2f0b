"""Side-by-side comparison of estimators against the exact count.

Feeds the same values into several estimators plus a HashCounter and
formats estimate, error and memory per estimator as a table for the
terminal.
"""
from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from cardinality_lite.base import CardinalityEstimator
from cardinality_lite.hash_counter import HashCounter


@dataclass(slots=True)
class ComparisonResult:
    """Outcome of one estimator over the shared input."""
    name: str
    estimate: int
    exact: int
    size_bytes: int
    offer_time_ms: float

    @property
    def error_pct(self) -> float:
        if self.exact == 0:
            return 0.0 if self.estimate == 0 else float("inf")
        return abs(self.estimate - self.exact) / self.exact * 100


def compare_estimators(
    values: Iterable[object],
    estimators: Mapping[str, CardinalityEstimator],
) -> list[ComparisonResult]:
    """Offer every value to every estimator and collect the results.

    `values` is materialized once so generators can be passed in.
    """
    items = list(values)
    exact = HashCounter()
    exact.offer_all(items)
    truth = exact.cardinality()

    results = []
    for name, estimator in estimators.items():
        start = time.perf_counter()
        estimator.offer_all(items)
        elapsed_ms = (time.perf_counter() - start) * 1000
        results.append(ComparisonResult(
            name=name,
            estimate=estimator.cardinality(),
            exact=truth,
            size_bytes=estimator.sizeof(),
            offer_time_ms=elapsed_ms,
        ))
    return results


def format_comparison(results: list[ComparisonResult]) -> str:
    """Format comparison results as a fixed-width table."""
    lines = [
        f"{'Estimator':<24} {'Estimate':>12} {'Exact':>12} "
        f"{'Error':>8} {'Bytes':>10} {'Offer (ms)':>11}",
        "-" * 82,
    ]
    for r in results:
        lines.append(
            f"{r.name:<24} {r.estimate:>12,} {r.exact:>12,} "
            f"{r.error_pct:>7.2f}% {r.size_bytes:>10,} {r.offer_time_ms:>11.1f}"
        )
    return "\n".join(lines)
