"""Shared helpers for estimator tests."""
from __future__ import annotations

import random

import pytest

from cardinality_lite.hyperloglog import HyperLogLog
from cardinality_lite.loglog import LogLog


# Fixed seed so shuffled orderings are reproducible across runs
SEED = 42


def make_values(n: int, prefix: str = "item", start: int = 0) -> list[str]:
    return [f"{prefix}-{i}" for i in range(start, start + n)]


def shuffled(values: list[str], seed: int = SEED) -> list[str]:
    out = list(values)
    random.Random(seed).shuffle(out)
    return out


@pytest.fixture(params=[HyperLogLog, LogLog], ids=["hyperloglog", "loglog"])
def loglog_cls(request):
    """Both register-based estimator classes."""
    return request.param
