"""Shared machinery for LogLog-family estimators.

Each offered value is hashed to 32 bits. The top k bits pick one of
m = 2^k registers; the remaining 32 - k bits form the tail. The rank
of the tail is the position of its first 1-bit (leading zeros + 1).
Each register keeps the largest rank seen for its bucket, which is a
noisy estimate of log2 of the number of distinct values that landed
in that bucket. HyperLogLog and LogLog differ only in how they
aggregate the m registers into one raw estimate, so subclasses
provide two hooks:

    _update_statistics(rank, j)   store a larger rank in register j
    _raw_estimate()               aggregate registers into E

and the base applies the same range corrections to both:

    E <= 2.5 m            linear counting on the empty registers
    E <= 2^32 / 30        no correction
    otherwise             hash-collision correction near 2^32

References:
    Durand & Flajolet, "Loglog Counting of Large Cardinalities", 2003.
    Flajolet et al., "HyperLogLog: the analysis of a near-optimal
    cardinality estimation algorithm", 2007.
"""

from __future__ import annotations

import copy
import logging
import math
from abc import abstractmethod
from collections.abc import Sequence
from typing import TypeVar

from cardinality_lite.base import CardinalityEstimator
from cardinality_lite.errors import CardinalityMergeError
from cardinality_lite.hashing import WORD_BITS, WORD_MASK, hash_value
from cardinality_lite.register_set import RegisterSet

log = logging.getLogger(__name__)

MIN_K = 4
MAX_K = WORD_BITS - 1
POWER_2_32 = 2.0 ** 32

L = TypeVar("L", bound="AbstractLogLog")


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


class AbstractLogLog(CardinalityEstimator):
    """Base class for register-based estimators.

    Parameters:
        k: log2 of the register count, 4..31. Higher k means more
           registers, more memory and a smaller standard error.
    """

    # Square of the standard error constant: rse = sqrt(_RSE_SQUARED / m)
    _RSE_SQUARED: float = 1.0

    def __init__(self, k: int) -> None:
        if not (MIN_K <= k <= MAX_K):
            raise ValueError(
                f"Invalid k passed in, k is {k}. k must be between {MIN_K} and {MAX_K}"
            )
        self._k = k
        self._m = 1 << k
        self._registers = RegisterSet(self._m)
        log.debug("%s created with k=%d (m=%d)", type(self).__name__, k, self._m)

    @classmethod
    def required_k(cls, rse: float) -> int:
        """Smallest k whose theoretical standard error is at most `rse`."""
        if not (0.0 < rse < 1.0):
            raise ValueError(f"rse must be in (0, 1), got {rse}")
        return int(math.ceil(
            (math.log(cls._RSE_SQUARED) - 2.0 * math.log(rse)) / math.log(2.0)
        ))

    @classmethod
    def from_rse(cls: type[L], rse: float) -> L:
        """Build an estimator sized for a target relative standard error.

        For a 1% standard error pass 0.01. The observed error will not be
        exactly `rse` (it is a theoretical bound), but it tracks closely.
        """
        return cls(cls.required_k(rse))

    @property
    def k(self) -> int:
        return self._k

    @property
    def m(self) -> int:
        """Number of registers (2^k)."""
        return self._m

    def register_values(self) -> list[int]:
        """Snapshot of every register value in index order."""
        return list(self._registers)

    def offer(self, value: object) -> bool:
        h = hash_value(value)
        # Top k bits select the register
        j = h >> (WORD_BITS - self._k)
        # Remaining bits, shifted to the top of the word
        tail = (h << self._k) & WORD_MASK
        if tail:
            r = WORD_BITS - tail.bit_length() + 1
        else:
            r = WORD_BITS - self._k + 1
        if r > self._registers.get(j):
            self._update_statistics(r, j)
            return True
        return False

    def cardinality(self) -> int:
        return self._corrected_estimate(self._raw_estimate())

    def sizeof(self) -> int:
        return self._registers.bucket_count * 4

    def relative_standard_error(self) -> float:
        """Theoretical standard error for this register count."""
        return math.sqrt(self._RSE_SQUARED / self._m)

    def copy(self: L) -> L:
        clone = copy.copy(self)
        clone._registers = self._registers.copy()
        return clone

    @abstractmethod
    def _update_statistics(self, rank: int, j: int) -> None:
        """Store `rank` in register j, which currently holds a smaller value."""
        ...

    @abstractmethod
    def _raw_estimate(self) -> float:
        """Aggregate the registers into an uncorrected estimate."""
        ...

    def _corrected_estimate(self, estimate: float) -> int:
        """Apply small- and large-range corrections to a raw estimate.

        LogLog as published only has the small-range correction, but
        nothing stops the large-range one from applying too, so both
        estimators get both.
        """
        m = self._m
        if estimate <= 2.5 * m:
            zeros = sum(1 for r in self._registers if r == 0)
            if zeros > 0:
                return round_half_up(m * math.log(m / zeros))
            return round_half_up(estimate)
        if estimate <= POWER_2_32 / 30.0:
            return round_half_up(estimate)
        if estimate >= POWER_2_32:
            # Hash space saturated, the correction has no finite value
            return round_half_up(estimate)
        return round_half_up(-POWER_2_32 * math.log(1.0 - estimate / POWER_2_32))

    @classmethod
    def _merge_register_sets(cls: type[L], counters: Sequence[L]) -> L:
        """Fold every counter into the first one, register-wise max.

        All counters are validated before any register changes, so a
        failed merge leaves every operand untouched. The first counter
        is mutated and returned.
        """
        counters = list(counters)
        if not counters:
            raise ValueError("At least one counter is required to merge")
        base = counters[0]
        for other in counters:
            if not isinstance(other, cls) or type(other) is not type(base):
                raise CardinalityMergeError(
                    base.m,
                    getattr(other, "m", -1),
                    f"Cannot merge {type(other).__name__} into {type(base).__name__}",
                )
            if other.m != base.m:
                raise CardinalityMergeError(base.m, other.m)

        others = [c._registers for c in counters[1:] if c is not base]
        if others:
            for j, values in enumerate(zip(*others)):
                best = max(values)
                if best > base._registers.get(j):
                    base._update_statistics(best, j)
        log.debug(
            "Merged %d %s counters (m=%d)", len(counters), cls.__name__, base.m
        )
        return base

    def __repr__(self) -> str:
        return f"{type(self).__name__}(k={self._k})"
