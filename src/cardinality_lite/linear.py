"""Linear (bitmap) counting.

Each value hashes to one bit of a size-bit bitmap. After n distinct
values the expected fraction of unset bits is about e^(-n/size), so
the maximum-likelihood estimate is

    n ~= size * ln(size / unset_bits)

Accurate while the bitmap is far from full, which is why the builder
sizes it from the largest cardinality you expect to see. Unlike the
LogLog family the bitmap must grow with the expected cardinality,
roughly linearly past a few hundred thousand.

References:
    Whang, Vander-Zanden & Taylor, "A Linear-Time Probabilistic
    Counting Algorithm for Database Applications", 1990.
"""

from __future__ import annotations

import bisect
import logging
import math
from collections.abc import Sequence

from cardinality_lite.base import CardinalityEstimator
from cardinality_lite.errors import CardinalityMergeError
from cardinality_lite.hashing import hash_value
from cardinality_lite.loglog_base import round_half_up

log = logging.getLogger(__name__)


def _count_unset(bits: bytearray) -> int:
    set_bits = 0
    for byte in bits:
        set_bits += bin(byte).count("1")
    return len(bits) * 8 - set_bits


class LinearCounter(CardinalityEstimator):
    """Bitmap cardinality estimator.

    Parameters:
        byte_length: Size of the bitmap in bytes (size = 8 * byte_length bits).

    Use LinearCounterBuilder.one_percent_error(max_cardinality) to pick
    byte_length for a 1% error at a given cardinality.
    """

    def __init__(self, byte_length: int) -> None:
        if byte_length <= 0:
            raise ValueError(f"byte_length must be positive, got {byte_length}")
        self._bits = bytearray(byte_length)
        self._size = 8 * byte_length
        self._count = self._size
        log.debug("LinearCounter created with %d bits", self._size)

    @classmethod
    def _from_bitmap(cls, bits: bytearray) -> LinearCounter:
        counter = cls.__new__(cls)
        counter._bits = bits
        counter._size = 8 * len(bits)
        counter._count = _count_unset(bits)
        return counter

    @property
    def size(self) -> int:
        """Bitmap size in bits."""
        return self._size

    @property
    def unset_bits(self) -> int:
        return self._count

    def fill_ratio(self) -> float:
        """Fraction of bits that are set."""
        return (self._size - self._count) / self._size

    def offer(self, value: object) -> bool:
        bit = hash_value(value) % self._size
        idx = bit >> 3
        mask = 1 << (bit & 7)
        if self._bits[idx] & mask:
            return False
        self._bits[idx] |= mask
        self._count -= 1
        return True

    def cardinality(self) -> int:
        count = self._count
        if count == 0:
            # ln(size / 0) is undefined; estimate as if one bit were still unset
            log.warning(
                "LinearCounter bitmap saturated (%d bits), estimate is a lower bound",
                self._size,
            )
            count = 1
        return round_half_up(self._size * math.log(self._size / count))

    def sizeof(self) -> int:
        return len(self._bits)

    def copy(self) -> LinearCounter:
        return type(self)._from_bitmap(bytearray(self._bits))

    @classmethod
    def merge_estimators(cls, counters: Sequence[LinearCounter]) -> LinearCounter:
        """Return a new counter over the OR of all bitmaps.

        Every counter must have the same bitmap size. The operands are
        not modified.
        """
        counters = list(counters)
        if not counters:
            raise ValueError("At least one counter is required to merge")
        size = counters[0].size
        for other in counters:
            if not isinstance(other, LinearCounter):
                raise CardinalityMergeError(
                    size,
                    -1,
                    f"Cannot merge {type(other).__name__} into LinearCounter",
                )
            if other.size != size:
                raise CardinalityMergeError(size, other.size)

        merged = bytearray(counters[0]._bits)
        for other in counters[1:]:
            for i, byte in enumerate(other._bits):
                merged[i] |= byte
        log.debug("Merged %d LinearCounters (%d bits)", len(counters), size)
        return cls._from_bitmap(merged)

    def __repr__(self) -> str:
        return f"LinearCounter(byte_length={len(self._bits)})"


# Bits needed for a 1% standard error at a given maximum cardinality,
# from calibration runs. Sorted by cardinality.
ONE_PERCENT_ERROR: tuple[tuple[int, int], ...] = (
    (100, 5034),
    (200, 5067),
    (300, 5100),
    (400, 5133),
    (500, 5166),
    (600, 5199),
    (700, 5231),
    (800, 5264),
    (900, 5296),
    (1000, 5329),
    (2000, 5647),
    (3000, 5957),
    (4000, 6260),
    (5000, 6556),
    (6000, 6847),
    (7000, 7132),
    (8000, 7412),
    (9000, 7688),
    (10000, 7960),
    (20000, 10506),
    (30000, 12839),
    (40000, 15036),
    (50000, 17134),
    (60000, 19156),
    (70000, 21117),
    (80000, 23029),
    (90000, 24897),
    (100000, 26729),
    (200000, 43710),
    (300000, 59264),
    (400000, 73999),
    (500000, 88175),
    (600000, 101932),
    (700000, 115359),
    (800000, 128514),
    (900000, 141441),
    (1000000, 154171),
    (2000000, 274328),
    (3000000, 386798),
    (4000000, 494794),
    (5000000, 599692),
    (6000000, 702246),
    (7000000, 802931),
    (8000000, 902069),
    (9000000, 999894),
    (10000000, 1096582),
    (50000000, 4584297),
    (100000000, 8571013),
    (120000000, 10112529),
)
_ONE_PERCENT_KEYS = tuple(card for card, _ in ONE_PERCENT_ERROR)

MIN_CARDINALITY = ONE_PERCENT_ERROR[0][0]
MAX_CARDINALITY = ONE_PERCENT_ERROR[-1][0]
# Past the table, bits needed grows at roughly max_cardinality / 11
ABOVE_MAX_FACTOR = 11


def linear_interpolation(x: int, x0: int, y0: int, x1: int, y1: int) -> int:
    """y at x on the line through (x0, y0) and (x1, y1), rounded up."""
    return int(math.ceil(y0 + ((x - x0) * y1 - (x - x0) * y0) / (x1 - x0)))


class LinearCounterBuilder:
    """Builds LinearCounters of a fixed byte length.

    Parameters:
        byte_length: Bitmap size in bytes for every counter built.
    """

    def __init__(self, byte_length: int) -> None:
        self._byte_length = byte_length

    @property
    def byte_length(self) -> int:
        return self._byte_length

    def build(self) -> LinearCounter:
        return LinearCounter(self._byte_length)

    @classmethod
    def one_percent_error(cls, max_cardinality: int) -> LinearCounterBuilder:
        """Builder sized for a 1% error up to `max_cardinality` distinct values."""
        if max_cardinality <= 0:
            raise ValueError(
                f"Max cardinality must be a positive integer, given {max_cardinality}"
            )

        if max_cardinality <= MIN_CARDINALITY:
            length = ONE_PERCENT_ERROR[0][1]
        elif max_cardinality >= MAX_CARDINALITY:
            length = max_cardinality // ABOVE_MAX_FACTOR
        else:
            # Floor entry and the one after it bracket max_cardinality
            i = bisect.bisect_right(_ONE_PERCENT_KEYS, max_cardinality) - 1
            x0, y0 = ONE_PERCENT_ERROR[i]
            x1, y1 = ONE_PERCENT_ERROR[i + 1]
            length = linear_interpolation(max_cardinality, x0, y0, x1, y1)

        byte_length = int(math.ceil(length / 8))
        log.debug(
            "LinearCounterBuilder sized %d bytes for max cardinality %d",
            byte_length, max_cardinality,
        )
        return cls(byte_length)
