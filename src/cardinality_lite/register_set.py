"""Packed array of 5-bit registers.

A 32-bit hash never needs a rank above 31, so each register fits in
5 bits. Storing one register per byte wastes 3 bits each; storing
them in 32-bit words gets 6 registers per word and wastes only 2 bits
per word.

Layout of one word (bit 0 on the right):

    [xx][r5][r4][r3][r2][r1][r0]
     2   5   5   5   5   5   5

Register i lives in word i // 6 at shift 5 * (i % 6).
"""

from __future__ import annotations

import array
from collections.abc import Iterator

BITS_PER_REGISTER = 5
REGISTERS_PER_BUCKET = 6
REGISTER_MASK = 0x1F


class RegisterSet:
    """Fixed-size sequence of 5-bit registers backed by uint32 words.

    Parameters:
        count: Number of registers. Fixed for the lifetime of the set.
        buckets: Optional existing backing words to wrap (not copied).
    """

    def __init__(self, count: int, buckets: array.array | None = None) -> None:
        if count < 0:
            raise ValueError(f"Register count must be non-negative, got {count}")
        self._count = count
        if buckets is None:
            # ceil(count / 6) words plus one spare word
            num_buckets = -(-count // REGISTERS_PER_BUCKET) + 1
            buckets = array.array("I")
            buckets.frombytes(bytes(buckets.itemsize * num_buckets))
        self._buckets = buckets

    def _check(self, position: int) -> None:
        if not (0 <= position < self._count):
            raise IndexError(
                f"Register position {position} out of range [0, {self._count})"
            )

    def set(self, position: int, value: int) -> None:
        """Overwrite the register at `position` with the low 5 bits of `value`."""
        self._check(position)
        bucket = position // REGISTERS_PER_BUCKET
        shift = BITS_PER_REGISTER * (position - bucket * REGISTERS_PER_BUCKET)
        word = self._buckets[bucket] & ~(REGISTER_MASK << shift)
        self._buckets[bucket] = word | ((value & REGISTER_MASK) << shift)

    def get(self, position: int) -> int:
        self._check(position)
        bucket = position // REGISTERS_PER_BUCKET
        shift = BITS_PER_REGISTER * (position - bucket * REGISTERS_PER_BUCKET)
        return (self._buckets[bucket] >> shift) & REGISTER_MASK

    @property
    def count(self) -> int:
        """Number of registers."""
        return self._count

    @property
    def bucket_count(self) -> int:
        """Number of backing 32-bit words."""
        return len(self._buckets)

    @property
    def buckets(self) -> array.array:
        return self._buckets

    def copy(self) -> RegisterSet:
        return RegisterSet(self._count, array.array("I", self._buckets))

    def __len__(self) -> int:
        return self._count

    def __getitem__(self, position: int) -> int:
        return self.get(position)

    def __setitem__(self, position: int, value: int) -> None:
        self.set(position, value)

    def __iter__(self) -> Iterator[int]:
        # Walk word by word so each word is unpacked once
        remaining = self._count
        for word in self._buckets:
            if remaining <= 0:
                return
            for _ in range(min(REGISTERS_PER_BUCKET, remaining)):
                yield word & REGISTER_MASK
                word >>= BITS_PER_REGISTER
            remaining -= REGISTERS_PER_BUCKET

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegisterSet):
            return NotImplemented
        return self._count == other._count and list(self) == list(other)

    def __repr__(self) -> str:
        return f"RegisterSet(count={self._count}, buckets={len(self._buckets)})"
