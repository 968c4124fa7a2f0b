"""32-bit hashing for estimator input.

Every estimator turns its input into a string with str(), encodes it
as UTF-8 and hashes the bytes to an unsigned 32-bit integer. The
estimators only need the output to be uniform and deterministic, so
we take the first 4 bytes of SHA-256 rather than pulling in a
dedicated non-cryptographic hash.
"""

from __future__ import annotations

import hashlib

WORD_BITS = 32
WORD_MASK = (1 << WORD_BITS) - 1


def hash32(data: bytes) -> int:
    """Hash bytes to an unsigned 32-bit integer (SHA-256 truncated)."""
    digest = hashlib.sha256(data).digest()
    return int.from_bytes(digest[:4], "big")


def canonical_bytes(value: object) -> bytes:
    """The byte form an estimator hashes: str(value) as UTF-8."""
    return str(value).encode("utf-8")


def hash_value(value: object) -> int:
    return hash32(canonical_bytes(value))
