"""Tests for the exact HashCounter baseline and the hashing helpers."""
from __future__ import annotations

import pytest

from cardinality_lite.hash_counter import HashCounter
from cardinality_lite.hashing import canonical_bytes, hash32, hash_value
from tests.conftest import make_values


class TestHashCounter:
    def test_empty(self):
        assert HashCounter().cardinality() == 0

    def test_exact(self):
        hc = HashCounter()
        hc.offer_all(make_values(1234))
        hc.offer_all(make_values(1234))
        assert hc.cardinality() == 1234

    def test_offer_reports_new_values(self):
        hc = HashCounter()
        assert hc.offer("a") is True
        assert hc.offer("a") is False

    def test_values_compared_as_strings(self):
        hc = HashCounter()
        hc.offer(7)
        assert hc.offer("7") is False

    def test_sizeof_grows(self):
        hc = HashCounter()
        empty = hc.sizeof()
        hc.offer_all(make_values(1000))
        assert hc.sizeof() > empty

    def test_merge_is_union(self):
        a = HashCounter()
        b = HashCounter()
        a.offer_all(make_values(500))
        b.offer_all(make_values(500, start=250))
        merged = HashCounter.merge_estimators([a, b])
        assert merged.cardinality() == 750
        assert a.cardinality() == 500
        assert merged is not a

    def test_empty_merge_fails(self):
        with pytest.raises(ValueError):
            HashCounter.merge_estimators([])


class TestHashing:
    def test_canonical_form(self):
        assert canonical_bytes(42) == b"42"
        assert canonical_bytes("café") == "café".encode("utf-8")

    def test_deterministic_32_bit(self):
        for value in make_values(200):
            h = hash_value(value)
            assert 0 <= h < 2 ** 32
            assert h == hash32(value.encode("utf-8"))

    def test_spreads_top_bits(self):
        buckets = {hash_value(v) >> 28 for v in make_values(500)}
        assert len(buckets) == 16
