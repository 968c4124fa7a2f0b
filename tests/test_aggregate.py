"""Tests for grouped distinct counting."""
from __future__ import annotations

import pytest

from cardinality_lite.aggregate import DistinctCountAggregator
from cardinality_lite.errors import CardinalityMergeError
from cardinality_lite.hash_counter import HashCounter
from cardinality_lite.hyperloglog import HyperLogLog
from cardinality_lite.linear import LinearCounterBuilder
from tests.conftest import make_values


DOMAIN_POOL = [
    "api.openai.com", "api.github.com", "api.stripe.com",
    "s3.amazonaws.com", "pypi.org",
]


class TestAggregatorBasics:
    def test_unseen_group(self):
        agg = DistinctCountAggregator()
        assert agg.cardinality("nothing") == 0
        assert len(agg) == 0

    def test_groups_are_independent(self):
        agg = DistinctCountAggregator()
        for value in make_values(100):
            agg.offer("a", value)
        for value in make_values(10):
            agg.offer("b", value)
        assert 90 <= agg.cardinality("a") <= 110
        assert 9 <= agg.cardinality("b") <= 11
        assert set(agg.groups()) == {"a", "b"}
        assert agg.values_offered == 110

    def test_default_factory_is_hyperloglog(self):
        agg = DistinctCountAggregator()
        agg.offer("a", "x")
        assert isinstance(agg.estimator("a"), HyperLogLog)

    def test_offer_reports_modification(self):
        agg = DistinctCountAggregator(HashCounter)
        assert agg.offer("a", "x") is True
        assert agg.offer("a", "x") is False
        assert agg.offer("b", "x") is True

    def test_total_cardinality_exact(self):
        agg = DistinctCountAggregator(HashCounter)
        for i, value in enumerate(make_values(1000)):
            agg.offer(DOMAIN_POOL[i % len(DOMAIN_POOL)], value)
            agg.offer(DOMAIN_POOL[(i + 1) % len(DOMAIN_POOL)], value)
        assert agg.total_cardinality() == 1000
        assert sum(agg.cardinality(d) for d in DOMAIN_POOL) == 2000

    def test_total_cardinality_does_not_mutate_groups(self):
        agg = DistinctCountAggregator(lambda: HyperLogLog(10))
        for value in make_values(300):
            agg.offer("a", value)
        for value in make_values(300, prefix="other"):
            agg.offer("b", value)
        before = agg.cardinality("a")
        total = agg.total_cardinality()
        assert 540 <= total <= 660
        assert agg.cardinality("a") == before

    def test_total_cardinality_empty(self):
        assert DistinctCountAggregator().total_cardinality() == 0

    def test_memory_report(self):
        agg = DistinctCountAggregator(lambda: HyperLogLog(10))
        agg.offer("a", 1)
        agg.offer("b", 2)
        report = agg.memory_report()
        assert report["groups"] == 2
        assert report["estimator_bytes"] == 2 * HyperLogLog(10).sizeof()
        assert report["values_offered"] == 2

    def test_linear_counter_factory(self):
        builder = LinearCounterBuilder.one_percent_error(5000)
        agg = DistinctCountAggregator(builder.build)
        for value in make_values(2000):
            agg.offer("a", value)
        assert 1_900 <= agg.cardinality("a") <= 2_100


class TestAggregatorMerge:
    def test_merge_overlapping_groups(self):
        left = DistinctCountAggregator(HashCounter)
        right = DistinctCountAggregator(HashCounter)
        for value in make_values(100):
            left.offer("a", value)
        for value in make_values(100, start=50):
            right.offer("a", value)
        for value in make_values(20):
            right.offer("c", value)

        left.merge(right)
        assert left.cardinality("a") == 150
        assert left.cardinality("c") == 20
        assert left.values_offered == 220

    def test_merged_groups_are_copies(self):
        left = DistinctCountAggregator(HashCounter)
        right = DistinctCountAggregator(HashCounter)
        right.offer("c", "x")
        left.merge(right)
        left.offer("c", "y")
        assert right.cardinality("c") == 1

    def test_sharded_hyperloglog(self):
        shards = [DistinctCountAggregator(lambda: HyperLogLog(12)) for _ in range(4)]
        for i, value in enumerate(make_values(8000)):
            shards[i % 4].offer("domain", value)
        combined = shards[0]
        for shard in shards[1:]:
            combined.merge(shard)
        assert 7_400 <= combined.cardinality("domain") <= 8_600

    def test_incompatible_groups_fail(self):
        left = DistinctCountAggregator(lambda: HyperLogLog(10))
        right = DistinctCountAggregator(lambda: HyperLogLog(11))
        left.offer("a", 1)
        right.offer("a", 2)
        with pytest.raises(CardinalityMergeError):
            left.merge(right)

    def test_failed_merge_leaves_both_sides_unchanged(self):
        left = DistinctCountAggregator(lambda: HyperLogLog(10))
        for value in make_values(50):
            left.offer("a", value)
        right = DistinctCountAggregator(lambda: HyperLogLog(10))
        right.offer("new", "x")
        right._groups["a"] = HyperLogLog(11)
        right._groups["a"].offer("y")
        before = left.estimator("a").register_values()

        with pytest.raises(CardinalityMergeError):
            left.merge(right)
        assert sorted(left.groups()) == ["a"]
        assert left.estimator("a").register_values() == before
        assert left.values_offered == 50
        assert sorted(right.groups()) == ["a", "new"]
        assert right.cardinality("a") == 1
