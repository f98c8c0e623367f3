"""Tests for credential pools and selection strategies."""

from __future__ import annotations

from dataclasses import replace

import pytest

from frugal.core.credentials.pool import CredentialPool, PoolConfig
from frugal.core.credentials.strategies import (
    FirstEligibleStrategy,
    LeastRecentlyUsedStrategy,
    get_strategy,
)
from tests.factories import START, make_pool


@pytest.mark.unit
class TestPoolMutations:
    def test_add_appends_enabled_record(self) -> None:
        pool = CredentialPool("groq")
        assert pool.add("gsk_aaaaaaaaaaaa", "first", START)

        record = pool.find("gsk_aaaaaaaaaaaa")
        assert record is not None
        assert record.enabled
        assert record.usage_count == 0
        assert record.added_at == START

    def test_duplicate_leaves_pool_unchanged(self) -> None:
        pool = make_pool(usage={"gsk_aaaaaaaaaaaa": 7, "gsk_bbbbbbbbbbbb": 2})
        pool.records[0].last_used_at = START + 5
        pool.set_enabled("gsk_aaaaaaaaaaaa", False)
        before = [replace(r) for r in pool.records]

        assert not pool.add("gsk_aaaaaaaaaaaa", "again", START + 10)

        assert pool.records == before
        record = pool.records[0]
        assert record.secret == "gsk_aaaaaaaaaaaa"
        assert record.usage_count == 7
        assert record.label == "gsk_aaaaaaaaaaaa"
        assert record.added_at == START
        assert record.last_used_at == START + 5
        assert record.enabled is False

    def test_remove_and_toggle_unknown(self) -> None:
        pool = make_pool(usage={"gsk_aaaaaaaaaaaa": 0})
        assert not pool.remove("nope")
        assert not pool.set_enabled("nope", False)
        assert pool.remove("gsk_aaaaaaaaaaaa")
        assert len(pool) == 0

    def test_reset_zeroes_every_counter(self) -> None:
        pool = make_pool(usage={"a": 5, "b": 100})
        pool.set_enabled("a", False)

        pool.reset_usage()

        assert [r.usage_count for r in pool.records] == [0, 0]

    def test_repr_masks_secret(self) -> None:
        pool = make_pool(usage={"gsk_supersecretvalue1234": 0})
        text = repr(pool.records[0])
        assert "supersecret" not in text
        assert "gsk_...1234" in text

    @pytest.mark.parametrize(
        "kwargs",
        [{"requests_per_credential": 0}, {"rotation_period_seconds": 0}],
    )
    def test_invalid_config(self, kwargs) -> None:
        with pytest.raises(ValueError):
            PoolConfig(**kwargs)


@pytest.mark.unit
class TestUsability:
    def test_saturated_and_disabled_are_not_usable(self) -> None:
        pool = make_pool(limit=100, usage={"full": 100, "off": 0, "ok": 99})
        pool.set_enabled("off", False)

        assert [r.secret for r in pool.usable()] == ["ok"]

    def test_stats_masks_and_counts(self) -> None:
        pool = make_pool(limit=10, usage={"gsk_0123456789abcdef": 10, "gsk_fedcba9876543210": 2})
        stats = pool.stats()

        assert stats["total_keys"] == 2
        assert stats["enabled_keys"] == 2
        assert stats["usable_keys"] == 1
        assert stats["total_requests"] == 12
        assert stats["config"]["requests_per_credential"] == 10
        assert [k["id"] for k in stats["keys"]] == ["gsk_...cdef", "gsk_...3210"]
        assert "gsk_0123456789abcdef" not in str(stats)


@pytest.mark.unit
class TestFirstEligible:
    def test_skips_saturated_credential(self) -> None:
        pool = make_pool(limit=100, usage={"A": 100, "B": 0})
        record = FirstEligibleStrategy().choose(pool)
        assert record is not None
        assert record.secret == "B"

    def test_prefers_earliest_usable(self) -> None:
        pool = make_pool(usage={"A": 50, "B": 0})
        assert FirstEligibleStrategy().choose(pool).secret == "A"

    def test_none_when_exhausted(self) -> None:
        pool = make_pool(limit=1, usage={"A": 1, "B": 1})
        assert FirstEligibleStrategy().choose(pool) is None

    def test_usage_never_exceeds_limit(self) -> None:
        pool = make_pool(limit=3, usage={"A": 0, "B": 0})
        strategy = FirstEligibleStrategy()
        charged = 0
        while (record := strategy.choose(pool)) is not None:
            pool.record_use(record, START + charged)
            charged += 1
        assert charged == 6
        assert all(r.usage_count == 3 for r in pool.records)


@pytest.mark.unit
class TestLeastRecentlyUsed:
    def test_never_used_first(self) -> None:
        pool = make_pool(usage={"A": 1, "B": 0})
        pool.records[0].last_used_at = START
        assert LeastRecentlyUsedStrategy().choose(pool).secret == "B"

    def test_rotates_across_pool(self) -> None:
        pool = make_pool(usage={"A": 0, "B": 0, "C": 0})
        strategy = LeastRecentlyUsedStrategy()
        order = []
        for i in range(6):
            record = strategy.choose(pool)
            pool.record_use(record, START + i)
            order.append(record.secret)
        assert order == ["A", "B", "C", "A", "B", "C"]

    def test_skips_saturated(self) -> None:
        pool = make_pool(limit=1, usage={"A": 1, "B": 0})
        assert LeastRecentlyUsedStrategy().choose(pool).secret == "B"


@pytest.mark.unit
class TestStrategyRegistry:
    def test_known_names(self) -> None:
        assert get_strategy("first_eligible").name == "first_eligible"
        assert get_strategy("least_recently_used").name == "least_recently_used"

    def test_unknown_falls_back(self) -> None:
        assert get_strategy("round_robin").name == "first_eligible"
