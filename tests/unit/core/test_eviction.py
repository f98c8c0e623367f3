"""Tests for scored eviction."""

from __future__ import annotations

import pytest

from frugal.core.cache.classifier import QueryClass
from frugal.core.cache.eviction import EvictionPolicy, score_entry
from frugal.core.cache.store import CacheStore
from tests.factories import FakeClock, make_entry

NOW = 1000.0
BASE_TTL = 100.0


@pytest.fixture
def scenario():
    return [
        make_entry("A", created_at=900, expires_at=1050),
        make_entry("B", created_at=900, expires_at=1100, hit_count=2, last_access_at=990),
        make_entry("C", created_at=950, expires_at=1020, hit_count=1, last_access_at=975),
    ]


@pytest.mark.unit
class TestScoreEntry:
    def test_never_accessed_entry_has_floor_recency(self, scenario) -> None:
        a = scenario[0]
        # ttl_factor 0.5, recency floors at 0.1, one implicit hit
        assert score_entry(a, NOW, BASE_TTL) == pytest.approx(0.05)

    def test_recently_hit_entry_scores_high(self, scenario) -> None:
        b = scenario[1]
        # (2+1) * 1.0 * (1 - 10/100)
        assert score_entry(b, NOW, BASE_TTL) == pytest.approx(2.7)

    def test_partially_decayed_entry(self, scenario) -> None:
        c = scenario[2]
        # (1+1) * 0.2 * (1 - 25/50)
        assert score_entry(c, NOW, BASE_TTL) == pytest.approx(0.2)

    def test_expired_entry_scores_zero(self) -> None:
        entry = make_entry("old", created_at=800, expires_at=950, hit_count=9, last_access_at=999)
        assert score_entry(entry, NOW, BASE_TTL) == 0.0

    def test_brand_new_entry_has_full_recency(self) -> None:
        entry = make_entry("new", created_at=NOW, expires_at=NOW + 50)
        assert score_entry(entry, NOW, BASE_TTL) == pytest.approx(0.5)


@pytest.mark.unit
class TestEvictionPolicy:
    def test_ranks_lowest_score_first(self, scenario) -> None:
        policy = EvictionPolicy(BASE_TTL)
        ranked = [entry.key for _, entry in policy.rank(scenario, NOW)]
        assert ranked == ["A", "C", "B"]

    def test_select_victims(self, scenario) -> None:
        policy = EvictionPolicy(BASE_TTL)
        assert policy.select_victims(scenario, NOW, 2) == ["A", "C"]

    def test_select_nothing(self, scenario) -> None:
        policy = EvictionPolicy(BASE_TTL)
        assert policy.select_victims(scenario, NOW, 0) == []

    def test_ties_keep_insertion_order(self) -> None:
        entries = [
            make_entry("first", created_at=900, expires_at=1050),
            make_entry("second", created_at=900, expires_at=1050),
        ]
        assert EvictionPolicy(BASE_TTL).select_victims(entries, NOW, 1) == ["first"]

    def test_rejects_non_positive_base_ttl(self) -> None:
        with pytest.raises(ValueError):
            EvictionPolicy(0)


@pytest.mark.unit
class TestStoreEviction:
    def test_over_capacity_drops_lowest_scores(self) -> None:
        clock = FakeClock(NOW)
        store = CacheStore(
            max_size=3,
            base_ttl_seconds=BASE_TTL,
            factual_ttl_seconds=200,
            conversational_ttl_seconds=100,
            clock=clock,
        )
        store.put("keep", "k", QueryClass.FACTUAL)
        store.put("drop", "d", QueryClass.CONVERSATIONAL)
        store.put("warm", "w", QueryClass.CONVERSATIONAL)
        clock.advance(10)
        store.get("warm")
        clock.advance(1)

        store.put("fresh", "f", QueryClass.CONVERSATIONAL)

        assert "drop" not in store
        assert {"keep", "warm", "fresh"} <= {e.key for e in store.entries()}
        assert store.stats()["evicted"] == 1
