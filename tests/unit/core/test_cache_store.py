"""Tests for the in-memory response cache."""

from __future__ import annotations

import pytest

from frugal.core.cache.classifier import QueryClass
from frugal.core.cache.store import CacheStore
from tests.factories import FakeClock

HOUR = 3600


def _store(clock: FakeClock, **overrides) -> CacheStore:
    kwargs = {
        "max_size": 10,
        "base_ttl_seconds": 24 * HOUR,
        "factual_ttl_seconds": 72 * HOUR,
        "conversational_ttl_seconds": 12 * HOUR,
        "clock": clock,
    }
    kwargs.update(overrides)
    return CacheStore(**kwargs)


@pytest.mark.unit
class TestGetPut:
    def test_hit_returns_payload_and_counts(self, clock: FakeClock) -> None:
        store = _store(clock)
        store.put("k", {"text": "hi"}, QueryClass.CONVERSATIONAL)
        clock.advance(10)

        assert store.get("k") == {"text": "hi"}

        entry = store.peek("k")
        assert entry is not None
        assert entry.hit_count == 1
        assert entry.last_access_at == clock.now
        assert store.stats()["hits"] == 1

    def test_absent_key_is_miss(self, clock: FakeClock) -> None:
        store = _store(clock)
        assert store.get("nope") is None
        assert store.stats()["misses"] == 1

    def test_new_entry_has_no_last_access(self, clock: FakeClock) -> None:
        store = _store(clock)
        entry = store.put("k", "payload", QueryClass.FACTUAL)
        assert entry.hit_count == 0
        assert entry.last_access_at is None

    def test_overwrite_is_last_write_wins(self, clock: FakeClock) -> None:
        store = _store(clock)
        store.put("k", "first", QueryClass.CONVERSATIONAL)
        store.put("k", "second", QueryClass.CONVERSATIONAL)
        assert len(store) == 1
        assert store.get("k") == "second"
        assert store.stats()["added"] == 2


@pytest.mark.unit
class TestExpiry:
    def test_expired_entry_is_never_returned(self, clock: FakeClock) -> None:
        store = _store(clock)
        store.put("k", "payload", QueryClass.CONVERSATIONAL)

        clock.advance(12 * HOUR)  # expires_at == now counts as expired

        assert store.get("k") is None
        stats = store.stats()
        assert stats["expired"] == 1
        assert stats["misses"] == 1
        assert stats["size"] == 0

    def test_entry_just_before_expiry_still_hits(self, clock: FakeClock) -> None:
        store = _store(clock)
        store.put("k", "payload", QueryClass.CONVERSATIONAL)
        clock.advance(12 * HOUR - 1)
        assert store.get("k") == "payload"

    def test_purge_expired(self, clock: FakeClock) -> None:
        store = _store(clock)
        store.put("short", "a", QueryClass.CONVERSATIONAL)
        store.put("long", "b", QueryClass.FACTUAL)
        clock.advance(24 * HOUR)

        assert store.purge_expired() == 1
        assert "short" not in store
        assert "long" in store
        assert store.stats()["expired"] == 1


@pytest.mark.unit
class TestTtlByClass:
    def test_factual_lives_longer_than_conversational(self, clock: FakeClock) -> None:
        store = _store(clock)
        factual = store.put("a", "x", QueryClass.FACTUAL)
        chat = store.put("b", "x", QueryClass.CONVERSATIONAL)

        assert factual.ttl_seconds == 72 * HOUR
        assert chat.ttl_seconds == 12 * HOUR
        assert factual.ttl_seconds > chat.ttl_seconds

    def test_explicit_ttl_overrides_class(self, clock: FakeClock) -> None:
        store = _store(clock)
        entry = store.put("a", "x", QueryClass.FACTUAL, ttl_seconds=60)
        assert entry.expires_at == clock.now + 60
        assert entry.query_class == QueryClass.FACTUAL


@pytest.mark.unit
class TestCapacity:
    def test_size_never_exceeds_max(self, clock: FakeClock) -> None:
        store = _store(clock, max_size=5)
        for i in range(20):
            store.put(f"k{i}", i, QueryClass.CONVERSATIONAL)
            clock.advance(1)
            assert len(store) <= 5
        assert store.stats()["evicted"] == 15

    def test_hot_entry_survives_eviction(self, clock: FakeClock) -> None:
        store = _store(clock, max_size=3)
        store.put("hot", "h", QueryClass.CONVERSATIONAL)
        store.put("cold1", "c", QueryClass.CONVERSATIONAL)
        store.put("cold2", "c", QueryClass.CONVERSATIONAL)
        clock.advance(100)
        for _ in range(5):
            store.get("hot")
        clock.advance(1)

        store.put("new", "n", QueryClass.CONVERSATIONAL)

        assert "hot" in store
        assert "new" in store
        assert len(store) == 3


@pytest.mark.unit
class TestClearAndStats:
    def test_clear_keeps_cumulative_counters(self, clock: FakeClock) -> None:
        store = _store(clock)
        store.put("k", "v", QueryClass.CONVERSATIONAL)
        store.get("k")
        store.get("missing")

        assert store.clear() == 1

        stats = store.stats()
        assert stats == {
            "size": 0,
            "hits": 1,
            "misses": 1,
            "added": 1,
            "expired": 0,
            "evicted": 0,
        }

    def test_invalid_max_size(self, clock: FakeClock) -> None:
        with pytest.raises(ValueError):
            _store(clock, max_size=0)
