"""
In-memory response cache.

Bounded mapping of cache key -> CacheEntry. Expired entries are never
returned: they are dropped lazily on lookup or by purge_expired().
When a put pushes the store over capacity, EvictionPolicy chooses
which entries to drop.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Iterator
from dataclasses import asdict, dataclass
from typing import Any

import structlog

from frugal.core.cache.classifier import QueryClass
from frugal.core.cache.eviction import EvictionPolicy

logger = structlog.stdlib.get_logger()

Clock = Callable[[], float]


@dataclass
class CacheEntry:
    key: str
    payload: Any
    created_at: float
    expires_at: float
    query_class: QueryClass
    hit_count: int = 0
    last_access_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now

    @property
    def ttl_seconds(self) -> float:
        return self.expires_at - self.created_at


@dataclass
class CacheStats:
    """Cumulative counters. Survive clear() and are persisted with snapshots."""

    hits: int = 0
    misses: int = 0
    added: int = 0
    expired: int = 0
    evicted: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class CacheStore:
    def __init__(
        self,
        max_size: int = 1000,
        base_ttl_seconds: float = 24 * 60 * 60,
        factual_ttl_seconds: float = 3 * 24 * 60 * 60,
        conversational_ttl_seconds: float = 12 * 60 * 60,
        eviction_policy: EvictionPolicy | None = None,
        clock: Clock = time.time,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.base_ttl_seconds = base_ttl_seconds
        self.factual_ttl_seconds = factual_ttl_seconds
        self.conversational_ttl_seconds = conversational_ttl_seconds
        self._policy = eviction_policy or EvictionPolicy(base_ttl_seconds)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._stats = CacheStats()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def now(self) -> float:
        return self._clock()

    def ttl_for(self, query_class: QueryClass) -> float:
        if query_class == QueryClass.FACTUAL:
            return self.factual_ttl_seconds
        return self.conversational_ttl_seconds

    def get(self, key: str) -> Any | None:
        """Return the payload for key, or None on a miss (absent or expired)."""
        now = self._clock()
        entry = self._entries.get(key)

        if entry is not None and entry.is_expired(now):
            del self._entries[key]
            self._stats.expired += 1
            entry = None

        if entry is None:
            self._stats.misses += 1
            return None

        entry.hit_count += 1
        entry.last_access_at = now
        self._stats.hits += 1
        return entry.payload

    def peek(self, key: str) -> CacheEntry | None:
        """Entry lookup without hit accounting or expiry handling."""
        return self._entries.get(key)

    def put(
        self,
        key: str,
        payload: Any,
        query_class: QueryClass,
        ttl_seconds: float | None = None,
    ) -> CacheEntry:
        """Insert or overwrite an entry. Last write wins."""
        now = self._clock()
        ttl = ttl_seconds if ttl_seconds is not None else self.ttl_for(query_class)

        entry = CacheEntry(
            key=key,
            payload=payload,
            created_at=now,
            expires_at=now + ttl,
            query_class=query_class,
        )
        # Re-inserting moves the key to the end, so an overwrite counts as newest
        self._entries.pop(key, None)
        self._entries[key] = entry
        self._stats.added += 1

        if len(self._entries) > self.max_size:
            self._evict(now)

        return entry

    def _evict(self, now: float) -> None:
        excess = len(self._entries) - self.max_size
        victims = self._policy.select_victims(self._entries.values(), now, excess)
        for key in victims:
            del self._entries[key]
        self._stats.evicted += len(victims)
        logger.debug("cache.evicted", count=len(victims), size=len(self._entries))

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for key in expired:
            del self._entries[key]
        self._stats.expired += len(expired)
        return len(expired)

    def clear(self) -> int:
        """Empty the store. Cumulative counters are kept."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def stats(self) -> dict[str, int]:
        return {"size": len(self._entries), **self._stats.as_dict()}

    # Persistence hooks

    def entries(self) -> Iterator[CacheEntry]:
        return iter(list(self._entries.values()))

    def cumulative_stats(self) -> CacheStats:
        return CacheStats(**self._stats.as_dict())

    def restore(self, entries: Iterable[CacheEntry], stats: CacheStats) -> None:
        """Replace contents wholesale; used by reload."""
        self._entries = {e.key: e for e in entries}
        self._stats = stats
        if len(self._entries) > self.max_size:
            self._evict(self._clock())
