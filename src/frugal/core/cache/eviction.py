"""
Scored eviction for the in-memory response cache.

    ttl_factor     = max(0, expires_at - now) / base_ttl
    recency_factor = max(0.1, 1 - time_since_last_access / age)
    score          = (hit_count + 1) * ttl_factor * recency_factor

Lowest scores go first. Frequently reused, long-lived, recently touched
entries survive. A never-accessed entry uses its age as time since last
access, so its recency bottoms out at 0.1.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from frugal.core.cache.store import CacheEntry

MIN_RECENCY_FACTOR = 0.1


def score_entry(entry: CacheEntry, now: float, base_ttl_seconds: float) -> float:
    age = now - entry.created_at
    ttl_factor = max(0.0, entry.expires_at - now) / base_ttl_seconds

    if age <= 0:
        # Inserted this instant: nothing has decayed yet
        recency_factor = 1.0
    else:
        since_access = now - entry.last_access_at if entry.last_access_at is not None else age
        recency_factor = max(MIN_RECENCY_FACTOR, 1 - (since_access / age))

    return (entry.hit_count + 1) * ttl_factor * recency_factor


class EvictionPolicy:
    """Picks the lowest-scoring entries when the store is over capacity."""

    def __init__(self, base_ttl_seconds: float) -> None:
        if base_ttl_seconds <= 0:
            raise ValueError("base_ttl_seconds must be positive")
        self.base_ttl_seconds = base_ttl_seconds

    def rank(self, entries: Iterable[CacheEntry], now: float) -> list[tuple[float, CacheEntry]]:
        """Entries paired with their score, lowest first. Ties keep insertion order."""
        scored = [(score_entry(e, now, self.base_ttl_seconds), e) for e in entries]
        scored.sort(key=lambda pair: pair[0])
        return scored

    def select_victims(self, entries: Iterable[CacheEntry], now: float, count: int) -> list[str]:
        if count <= 0:
            return []
        return [entry.key for _, entry in self.rank(entries, now)[:count]]
