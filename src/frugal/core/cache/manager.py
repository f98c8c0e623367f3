"""
Response cache facade used by the completion client.

Usage:
    cache = CacheManager.from_settings(settings.cache, blob_store)
    await cache.init()                      # reload snapshot, start timer
    result = cache.lookup_or_miss(query, QueryOptions(model="llama3"))
    if result.hit:
        return result.payload
    ...call the provider...
    cache.store(query, QueryOptions(model="llama3"), payload)
    await cache.shutdown()                  # stop timer, final snapshot
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import orjson
import structlog

from frugal.config import CacheSettings
from frugal.core.cache.classifier import classify_query
from frugal.core.cache.normalizer import QueryOptions, compute_key
from frugal.core.cache.persistence import CachePersistence
from frugal.core.cache.store import CacheStore, Clock
from frugal.storage.base import BlobStore, StorageResult

logger = structlog.stdlib.get_logger()


def is_json_safe(payload: Any) -> bool:
    """True if the payload survives a JSON round trip unchanged."""
    try:
        return orjson.loads(orjson.dumps(payload)) == payload
    except orjson.JSONEncodeError:
        return False


@dataclass
class CacheResult:
    """Result of a cache lookup."""

    hit: bool
    key: str
    payload: Any = None


class CacheManager:
    def __init__(
        self,
        store: CacheStore,
        persistence: CachePersistence,
        enabled: bool = True,
        default_options: QueryOptions | None = None,
        snapshot_interval_seconds: float = 15 * 60,
    ) -> None:
        self.memory = store
        self.persistence = persistence
        self._enabled = enabled
        self._defaults = default_options or QueryOptions()
        self.snapshot_interval_seconds = snapshot_interval_seconds

    @classmethod
    def from_settings(
        cls,
        settings: CacheSettings,
        blob_store: BlobStore,
        clock: Clock = time.time,
    ) -> CacheManager:
        store = CacheStore(
            max_size=settings.max_size,
            base_ttl_seconds=settings.base_ttl_seconds,
            factual_ttl_seconds=settings.factual_ttl_seconds,
            conversational_ttl_seconds=settings.conversational_ttl_seconds,
            clock=clock,
        )
        persistence = CachePersistence(
            store,
            blob_store,
            blob_name=settings.blob_name,
            interval_seconds=settings.snapshot_interval_seconds,
        )
        return cls(
            store,
            persistence,
            enabled=settings.enabled,
            default_options=QueryOptions(
                model=settings.default_model,
                temperature=settings.default_temperature,
            ),
            snapshot_interval_seconds=settings.snapshot_interval_seconds,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    def key_for(self, query: str, options: QueryOptions | None = None) -> str:
        options = (options or QueryOptions()).with_defaults(
            self._defaults.model, self._defaults.temperature
        )
        return compute_key(query, options)

    def lookup_or_miss(self, query: str, options: QueryOptions | None = None) -> CacheResult:
        """Return the cached payload for query, or a miss."""
        key = self.key_for(query, options)
        if not self._enabled:
            return CacheResult(hit=False, key=key)

        payload = self.memory.get(key)
        if payload is None:
            logger.debug("cache.miss", key=key[:12])
            return CacheResult(hit=False, key=key)

        logger.debug("cache.hit", key=key[:12])
        return CacheResult(hit=True, key=key, payload=payload)

    def store(
        self,
        query: str,
        options: QueryOptions | None,
        payload: Any,
        ttl_seconds: float | None = None,
    ) -> bool:
        """
        Cache a provider response.

        Called after a successful (non-cached) provider call. Returns False
        when the cache is disabled, the payload is empty, or the payload
        cannot be stored as JSON without changing shape.
        """
        if not self._enabled or not payload:
            return False

        key = self.key_for(query, options)
        if not is_json_safe(payload):
            logger.warning(
                "cache.unserializable_payload", key=key[:12], type=type(payload).__name__
            )
            return False

        query_class = classify_query(query)
        entry = self.memory.put(key, payload, query_class, ttl_seconds=ttl_seconds)
        logger.debug(
            "cache.stored",
            key=key[:12],
            query_class=query_class.value,
            ttl=entry.ttl_seconds,
        )
        return True

    def clear(self) -> int:
        cleared = self.memory.clear()
        logger.info("cache.cleared", entries=cleared)
        return cleared

    def stats(self) -> dict[str, Any]:
        return {
            "enabled": self._enabled,
            "max_size": self.memory.max_size,
            **self.memory.stats(),
            "config": {
                "base_ttl_seconds": self.memory.base_ttl_seconds,
                "factual_ttl_seconds": self.memory.factual_ttl_seconds,
                "conversational_ttl_seconds": self.memory.conversational_ttl_seconds,
                "snapshot_interval_seconds": self.snapshot_interval_seconds,
            },
        }

    async def snapshot(self) -> StorageResult:
        """Snapshot now. Refused while a timer pass is still writing."""
        task = self.persistence.task
        if not await task.run_once():
            return StorageResult.failure("snapshot already in progress")
        if not isinstance(task.last_result, StorageResult):
            return StorageResult.failure("snapshot failed")
        return task.last_result

    # Lifecycle

    async def init(self) -> StorageResult:
        result = await self.persistence.reload()
        self.persistence.start()
        await logger.ainfo("cache.initialized", entries=len(self.memory), enabled=self._enabled)
        return result

    async def shutdown(self) -> StorageResult:
        """Stop the snapshot timer and write a final, best-effort snapshot."""
        await self.persistence.stop()
        return await self.snapshot()
