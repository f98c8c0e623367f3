"""
Periodic snapshot of the response cache to durable storage.

snapshot(): purge expired entries, then write every entry plus the
            cumulative counters as one blob.
reload():   read the blob at startup, keep entries that are still live,
            count the rest as expired.

Neither call raises on storage trouble. A corrupt or unreadable blob
means the cache starts empty; a failed write means this round's
snapshot is lost. Both are reported through StorageResult and logged.

Payloads are stored as JSON. CacheManager only admits payloads that
orjson can encode as-is (str keys, JSON scalars, lists, dicts), so a
reloaded payload equals the one that was stored.
"""

from __future__ import annotations

import orjson
import structlog
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from frugal.common.errors import StorageUnavailableError
from frugal.common.tasks import PeriodicTask
from frugal.core.cache.classifier import QueryClass
from frugal.core.cache.store import CacheEntry, CacheStats, CacheStore
from frugal.schemas.cache import CacheEntryRecord, CacheSnapshot, CacheStatsRecord
from frugal.storage.base import BlobStore, StorageResult

logger = structlog.stdlib.get_logger()


def encode_snapshot(store: CacheStore, saved_at: float) -> bytes:
    snapshot = CacheSnapshot(
        entries=[
            (
                entry.key,
                CacheEntryRecord(
                    payload=entry.payload,
                    created_at=float(entry.created_at),
                    expires_at=float(entry.expires_at),
                    hit_count=entry.hit_count,
                    last_access_at=(
                        float(entry.last_access_at) if entry.last_access_at is not None else None
                    ),
                    query_class=entry.query_class.value,
                ),
            )
            for entry in store.entries()
        ],
        stats=CacheStatsRecord(**store.cumulative_stats().as_dict()),
        saved_at=float(saved_at),
    )
    return orjson.dumps(snapshot.model_dump(mode="json"))


def decode_snapshot(data: bytes) -> CacheSnapshot:
    """Raises pydantic ValidationError (a ValueError) on a malformed blob."""
    return CacheSnapshot.model_validate_json(data)


class CachePersistence:
    def __init__(
        self,
        store: CacheStore,
        blob_store: BlobStore,
        blob_name: str = "ai_cache",
        interval_seconds: float = 15 * 60,
    ) -> None:
        self._store = store
        self._blobs = blob_store
        self._blob_name = blob_name
        self._task = PeriodicTask("cache.snapshot", interval_seconds, self.snapshot)
        self.last_saved_at: float | None = None

    @property
    def task(self) -> PeriodicTask:
        return self._task

    async def snapshot(self) -> StorageResult:
        self._store.purge_expired()
        now = self._store.now()
        try:
            data = encode_snapshot(self._store, saved_at=now)
        except (PydanticSerializationError, orjson.JSONEncodeError) as e:
            await logger.aerror(
                "cache.snapshot.unserializable", blob=self._blob_name, error=str(e)
            )
            return StorageResult.failure(f"unserializable cache entry: {e.__class__.__name__}")
        count = len(self._store)

        try:
            await self._blobs.write(self._blob_name, data)
        except StorageUnavailableError as e:
            await logger.awarning(
                "cache.snapshot.failed", blob=self._blob_name, error=e.message, **e.details
            )
            return StorageResult.failure(e.message)

        self.last_saved_at = now
        await logger.ainfo("cache.snapshot.saved", blob=self._blob_name, entries=count)
        return StorageResult.success(count)

    async def reload(self) -> StorageResult:
        try:
            data = await self._blobs.read(self._blob_name)
        except StorageUnavailableError as e:
            await logger.awarning(
                "cache.reload.unavailable", blob=self._blob_name, error=e.message, **e.details
            )
            self._store.restore([], CacheStats())
            return StorageResult.failure(e.message)

        if data is None:
            await logger.ainfo("cache.reload.empty", blob=self._blob_name)
            return StorageResult.success(0)

        try:
            snapshot = decode_snapshot(data)
        except ValidationError as e:
            await logger.awarning("cache.reload.corrupt", blob=self._blob_name, error=str(e))
            self._store.restore([], CacheStats())
            return StorageResult.failure(f"corrupt snapshot: {e.__class__.__name__}")

        now = self._store.now()
        live: list[CacheEntry] = []
        expired = 0
        for key, record in snapshot.entries:
            if record.expires_at > now:
                live.append(
                    CacheEntry(
                        key=key,
                        payload=record.payload,
                        created_at=record.created_at,
                        expires_at=record.expires_at,
                        query_class=QueryClass(record.query_class),
                        hit_count=record.hit_count,
                        last_access_at=record.last_access_at,
                    )
                )
            else:
                expired += 1

        stats = CacheStats(**snapshot.stats.model_dump())
        stats.expired += expired
        self._store.restore(live, stats)

        await logger.ainfo(
            "cache.reload.loaded",
            blob=self._blob_name,
            entries=len(live),
            expired=expired,
        )
        return StorageResult.success(len(live))

    def start(self) -> None:
        self._task.start()

    async def stop(self) -> None:
        await self._task.stop()
