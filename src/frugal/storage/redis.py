"""Redis-backed blob store."""

from __future__ import annotations

import redis.asyncio as aioredis
import structlog

from frugal.common.errors import StorageUnavailableError
from frugal.storage.base import BlobStore

logger = structlog.stdlib.get_logger()


class RedisBlobStore(BlobStore):
    """Stores each blob as a plain Redis string under ``{prefix}blob:{key}``."""

    name = "redis"

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        prefix: str = "frugal:",
        redis_client: aioredis.Redis | None = None,
    ) -> None:
        if redis_client is not None:
            self._redis = redis_client
        else:
            self._redis = aioredis.from_url(url)
        self._prefix = f"{prefix}blob:"

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def read(self, key: str) -> bytes | None:
        try:
            data = await self._redis.get(self._key(key))
        except aioredis.RedisError as e:
            raise StorageUnavailableError(
                "Redis read failed", details={"key": key, "reason": str(e)}
            ) from e
        if data is None:
            return None
        return data.encode("utf-8") if isinstance(data, str) else data

    async def write(self, key: str, data: bytes) -> None:
        try:
            await self._redis.set(self._key(key), data)
        except aioredis.RedisError as e:
            raise StorageUnavailableError(
                "Redis write failed", details={"key": key, "reason": str(e)}
            ) from e
        await logger.adebug("storage.redis.written", key=key, bytes=len(data))

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(self._key(key))
        except aioredis.RedisError as e:
            raise StorageUnavailableError(
                "Redis delete failed", details={"key": key, "reason": str(e)}
            ) from e

    async def close(self) -> None:
        await self._redis.aclose()
