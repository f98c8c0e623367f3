"""
Durable key -> blob storage.

The cache snapshot and the credential pool are each written as a single
opaque blob under their own name. Backends only move bytes; encoding and
validation belong to the persistence layer that owns the blob.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from frugal.config import StorageSettings


@dataclass(frozen=True)
class StorageResult:
    """Outcome of a persistence call. Failures are data, not exceptions."""

    ok: bool
    error: str | None = None
    count: int = 0

    @classmethod
    def success(cls, count: int = 0) -> StorageResult:
        return cls(ok=True, count=count)

    @classmethod
    def failure(cls, error: str) -> StorageResult:
        return cls(ok=False, error=error)


class BlobStore(ABC):
    """Base class for durable blob backends."""

    name: str

    @abstractmethod
    async def read(self, key: str) -> bytes | None:
        """Return the stored blob, or None if nothing is stored under key."""
        ...

    @abstractmethod
    async def write(self, key: str, data: bytes) -> None:
        """Replace the blob under key. Raises StorageUnavailableError on I/O failure."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    async def close(self) -> None:
        return None


def create_blob_store(settings: StorageSettings) -> BlobStore:
    """Build the configured backend."""
    from frugal.config import StorageBackend

    if settings.backend == StorageBackend.REDIS:
        from frugal.storage.redis import RedisBlobStore

        return RedisBlobStore(url=settings.redis_url, prefix=settings.key_prefix)

    if settings.backend == StorageBackend.DATABASE:
        from frugal.storage.database import DatabaseBlobStore

        return DatabaseBlobStore(url=settings.database_url)

    from frugal.storage.file import FileBlobStore

    return FileBlobStore(settings.data_dir)
