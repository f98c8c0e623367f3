"""SQL-backed blob store (any async SQLAlchemy dialect)."""

from __future__ import annotations

from pathlib import Path

import structlog
from sqlalchemy import delete, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from frugal.common.errors import StorageUnavailableError
from frugal.db.session import create_engine, create_session_factory
from frugal.models import Base, StoredBlob
from frugal.storage.base import BlobStore

logger = structlog.stdlib.get_logger()


class DatabaseBlobStore(BlobStore):
    """One row per blob in ``frugal_blobs``. The table is created on first use."""

    name = "database"

    def __init__(self, url: str | None = None, engine: AsyncEngine | None = None) -> None:
        if engine is None:
            if url is None:
                raise ValueError("DatabaseBlobStore needs a url or an engine")
            _ensure_sqlite_dir(url)
            engine = create_engine(url)
        self._engine = engine
        self._session_factory = create_session_factory(engine)
        self._schema_ready = False

    async def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self._schema_ready = True

    async def read(self, key: str) -> bytes | None:
        try:
            await self._ensure_schema()
            async with self._session_factory() as session:
                result = await session.execute(
                    select(StoredBlob.data).where(StoredBlob.name == key)
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageUnavailableError(
                "Database read failed", details={"key": key, "reason": str(e)}
            ) from e

    async def write(self, key: str, data: bytes) -> None:
        try:
            await self._ensure_schema()
            async with self._session_factory() as session:
                await session.merge(StoredBlob(name=key, data=data))
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageUnavailableError(
                "Database write failed", details={"key": key, "reason": str(e)}
            ) from e
        await logger.adebug("storage.database.written", key=key, bytes=len(data))

    async def delete(self, key: str) -> None:
        try:
            await self._ensure_schema()
            async with self._session_factory() as session:
                await session.execute(delete(StoredBlob).where(StoredBlob.name == key))
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageUnavailableError(
                "Database delete failed", details={"key": key, "reason": str(e)}
            ) from e

    async def close(self) -> None:
        await self._engine.dispose()


def _ensure_sqlite_dir(url: str) -> None:
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
