"""Local filesystem blob store: one JSON file per blob under a data dir."""

from __future__ import annotations

import os
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os
import structlog

from frugal.common.errors import StorageUnavailableError
from frugal.storage.base import BlobStore

logger = structlog.stdlib.get_logger()


class FileBlobStore(BlobStore):
    """
    Writes go to a sibling temp file first and are moved into place with
    os.replace, so a crash mid-write leaves the previous blob intact.
    """

    name = "file"

    def __init__(self, data_dir: str | Path) -> None:
        self._dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    async def read(self, key: str) -> bytes | None:
        path = self.path_for(key)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageUnavailableError(
                f"Cannot read {path}", details={"reason": str(e)}
            ) from e

    async def write(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        tmp_path = path.with_name(f"{path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            await aiofiles.os.makedirs(self._dir, exist_ok=True)
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
                await f.flush()
            await aiofiles.os.replace(tmp_path, path)
        except OSError as e:
            await self._discard(tmp_path)
            raise StorageUnavailableError(
                f"Cannot write {path}", details={"reason": str(e)}
            ) from e

        await logger.adebug("storage.file.written", path=str(path), bytes=len(data))

    async def _discard(self, tmp_path: Path) -> None:
        try:
            await aiofiles.os.remove(tmp_path)
        except OSError:
            # Never created, or the directory itself is unusable
            pass

    async def delete(self, key: str) -> None:
        try:
            await aiofiles.os.remove(self.path_for(key))
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageUnavailableError(
                f"Cannot delete {self.path_for(key)}", details={"reason": str(e)}
            ) from e

    def __repr__(self) -> str:
        return f"FileBlobStore({os.fspath(self._dir)!r})"
