"""
Durable storage of the credential pools.

This is the only place secrets touch disk. The full set of pools is
written as one blob after every mutation, with no buffering: a lost
usage increment could push a key past the provider's real rate limit.
Secrets are Fernet-encrypted at rest unless encryption is turned off.
"""

from __future__ import annotations

import asyncio
import time

import orjson
import structlog
from pydantic import ValidationError

from frugal.common.crypto import decrypt_value, encrypt_value
from frugal.common.errors import StorageUnavailableError
from frugal.core.credentials.pool import CredentialPool, CredentialRecord, PoolConfig
from frugal.schemas.credentials import (
    CredentialPoolBlob,
    CredentialRecordData,
    PoolConfigData,
    ServicePoolData,
)
from frugal.storage.base import BlobStore, StorageResult

logger = structlog.stdlib.get_logger()


def encode_pools(pools: dict[str, CredentialPool], encrypt: bool, saved_at: float) -> bytes:
    def _secret(value: str) -> str:
        return encrypt_value(value) if encrypt else value

    blob = CredentialPoolBlob(
        encrypted=encrypt,
        saved_at=float(saved_at),
        services={
            name: ServicePoolData(
                config=PoolConfigData(
                    requests_per_credential=pool.config.requests_per_credential,
                    rotation_period_seconds=float(pool.config.rotation_period_seconds),
                ),
                credentials=[
                    CredentialRecordData(
                        secret=_secret(r.secret),
                        label=r.label,
                        added_at=float(r.added_at),
                        usage_count=r.usage_count,
                        last_used_at=float(r.last_used_at) if r.last_used_at is not None else None,
                        enabled=r.enabled,
                    )
                    for r in pool.records
                ],
            )
            for name, pool in pools.items()
        },
    )
    return orjson.dumps(blob.model_dump(mode="json"), option=orjson.OPT_INDENT_2)


def decode_pools(data: bytes) -> dict[str, CredentialPool]:
    """
    Parse a pool blob.

    Raises ValueError (pydantic ValidationError included) when the blob is
    malformed or a secret cannot be decrypted.
    """
    blob = CredentialPoolBlob.model_validate_json(data)

    def _secret(value: str) -> str:
        return decrypt_value(value) if blob.encrypted else value

    pools: dict[str, CredentialPool] = {}
    for name, service in blob.services.items():
        pools[name] = CredentialPool(
            name,
            PoolConfig(
                requests_per_credential=service.config.requests_per_credential,
                rotation_period_seconds=service.config.rotation_period_seconds,
            ),
            [
                CredentialRecord(
                    secret=_secret(r.secret),
                    label=r.label,
                    added_at=r.added_at,
                    usage_count=r.usage_count,
                    last_used_at=r.last_used_at,
                    enabled=r.enabled,
                )
                for r in service.credentials
            ],
        )
    return pools


class CredentialPersistence:
    def __init__(
        self,
        blob_store: BlobStore,
        blob_name: str = "credentials",
        encrypt: bool = True,
    ) -> None:
        self._blobs = blob_store
        self._blob_name = blob_name
        self._encrypt = encrypt
        # Serializes writes so the newest state always lands last
        self._write_lock = asyncio.Lock()

    async def save(self, pools: dict[str, CredentialPool]) -> StorageResult:
        async with self._write_lock:
            data = encode_pools(pools, self._encrypt, saved_at=time.time())
            try:
                await self._blobs.write(self._blob_name, data)
            except StorageUnavailableError as e:
                await logger.aerror(
                    "credentials.save.failed", blob=self._blob_name, error=e.message, **e.details
                )
                return StorageResult.failure(e.message)

        return StorageResult.success(sum(len(p) for p in pools.values()))

    async def load(self) -> tuple[StorageResult, dict[str, CredentialPool]]:
        """Read the pools. On any failure returns an empty mapping and the reason."""
        try:
            data = await self._blobs.read(self._blob_name)
        except StorageUnavailableError as e:
            await logger.awarning(
                "credentials.load.unavailable", blob=self._blob_name, error=e.message, **e.details
            )
            return StorageResult.failure(e.message), {}

        if data is None:
            await logger.ainfo("credentials.load.empty", blob=self._blob_name)
            return StorageResult.success(0), {}

        try:
            pools = decode_pools(data)
        except (ValidationError, ValueError) as e:
            await logger.awarning(
                "credentials.load.corrupt", blob=self._blob_name, error=e.__class__.__name__
            )
            return StorageResult.failure(f"corrupt credential blob: {e.__class__.__name__}"), {}

        count = sum(len(p) for p in pools.values())
        await logger.ainfo(
            "credentials.load.loaded", blob=self._blob_name, services=len(pools), keys=count
        )
        return StorageResult.success(count), pools
