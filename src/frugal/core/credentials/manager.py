"""
Credential rotation manager.

Owns every service's CredentialPool, the selection strategy, the
per-service quota reset timers and the pool blob. Every mutation is
written through to durable storage before the call returns.

Usage:
    creds = CredentialManager.from_settings(settings.credentials, blob_store)
    await creds.init()                        # load pools, add primaries, start timers
    secret = await creds.acquire_credential("groq")
    ...call the provider with secret...
    await creds.shutdown()
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import structlog

from frugal.common.crypto import fingerprint
from frugal.common.errors import InvalidInputError, NoneAvailableError
from frugal.config import CredentialSettings
from frugal.core.credentials.persistence import CredentialPersistence
from frugal.core.credentials.pool import CredentialPool, PoolConfig
from frugal.core.credentials.scheduler import QuotaResetScheduler
from frugal.core.credentials.strategies import (
    FirstEligibleStrategy,
    SelectionStrategy,
    get_strategy,
)
from frugal.storage.base import BlobStore, StorageResult

logger = structlog.stdlib.get_logger()

Clock = Callable[[], float]


class CredentialManager:
    def __init__(
        self,
        persistence: CredentialPersistence,
        pools: dict[str, CredentialPool] | None = None,
        strategy: SelectionStrategy | None = None,
        primary_keys: dict[str, tuple[str, str]] | None = None,
        clock: Clock = time.time,
    ) -> None:
        self._persistence = persistence
        self._pools: dict[str, CredentialPool] = dict(pools or {})
        self._strategy = strategy or FirstEligibleStrategy()
        # service -> (secret, label) from static configuration
        self._primary_keys = dict(primary_keys or {})
        self._clock = clock
        self._schedulers: dict[str, QuotaResetScheduler] = {}
        self.last_save: StorageResult | None = None

    @classmethod
    def from_settings(
        cls,
        settings: CredentialSettings,
        blob_store: BlobStore,
        clock: Clock = time.time,
    ) -> CredentialManager:
        pools = {
            name: CredentialPool(
                name,
                PoolConfig(
                    requests_per_credential=svc.requests_per_credential,
                    rotation_period_seconds=svc.rotation_period_seconds,
                ),
            )
            for name, svc in settings.services.items()
        }
        primary_keys = {
            name: (svc.primary_key, svc.primary_label)
            for name, svc in settings.services.items()
            if svc.primary_key
        }
        persistence = CredentialPersistence(
            blob_store,
            blob_name=settings.blob_name,
            encrypt=settings.encrypt_secrets,
        )
        return cls(
            persistence,
            pools=pools,
            strategy=get_strategy(settings.strategy),
            primary_keys=primary_keys,
            clock=clock,
        )

    @property
    def services(self) -> list[str]:
        return list(self._pools)

    @property
    def strategy(self) -> SelectionStrategy:
        return self._strategy

    def pool(self, service: str) -> CredentialPool:
        pool = self._pools.get(service)
        if pool is None:
            raise InvalidInputError(
                f"Unknown service: {service}", details={"service": service}
            )
        return pool

    def scheduler(self, service: str) -> QuotaResetScheduler | None:
        return self._schedulers.get(service)

    async def _persist(self) -> StorageResult:
        # A failed save leaves the in-memory pool authoritative for this round
        self.last_save = await self._persistence.save(self._pools)
        return self.last_save

    # Mutations

    async def add_credential(self, service: str, secret: str, label: str = "") -> bool:
        """Add a credential. Returns False (and changes nothing) if it already exists."""
        if not isinstance(secret, str) or not secret:
            raise InvalidInputError("Credential secret must be a non-empty string")
        pool = self.pool(service)

        if not pool.add(secret, label, self._clock()):
            await logger.ainfo(
                "credentials.duplicate", service=service, key=fingerprint(secret)
            )
            return False

        await self._persist()
        await logger.ainfo(
            "credentials.added", service=service, key=fingerprint(secret), label=label
        )
        return True

    async def remove_credential(self, service: str, secret: str) -> bool:
        pool = self.pool(service)
        if not pool.remove(secret):
            return False
        await self._persist()
        await logger.ainfo("credentials.removed", service=service, key=fingerprint(secret))
        return True

    async def set_enabled(self, service: str, secret: str, enabled: bool) -> bool:
        pool = self.pool(service)
        if not pool.set_enabled(secret, enabled):
            return False
        await self._persist()
        await logger.ainfo(
            "credentials.enabled" if enabled else "credentials.disabled",
            service=service,
            key=fingerprint(secret),
        )
        return True

    # Selection

    async def select_next(self, service: str) -> str | None:
        """
        Charge one request to the next usable credential and return its secret.

        Returns None when the service has no enabled credential under quota.
        """
        pool = self._pools.get(service)
        if pool is None:
            await logger.awarning("credentials.unknown_service", service=service)
            return None

        record = self._strategy.choose(pool)
        if record is None:
            await logger.awarning(
                "credentials.exhausted",
                service=service,
                total_keys=len(pool),
                limit=pool.config.requests_per_credential,
            )
            return None

        pool.record_use(record, self._clock())
        await self._persist()
        await logger.adebug(
            "credentials.selected",
            service=service,
            key=fingerprint(record.secret),
            usage=record.usage_count,
        )
        return record.secret

    async def acquire_credential(
        self,
        service: str,
        *,
        fallback: bool = True,
        strict: bool = False,
    ) -> str | None:
        """
        Credential for the next provider call.

        With fallback, an exhausted pool degrades to the statically
        configured primary key. With strict, a missing credential raises
        NoneAvailableError instead of returning None.
        """
        secret = await self.select_next(service)
        if secret is not None:
            return secret

        if fallback and service in self._primary_keys:
            await logger.awarning("credentials.fallback_primary", service=service)
            return self._primary_keys[service][0]

        if strict:
            raise NoneAvailableError(
                f"No usable credential for {service}", details={"service": service}
            )
        return None

    async def reset_usage(self, service: str) -> StorageResult:
        """Zero all usage counters of a service and persist."""
        pool = self.pool(service)
        pool.reset_usage()
        result = await self._persist()
        await logger.ainfo("credentials.reset", service=service, keys=len(pool))
        return result

    def stats(self, service: str) -> dict[str, Any]:
        pool = self._pools.get(service)
        if pool is None:
            return CredentialPool(service).stats()
        return pool.stats()

    # Lifecycle

    async def init(self) -> StorageResult:
        result, loaded = await self._persistence.load()

        for name, loaded_pool in loaded.items():
            configured = self._pools.get(name)
            if configured is None:
                self._pools[name] = loaded_pool
            else:
                # Current configuration wins over the persisted quota settings
                self._pools[name] = CredentialPool(name, configured.config, loaded_pool.records)

        for service, (secret, label) in self._primary_keys.items():
            if service in self._pools:
                await self.add_credential(service, secret, label)

        for name, pool in self._pools.items():
            scheduler = QuotaResetScheduler(
                name, pool.config.rotation_period_seconds, self.reset_usage
            )
            scheduler.start()
            self._schedulers[name] = scheduler

        await logger.ainfo(
            "credentials.initialized",
            services={name: len(p) for name, p in self._pools.items()},
            strategy=self._strategy.name,
        )
        return result

    async def shutdown(self) -> None:
        for scheduler in self._schedulers.values():
            await scheduler.stop()
        self._schedulers.clear()
