"""
Gateway service: the cost-control path in front of a paid completion call:

  Normalize → Cache Lookup → (miss) Acquire Credential → Provider Call → Cache Store

The provider call itself is supplied by the caller. Retries and backoff
stay with the caller too: a provider error propagates unchanged and
nothing is cached.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import structlog

from frugal.common.crypto import mask_secret
from frugal.common.errors import NoneAvailableError
from frugal.core.cache.manager import CacheManager
from frugal.core.cache.normalizer import QueryOptions
from frugal.core.credentials.manager import CredentialManager

logger = structlog.stdlib.get_logger()

ProviderCall = Callable[[str], Awaitable[Any]]


@dataclass
class GatewayResult:
    """Result of a guarded completion, including metadata."""

    payload: Any
    cached: bool
    credential_id: str | None
    latency_ms: int


class Gateway:
    """Cache-first, credential-rotating wrapper around one provider call."""

    def __init__(self, cache: CacheManager, credentials: CredentialManager) -> None:
        self.cache = cache
        self.credentials = credentials

    async def complete(
        self,
        service: str,
        query: str,
        call: ProviderCall,
        options: QueryOptions | None = None,
        ttl_seconds: float | None = None,
    ) -> GatewayResult:
        start = time.perf_counter()

        # Step 1: Cache lookup
        cached = self.cache.lookup_or_miss(query, options)
        if cached.hit:
            await logger.ainfo("gateway.cache_hit", service=service, key=cached.key[:12])
            return GatewayResult(
                payload=cached.payload,
                cached=True,
                credential_id=None,
                latency_ms=int((time.perf_counter() - start) * 1000),
            )

        # Step 2: Credential
        secret = await self.credentials.acquire_credential(service)
        if secret is None:
            raise NoneAvailableError(
                f"No usable credential for {service}", details={"service": service}
            )

        # Step 3: Provider call
        payload = await call(secret)

        # Step 4: Store for next time
        self.cache.store(query, options, payload, ttl_seconds=ttl_seconds)

        latency_ms = int((time.perf_counter() - start) * 1000)
        await logger.ainfo(
            "gateway.provider_call",
            service=service,
            key=cached.key[:12],
            credential=mask_secret(secret),
            latency_ms=latency_ms,
        )
        return GatewayResult(
            payload=payload,
            cached=False,
            credential_id=mask_secret(secret),
            latency_ms=latency_ms,
        )
