"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from frugal import __version__
from frugal.api.admin.router import admin_router
from frugal.api.middleware.context import RequestContextMiddleware
from frugal.common.errors import register_error_handlers
from frugal.common.logging import configure_logging
from frugal.config import Settings, get_settings
from frugal.core.cache.manager import CacheManager
from frugal.core.credentials.manager import CredentialManager
from frugal.storage.base import BlobStore, create_blob_store

logger = structlog.stdlib.get_logger()


def build_services(
    settings: Settings, blob_store: BlobStore | None = None
) -> tuple[BlobStore, CacheManager, CredentialManager]:
    """Construct the process-wide stores. Nothing is loaded or started yet."""
    blobs = blob_store or create_blob_store(settings.storage)
    cache = CacheManager.from_settings(settings.cache, blobs)
    credentials = CredentialManager.from_settings(settings.credentials, blobs)
    return blobs, cache, credentials


def create_app(settings: Settings | None = None, blob_store: BlobStore | None = None) -> FastAPI:
    """Application factory, called by Uvicorn."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.logging.level, settings.logging.format)

        log = structlog.stdlib.get_logger()
        await log.ainfo(
            "frugal.startup",
            version=__version__,
            env=settings.env,
            storage=settings.storage.backend.value,
            cache_enabled=settings.cache.enabled,
            services=list(settings.credentials.services),
        )

        blobs, cache, credentials = build_services(settings, blob_store)
        await cache.init()
        await credentials.init()

        app.state.settings = settings
        app.state.blob_store = blobs
        app.state.cache = cache
        app.state.credentials = credentials

        yield

        await credentials.shutdown()
        result = await cache.shutdown()
        if not result.ok:
            await log.awarning("frugal.final_snapshot_failed", error=result.error)
        await blobs.close()
        await log.ainfo("frugal.shutdown")

    app = FastAPI(
        title="Frugal",
        description="Response cache and credential rotation for pay-per-call LLM APIs.",
        version=__version__,
        docs_url="/docs" if settings.env == "development" else None,
        redoc_url="/redoc" if settings.env == "development" else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.dependency_overrides[get_settings] = lambda: settings

    register_error_handlers(app)

    app.include_router(admin_router)

    return app
