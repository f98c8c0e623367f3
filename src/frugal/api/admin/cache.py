"""Cache management endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from frugal.api.deps import AdminKey, Cache
from frugal.schemas.cache import (
    CacheClearResponse,
    CacheSnapshotResponse,
    CacheStatsResponse,
)

router = APIRouter()


@router.get("/stats", response_model=CacheStatsResponse, summary="Cache statistics")
async def cache_stats(admin_key: AdminKey, cache: Cache) -> CacheStatsResponse:
    return CacheStatsResponse(**cache.stats())


@router.post("/clear", response_model=CacheClearResponse, summary="Clear cache")
async def clear_cache(admin_key: AdminKey, cache: Cache) -> CacheClearResponse:
    return CacheClearResponse(cleared=cache.clear())


@router.post("/snapshot", response_model=CacheSnapshotResponse, summary="Snapshot cache now")
async def snapshot_cache(admin_key: AdminKey, cache: Cache) -> CacheSnapshotResponse:
    result = await cache.snapshot()
    return CacheSnapshotResponse(saved=result.ok, entries=result.count, error=result.error)
