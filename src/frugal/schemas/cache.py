"""Cache schemas: the persisted snapshot blob and admin API payloads."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

SNAPSHOT_VERSION = 1


class CacheEntryRecord(BaseModel):
    """One persisted entry. Strict so a hand-edited blob fails validation."""

    model_config = ConfigDict(strict=True)

    payload: Any
    created_at: float
    expires_at: float
    hit_count: int = Field(ge=0)
    last_access_at: float | None = None
    query_class: Literal["factual", "conversational"]


class CacheStatsRecord(BaseModel):
    model_config = ConfigDict(strict=True)

    hits: int = Field(0, ge=0)
    misses: int = Field(0, ge=0)
    added: int = Field(0, ge=0)
    expired: int = Field(0, ge=0)
    evicted: int = Field(0, ge=0)


class CacheSnapshot(BaseModel):
    model_config = ConfigDict(strict=True)

    version: int = SNAPSHOT_VERSION
    entries: list[tuple[str, CacheEntryRecord]]
    stats: CacheStatsRecord
    saved_at: float


# Admin API


class CacheConfigInfo(BaseModel):
    base_ttl_seconds: float
    factual_ttl_seconds: float
    conversational_ttl_seconds: float
    snapshot_interval_seconds: float


class CacheStatsResponse(BaseModel):
    enabled: bool
    size: int
    max_size: int
    hits: int
    misses: int
    added: int
    expired: int
    evicted: int
    config: CacheConfigInfo


class CacheClearResponse(BaseModel):
    cleared: int


class CacheSnapshotResponse(BaseModel):
    saved: bool
    entries: int
    error: str | None = None
