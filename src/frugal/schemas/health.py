"""Health check schemas."""

from __future__ import annotations

from pydantic import BaseModel


class LivenessResponse(BaseModel):
    status: str = "ok"
    version: str


class ReadinessResponse(BaseModel):
    status: str
    storage: str   # "file" | "redis" | "database"
    cache_entries: int
    credential_services: list[str]
    last_credential_save: str  # "ok" | "failed" | "never"
