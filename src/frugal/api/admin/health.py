"""Health check endpoints for liveness/readiness probes."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import ORJSONResponse

from frugal import __version__
from frugal.api.deps import Cache, Credentials
from frugal.schemas.health import LivenessResponse, ReadinessResponse

router = APIRouter()


@router.get(
    "/live",
    response_model=LivenessResponse,
    summary="Liveness probe",
)
async def liveness() -> LivenessResponse:
    return LivenessResponse(version=__version__)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
)
async def readiness(request: Request, cache: Cache, credentials: Credentials) -> ORJSONResponse:
    last_save = credentials.last_save
    if last_save is None:
        save_status = "never"
    else:
        save_status = "ok" if last_save.ok else "failed"

    # Storage trouble degrades the layer, it doesn't take it down
    overall = "degraded" if save_status == "failed" else "ok"

    return ORJSONResponse(
        status_code=200 if overall == "ok" else 503,
        content=ReadinessResponse(
            status=overall,
            storage=request.app.state.blob_store.name,
            cache_entries=len(cache.memory),
            credential_services=credentials.services,
            last_credential_save=save_status,
        ).model_dump(),
    )
