"""
Unified error handling.

Every Frugal error carries an HTTP status and a short machine-readable
type so the admin API can render it without per-route handling.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse

logger = structlog.stdlib.get_logger()


class FrugalError(Exception):
    """Base exception for all Frugal errors."""

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        return {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.status_code,
                **self.details,
            }
        }


class InvalidInputError(FrugalError):
    status_code = 400
    error_type = "invalid_input"


class AuthenticationError(FrugalError):
    status_code = 401
    error_type = "authentication_error"


class NotFoundError(FrugalError):
    status_code = 404
    error_type = "not_found"


class ConflictError(FrugalError):
    status_code = 409
    error_type = "conflict"


class NoneAvailableError(FrugalError):
    status_code = 429
    error_type = "no_credential_available"


class StorageUnavailableError(FrugalError):
    status_code = 503
    error_type = "storage_unavailable"


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(FrugalError)
    async def frugal_error_handler(request: Request, exc: FrugalError) -> ORJSONResponse:
        await logger.awarning(
            "frugal.error",
            error_type=exc.error_type,
            message=exc.message,
            status_code=exc.status_code,
            path=request.url.path,
        )
        return ORJSONResponse(
            status_code=exc.status_code,
            content=exc.to_response(),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> ORJSONResponse:
        await logger.aexception(
            "frugal.unhandled_error",
            path=request.url.path,
            error=str(exc),
        )
        return ORJSONResponse(
            status_code=500,
            content={
                "error": {
                    "message": "An internal error occurred.",
                    "type": "internal_error",
                    "code": 500,
                }
            },
        )
