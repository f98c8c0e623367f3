"""
FastAPI dependency injection.

The cache and credential managers are built once in the app lifespan and
stored on ``app.state``; routes receive them through these dependencies.
"""

from __future__ import annotations

import secrets
from typing import Annotated

from fastapi import Depends, Header, Request

from frugal.common.errors import AuthenticationError
from frugal.config import Settings, get_settings
from frugal.core.cache.manager import CacheManager
from frugal.core.credentials.manager import CredentialManager

AppSettings = Annotated[Settings, Depends(get_settings)]


def get_cache_manager(request: Request) -> CacheManager:
    return request.app.state.cache


def get_credential_manager(request: Request) -> CredentialManager:
    return request.app.state.credentials


async def require_admin(
    authorization: Annotated[str | None, Header()] = None,
    settings: Settings = Depends(get_settings),
) -> str:
    """
    Authenticate an admin request.

    Accepts:
        - Authorization: Bearer <master_api_key>
    """
    if not authorization:
        raise AuthenticationError("Missing Authorization header")

    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Invalid Authorization header format. Expected: Bearer <key>")

    raw_key = parts[1].strip()
    master = settings.auth.master_api_key
    if not master or not secrets.compare_digest(raw_key, master):
        raise AuthenticationError("Invalid admin key")

    return "master_admin"


# Annotated types for route signatures
AdminKey = Annotated[str, Depends(require_admin)]
Cache = Annotated[CacheManager, Depends(get_cache_manager)]
Credentials = Annotated[CredentialManager, Depends(get_credential_manager)]
