"""Credential pool management endpoints. Secrets are accepted, never returned."""

from __future__ import annotations

from fastapi import APIRouter

from frugal.api.deps import AdminKey, Credentials
from frugal.common.crypto import mask_secret
from frugal.common.errors import ConflictError, NotFoundError
from frugal.schemas.credentials import (
    AddCredentialRequest,
    CredentialMutationResponse,
    CredentialStatsResponse,
    CredentialTarget,
    SetEnabledRequest,
)

router = APIRouter()


@router.get(
    "/{service}",
    response_model=CredentialStatsResponse,
    summary="Credential pool statistics",
)
async def credential_stats(
    service: str, admin_key: AdminKey, credentials: Credentials
) -> CredentialStatsResponse:
    return CredentialStatsResponse(**credentials.stats(service))


@router.post(
    "/{service}",
    response_model=CredentialMutationResponse,
    status_code=201,
    summary="Add credential",
)
async def add_credential(
    service: str,
    body: AddCredentialRequest,
    admin_key: AdminKey,
    credentials: Credentials,
) -> CredentialMutationResponse:
    added = await credentials.add_credential(service, body.secret, body.label)
    if not added:
        raise ConflictError(
            "Credential already exists",
            details={"service": service, "id": mask_secret(body.secret)},
        )
    return CredentialMutationResponse(service=service, id=mask_secret(body.secret), ok=True)


@router.delete(
    "/{service}",
    response_model=CredentialMutationResponse,
    summary="Remove credential",
)
async def remove_credential(
    service: str,
    body: CredentialTarget,
    admin_key: AdminKey,
    credentials: Credentials,
) -> CredentialMutationResponse:
    if not await credentials.remove_credential(service, body.secret):
        raise NotFoundError(
            "Credential not found", details={"service": service, "id": mask_secret(body.secret)}
        )
    return CredentialMutationResponse(service=service, id=mask_secret(body.secret), ok=True)


@router.patch(
    "/{service}",
    response_model=CredentialMutationResponse,
    summary="Enable or disable credential",
)
async def set_credential_enabled(
    service: str,
    body: SetEnabledRequest,
    admin_key: AdminKey,
    credentials: Credentials,
) -> CredentialMutationResponse:
    if not await credentials.set_enabled(service, body.secret, body.enabled):
        raise NotFoundError(
            "Credential not found", details={"service": service, "id": mask_secret(body.secret)}
        )
    return CredentialMutationResponse(service=service, id=mask_secret(body.secret), ok=True)


@router.post(
    "/{service}/reset",
    response_model=CredentialStatsResponse,
    summary="Reset usage counters",
)
async def reset_usage(
    service: str, admin_key: AdminKey, credentials: Credentials
) -> CredentialStatsResponse:
    await credentials.reset_usage(service)
    return CredentialStatsResponse(**credentials.stats(service))
