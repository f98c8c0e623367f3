"""Credential schemas: the persisted pool blob and admin API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

POOL_BLOB_VERSION = 1


class CredentialRecordData(BaseModel):
    """
    One persisted credential.

    ``secret`` holds Fernet ciphertext when the blob's ``encrypted`` flag is
    set, the raw value otherwise.
    """

    model_config = ConfigDict(strict=True)

    secret: str = Field(min_length=1)
    label: str
    added_at: float
    usage_count: int = Field(ge=0)
    last_used_at: float | None = None
    enabled: bool


class PoolConfigData(BaseModel):
    model_config = ConfigDict(strict=True)

    requests_per_credential: int = Field(ge=1)
    rotation_period_seconds: float = Field(gt=0)


class ServicePoolData(BaseModel):
    model_config = ConfigDict(strict=True)

    config: PoolConfigData
    credentials: list[CredentialRecordData]


class CredentialPoolBlob(BaseModel):
    model_config = ConfigDict(strict=True)

    version: int = POOL_BLOB_VERSION
    encrypted: bool
    saved_at: float
    services: dict[str, ServicePoolData]


# Admin API


class AddCredentialRequest(BaseModel):
    secret: str = Field(..., min_length=1, description="Provider API key")
    label: str = Field("", max_length=255)


class CredentialTarget(BaseModel):
    secret: str = Field(..., min_length=1)


class SetEnabledRequest(BaseModel):
    secret: str = Field(..., min_length=1)
    enabled: bool


class CredentialSummary(BaseModel):
    """Per-key view. ``id`` is the masked secret; the full value is never returned."""

    id: str
    label: str
    enabled: bool
    usage_count: int
    last_used_at: float | None
    added_at: float


class PoolConfigInfo(BaseModel):
    requests_per_credential: int
    rotation_period_seconds: float


class CredentialStatsResponse(BaseModel):
    service: str
    total_keys: int
    enabled_keys: int
    usable_keys: int
    total_requests: int
    config: PoolConfigInfo
    keys: list[CredentialSummary]


class CredentialMutationResponse(BaseModel):
    service: str
    id: str
    ok: bool
