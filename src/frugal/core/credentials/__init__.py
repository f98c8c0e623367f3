"""Credential rotation: per-service pools, quota accounting, durable storage."""

from frugal.core.credentials.manager import CredentialManager
from frugal.core.credentials.pool import CredentialPool, CredentialRecord, PoolConfig

__all__ = ["CredentialManager", "CredentialPool", "CredentialRecord", "PoolConfig"]
