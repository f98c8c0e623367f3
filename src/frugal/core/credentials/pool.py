"""
Per-service credential pool.

Holds the ordered list of credentials for one service together with its
quota configuration. All methods here are pure in-memory mutations;
persisting the result is the caller's job (see CredentialManager).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from frugal.common.crypto import mask_secret


@dataclass
class PoolConfig:
    requests_per_credential: int = 100
    rotation_period_seconds: float = 60 * 60

    def __post_init__(self) -> None:
        if self.requests_per_credential < 1:
            raise ValueError("requests_per_credential must be at least 1")
        if self.rotation_period_seconds <= 0:
            raise ValueError("rotation_period_seconds must be positive")


@dataclass
class CredentialRecord:
    secret: str
    label: str
    added_at: float
    usage_count: int = 0
    last_used_at: float | None = None
    enabled: bool = True

    @property
    def masked(self) -> str:
        return mask_secret(self.secret)

    def __repr__(self) -> str:
        return (
            f"CredentialRecord(secret={self.masked!r}, label={self.label!r}, "
            f"usage_count={self.usage_count}, enabled={self.enabled})"
        )


class CredentialPool:
    def __init__(
        self,
        service: str,
        config: PoolConfig | None = None,
        records: list[CredentialRecord] | None = None,
    ) -> None:
        self.service = service
        self.config = config or PoolConfig()
        self._records: list[CredentialRecord] = list(records or [])

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[CredentialRecord]:
        """Records in insertion order. Callers must not mutate the list."""
        return self._records

    def find(self, secret: str) -> CredentialRecord | None:
        for record in self._records:
            if record.secret == secret:
                return record
        return None

    def add(self, secret: str, label: str, now: float) -> bool:
        """Append a new enabled record. Rejects duplicates without mutating."""
        if self.find(secret) is not None:
            return False
        self._records.append(CredentialRecord(secret=secret, label=label, added_at=now))
        return True

    def remove(self, secret: str) -> bool:
        record = self.find(secret)
        if record is None:
            return False
        self._records.remove(record)
        return True

    def set_enabled(self, secret: str, enabled: bool) -> bool:
        record = self.find(secret)
        if record is None:
            return False
        record.enabled = enabled
        return True

    def is_usable(self, record: CredentialRecord) -> bool:
        return record.enabled and record.usage_count < self.config.requests_per_credential

    def usable(self) -> list[CredentialRecord]:
        return [r for r in self._records if self.is_usable(r)]

    def record_use(self, record: CredentialRecord, now: float) -> None:
        record.usage_count += 1
        record.last_used_at = now

    def reset_usage(self) -> None:
        """Zero every counter, enabled or not."""
        for record in self._records:
            record.usage_count = 0

    def stats(self) -> dict[str, Any]:
        return {
            "service": self.service,
            "total_keys": len(self._records),
            "enabled_keys": sum(1 for r in self._records if r.enabled),
            "usable_keys": len(self.usable()),
            "total_requests": sum(r.usage_count for r in self._records),
            "config": {
                "requests_per_credential": self.config.requests_per_credential,
                "rotation_period_seconds": self.config.rotation_period_seconds,
            },
            "keys": [
                {
                    "id": r.masked,
                    "label": r.label,
                    "enabled": r.enabled,
                    "usage_count": r.usage_count,
                    "last_used_at": r.last_used_at,
                    "added_at": r.added_at,
                }
                for r in self._records
            ],
        }
