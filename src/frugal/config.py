"""
Frugal configuration.

Resolution order (highest priority first):
  1. Environment variables   (FRUGAL_CACHE__MAX_SIZE=...)
  2. YAML config file        (frugal.yaml)
  3. Defaults defined here
"""

from __future__ import annotations

import os
from enum import StrEnum
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(StrEnum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LogFormat(StrEnum):
    JSON = "json"
    CONSOLE = "console"


class StorageBackend(StrEnum):
    FILE = "file"
    REDIS = "redis"
    DATABASE = "database"


class SelectionStrategyName(StrEnum):
    FIRST_ELIGIBLE = "first_eligible"
    LEAST_RECENTLY_USED = "least_recently_used"


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1


class AuthSettings(BaseModel):
    master_api_key: str = ""


class LoggingSettings(BaseModel):
    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON


class StorageSettings(BaseModel):
    backend: StorageBackend = StorageBackend.FILE
    data_dir: str = "data"
    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = "frugal:"
    database_url: str = "sqlite+aiosqlite:///data/frugal.db"


class CacheSettings(BaseModel):
    enabled: bool = True
    max_size: int = Field(1000, ge=1)
    base_ttl_seconds: int = Field(24 * 60 * 60, ge=1)
    factual_ttl_seconds: int = Field(3 * 24 * 60 * 60, ge=1)
    conversational_ttl_seconds: int = Field(12 * 60 * 60, ge=1)
    snapshot_interval_seconds: int = Field(15 * 60, ge=0)
    blob_name: str = "ai_cache"

    # Filled into absent query options before hashing
    default_model: str | None = None
    default_temperature: float | None = None


class ServicePoolSettings(BaseModel):
    requests_per_credential: int = Field(100, ge=1)
    rotation_period_seconds: int = Field(60 * 60, ge=1)
    primary_key: str = ""
    primary_label: str = "Primary"


class CredentialSettings(BaseModel):
    blob_name: str = "credentials"
    encrypt_secrets: bool = True
    strategy: SelectionStrategyName = SelectionStrategyName.FIRST_ELIGIBLE
    services: dict[str, ServicePoolSettings] = Field(
        default_factory=lambda: {"groq": ServicePoolSettings()}
    )


class Settings(BaseSettings):
    """Root settings. Merges env vars, YAML, and defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FRUGAL_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    env: str = "development"
    server: ServerSettings = Field(default_factory=ServerSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    credentials: CredentialSettings = Field(default_factory=CredentialSettings)

    # Convenience aliases for flat env vars
    master_api_key: str = ""
    log_level: str = ""

    def model_post_init(self, __context: Any) -> None:
        # Allow flat env vars to override nested ones
        if self.master_api_key:
            self.auth.master_api_key = self.master_api_key
        if self.log_level:
            self.logging.level = LogLevel(self.log_level.upper())

        # Resolve ${ENV_VAR} references in primary credentials
        for pool in self.credentials.services.values():
            if pool.primary_key.startswith("${") and pool.primary_key.endswith("}"):
                env_var = pool.primary_key[2:-1]
                pool.primary_key = os.environ.get(env_var, "")

    @model_validator(mode="after")
    def _separate_blobs(self) -> Settings:
        # Each store is the only writer of its blob
        if self.cache.blob_name == self.credentials.blob_name:
            raise ValueError(
                "cache.blob_name and credentials.blob_name must differ "
                f"(both are {self.cache.blob_name!r})"
            )
        return self


def _load_yaml_config() -> dict[str, Any]:
    """Load YAML config file if it exists."""
    search_paths = [
        Path("frugal.yaml"),
        Path("config/frugal.yaml"),
        Path("/etc/frugal/frugal.yaml"),
    ]
    for path in search_paths:
        if path.is_file():
            with open(path) as f:
                return yaml.safe_load(f) or {}
    return {}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    yaml_data = _load_yaml_config()
    return Settings(**yaml_data)
