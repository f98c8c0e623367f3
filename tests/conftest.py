"""
Shared test fixtures.

Time is driven by FakeClock so expiry and eviction are deterministic.
Background timers use long intervals and are triggered explicitly.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from frugal.app import create_app
from frugal.config import Settings
from frugal.storage.file import FileBlobStore
from tests.factories import FakeClock, MemoryBlobStore


@pytest.fixture(autouse=True)
def _encryption_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FRUGAL_ENCRYPTION_KEY", "test-encryption-key")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def file_blobs(tmp_path: Path) -> FileBlobStore:
    return FileBlobStore(tmp_path / "data")


# Test Settings

def get_test_settings(**overrides) -> Settings:
    data = {
        "env": "test",
        "auth": {"master_api_key": "test_admin_key"},
        "logging": {"level": "DEBUG", "format": "console"},
        "cache": {"snapshot_interval_seconds": 3600},
        "credentials": {
            "encrypt_secrets": False,
            "services": {
                "groq": {
                    "requests_per_credential": 3,
                    "rotation_period_seconds": 3600,
                    "primary_key": "gsk_primary_0000000000",
                }
            },
        },
    }
    data.update(overrides)
    return Settings(**data)


@pytest.fixture
def test_settings() -> Settings:
    return get_test_settings()


# App + Client Fixtures

@pytest.fixture
async def app(test_settings: Settings, file_blobs: FileBlobStore) -> AsyncIterator[FastAPI]:
    application = create_app(test_settings, blob_store=file_blobs)
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Headers with admin authentication."""
    return {"Authorization": "Bearer test_admin_key"}
