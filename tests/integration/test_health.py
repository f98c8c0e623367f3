"""Tests for health check endpoints."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from frugal import __version__
from frugal.storage import StorageResult


@pytest.mark.integration
class TestHealth:
    async def test_liveness(self, client: AsyncClient) -> None:
        response = await client.get("/admin/v1/health/live")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}

    async def test_readiness(self, client: AsyncClient) -> None:
        response = await client.get("/admin/v1/health/ready")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["storage"] == "file"
        assert body["credential_services"] == ["groq"]
        assert body["last_credential_save"] == "ok"

    async def test_readiness_degraded_after_failed_save(
        self, app: FastAPI, client: AsyncClient
    ) -> None:
        credentials = app.state.credentials
        credentials.last_save = StorageResult.failure("disk full")

        response = await client.get("/admin/v1/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"

    async def test_request_id_header(self, client: AsyncClient) -> None:
        response = await client.get(
            "/admin/v1/health/live", headers={"x-request-id": "req-123"}
        )
        assert response.headers["x-request-id"] == "req-123"
        assert "x-frugal-latency-ms" in response.headers
