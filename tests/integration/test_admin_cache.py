"""Tests for the cache admin endpoints."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from frugal.core.cache.classifier import QueryClass
from frugal.core.cache.normalizer import QueryOptions
from frugal.storage.file import FileBlobStore


@pytest.mark.integration
class TestCacheAdmin:
    async def test_requires_admin_key(self, client: AsyncClient) -> None:
        response = await client.get("/admin/v1/cache/stats")
        assert response.status_code == 401
        assert response.json()["error"]["type"] == "authentication_error"

    async def test_rejects_wrong_key(self, client: AsyncClient) -> None:
        response = await client.get(
            "/admin/v1/cache/stats", headers={"Authorization": "Bearer nope"}
        )
        assert response.status_code == 401

    async def test_stats(
        self, app: FastAPI, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        cache = app.state.cache
        cache.store("What is the capital of France?", QueryOptions(model="m"), {"text": "Paris"})
        cache.lookup_or_miss("what is the capital of france?", QueryOptions(model="m"))

        response = await client.get("/admin/v1/cache/stats", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["enabled"] is True
        assert body["size"] == 1
        assert body["hits"] == 1
        assert body["added"] == 1
        assert body["max_size"] == 1000
        assert body["config"]["snapshot_interval_seconds"] == 3600

    async def test_clear(
        self, app: FastAPI, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        app.state.cache.store("hello", None, "world")

        response = await client.post("/admin/v1/cache/clear", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"cleared": 1}
        assert app.state.cache.stats()["size"] == 0

    async def test_snapshot_writes_blob(
        self,
        app: FastAPI,
        client: AsyncClient,
        admin_headers: dict[str, str],
        file_blobs: FileBlobStore,
    ) -> None:
        app.state.cache.store("hello", None, "world")

        response = await client.post("/admin/v1/cache/snapshot", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"saved": True, "entries": 1, "error": None}
        assert file_blobs.path_for("ai_cache").is_file()

    async def test_snapshot_with_unserializable_entry_reports_failure(
        self, app: FastAPI, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        app.state.cache.memory.put("raw", object(), QueryClass.CONVERSATIONAL)

        response = await client.post("/admin/v1/cache/snapshot", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["saved"] is False
        assert "unserializable" in body["error"]
        app.state.cache.memory.delete("raw")
