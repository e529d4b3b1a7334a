"""
Runtime wiring tests for each persistence backend.
"""
from __future__ import annotations

from pathlib import Path

import pytest

from webgestor.core.config import Settings
from webgestor.data.gateway import DataStoreGateway, StorageGateway
from webgestor.runtime import build_runtime, running
from webgestor.storage.json_file import JSONFileStorage
from webgestor.storage.sql import SQLStorage

pytestmark = pytest.mark.asyncio


def _settings(**overrides) -> Settings:
    values = {"PROFILE_WAIT_SECONDS": 0.05, "SEED_ADMIN_EMAIL": None, "SEED_ADMIN_PASSWORD": None}
    values.update(overrides)
    return Settings(**values)


class TestBuildRuntime:
    async def test_json_backend(self, tmp_path: Path) -> None:
        runtime = build_runtime(_settings(DATA_BACKEND="json", STORAGE_DIR=str(tmp_path)))
        assert isinstance(runtime.storage, JSONFileStorage)
        assert isinstance(runtime.gateway, StorageGateway)
        assert runtime.engine is None

    async def test_sql_backend_round_trip(self) -> None:
        settings = _settings(DATA_BACKEND="sql", DATABASE_URL="sqlite+aiosqlite:///:memory:")
        async with running(settings) as runtime:
            assert isinstance(runtime.gateway, DataStoreGateway)
            assert isinstance(runtime.storage, SQLStorage)

            response = await runtime.auth.register("sql@example.com", "secret1", "Sql User")
            team = await runtime.data.create_team({"name": "Core"}, current_user=response.user)

            assert (await runtime.gateway.get("users", response.user.id)).name == "Sql User"
            assert [t.id for t in await runtime.gateway.load("teams")] == [team.id]
            assert await runtime.provider.find_user_by_email("sql@example.com") is not None

    async def test_seed_admin_on_start(self, tmp_path: Path) -> None:
        settings = _settings(
            DATA_BACKEND="json",
            STORAGE_DIR=str(tmp_path),
            SEED_ADMIN_EMAIL="root@example.com",
            SEED_ADMIN_PASSWORD="rootpass",
        )
        async with running(settings) as runtime:
            assert runtime.started
            assert runtime.data.get_user_by_email("root@example.com").role == "admin"

        async with running(settings) as runtime:
            assert len(runtime.data.users) == 1
            assert len(await runtime.provider.admin_list_users()) == 1
