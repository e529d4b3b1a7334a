"""
Test configuration and shared fixtures.
Uses process-local storage for the domain and API tests, and an in-memory
SQLite database for the relational gateway.
"""
from __future__ import annotations

import os

# Must be set before webgestor is imported: hashing and rate limits are read
# from settings at import time.
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["RATE_LIMIT_LOGIN"] = "1000/minute"
os.environ["PROFILE_WAIT_SECONDS"] = "0.05"
os.environ["PROFILE_POLL_INTERVAL_SECONDS"] = "0.01"
os.environ["DATA_BACKEND"] = "memory"
os.environ.pop("SEED_ADMIN_EMAIL", None)
os.environ.pop("SEED_ADMIN_PASSWORD", None)

from collections.abc import AsyncGenerator  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker  # noqa: E402

from webgestor.core.config import Settings  # noqa: E402
from webgestor.data.context import DataContext  # noqa: E402
from webgestor.data.gateway import DataStoreGateway, StorageGateway  # noqa: E402
from webgestor.db.base import Base  # noqa: E402
from webgestor.db.session import build_engine, build_session_factory  # noqa: E402
from webgestor.main import create_application  # noqa: E402
from webgestor.runtime import Runtime, build_runtime  # noqa: E402
from webgestor.schemas.user import User  # noqa: E402
from webgestor.storage.memory import MemoryStorage  # noqa: E402

import webgestor.models  # noqa: E402,F401

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ── Domain fixtures ───────────────────────────────────────────────────────────

@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def gateway(storage: MemoryStorage) -> StorageGateway:
    return StorageGateway(storage)


@pytest_asyncio.fixture
async def data(gateway: StorageGateway) -> AsyncGenerator[DataContext, None]:
    """A hydrated context over empty process-local storage."""
    ctx = DataContext(gateway, activity_limit=100, delete_policy="block")
    await ctx.hydrate()
    yield ctx
    await ctx.close()


def make_user(user_id: str, role: str = "collaborator", **extra: Any) -> User:
    return User(
        id=user_id,
        email=extra.pop("email", f"{user_id}@example.com"),
        name=extra.pop("name", user_id.title()),
        role=role,
        created_at=extra.pop("created_at", "2024-01-01T00:00:00+00:00"),
        **extra,
    )


@pytest_asyncio.fixture
async def admin(data: DataContext) -> User:
    return await data.save_user(make_user("admin", "admin"))


@pytest_asyncio.fixture
async def leader(data: DataContext) -> User:
    return await data.save_user(make_user("leader", "leader"))


@pytest_asyncio.fixture
async def collaborator(data: DataContext) -> User:
    return await data.save_user(make_user("collab"))


# ── Relational database ───────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def sql_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = build_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(sql_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(sql_engine)


@pytest.fixture
def sql_gateway(session_factory: async_sessionmaker[AsyncSession]) -> DataStoreGateway:
    return DataStoreGateway(session_factory)


# ── HTTP client ───────────────────────────────────────────────────────────────

@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        DATA_BACKEND="memory",
        PROFILE_WAIT_SECONDS=0.05,
        PROFILE_POLL_INTERVAL_SECONDS=0.01,
        SEED_ADMIN_EMAIL=None,
        SEED_ADMIN_PASSWORD=None,
    )


@pytest_asyncio.fixture
async def runtime(test_settings: Settings) -> AsyncGenerator[Runtime, None]:
    rt = build_runtime(test_settings)
    await rt.start()
    yield rt
    await rt.stop()


@pytest_asyncio.fixture
async def client(
    test_settings: Settings, runtime: Runtime
) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client bound to an application whose runtime is started here;
    the transport does not run the lifespan.
    """
    app = create_application(test_settings)
    app.state.runtime = runtime
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


async def register(
    client: AsyncClient,
    email: str,
    password: str = "TestPass1",
    name: str = "Test User",
) -> dict[str, Any]:
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "name": name},
    )
    assert response.status_code == 201, response.text
    return response.json()


async def login_headers(
    client: AsyncClient, email: str, password: str = "TestPass1"
) -> dict[str, str]:
    response = await client.post(
        "/api/v1/auth/login", json={"email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest_asyncio.fixture
async def admin_headers(client: AsyncClient, runtime: Runtime) -> dict[str, str]:
    await runtime.admin.register_admin("admin@example.com", "AdminPass1", "Admin User")
    return await login_headers(client, "admin@example.com", "AdminPass1")


@pytest_asyncio.fixture
async def collaborator_account(client: AsyncClient) -> dict[str, Any]:
    body = await register(client, "collab@example.com", name="Collab User")
    return body["user"]


@pytest_asyncio.fixture
async def collaborator_headers(
    client: AsyncClient, collaborator_account: dict[str, Any]
) -> dict[str, str]:
    return await login_headers(client, "collab@example.com")


@pytest_asyncio.fixture
async def leader_account(client: AsyncClient, runtime: Runtime) -> dict[str, Any]:
    body = await register(client, "leader@example.com", name="Leader User")
    await runtime.data.update_user_role(body["user"]["id"], "leader", current_user=None)
    return body["user"]


@pytest_asyncio.fixture
async def leader_headers(
    client: AsyncClient, leader_account: dict[str, Any]
) -> dict[str, str]:
    return await login_headers(client, "leader@example.com")
