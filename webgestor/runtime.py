"""
Process runtime: builds storage, gateway, auth provider, data context and
services once from settings, and tears them down in reverse order.
"""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine

from webgestor.auth.provider import AuthProvider, AuthUser, LocalAuthProvider
from webgestor.core.config import Settings
from webgestor.data.context import DataContext
from webgestor.data.gateway import DataStoreGateway, Gateway, StorageGateway
from webgestor.db.base import Base
from webgestor.db.session import build_engine, build_session_factory
from webgestor.schemas.user import User
from webgestor.services.admin_service import AdminService
from webgestor.services.auth_service import AuthService
from webgestor.storage.base import StorageAdapter
from webgestor.storage.json_file import JSONFileStorage
from webgestor.storage.memory import MemoryStorage
from webgestor.storage.sql import SQLStorage

logger = logging.getLogger(__name__)


def profile_trigger(gateway: Gateway, *, role: str):
    """
    Emulates the data store's trigger that creates a profile row for every
    new auth account.
    """

    async def create_profile(auth_user: AuthUser) -> None:
        if await gateway.get("users", auth_user.id) is not None:
            return
        await gateway.insert(
            "users",
            User(
                id=auth_user.id,
                email=auth_user.email,
                name=auth_user.metadata.get("name") or "User",
                role=role,
                created_at=auth_user.created_at,
            ),
        )

    return create_profile


@dataclass
class Runtime:
    settings: Settings
    storage: StorageAdapter
    gateway: Gateway
    provider: AuthProvider
    data: DataContext
    auth: AuthService
    admin: AdminService
    engine: AsyncEngine | None = None
    started: bool = False

    async def start(self, *, seed_admin: bool = True) -> None:
        if self.engine is not None:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        await self.data.hydrate()
        self.data.subscribe(self.provider)
        if seed_admin:
            await self.auth.ensure_seed_admin()
        self.started = True
        logger.info("Runtime started with %s backend", self.settings.DATA_BACKEND)

    async def stop(self) -> None:
        await self.data.close()
        await self.gateway.close()
        if self.storage is not getattr(self.gateway, "storage", None):
            await self.storage.close()
        if self.engine is not None:
            await self.engine.dispose()
        self.started = False
        logger.info("Runtime stopped")


def build_runtime(settings: Settings) -> Runtime:
    engine: AsyncEngine | None = None
    if settings.DATA_BACKEND == "sql":
        engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
        session_factory = build_session_factory(engine)
        gateway: Gateway = DataStoreGateway(session_factory)
        storage: StorageAdapter = SQLStorage(session_factory)
    else:
        if settings.DATA_BACKEND == "json":
            storage = JSONFileStorage(settings.STORAGE_DIR)
        else:
            storage = MemoryStorage()
        gateway = StorageGateway(storage)

    hook = None
    if settings.PROFILE_TRIGGER_ENABLED:
        hook = profile_trigger(gateway, role=settings.DEFAULT_USER_ROLE)
    provider = LocalAuthProvider(storage, profile_hook=hook)
    data = DataContext(
        gateway,
        activity_limit=settings.ACTIVITY_LOG_LIMIT,
        delete_policy=settings.DELETE_POLICY,
    )
    return Runtime(
        settings=settings,
        storage=storage,
        gateway=gateway,
        provider=provider,
        data=data,
        auth=AuthService(provider, data, settings=settings),
        admin=AdminService(provider, data),
        engine=engine,
    )


@asynccontextmanager
async def running(settings: Settings, *, seed_admin: bool = True) -> AsyncIterator[Runtime]:
    """Build, start and always stop a runtime around the block."""
    runtime = build_runtime(settings)
    await runtime.start(seed_admin=seed_admin)
    try:
        yield runtime
    finally:
        await runtime.stop()
