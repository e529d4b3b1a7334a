"""
Database-backed storage: one row per key in the `storage_entries` table.
"""
from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from webgestor.core.clock import default_clock
from webgestor.db.session import session_scope
from webgestor.models.storage_entry import StorageEntry
from webgestor.storage.base import StorageAdapter


class SQLStorage(StorageAdapter):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def get_item(self, key: str) -> str | None:
        async with session_scope(self.session_factory) as session:
            result = await session.execute(
                select(StorageEntry.value).where(StorageEntry.key == key)
            )
            return result.scalar_one_or_none()

    async def set_item(self, key: str, value: str) -> None:
        async with session_scope(self.session_factory) as session:
            entry = await session.get(StorageEntry, key)
            if entry is None:
                entry = StorageEntry(key=key, value=value)
            else:
                entry.value = value
            entry.updated_at = default_clock.timestamp()
            session.add(entry)

    async def remove_item(self, key: str) -> None:
        async with session_scope(self.session_factory) as session:
            await session.execute(delete(StorageEntry).where(StorageEntry.key == key))

    async def keys(self) -> list[str]:
        async with session_scope(self.session_factory) as session:
            result = await session.execute(
                select(StorageEntry.key).order_by(StorageEntry.key)
            )
            return list(result.scalars().all())
