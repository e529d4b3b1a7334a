"""
Persistence gateways for the domain layer.

The domain layer computes the next state of a collection, hands it to a
gateway together with a description of the row-level change, and only adopts
that state once `commit` returns. A gateway that fails raises
`RemoteException` and the in-memory collections stay as they were.

Two implementations:

* `StorageGateway` rewrites the whole collection under its storage key.
* `DataStoreGateway` applies only the row-level change against the
  relational tables, inside one transaction.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from webgestor.core.exceptions import RemoteException
from webgestor.crud import CRUD_BY_COLLECTION
from webgestor.db.session import session_scope
from webgestor.schemas import (
    ActivityLog,
    Comment,
    Notification,
    Project,
    Task,
    Team,
    TeamMember,
    User,
)
from webgestor.schemas.common import EntityModel
from webgestor.storage.base import StorageAdapter

logger = logging.getLogger(__name__)

COLLECTIONS: dict[str, type[EntityModel]] = {
    "users": User,
    "teams": Team,
    "team_members": TeamMember,
    "projects": Project,
    "tasks": Task,
    "comments": Comment,
    "notifications": Notification,
    "activity_logs": ActivityLog,
}

STORAGE_KEYS: dict[str, str] = {
    "users": "webgestor_users",
    "teams": "webgestor_teams",
    "team_members": "webgestor_team_members",
    "projects": "webgestor_projects",
    "tasks": "webgestor_tasks",
    "comments": "webgestor_comments",
    "notifications": "webgestor_notifications",
    "activity_logs": "webgestor_activity",
}


# ── Change descriptions ───────────────────────────────────────────────────────
# Column values are snake_case attribute names.

@dataclass(frozen=True)
class Insert:
    entity: EntityModel


@dataclass(frozen=True)
class Update:
    id: str
    values: dict[str, Any]


@dataclass(frozen=True)
class Delete:
    ids: tuple[str, ...]


@dataclass(frozen=True)
class UpdateWhere:
    where: dict[str, Any]
    values: dict[str, Any]


@dataclass(frozen=True)
class DeleteWhere:
    where: dict[str, Any]


@dataclass(frozen=True)
class Batch:
    """Several changes to the same collection, applied atomically."""

    changes: tuple["Change", ...] = field(default_factory=tuple)


Change = Union[Insert, Update, Delete, UpdateWhere, DeleteWhere, Batch]


def _check_collection(collection: str) -> type[EntityModel]:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection: {collection!r}") from None


# ── Gateway contract ──────────────────────────────────────────────────────────

class Gateway(ABC):

    @abstractmethod
    async def load(self, collection: str) -> list[EntityModel]:
        """Read one whole collection, in its stored order."""

    @abstractmethod
    async def commit(
        self, collection: str, entities: list[EntityModel], change: Change
    ) -> None:
        """
        Persist one mutation. `entities` is the full next state of the
        collection and `change` the delta that produced it.
        Raises RemoteException when the write is rejected.
        """

    async def get(self, collection: str, entity_id: str) -> EntityModel | None:
        for entity in await self.load(collection):
            if entity.id == entity_id:  # type: ignore[attr-defined]
                return entity
        return None

    async def insert(self, collection: str, entity: EntityModel) -> None:
        """Append one entity straight to the store, bypassing any context."""
        current = await self.load(collection)
        await self.commit(collection, [*current, entity], Insert(entity))

    async def close(self) -> None:
        return None


# ── Key-value storage ─────────────────────────────────────────────────────────

class StorageGateway(Gateway):

    def __init__(self, storage: StorageAdapter) -> None:
        self.storage = storage

    async def load(self, collection: str) -> list[EntityModel]:
        entity_cls = _check_collection(collection)
        entities: list[EntityModel] = []
        for row in await self.storage.load(STORAGE_KEYS[collection]):
            try:
                entities.append(entity_cls.model_validate(row))
            except ValidationError as exc:
                logger.warning(
                    "Skipping malformed %s record %s: %s",
                    collection,
                    row.get("id"),
                    exc.error_count(),
                )
        return entities

    async def commit(
        self, collection: str, entities: list[EntityModel], change: Change
    ) -> None:
        _check_collection(collection)
        rows = [entity.to_json() for entity in entities]
        try:
            await self.storage.save(STORAGE_KEYS[collection], rows)
        except (OSError, SQLAlchemyError) as exc:
            logger.error("Failed to write %s collection: %s", collection, exc)
            raise RemoteException(f"Storage write failed: {exc}") from exc

    async def close(self) -> None:
        await self.storage.close()


# ── Relational store ──────────────────────────────────────────────────────────

class DataStoreGateway(Gateway):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def load(self, collection: str) -> list[EntityModel]:
        entity_cls = _check_collection(collection)
        try:
            async with session_scope(self.session_factory) as db:
                rows = await CRUD_BY_COLLECTION[collection].get_multi(db)
                return [entity_cls.model_validate(row) for row in rows]
        except SQLAlchemyError as exc:
            logger.error("Failed to read %s: %s", collection, exc)
            raise RemoteException(_driver_message(exc)) from exc

    async def get(self, collection: str, entity_id: str) -> EntityModel | None:
        entity_cls = _check_collection(collection)
        try:
            async with session_scope(self.session_factory) as db:
                row = await CRUD_BY_COLLECTION[collection].get(db, entity_id)
                return entity_cls.model_validate(row) if row is not None else None
        except SQLAlchemyError as exc:
            logger.error("Failed to read %s %s: %s", collection, entity_id, exc)
            raise RemoteException(_driver_message(exc)) from exc

    async def insert(self, collection: str, entity: EntityModel) -> None:
        await self.commit(collection, [], Insert(entity))

    async def commit(
        self, collection: str, entities: list[EntityModel], change: Change
    ) -> None:
        _check_collection(collection)
        try:
            async with session_scope(self.session_factory) as db:
                await self._apply(db, collection, change)
        except SQLAlchemyError as exc:
            logger.error("Failed to commit %s change: %s", collection, exc)
            raise RemoteException(_driver_message(exc)) from exc

    async def _apply(self, db: AsyncSession, collection: str, change: Change) -> None:
        crud = CRUD_BY_COLLECTION[collection]
        if isinstance(change, Insert):
            await crud.create_from_dict(db, obj_in=change.entity.model_dump())
        elif isinstance(change, Update):
            await crud.update_by_id(db, id=change.id, obj_in=change.values)
        elif isinstance(change, Delete):
            await crud.remove_many(db, ids=list(change.ids))
        elif isinstance(change, UpdateWhere):
            await crud.update_where(db, where=change.where, obj_in=change.values)
        elif isinstance(change, DeleteWhere):
            await crud.remove_where(db, where=change.where)
        elif isinstance(change, Batch):
            for item in change.changes:
                await self._apply(db, collection, item)
        else:
            raise TypeError(f"Unsupported change: {change!r}")

    async def close(self) -> None:
        return None


def _driver_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc)
