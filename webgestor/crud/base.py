"""
Generic async CRUD base class.
The relational gateway resolves one CRUDBase per collection and drives every
row-level change through these methods.
"""
from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from webgestor.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    """
    Generic CRUD operations for SQLAlchemy async ORM models.

    Type parameters:
        ModelType: The SQLAlchemy ORM model class.

    `order_by` names the column list reads are sorted on; `descending`
    flips it for collections kept newest first.
    """

    def __init__(
        self,
        model: type[ModelType],
        *,
        order_by: str = "created_at",
        descending: bool = False,
    ) -> None:
        self.model = model
        self.order_by = order_by
        self.descending = descending

    def _where(self, query: Any, filters: dict[str, Any]) -> Any:
        for attr, value in filters.items():
            query = query.where(getattr(self.model, attr) == value)
        return query

    async def get(self, db: AsyncSession, id: str) -> ModelType | None:
        """Fetch a single record by primary key."""
        result = await db.execute(select(self.model).where(self.model.id == id))  # type: ignore[attr-defined]
        return result.scalar_one_or_none()

    async def get_multi(self, db: AsyncSession, **filters: Any) -> list[ModelType]:
        """Fetch every record matching the keyword filters, in collection order."""
        column = getattr(self.model, self.order_by)
        query = self._where(select(self.model), filters).order_by(
            column.desc() if self.descending else column.asc()
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def create_from_dict(
        self, db: AsyncSession, *, obj_in: dict[str, Any]
    ) -> ModelType:
        """Create a new record from a plain dictionary."""
        db_obj = self.model(**obj_in)
        db.add(db_obj)
        await db.flush()
        return db_obj

    async def update_by_id(
        self, db: AsyncSession, *, id: str, obj_in: dict[str, Any]
    ) -> int:
        """Apply the given column values to one record; returns rows matched."""
        return await self.update_where(db, where={"id": id}, obj_in=obj_in)

    async def update_where(
        self, db: AsyncSession, *, where: dict[str, Any], obj_in: dict[str, Any]
    ) -> int:
        if not obj_in:
            return 0
        stmt = self._where(update(self.model), where).values(**obj_in)
        result = await db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount or 0

    async def remove_many(self, db: AsyncSession, *, ids: list[str]) -> int:
        """Delete records by primary key. Unknown ids are ignored."""
        if not ids:
            return 0
        stmt = delete(self.model).where(self.model.id.in_(ids))  # type: ignore[attr-defined]
        result = await db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount or 0

    async def remove_where(self, db: AsyncSession, *, where: dict[str, Any]) -> int:
        stmt = self._where(delete(self.model), where)
        result = await db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount or 0
