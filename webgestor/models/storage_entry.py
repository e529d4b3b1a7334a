"""
StorageEntry ORM model.
Backs the SQL storage adapter: one JSON array per key.
"""
from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from webgestor.db.base import Base


class StorageEntry(Base):
    __tablename__ = "storage_entries"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    updated_at: Mapped[str] = mapped_column(String(40), nullable=False)

    def __repr__(self) -> str:
        return f"<StorageEntry key={self.key!r}>"
