"""
ActivityLog ORM model.
Audit trail of mutating actions; the domain layer keeps only the most
recent entries and deletes the rest.
"""
from __future__ import annotations

from sqlalchemy import Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from webgestor.db.base import Base


class ActivityLogModel(Base):
    __tablename__ = "activity_logs"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    action: Mapped[str] = mapped_column(String(200), nullable=False)
    entity_type: Mapped[str] = mapped_column(
        Enum("team", "project", "task", "user", name="activity_entity_type_enum"),
        nullable=False,
    )
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)

    __table_args__ = (
        Index("ix_activity_logs_entity_type_id", "entity_type", "entity_id"),
        Index("ix_activity_logs_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<ActivityLog id={self.id} user_id={self.user_id} "
            f"action={self.action!r} entity_type={self.entity_type!r}>"
        )
