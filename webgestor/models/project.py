"""
Project ORM model.
"""
from __future__ import annotations

from sqlalchemy import JSON, Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from webgestor.db.base import Base


class ProjectModel(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    team_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(
        Enum("active", "completed", "paused", name="project_status_enum"),
        nullable=False,
        default="active",
        server_default="active",
    )
    start_date: Mapped[str] = mapped_column(String(40), nullable=False)
    end_date: Mapped[str | None] = mapped_column(String(40), nullable=True)
    goals: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)

    __table_args__ = (
        Index("ix_projects_team_id", "team_id"),
        Index("ix_projects_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Project id={self.id} name={self.name!r} status={self.status}>"
