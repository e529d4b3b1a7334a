"""
Team and TeamMember ORM models.
References between tables are plain string columns: the store does not
enforce referential integrity, only the (team_id, user_id) pair uniqueness.
"""
from __future__ import annotations

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from webgestor.db.base import Base


class TeamModel(Base):
    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    leader_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)

    __table_args__ = (Index("ix_teams_created_at", "created_at"),)

    def __repr__(self) -> str:
        return f"<Team id={self.id} name={self.name}>"


class TeamMemberModel(Base):
    __tablename__ = "team_members"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    team_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    joined_at: Mapped[str] = mapped_column(String(40), nullable=False)

    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_members_team_id_user_id"),
        Index("ix_team_members_user_id", "user_id"),
        Index("ix_team_members_joined_at", "joined_at"),
    )

    def __repr__(self) -> str:
        return f"<TeamMember team_id={self.team_id} user_id={self.user_id}>"
