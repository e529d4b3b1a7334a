"""
Comment ORM model.
"""
from __future__ import annotations

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from webgestor.db.base import Base


class CommentModel(Base):
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    task_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)

    __table_args__ = (
        Index("ix_comments_task_id", "task_id"),
        Index("ix_comments_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Comment id={self.id} task_id={self.task_id}>"
