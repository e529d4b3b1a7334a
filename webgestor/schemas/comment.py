"""
Comment schemas. Comments are immutable once created.
"""
from __future__ import annotations

from pydantic import Field

from webgestor.schemas.common import EntityModel, IsoTimestamp, PayloadModel


class Comment(EntityModel):
    id: str
    task_id: str
    user_id: str
    content: str
    created_at: IsoTimestamp


class CommentCreate(PayloadModel):
    content: str = Field(min_length=1, max_length=10000)
