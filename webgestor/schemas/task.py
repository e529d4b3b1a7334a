"""
Task schemas.
Includes create/update variants plus a filter schema for list endpoints.
New tasks always start in `todo`, so the create payload has no status.
"""
from __future__ import annotations

from pydantic import BaseModel, Field

from webgestor.schemas.common import (
    EntityModel,
    IsoTimestamp,
    PayloadModel,
    TaskPriority,
    TaskStatus,
)


class Task(EntityModel):
    id: str
    title: str
    description: str | None = None
    project_id: str
    assignee_id: str | None = None
    status: TaskStatus = "todo"
    priority: TaskPriority = "medium"
    due_date: IsoTimestamp | None = None
    created_at: IsoTimestamp
    updated_at: IsoTimestamp


# ── Create ────────────────────────────────────────────────────────────────────

class TaskCreate(PayloadModel):
    title: str = Field(min_length=1, max_length=500)
    description: str | None = Field(default=None, max_length=10000)
    project_id: str = Field(min_length=1)
    assignee_id: str | None = None
    priority: TaskPriority = "medium"
    due_date: IsoTimestamp | None = None


# ── Update ────────────────────────────────────────────────────────────────────

class TaskUpdate(PayloadModel):
    non_nullable = ("title", "project_id", "status", "priority")

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = Field(default=None, max_length=10000)
    project_id: str | None = Field(default=None, min_length=1)
    assignee_id: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: IsoTimestamp | None = None


# ── Filter ────────────────────────────────────────────────────────────────────

class TaskFilter(BaseModel):
    """Query parameters for filtering task list endpoints."""

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    search: str | None = Field(default=None, max_length=200)
    page: int = Field(default=1, ge=1)
    size: int = Field(default=20, ge=1, le=100)
