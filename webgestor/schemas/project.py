"""
Project schemas.
"""
from __future__ import annotations

from pydantic import Field

from webgestor.schemas.common import (
    EntityModel,
    IsoTimestamp,
    PayloadModel,
    ProjectStatus,
)


class Project(EntityModel):
    id: str
    name: str
    description: str | None = None
    team_id: str
    status: ProjectStatus = "active"
    start_date: IsoTimestamp
    end_date: IsoTimestamp | None = None
    goals: list[str] | None = None
    created_at: IsoTimestamp


class ProjectCreate(PayloadModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    team_id: str = Field(min_length=1)
    status: ProjectStatus = "active"
    start_date: IsoTimestamp
    end_date: IsoTimestamp | None = None
    goals: list[str] | None = None


class ProjectUpdate(PayloadModel):
    non_nullable = ("name", "team_id", "status", "start_date")

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    team_id: str | None = Field(default=None, min_length=1)
    status: ProjectStatus | None = None
    start_date: IsoTimestamp | None = None
    end_date: IsoTimestamp | None = None
    goals: list[str] | None = None


class ProjectProgress(EntityModel):
    project_id: str
    total_tasks: int
    completed_tasks: int
    progress: int
