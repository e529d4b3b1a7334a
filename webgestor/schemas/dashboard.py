"""
Dashboard statistics schema. Which fields are filled depends on the role of
the user the statistics were computed for.
"""
from __future__ import annotations

from webgestor.schemas.common import EntityModel, UserRole
from webgestor.schemas.team import Team


class DashboardStats(EntityModel):
    role: UserRole
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    overdue_tasks: int
    completion_rate: int
    todo_tasks: int | None = None
    teams: int | None = None
    projects: int | None = None
    users: int | None = None
    team: Team | None = None
