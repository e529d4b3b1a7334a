"""
Role-scoped read views over a DataContext.
Everything here is recomputed on each call from the current collections.
"""
from __future__ import annotations

import math
from datetime import datetime

from webgestor.core.clock import parse_timestamp
from webgestor.data.context import DataContext
from webgestor.schemas.dashboard import DashboardStats
from webgestor.schemas.project import Project, ProjectProgress
from webgestor.schemas.task import Task
from webgestor.schemas.user import User

TASK_STATUSES = ("todo", "in_progress", "done")


def percentage(part: int, total: int) -> int:
    """Rounded percentage, halves rounded up."""
    if total <= 0:
        return 0
    return math.floor(part * 100 / total + 0.5)


def team_tasks(ctx: DataContext, team_id: str) -> list[Task]:
    tasks: list[Task] = []
    for project in ctx.get_team_projects(team_id):
        tasks.extend(ctx.get_project_tasks(project.id))
    return tasks


def visible_tasks(ctx: DataContext, user: User) -> list[Task]:
    if user.role == "admin":
        return ctx.tasks
    if user.role == "leader":
        team = ctx.get_user_team(user.id)
        return team_tasks(ctx, team.id) if team is not None else []
    return ctx.get_user_tasks(user.id)


def visible_projects(ctx: DataContext, user: User) -> list[Project]:
    if user.role == "admin":
        return ctx.projects
    if user.role == "leader":
        team = ctx.get_user_team(user.id)
        return ctx.get_team_projects(team.id) if team is not None else []
    return []


def filter_tasks(
    tasks: list[Task],
    *,
    search: str | None = None,
    status: str | None = None,
    priority: str | None = None,
) -> list[Task]:
    needle = search.strip().lower() if search else ""
    result = []
    for task in tasks:
        if status and task.status != status:
            continue
        if priority and task.priority != priority:
            continue
        if needle:
            haystack = f"{task.title}\n{task.description or ''}".lower()
            if needle not in haystack:
                continue
        result.append(task)
    return result


def group_tasks_by_status(tasks: list[Task]) -> dict[str, list[Task]]:
    groups: dict[str, list[Task]] = {status: [] for status in TASK_STATUSES}
    for task in tasks:
        groups[task.status].append(task)
    return groups


def can_change_status(user: User, task: Task) -> bool:
    return user.role in ("admin", "leader") or task.assignee_id == user.id


def is_overdue(task: Task, now: datetime) -> bool:
    if not task.due_date or task.status == "done":
        return False
    return parse_timestamp(task.due_date) < now


def project_progress(ctx: DataContext, project_id: str) -> ProjectProgress:
    tasks = ctx.get_project_tasks(project_id)
    done = sum(1 for t in tasks if t.status == "done")
    return ProjectProgress(
        project_id=project_id,
        total_tasks=len(tasks),
        completed_tasks=done,
        progress=percentage(done, len(tasks)),
    )


def dashboard_stats(
    ctx: DataContext, user: User, now: datetime | None = None
) -> DashboardStats | None:
    """
    Totals for the user's dashboard: every task for admins, the team's
    tasks for leaders (None without a team), own tasks for collaborators.
    """
    now = now or ctx.clock.now()
    team = None
    if user.role == "admin":
        tasks = ctx.tasks
    elif user.role == "leader":
        team = ctx.get_user_team(user.id)
        if team is None:
            return None
        tasks = team_tasks(ctx, team.id)
    else:
        tasks = ctx.get_user_tasks(user.id)

    groups = group_tasks_by_status(tasks)
    stats = DashboardStats(
        role=user.role,
        total_tasks=len(tasks),
        completed_tasks=len(groups["done"]),
        in_progress_tasks=len(groups["in_progress"]),
        overdue_tasks=sum(1 for t in tasks if is_overdue(t, now)),
        completion_rate=percentage(len(groups["done"]), len(tasks)),
    )
    if user.role == "admin":
        stats.teams = len(ctx.teams)
        stats.projects = len(ctx.projects)
        stats.users = len(ctx.users)
    elif user.role == "leader":
        stats.team = team
        stats.projects = len(ctx.get_team_projects(team.id))
    else:
        stats.todo_tasks = len(groups["todo"])
    return stats
