"""
Read view tests: role scoping, filtering, progress and dashboard totals.
"""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from webgestor.data import views
from webgestor.data.context import DataContext
from webgestor.schemas.user import User

pytestmark = pytest.mark.asyncio

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


async def _seed(data: DataContext, admin: User, leader: User, collaborator: User) -> dict:
    team = await data.create_team({"name": "Core"}, current_user=admin)
    other = await data.create_team({"name": "Other"}, current_user=admin)
    await data.set_team_leader(team.id, leader.id, current_user=admin)
    await data.add_team_member(team.id, collaborator.id, current_user=admin)

    project = await data.create_project(
        {"name": "Website", "teamId": team.id, "startDate": "2024-01-01"}, current_user=admin
    )
    elsewhere = await data.create_project(
        {"name": "Mobile", "teamId": other.id, "startDate": "2024-01-01"}, current_user=admin
    )

    mine_late = await data.create_task(
        {
            "title": "Fix login bug",
            "description": "Session expires early",
            "projectId": project.id,
            "assigneeId": collaborator.id,
            "priority": "urgent",
            "dueDate": "2024-05-01",
        },
        current_user=admin,
    )
    mine_done = await data.create_task(
        {
            "title": "Write release notes",
            "projectId": project.id,
            "assigneeId": collaborator.id,
            "dueDate": "2024-05-01",
        },
        current_user=admin,
    )
    await data.update_task(mine_done.id, {"status": "done"}, current_user=admin)
    team_task = await data.create_task(
        {"title": "Plan sprint", "projectId": project.id, "assigneeId": leader.id},
        current_user=admin,
    )
    await data.update_task(team_task.id, {"status": "in_progress"}, current_user=admin)
    foreign = await data.create_task(
        {"title": "Ship app", "projectId": elsewhere.id}, current_user=admin
    )
    return {
        "team": team,
        "project": project,
        "elsewhere": elsewhere,
        "mine_late": mine_late,
        "mine_done": mine_done,
        "team_task": team_task,
        "foreign": foreign,
    }


class TestPercentage:
    @pytest.mark.parametrize(
        ("part", "total", "expected"),
        [(0, 0, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (3, 8, 38), (4, 4, 100)],
    )
    async def test_rounds_halves_up(self, part: int, total: int, expected: int) -> None:
        assert views.percentage(part, total) == expected


class TestVisibility:
    async def test_tasks_by_role(
        self, data: DataContext, admin: User, leader: User, collaborator: User
    ) -> None:
        seeded = await _seed(data, admin, leader, collaborator)

        assert len(views.visible_tasks(data, admin)) == 4
        assert {t.id for t in views.visible_tasks(data, leader)} == {
            seeded["mine_late"].id,
            seeded["mine_done"].id,
            seeded["team_task"].id,
        }
        assert {t.id for t in views.visible_tasks(data, collaborator)} == {
            seeded["mine_late"].id,
            seeded["mine_done"].id,
        }

    async def test_projects_by_role(
        self, data: DataContext, admin: User, leader: User, collaborator: User
    ) -> None:
        seeded = await _seed(data, admin, leader, collaborator)
        assert len(views.visible_projects(data, admin)) == 2
        assert views.visible_projects(data, leader) == [seeded["project"]]
        assert views.visible_projects(data, collaborator) == []

    async def test_leader_without_team_sees_nothing(
        self, data: DataContext, leader: User
    ) -> None:
        assert views.visible_tasks(data, leader) == []
        assert views.visible_projects(data, leader) == []


class TestFilters:
    async def test_search_status_priority(
        self, data: DataContext, admin: User, leader: User, collaborator: User
    ) -> None:
        seeded = await _seed(data, admin, leader, collaborator)
        tasks = data.tasks

        assert views.filter_tasks(tasks, search="SESSION") == [seeded["mine_late"]]
        assert views.filter_tasks(tasks, search="  notes ") == [data.get_task_by_id(seeded["mine_done"].id)]
        assert [t.title for t in views.filter_tasks(tasks, status="in_progress")] == ["Plan sprint"]
        assert [t.title for t in views.filter_tasks(tasks, priority="urgent")] == ["Fix login bug"]
        assert views.filter_tasks(tasks, status="done", priority="urgent") == []
        assert len(views.filter_tasks(tasks)) == 4

    async def test_group_by_status(
        self, data: DataContext, admin: User, leader: User, collaborator: User
    ) -> None:
        await _seed(data, admin, leader, collaborator)
        groups = views.group_tasks_by_status(data.tasks)
        assert {status: len(items) for status, items in groups.items()} == {
            "todo": 2,
            "in_progress": 1,
            "done": 1,
        }

    async def test_can_change_status(
        self, data: DataContext, admin: User, leader: User, collaborator: User
    ) -> None:
        seeded = await _seed(data, admin, leader, collaborator)
        assert views.can_change_status(collaborator, seeded["mine_late"])
        assert not views.can_change_status(collaborator, seeded["team_task"])
        assert views.can_change_status(leader, seeded["foreign"])


class TestProgressAndDashboard:
    async def test_project_progress(
        self, data: DataContext, admin: User, leader: User, collaborator: User
    ) -> None:
        seeded = await _seed(data, admin, leader, collaborator)
        progress = views.project_progress(data, seeded["project"].id)
        assert (progress.total_tasks, progress.completed_tasks, progress.progress) == (3, 1, 33)
        assert views.project_progress(data, "project-empty").progress == 0

    async def test_admin_dashboard(
        self, data: DataContext, admin: User, leader: User, collaborator: User
    ) -> None:
        await _seed(data, admin, leader, collaborator)
        stats = views.dashboard_stats(data, admin, now=NOW)
        assert (stats.total_tasks, stats.completed_tasks, stats.in_progress_tasks) == (4, 1, 1)
        assert stats.overdue_tasks == 1
        assert stats.completion_rate == 25
        assert (stats.teams, stats.projects, stats.users) == (2, 2, 3)
        assert stats.todo_tasks is None

    async def test_leader_dashboard(
        self, data: DataContext, admin: User, leader: User, collaborator: User
    ) -> None:
        seeded = await _seed(data, admin, leader, collaborator)
        stats = views.dashboard_stats(data, leader, now=NOW)
        assert stats.team.id == seeded["team"].id
        assert (stats.total_tasks, stats.completion_rate, stats.projects) == (3, 33, 1)

    async def test_leader_without_team_has_no_dashboard(
        self, data: DataContext, leader: User
    ) -> None:
        assert views.dashboard_stats(data, leader, now=NOW) is None

    async def test_collaborator_dashboard(
        self, data: DataContext, admin: User, leader: User, collaborator: User
    ) -> None:
        await _seed(data, admin, leader, collaborator)
        stats = views.dashboard_stats(data, collaborator, now=NOW)
        assert (stats.total_tasks, stats.completed_tasks, stats.todo_tasks) == (2, 1, 1)
        assert stats.overdue_tasks == 1
        assert stats.completion_rate == 50
        assert stats.teams is None
        assert stats.to_json()["completionRate"] == 50
