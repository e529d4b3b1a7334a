"""
Team and project endpoint tests.
Covers: admin-only management, membership, leadership, delete policy,
project visibility and editing rights, progress.
"""
from __future__ import annotations

from typing import Any

import pytest
from httpx import AsyncClient

from conftest import login_headers, register

pytestmark = pytest.mark.asyncio


async def _create_team(
    client: AsyncClient, headers: dict, name: str = "Core"
) -> dict[str, Any]:
    response = await client.post(
        "/api/v1/teams/", json={"name": name, "description": "Platform"}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _create_project(
    client: AsyncClient, headers: dict, team_id: str, name: str = "Website"
) -> dict[str, Any]:
    response = await client.post(
        "/api/v1/projects/",
        json={"name": name, "teamId": team_id, "startDate": "2024-01-01", "goals": ["launch"]},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestTeams:
    async def test_create_and_list(self, client: AsyncClient, admin_headers: dict) -> None:
        team = await _create_team(client, admin_headers)
        assert team["id"].startswith("team-")
        assert team["name"] == "Core"
        assert "createdAt" in team

        response = await client.get("/api/v1/teams/", headers=admin_headers)
        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == [team["id"]]

    async def test_collaborator_cannot_create(
        self, client: AsyncClient, collaborator_headers: dict
    ) -> None:
        response = await client.post(
            "/api/v1/teams/", json={"name": "Nope"}, headers=collaborator_headers
        )
        assert response.status_code == 403
        assert response.json()["error"] == "FORBIDDEN"

    async def test_blank_name_is_rejected(
        self, client: AsyncClient, admin_headers: dict
    ) -> None:
        response = await client.post("/api/v1/teams/", json={"name": ""}, headers=admin_headers)
        assert response.status_code == 422

    async def test_update_team(self, client: AsyncClient, admin_headers: dict) -> None:
        team = await _create_team(client, admin_headers)
        response = await client.patch(
            f"/api/v1/teams/{team['id']}", json={"name": "Renamed"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"
        assert response.json()["description"] == "Platform"

    async def test_get_missing_team(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.get("/api/v1/teams/team-missing", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    async def test_delete_team(self, client: AsyncClient, admin_headers: dict) -> None:
        team = await _create_team(client, admin_headers)
        response = await client.delete(f"/api/v1/teams/{team['id']}", headers=admin_headers)
        assert response.status_code == 204
        response = await client.get(f"/api/v1/teams/{team['id']}", headers=admin_headers)
        assert response.status_code == 404

    async def test_delete_team_with_projects_conflicts(
        self, client: AsyncClient, admin_headers: dict
    ) -> None:
        team = await _create_team(client, admin_headers)
        await _create_project(client, admin_headers, team["id"])
        response = await client.delete(f"/api/v1/teams/{team['id']}", headers=admin_headers)
        assert response.status_code == 409
        assert response.json()["error"] == "REFERENCED"


class TestMembers:
    async def test_add_list_remove(
        self, client: AsyncClient, admin_headers: dict, collaborator_account: dict
    ) -> None:
        team = await _create_team(client, admin_headers)
        user_id = collaborator_account["id"]

        response = await client.post(
            f"/api/v1/teams/{team['id']}/members",
            json={"userId": user_id},
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert response.json()["teamId"] == team["id"]
        assert "joinedAt" in response.json()

        response = await client.get(f"/api/v1/teams/{team['id']}/members", headers=admin_headers)
        assert [u["id"] for u in response.json()] == [user_id]

        response = await client.delete(
            f"/api/v1/teams/{team['id']}/members/{user_id}", headers=admin_headers
        )
        assert response.status_code == 204
        response = await client.get(f"/api/v1/teams/{team['id']}/members", headers=admin_headers)
        assert response.json() == []

    async def test_add_unknown_user(self, client: AsyncClient, admin_headers: dict) -> None:
        team = await _create_team(client, admin_headers)
        response = await client.post(
            f"/api/v1/teams/{team['id']}/members",
            json={"userId": "nobody"},
            headers=admin_headers,
        )
        assert response.status_code == 404

    async def test_set_leader(
        self, client: AsyncClient, admin_headers: dict, collaborator_account: dict
    ) -> None:
        team = await _create_team(client, admin_headers)
        user_id = collaborator_account["id"]
        response = await client.put(
            f"/api/v1/teams/{team['id']}/leader",
            json={"userId": user_id},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["leaderId"] == user_id

        response = await client.get(f"/api/v1/users/{user_id}", headers=admin_headers)
        assert response.json()["role"] == "leader"


class TestProjects:
    async def test_create_project(self, client: AsyncClient, admin_headers: dict) -> None:
        team = await _create_team(client, admin_headers)
        project = await _create_project(client, admin_headers, team["id"])
        assert project["teamId"] == team["id"]
        assert project["status"] == "active"
        assert project["goals"] == ["launch"]

        response = await client.get(f"/api/v1/teams/{team['id']}/projects", headers=admin_headers)
        assert [p["id"] for p in response.json()] == [project["id"]]

    async def test_create_project_for_missing_team(
        self, client: AsyncClient, admin_headers: dict
    ) -> None:
        response = await client.post(
            "/api/v1/projects/",
            json={"name": "Ghost", "teamId": "team-missing", "startDate": "2024-01-01"},
            headers=admin_headers,
        )
        assert response.status_code == 404

    async def test_visibility_by_role(
        self,
        client: AsyncClient,
        admin_headers: dict,
        leader_account: dict,
        collaborator_headers: dict,
    ) -> None:
        mine = await _create_team(client, admin_headers, "Mine")
        other = await _create_team(client, admin_headers, "Other")
        await client.put(
            f"/api/v1/teams/{mine['id']}/leader",
            json={"userId": leader_account["id"]},
            headers=admin_headers,
        )
        visible = await _create_project(client, admin_headers, mine["id"], "Visible")
        await _create_project(client, admin_headers, other["id"], "Hidden")
        leader_headers = await login_headers(client, "leader@example.com")

        response = await client.get("/api/v1/projects/", headers=admin_headers)
        assert len(response.json()) == 2
        response = await client.get("/api/v1/projects/", headers=leader_headers)
        assert [p["id"] for p in response.json()] == [visible["id"]]
        response = await client.get("/api/v1/projects/", headers=collaborator_headers)
        assert response.json() == []

    async def test_leader_edits_only_own_team_projects(
        self, client: AsyncClient, admin_headers: dict, leader_account: dict
    ) -> None:
        mine = await _create_team(client, admin_headers, "Mine")
        other = await _create_team(client, admin_headers, "Other")
        await client.put(
            f"/api/v1/teams/{mine['id']}/leader",
            json={"userId": leader_account["id"]},
            headers=admin_headers,
        )
        own = await _create_project(client, admin_headers, mine["id"])
        foreign = await _create_project(client, admin_headers, other["id"])
        leader_headers = await login_headers(client, "leader@example.com")

        response = await client.patch(
            f"/api/v1/projects/{own['id']}", json={"status": "paused"}, headers=leader_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "paused"

        response = await client.patch(
            f"/api/v1/projects/{foreign['id']}", json={"status": "paused"}, headers=leader_headers
        )
        assert response.status_code == 403

    async def test_collaborator_cannot_edit(
        self, client: AsyncClient, admin_headers: dict, collaborator_headers: dict
    ) -> None:
        team = await _create_team(client, admin_headers)
        project = await _create_project(client, admin_headers, team["id"])
        response = await client.patch(
            f"/api/v1/projects/{project['id']}",
            json={"name": "Mine now"},
            headers=collaborator_headers,
        )
        assert response.status_code == 403

    async def test_progress_and_delete(self, client: AsyncClient, admin_headers: dict) -> None:
        team = await _create_team(client, admin_headers)
        project = await _create_project(client, admin_headers, team["id"])
        for title in ("A", "B", "C"):
            await client.post(
                "/api/v1/tasks/",
                json={"title": title, "projectId": project["id"]},
                headers=admin_headers,
            )
        tasks = (await client.get(f"/api/v1/projects/{project['id']}/tasks", headers=admin_headers)).json()
        await client.patch(
            f"/api/v1/tasks/{tasks[0]['id']}", json={"status": "done"}, headers=admin_headers
        )

        response = await client.get(
            f"/api/v1/projects/{project['id']}/progress", headers=admin_headers
        )
        assert response.json() == {
            "projectId": project["id"],
            "totalTasks": 3,
            "completedTasks": 1,
            "progress": 33,
        }

        response = await client.delete(f"/api/v1/projects/{project['id']}", headers=admin_headers)
        assert response.status_code == 409

    async def test_register_then_join(self, client: AsyncClient, admin_headers: dict) -> None:
        team = await _create_team(client, admin_headers)
        body = await register(client, "late@example.com", name="Late Joiner")
        response = await client.post(
            f"/api/v1/teams/{team['id']}/members",
            json={"userId": body["user"]["id"]},
            headers=admin_headers,
        )
        assert response.status_code == 201
