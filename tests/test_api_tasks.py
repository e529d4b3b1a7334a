"""
Task and comment endpoint tests.
Covers: create, role-scoped list with filters and pagination, collaborator
status-only updates, delete, comments.
"""
from __future__ import annotations

from typing import Any

import pytest
import pytest_asyncio
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def project(client: AsyncClient, admin_headers: dict) -> dict[str, Any]:
    team = (
        await client.post("/api/v1/teams/", json={"name": "Core"}, headers=admin_headers)
    ).json()
    response = await client.post(
        "/api/v1/projects/",
        json={"name": "Website", "teamId": team["id"], "startDate": "2024-01-01"},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _create_task(
    client: AsyncClient, headers: dict, project_id: str, **kwargs: Any
) -> dict[str, Any]:
    payload = {"title": "Test Task", "projectId": project_id, **kwargs}
    response = await client.post("/api/v1/tasks/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateTask:
    async def test_create_task_success(
        self, client: AsyncClient, admin_headers: dict, project: dict
    ) -> None:
        task = await _create_task(
            client,
            admin_headers,
            project["id"],
            title="My First Task",
            priority="high",
            dueDate="2030-01-01",
        )
        assert task["title"] == "My First Task"
        assert task["status"] == "todo"
        assert task["priority"] == "high"
        assert task["projectId"] == project["id"]
        assert task["createdAt"] == task["updatedAt"]

    async def test_status_on_create_is_ignored(
        self, client: AsyncClient, admin_headers: dict, project: dict
    ) -> None:
        task = await _create_task(client, admin_headers, project["id"], status="done")
        assert task["status"] == "todo"

    async def test_collaborator_cannot_create(
        self, client: AsyncClient, collaborator_headers: dict, project: dict
    ) -> None:
        response = await client.post(
            "/api/v1/tasks/",
            json={"title": "Nope", "projectId": project["id"]},
            headers=collaborator_headers,
        )
        assert response.status_code == 403

    async def test_missing_project(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.post(
            "/api/v1/tasks/",
            json={"title": "Orphan", "projectId": "project-missing"},
            headers=admin_headers,
        )
        assert response.status_code == 404

    async def test_invalid_priority(
        self, client: AsyncClient, admin_headers: dict, project: dict
    ) -> None:
        response = await client.post(
            "/api/v1/tasks/",
            json={"title": "X", "projectId": project["id"], "priority": "critical"},
            headers=admin_headers,
        )
        assert response.status_code == 422

    async def test_unauthenticated(self, client: AsyncClient, project: dict) -> None:
        response = await client.post(
            "/api/v1/tasks/", json={"title": "X", "projectId": project["id"]}
        )
        assert response.status_code == 401


class TestListTasks:
    async def test_pagination(
        self, client: AsyncClient, admin_headers: dict, project: dict
    ) -> None:
        for i in range(3):
            await _create_task(client, admin_headers, project["id"], title=f"Paginated {i}")

        response = await client.get("/api/v1/tasks/?page=2&size=2", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert (data["total"], data["page"], data["size"], data["pages"]) == (3, 2, 2, 2)
        assert [t["title"] for t in data["items"]] == ["Paginated 2"]

    async def test_filters(
        self, client: AsyncClient, admin_headers: dict, project: dict
    ) -> None:
        urgent = await _create_task(
            client, admin_headers, project["id"], title="Unique XYZ", priority="urgent"
        )
        other = await _create_task(client, admin_headers, project["id"], title="Another")
        await client.patch(
            f"/api/v1/tasks/{other['id']}", json={"status": "done"}, headers=admin_headers
        )

        items = (await client.get("/api/v1/tasks/?search=xyz", headers=admin_headers)).json()["items"]
        assert [t["id"] for t in items] == [urgent["id"]]
        items = (await client.get("/api/v1/tasks/?status=done", headers=admin_headers)).json()["items"]
        assert [t["id"] for t in items] == [other["id"]]
        items = (await client.get("/api/v1/tasks/?priority=urgent", headers=admin_headers)).json()["items"]
        assert [t["id"] for t in items] == [urgent["id"]]

    async def test_invalid_status_filter(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.get("/api/v1/tasks/?status=archived", headers=admin_headers)
        assert response.status_code == 422

    async def test_collaborator_sees_only_own(
        self,
        client: AsyncClient,
        admin_headers: dict,
        collaborator_headers: dict,
        collaborator_account: dict,
        project: dict,
    ) -> None:
        mine = await _create_task(
            client, admin_headers, project["id"], assigneeId=collaborator_account["id"]
        )
        await _create_task(client, admin_headers, project["id"], title="Someone else's")

        data = (await client.get("/api/v1/tasks/", headers=collaborator_headers)).json()
        assert [t["id"] for t in data["items"]] == [mine["id"]]

        response = await client.get(
            f"/api/v1/users/{collaborator_account['id']}/tasks", headers=collaborator_headers
        )
        assert [t["id"] for t in response.json()] == [mine["id"]]


class TestUpdateTask:
    async def test_admin_updates_any_field(
        self, client: AsyncClient, admin_headers: dict, project: dict
    ) -> None:
        task = await _create_task(client, admin_headers, project["id"])
        response = await client.patch(
            f"/api/v1/tasks/{task['id']}",
            json={"title": "Updated Title", "status": "in_progress"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Updated Title"
        assert data["status"] == "in_progress"
        assert data["updatedAt"] > task["updatedAt"]

    async def test_assignee_moves_status(
        self,
        client: AsyncClient,
        admin_headers: dict,
        collaborator_headers: dict,
        collaborator_account: dict,
        project: dict,
    ) -> None:
        task = await _create_task(
            client, admin_headers, project["id"], assigneeId=collaborator_account["id"]
        )
        response = await client.patch(
            f"/api/v1/tasks/{task['id']}", json={"status": "done"}, headers=collaborator_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "done"

    async def test_assignee_cannot_edit_other_fields(
        self,
        client: AsyncClient,
        admin_headers: dict,
        collaborator_headers: dict,
        collaborator_account: dict,
        project: dict,
    ) -> None:
        task = await _create_task(
            client, admin_headers, project["id"], assigneeId=collaborator_account["id"]
        )
        response = await client.patch(
            f"/api/v1/tasks/{task['id']}", json={"title": "Hijacked"}, headers=collaborator_headers
        )
        assert response.status_code == 403

    async def test_collaborator_cannot_touch_unassigned(
        self, client: AsyncClient, admin_headers: dict, collaborator_headers: dict, project: dict
    ) -> None:
        task = await _create_task(client, admin_headers, project["id"])
        response = await client.patch(
            f"/api/v1/tasks/{task['id']}", json={"status": "done"}, headers=collaborator_headers
        )
        assert response.status_code == 403

    async def test_null_title_is_rejected(
        self, client: AsyncClient, admin_headers: dict, project: dict
    ) -> None:
        task = await _create_task(client, admin_headers, project["id"])
        response = await client.patch(
            f"/api/v1/tasks/{task['id']}", json={"title": None}, headers=admin_headers
        )
        assert response.status_code == 422

        response = await client.get(f"/api/v1/tasks/{task['id']}", headers=admin_headers)
        assert response.json()["title"] == "Test Task"

    async def test_update_missing_task(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.patch(
            "/api/v1/tasks/task-missing", json={"status": "done"}, headers=admin_headers
        )
        assert response.status_code == 404


class TestDeleteTask:
    async def test_delete(
        self, client: AsyncClient, admin_headers: dict, project: dict
    ) -> None:
        task = await _create_task(client, admin_headers, project["id"])
        response = await client.delete(f"/api/v1/tasks/{task['id']}", headers=admin_headers)
        assert response.status_code == 204

        response = await client.get(f"/api/v1/tasks/{task['id']}", headers=admin_headers)
        assert response.status_code == 404

    async def test_collaborator_cannot_delete(
        self, client: AsyncClient, admin_headers: dict, collaborator_headers: dict, project: dict
    ) -> None:
        task = await _create_task(client, admin_headers, project["id"])
        response = await client.delete(
            f"/api/v1/tasks/{task['id']}", headers=collaborator_headers
        )
        assert response.status_code == 403


class TestComments:
    async def test_add_and_list(
        self,
        client: AsyncClient,
        admin_headers: dict,
        collaborator_headers: dict,
        collaborator_account: dict,
        project: dict,
    ) -> None:
        task = await _create_task(
            client, admin_headers, project["id"], assigneeId=collaborator_account["id"]
        )
        response = await client.post(
            f"/api/v1/tasks/{task['id']}/comments",
            json={"content": "Please review"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        comment = response.json()
        assert comment["taskId"] == task["id"]

        response = await client.get(
            f"/api/v1/tasks/{task['id']}/comments", headers=collaborator_headers
        )
        assert [c["content"] for c in response.json()] == ["Please review"]

        response = await client.get("/api/v1/notifications/", headers=collaborator_headers)
        types = [n["type"] for n in response.json()["items"]]
        assert types == ["new_comment", "task_assigned"]

    async def test_empty_comment(
        self, client: AsyncClient, admin_headers: dict, project: dict
    ) -> None:
        task = await _create_task(client, admin_headers, project["id"])
        response = await client.post(
            f"/api/v1/tasks/{task['id']}/comments", json={"content": ""}, headers=admin_headers
        )
        assert response.status_code == 422

    async def test_comment_on_missing_task(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.post(
            "/api/v1/tasks/task-missing/comments", json={"content": "Hi"}, headers=admin_headers
        )
        assert response.status_code == 404
