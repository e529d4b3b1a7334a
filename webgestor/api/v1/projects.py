"""
Project routes.
Creation and deletion are admin-only; leaders may edit their own team's
projects.
"""
from __future__ import annotations

from fastapi import APIRouter, status

from webgestor.core.dependencies import AdminUser, CurrentUser, Data
from webgestor.core.exceptions import ForbiddenException, NotFoundException
from webgestor.data import views
from webgestor.data.context import DataContext
from webgestor.schemas.project import Project, ProjectCreate, ProjectProgress, ProjectUpdate
from webgestor.schemas.task import Task
from webgestor.schemas.user import User

router = APIRouter(prefix="/projects", tags=["Projects"])


def _get_project_or_404(data: DataContext, project_id: str) -> Project:
    project = data.get_project_by_id(project_id)
    if project is None:
        raise NotFoundException("Project", project_id)
    return project


def _can_edit(data: DataContext, user: User, project: Project) -> bool:
    if user.role == "admin":
        return True
    if user.role != "leader":
        return False
    team = data.get_user_team(user.id)
    return team is not None and team.id == project.team_id


@router.get("/", response_model=list[Project], summary="List projects visible to me")
async def list_projects(current_user: CurrentUser, data: Data) -> list[Project]:
    return views.visible_projects(data, current_user)


@router.post(
    "/",
    response_model=Project,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
async def create_project(
    project_in: ProjectCreate, current_user: AdminUser, data: Data
) -> Project:
    if data.get_team_by_id(project_in.team_id) is None:
        raise NotFoundException("Team", project_in.team_id)
    return await data.create_project(project_in, current_user=current_user)


@router.get("/{project_id}", response_model=Project, summary="Get a project by ID")
async def get_project(project_id: str, current_user: CurrentUser, data: Data) -> Project:
    return _get_project_or_404(data, project_id)


@router.patch("/{project_id}", response_model=Project, summary="Update a project")
async def update_project(
    project_id: str, project_in: ProjectUpdate, current_user: CurrentUser, data: Data
) -> Project:
    project = _get_project_or_404(data, project_id)
    if not _can_edit(data, current_user, project):
        raise ForbiddenException("Only admins and the team's leader can edit this project")
    await data.update_project(project_id, project_in, current_user=current_user)
    return _get_project_or_404(data, project_id)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a project",
)
async def delete_project(project_id: str, current_user: AdminUser, data: Data) -> None:
    await data.delete_project(project_id, current_user=current_user)


@router.get("/{project_id}/tasks", response_model=list[Task], summary="List project tasks")
async def list_project_tasks(
    project_id: str, current_user: CurrentUser, data: Data
) -> list[Task]:
    _get_project_or_404(data, project_id)
    return data.get_project_tasks(project_id)


@router.get(
    "/{project_id}/progress",
    response_model=ProjectProgress,
    summary="Share of the project's tasks that are done",
)
async def get_progress(
    project_id: str, current_user: CurrentUser, data: Data
) -> ProjectProgress:
    _get_project_or_404(data, project_id)
    return views.project_progress(data, project_id)
