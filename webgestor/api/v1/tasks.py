"""
Task routes.
Listing is role-scoped with search / status / priority filters and
pagination. Collaborators may only move the status of their own tasks.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from webgestor.core.dependencies import CurrentUser, Data
from webgestor.core.exceptions import ForbiddenException, NotFoundException
from webgestor.data import views
from webgestor.data.context import DataContext
from webgestor.schemas.common import TaskPriority, TaskStatus
from webgestor.schemas.pagination import PaginatedResponse
from webgestor.schemas.task import Task, TaskCreate, TaskFilter, TaskUpdate
from webgestor.schemas.user import User

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def _task_filter_params(
    status: TaskStatus | None = Query(default=None),
    priority: TaskPriority | None = Query(default=None),
    search: str | None = Query(default=None, max_length=200),
    page: int = Query(default=1, ge=1),
    size: int = Query(default=20, ge=1, le=100),
) -> TaskFilter:
    return TaskFilter(
        status=status,
        priority=priority,
        search=search,
        page=page,
        size=size,
    )


def _get_task_or_404(data: DataContext, task_id: str) -> Task:
    task = data.get_task_by_id(task_id)
    if task is None:
        raise NotFoundException("Task", task_id)
    return task


def _require_manager(user: User) -> None:
    if user.role not in ("admin", "leader"):
        raise ForbiddenException("Only admins and leaders can manage tasks")


@router.get(
    "/",
    response_model=PaginatedResponse[Task],
    summary="List tasks visible to me",
)
async def list_tasks(
    current_user: CurrentUser,
    data: Data,
    filters: Annotated[TaskFilter, Depends(_task_filter_params)],
) -> PaginatedResponse[Task]:
    tasks = views.filter_tasks(
        views.visible_tasks(data, current_user),
        search=filters.search,
        status=filters.status,
        priority=filters.priority,
    )
    return PaginatedResponse[Task].from_sequence(tasks, page=filters.page, size=filters.size)


@router.post(
    "/",
    response_model=Task,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
async def create_task(task_in: TaskCreate, current_user: CurrentUser, data: Data) -> Task:
    _require_manager(current_user)
    if data.get_project_by_id(task_in.project_id) is None:
        raise NotFoundException("Project", task_in.project_id)
    return await data.create_task(task_in, current_user=current_user)


@router.get("/{task_id}", response_model=Task, summary="Get a task by ID")
async def get_task(task_id: str, current_user: CurrentUser, data: Data) -> Task:
    return _get_task_or_404(data, task_id)


@router.patch("/{task_id}", response_model=Task, summary="Update a task")
async def update_task(
    task_id: str, task_in: TaskUpdate, current_user: CurrentUser, data: Data
) -> Task:
    task = _get_task_or_404(data, task_id)
    if current_user.role == "collaborator":
        if not views.can_change_status(current_user, task):
            raise ForbiddenException("You can only update tasks assigned to you")
        if task_in.model_fields_set - {"status"}:
            raise ForbiddenException("Collaborators can only change the task status")
    await data.update_task(task_id, task_in, current_user=current_user)
    return _get_task_or_404(data, task_id)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a task",
)
async def delete_task(task_id: str, current_user: CurrentUser, data: Data) -> None:
    _require_manager(current_user)
    await data.delete_task(task_id, current_user=current_user)
