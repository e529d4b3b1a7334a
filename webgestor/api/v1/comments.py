"""
Comment routes, nested under their task.
"""
from __future__ import annotations

from fastapi import APIRouter, status

from webgestor.core.dependencies import CurrentUser, Data
from webgestor.core.exceptions import NotFoundException
from webgestor.schemas.comment import Comment, CommentCreate

router = APIRouter(prefix="/tasks", tags=["Comments"])


@router.get(
    "/{task_id}/comments",
    response_model=list[Comment],
    summary="List comments on a task",
)
async def list_comments(task_id: str, current_user: CurrentUser, data: Data) -> list[Comment]:
    if data.get_task_by_id(task_id) is None:
        raise NotFoundException("Task", task_id)
    return data.get_task_comments(task_id)


@router.post(
    "/{task_id}/comments",
    response_model=Comment,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a task",
)
async def add_comment(
    task_id: str, body: CommentCreate, current_user: CurrentUser, data: Data
) -> Comment:
    if data.get_task_by_id(task_id) is None:
        raise NotFoundException("Task", task_id)
    return await data.add_comment(task_id, body.content, current_user=current_user)
