"""
User routes.
Role changes and admin registration are admin-only.
"""
from __future__ import annotations

from fastapi import APIRouter, status

from webgestor.core.dependencies import Admin, AdminUser, CurrentUser, Data
from webgestor.core.exceptions import NotFoundException
from webgestor.schemas.auth import RegisterAdminRequest, RegisterAdminResponse
from webgestor.schemas.task import Task
from webgestor.schemas.user import User, UserRoleUpdate

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/", response_model=list[User], summary="List users")
async def list_users(current_user: CurrentUser, data: Data) -> list[User]:
    return data.users


@router.post(
    "/admins",
    response_model=RegisterAdminResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new administrator account",
)
async def register_admin(
    body: RegisterAdminRequest, current_user: AdminUser, admin: Admin
) -> RegisterAdminResponse:
    user_id = await admin.register_admin(body.email, body.password, body.name)
    return RegisterAdminResponse(user_id=user_id)


@router.get("/{user_id}", response_model=User, summary="Get a user by ID")
async def get_user(user_id: str, current_user: CurrentUser, data: Data) -> User:
    user = data.get_user_by_id(user_id)
    if user is None:
        raise NotFoundException("User", user_id)
    return user


@router.patch("/{user_id}/role", response_model=User, summary="Change a user's role")
async def update_role(
    user_id: str, body: UserRoleUpdate, current_user: AdminUser, data: Data
) -> User:
    if data.get_user_by_id(user_id) is None:
        raise NotFoundException("User", user_id)
    await data.update_user_role(user_id, body.role, current_user=current_user)
    return data.get_user_by_id(user_id)


@router.get("/{user_id}/tasks", response_model=list[Task], summary="Tasks assigned to a user")
async def list_user_tasks(user_id: str, current_user: CurrentUser, data: Data) -> list[Task]:
    return data.get_user_tasks(user_id)
