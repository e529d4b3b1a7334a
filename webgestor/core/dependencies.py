"""
FastAPI dependency injection functions.
Provides the runtime pieces plus get_current_user and require_admin.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from webgestor.core.exceptions import ForbiddenException, UnauthenticatedException
from webgestor.data.context import DataContext
from webgestor.runtime import Runtime
from webgestor.schemas.user import User
from webgestor.services.admin_service import AdminService
from webgestor.services.auth_service import AuthService

__all__ = [
    "get_runtime",
    "get_data",
    "get_current_user",
    "require_admin",
    "Data",
    "Auth",
    "CurrentUser",
    "AdminUser",
]

bearer_scheme = HTTPBearer(auto_error=False)


def get_runtime(request: Request) -> Runtime:
    return request.app.state.runtime


def get_data(runtime: Annotated[Runtime, Depends(get_runtime)]) -> DataContext:
    return runtime.data


def get_auth_service(runtime: Annotated[Runtime, Depends(get_runtime)]) -> AuthService:
    return runtime.auth


def get_admin_service(runtime: Annotated[Runtime, Depends(get_runtime)]) -> AdminService:
    return runtime.admin


async def get_access_token(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ] = None,
) -> str:
    if credentials is None:
        raise UnauthenticatedException("Missing authentication token")
    return credentials.credentials


async def get_current_user(
    auth: Annotated[AuthService, Depends(get_auth_service)],
    token: Annotated[str, Depends(get_access_token)],
) -> User:
    """
    Resolve the bearer token to the signed-in user's profile.
    """
    return await auth.get_current_profile(token)


async def require_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency that requires the current user to have the 'admin' role."""
    if current_user.role != "admin":
        raise ForbiddenException("Admin privileges required")
    return current_user


# Convenience type aliases for route signatures
Data = Annotated[DataContext, Depends(get_data)]
Auth = Annotated[AuthService, Depends(get_auth_service)]
Admin = Annotated[AdminService, Depends(get_admin_service)]
AccessToken = Annotated[str, Depends(get_access_token)]
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
