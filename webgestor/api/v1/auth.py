"""
Authentication routes.
POST /auth/register, /auth/login, /auth/logout; GET and PATCH /auth/me
"""
from fastapi import APIRouter, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from webgestor.core.config import settings
from webgestor.core.dependencies import AccessToken, Auth, CurrentUser, Data
from webgestor.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from webgestor.schemas.user import ProfileUpdate, User

router = APIRouter(prefix="/auth", tags=["Authentication"])

limiter = Limiter(key_func=get_remote_address)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account and sign in",
)
async def register(body: RegisterRequest, auth: Auth) -> AuthResponse:
    return await auth.register(body.email, body.password, body.name)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Authenticate and receive a session token",
)
@limiter.limit(settings.RATE_LIMIT_LOGIN)
async def login(request: Request, credentials: LoginRequest, auth: Auth) -> AuthResponse:
    return await auth.login(credentials.email, credentials.password)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke the current session token",
)
async def logout(current_user: CurrentUser, token: AccessToken, auth: Auth) -> None:
    await auth.logout(token)


@router.get("/me", response_model=User, summary="Get my profile")
async def read_me(current_user: CurrentUser) -> User:
    return current_user


@router.patch("/me", response_model=User, summary="Update my name or avatar")
async def update_me(body: ProfileUpdate, current_user: CurrentUser, data: Data) -> User:
    await data.update_user_profile(current_user.id, body, current_user=current_user)
    return data.get_user_by_id(current_user.id) or current_user
