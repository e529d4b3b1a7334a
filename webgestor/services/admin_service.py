"""
Administrative account registration.
Signs a new account up and promotes its profile to admin, reporting every
failure with a stable error code.
"""
from __future__ import annotations

import logging

from webgestor.auth.provider import AuthProvider
from webgestor.core.exceptions import (
    ConflictException,
    RemoteException,
    WebGestorException,
)
from webgestor.data.context import DataContext
from webgestor.schemas.user import User
from webgestor.services.auth_service import validate_registration

logger = logging.getLogger(__name__)


class AdminService:

    def __init__(self, provider: AuthProvider, data: DataContext) -> None:
        self.provider = provider
        self.data = data

    async def register_admin(self, email: str, password: str, name: str) -> str:
        """
        Returns the new account id.

        Error codes: INVALID_EMAIL, WEAK_PASSWORD, INVALID_NAME, EMAIL_IN_USE,
        SIGNUP_ERROR, NO_USER_ID, PROMOTE_ERROR.
        """
        validate_registration(email, password, name)
        name = name.strip()

        try:
            auth_user = await self.provider.sign_up(email, password, {"name": name})
        except WebGestorException as exc:
            if "already" in exc.detail.lower():
                raise ConflictException("Email already registered", "EMAIL_IN_USE") from exc
            raise RemoteException(exc.detail or "Sign-up failed", "SIGNUP_ERROR") from exc

        if not auth_user.id:
            raise RemoteException("Account created without an id", "NO_USER_ID")

        try:
            await self.promote(auth_user.id, email=auth_user.email, name=name)
        except RemoteException as exc:
            raise RemoteException(exc.detail, "PROMOTE_ERROR") from exc

        logger.info("Admin registered: id=%s email=%s", auth_user.id, auth_user.email)
        return auth_user.id

    async def promote(self, user_id: str, *, email: str, name: str | None = None) -> User:
        """Upsert the profile for user_id with the admin role."""
        profile = await self.data.fetch_user(user_id)
        if profile is None:
            profile = User(
                id=user_id,
                email=email,
                name=name or "Admin",
                role="admin",
                created_at=self.data.clock.timestamp(),
            )
        else:
            update: dict[str, str] = {"role": "admin"}
            if name:
                update["name"] = name
            profile = profile.model_copy(update=update)
        return await self.data.save_user(profile)
