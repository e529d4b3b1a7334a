"""
Authentication service.
Handles registration, login, logout and profile loading.
Business logic lives here; routes only call these methods.
"""
from __future__ import annotations

import asyncio
import logging

from webgestor.auth.provider import AuthProvider, AuthSession, AuthUser
from webgestor.core.config import Settings, settings as default_settings
from webgestor.core.exceptions import (
    ConflictException,
    InvalidTokenException,
    ValidationException,
)
from webgestor.core.security import is_strong_enough, is_valid_email
from webgestor.data.context import DataContext
from webgestor.schemas.auth import AuthResponse
from webgestor.schemas.user import User

logger = logging.getLogger(__name__)


def validate_registration(email: str, password: str, name: str) -> None:
    """Reject bad input before anything reaches the auth provider."""
    if not is_valid_email(email):
        raise ValidationException("Invalid email address", "INVALID_EMAIL")
    if not is_strong_enough(password):
        raise ValidationException(
            f"Password must be at least {default_settings.PASSWORD_MIN_LENGTH} characters",
            "WEAK_PASSWORD",
        )
    if not name or not name.strip():
        raise ValidationException("Name is required", "INVALID_NAME")


class AuthService:

    def __init__(
        self,
        provider: AuthProvider,
        data: DataContext,
        *,
        settings: Settings | None = None,
    ) -> None:
        self.provider = provider
        self.data = data
        self.settings = settings or default_settings

    async def register(self, email: str, password: str, name: str) -> AuthResponse:
        """
        Create the account, make sure its profile exists, then sign in.

        Provisioning normally creates the profile shortly after sign-up. If it
        has not appeared within PROFILE_WAIT_SECONDS, one client-side insert
        with the default role is attempted; if that fails the error surfaces.
        """
        validate_registration(email, password, name)
        auth_user = await self.provider.sign_up(email, password, {"name": name.strip()})

        profile = await self.wait_for_profile(auth_user.id)
        if profile is None:
            logger.warning(
                "Profile for %s not provisioned after %.2fs; creating it",
                auth_user.id,
                self.settings.PROFILE_WAIT_SECONDS,
            )
            await self._create_profile(auth_user)

        session = await self.provider.sign_in(email, password)
        user = await self.load_profile(session.user)
        return self._response(session, user)

    async def login(self, email: str, password: str) -> AuthResponse:
        session = await self.provider.sign_in(email, password)
        user = await self.load_profile(session.user)
        logger.info("User signed in: id=%s", user.id)
        return self._response(session, user)

    async def logout(self, access_token: str) -> None:
        await self.provider.sign_out(access_token)

    async def get_current_profile(self, access_token: str) -> User:
        session = await self.provider.get_session(access_token)
        if session is None:
            raise InvalidTokenException("Invalid or expired access token")
        user = self.data.get_user_by_id(session.user.id)
        if user is not None:
            return user
        return await self.load_profile(session.user)

    # ── Profiles ──────────────────────────────────────────────────────────────

    async def wait_for_profile(self, user_id: str) -> User | None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.settings.PROFILE_WAIT_SECONDS
        while True:
            profile = await self.data.fetch_user(user_id)
            if profile is not None:
                return profile
            remaining = deadline - loop.time()
            if remaining <= 0:
                return None
            await asyncio.sleep(min(self.settings.PROFILE_POLL_INTERVAL_SECONDS, remaining))

    async def load_profile(self, auth_user: AuthUser) -> User:
        """
        Fetch the account's profile, creating it when missing, and promote the
        seed admin account.
        """
        profile = await self.data.fetch_user(auth_user.id)
        if profile is None:
            logger.warning("Profile for %s not found; creating it", auth_user.id)
            profile = await self._create_profile(auth_user)
        return await self._promote_seed_admin(profile)

    async def _create_profile(self, auth_user: AuthUser) -> User:
        profile = User(
            id=auth_user.id,
            email=auth_user.email,
            name=auth_user.metadata.get("name") or "User",
            role=self.settings.DEFAULT_USER_ROLE,
            created_at=self.data.clock.timestamp(),
        )
        try:
            return await self.data.insert_user(profile)
        except ConflictException:
            # provisioned while we were deciding; take the stored record
            existing = self.data.get_user_by_id(auth_user.id)
            if existing is None:
                raise
            return existing

    async def _promote_seed_admin(self, profile: User) -> User:
        seed_email = self.settings.SEED_ADMIN_EMAIL
        if not seed_email or profile.email.lower() != seed_email.strip().lower():
            return profile
        if profile.role == "admin":
            return profile
        promoted = profile.model_copy(
            update={"role": "admin", "name": self.settings.SEED_ADMIN_NAME}
        )
        logger.info("Promoting seed admin account %s", profile.id)
        return await self.data.save_user(promoted)

    async def ensure_seed_admin(self) -> User | None:
        """Create the configured seed admin account once; idempotent."""
        if not self.settings.seed_admin_configured:
            return None
        email = self.settings.SEED_ADMIN_EMAIL or ""
        auth_user = await self.provider.find_user_by_email(email)
        if auth_user is None:
            auth_user = await self.provider.sign_up(
                email,
                self.settings.SEED_ADMIN_PASSWORD or "",
                {"name": self.settings.SEED_ADMIN_NAME},
            )
            logger.info("Seed admin account created: %s", auth_user.id)
        return await self.load_profile(auth_user)

    def _response(self, session: AuthSession, user: User) -> AuthResponse:
        return AuthResponse(
            access_token=session.access_token,
            token_type=session.token_type,
            expires_in=session.expires_in,
            user=user,
        )
