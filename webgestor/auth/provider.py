"""
Auth provider contract and the local implementation.

The domain layer treats authentication as a black box: it needs a stable
account id, the email and the sign-up metadata, and it listens for account
events. `LocalAuthProvider` keeps accounts in a storage adapter, hashes
passwords with bcrypt and issues JWT session tokens.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from jose import JWTError
from sqlalchemy.exc import SQLAlchemyError

from webgestor.core.clock import default_clock
from webgestor.core.config import settings
from webgestor.core.exceptions import (
    ConflictException,
    InvalidCredentialsException,
    NotFoundException,
    RemoteException,
    ValidationException,
)
from webgestor.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    is_strong_enough,
    is_valid_email,
    verify_password,
)
from webgestor.storage.base import StorageAdapter

logger = logging.getLogger(__name__)

ACCOUNTS_KEY = "webgestor_accounts"

SIGNED_UP = "SIGNED_UP"
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
USER_DELETED = "USER_DELETED"


@dataclass
class AuthUser:
    id: str
    email: str
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: str = ""


@dataclass
class AuthSession:
    access_token: str
    user: AuthUser
    expires_in: int
    token_type: str = "bearer"


AuthCallback = Callable[[str, AuthUser | None], Awaitable[None]]
ProfileHook = Callable[[AuthUser], Awaitable[None]]


class AuthProvider(ABC):

    def __init__(self) -> None:
        self._listeners: list[AuthCallback] = []

    def on_auth_state_change(self, callback: AuthCallback) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _emit(self, event: str, user: AuthUser | None) -> None:
        for callback in list(self._listeners):
            try:
                await callback(event, user)
            except Exception:
                logger.exception("Auth listener failed on %s", event)

    @abstractmethod
    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> AuthUser: ...

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession: ...

    @abstractmethod
    async def sign_out(self, access_token: str) -> None: ...

    @abstractmethod
    async def get_session(self, access_token: str) -> AuthSession | None: ...

    @abstractmethod
    async def admin_create_user(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> AuthUser: ...

    @abstractmethod
    async def admin_list_users(self, page: int = 1, per_page: int = 50) -> list[AuthUser]: ...

    @abstractmethod
    async def admin_delete_user(self, user_id: str) -> None: ...

    async def find_user_by_email(self, email: str) -> AuthUser | None:
        wanted = email.strip().lower()
        page = 1
        while True:
            users = await self.admin_list_users(page=page, per_page=200)
            for user in users:
                if user.email.lower() == wanted:
                    return user
            if len(users) < 200:
                return None
            page += 1


class LocalAuthProvider(AuthProvider):
    """
    Accounts live under one storage key as
    `{id, email, passwordHash, metadata, createdAt}` records.
    Signed-out tokens are remembered by `jti` until they would have expired.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        *,
        profile_hook: ProfileHook | None = None,
    ) -> None:
        super().__init__()
        self.storage = storage
        self.profile_hook = profile_hook
        # jti -> exp (epoch seconds)
        self._revoked: dict[str, int] = {}
        self._lock = asyncio.Lock()

    # ── Account records ───────────────────────────────────────────────────────

    async def _accounts(self) -> list[dict[str, Any]]:
        try:
            return await self.storage.load(ACCOUNTS_KEY)
        except (OSError, SQLAlchemyError) as exc:
            raise RemoteException(f"Auth store unavailable: {exc}") from exc

    async def _save(self, accounts: list[dict[str, Any]]) -> None:
        try:
            await self.storage.save(ACCOUNTS_KEY, accounts)
        except (OSError, SQLAlchemyError) as exc:
            logger.error("Failed to write auth accounts: %s", exc)
            raise RemoteException(f"Auth store unavailable: {exc}") from exc

    @staticmethod
    def _to_user(account: dict[str, Any]) -> AuthUser:
        return AuthUser(
            id=account["id"],
            email=account["email"],
            metadata=dict(account.get("metadata") or {}),
            created_at=account.get("createdAt", ""),
        )

    async def _find(self, *, email: str | None = None, user_id: str | None = None) -> dict[str, Any] | None:
        for account in await self._accounts():
            if email is not None and account.get("email") == email:
                return account
            if user_id is not None and account.get("id") == user_id:
                return account
        return None

    async def _create(
        self, email: str, password: str, metadata: dict[str, Any] | None
    ) -> AuthUser:
        email = email.strip().lower()
        if not is_valid_email(email):
            raise ValidationException("Unable to validate email address", "INVALID_EMAIL")
        if not is_strong_enough(password):
            raise ValidationException(
                f"Password should be at least {settings.PASSWORD_MIN_LENGTH} characters",
                "WEAK_PASSWORD",
            )
        async with self._lock:
            accounts = await self._accounts()
            if any(a.get("email") == email for a in accounts):
                raise ConflictException("User already registered", error_code="EMAIL_IN_USE")
            account = {
                "id": str(uuid.uuid4()),
                "email": email,
                "passwordHash": hash_password(password),
                "metadata": dict(metadata or {}),
                "createdAt": default_clock.timestamp(),
            }
            await self._save([*accounts, account])
        user = self._to_user(account)
        logger.info("Auth account created: id=%s email=%s", user.id, user.email)

        if self.profile_hook is not None:
            try:
                await self.profile_hook(user)
            except Exception as exc:
                # the account stands even if provisioning fails, like a failed trigger
                logger.warning("Profile provisioning failed for %s: %s", user.id, exc)
        await self._emit(SIGNED_UP, user)
        return user

    # ── Public contract ───────────────────────────────────────────────────────

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> AuthUser:
        return await self._create(email, password, metadata)

    async def admin_create_user(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> AuthUser:
        return await self._create(email, password, metadata)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        account = await self._find(email=email.strip().lower())
        if account is None or not verify_password(password, account["passwordHash"]):
            raise InvalidCredentialsException("Invalid login credentials")
        user = self._to_user(account)
        token = create_access_token(user.id, {"email": user.email})
        session = AuthSession(
            access_token=token,
            user=user,
            expires_in=settings.access_token_expire_seconds,
        )
        await self._emit(SIGNED_IN, user)
        return session

    async def get_session(self, access_token: str) -> AuthSession | None:
        try:
            payload = decode_access_token(access_token)
        except JWTError:
            return None
        if payload["jti"] in self._revoked:
            return None
        account = await self._find(user_id=payload["sub"])
        if account is None:
            return None
        expires_in = max(0, int(payload["exp"]) - int(default_clock.now().timestamp()))
        return AuthSession(
            access_token=access_token,
            user=self._to_user(account),
            expires_in=expires_in,
        )

    def _prune_revoked(self) -> None:
        now = int(default_clock.now().timestamp())
        self._revoked = {jti: exp for jti, exp in self._revoked.items() if exp > now}

    async def sign_out(self, access_token: str) -> None:
        try:
            payload = decode_access_token(access_token)
        except JWTError:
            return
        self._prune_revoked()
        self._revoked[payload["jti"]] = int(payload["exp"])
        account = await self._find(user_id=payload["sub"])
        await self._emit(SIGNED_OUT, self._to_user(account) if account else None)

    async def admin_list_users(self, page: int = 1, per_page: int = 50) -> list[AuthUser]:
        accounts = await self._accounts()
        start = (max(page, 1) - 1) * per_page
        return [self._to_user(a) for a in accounts[start:start + per_page]]

    async def admin_delete_user(self, user_id: str) -> None:
        async with self._lock:
            accounts = await self._accounts()
            remaining = [a for a in accounts if a.get("id") != user_id]
            if len(remaining) == len(accounts):
                raise NotFoundException("Auth user", user_id)
            await self._save(remaining)
        logger.info("Auth account deleted: id=%s", user_id)
        await self._emit(USER_DELETED, AuthUser(id=user_id, email=""))
