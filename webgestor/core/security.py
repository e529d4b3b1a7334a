"""
Security utilities: session token creation/verification and password hashing.
Passwords are hashed with bcrypt via passlib. Tokens use python-jose.
Email addresses are checked with pydantic's EmailStr.
"""
from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import EmailStr, TypeAdapter, ValidationError

from webgestor.core.config import settings

# ── Password hashing ──────────────────────────────────────────────────────────
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PASSWORD_HASH_ROUNDS,
)


def hash_password(plain_password: str) -> str:
    """Return bcrypt hash of the given plain-text password."""
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if plain_password matches the stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


# ── JWT helpers ───────────────────────────────────────────────────────────────

def create_access_token(
    user_id: str,
    extra_claims: dict[str, Any] | None = None,
    expire_delta: timedelta | None = None,
) -> str:
    """Create a signed session token for the given account id."""
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "type": "access",
        "iat": now,
        "exp": now + (expire_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)),
        "jti": secrets.token_hex(16),
    }
    if extra_claims:
        payload.update(extra_claims)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a session token.
    Raises JWTError on failure.
    """
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type") != "access":
        raise JWTError("Invalid token type")
    if not payload.get("sub") or not payload.get("jti"):
        raise JWTError("Malformed token")
    return payload


# ── Input policy ──────────────────────────────────────────────────────────────

_email_adapter = TypeAdapter(EmailStr)


def is_valid_email(email: str) -> bool:
    if not email:
        return False
    try:
        _email_adapter.validate_python(email.strip())
    except ValidationError:
        return False
    return True


def is_strong_enough(password: str) -> bool:
    return bool(password) and len(password) >= settings.PASSWORD_MIN_LENGTH
