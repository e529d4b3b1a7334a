"""
Authentication provider contract and local implementation.
"""
from webgestor.auth.provider import (  # noqa: F401
    AuthProvider,
    AuthSession,
    AuthUser,
    LocalAuthProvider,
)
