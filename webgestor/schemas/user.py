"""
User (profile) schemas.
Profiles are provisioned by the auth layer; the domain layer only reads them
and rewrites the role.
"""
from __future__ import annotations

from pydantic import Field

from webgestor.schemas.common import EntityModel, IsoTimestamp, PayloadModel, UserRole


class User(EntityModel):
    id: str
    email: str
    name: str
    avatar: str | None = None
    role: UserRole = "collaborator"
    team_id: str | None = None
    created_at: IsoTimestamp


class UserRoleUpdate(PayloadModel):
    role: UserRole


class ProfileUpdate(PayloadModel):
    non_nullable = ("name",)

    name: str | None = Field(default=None, min_length=1, max_length=255)
    avatar: str | None = Field(default=None, max_length=500)
