"""
Team and TeamMember schemas.
"""
from __future__ import annotations

from pydantic import Field

from webgestor.schemas.common import EntityModel, IsoTimestamp, PayloadModel


class Team(EntityModel):
    id: str
    name: str
    description: str | None = None
    leader_id: str | None = None
    created_at: IsoTimestamp


class TeamCreate(PayloadModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    leader_id: str | None = None


class TeamUpdate(PayloadModel):
    non_nullable = ("name",)

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    leader_id: str | None = None


class TeamMember(EntityModel):
    id: str
    team_id: str
    user_id: str
    joined_at: IsoTimestamp


class TeamMemberAdd(PayloadModel):
    user_id: str = Field(min_length=1)
