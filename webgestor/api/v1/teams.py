"""
Team routes.
Team management is admin-only; members and projects are readable by anyone
signed in.
"""
from __future__ import annotations

from fastapi import APIRouter, status

from webgestor.core.dependencies import AdminUser, CurrentUser, Data
from webgestor.core.exceptions import NotFoundException
from webgestor.data.context import DataContext
from webgestor.schemas.project import Project
from webgestor.schemas.team import Team, TeamCreate, TeamMember, TeamMemberAdd, TeamUpdate
from webgestor.schemas.user import User

router = APIRouter(prefix="/teams", tags=["Teams"])


def _get_team_or_404(data: DataContext, team_id: str) -> Team:
    team = data.get_team_by_id(team_id)
    if team is None:
        raise NotFoundException("Team", team_id)
    return team


@router.get("/", response_model=list[Team], summary="List teams")
async def list_teams(current_user: CurrentUser, data: Data) -> list[Team]:
    return data.teams


@router.post(
    "/",
    response_model=Team,
    status_code=status.HTTP_201_CREATED,
    summary="Create a team",
)
async def create_team(team_in: TeamCreate, current_user: AdminUser, data: Data) -> Team:
    return await data.create_team(team_in, current_user=current_user)


@router.get("/{team_id}", response_model=Team, summary="Get a team by ID")
async def get_team(team_id: str, current_user: CurrentUser, data: Data) -> Team:
    return _get_team_or_404(data, team_id)


@router.patch("/{team_id}", response_model=Team, summary="Update a team")
async def update_team(
    team_id: str, team_in: TeamUpdate, current_user: AdminUser, data: Data
) -> Team:
    _get_team_or_404(data, team_id)
    await data.update_team(team_id, team_in, current_user=current_user)
    return _get_team_or_404(data, team_id)


@router.delete(
    "/{team_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a team",
)
async def delete_team(team_id: str, current_user: AdminUser, data: Data) -> None:
    await data.delete_team(team_id, current_user=current_user)


# ── Members ───────────────────────────────────────────────────────────────────

@router.get("/{team_id}/members", response_model=list[User], summary="List team members")
async def list_members(team_id: str, current_user: CurrentUser, data: Data) -> list[User]:
    _get_team_or_404(data, team_id)
    return data.get_team_members(team_id)


@router.post(
    "/{team_id}/members",
    response_model=TeamMember,
    status_code=status.HTTP_201_CREATED,
    summary="Add a user to a team",
)
async def add_member(
    team_id: str, body: TeamMemberAdd, current_user: AdminUser, data: Data
) -> TeamMember:
    _get_team_or_404(data, team_id)
    if data.get_user_by_id(body.user_id) is None:
        raise NotFoundException("User", body.user_id)
    return await data.add_team_member(team_id, body.user_id, current_user=current_user)


@router.delete(
    "/{team_id}/members/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a user from a team",
)
async def remove_member(
    team_id: str, user_id: str, current_user: AdminUser, data: Data
) -> None:
    await data.remove_team_member(team_id, user_id, current_user=current_user)


@router.put("/{team_id}/leader", response_model=Team, summary="Set the team leader")
async def set_leader(
    team_id: str, body: TeamMemberAdd, current_user: AdminUser, data: Data
) -> Team:
    _get_team_or_404(data, team_id)
    if data.get_user_by_id(body.user_id) is None:
        raise NotFoundException("User", body.user_id)
    await data.set_team_leader(team_id, body.user_id, current_user=current_user)
    return _get_team_or_404(data, team_id)


@router.get("/{team_id}/projects", response_model=list[Project], summary="List team projects")
async def list_team_projects(
    team_id: str, current_user: CurrentUser, data: Data
) -> list[Project]:
    _get_team_or_404(data, team_id)
    return data.get_team_projects(team_id)
