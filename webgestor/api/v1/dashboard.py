"""
Dashboard route.
"""
from __future__ import annotations

from fastapi import APIRouter

from webgestor.core.dependencies import CurrentUser, Data
from webgestor.data import views
from webgestor.schemas.dashboard import DashboardStats

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get(
    "/",
    response_model=DashboardStats | None,
    summary="Statistics for my role; null for a leader without a team",
)
async def get_dashboard(current_user: CurrentUser, data: Data) -> DashboardStats | None:
    return views.dashboard_stats(data, current_user)
