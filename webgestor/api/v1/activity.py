"""
Activity feed routes.
"""
from __future__ import annotations

from fastapi import APIRouter, Query

from webgestor.core.dependencies import AdminUser, CurrentUser, Data
from webgestor.schemas.activity_log import ActivityLog

router = APIRouter(prefix="/activity", tags=["Activity"])


@router.get("/", response_model=list[ActivityLog], summary="Recent activity (admin)")
async def recent_activity(
    current_user: AdminUser,
    data: Data,
    limit: int = Query(default=20, ge=1, le=100),
) -> list[ActivityLog]:
    return data.activity_logs[:limit]


@router.get("/me", response_model=list[ActivityLog], summary="My recent activity")
async def my_activity(
    current_user: CurrentUser,
    data: Data,
    limit: int = Query(default=20, ge=1, le=100),
) -> list[ActivityLog]:
    return [log for log in data.activity_logs if log.user_id == current_user.id][:limit]
