"""
Aggregates all v1 API routers into a single APIRouter.
"""
from __future__ import annotations

from fastapi import APIRouter

from webgestor.api.v1 import (
    activity,
    auth,
    comments,
    dashboard,
    notifications,
    projects,
    tasks,
    teams,
    users,
)

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(teams.router)
api_router.include_router(projects.router)
api_router.include_router(tasks.router)
api_router.include_router(comments.router)
api_router.include_router(notifications.router)
api_router.include_router(activity.router)
api_router.include_router(dashboard.router)
