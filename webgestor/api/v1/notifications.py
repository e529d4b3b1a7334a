"""
Notification routes. Every route only sees the caller's own notifications.
"""
from __future__ import annotations

from fastapi import APIRouter, Query, status

from webgestor.core.dependencies import AdminUser, CurrentUser, Data
from webgestor.core.exceptions import NotFoundException
from webgestor.schemas.notification import Notification, UnreadCount
from webgestor.schemas.pagination import PaginatedResponse

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get(
    "/",
    response_model=PaginatedResponse[Notification],
    summary="List my notifications",
)
async def list_notifications(
    current_user: CurrentUser,
    data: Data,
    page: int = Query(default=1, ge=1),
    size: int = Query(default=20, ge=1, le=100),
    unread_only: bool = Query(default=False),
) -> PaginatedResponse[Notification]:
    notifications = data.get_user_notifications(current_user=current_user)
    if unread_only:
        notifications = [n for n in notifications if not n.read]
    return PaginatedResponse[Notification].from_sequence(notifications, page=page, size=size)


@router.get(
    "/unread-count",
    response_model=UnreadCount,
    summary="Count my unread notifications",
)
async def unread_count(current_user: CurrentUser, data: Data) -> UnreadCount:
    return UnreadCount(unread=data.get_unread_notifications_count(current_user=current_user))


@router.put(
    "/read-all",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Mark all notifications as read",
)
async def mark_all_read(current_user: CurrentUser, data: Data) -> None:
    await data.mark_all_notifications_read(current_user=current_user)


@router.put(
    "/{notification_id}/read",
    response_model=Notification,
    summary="Mark a notification as read",
)
async def mark_read(notification_id: str, current_user: CurrentUser, data: Data) -> Notification:
    mine = {n.id: n for n in data.get_user_notifications(current_user=current_user)}
    if notification_id not in mine:
        raise NotFoundException("Notification", notification_id)
    await data.mark_notification_read(notification_id, current_user=current_user)
    return next(
        n
        for n in data.get_user_notifications(current_user=current_user)
        if n.id == notification_id
    )


@router.post(
    "/check-deadlines",
    response_model=list[Notification],
    summary="Warn assignees about tasks due within the next day",
)
async def check_deadlines(current_user: AdminUser, data: Data) -> list[Notification]:
    return await data.check_deadlines()
