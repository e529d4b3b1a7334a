"""
Notification schemas.
"""
from __future__ import annotations

from webgestor.schemas.common import EntityModel, IsoTimestamp, NotificationType


class Notification(EntityModel):
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    read: bool = False
    related_id: str | None = None
    created_at: IsoTimestamp


class UnreadCount(EntityModel):
    unread: int
