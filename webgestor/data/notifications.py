"""
Notification engine.
Builds task-related notifications and decides who gets one: nobody is ever
notified about their own action, and a missing recipient produces nothing.
"""
from __future__ import annotations

import logging

from webgestor.core.clock import Clock, new_id
from webgestor.data.gateway import Gateway, Insert
from webgestor.schemas.common import NotificationType
from webgestor.schemas.notification import Notification
from webgestor.schemas.task import Task

logger = logging.getLogger(__name__)

class NotificationEngine:

    def __init__(self, gateway: Gateway, clock: Clock) -> None:
        self.gateway = gateway
        self.clock = clock

    @staticmethod
    def should_notify(recipient_id: str | None, actor_id: str | None) -> bool:
        return bool(recipient_id) and recipient_id != actor_id

    async def notify(
        self,
        notifications: list[Notification],
        *,
        recipient_id: str | None,
        actor_id: str | None,
        type: NotificationType,
        title: str,
        message: str,
        related_id: str | None = None,
    ) -> list[Notification] | None:
        """
        Commit one notification and return the next state of the collection
        (newest first), or None when the notification is suppressed.
        """
        if not self.should_notify(recipient_id, actor_id):
            logger.debug(
                "Suppressed %s notification: recipient=%s actor=%s",
                type,
                recipient_id,
                actor_id,
            )
            return None

        notification = Notification(
            id=new_id("notif"),
            user_id=recipient_id,
            type=type,
            title=title,
            message=message,
            read=False,
            related_id=related_id,
            created_at=self.clock.timestamp(),
        )
        next_state = [notification, *notifications]
        await self.gateway.commit("notifications", next_state, Insert(notification))
        return next_state

    async def notify_task_assigned(
        self, notifications: list[Notification], task: Task, *, actor_id: str | None
    ) -> list[Notification] | None:
        return await self.notify(
            notifications,
            recipient_id=task.assignee_id,
            actor_id=actor_id,
            type="task_assigned",
            title="New task assigned",
            message=f"You were assigned the task: {task.title}",
            related_id=task.id,
        )

    async def notify_status_changed(
        self, notifications: list[Notification], task: Task, *, actor_id: str | None
    ) -> list[Notification] | None:
        return await self.notify(
            notifications,
            recipient_id=task.assignee_id,
            actor_id=actor_id,
            type="status_changed",
            title="Status changed",
            message=f'The task "{task.title}" was updated to: {task.status}',
            related_id=task.id,
        )

    async def notify_new_comment(
        self, notifications: list[Notification], task: Task, *, actor_id: str | None
    ) -> list[Notification] | None:
        return await self.notify(
            notifications,
            recipient_id=task.assignee_id,
            actor_id=actor_id,
            type="new_comment",
            title="New comment",
            message=f"New comment on task: {task.title}",
            related_id=task.id,
        )

    async def notify_deadline_approaching(
        self, notifications: list[Notification], task: Task
    ) -> list[Notification] | None:
        return await self.notify(
            notifications,
            recipient_id=task.assignee_id,
            actor_id=None,
            type="deadline_approaching",
            title="Deadline approaching",
            message=f'The task "{task.title}" is due on {task.due_date}',
            related_id=task.id,
        )
