"""
CRUD instances, one per relational collection.
"""
from __future__ import annotations

from webgestor.crud.base import CRUDBase
from webgestor.models.activity_log import ActivityLogModel
from webgestor.models.comment import CommentModel
from webgestor.models.notification import NotificationModel
from webgestor.models.project import ProjectModel
from webgestor.models.task import TaskModel
from webgestor.models.team import TeamMemberModel, TeamModel
from webgestor.models.user import UserModel

crud_user = CRUDBase(UserModel)
crud_team = CRUDBase(TeamModel)
crud_team_member = CRUDBase(TeamMemberModel, order_by="joined_at")
crud_project = CRUDBase(ProjectModel)
crud_task = CRUDBase(TaskModel)
crud_comment = CRUDBase(CommentModel)
crud_notification = CRUDBase(NotificationModel, descending=True)
crud_activity_log = CRUDBase(ActivityLogModel, descending=True)

CRUD_BY_COLLECTION: dict[str, CRUDBase] = {
    "users": crud_user,
    "teams": crud_team,
    "team_members": crud_team_member,
    "projects": crud_project,
    "tasks": crud_task,
    "comments": crud_comment,
    "notifications": crud_notification,
    "activity_logs": crud_activity_log,
}
