"""
ORM model package. Import all models here so Alembic autogenerate
can discover every table through the shared Base metadata.
"""
from webgestor.models.storage_entry import StorageEntry  # noqa: F401
from webgestor.models.user import UserModel  # noqa: F401
from webgestor.models.team import TeamModel, TeamMemberModel  # noqa: F401
from webgestor.models.project import ProjectModel  # noqa: F401
from webgestor.models.task import TaskModel  # noqa: F401
from webgestor.models.comment import CommentModel  # noqa: F401
from webgestor.models.notification import NotificationModel  # noqa: F401
from webgestor.models.activity_log import ActivityLogModel  # noqa: F401
