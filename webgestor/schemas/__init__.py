"""
Entity and payload schemas. Entity classes double as the in-memory
representation used by the domain layer.
"""
from webgestor.schemas.activity_log import ActivityLog  # noqa: F401
from webgestor.schemas.comment import Comment  # noqa: F401
from webgestor.schemas.notification import Notification  # noqa: F401
from webgestor.schemas.project import Project  # noqa: F401
from webgestor.schemas.task import Task  # noqa: F401
from webgestor.schemas.team import Team, TeamMember  # noqa: F401
from webgestor.schemas.user import User  # noqa: F401
