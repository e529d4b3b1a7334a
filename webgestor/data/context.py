"""
Domain layer.

`DataContext` owns every entity collection for the lifetime of a process:
it hydrates them from a gateway, exposes typed mutations that persist through
the gateway before touching memory, and records side effects (notifications
and activity entries) for each mutation.

Mutations are serialized through a single asyncio lock so that computing the
next state of a collection and committing it never interleave with another
mutation. Reads are plain scans over the current in-memory lists.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from webgestor.core.clock import Clock, default_clock, new_id, parse_timestamp
from webgestor.core.config import settings
from webgestor.core.exceptions import (
    ConflictException,
    RemoteException,
    UnauthenticatedException,
    ValidationException,
)
from webgestor.data.activity import ActivityLogger
from webgestor.data.gateway import (
    COLLECTIONS,
    Change,
    Delete,
    Gateway,
    Insert,
    Update,
    UpdateWhere,
)
from webgestor.data.notifications import NotificationEngine
from webgestor.schemas.activity_log import ActivityLog
from webgestor.schemas.comment import Comment
from webgestor.schemas.common import EntityModel, EntityType, UserRole
from webgestor.schemas.notification import Notification
from webgestor.schemas.project import Project, ProjectCreate, ProjectUpdate
from webgestor.schemas.task import Task, TaskCreate, TaskUpdate
from webgestor.schemas.team import Team, TeamCreate, TeamMember, TeamUpdate
from webgestor.schemas.user import ProfileUpdate, User

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)
EntityT = TypeVar("EntityT", bound=EntityModel)


def _payload(model: type[PayloadT], data: PayloadT | dict[str, Any]) -> PayloadT:
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        fields = ", ".join(
            ".".join(str(loc) for loc in error["loc"]) or model.__name__
            for error in exc.errors()
        )
        raise ValidationException(f"Invalid {model.__name__}: {fields}") from exc


def _changes(model: type[BaseModel], data: BaseModel | dict[str, Any]) -> dict[str, Any]:
    """Only the fields the caller actually set."""
    return _payload(model, data).model_dump(exclude_unset=True)


def _actor_id(current_user: User | None) -> str | None:
    return current_user.id if current_user is not None else None


class DataContext:

    def __init__(
        self,
        gateway: Gateway,
        *,
        clock: Clock | None = None,
        activity_limit: int | None = None,
        delete_policy: str | None = None,
    ) -> None:
        self.gateway = gateway
        self.clock = clock or default_clock
        self.delete_policy = delete_policy or settings.DELETE_POLICY
        self.activity = ActivityLogger(
            gateway,
            self.clock,
            limit=activity_limit or settings.ACTIVITY_LOG_LIMIT,
        )
        self.notifier = NotificationEngine(gateway, self.clock)
        self.hydrated = False

        self._state: dict[str, list[Any]] = {name: [] for name in COLLECTIONS}
        self._lock = asyncio.Lock()
        # users written through this context since the last refresh
        self._local_user_writes: set[str] = set()
        self._unsubscribe: Callable[[], None] | None = None

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def hydrate(self) -> None:
        """Load every collection from the gateway, replacing in-memory state."""
        loaded: dict[str, list[Any]] = {}
        for name in COLLECTIONS:
            loaded[name] = await self.gateway.load(name)
        async with self._lock:
            self._state = loaded
            self._local_user_writes.clear()
            self.hydrated = True
        logger.info(
            "Hydrated data context: %s",
            ", ".join(f"{name}={len(rows)}" for name, rows in loaded.items()),
        )

    def subscribe(self, provider: Any) -> None:
        """Refresh users whenever the auth provider reports an account change."""
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = provider.on_auth_state_change(self._on_auth_event)

    async def _on_auth_event(self, event: str, auth_user: Any) -> None:
        if event in ("SIGNED_UP", "USER_DELETED"):
            await self.refresh_users()

    async def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        async with self._lock:
            self._state = {name: [] for name in COLLECTIONS}
            self._local_user_writes.clear()
            self.hydrated = False
        logger.info("Data context closed")

    # ── Collections ───────────────────────────────────────────────────────────

    @property
    def users(self) -> list[User]:
        return list(self._state["users"])

    @property
    def teams(self) -> list[Team]:
        return list(self._state["teams"])

    @property
    def team_members(self) -> list[TeamMember]:
        return list(self._state["team_members"])

    @property
    def projects(self) -> list[Project]:
        return list(self._state["projects"])

    @property
    def tasks(self) -> list[Task]:
        return list(self._state["tasks"])

    @property
    def comments(self) -> list[Comment]:
        return list(self._state["comments"])

    @property
    def notifications(self) -> list[Notification]:
        return list(self._state["notifications"])

    @property
    def activity_logs(self) -> list[ActivityLog]:
        return list(self._state["activity_logs"])

    # ── Internal helpers (lock held) ──────────────────────────────────────────

    def _find(self, collection: str, entity_id: str) -> Any:
        for entity in self._state[collection]:
            if entity.id == entity_id:
                return entity
        return None

    async def _commit(self, collection: str, next_state: list[Any], change: Change) -> None:
        await self.gateway.commit(collection, next_state, change)
        self._state[collection] = next_state

    async def _insert(self, collection: str, entity: EntityT) -> EntityT:
        await self._commit(collection, [*self._state[collection], entity], Insert(entity))
        return entity

    async def _replace(self, collection: str, entity: EntityT, values: dict[str, Any]) -> EntityT:
        next_state = [entity if e.id == entity.id else e for e in self._state[collection]]
        await self._commit(collection, next_state, Update(entity.id, values))
        return entity

    async def _remove(self, collection: str, entity_id: str) -> None:
        next_state = [e for e in self._state[collection] if e.id != entity_id]
        await self._commit(collection, next_state, Delete((entity_id,)))

    async def _append_activity(
        self,
        current_user: User | None,
        action: str,
        entity_type: EntityType,
        entity_id: str,
        details: str | None = None,
    ) -> None:
        if current_user is None:
            logger.debug("No acting user; activity %r not recorded", action)
            return
        self._state["activity_logs"] = await self.activity.append(
            self._state["activity_logs"],
            user_id=current_user.id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
        )

    async def _log(
        self,
        current_user: User | None,
        action: str,
        entity_type: EntityType,
        entity_id: str,
        details: str | None = None,
    ) -> None:
        """Side effect of a mutation that is already committed: never raises."""
        try:
            await self._append_activity(current_user, action, entity_type, entity_id, details)
        except RemoteException as exc:
            logger.error(
                "Activity %r for %s %s was not stored: %s",
                action,
                entity_type,
                entity_id,
                exc.detail,
            )

    async def _notify(self, pending: Awaitable[list[Notification] | None]) -> None:
        """Same contract as `_log`, for notifications."""
        try:
            next_state = await pending
        except RemoteException as exc:
            logger.error("Notification was not stored: %s", exc.detail)
            return
        if next_state is not None:
            self._state["notifications"] = next_state

    # ── Teams ─────────────────────────────────────────────────────────────────

    async def create_team(
        self, team_in: TeamCreate | dict[str, Any], *, current_user: User | None
    ) -> Team:
        payload = _payload(TeamCreate, team_in)
        async with self._lock:
            team = Team(
                id=new_id("team"),
                created_at=self.clock.timestamp(),
                **payload.model_dump(),
            )
            await self._insert("teams", team)
            await self._log(current_user, "Team created", "team", team.id, team.name)
        logger.info("Team created: id=%s name=%s", team.id, team.name)
        return team

    async def update_team(
        self,
        team_id: str,
        team_in: TeamUpdate | dict[str, Any],
        *,
        current_user: User | None,
    ) -> None:
        values = _changes(TeamUpdate, team_in)
        async with self._lock:
            team = self._find("teams", team_id)
            if team is None:
                logger.debug("update_team: unknown id %s", team_id)
                return
            await self._replace("teams", team.model_copy(update=values), values)
            await self._log(current_user, "Team updated", "team", team_id)

    async def delete_team(self, team_id: str, *, current_user: User | None) -> None:
        async with self._lock:
            if self._find("teams", team_id) is None:
                logger.debug("delete_team: unknown id %s", team_id)
                return
            if self.delete_policy == "block":
                count = sum(1 for p in self._state["projects"] if p.team_id == team_id)
                if count:
                    raise ConflictException(
                        f"Team '{team_id}' still owns {count} project(s)",
                        error_code="REFERENCED",
                    )
            await self._remove("teams", team_id)
            await self._log(current_user, "Team deleted", "team", team_id)
        logger.info("Team deleted: id=%s", team_id)

    # ── Team membership ───────────────────────────────────────────────────────

    async def add_team_member(
        self, team_id: str, user_id: str, *, current_user: User | None
    ) -> TeamMember:
        """Add user to team. Adding an existing pair returns the existing record."""
        async with self._lock:
            existing = self._membership(team_id, user_id)
            if existing is not None:
                return existing
            member = TeamMember(
                id=new_id("tm"),
                team_id=team_id,
                user_id=user_id,
                joined_at=self.clock.timestamp(),
            )
            await self._insert("team_members", member)
            await self._log(current_user, "Member added", "team", team_id, user_id)
        return member

    async def remove_team_member(
        self, team_id: str, user_id: str, *, current_user: User | None
    ) -> None:
        async with self._lock:
            member = self._membership(team_id, user_id)
            if member is None:
                logger.debug("remove_team_member: %s is not in team %s", user_id, team_id)
                return
            await self._remove("team_members", member.id)
            team = self._find("teams", team_id)
            if team is not None and team.leader_id == user_id:
                values = {"leader_id": None}
                await self._replace("teams", team.model_copy(update=values), values)
            await self._log(current_user, "Member removed", "team", team_id, user_id)

    async def set_team_leader(
        self, team_id: str, user_id: str, *, current_user: User | None
    ) -> None:
        """
        Make user the leader of team: ensures membership, points the team's
        leaderId at the user and gives the user the leader role.
        Admins keep their role.
        """
        async with self._lock:
            team = self._find("teams", team_id)
            if team is None:
                logger.debug("set_team_leader: unknown team %s", team_id)
                return
            if self._membership(team_id, user_id) is None:
                await self._insert(
                    "team_members",
                    TeamMember(
                        id=new_id("tm"),
                        team_id=team_id,
                        user_id=user_id,
                        joined_at=self.clock.timestamp(),
                    ),
                )
            values = {"leader_id": user_id}
            await self._replace("teams", team.model_copy(update=values), values)
            user = self._find("users", user_id)
            if user is not None and user.role == "collaborator":
                await self._write_user(user, {"role": "leader"})
            await self._log(current_user, "Leader changed", "team", team_id, user_id)

    def _membership(self, team_id: str, user_id: str) -> TeamMember | None:
        for member in self._state["team_members"]:
            if member.team_id == team_id and member.user_id == user_id:
                return member
        return None

    # ── Projects ──────────────────────────────────────────────────────────────

    async def create_project(
        self, project_in: ProjectCreate | dict[str, Any], *, current_user: User | None
    ) -> Project:
        payload = _payload(ProjectCreate, project_in)
        async with self._lock:
            project = Project(
                id=new_id("project"),
                created_at=self.clock.timestamp(),
                **payload.model_dump(),
            )
            await self._insert("projects", project)
            await self._log(current_user, "Project created", "project", project.id, project.name)
        logger.info("Project created: id=%s team_id=%s", project.id, project.team_id)
        return project

    async def update_project(
        self,
        project_id: str,
        project_in: ProjectUpdate | dict[str, Any],
        *,
        current_user: User | None,
    ) -> None:
        values = _changes(ProjectUpdate, project_in)
        async with self._lock:
            project = self._find("projects", project_id)
            if project is None:
                logger.debug("update_project: unknown id %s", project_id)
                return
            await self._replace("projects", project.model_copy(update=values), values)
            await self._log(current_user, "Project updated", "project", project_id)

    async def delete_project(self, project_id: str, *, current_user: User | None) -> None:
        async with self._lock:
            if self._find("projects", project_id) is None:
                logger.debug("delete_project: unknown id %s", project_id)
                return
            if self.delete_policy == "block":
                count = sum(1 for t in self._state["tasks"] if t.project_id == project_id)
                if count:
                    raise ConflictException(
                        f"Project '{project_id}' still has {count} task(s)",
                        error_code="REFERENCED",
                    )
            await self._remove("projects", project_id)
            await self._log(current_user, "Project deleted", "project", project_id)
        logger.info("Project deleted: id=%s", project_id)

    # ── Tasks ─────────────────────────────────────────────────────────────────

    async def create_task(
        self, task_in: TaskCreate | dict[str, Any], *, current_user: User | None
    ) -> Task:
        payload = _payload(TaskCreate, task_in)
        async with self._lock:
            now = self.clock.timestamp()
            task = Task(
                id=new_id("task"),
                status="todo",
                created_at=now,
                updated_at=now,
                **payload.model_dump(),
            )
            await self._insert("tasks", task)
            await self._log(current_user, "Task created", "task", task.id, task.title)
            await self._notify(
                self.notifier.notify_task_assigned(
                    self._state["notifications"], task, actor_id=_actor_id(current_user)
                )
            )
        return task

    async def update_task(
        self,
        task_id: str,
        task_in: TaskUpdate | dict[str, Any],
        *,
        current_user: User | None,
    ) -> None:
        """
        Merge the set fields into the task and refresh updatedAt.

        A real status change is logged as such and tells the assignee; any
        other update is logged generically. Moving the task to a different
        assignee tells the new assignee.
        """
        values = _changes(TaskUpdate, task_in)
        actor_id = _actor_id(current_user)
        async with self._lock:
            old = self._find("tasks", task_id)
            if old is None:
                logger.debug("update_task: unknown id %s", task_id)
                return
            values["updated_at"] = self.clock.timestamp()
            task = await self._replace("tasks", old.model_copy(update=values), values)

            new_status = values.get("status")
            if new_status is not None and new_status != old.status:
                await self._log(current_user, f"Status changed to {new_status}", "task", task_id)
                await self._notify(
                    self.notifier.notify_status_changed(
                        self._state["notifications"],
                        old.model_copy(update={"status": new_status}),
                        actor_id=actor_id,
                    )
                )
            else:
                await self._log(current_user, "Task updated", "task", task_id)

            new_assignee = values.get("assignee_id")
            if new_assignee and new_assignee != old.assignee_id:
                await self._notify(
                    self.notifier.notify_task_assigned(
                        self._state["notifications"], task, actor_id=actor_id
                    )
                )

    async def delete_task(self, task_id: str, *, current_user: User | None) -> None:
        async with self._lock:
            if self._find("tasks", task_id) is None:
                logger.debug("delete_task: unknown id %s", task_id)
                return
            await self._remove("tasks", task_id)
            await self._log(current_user, "Task deleted", "task", task_id)

    async def check_deadlines(
        self,
        *,
        within: timedelta = timedelta(days=1),
        now: datetime | None = None,
    ) -> list[Notification]:
        """
        Warn assignees of open tasks due within the window. Each
        (task, assignee) pair is warned at most once.
        """
        now = now or self.clock.now()
        created: list[Notification] = []
        async with self._lock:
            warned = {
                (n.related_id, n.user_id)
                for n in self._state["notifications"]
                if n.type == "deadline_approaching"
            }
            for task in list(self._state["tasks"]):
                if task.status == "done" or not task.due_date or not task.assignee_id:
                    continue
                if (task.id, task.assignee_id) in warned:
                    continue
                due = parse_timestamp(task.due_date)
                if not now <= due <= now + within:
                    continue
                next_state = await self.notifier.notify_deadline_approaching(
                    self._state["notifications"], task
                )
                if next_state is not None:
                    self._state["notifications"] = next_state
                    created.append(next_state[0])
        if created:
            logger.info("Sent %d deadline notification(s)", len(created))
        return created

    # ── Comments ──────────────────────────────────────────────────────────────

    async def add_comment(
        self, task_id: str, content: str, *, current_user: User | None
    ) -> Comment:
        if current_user is None:
            raise UnauthenticatedException("User not authenticated")
        if not content or not content.strip():
            raise ValidationException("Comment content must not be empty")
        async with self._lock:
            comment = Comment(
                id=new_id("comment"),
                task_id=task_id,
                user_id=current_user.id,
                content=content,
                created_at=self.clock.timestamp(),
            )
            await self._insert("comments", comment)
            await self._log(current_user, "Comment added", "task", task_id)
            task = self._find("tasks", task_id)
            if task is not None:
                await self._notify(
                    self.notifier.notify_new_comment(
                        self._state["notifications"], task, actor_id=current_user.id
                    )
                )
        return comment

    # ── Users ─────────────────────────────────────────────────────────────────

    async def _write_user(self, user: User, values: dict[str, Any]) -> User:
        updated = await self._replace("users", user.model_copy(update=values), values)
        self._local_user_writes.add(user.id)
        return updated

    async def update_user_role(
        self, user_id: str, role: UserRole, *, current_user: User | None
    ) -> None:
        """Rewrite the user's role. Callers decide who may do this."""
        async with self._lock:
            user = self._find("users", user_id)
            if user is None:
                logger.debug("update_user_role: unknown id %s", user_id)
                return
            await self._write_user(user, {"role": role})
            await self._log(current_user, f"Role changed to {role}", "user", user_id)
        logger.info("Role of user %s set to %s", user_id, role)

    async def update_user_profile(
        self,
        user_id: str,
        profile_in: ProfileUpdate | dict[str, Any],
        *,
        current_user: User | None,
    ) -> None:
        values = _changes(ProfileUpdate, profile_in)
        async with self._lock:
            user = self._find("users", user_id)
            if user is None:
                logger.debug("update_user_profile: unknown id %s", user_id)
                return
            await self._write_user(user, values)
            await self._log(current_user, "Profile updated", "user", user_id)

    async def insert_user(self, user: User) -> User:
        """
        Create a profile record. Used when provisioning could not create it.
        Raises ConflictException if the id already exists locally.
        """
        async with self._lock:
            if self._find("users", user.id) is not None:
                raise ConflictException(f"Profile '{user.id}' already exists")
            await self._insert("users", user)
            self._local_user_writes.add(user.id)
        logger.info("Profile created for user %s", user.id)
        return user

    async def save_user(self, user: User) -> User:
        """Insert or overwrite a profile record as a whole."""
        async with self._lock:
            existing = self._find("users", user.id)
            if existing is None:
                await self._insert("users", user)
            else:
                values = user.model_dump(exclude={"id"})
                await self._replace("users", user, values)
            self._local_user_writes.add(user.id)
        return user

    async def delete_user(self, user_id: str, *, current_user: User | None = None) -> None:
        async with self._lock:
            if self._find("users", user_id) is None:
                return
            await self._remove("users", user_id)
            self._local_user_writes.discard(user_id)
            await self._log(current_user, "User deleted", "user", user_id)

    async def fetch_user(self, user_id: str) -> User | None:
        """
        Read one profile straight from the store and merge it into memory.
        """
        user = await self.gateway.get("users", user_id)
        if user is None:
            return None
        async with self._lock:
            users = self._state["users"]
            if self._find("users", user_id) is None:
                self._state["users"] = [*users, user]
            else:
                self._state["users"] = [user if u.id == user_id else u for u in users]
        return user

    async def refresh_users(self) -> list[User]:
        """
        Re-read the users collection and merge it with local state. Records
        written here since the last refresh keep their local copy.
        """
        remote = await self.gateway.load("users")
        async with self._lock:
            merged = {u.id: u for u in remote}
            for user in self._state["users"]:
                if user.id in self._local_user_writes:
                    merged[user.id] = user
            self._state["users"] = list(merged.values())
            self._local_user_writes.clear()
        logger.debug("Refreshed users: %d", len(merged))
        return self.users

    # ── Notifications ─────────────────────────────────────────────────────────

    async def mark_notification_read(
        self, notification_id: str, *, current_user: User | None
    ) -> None:
        async with self._lock:
            notification = self._find("notifications", notification_id)
            if notification is None or notification.read:
                return
            if current_user is not None and notification.user_id != current_user.id:
                logger.debug(
                    "mark_notification_read: %s belongs to another user", notification_id
                )
                return
            values = {"read": True}
            await self._replace(
                "notifications", notification.model_copy(update=values), values
            )

    async def mark_all_notifications_read(self, *, current_user: User | None) -> None:
        if current_user is None:
            return
        async with self._lock:
            if not any(
                n.user_id == current_user.id and not n.read
                for n in self._state["notifications"]
            ):
                return
            next_state = [
                n.model_copy(update={"read": True}) if n.user_id == current_user.id else n
                for n in self._state["notifications"]
            ]
            await self._commit(
                "notifications",
                next_state,
                UpdateWhere({"user_id": current_user.id, "read": False}, {"read": True}),
            )

    # ── Activity ──────────────────────────────────────────────────────────────

    async def log_activity(
        self,
        action: str,
        entity_type: EntityType,
        entity_id: str,
        details: str | None = None,
        *,
        current_user: User | None,
    ) -> None:
        async with self._lock:
            await self._append_activity(current_user, action, entity_type, entity_id, details)

    # ── Lookups ───────────────────────────────────────────────────────────────

    def get_team_by_id(self, team_id: str) -> Team | None:
        return self._find("teams", team_id)

    def get_project_by_id(self, project_id: str) -> Project | None:
        return self._find("projects", project_id)

    def get_task_by_id(self, task_id: str) -> Task | None:
        return self._find("tasks", task_id)

    def get_user_by_id(self, user_id: str) -> User | None:
        return self._find("users", user_id)

    def get_user_by_email(self, email: str) -> User | None:
        wanted = email.strip().lower()
        for user in self._state["users"]:
            if user.email.lower() == wanted:
                return user
        return None

    # ── Derived views ─────────────────────────────────────────────────────────

    def get_team_members(self, team_id: str) -> list[User]:
        member_ids = {m.user_id for m in self._state["team_members"] if m.team_id == team_id}
        return [u for u in self._state["users"] if u.id in member_ids]

    def get_team_projects(self, team_id: str) -> list[Project]:
        return [p for p in self._state["projects"] if p.team_id == team_id]

    def get_project_tasks(self, project_id: str) -> list[Task]:
        return [t for t in self._state["tasks"] if t.project_id == project_id]

    def get_task_comments(self, task_id: str) -> list[Comment]:
        return [c for c in self._state["comments"] if c.task_id == task_id]

    def get_user_tasks(self, user_id: str) -> list[Task]:
        return [t for t in self._state["tasks"] if t.assignee_id == user_id]

    def get_user_team(self, user_id: str) -> Team | None:
        """Team of the user's first membership record."""
        for member in self._state["team_members"]:
            if member.user_id == user_id:
                return self._find("teams", member.team_id)
        return None

    def get_user_notifications(self, *, current_user: User | None) -> list[Notification]:
        if current_user is None:
            return []
        mine = [n for n in self._state["notifications"] if n.user_id == current_user.id]
        return sorted(mine, key=lambda n: n.created_at, reverse=True)

    def get_unread_notifications_count(self, *, current_user: User | None) -> int:
        if current_user is None:
            return 0
        return sum(
            1
            for n in self._state["notifications"]
            if n.user_id == current_user.id and not n.read
        )
