"""
Shared pydantic building blocks for entity schemas.
Entities serialize with camelCase keys (`teamId`, `createdAt`) and accept
either camelCase or snake_case on input.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, ClassVar, Literal

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from webgestor.core.clock import parse_timestamp

UserRole = Literal["admin", "leader", "collaborator"]
ProjectStatus = Literal["active", "completed", "paused"]
TaskStatus = Literal["todo", "in_progress", "done"]
TaskPriority = Literal["low", "medium", "high", "urgent"]
NotificationType = Literal[
    "task_assigned", "deadline_approaching", "status_changed", "new_comment"
]
EntityType = Literal["team", "project", "task", "user"]


def _coerce_iso(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def _check_iso(value: str) -> str:
    parse_timestamp(value)
    return value


IsoTimestamp = Annotated[str, BeforeValidator(_coerce_iso), AfterValidator(_check_iso)]


class EntityModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_json(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys; unset optionals are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PayloadModel(BaseModel):
    """Input payloads: same aliasing as entities, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    # fields that may be omitted but never cleared
    non_nullable: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def _reject_explicit_nulls(self) -> PayloadModel:
        for name in self.non_nullable:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self
