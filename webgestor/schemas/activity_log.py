"""
ActivityLog schemas.
"""
from __future__ import annotations

from webgestor.schemas.common import EntityModel, EntityType, IsoTimestamp


class ActivityLog(EntityModel):
    id: str
    user_id: str
    action: str
    entity_type: EntityType
    entity_id: str
    details: str | None = None
    created_at: IsoTimestamp
