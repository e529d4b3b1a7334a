"""
Activity logging.
Keeps a capped, most-recent-first audit trail of mutating actions.
"""
from __future__ import annotations

import logging

from webgestor.core.clock import Clock, new_id
from webgestor.data.gateway import Batch, Change, Delete, Gateway, Insert
from webgestor.schemas.activity_log import ActivityLog
from webgestor.schemas.common import EntityType

logger = logging.getLogger(__name__)


class ActivityLogger:

    def __init__(self, gateway: Gateway, clock: Clock, *, limit: int = 100) -> None:
        self.gateway = gateway
        self.clock = clock
        self.limit = limit

    async def append(
        self,
        entries: list[ActivityLog],
        *,
        user_id: str,
        action: str,
        entity_type: EntityType,
        entity_id: str,
        details: str | None = None,
    ) -> list[ActivityLog]:
        """
        Prepend a new entry, evict whatever falls past the limit, commit,
        and return the next state of the log.
        """
        entry = ActivityLog(
            id=new_id("log"),
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            created_at=self.clock.timestamp(),
        )
        combined = [entry, *entries]
        kept, evicted = combined[: self.limit], combined[self.limit:]

        change: Change = Insert(entry)
        if evicted:
            change = Batch((Insert(entry), Delete(tuple(e.id for e in evicted))))
            logger.debug("Evicting %d activity entries", len(evicted))

        await self.gateway.commit("activity_logs", list(kept), change)
        return list(kept)
