"""
Identifier and timestamp generation.

Ids are `<prefix>-<uuid4 hex>` so rapid successive creations never collide.
Timestamps are ISO-8601 UTC strings with microsecond precision, strictly
increasing within a process, which keeps "order by createdAt" stable.
"""
from __future__ import annotations

import threading
import uuid
from datetime import datetime, timedelta, timezone


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Clock:

    def __init__(self) -> None:
        self._last: datetime | None = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def timestamp(self) -> str:
        with self._lock:
            current = self.now()
            if self._last is not None and current <= self._last:
                current = self._last + timedelta(microseconds=1)
            self._last = current
        return current.isoformat(timespec="microseconds")


default_clock = Clock()
