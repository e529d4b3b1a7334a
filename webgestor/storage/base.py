"""
Key-value storage adapter contract.
Each key holds one JSON array (one entity collection). Writes replace the
whole array and are all-or-nothing.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class StorageAdapter(ABC):

    @abstractmethod
    async def get_item(self, key: str) -> str | None:
        """Return the raw serialized value, or None when the key is absent."""

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """Store the raw serialized value atomically."""

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Delete the key. Missing keys are ignored."""

    @abstractmethod
    async def keys(self) -> list[str]:
        """List stored keys."""

    async def close(self) -> None:
        return None

    async def load(self, key: str) -> list[dict[str, Any]]:
        """
        Read the JSON array stored under key.
        Missing or unreadable values load as an empty collection.
        """
        raw = await self.get_item(key)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, ValueError):
            logger.warning("Discarding unreadable value under storage key %s", key)
            return []
        if not isinstance(data, list):
            logger.warning("Discarding non-array value under storage key %s", key)
            return []
        return [row for row in data if isinstance(row, dict)]

    async def save(self, key: str, rows: list[dict[str, Any]]) -> None:
        await self.set_item(key, json.dumps(rows, ensure_ascii=False))
