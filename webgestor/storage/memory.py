"""
Process-local storage. Values are kept serialized so callers never share
mutable objects with the store.
"""
from __future__ import annotations

from webgestor.storage.base import StorageAdapter


class MemoryStorage(StorageAdapter):

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    async def keys(self) -> list[str]:
        return sorted(self._items)

    async def close(self) -> None:
        self._items.clear()
