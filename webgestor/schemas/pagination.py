"""
Generic paginated response schema.
List endpoints slice the in-memory views and wrap the page with its metadata.
"""
from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Generic, TypeVar

from pydantic import BaseModel, computed_field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    size: int

    @computed_field  # type: ignore[misc]
    @property
    def pages(self) -> int:
        if self.size == 0:
            return 0
        return math.ceil(self.total / self.size)

    @classmethod
    def from_sequence(
        cls, items: Sequence[T], *, page: int, size: int
    ) -> "PaginatedResponse[T]":
        start = (page - 1) * size
        return cls(
            items=list(items[start:start + size]),
            total=len(items),
            page=page,
            size=size,
        )
