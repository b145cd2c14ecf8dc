"""Paginated result container."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, TypeVar

ItemT = TypeVar("ItemT")


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


@dataclass(slots=True)
class Page(Generic[ItemT]):
    page: int
    limit: int
    total: int
    items: list[ItemT] = field(default_factory=list)

    @property
    def pages(self) -> int:
        return page_count(self.total, self.limit)

