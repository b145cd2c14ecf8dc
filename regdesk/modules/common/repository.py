"""Repository contract shared by every entity type."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Protocol, Sequence, TypeVar

from .query import MATCH_ALL, Predicate, SortKey

EntityT = TypeVar("EntityT")


@dataclass(frozen=True, slots=True)
class AggregationGroup:
    """One group of a ``group_statistics`` call.

    ``sum`` is only populated when a ``sum_field`` was requested.
    """

    key: Any
    count: int
    sum: Optional[int | float] = None


class Repository(Protocol[EntityT]):
    """Typed facade over one entity's persisted collection.

    Implementations are the only components allowed to issue store queries.
    Persistence failures surface as :class:`regdesk.core.errors.StoreError`.
    """

    entity_name: str

    async def count(self, filter: Predicate = MATCH_ALL) -> int:
        ...

    async def find(
        self,
        filter: Predicate = MATCH_ALL,
        sort: Sequence[SortKey] = (),
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[EntityT]:
        ...

    async def group_statistics(
        self,
        field: str,
        *,
        sum_field: Optional[str] = None,
        filter: Predicate = MATCH_ALL,
    ) -> list[AggregationGroup]:
        ...

    async def find_by_date_range(
        self,
        field: str,
        since: datetime,
        until: Optional[datetime] = None,
    ) -> list[EntityT]:
        ...

    async def get_by_id(self, entity_id: str) -> EntityT | None:
        ...

    async def find_one(self, filter: Predicate) -> EntityT | None:
        ...

    async def create(self, **values: Any) -> EntityT:
        ...

    async def update(self, entity_id: str, **values: Any) -> EntityT | None:
        ...

    async def delete(self, entity_id: str) -> bool:
        ...
