"""Generic SQLAlchemy repository implementing the shared repository contract."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, ClassVar, Generic, Optional, Sequence, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from regdesk.core.errors import StoreError
from regdesk.infrastructure.database.base import Base
from regdesk.infrastructure.database.query import compile_predicate, compile_sort, resolve_column
from regdesk.modules.common.query import MATCH_ALL, Gte, Lt, Predicate, SortKey, all_of
from regdesk.modules.common.repository import AggregationGroup

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
EntityT = TypeVar("EntityT")


class SqlRepository(Generic[ModelT, EntityT]):
    """Repository backed by one SQLAlchemy model.

    Usage:
        class RegistrationRepository(SqlRepository[RegistrationModel, Registration]):
            model = RegistrationModel

            @staticmethod
            def _to_domain(model):
                return Registration.from_orm(model)

        repo = RegistrationRepository(session_factory)
        paid = await repo.count(Eq("status", "paid"))

    Every call checks out its own session from the pooled factory, so one
    repository instance can serve any number of concurrent requests. Writes
    run inside their own transaction.
    """

    model: ClassVar[type]

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    @property
    def entity_name(self) -> str:
        return self.model.__tablename__

    @staticmethod
    def _to_domain(model: Any) -> Any:
        raise NotImplementedError

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessions() as session:
                yield session
        except IntegrityError as exc:
            logger.warning("%s on %s violated a constraint: %s", operation, self.entity_name, exc.orig)
            raise StoreError(operation=operation, entity=self.entity_name, constraint_violation=True) from exc
        except SQLAlchemyError as exc:
            logger.error("%s on %s failed: %s", operation, self.entity_name, exc)
            raise StoreError(operation=operation, entity=self.entity_name) from exc

    async def count(self, filter: Predicate = MATCH_ALL) -> int:
        logger.debug("count %s where %r", self.entity_name, filter)
        stmt = select(func.count()).select_from(self.model).where(compile_predicate(self.model, filter))
        async with self._session("count") as session:
            total = (await session.execute(stmt)).scalar()
        return int(total or 0)

    async def find(
        self,
        filter: Predicate = MATCH_ALL,
        sort: Sequence[SortKey] = (),
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[EntityT]:
        logger.debug("find %s where %r skip=%s limit=%s", self.entity_name, filter, skip, limit)
        stmt = select(self.model).where(compile_predicate(self.model, filter))
        order_by = compile_sort(self.model, sort)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._session("find") as session:
            result = await session.execute(stmt)
            return [self._to_domain(model) for model in result.scalars().all()]

    async def find_one(self, filter: Predicate) -> EntityT | None:
        items = await self.find(filter, limit=1)
        return items[0] if items else None

    async def group_statistics(
        self,
        field: str,
        *,
        sum_field: Optional[str] = None,
        filter: Predicate = MATCH_ALL,
    ) -> list[AggregationGroup]:
        logger.debug("group %s by %s (sum=%s)", self.entity_name, field, sum_field)
        key = resolve_column(self.model, field)
        columns = [key.label("key"), func.count().label("count")]
        if sum_field is not None:
            summed = resolve_column(self.model, sum_field)
            columns.append(func.coalesce(func.sum(func.coalesce(summed, 0)), 0).label("sum"))
        stmt = (
            select(*columns)
            .where(key.is_not(None))
            .where(compile_predicate(self.model, filter))
            .group_by(key)
            .order_by(key)
        )
        async with self._session("group_statistics") as session:
            rows = (await session.execute(stmt)).all()
        return [
            AggregationGroup(
                key=row.key,
                count=int(row.count),
                sum=row.sum if sum_field is not None else None,
            )
            for row in rows
        ]

    async def find_by_date_range(
        self,
        field: str,
        since: datetime,
        until: Optional[datetime] = None,
    ) -> list[EntityT]:
        upper = Lt(field, until) if until is not None else None
        return await self.find(all_of(Gte(field, since), upper))

    async def get_by_id(self, entity_id: str) -> EntityT | None:
        async with self._session("get_by_id") as session:
            model = await session.get(self.model, entity_id)
            return self._to_domain(model) if model is not None else None

    async def create(self, **values: Any) -> EntityT:
        async with self._session("create") as session:
            async with session.begin():
                model = self.model(**values)
                session.add(model)
                await session.flush()
                await session.refresh(model)
            return self._to_domain(model)

    async def update(self, entity_id: str, **values: Any) -> EntityT | None:
        for key in values:
            resolve_column(self.model, key)
        async with self._session("update") as session:
            async with session.begin():
                model = await session.get(self.model, entity_id)
                if model is None:
                    return None
                for key, value in values.items():
                    setattr(model, key, value)
                await session.flush()
                await session.refresh(model)
            return self._to_domain(model)

    async def delete(self, entity_id: str) -> bool:
        stmt = delete(self.model).where(self.model.id == entity_id)
        async with self._session("delete") as session:
            async with session.begin():
                result = await session.execute(stmt)
        return bool(result.rowcount)


__all__ = ["SqlRepository"]
