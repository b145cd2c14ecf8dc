"""SQLAlchemy implementation of the page view repository."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from regdesk.core.errors import StoreError
from regdesk.infrastructure.database.models import PageView as PageViewModel
from regdesk.infrastructure.database.models import PageVisitor
from regdesk.modules.statistics.models import PageView

from .base import SqlRepository

logger = logging.getLogger(__name__)


class SqlPageViewRepository(SqlRepository[PageViewModel, PageView]):
    model = PageViewModel

    @staticmethod
    def _to_domain(model: PageViewModel) -> PageView:
        return PageView.from_orm(model)

    async def record_hit(self, date: str, visitor: str | None) -> PageView:
        try:
            try:
                return await self._increment(date, visitor)
            except IntegrityError:
                # another request created the day row or the visitor row first
                logger.debug("Page view for %s recorded concurrently, retrying", date)
                return await self._increment(date, visitor)
        except SQLAlchemyError as exc:
            logger.error("record_hit on %s failed: %s", self.entity_name, exc)
            raise StoreError(operation="record_hit", entity=self.entity_name) from exc

    async def _increment(self, date: str, visitor: str | None) -> PageView:
        stmt = select(PageViewModel).where(PageViewModel.date == date)
        async with self._sessions() as session:
            async with session.begin():
                first_visit = bool(visitor) and not await self._seen(session, date, visitor)
                if first_visit:
                    session.add(PageVisitor(date=date, visitor=visitor))

                model = (await session.execute(stmt)).scalar_one_or_none()
                if model is None:
                    model = PageViewModel(date=date, count=1, unique_visitors=int(first_visit))
                    session.add(model)
                else:
                    model.count = PageViewModel.count + 1
                    if first_visit:
                        model.unique_visitors = PageViewModel.unique_visitors + 1
                await session.flush()
                await session.refresh(model)
            return self._to_domain(model)

    @staticmethod
    async def _seen(session, date: str, visitor: str) -> bool:
        stmt = select(PageVisitor.id).where(PageVisitor.date == date, PageVisitor.visitor == visitor)
        return (await session.execute(stmt)).first() is not None
