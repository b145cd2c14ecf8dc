"""Page view counting and the public statistics summary."""

from __future__ import annotations

import asyncio
import logging
from datetime import tzinfo
from typing import Any, Optional

from regdesk.core.timeutils import local_date
from regdesk.modules.common.query import Eq
from regdesk.modules.common.repository import Repository

from .models import PageView
from .repository import PageViewRepository

logger = logging.getLogger(__name__)


class StatisticsService:
    def __init__(self, page_views: PageViewRepository, registrations: Repository, tz: tzinfo) -> None:
        self._page_views = page_views
        self._registrations = registrations
        self._tz = tz

    async def record_view(self, visitor: Optional[str] = None) -> PageView:
        view = await self._page_views.record_hit(local_date(self._tz), visitor)
        logger.debug("Page view recorded for %s (count=%s)", view.date, view.count)
        return view

    async def public_stats(self) -> dict[str, Any]:
        today = local_date(self._tz)
        views, today_view, registrations = await asyncio.gather(
            self._page_views.group_statistics("date", sum_field="count"),
            self._page_views.find_one(Eq("date", today)),
            self._registrations.count(),
        )
        return {
            "total_views": sum(int(group.sum or 0) for group in views),
            "today_views": today_view.count if today_view else 0,
            "today_visitors": today_view.unique_visitors if today_view else 0,
            "registrations": registrations,
        }
