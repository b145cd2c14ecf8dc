"""Repository protocol for page view counters."""

from __future__ import annotations

from typing import Protocol

from regdesk.modules.common.repository import Repository

from .models import PageView


class PageViewRepository(Repository[PageView], Protocol):
    async def record_hit(self, date: str, visitor: str | None) -> PageView:
        """Increment the counter for ``date``, remembering ``visitor`` once."""
        ...
