"""Page view counter model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from regdesk.infrastructure.database import models as orm


@dataclass(slots=True)
class PageView:
    id: str
    date: str
    count: int
    unique_visitors: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_orm(cls, instance: orm.PageView) -> "PageView":
        return cls(
            id=str(instance.id),
            date=instance.date,
            count=instance.count or 0,
            unique_visitors=instance.unique_visitors or 0,
            created_at=instance.created_at,
            updated_at=instance.updated_at,
        )
