"""Page view counters and public statistics."""

from .models import PageView
from .repository import PageViewRepository
from .service import StatisticsService

__all__ = ["PageView", "PageViewRepository", "StatisticsService"]
