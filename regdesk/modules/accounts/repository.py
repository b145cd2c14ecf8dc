"""Repository protocol for administrative accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from regdesk.modules.common.repository import Repository

from .models import AdminUser


class AdminUserRepository(Repository[AdminUser], Protocol):
    """Administrative account persistence."""

    async def get_by_username(self, username: str) -> AdminUser | None:
        ...

    async def get_by_email(self, email: str) -> AdminUser | None:
        ...

    async def set_last_login(self, user_id: str, timestamp: datetime, ip: str | None) -> None:
        ...
