"""SQLAlchemy implementation of the administrative account repository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import update

from regdesk.infrastructure.database.models import AdminUser as AdminUserModel
from regdesk.modules.accounts.models import AdminUser
from regdesk.modules.common.query import Eq

from .base import SqlRepository


class SqlAdminUserRepository(SqlRepository[AdminUserModel, AdminUser]):
    """Administrative account repository backed by SQLAlchemy models."""

    model = AdminUserModel

    @staticmethod
    def _to_domain(model: AdminUserModel) -> AdminUser:
        return AdminUser.from_orm(model)

    async def get_by_username(self, username: str) -> AdminUser | None:
        return await self.find_one(Eq("username", username))

    async def get_by_email(self, email: str) -> AdminUser | None:
        return await self.find_one(Eq("email", email))

    async def set_last_login(self, user_id: str, timestamp: datetime, ip: str | None) -> None:
        stmt = (
            update(AdminUserModel)
            .where(AdminUserModel.id == user_id)
            .values(last_login_at=timestamp, last_login_ip=ip)
        )
        async with self._session("set_last_login") as session:
            async with session.begin():
                await session.execute(stmt)
