"""SQLAlchemy implementation of the payment repository."""

from __future__ import annotations

from sqlalchemy import func, select

from regdesk.infrastructure.database.models import Payment as PaymentModel
from regdesk.modules.common.query import Eq
from regdesk.modules.payments.models import SETTLED_STATUSES, Payment

from .base import SqlRepository


class SqlPaymentRepository(SqlRepository[PaymentModel, Payment]):
    model = PaymentModel

    @staticmethod
    def _to_domain(model: PaymentModel) -> Payment:
        return Payment.from_orm(model)

    async def get_by_order_number(self, order_number: str) -> Payment | None:
        return await self.find_one(Eq("order_number", order_number))

    async def total_settled_for(self, registration_id: str) -> int:
        stmt = select(func.coalesce(func.sum(PaymentModel.amount_cents), 0)).where(
            PaymentModel.registration_id == registration_id,
            PaymentModel.status.in_(SETTLED_STATUSES),
        )
        async with self._session("total_settled_for") as session:
            total = (await session.execute(stmt)).scalar()
        return int(total or 0)
