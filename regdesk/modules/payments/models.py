"""Payment domain model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from regdesk.infrastructure.database import models as orm

METHODS = ("wechat", "alipay", "bank_transfer", "onsite", "test", "other")
STATUSES = (
    "pending",
    "processing",
    "paid",
    "completed",
    "refunded",
    "canceled",
    "partially_refunded",
    "closed",
    "failed",
)
# Statuses whose amount counts towards what a registration has paid.
SETTLED_STATUSES = frozenset({"paid", "completed"})


@dataclass(slots=True)
class Payment:
    id: str
    order_number: str
    amount_cents: int
    payment_method: str
    status: Optional[str]
    registration_id: Optional[str] = None
    team_name: Optional[str] = None
    payer_name: Optional[str] = None
    payer_phone: Optional[str] = None
    payer_email: Optional[str] = None
    transaction_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_orm(cls, instance: orm.Payment) -> "Payment":
        return cls(
            id=str(instance.id),
            order_number=instance.order_number,
            amount_cents=instance.amount_cents or 0,
            payment_method=instance.payment_method or "other",
            status=instance.status,
            registration_id=instance.registration_id,
            team_name=instance.team_name,
            payer_name=instance.payer_name,
            payer_phone=instance.payer_phone,
            payer_email=instance.payer_email,
            transaction_id=instance.transaction_id,
            paid_at=instance.paid_at,
            refunded_at=instance.refunded_at,
            remarks=instance.remarks,
            created_at=instance.created_at,
            updated_at=instance.updated_at,
        )

    def is_settled(self) -> bool:
        return self.status in SETTLED_STATUSES


@dataclass(slots=True)
class PaymentCreateInput:
    registration_id: str
    amount_cents: int
    payment_method: str = "other"
    payer_name: Optional[str] = None
    payer_phone: Optional[str] = None
    payer_email: Optional[str] = None
    remarks: Optional[str] = None
