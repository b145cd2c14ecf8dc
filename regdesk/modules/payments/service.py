"""Domain services for payment orders."""

from __future__ import annotations

import logging
import secrets
import time
from datetime import datetime
from typing import Any, Optional, Sequence

from regdesk.core.errors import ForbiddenError, NotFoundError, ValidationError
from regdesk.core.events import PAYMENT_SUCCEEDED, EventBus
from regdesk.core.timeutils import to_storage, utcnow
from regdesk.modules.common.query import Eq, SortKey
from regdesk.modules.registrations.service import RegistrationService

from .models import METHODS, STATUSES, Payment, PaymentCreateInput
from .repository import PaymentRepository

logger = logging.getLogger(__name__)


def generate_order_number(prefix: str = "P", random_digits: int = 3) -> str:
    """Millisecond timestamp plus a random suffix, e.g. ``P1718000000000042``."""
    suffix = str(secrets.randbelow(10**random_digits)).zfill(random_digits)
    return f"{prefix}{int(time.time() * 1000)}{suffix}"


class PaymentService:
    """Payment order lifecycle and its effect on registrations."""

    def __init__(
        self,
        repository: PaymentRepository,
        registrations: RegistrationService,
        events: EventBus,
        *,
        test_payments_enabled: bool = False,
    ) -> None:
        self._repository = repository
        self._registrations = registrations
        self._events = events
        self._test_payments_enabled = test_payments_enabled

    async def create_order(self, payload: PaymentCreateInput) -> Payment:
        if payload.amount_cents <= 0:
            raise ValidationError("Payment amount must be positive")
        if payload.payment_method not in METHODS:
            raise ValidationError(f"Unsupported payment method: {payload.payment_method}")
        if payload.payment_method == "test" and not self._test_payments_enabled:
            raise ForbiddenError("Test payments are disabled")

        registration = await self._registrations.get(payload.registration_id)
        if registration.payment_status == "paid":
            raise ValidationError("Registration has already been paid")

        payment = await self._repository.create(
            order_number=generate_order_number(),
            registration_id=registration.id,
            team_name=registration.team_name,
            payer_name=payload.payer_name or registration.leader_name,
            payer_phone=payload.payer_phone or registration.leader_phone,
            payer_email=payload.payer_email or registration.leader_email,
            payment_method=payload.payment_method,
            amount_cents=payload.amount_cents,
            status="pending",
            remarks=payload.remarks,
        )
        logger.info(
            "Payment order %s created for registration %s (%s cents)",
            payment.order_number,
            registration.id,
            payment.amount_cents,
        )
        return payment

    async def get_status(self, order_number: str) -> Payment:
        payment = await self._repository.get_by_order_number(order_number)
        if payment is None:
            raise NotFoundError("Payment order not found")
        return payment

    async def list_for_registration(self, registration_id: str) -> Sequence[Payment]:
        return await self._repository.find(
            Eq("registration_id", registration_id),
            sort=[SortKey("created_at", descending=True)],
        )

    async def update_status(
        self,
        payment_id: str,
        status: str,
        *,
        remarks: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> Payment:
        if status not in STATUSES:
            raise ValidationError(f"Unknown payment status: {status}")
        current = await self._repository.get_by_id(payment_id)
        if current is None:
            raise NotFoundError("Payment not found")

        values: dict[str, Any] = {"status": status}
        if remarks is not None:
            values["remarks"] = remarks
        if status in {"paid", "completed"} and current.paid_at is None:
            values["paid_at"] = utcnow()
        payment = await self._repository.update(payment_id, **values)
        logger.info("Payment %s set to %s by %s", current.order_number, status, actor or "unknown")
        await self._sync_registration(payment)
        return payment

    async def refund(self, payment_id: str, *, reason: Optional[str] = None, actor: Optional[str] = None) -> Payment:
        current = await self._repository.get_by_id(payment_id)
        if current is None:
            raise NotFoundError("Payment not found")
        if not current.is_settled():
            raise ValidationError("Only settled payments can be refunded")

        payment = await self._repository.update(
            payment_id,
            status="refunded",
            refunded_at=utcnow(),
            remarks=reason if reason is not None else current.remarks,
        )
        logger.info("Payment %s refunded by %s", current.order_number, actor or "unknown")
        await self._sync_registration(payment)
        return payment

    async def handle_payment_success(self, payload: dict[str, Any]) -> Payment | None:
        """Settle the order named in a ``payment.succeeded`` event.

        Already settled orders are left untouched so replayed notifications
        are harmless.
        """
        order_number = payload.get("order_number")
        payment = await self._repository.get_by_order_number(order_number) if order_number else None
        if payment is None:
            logger.warning("Payment success for unknown order %s", order_number)
            return None
        if payment.is_settled():
            logger.info("Payment %s already settled, ignoring duplicate notification", order_number)
            return payment

        paid_at = payload.get("paid_at")
        values: dict[str, Any] = {
            "status": "paid",
            "paid_at": to_storage(paid_at) if isinstance(paid_at, datetime) else utcnow(),
            "transaction_id": payload.get("transaction_id") or payment.transaction_id,
        }
        if payload.get("payment_method") in METHODS:
            values["payment_method"] = payload["payment_method"]
        payment = await self._repository.update(payment.id, **values)
        logger.info("Payment %s settled (transaction %s)", order_number, payment.transaction_id)
        await self._sync_registration(payment)
        return payment

    async def complete_test_payment(self, order_number: str) -> int:
        """Publish a success event for a test order; returns the delivered handler count."""
        if not self._test_payments_enabled:
            raise ForbiddenError("Test payments are disabled")
        payment = await self.get_status(order_number)
        return await self._events.publish(
            PAYMENT_SUCCEEDED,
            {
                "order_number": payment.order_number,
                "payment_method": "test",
                "transaction_id": f"TEST-{payment.order_number}",
                "paid_at": utcnow(),
            },
        )

    async def _sync_registration(self, payment: Payment | None) -> None:
        if payment is None or not payment.registration_id:
            return
        paid = await self._repository.total_settled_for(payment.registration_id)
        await self._registrations.apply_payment(payment.registration_id, paid)
