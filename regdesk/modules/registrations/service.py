"""Domain services for team registrations."""

from __future__ import annotations

import logging
import re
from typing import Any, Sequence

from regdesk.core.errors import NotFoundError, ValidationError
from regdesk.core.timeutils import utcnow
from regdesk.modules.common.query import SortKey

from .models import STATUSES, Registration, RegistrationCreateInput
from .repository import RegistrationRepository

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^1[3-9]\d{9}$")
MAX_MEMBERS = 20
RECENT_LIMIT = 10

# Fields an authenticated operator may change through ``update``.
EDITABLE_FIELDS = frozenset(
    {
        "team_name",
        "leader_name",
        "leader_phone",
        "leader_email",
        "leader_organization",
        "members",
        "status",
        "total_amount_cents",
        "remarks",
        "reject_reason",
    }
)

REQUIRED_FIELDS = frozenset({"team_name", "leader_name", "leader_phone", "members", "total_amount_cents"})


def _validate_phone(phone: str) -> None:
    if not PHONE_PATTERN.match(phone or ""):
        raise ValidationError("Invalid phone number")


def _settlement(registration: Registration, paid_cents: int, total_cents: int) -> dict[str, Any]:
    if paid_cents <= 0:
        payment_status = "unpaid"
    elif paid_cents < total_cents:
        payment_status = "partially_paid"
    else:
        payment_status = "paid"

    values: dict[str, Any] = {"paid_amount_cents": paid_cents, "payment_status": payment_status}
    if payment_status == "paid" and registration.paid_at is None:
        values["paid_at"] = utcnow()
    return values


class RegistrationService:
    """Create, read and maintain team registrations."""

    def __init__(self, repository: RegistrationRepository) -> None:
        self._repository = repository

    async def create(self, payload: RegistrationCreateInput) -> Registration:
        if not payload.team_name.strip():
            raise ValidationError("Team name is required")
        if not payload.leader_name.strip():
            raise ValidationError("Leader name is required")
        _validate_phone(payload.leader_phone)
        if len(payload.members) > MAX_MEMBERS:
            raise ValidationError(f"A team may have at most {MAX_MEMBERS} members")
        if payload.total_amount_cents < 0:
            raise ValidationError("Amount cannot be negative")

        registration = await self._repository.create(
            team_name=payload.team_name.strip(),
            leader_name=payload.leader_name.strip(),
            leader_phone=payload.leader_phone,
            leader_email=payload.leader_email,
            leader_organization=payload.leader_organization,
            members=list(payload.members),
            total_amount_cents=payload.total_amount_cents,
            remarks=payload.remarks,
        )
        logger.info("Registration %s created for team %s", registration.id, registration.team_name)
        return registration

    async def list_recent(self, limit: int = RECENT_LIMIT) -> Sequence[Registration]:
        return await self._repository.find(sort=[SortKey("created_at", descending=True)], limit=limit)

    async def get(self, registration_id: str) -> Registration:
        registration = await self._repository.get_by_id(registration_id)
        if registration is None:
            raise NotFoundError("Registration not found")
        return registration

    async def update(self, registration_id: str, changes: dict[str, Any]) -> Registration:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        required = sorted(key for key in REQUIRED_FIELDS if key in changes and changes[key] is None)
        if required:
            raise ValidationError(f"Fields cannot be empty: {', '.join(required)}")
        if "leader_phone" in changes:
            _validate_phone(changes["leader_phone"])
        status = changes.get("status")
        if status is not None and status not in STATUSES:
            raise ValidationError(f"Unknown registration status: {status}")
        total = changes.get("total_amount_cents")
        if total is not None and total < 0:
            raise ValidationError("Amount cannot be negative")
        if status in {"approved", "rejected"}:
            changes = {**changes, "reviewed_at": utcnow()}
        if total is not None:
            current = await self._repository.get_by_id(registration_id)
            if current is None:
                raise NotFoundError("Registration not found")
            changes = {**changes, **_settlement(current, current.paid_amount_cents, total)}

        registration = await self._repository.update(registration_id, **changes)
        if registration is None:
            raise NotFoundError("Registration not found")
        logger.info("Registration %s updated (%s)", registration_id, ", ".join(sorted(changes)))
        return registration

    async def delete(self, registration_id: str, *, actor: str | None = None) -> None:
        deleted = await self._repository.delete(registration_id)
        if not deleted:
            raise NotFoundError("Registration not found")
        logger.info("Registration %s deleted by %s", registration_id, actor or "unknown")

    async def apply_payment(self, registration_id: str, paid_cents: int) -> Registration | None:
        """Record ``paid_cents`` as the amount settled so far and derive the payment status."""
        registration = await self._repository.get_by_id(registration_id)
        if registration is None:
            logger.warning("Payment recorded for unknown registration %s", registration_id)
            return None

        values = _settlement(registration, paid_cents, registration.total_amount_cents)
        return await self._repository.update(registration_id, **values)
