"""Registration domain model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from regdesk.infrastructure.database import models as orm

STATUSES = ("pending", "approved", "rejected", "active", "inactive")
PAYMENT_STATUSES = ("unpaid", "partially_paid", "paid", "refunded")

# Fields a caller may sort the admin listing by.
SORTABLE_FIELDS = ("created_at", "updated_at", "team_name", "status", "payment_status", "total_amount_cents")

# Text fields covered by the admin free-text search.
SEARCH_FIELDS = ("team_name", "leader_name", "leader_phone", "leader_email")


@dataclass(slots=True)
class Registration:
    id: str
    team_name: str
    leader_name: str
    leader_phone: str
    status: Optional[str]
    payment_status: str
    total_amount_cents: int
    paid_amount_cents: int
    leader_email: Optional[str] = None
    leader_organization: Optional[str] = None
    members: list[dict[str, Any]] = field(default_factory=list)
    paid_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    remarks: Optional[str] = None
    reject_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_orm(cls, instance: orm.Registration) -> "Registration":
        return cls(
            id=str(instance.id),
            team_name=instance.team_name,
            leader_name=instance.leader_name,
            leader_phone=instance.leader_phone,
            status=instance.status,
            payment_status=instance.payment_status or "unpaid",
            total_amount_cents=instance.total_amount_cents or 0,
            paid_amount_cents=instance.paid_amount_cents or 0,
            leader_email=instance.leader_email,
            leader_organization=instance.leader_organization,
            members=list(instance.members or []),
            paid_at=instance.paid_at,
            reviewed_at=instance.reviewed_at,
            remarks=instance.remarks,
            reject_reason=instance.reject_reason,
            created_at=instance.created_at,
            updated_at=instance.updated_at,
        )

    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def outstanding_cents(self) -> int:
        return max(self.total_amount_cents - self.paid_amount_cents, 0)


@dataclass(slots=True)
class RegistrationCreateInput:
    team_name: str
    leader_name: str
    leader_phone: str
    leader_email: Optional[str] = None
    leader_organization: Optional[str] = None
    members: list[dict[str, Any]] = field(default_factory=list)
    total_amount_cents: int = 0
    remarks: Optional[str] = None


@dataclass(slots=True)
class RegistrationCriteria:
    """Caller-supplied listing criteria for the admin registration view."""

    status: Optional[str] = None
    search: Optional[str] = None
    page: int = 1
    limit: int = 20
    sort: str = "created_at"
    order: str = "desc"
