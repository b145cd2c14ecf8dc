"""Result shapes produced by the administrative aggregation service."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(slots=True)
class AmountBucket:
    count: int
    amount: int


@dataclass(slots=True)
class RegistrationStats:
    total: int
    today: int
    statuses: dict[str, int] = field(default_factory=dict)


@dataclass(slots=True)
class PaymentStats:
    total: int
    today: int
    amount: int
    today_amount: int
    statuses: dict[str, AmountBucket] = field(default_factory=dict)


@dataclass(slots=True)
class StatsSnapshot:
    """Cross-entity statistics. Amounts are integer cents."""

    registration: RegistrationStats
    payment: PaymentStats

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
