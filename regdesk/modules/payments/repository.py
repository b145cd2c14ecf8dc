"""Repository protocol for payments."""

from __future__ import annotations

from typing import Protocol

from regdesk.modules.common.repository import Repository

from .models import Payment


class PaymentRepository(Repository[Payment], Protocol):
    async def get_by_order_number(self, order_number: str) -> Payment | None:
        ...

    async def total_settled_for(self, registration_id: str) -> int:
        """Sum of settled payment amounts recorded against ``registration_id``."""
        ...
