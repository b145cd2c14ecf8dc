"""Payment orders and their settlement."""

from .models import Payment, PaymentCreateInput
from .repository import PaymentRepository
from .service import PaymentService, generate_order_number

__all__ = ["Payment", "PaymentCreateInput", "PaymentRepository", "PaymentService", "generate_order_number"]
