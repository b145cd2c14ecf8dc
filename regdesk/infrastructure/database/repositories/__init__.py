"""SQLAlchemy-backed repository implementations."""

from .base import SqlRepository
from .admin_user_repository import SqlAdminUserRepository
from .registration_repository import SqlRegistrationRepository
from .payment_repository import SqlPaymentRepository
from .page_view_repository import SqlPageViewRepository

__all__ = [
    "SqlRepository",
    "SqlAdminUserRepository",
    "SqlRegistrationRepository",
    "SqlPaymentRepository",
    "SqlPageViewRepository",
]
