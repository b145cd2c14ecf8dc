"""Reusable FastAPI dependencies."""

from .container import get_container
from .services import (
    get_account_service,
    get_aggregation_service,
    get_app_settings,
    get_payment_service,
    get_registration_service,
    get_statistics_service,
)

__all__ = [
    "get_container",
    "get_account_service",
    "get_aggregation_service",
    "get_app_settings",
    "get_payment_service",
    "get_registration_service",
    "get_statistics_service",
]
