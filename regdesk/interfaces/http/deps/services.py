"""Service dependency providers."""

from fastapi import Depends

from regdesk.core.config import Settings
from regdesk.core.container import ApplicationContainer
from regdesk.modules.accounts.service import AccountService
from regdesk.modules.admin.service import AggregationService
from regdesk.modules.payments.service import PaymentService
from regdesk.modules.registrations.service import RegistrationService
from regdesk.modules.statistics.service import StatisticsService

from .container import get_container


def get_app_settings(container: ApplicationContainer = Depends(get_container)) -> Settings:
    return container.settings


def get_account_service(container: ApplicationContainer = Depends(get_container)) -> AccountService:
    return container.account_service


def get_registration_service(container: ApplicationContainer = Depends(get_container)) -> RegistrationService:
    return container.registration_service


def get_payment_service(container: ApplicationContainer = Depends(get_container)) -> PaymentService:
    return container.payment_service


def get_statistics_service(container: ApplicationContainer = Depends(get_container)) -> StatisticsService:
    return container.statistics_service


def get_aggregation_service(container: ApplicationContainer = Depends(get_container)) -> AggregationService:
    return container.aggregation_service


__all__ = [
    "get_account_service",
    "get_aggregation_service",
    "get_app_settings",
    "get_payment_service",
    "get_registration_service",
    "get_statistics_service",
]
