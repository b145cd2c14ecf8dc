"""Dependency container wiring infrastructure, repositories and services."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from regdesk.core.config import Settings
from regdesk.core.events import EventBus
from regdesk.core.timeutils import resolve_timezone
from regdesk.infrastructure.database import build_engine, build_session_factory
from regdesk.infrastructure.database.repositories import (
    SqlAdminUserRepository,
    SqlPageViewRepository,
    SqlPaymentRepository,
    SqlRegistrationRepository,
)
from regdesk.modules.accounts.service import AccountService
from regdesk.modules.admin.service import AggregationService
from regdesk.modules.payments.service import PaymentService
from regdesk.modules.registrations.service import RegistrationService
from regdesk.modules.statistics.service import StatisticsService
from regdesk.services.export import ExportPipeline


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    engine: AsyncEngine
    sessions: async_sessionmaker[AsyncSession]
    events: EventBus
    users: SqlAdminUserRepository
    registrations: SqlRegistrationRepository
    payments: SqlPaymentRepository
    page_views: SqlPageViewRepository
    exporter: ExportPipeline
    account_service: AccountService
    registration_service: RegistrationService
    payment_service: PaymentService
    statistics_service: StatisticsService
    aggregation_service: AggregationService

    async def dispose(self) -> None:
        await self.engine.dispose()


def build_container(settings: Settings) -> ApplicationContainer:
    """Construct every long-lived collaborator exactly once."""
    engine = build_engine(settings)
    sessions = build_session_factory(engine)
    events = EventBus()
    tz = resolve_timezone(settings.stats.timezone)
    rounds = settings.security.bcrypt_rounds

    users = SqlAdminUserRepository(sessions)
    registrations = SqlRegistrationRepository(sessions)
    payments = SqlPaymentRepository(sessions)
    page_views = SqlPageViewRepository(sessions)
    exporter = ExportPipeline()

    registration_service = RegistrationService(registrations)
    return ApplicationContainer(
        settings=settings,
        engine=engine,
        sessions=sessions,
        events=events,
        users=users,
        registrations=registrations,
        payments=payments,
        page_views=page_views,
        exporter=exporter,
        account_service=AccountService(users, bcrypt_rounds=rounds),
        registration_service=registration_service,
        payment_service=PaymentService(
            payments,
            registration_service,
            events,
            test_payments_enabled=settings.test_payments_enabled,
        ),
        statistics_service=StatisticsService(page_views, registrations, tz),
        aggregation_service=AggregationService(
            registrations=registrations,
            payments=payments,
            users=users,
            exporter=exporter,
            tz=tz,
            max_page_size=settings.admin.max_page_size,
            bcrypt_rounds=rounds,
        ),
    )


__all__ = ["ApplicationContainer", "build_container"]
