"""SQLAlchemy implementation of the registration repository."""

from __future__ import annotations

from regdesk.infrastructure.database.models import Registration as RegistrationModel
from regdesk.modules.registrations.models import Registration

from .base import SqlRepository


class SqlRegistrationRepository(SqlRepository[RegistrationModel, Registration]):
    model = RegistrationModel

    @staticmethod
    def _to_domain(model: RegistrationModel) -> Registration:
        return Registration.from_orm(model)
