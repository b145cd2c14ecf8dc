"""Repository protocol for registrations."""

from __future__ import annotations

from regdesk.modules.common.repository import Repository

from .models import Registration

RegistrationRepository = Repository[Registration]
