"""Team registrations."""

from .models import Registration, RegistrationCreateInput, RegistrationCriteria
from .service import RegistrationService

__all__ = ["Registration", "RegistrationCreateInput", "RegistrationCriteria", "RegistrationService"]
