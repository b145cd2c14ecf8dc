"""Administrative accounts: sign-in, profile and password management."""

from .models import (
    ROLES,
    STATUSES,
    UNSET,
    AdminProfile,
    AdminUser,
    AdminUserCreateInput,
    AdminUserUpdateInput,
)
from .repository import AdminUserRepository
from .service import AccountService

__all__ = [
    "ROLES",
    "STATUSES",
    "UNSET",
    "AccountService",
    "AdminProfile",
    "AdminUser",
    "AdminUserCreateInput",
    "AdminUserRepository",
    "AdminUserUpdateInput",
]
