"""Domain models for administrative accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from regdesk.infrastructure.database import models as orm

ROLE_SUPER_ADMIN = "super_admin"
ROLE_ADMIN = "admin"
ROLE_REVIEWER = "reviewer"
ROLE_DATA_ENTRY = "data_entry"

# Highest privilege first.
ROLES = (ROLE_SUPER_ADMIN, ROLE_ADMIN, ROLE_REVIEWER, ROLE_DATA_ENTRY)

STATUS_ACTIVE = "active"
STATUS_DISABLED = "disabled"
STATUSES = (STATUS_ACTIVE, STATUS_DISABLED)


@dataclass(slots=True)
class AdminProfile:
    """Administrative identity as returned to callers. Never carries password material."""

    id: str
    username: str
    name: str
    role: str
    status: str
    email: Optional[str] = None
    phone: Optional[str] = None
    remarks: Optional[str] = None
    created_by: Optional[str] = None
    last_login_at: Optional[datetime] = None
    last_login_ip: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_admin(self) -> bool:
        return self.role in {ROLE_ADMIN, ROLE_SUPER_ADMIN}

    def is_super_admin(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN

    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE


@dataclass(slots=True)
class AdminUser:
    id: str
    username: str
    name: str
    role: str
    status: str
    password_hash: str = field(repr=False)
    email: Optional[str] = None
    phone: Optional[str] = None
    remarks: Optional[str] = None
    created_by: Optional[str] = None
    last_login_at: Optional[datetime] = None
    last_login_ip: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_orm(cls, instance: orm.AdminUser) -> "AdminUser":
        return cls(
            id=str(instance.id),
            username=instance.username,
            name=instance.name,
            role=instance.role or ROLE_DATA_ENTRY,
            status=instance.status or STATUS_ACTIVE,
            password_hash=instance.password_hash,
            email=instance.email,
            phone=instance.phone,
            remarks=instance.remarks,
            created_by=instance.created_by,
            last_login_at=instance.last_login_at,
            last_login_ip=instance.last_login_ip,
            created_at=instance.created_at,
            updated_at=instance.updated_at,
        )

    def is_super_admin(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN

    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    def to_profile(self) -> AdminProfile:
        return AdminProfile(
            id=self.id,
            username=self.username,
            name=self.name,
            role=self.role,
            status=self.status,
            email=self.email,
            phone=self.phone,
            remarks=self.remarks,
            created_by=self.created_by,
            last_login_at=self.last_login_at,
            last_login_ip=self.last_login_ip,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass(slots=True)
class AdminUserCreateInput:
    username: str
    password: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: str = ROLE_ADMIN
    status: str = STATUS_ACTIVE
    remarks: Optional[str] = None


# Sentinel used to differentiate between "not provided" and explicit None.
UNSET = object()


@dataclass(slots=True)
class AdminUserUpdateInput:
    name: Optional[str] | object = UNSET
    email: Optional[str] | object = UNSET
    phone: Optional[str] | object = UNSET
    role: Optional[str] | object = UNSET
    status: Optional[str] | object = UNSET
    remarks: Optional[str] | object = UNSET

    def provided(self) -> dict[str, object]:
        """Fields explicitly supplied by the caller."""
        values = {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "status": self.status,
            "remarks": self.remarks,
        }
        return {key: value for key, value in values.items() if value is not UNSET}
