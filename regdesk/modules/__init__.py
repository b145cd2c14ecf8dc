"""Feature domains and the manifest the module registry mounts at startup."""

from regdesk.core.registry import DomainModule

from . import accounts, admin, common, payments, registrations, statistics

# Mounted in this order under the API prefix.
DOMAIN_MODULES: tuple[DomainModule, ...] = (
    DomainModule.from_path("system", "regdesk.modules.system.routes:route_descriptor"),
    DomainModule.from_path("accounts", "regdesk.modules.accounts.routes:route_descriptor"),
    DomainModule.from_path("registrations", "regdesk.modules.registrations.routes:route_descriptor"),
    DomainModule.from_path("payments", "regdesk.modules.payments.routes:route_descriptor"),
    DomainModule.from_path("statistics", "regdesk.modules.statistics.routes:route_descriptor"),
    DomainModule.from_path("admin", "regdesk.modules.admin.routes:route_descriptor"),
)

__all__ = [
    "DOMAIN_MODULES",
    "accounts",
    "admin",
    "common",
    "payments",
    "registrations",
    "statistics",
]
