"""Administrative aggregation: listings, statistics, exports and user management."""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from datetime import tzinfo
from typing import Any, Iterator, Optional, Sequence, TypeVar

from regdesk.core.crypto import hash_password
from regdesk.core.errors import (
    AppError,
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from regdesk.core.timeutils import start_of_day
from regdesk.modules.accounts.models import (
    ROLE_SUPER_ADMIN,
    ROLES,
    STATUSES as USER_STATUSES,
    AdminProfile,
    AdminUserCreateInput,
    AdminUserUpdateInput,
)
from regdesk.modules.accounts.repository import AdminUserRepository
from regdesk.modules.common.pagination import Page
from regdesk.modules.common.query import MATCH_ALL, Eq, Predicate, SortKey, all_of, text_search
from regdesk.modules.common.repository import Repository
from regdesk.modules.payments.models import Payment
from regdesk.modules.registrations.models import (
    SEARCH_FIELDS,
    SORTABLE_FIELDS,
    Registration,
    RegistrationCriteria,
)
from regdesk.services.export import SUPPORTED_FORMATS, ExportArtifact, ExportPipeline

from .models import AmountBucket, PaymentStats, RegistrationStats, StatsSnapshot

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT")

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


def _optional_text(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


@contextmanager
def _unique_conflicts() -> Iterator[None]:
    """Report a write rejected by a unique index as a conflict."""
    try:
        yield
    except StoreError as exc:
        if exc.constraint_violation:
            raise ConflictError("Username or email already exists") from exc
        raise


class AggregationService:
    """Composes the entity repositories into the administrative views.

    Everything here is read-only except the three user-management writes,
    each of which performs exactly one create/update/delete store call.
    """

    def __init__(
        self,
        *,
        registrations: Repository[Registration],
        payments: Repository[Payment],
        users: AdminUserRepository,
        exporter: ExportPipeline,
        tz: tzinfo,
        max_page_size: int = 100,
        bcrypt_rounds: int = 12,
    ) -> None:
        self._registrations = registrations
        self._payments = payments
        self._users = users
        self._exporter = exporter
        self._tz = tz
        self._max_page_size = max_page_size
        self._bcrypt_rounds = bcrypt_rounds

    @contextmanager
    def _guard(self, operation: str, entity: str, actor: Optional[str] = None) -> Iterator[None]:
        try:
            yield
        except StoreError as exc:
            logger.error(
                "%s failed on %s (store operation=%s, actor=%s)",
                operation,
                entity,
                exc.operation,
                actor or "-",
            )
            message = f"Failed to {operation.replace('_', ' ')}"
            raise StoreError(message, operation=exc.operation, entity=entity) from exc
        except AppError:
            raise
        except Exception as exc:
            logger.exception("%s failed unexpectedly on %s (actor=%s)", operation, entity, actor or "-")
            raise InternalError(f"Failed to {operation.replace('_', ' ')}") from exc

    async def list_paged(
        self,
        repository: Repository[EntityT],
        *,
        filter: Predicate = MATCH_ALL,
        page: int = 1,
        limit: int = 20,
        sort: Sequence[SortKey] = (),
    ) -> Page[EntityT]:
        if page < 1:
            raise ValidationError("page must be >= 1")
        if limit < 1:
            raise ValidationError("limit must be >= 1")

        skip = (page - 1) * limit
        items, total = await asyncio.gather(
            repository.find(filter, sort, skip, limit),
            repository.count(filter),
        )
        return Page(page=page, limit=limit, total=total, items=list(items))

    async def list_registrations(self, criteria: RegistrationCriteria) -> Page[Registration]:
        if criteria.sort not in SORTABLE_FIELDS:
            raise ValidationError(f"Cannot sort by {criteria.sort}")
        order = (criteria.order or "desc").lower()
        if order not in {"asc", "desc"}:
            raise ValidationError("order must be 'asc' or 'desc'")

        filter = all_of(
            Eq("status", criteria.status) if criteria.status else None,
            text_search(SEARCH_FIELDS, criteria.search),
        )
        sort = [SortKey(criteria.sort, descending=order == "desc"), SortKey("id")]
        with self._guard("list_registrations", "registrations"):
            return await self.list_paged(
                self._registrations,
                filter=filter,
                page=criteria.page,
                limit=min(criteria.limit, self._max_page_size),
                sort=sort,
            )

    async def build_stats_snapshot(self) -> StatsSnapshot:
        since = start_of_day(self._tz)
        with self._guard("build_stats_snapshot", "registrations,payments"):
            (
                registration_groups,
                registration_total,
                registrations_today,
                payment_groups,
                payment_total,
                payments_today,
            ) = await asyncio.gather(
                self._registrations.group_statistics("status"),
                self._registrations.count(),
                self._registrations.find_by_date_range("created_at", since),
                self._payments.group_statistics("status", sum_field="amount_cents"),
                self._payments.count(),
                self._payments.find_by_date_range("created_at", since),
            )

        payment_statuses = {
            str(group.key): AmountBucket(count=group.count, amount=int(group.sum or 0))
            for group in payment_groups
        }
        return StatsSnapshot(
            registration=RegistrationStats(
                total=registration_total,
                today=len(registrations_today),
                statuses={str(group.key): group.count for group in registration_groups},
            ),
            payment=PaymentStats(
                total=payment_total,
                today=len(payments_today),
                amount=sum(bucket.amount for bucket in payment_statuses.values()),
                today_amount=sum(payment.amount_cents for payment in payments_today),
                statuses=payment_statuses,
            ),
        )

    async def export_registrations(
        self, format: str, status: Optional[str] = None, *, actor: Optional[str] = None
    ) -> ExportArtifact:
        return await self._export("registrations", self._registrations, format, status, actor)

    async def export_payments(
        self, format: str, status: Optional[str] = None, *, actor: Optional[str] = None
    ) -> ExportArtifact:
        return await self._export("payments", self._payments, format, status, actor)

    async def _export(
        self,
        entity: str,
        repository: Repository[Any],
        format: str,
        status: Optional[str],
        actor: Optional[str],
    ) -> ExportArtifact:
        if (format or "").lower() not in SUPPORTED_FORMATS:
            raise ValidationError(f"Unsupported export format: {format}")
        filter = all_of(Eq("status", status) if status else None)
        with self._guard(f"export_{entity}", entity, actor):
            records = await repository.find(filter, [SortKey("created_at", descending=True)])
            artifact = await self._exporter.export_async(entity, records, format)
        logger.info("%s exported %d %s as %s", actor or "unknown", len(records), entity, artifact.filename)
        return artifact

    async def list_users(self) -> list[AdminProfile]:
        with self._guard("list_users", "admin_users"):
            users = await self._users.find(sort=[SortKey("created_at", descending=True)])
        return [user.to_profile() for user in users]

    async def create_user(self, payload: AdminUserCreateInput, actor: AdminProfile) -> AdminProfile:
        if len(payload.username.strip()) < MIN_USERNAME_LENGTH:
            raise ValidationError(f"Username must be at least {MIN_USERNAME_LENGTH} characters")
        if len(payload.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if not payload.name.strip():
            raise ValidationError("Name is required")
        self._check_role(payload.role, actor)
        self._check_status(payload.status)

        email = _optional_text(payload.email)

        with self._guard("create_user", "admin_users", actor.username):
            if await self._users.get_by_username(payload.username) is not None:
                raise ConflictError("Username already exists")
            if email and await self._users.get_by_email(email) is not None:
                raise ConflictError("Email already exists")

            with _unique_conflicts():
                user = await self._users.create(
                    username=payload.username,
                    password_hash=hash_password(payload.password, rounds=self._bcrypt_rounds),
                    name=payload.name,
                    email=email,
                    phone=payload.phone,
                    role=payload.role,
                    status=payload.status,
                    remarks=payload.remarks,
                    created_by=actor.id,
                )
        logger.info("Admin user %s created by %s", user.username, actor.username)
        return user.to_profile()

    async def update_user(self, user_id: str, payload: AdminUserUpdateInput, actor: AdminProfile) -> AdminProfile:
        changes = payload.provided()
        if "email" in changes:
            changes["email"] = _optional_text(changes["email"])
        if "role" in changes:
            self._check_role(changes["role"], actor)
        if "status" in changes:
            self._check_status(changes["status"])
        if "name" in changes and not (changes["name"] or "").strip():
            raise ValidationError("Name is required")

        with self._guard("update_user", "admin_users", actor.username):
            current = await self._users.get_by_id(user_id)
            if current is None:
                raise NotFoundError("User not found")
            if current.is_super_admin() and changes.get("role", ROLE_SUPER_ADMIN) != ROLE_SUPER_ADMIN:
                raise ForbiddenError("cannot demote a super admin")
            email = changes.get("email")
            if email and email != current.email:
                holder = await self._users.get_by_email(email)
                if holder is not None and holder.id != user_id:
                    raise ConflictError("Email already exists")

            with _unique_conflicts():
                user = await self._users.update(user_id, **changes)
            if user is None:
                raise NotFoundError("User not found")
        logger.info(
            "Admin user %s updated by %s (%s)",
            user.username,
            actor.username,
            ", ".join(sorted(changes)) or "no changes",
        )
        return user.to_profile()

    async def delete_user(self, user_id: str, actor: AdminProfile) -> None:
        with self._guard("delete_user", "admin_users", actor.username):
            user = await self._users.get_by_id(user_id)
            if user is None:
                raise NotFoundError("User not found")
            if user.is_super_admin():
                raise ForbiddenError("cannot delete a super admin")
            if user.id == actor.id:
                raise ForbiddenError("cannot delete the current user")

            if not await self._users.delete(user_id):
                raise NotFoundError("User not found")
        logger.info("Admin user %s deleted by %s", user.username, actor.username)

    @staticmethod
    def _check_role(role: Any, actor: AdminProfile) -> None:
        if role not in ROLES:
            raise ValidationError(f"Unknown role: {role}")
        if role == ROLE_SUPER_ADMIN and not actor.is_super_admin():
            raise ForbiddenError("only a super admin can grant the super admin role")

    @staticmethod
    def _check_status(status: Any) -> None:
        if status not in USER_STATUSES:
            raise ValidationError(f"Unknown status: {status}")
