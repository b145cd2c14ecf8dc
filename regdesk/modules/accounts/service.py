"""Domain services for administrative account sessions."""

from __future__ import annotations

import logging

from regdesk.core.crypto import hash_password, needs_rehash, verify_password
from regdesk.core.errors import AuthenticationError, NotFoundError, ValidationError
from regdesk.core.timeutils import utcnow

from .models import AdminUser
from .repository import AdminUserRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class AccountService:
    """Login, profile and password use cases for the signed-in account."""

    def __init__(self, repository: AdminUserRepository, *, bcrypt_rounds: int = 12) -> None:
        self._repository = repository
        self._bcrypt_rounds = bcrypt_rounds

    async def get_by_id(self, user_id: str) -> AdminUser | None:
        return await self._repository.get_by_id(user_id)

    async def authenticate(self, username: str, password: str) -> AdminUser | None:
        user = await self._repository.get_by_username(username)
        if user is None or not user.is_active():
            return None
        if not verify_password(password, user.password_hash):
            return None
        if needs_rehash(user.password_hash, self._bcrypt_rounds):
            # cost factor changed in settings since this hash was written
            user = await self._repository.update(
                user.id,
                password_hash=hash_password(password, rounds=self._bcrypt_rounds),
            ) or user
            logger.info("Rehashed password for admin user %s", user.id)
        return user

    async def record_login(self, user_id: str, ip: str | None) -> None:
        await self._repository.set_last_login(user_id, utcnow(), ip)
        logger.info("Admin user %s signed in from %s", user_id, ip or "unknown")

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        user = await self._repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        await self._repository.update(
            user_id,
            password_hash=hash_password(new_password, rounds=self._bcrypt_rounds),
        )
        logger.info("Admin user %s changed their password", user_id)
