"""
Initialise the administrator account.
Creates the default super admin used for the first sign-in.
"""
import asyncio
import logging
import os
from typing import Optional

from regdesk.core.config import Settings, get_settings
from regdesk.core.container import build_container
from regdesk.core.crypto import hash_password
from regdesk.core.logging import configure_logging
from regdesk.infrastructure.database import init_db
from regdesk.modules.accounts.models import ROLE_SUPER_ADMIN
from regdesk.modules.common.query import Eq

logger = logging.getLogger(__name__)

DEFAULT_USERNAME = "admin"
DEFAULT_PASSWORD = "admin123"


async def create_default_admin(settings: Optional[Settings] = None) -> bool:
    """Create the default super admin; returns ``False`` when one already exists."""
    settings = settings or get_settings()
    container = build_container(settings)
    try:
        await init_db(container.engine)
        if await container.users.count(Eq("role", ROLE_SUPER_ADMIN)):
            logger.info("A super admin already exists, nothing to do")
            return False

        username = os.getenv("REGDESK_ADMIN_USERNAME", DEFAULT_USERNAME)
        password = os.getenv("REGDESK_ADMIN_PASSWORD", DEFAULT_PASSWORD)
        await container.users.create(
            username=username,
            password_hash=hash_password(password, rounds=settings.security.bcrypt_rounds),
            name="Administrator",
            email=os.getenv("REGDESK_ADMIN_EMAIL", "admin@example.com"),
            role=ROLE_SUPER_ADMIN,
            status="active",
        )
        logger.info("Default super admin %r created; change its password after signing in", username)
        return True
    finally:
        await container.dispose()


def main() -> None:
    configure_logging(get_settings().logging.level)
    asyncio.run(create_default_admin())


if __name__ == "__main__":
    main()
