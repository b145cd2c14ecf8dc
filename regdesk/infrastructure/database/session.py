"""Engine and session factory construction for the store."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from regdesk.core.config import Settings
from regdesk.infrastructure.database.base import Base


def _engine_options(settings: Settings) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.database.echo}
    if settings.uses_sqlite:
        # aiosqlite runs each connection on its own worker thread
        options["connect_args"] = {"check_same_thread": False}
        return options
    pool = {
        "pool_size": settings.database.pool_size,
        "max_overflow": settings.database.max_overflow,
    }
    options.update({key: value for key, value in pool.items() if value is not None})
    options["pool_pre_ping"] = True
    return options


def build_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(settings.database.url, **_engine_options(settings))


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # rows are mapped to domain objects after commit, so keep loaded state
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    from regdesk.infrastructure.database import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
