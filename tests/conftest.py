from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import datetime
from typing import Any, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from regdesk.core.config import DatabaseSettings, SecuritySettings, Settings
from regdesk.core.container import ApplicationContainer, build_container
from regdesk.core.crypto import hash_password
from regdesk.infrastructure.database import init_db
from regdesk.main import create_app

ADMIN_PASSWORD = "secret123"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        environment="test",
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'regdesk.db'}"),
        security=SecuritySettings(secret_key="test-secret-key", bcrypt_rounds=4),
    )


@pytest_asyncio.fixture
async def container(settings) -> AsyncIterator[ApplicationContainer]:
    container = build_container(settings)
    await init_db(container.engine)
    yield container
    await container.dispose()


@pytest_asyncio.fixture
async def app(settings):
    app = create_app(settings)
    await init_db(app.state.container.engine)
    yield app
    await app.state.container.dispose()


@pytest_asyncio.fixture
async def client(app) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def make_user(
    container: ApplicationContainer,
    username: str,
    *,
    role: str = "admin",
    email: Optional[str] = None,
    password: str = ADMIN_PASSWORD,
):
    return await container.users.create(
        username=username,
        password_hash=hash_password(password, rounds=4),
        name=username.title(),
        email=email,
        role=role,
        status="active",
    )


async def make_registration(container: ApplicationContainer, team_name: str, **values: Any):
    values.setdefault("leader_name", "Lee")
    values.setdefault("leader_phone", "13800138000")
    return await container.registrations.create(team_name=team_name, **values)


async def make_payment(
    container: ApplicationContainer,
    order_number: str,
    amount_cents: int,
    *,
    status: str = "pending",
    created_at: Optional[datetime] = None,
    **values: Any,
):
    if created_at is not None:
        values["created_at"] = created_at
    return await container.payments.create(
        order_number=order_number,
        amount_cents=amount_cents,
        status=status,
        **values,
    )


async def login(client: AsyncClient, username: str, password: str = ADMIN_PASSWORD) -> dict[str, str]:
    response = await client.post("/api/account/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    token = response.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def super_admin(app):
    return await make_user(app.state.container, "root", role="super_admin", email="root@example.com")


@pytest_asyncio.fixture
async def admin_headers(client, super_admin) -> dict[str, str]:
    return await login(client, super_admin.username)
