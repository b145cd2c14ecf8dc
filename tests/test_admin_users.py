import asyncio
import dataclasses

import pytest
import pytest_asyncio

from regdesk.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from regdesk.modules.accounts.models import AdminUserCreateInput, AdminUserUpdateInput
from regdesk.modules.common.query import Eq

from .conftest import make_user


@pytest_asyncio.fixture
async def root(container):
    user = await make_user(container, "root", role="super_admin", email="root@example.com")
    return user.to_profile()


@pytest_asyncio.fixture
async def admin(container):
    user = await make_user(container, "ops", role="admin", email="ops@example.com")
    return user.to_profile()


@pytest.mark.asyncio
async def test_create_user_returns_profile_without_password(container, root):
    service = container.aggregation_service

    profile = await service.create_user(
        AdminUserCreateInput(username="reviewer1", password="pa55word", name="Reviewer", role="reviewer"),
        root,
    )

    assert profile.username == "reviewer1"
    assert profile.created_by == root.id
    assert "password_hash" not in {field.name for field in dataclasses.fields(profile)}
    stored = await container.users.get_by_username("reviewer1")
    assert stored.password_hash != "pa55word"
    assert stored.password_hash.startswith("$2")


@pytest.mark.asyncio
async def test_duplicate_username_is_a_conflict(container, root):
    service = container.aggregation_service
    payload = AdminUserCreateInput(username="clerk", password="pa55word", name="Clerk")
    await service.create_user(payload, root)

    with pytest.raises(ConflictError, match="Username already exists"):
        await service.create_user(payload, root)

    assert await container.users.count(Eq("username", "clerk")) == 1


@pytest.mark.asyncio
async def test_duplicate_email_is_a_conflict(container, root):
    service = container.aggregation_service
    payload = AdminUserCreateInput(username="clerk", password="pa55word", name="Clerk", email="root@example.com")

    with pytest.raises(ConflictError, match="Email already exists"):
        await service.create_user(payload, root)
    assert await container.users.get_by_username("clerk") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "changes",
    [
        {"username": "ab"},
        {"password": "123"},
        {"name": "  "},
        {"role": "overlord"},
        {"status": "sleeping"},
    ],
)
async def test_create_user_validates_input(container, root, changes):
    values = {"username": "clerk", "password": "pa55word", "name": "Clerk", **changes}
    with pytest.raises(ValidationError):
        await container.aggregation_service.create_user(AdminUserCreateInput(**values), root)


@pytest.mark.asyncio
async def test_only_super_admin_grants_super_admin(container, admin):
    payload = AdminUserCreateInput(username="boss", password="pa55word", name="Boss", role="super_admin")
    with pytest.raises(ForbiddenError):
        await container.aggregation_service.create_user(payload, admin)


@pytest.mark.asyncio
async def test_update_user_applies_only_provided_fields(container, root, admin):
    profile = await container.aggregation_service.update_user(
        admin.id, AdminUserUpdateInput(phone="13900139000"), root
    )
    assert profile.phone == "13900139000"
    assert profile.email == "ops@example.com"
    assert profile.role == "admin"


@pytest.mark.asyncio
async def test_super_admin_cannot_be_demoted(container, root):
    with pytest.raises(ForbiddenError, match="cannot demote a super admin"):
        await container.aggregation_service.update_user(root.id, AdminUserUpdateInput(role="admin"), root)
    assert (await container.users.get_by_id(root.id)).role == "super_admin"


@pytest.mark.asyncio
async def test_update_rejects_email_owned_by_someone_else(container, root, admin):
    with pytest.raises(ConflictError):
        await container.aggregation_service.update_user(
            admin.id, AdminUserUpdateInput(email="root@example.com"), root
        )


@pytest.mark.asyncio
async def test_update_missing_user(container, root):
    with pytest.raises(NotFoundError):
        await container.aggregation_service.update_user("missing", AdminUserUpdateInput(name="X"), root)


@pytest.mark.asyncio
async def test_super_admin_cannot_be_deleted(container, root, admin):
    with pytest.raises(ForbiddenError, match="cannot delete a super admin"):
        await container.aggregation_service.delete_user(root.id, admin)
    assert await container.users.get_by_id(root.id) is not None


@pytest.mark.asyncio
async def test_current_user_cannot_delete_itself(container, admin):
    with pytest.raises(ForbiddenError, match="cannot delete the current user"):
        await container.aggregation_service.delete_user(admin.id, admin)


@pytest.mark.asyncio
async def test_delete_user(container, root, admin):
    await container.aggregation_service.delete_user(admin.id, root)
    assert await container.users.get_by_id(admin.id) is None
    with pytest.raises(NotFoundError):
        await container.aggregation_service.delete_user(admin.id, root)


@pytest.mark.asyncio
async def test_list_users_never_exposes_password_material(container, root, admin):
    profiles = await container.aggregation_service.list_users()
    assert {profile.username for profile in profiles} == {"root", "ops"}
    assert all(not hasattr(profile, "password_hash") for profile in profiles)


@pytest.mark.asyncio
async def test_blank_emails_are_stored_as_missing(container, root, admin):
    service = container.aggregation_service

    first = await service.create_user(
        AdminUserCreateInput(username="alice", password="pa55word", name="Alice", email=""), root
    )
    second = await service.create_user(
        AdminUserCreateInput(username="bobby", password="pa55word", name="Bobby", email="  "), root
    )
    updated = await service.update_user(admin.id, AdminUserUpdateInput(email=""), root)

    assert first.email is None
    assert second.email is None
    assert updated.email is None


@pytest.mark.asyncio
async def test_unique_index_violation_is_a_conflict(container, root, monkeypatch):
    service = container.aggregation_service
    await service.create_user(AdminUserCreateInput(username="carol", password="pa55word", name="Carol"), root)

    async def nobody(username):
        return None

    monkeypatch.setattr(container.users, "get_by_username", nobody)

    with pytest.raises(ConflictError):
        await service.create_user(AdminUserCreateInput(username="carol", password="pa55word", name="Carol"), root)
    assert await container.users.count(Eq("username", "carol")) == 1


@pytest.mark.asyncio
async def test_concurrent_creates_with_the_same_username(container, root):
    service = container.aggregation_service
    payload = AdminUserCreateInput(username="dave", password="pa55word", name="Dave")

    results = await asyncio.gather(
        service.create_user(payload, root),
        service.create_user(payload, root),
        return_exceptions=True,
    )

    conflicts = [result for result in results if isinstance(result, ConflictError)]
    assert len(conflicts) == 1
    assert await container.users.count(Eq("username", "dave")) == 1


@pytest.mark.asyncio
async def test_duplicate_blank_email_over_http(client, admin_headers):
    for username in ("alice", "bobby"):
        response = await client.post(
            "/api/admin/users",
            json={"username": username, "password": "pa55word", "name": username, "email": ""},
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["email"] is None
