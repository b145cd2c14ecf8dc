from datetime import datetime

import pytest

from regdesk.core.errors import StoreError, ValidationError
from regdesk.modules.admin.models import AmountBucket
from regdesk.modules.common.query import Eq
from regdesk.modules.registrations.models import RegistrationCriteria

from .conftest import make_payment, make_registration


async def _seed_registrations(container, total):
    for index in range(total):
        await make_registration(
            container,
            f"Team {index:02d}",
            status="approved" if index % 2 else "pending",
            created_at=datetime(2024, 5, 1, 12, index),
        )


class TestListPaged:
    @pytest.mark.asyncio
    async def test_pages_is_ceiling_of_total_over_limit(self, container):
        await _seed_registrations(container, 7)
        service = container.aggregation_service

        page = await service.list_paged(container.registrations, page=1, limit=3)

        assert page.total == 7
        assert page.pages == 3
        assert len(page.items) == 3

    @pytest.mark.asyncio
    async def test_last_page_holds_the_remainder(self, container):
        await _seed_registrations(container, 7)
        page = await container.aggregation_service.list_paged(container.registrations, page=3, limit=3)
        assert len(page.items) == 1

    @pytest.mark.asyncio
    async def test_page_beyond_last_is_empty_but_keeps_total(self, container):
        await _seed_registrations(container, 4)
        page = await container.aggregation_service.list_paged(container.registrations, page=9, limit=3)
        assert page.items == []
        assert page.total == 4
        assert page.pages == 2

    @pytest.mark.asyncio
    async def test_empty_collection_has_zero_pages(self, container):
        page = await container.aggregation_service.list_paged(container.payments, page=1, limit=10)
        assert page.total == 0
        assert page.pages == 0
        assert page.items == []

    @pytest.mark.asyncio
    async def test_filter_applies_to_items_and_total(self, container):
        await _seed_registrations(container, 6)
        page = await container.aggregation_service.list_paged(
            container.registrations, filter=Eq("status", "approved"), page=1, limit=10
        )
        assert page.total == 3
        assert {registration.status for registration in page.items} == {"approved"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page, limit", [(0, 10), (-1, 10), (1, 0)])
    async def test_invalid_window_is_rejected(self, container, page, limit):
        with pytest.raises(ValidationError):
            await container.aggregation_service.list_paged(container.registrations, page=page, limit=limit)


class TestListRegistrations:
    @pytest.mark.asyncio
    async def test_sorts_and_searches(self, container):
        await _seed_registrations(container, 5)
        await make_registration(container, "Night Owls", leader_email="owls@example.com")

        page = await container.aggregation_service.list_registrations(
            RegistrationCriteria(search="team 0", sort="team_name", order="asc", limit=2)
        )

        assert page.total == 5
        assert [registration.team_name for registration in page.items] == ["Team 00", "Team 01"]

    @pytest.mark.asyncio
    async def test_status_filter(self, container):
        await _seed_registrations(container, 5)
        page = await container.aggregation_service.list_registrations(RegistrationCriteria(status="approved"))
        assert page.total == 2

    @pytest.mark.asyncio
    async def test_limit_is_capped(self, container):
        await _seed_registrations(container, 3)
        page = await container.aggregation_service.list_registrations(RegistrationCriteria(limit=10_000))
        assert page.limit == container.settings.admin.max_page_size

    @pytest.mark.asyncio
    async def test_rejects_unknown_sort_field_and_order(self, container):
        service = container.aggregation_service
        with pytest.raises(ValidationError):
            await service.list_registrations(RegistrationCriteria(sort="leader_phone"))
        with pytest.raises(ValidationError):
            await service.list_registrations(RegistrationCriteria(order="sideways"))


class TestStatsSnapshot:
    @pytest.mark.asyncio
    async def test_snapshot_reflects_store_contents(self, container):
        await make_registration(container, "Old", status="approved", created_at=datetime(2020, 1, 1))
        await make_registration(container, "New A", status="pending")
        await make_registration(container, "New B", status="pending")
        await make_payment(container, "P1", 5000, status="paid", created_at=datetime(2020, 1, 1))
        await make_payment(container, "P2", 3000, status="paid")
        await make_payment(container, "P3", 1000, status="pending")

        snapshot = await container.aggregation_service.build_stats_snapshot()

        assert snapshot.registration.total == 3
        assert snapshot.registration.today == 2
        assert snapshot.registration.statuses == {"approved": 1, "pending": 2}
        assert snapshot.payment.total == 3
        assert snapshot.payment.today == 2
        assert snapshot.payment.amount == 9000
        assert snapshot.payment.today_amount == 4000
        assert snapshot.payment.statuses == {
            "paid": AmountBucket(count=2, amount=8000),
            "pending": AmountBucket(count=1, amount=1000),
        }

    @pytest.mark.asyncio
    async def test_snapshot_is_stable_without_writes(self, container):
        await make_registration(container, "Owls", status="approved")
        await make_payment(container, "P1", 1200, status="paid")

        first = await container.aggregation_service.build_stats_snapshot()
        second = await container.aggregation_service.build_stats_snapshot()

        assert first == second

    @pytest.mark.asyncio
    async def test_status_counts_add_up_to_total(self, container):
        for status in ["approved", "pending", "rejected", "approved"]:
            await make_registration(container, status, status=status)

        snapshot = await container.aggregation_service.build_stats_snapshot()

        assert sum(snapshot.registration.statuses.values()) == snapshot.registration.total

    @pytest.mark.asyncio
    async def test_empty_store(self, container):
        snapshot = await container.aggregation_service.build_stats_snapshot()
        data = snapshot.to_dict()
        assert data["registration"] == {"total": 0, "today": 0, "statuses": {}}
        assert data["payment"]["amount"] == 0
        assert data["payment"]["statuses"] == {}

    @pytest.mark.asyncio
    async def test_store_failure_names_the_operation(self, container):
        async with container.engine.begin() as conn:
            await conn.exec_driver_sql("DROP TABLE payments")

        with pytest.raises(StoreError, match="Failed to build stats snapshot"):
            await container.aggregation_service.build_stats_snapshot()


class TestExports:
    @pytest.mark.asyncio
    async def test_export_filters_by_status_newest_first(self, container):
        await make_payment(container, "P1", 100, status="paid", created_at=datetime(2024, 1, 1))
        await make_payment(container, "P2", 200, status="paid", created_at=datetime(2024, 2, 1))
        await make_payment(container, "P3", 300, status="pending")

        artifact = await container.aggregation_service.export_payments("json", "paid", actor="root")

        assert artifact.content_type == "application/json"
        assert artifact.filename.startswith("payments-")
        assert artifact.filename.endswith(".json")
        assert b'"P2"' in artifact.payload
        assert artifact.payload.index(b'"P2"') < artifact.payload.index(b'"P1"')
        assert b'"P3"' not in artifact.payload

    @pytest.mark.asyncio
    async def test_unsupported_format_is_rejected(self, container):
        with pytest.raises(ValidationError):
            await container.aggregation_service.export_registrations("pdf")
