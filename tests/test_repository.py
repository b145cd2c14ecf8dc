import asyncio
from datetime import datetime

import pytest

from regdesk.core.config import DatabaseSettings, Settings
from regdesk.core.container import build_container
from regdesk.core.errors import StoreError
from regdesk.modules.common.query import Eq, Gte, SortKey, all_of, text_search
from regdesk.modules.common.repository import AggregationGroup

from .conftest import make_payment, make_registration


@pytest.mark.asyncio
async def test_group_statistics_counts_each_key(container):
    for index, status in enumerate(["paid", "paid", "pending"]):
        await make_registration(container, f"Team {index}", status=status)

    groups = await container.registrations.group_statistics("status")

    assert groups == [AggregationGroup("paid", 2), AggregationGroup("pending", 1)]
    assert await container.registrations.count(Eq("status", "paid")) == 2


@pytest.mark.asyncio
async def test_group_statistics_excludes_missing_keys(container):
    await make_registration(container, "Keyed", status="approved")
    unkeyed = await make_registration(container, "Unkeyed")
    await container.registrations.update(unkeyed.id, status=None)

    groups = await container.registrations.group_statistics("status")

    assert [group.key for group in groups] == ["approved"]
    assert sum(group.count for group in groups) == 1
    assert await container.registrations.count() == 2


@pytest.mark.asyncio
async def test_group_statistics_sums_requested_field(container):
    await make_payment(container, "P1", 1000, status="paid")
    await make_payment(container, "P2", 2500, status="paid")
    await make_payment(container, "P3", 700, status="pending")

    groups = await container.payments.group_statistics("status", sum_field="amount_cents")

    assert {group.key: (group.count, group.sum) for group in groups} == {
        "paid": (2, 3500),
        "pending": (1, 700),
    }
    assert sum(group.sum for group in groups) == 4200


@pytest.mark.asyncio
async def test_group_statistics_without_sum_leaves_sum_empty(container):
    await make_payment(container, "P1", 1000, status="paid")
    groups = await container.payments.group_statistics("status")
    assert groups[0].sum is None


@pytest.mark.asyncio
async def test_find_applies_filter_sort_and_window(container):
    for name in ["Delta", "Alpha", "Charlie", "Bravo"]:
        await make_registration(container, name, status="pending")
    await make_registration(container, "Echo", status="approved")

    found = await container.registrations.find(
        Eq("status", "pending"),
        [SortKey("team_name")],
        skip=1,
        limit=2,
    )

    assert [registration.team_name for registration in found] == ["Bravo", "Charlie"]


@pytest.mark.asyncio
async def test_find_with_text_search_is_case_insensitive(container):
    await make_registration(container, "Night Owls")
    await make_registration(container, "Early Birds", leader_name="Owen")
    await make_registration(container, "Larks")

    found = await container.registrations.find(
        all_of(text_search(["team_name", "leader_name"], "OW")),
        [SortKey("team_name")],
    )

    assert [registration.team_name for registration in found] == ["Early Birds", "Night Owls"]


@pytest.mark.asyncio
async def test_text_search_treats_wildcards_literally(container):
    await make_registration(container, "100% Club")
    await make_registration(container, "1000 Club")

    found = await container.registrations.find(text_search(["team_name"], "100%"))

    assert [registration.team_name for registration in found] == ["100% Club"]


@pytest.mark.asyncio
async def test_find_by_date_range_is_half_open(container):
    await make_payment(container, "P1", 100, created_at=datetime(2024, 5, 1, 0, 0))
    await make_payment(container, "P2", 100, created_at=datetime(2024, 5, 1, 23, 59))
    await make_payment(container, "P3", 100, created_at=datetime(2024, 5, 2, 0, 0))
    await make_payment(container, "P4", 100, created_at=datetime(2024, 4, 30, 23, 59))

    same_day = await container.payments.find_by_date_range(
        "created_at", datetime(2024, 5, 1), datetime(2024, 5, 2)
    )
    open_ended = await container.payments.find_by_date_range("created_at", datetime(2024, 5, 1))

    assert sorted(payment.order_number for payment in same_day) == ["P1", "P2"]
    assert sorted(payment.order_number for payment in open_ended) == ["P1", "P2", "P3"]


@pytest.mark.asyncio
async def test_unknown_filter_key_raises_before_querying(container):
    with pytest.raises(ValueError):
        await container.registrations.count(Eq("leader.name", "Lee"))
    with pytest.raises(ValueError):
        await container.registrations.update("missing", nickname="x")


@pytest.mark.asyncio
async def test_update_and_delete_report_missing_records(container):
    assert await container.registrations.update("missing", team_name="x") is None
    assert await container.registrations.delete("missing") is False

    registration = await make_registration(container, "Owls")
    updated = await container.registrations.update(registration.id, status="approved")
    assert updated.status == "approved"
    assert await container.registrations.delete(registration.id) is True
    assert await container.registrations.get_by_id(registration.id) is None


@pytest.mark.asyncio
async def test_payment_totals_only_count_settled_payments(container):
    await make_payment(container, "P1", 3000, status="paid", registration_id="r1")
    await make_payment(container, "P2", 2000, status="completed", registration_id="r1")
    await make_payment(container, "P3", 9000, status="refunded", registration_id="r1")
    await make_payment(container, "P4", 4000, status="paid", registration_id="r2")

    assert await container.payments.total_settled_for("r1") == 5000
    assert await container.payments.total_settled_for("nobody") == 0
    assert (await container.payments.get_by_order_number("P4")).registration_id == "r2"


@pytest.mark.asyncio
async def test_page_view_hits_accumulate_per_day(container):
    await container.page_views.record_hit("2024-05-01", "1.1.1.1")
    await container.page_views.record_hit("2024-05-01", "1.1.1.1")
    view = await container.page_views.record_hit("2024-05-01", "2.2.2.2")
    other = await container.page_views.record_hit("2024-05-02", None)

    assert view.count == 3
    assert view.unique_visitors == 2
    assert other.count == 1
    assert other.unique_visitors == 0
    assert (await container.page_views.find_one(Eq("date", "2024-05-01"))).unique_visitors == 2


@pytest.mark.asyncio
async def test_concurrent_hits_count_a_visitor_once(container):
    views = await asyncio.gather(*(container.page_views.record_hit("2024-05-03", "3.3.3.3") for _ in range(3)))

    assert max(view.count for view in views) == 3
    stored = await container.page_views.find_one(Eq("date", "2024-05-03"))
    assert stored.count == 3
    assert stored.unique_visitors == 1


@pytest.mark.asyncio
async def test_store_failures_surface_as_store_error(tmp_path):
    # no tables created
    settings = Settings(database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}"))
    container = build_container(settings)
    try:
        with pytest.raises(StoreError) as excinfo:
            await container.registrations.count(Gte("total_amount_cents", 0))
    finally:
        await container.dispose()

    assert excinfo.value.operation == "count"
    assert excinfo.value.entity == "registrations"
