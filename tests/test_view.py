from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import pytest
from yarl import URL

from fleetrecords.config import FleetConfig
from fleetrecords.coordinator import MutationKind, MutationOutcome
from fleetrecords.models import LocationContext, VehicleRecord, VehicleStatus
from fleetrecords.state.fixtures import FIXTURE_RECORDS
from fleetrecords.view import FleetView

_CONTEXT = LocationContext(location_id="test-location-uuid")


class _FakeRemote:
    def __init__(self, *, fail_fetch: bool = False, fail_update: bool = False) -> None:
        self.fail_fetch = fail_fetch
        self.fail_update = fail_update
        self.updates: list[tuple[str, dict[str, Any]]] = []

    async def fetch_records(self, location_id: str) -> list[VehicleRecord]:
        if self.fail_fetch:
            raise ConnectionError("backend unreachable")
        return list(FIXTURE_RECORDS)

    async def update_record(
        self, record_id: str, fields: Mapping[str, Any], *, location_id: str | None = None
    ) -> VehicleRecord:
        await asyncio.sleep(0)
        self.updates.append((record_id, dict(fields)))
        if self.fail_update:
            raise ConnectionError("write failed")
        return VehicleRecord(id=record_id)


def _config(**kwargs: Any) -> FleetConfig:
    return FleetConfig(
        base_url="https://project.supabase.co",
        api_key="anon-key",
        search_debounce_seconds=0.02,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_view_restores_state_from_url() -> None:
    async with FleetView(_FakeRemote(), context=_CONTEXT, url="/fleet?status=available&sort=current_mileage") as view:
        await view.load()
        page = view.page()

    assert [r.id for r in page.page_records] == ["6", "4", "1"]
    assert page.filtered_count == 3


@pytest.mark.asyncio
async def test_search_commits_after_quiet_period_and_updates_url() -> None:
    urls: list[URL] = []
    view = FleetView(_FakeRemote(), context=_CONTEXT, url="/fleet?page=2", config=_config(), on_navigate=urls.append)
    await view.load()

    view.type_search("l")
    view.type_search("la")
    view.type_search("lam")
    assert view.search.raw_value == "lam"
    assert view.state.search_query == ""

    await asyncio.sleep(0.08)

    assert view.state.search_query == "lam"
    assert view.state.current_page == 1
    assert [r.make for r in view.page().page_records] == ["Lamborghini"]
    assert urls == [URL("/fleet?search=lam")]
    view.close()


@pytest.mark.asyncio
async def test_page_is_memoized_until_state_or_records_change() -> None:
    view = FleetView(_FakeRemote(), context=_CONTEXT, config=_config(page_size=2))
    await view.load()

    first = view.page()
    assert view.page() is first
    assert first.total_pages == 3

    view.go_to_page(2)
    second = view.page()
    assert second is not first
    assert [r.id for r in second.page_records] == ["3", "4"]

    await view.toggle_wash("3")
    assert view.page() is not second
    assert view.page().page_records[0].wash_status is True
    view.close()


@pytest.mark.asyncio
async def test_failed_load_serves_fixtures_in_degraded_mode() -> None:
    view = FleetView(_FakeRemote(fail_fetch=True), context=_CONTEXT)
    await view.load()

    assert view.is_degraded
    assert view.stats().total == 6
    assert view.stats().available == 3
    view.close()


@pytest.mark.asyncio
async def test_mutation_failure_rolls_back_and_notifies() -> None:
    failures: list[tuple[str, MutationKind]] = []
    view = FleetView(
        _FakeRemote(fail_update=True),
        context=_CONTEXT,
        on_mutation_failure=lambda rid, kind, _exc: failures.append((rid, kind)),
    )
    await view.load()

    task = asyncio.create_task(view.set_status("1", VehicleStatus.MAINTENANCE))
    await asyncio.sleep(0)
    assert view.is_busy("1", MutationKind.STATUS)
    assert view.store.require("1").status is VehicleStatus.MAINTENANCE

    result = await task

    assert result.outcome is MutationOutcome.ROLLED_BACK
    assert view.store.require("1").status is VehicleStatus.AVAILABLE
    assert not view.is_busy("1")
    assert failures == [("1", MutationKind.STATUS)]
    view.close()


@pytest.mark.asyncio
async def test_close_drops_pending_search() -> None:
    view = FleetView(_FakeRemote(), context=_CONTEXT, config=_config())
    await view.load()

    view.type_search("fer")
    view.close()
    await asyncio.sleep(0.05)

    assert view.closed
    assert view.state.search_query == ""
