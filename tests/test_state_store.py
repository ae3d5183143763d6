from __future__ import annotations

import asyncio
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import pytest

from fleetrecords.exceptions import FleetTransportError, RecordNotFoundError
from fleetrecords.models import LocationContext, VehicleRecord
from fleetrecords.state.events import ChangeSource, StoreChange
from fleetrecords.state.fixtures import FIXTURE_RECORDS
from fleetrecords.state.store import RecordSource, RecordStore

_CONTEXT = LocationContext(location_id="loc-1")


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def _rows() -> list[VehicleRecord]:
    return [
        VehicleRecord(id="a", make="Toyota", model="Camry", status="available", location_id="loc-1"),
        VehicleRecord(id="b", make="Honda", model="Accord", status="rented", location_id="loc-1"),
    ]


class _FakeRemote:
    def __init__(self, records: list[VehicleRecord] | None = None, error: Exception | None = None) -> None:
        self.records = records or []
        self.error = error
        self.fetched: list[str] = []

    async def fetch_records(self, location_id: str) -> list[VehicleRecord]:
        self.fetched.append(location_id)
        if self.error is not None:
            raise self.error
        return list(self.records)

    async def update_record(
        self, record_id: str, fields: Mapping[str, Any], *, location_id: str | None = None
    ) -> VehicleRecord:  # pragma: no cover
        raise AssertionError("not used")


@pytest.mark.asyncio
async def test_load_from_remote() -> None:
    store = RecordStore(clock=_dt)
    remote = _FakeRemote(_rows())

    records = await store.load(remote, _CONTEXT)

    assert remote.fetched == ["loc-1"]
    assert [r.id for r in records] == ["a", "b"]
    assert store.source is RecordSource.REMOTE
    assert not store.is_degraded
    assert store.version == 1


@pytest.mark.asyncio
async def test_load_failure_falls_back_to_fixtures(caplog: pytest.LogCaptureFixture) -> None:
    store = RecordStore(clock=_dt)
    error = FleetTransportError("boom", endpoint="/rest/v1/vehicles")

    with caplog.at_level("WARNING", logger="fleetrecords.state.store"):
        records = await store.load(_FakeRemote(error=error), _CONTEXT)

    assert records == FIXTURE_RECORDS
    assert store.is_degraded
    assert store.load_error is error
    assert store.source is RecordSource.FIXTURE
    assert "serving 6 fixture records" in caplog.text


@pytest.mark.asyncio
async def test_load_failure_without_fixture_fallback_is_empty_but_degraded() -> None:
    store = RecordStore(fixture_fallback=False)
    await store.load(_FakeRemote(error=RuntimeError("offline")), _CONTEXT)
    assert store.records == ()
    assert store.is_degraded


@pytest.mark.asyncio
async def test_successful_reload_clears_degraded_mode() -> None:
    store = RecordStore()
    await store.load(_FakeRemote(error=RuntimeError("offline")), _CONTEXT)
    await store.load(_FakeRemote(_rows()), _CONTEXT)
    assert not store.is_degraded
    assert len(store) == 2


@pytest.mark.asyncio
async def test_duplicate_ids_keep_first() -> None:
    rows = [*_rows(), VehicleRecord(id="a", make="Duplicate")]
    store = RecordStore()
    await store.load(_FakeRemote(rows), _CONTEXT)
    assert len(store) == 2
    assert store.require("a").make == "Toyota"


@pytest.mark.asyncio
async def test_superseded_load_is_discarded() -> None:
    release = asyncio.Event()

    class _SlowRemote(_FakeRemote):
        async def fetch_records(self, location_id: str) -> list[VehicleRecord]:
            await release.wait()
            return [VehicleRecord(id="stale")]

    store = RecordStore()
    slow = asyncio.create_task(store.load(_SlowRemote(), _CONTEXT))
    await asyncio.sleep(0)
    await store.load(_FakeRemote(_rows()), _CONTEXT)
    release.set()
    await slow

    assert [r.id for r in store.records] == ["a", "b"]


@pytest.mark.asyncio
async def test_load_after_close_is_discarded() -> None:
    release = asyncio.Event()

    class _SlowRemote(_FakeRemote):
        async def fetch_records(self, location_id: str) -> list[VehicleRecord]:
            await release.wait()
            return _rows()

    store = RecordStore()
    task = asyncio.create_task(store.load(_SlowRemote(), _CONTEXT))
    await asyncio.sleep(0)
    store.close()
    release.set()
    await task

    assert store.records == ()
    assert store.version == 0


@pytest.mark.asyncio
async def test_apply_replaces_one_record_immutably() -> None:
    store = RecordStore(clock=_dt)
    await store.load(_FakeRemote(_rows()), _CONTEXT)
    old_records = store.records
    old_b = store.require("b")

    after = store.apply("a", {"wash_status": True})

    assert after.wash_status is True
    assert after.wash_last_updated == _dt()
    assert store.records is not old_records
    assert old_records[0].wash_status is False
    assert store.require("b") is old_b
    assert store.version == 2


@pytest.mark.asyncio
async def test_noop_apply_keeps_version() -> None:
    store = RecordStore()
    await store.load(_FakeRemote(_rows()), _CONTEXT)
    store.apply("a", {"make": "Toyota"})
    assert store.version == 1


def test_apply_unknown_record_raises() -> None:
    store = RecordStore()
    with pytest.raises(RecordNotFoundError):
        store.apply("missing", {"wash_status": True})


@pytest.mark.asyncio
async def test_listeners_receive_changes_and_can_unsubscribe() -> None:
    store = RecordStore(clock=_dt)
    changes: list[StoreChange] = []
    unsubscribe = store.subscribe(changes.append)

    await store.load(_FakeRemote(_rows()), _CONTEXT)
    store.apply("b", {"status": "maintenance"})
    unsubscribe()
    store.apply("b", {"status": "available"})

    assert [c.source for c in changes] == [ChangeSource.REMOTE, ChangeSource.OPTIMISTIC]
    assert changes[1].record_id == "b"
    assert changes[1].before is not None and changes[1].before.status == "rented"
    assert changes[1].after is not None and changes[1].after.status == "maintenance"


@pytest.mark.asyncio
async def test_failing_listener_does_not_break_writes() -> None:
    store = RecordStore()

    def _broken(_change: StoreChange) -> None:
        raise RuntimeError("listener bug")

    store.subscribe(_broken)
    await store.load(_FakeRemote(_rows()), _CONTEXT)
    assert len(store) == 2


@pytest.mark.asyncio
async def test_closed_store_ignores_writes() -> None:
    store = RecordStore()
    await store.load(_FakeRemote(_rows()), _CONTEXT)
    store.close()

    record = store.apply("a", {"wash_status": True})

    assert record.wash_status is False
    assert store.version == 1
