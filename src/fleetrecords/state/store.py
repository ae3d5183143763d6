"""In-memory record store.

Writes replace the record collection wholesale (a new tuple per write),
so readers holding an older collection never observe a partial update.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from fleetrecords.exceptions import RecordNotFoundError
from fleetrecords.models._base import utcnow
from fleetrecords.models.context import LocationContext
from fleetrecords.models.vehicle import VehicleRecord
from fleetrecords.state.events import ChangeSource, StoreChange
from fleetrecords.state.fixtures import FIXTURE_RECORDS

if TYPE_CHECKING:
    from fleetrecords.client import RecordsRemote

_logger = logging.getLogger(__name__)

StoreListener = Callable[[StoreChange], None]


class RecordSource(StrEnum):
    EMPTY = "empty"
    REMOTE = "remote"
    FIXTURE = "fixture"


class RecordStore:
    """Collection of fleet records for one location.

    ``version`` increases on every write and, together with the view
    state, keys the memoized page computation.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = utcnow,
        fixtures: Iterable[VehicleRecord] = FIXTURE_RECORDS,
        fixture_fallback: bool = True,
    ) -> None:
        self._clock = clock
        self._fixtures = tuple(fixtures)
        self._fixture_fallback = fixture_fallback
        self._records: tuple[VehicleRecord, ...] = ()
        self._index: dict[str, int] = {}
        self._version = 0
        self._source = RecordSource.EMPTY
        self._load_error: BaseException | None = None
        self._load_generation = 0
        self._listeners: list[StoreListener] = []
        self._closed = False

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def records(self) -> tuple[VehicleRecord, ...]:
        return self._records

    @property
    def version(self) -> int:
        return self._version

    @property
    def source(self) -> RecordSource:
        return self._source

    @property
    def is_degraded(self) -> bool:
        """Whether the last load failed and the store holds fallback data."""
        return self._load_error is not None

    @property
    def load_error(self) -> BaseException | None:
        return self._load_error

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._index

    def get(self, record_id: str) -> VehicleRecord | None:
        pos = self._index.get(record_id)
        return None if pos is None else self._records[pos]

    def require(self, record_id: str) -> VehicleRecord:
        record = self.get(record_id)
        if record is None:
            raise RecordNotFoundError(f"No vehicle {record_id} in store", code="not_found")
        return record

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register *listener* for every write; returns the unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, change: StoreChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                _logger.debug("Record store listener failed", exc_info=True)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def load(self, remote: RecordsRemote, context: LocationContext) -> tuple[VehicleRecord, ...]:
        """Fetch the fleet of ``context.location_id`` and replace the collection.

        A failed fetch never propagates: the store switches to degraded mode,
        keeps the error in :attr:`load_error` and serves the fixture fleet
        (or nothing, with fixture fallback disabled).

        If another load started meanwhile, or the store was closed, the
        result is discarded.
        """
        self._load_generation += 1
        generation = self._load_generation

        try:
            fetched = await remote.fetch_records(context.location_id)
        except Exception as exc:
            if self._is_stale(generation):
                return self._records
            fallback = self._fixtures if self._fixture_fallback else ()
            _logger.warning(
                "Loading vehicles for location=%s failed; serving %d fixture records",
                context.location_id,
                len(fallback),
                exc_info=True,
            )
            self._replace_all(fallback, source=RecordSource.FIXTURE, error=exc)
            return self._records

        if self._is_stale(generation):
            return self._records
        _logger.info("Loaded %d vehicles for location=%s", len(fetched), context.location_id)
        self._replace_all(fetched, source=RecordSource.REMOTE, error=None)
        return self._records

    def _is_stale(self, generation: int) -> bool:
        if self._closed or generation != self._load_generation:
            _logger.debug("Discarding superseded load (generation=%d)", generation)
            return True
        return False

    def _replace_all(
        self,
        records: Iterable[VehicleRecord],
        *,
        source: RecordSource,
        error: BaseException | None,
    ) -> None:
        unique: list[VehicleRecord] = []
        index: dict[str, int] = {}
        for record in records:
            if record.id in index:
                _logger.warning("Dropping duplicate vehicle id=%s", record.id)
                continue
            index[record.id] = len(unique)
            unique.append(record)

        self._records = tuple(unique)
        self._index = index
        self._source = source
        self._load_error = error
        self._version += 1
        change_source = ChangeSource.FIXTURE if source is RecordSource.FIXTURE else ChangeSource.REMOTE
        self._notify(StoreChange(source=change_source, version=self._version))

    def apply(
        self,
        record_id: str,
        patch: Mapping[str, Any],
        *,
        source: ChangeSource = ChangeSource.OPTIMISTIC,
        stamp: bool = True,
    ) -> VehicleRecord:
        """Replace one record with an immutable merge of *patch* onto it.

        Returns the record as stored after the write. A patch that changes
        nothing leaves ``version`` untouched. After :meth:`close` the store
        is frozen and the current record is returned unchanged.

        Raises
        ------
        RecordNotFoundError
            When ``record_id`` is not in the store.
        """
        before = self.require(record_id)
        if self._closed:
            _logger.debug("Ignoring write to closed store for id=%s", record_id)
            return before

        after = before.with_changes(patch, now=self._clock(), stamp=stamp)
        if after is before:
            return before

        pos = self._index[record_id]
        records = list(self._records)
        records[pos] = after
        self._records = tuple(records)
        self._version += 1
        self._notify(
            StoreChange(
                source=source,
                version=self._version,
                record_id=record_id,
                before=before,
                after=after,
            )
        )
        return after

    def close(self) -> None:
        """Freeze the store; later loads and writes become no-ops."""
        self._closed = True
        self._listeners.clear()
