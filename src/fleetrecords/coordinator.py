"""Optimistic record mutations with rollback.

A mutation is applied to the record store before the remote write is
issued and reverted if the write fails. Per record and mutation kind at
most one write is outstanding; a second trigger while one is in flight
is ignored.

Wash toggle, per record::

    Idle/Clean --toggle--> InFlight(-> Dirty) --ok--> Idle/Dirty
                                              --fail--> Idle/Clean

and symmetrically from Dirty. Status changes follow the same pattern
with no restriction on which status may follow which.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from fleetrecords.client import RecordsRemote
from fleetrecords.models.context import LocationContext
from fleetrecords.models.vehicle import VehicleRecord, VehicleStatus
from fleetrecords.state.events import ChangeSource
from fleetrecords.state.store import RecordStore

_logger = logging.getLogger(__name__)


class MutationKind(StrEnum):
    WASH = "wash"
    STATUS = "status"


class MutationOutcome(StrEnum):
    CONFIRMED = "confirmed"
    """Remote write succeeded; the optimistic value stays."""
    ROLLED_BACK = "rolled_back"
    """Remote write failed; the record was restored."""
    SKIPPED = "skipped"
    """A mutation of the same kind was already in flight; nothing happened."""
    UNCHANGED = "unchanged"
    """The mutation did not change the record; no write was issued."""
    DISCARDED = "discarded"
    """The coordinator was closed before the write settled; the store was left alone."""


class MutationResult(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    record_id: str
    kind: MutationKind
    outcome: MutationOutcome
    record: VehicleRecord | None = None
    """The record as stored once the mutation settled."""
    error: BaseException | None = None


MutationFn = Callable[[VehicleRecord], Mapping[str, Any]]
FailureCallback = Callable[[str, MutationKind, BaseException], None]


class OptimisticMutationCoordinator:
    """Apply, confirm or roll back record mutations.

    Parameters
    ----------
    store
        The record store to write optimistic values into.
    remote
        Receives the partial update for every mutation.
    on_failure
        Called after a rollback with ``(record_id, kind, error)``; the hook
        for a user-visible notification.
    """

    def __init__(
        self,
        store: RecordStore,
        remote: RecordsRemote,
        *,
        on_failure: FailureCallback | None = None,
    ) -> None:
        self._store = store
        self._remote = remote
        self._on_failure = on_failure
        self._in_flight: dict[str, set[MutationKind]] = {}
        self._closed = False

    # ------------------------------------------------------------------
    # In-flight tracking
    # ------------------------------------------------------------------

    def is_in_flight(self, record_id: str, kind: MutationKind | None = None) -> bool:
        """Whether *record_id* has an unsettled mutation (of *kind*, if given)."""
        kinds = self._in_flight.get(record_id)
        if not kinds:
            return False
        return kind is None or kind in kinds

    def in_flight(self) -> dict[str, frozenset[MutationKind]]:
        return {record_id: frozenset(kinds) for record_id, kinds in self._in_flight.items() if kinds}

    def _mark(self, record_id: str, kind: MutationKind) -> None:
        self._in_flight.setdefault(record_id, set()).add(kind)

    def _clear(self, record_id: str, kind: MutationKind) -> None:
        kinds = self._in_flight.get(record_id)
        if kinds is None:
            return
        kinds.discard(kind)
        if not kinds:
            del self._in_flight[record_id]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def mutate(
        self,
        record_id: str,
        kind: MutationKind,
        mutation_fn: MutationFn,
        *,
        context: LocationContext,
    ) -> MutationResult:
        """Optimistically apply ``mutation_fn(record)`` and reconcile with the remote.

        ``mutation_fn`` receives the current record and returns the patch to
        merge. The patch is visible in the store before this coroutine first
        suspends. Remote failures are logged and rolled back, never raised;
        if the record was dropped by a reload meanwhile, the result carries
        ``record=None``. Cancelling the awaiting task also rolls back and
        releases the in-flight marker before the cancellation propagates.

        Raises
        ------
        RecordNotFoundError
            When ``record_id`` is not in the store.
        asyncio.CancelledError
            When the awaiting task is cancelled.
        """
        if self._closed:
            return MutationResult(record_id=record_id, kind=kind, outcome=MutationOutcome.DISCARDED)

        snapshot = self._store.require(record_id)
        if self.is_in_flight(record_id, kind):
            _logger.debug("Ignoring %s mutation for id=%s: already in flight", kind, record_id)
            return MutationResult(record_id=record_id, kind=kind, outcome=MutationOutcome.SKIPPED, record=snapshot)

        patch = dict(mutation_fn(snapshot))
        applied = self._store.apply(record_id, patch, source=ChangeSource.OPTIMISTIC)
        if applied is snapshot:
            return MutationResult(record_id=record_id, kind=kind, outcome=MutationOutcome.UNCHANGED, record=snapshot)

        before = snapshot.model_dump()
        after = applied.model_dump()
        changed = {name: after[name] for name in after if after[name] != before[name]}
        self._mark(record_id, kind)

        try:
            await self._remote.update_record(record_id, changed, location_id=context.location_id)
        except asyncio.CancelledError:
            if not self._closed:
                _logger.debug("%s update for vehicle %s cancelled; rolling back", kind, record_id)
                self._rollback(record_id, kind, before, changed)
            raise
        except Exception as exc:
            if self._closed:
                _logger.debug("Dropping rollback of %s mutation for id=%s after close", kind, record_id)
                return MutationResult(record_id=record_id, kind=kind, outcome=MutationOutcome.DISCARDED, error=exc)
            restored = self._rollback(record_id, kind, before, changed)
            _logger.warning("%s update for vehicle %s failed; rolled back", kind, record_id, exc_info=True)
            self._report_failure(record_id, kind, exc)
            return MutationResult(
                record_id=record_id,
                kind=kind,
                outcome=MutationOutcome.ROLLED_BACK,
                record=restored,
                error=exc,
            )
        finally:
            self._clear(record_id, kind)

        if self._closed:
            return MutationResult(record_id=record_id, kind=kind, outcome=MutationOutcome.DISCARDED)
        _logger.debug("%s update for vehicle %s confirmed", kind, record_id)
        return MutationResult(
            record_id=record_id,
            kind=kind,
            outcome=MutationOutcome.CONFIRMED,
            record=self._store.get(record_id),
        )

    def _rollback(
        self,
        record_id: str,
        kind: MutationKind,
        before: Mapping[str, Any],
        changed: Mapping[str, Any],
    ) -> VehicleRecord | None:
        """Restore the fields in *changed* that still hold the optimistic value.

        A field rewritten since (``updated_at`` restamped by an overlapping
        mutation of another kind) is left alone. Returns ``None`` if the
        record left the store.
        """
        current = self._store.get(record_id)
        if current is None:
            _logger.debug("Vehicle %s left the store before its %s update settled", record_id, kind)
            return None
        still_ours = current.model_dump()
        restore = {name: before[name] for name, value in changed.items() if still_ours[name] == value}
        return self._store.apply(record_id, restore, source=ChangeSource.ROLLBACK, stamp=False)

    def _report_failure(self, record_id: str, kind: MutationKind, exc: BaseException) -> None:
        if self._on_failure is None:
            return
        try:
            self._on_failure(record_id, kind, exc)
        except Exception:
            _logger.debug("on_failure callback failed", exc_info=True)

    async def toggle_wash(self, record_id: str, *, context: LocationContext) -> MutationResult:
        """Flip clean/dirty; the wash timestamp follows."""
        return await self.mutate(
            record_id,
            MutationKind.WASH,
            lambda record: {"wash_status": not record.wash_status},
            context=context,
        )

    async def set_status(
        self,
        record_id: str,
        status: VehicleStatus | str,
        *,
        context: LocationContext,
    ) -> MutationResult:
        """Move a vehicle to any status.

        Raises
        ------
        ValueError
            When *status* is not one of the four vehicle statuses.
        """
        target = VehicleStatus(status)
        return await self.mutate(
            record_id,
            MutationKind.STATUS,
            lambda record: {"status": target},
            context=context,
        )

    def close(self) -> None:
        """Stop reconciling: writes still in flight settle without touching the store."""
        self._closed = True
