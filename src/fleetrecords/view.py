"""Fleet table view: store, view state, search, mutations and the derived page."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from yarl import URL

from fleetrecords._constants import PAGE_SIZE, SEARCH_DEBOUNCE_SECONDS
from fleetrecords.client import RecordsRemote
from fleetrecords.config import FleetConfig
from fleetrecords.coordinator import (
    FailureCallback,
    MutationKind,
    MutationResult,
    OptimisticMutationCoordinator,
)
from fleetrecords.debounce import SearchDebouncer
from fleetrecords.engine import FleetQuery
from fleetrecords.models._base import utcnow
from fleetrecords.models.context import LocationContext
from fleetrecords.models.page import FleetPage, FleetStats
from fleetrecords.models.vehicle import VehicleRecord, VehicleStatus
from fleetrecords.models.view_state import StatusFilter, ViewState
from fleetrecords.state.store import RecordStore
from fleetrecords.view_controller import NavigateCallback, ViewStateController

_logger = logging.getLogger(__name__)


class FleetView:
    """One open fleet table for one location.

    Usage::

        async with FleetClient(config) as client:
            async with FleetView(client, context=LocationContext(location_id=loc), url=url) as view:
                await view.load()
                view.type_search("lam")
                page = view.page()

    Leaving the context tears the view down: a pending search commit is
    dropped and mutations that settle afterwards do not touch the store.
    """

    def __init__(
        self,
        remote: RecordsRemote,
        *,
        context: LocationContext,
        url: str | URL = "",
        config: FleetConfig | None = None,
        on_navigate: NavigateCallback | None = None,
        on_mutation_failure: FailureCallback | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        page_size = config.page_size if config is not None else PAGE_SIZE
        debounce = config.search_debounce_seconds if config is not None else SEARCH_DEBOUNCE_SECONDS
        fixture_fallback = config.fixture_fallback if config is not None else True

        self._remote = remote
        self._context = context
        self.store = RecordStore(clock=clock, fixture_fallback=fixture_fallback)
        self.view_state = ViewStateController(url, on_navigate=on_navigate)
        self.search = SearchDebouncer(
            self.view_state.set_search_query,
            delay=debounce,
            initial=self.view_state.state.search_query,
        )
        self.mutations = OptimisticMutationCoordinator(self.store, remote, on_failure=on_mutation_failure)
        self._query = FleetQuery(page_size)
        self._closed = False

    async def __aenter__(self) -> FleetView:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.close()

    @property
    def context(self) -> LocationContext:
        return self._context

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_degraded(self) -> bool:
        return self.store.is_degraded

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    async def load(self) -> tuple[VehicleRecord, ...]:
        return await self.store.load(self._remote, self._context)

    def page(self) -> FleetPage:
        """The visible page for the current records and view state (memoized)."""
        return self._query.page(self.store.version, self.store.records, self.view_state.state)

    def stats(self) -> FleetStats:
        return self._query.stats(self.store.version, self.store.records)

    @property
    def state(self) -> ViewState:
        return self.view_state.state

    # ------------------------------------------------------------------
    # View state actions
    # ------------------------------------------------------------------

    def type_search(self, text: str) -> None:
        self.search.feed(text)

    def set_status_filter(self, status: StatusFilter | str) -> ViewState:
        return self.view_state.set_status_filter(status)

    def sort_by(self, key: str) -> ViewState:
        return self.view_state.sort_by(key)

    def go_to_page(self, page: int) -> ViewState:
        return self.view_state.set_page(page)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def is_busy(self, record_id: str, kind: MutationKind | None = None) -> bool:
        return self.mutations.is_in_flight(record_id, kind)

    async def toggle_wash(self, record_id: str) -> MutationResult:
        return await self.mutations.toggle_wash(record_id, context=self._context)

    async def set_status(self, record_id: str, status: VehicleStatus | str) -> MutationResult:
        return await self.mutations.set_status(record_id, status, context=self._context)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.search.close()
        self.mutations.close()
        self.store.close()
        _logger.debug("Fleet view for location=%s closed", self._context.location_id)
