"""Filter, sort and paginate fleet records.

All functions here are pure. :class:`FleetQuery` adds the memoization
layer: a page is recomputed only when the store version or the view
state changes.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Any

from fleetrecords._constants import PAGE_SIZE
from fleetrecords.models.page import FleetPage, FleetStats
from fleetrecords.models.vehicle import VehicleRecord, VehicleStatus
from fleetrecords.models.view_state import STATUS_ALL, SortDirection, StatusFilter, ViewState

_logger = logging.getLogger(__name__)

_SEARCH_FIELDS: tuple[str, ...] = ("make", "model", "license_plate", "id", "vehicle_id")


def matches_status(record: VehicleRecord, status_filter: StatusFilter) -> bool:
    return status_filter == STATUS_ALL or record.status == status_filter


def matches_search(record: VehicleRecord, search: str) -> bool:
    """Case-insensitive substring match on make, model, plate or id."""
    needle = search.strip().lower()
    if not needle:
        return True
    for field_name in _SEARCH_FIELDS:
        value = getattr(record, field_name)
        if value and needle in str(value).lower():
            return True
    return False


def filter_records(
    records: Sequence[VehicleRecord],
    status_filter: StatusFilter,
    search: str,
) -> list[VehicleRecord]:
    return [r for r in records if matches_status(r, status_filter) and matches_search(r, search)]


def _sort_value(record: VehicleRecord, key: str) -> tuple[bool, Any]:
    # (False, None) sorts before every present value
    value = getattr(record, key, None)
    return (value is not None, value)


def sort_records(
    records: Sequence[VehicleRecord],
    sort_key: str | None,
    direction: SortDirection = SortDirection.ASC,
) -> list[VehicleRecord]:
    """Stable sort by one field, missing values lowest.

    Python's sort keeps the input order of equal keys in both directions.
    """
    if sort_key is None:
        return list(records)
    return sorted(
        records,
        key=lambda record: _sort_value(record, sort_key),
        reverse=direction is SortDirection.DESC,
    )


def paginate(
    records: Sequence[VehicleRecord],
    page: int,
    page_size: int = PAGE_SIZE,
) -> FleetPage:
    """Slice one 1-based page; a page past the end is empty, not an error."""
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")
    page = max(page, 1)
    start = (page - 1) * page_size
    return FleetPage(
        filtered_count=len(records),
        page_records=tuple(records[start : start + page_size]),
        page=page,
        page_size=page_size,
        total_pages=math.ceil(len(records) / page_size),
        start_index=start,
    )


def derive_page(
    records: Sequence[VehicleRecord],
    view_state: ViewState,
    *,
    page_size: int = PAGE_SIZE,
) -> FleetPage:
    """Run the whole pipeline for one view state."""
    filtered = filter_records(records, view_state.status_filter, view_state.search_query)
    ordered = sort_records(filtered, view_state.sort_key, view_state.sort_direction)
    return paginate(ordered, view_state.current_page, page_size)


def compute_stats(records: Sequence[VehicleRecord]) -> FleetStats:
    """Per-status counts and the share of rentable vehicles currently rented."""
    counts = {status: 0 for status in VehicleStatus}
    for record in records:
        counts[record.status] += 1
    available = counts[VehicleStatus.AVAILABLE]
    rented = counts[VehicleStatus.RENTED]
    rentable = available + rented
    return FleetStats(
        total=len(records),
        available=available,
        rented=rented,
        maintenance=counts[VehicleStatus.MAINTENANCE],
        out_of_service=counts[VehicleStatus.OUT_OF_SERVICE],
        utilization_rate=(rented / rentable) * 100 if rentable else 0.0,
    )


class FleetQuery:
    """Memoized :func:`derive_page` and :func:`compute_stats`.

    Keeps the most recent result per input key, which is what a table
    re-rendering for unrelated reasons needs.
    """

    def __init__(self, page_size: int = PAGE_SIZE) -> None:
        self._page_size = page_size
        self._page_key: tuple[int, ViewState] | None = None
        self._page: FleetPage | None = None
        self._stats_version: int | None = None
        self._stats: FleetStats | None = None
        self.hits = 0
        self.misses = 0

    @property
    def page_size(self) -> int:
        return self._page_size

    def page(self, version: int, records: Sequence[VehicleRecord], view_state: ViewState) -> FleetPage:
        key = (version, view_state)
        if self._page is not None and self._page_key == key:
            self.hits += 1
            return self._page
        self.misses += 1
        _logger.debug("Recomputing fleet page for version=%d %s", version, view_state)
        self._page = derive_page(records, view_state, page_size=self._page_size)
        self._page_key = key
        return self._page

    def stats(self, version: int, records: Sequence[VehicleRecord]) -> FleetStats:
        if self._stats is None or self._stats_version != version:
            self._stats = compute_stats(records)
            self._stats_version = version
        return self._stats

    def invalidate(self) -> None:
        self._page_key = None
        self._page = None
        self._stats_version = None
        self._stats = None
