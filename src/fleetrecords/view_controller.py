"""View state controller with URL query synchronization.

Query parameters:

======== ============================ ======================
param    values                       default (absent/invalid)
======== ============================ ======================
status   one of :class:`VehicleStatus` ``all``
search   any string                   ``""``
page     positive integer             ``1``
sort     a sortable record field      none
dir      ``asc`` / ``desc``           ``asc``
======== ============================ ======================

Only non-default values are written. Parameters the controller does not
own are left untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from yarl import URL

from fleetrecords.models.vehicle import VehicleStatus
from fleetrecords.models.view_state import (
    SORTABLE_FIELDS,
    STATUS_ALL,
    SortDirection,
    StatusFilter,
    ViewState,
)

_logger = logging.getLogger(__name__)

PARAM_STATUS = "status"
PARAM_SEARCH = "search"
PARAM_PAGE = "page"
PARAM_SORT = "sort"
PARAM_DIRECTION = "dir"

_VIEW_PARAMS: frozenset[str] = frozenset({PARAM_STATUS, PARAM_SEARCH, PARAM_PAGE, PARAM_SORT, PARAM_DIRECTION})

NavigateCallback = Callable[[URL], None]
ChangeCallback = Callable[[ViewState], None]


def _parse_status(value: str | None) -> StatusFilter:
    if value is None:
        return STATUS_ALL
    try:
        return VehicleStatus(value)
    except ValueError:
        return STATUS_ALL


def _parse_page(value: Any) -> int:
    if value is None:
        return 1
    try:
        page = int(str(value).strip())
    except ValueError:
        return 1
    return page if page >= 1 else 1


def _parse_sort(value: str | None) -> str | None:
    return value if value in SORTABLE_FIELDS else None


def _parse_direction(value: str | None) -> SortDirection:
    try:
        return SortDirection((value or "").lower())
    except ValueError:
        return SortDirection.ASC


def parse_view_state(query: Mapping[str, str]) -> ViewState:
    """Build a view state from query parameters; never raises.

    Each unrecognized or malformed value falls back to its default on its
    own, so one bad parameter does not discard the others.
    """
    return ViewState(
        search_query=query.get(PARAM_SEARCH) or "",
        status_filter=_parse_status(query.get(PARAM_STATUS)),
        sort_key=_parse_sort(query.get(PARAM_SORT)),
        sort_direction=_parse_direction(query.get(PARAM_DIRECTION)),
        current_page=_parse_page(query.get(PARAM_PAGE)),
    )


def view_state_to_params(state: ViewState) -> dict[str, str]:
    """Serialize only the non-default fields of *state*."""
    params: dict[str, str] = {}
    if state.status_filter != STATUS_ALL:
        params[PARAM_STATUS] = str(state.status_filter)
    if state.search_query:
        params[PARAM_SEARCH] = state.search_query
    if state.current_page != 1:
        params[PARAM_PAGE] = str(state.current_page)
    if state.sort_key is not None:
        params[PARAM_SORT] = state.sort_key
    if state.sort_direction is not SortDirection.ASC:
        params[PARAM_DIRECTION] = state.sort_direction.value
    return params


class ViewStateController:
    """Owns the current :class:`ViewState` and mirrors it into a URL.

    Parameters
    ----------
    url
        The current location; its query seeds the initial state.
    on_navigate
        Called with the rewritten URL after every effective state change
        (a router's ``replace``/``push``).
    on_change
        Called with the new state after every effective state change.
    """

    def __init__(
        self,
        url: str | URL = "",
        *,
        on_navigate: NavigateCallback | None = None,
        on_change: ChangeCallback | None = None,
    ) -> None:
        self._url = url if isinstance(url, URL) else URL(url)
        self._state = parse_view_state(self._url.query)
        self._on_navigate = on_navigate
        self._on_change = on_change

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def url(self) -> URL:
        return self._url

    def _commit(self, **changes: Any) -> ViewState:
        new_state = self._state.model_copy(update=changes)
        if new_state == self._state:
            return self._state
        self._state = new_state

        query = {k: v for k, v in self._url.query.items() if k not in _VIEW_PARAMS}
        query.update(view_state_to_params(new_state))
        self._url = self._url.with_query(query)

        if self._on_navigate is not None:
            self._on_navigate(self._url)
        if self._on_change is not None:
            self._on_change(new_state)
        return new_state

    def set_status_filter(self, status: StatusFilter | str) -> ViewState:
        """Filter by status (or ``"all"``); resets to page 1 when it changes."""
        parsed = _parse_status(None if status == STATUS_ALL else str(status))
        if parsed == self._state.status_filter:
            return self._state
        return self._commit(status_filter=parsed, current_page=1)

    def set_search_query(self, query: str) -> ViewState:
        """Commit a search term; resets to page 1 when it changes."""
        if query == self._state.search_query:
            return self._state
        return self._commit(search_query=query, current_page=1)

    def sort_by(self, key: str) -> ViewState:
        """Sort by *key*; selecting the current key again flips the direction.

        Raises
        ------
        ValueError
            When *key* is not a sortable record field.
        """
        if key not in SORTABLE_FIELDS:
            raise ValueError(f"Unknown sort key: {key!r}")
        if self._state.sort_key == key:
            return self._commit(sort_direction=self._state.sort_direction.flipped())
        return self._commit(sort_key=key, sort_direction=SortDirection.ASC)

    def clear_sort(self) -> ViewState:
        return self._commit(sort_key=None, sort_direction=SortDirection.ASC)

    def set_page(self, page: int | str) -> ViewState:
        """Go to a 1-based page; anything that is not a positive integer means page 1."""
        return self._commit(current_page=_parse_page(page))

    def sync_from_url(self, url: str | URL) -> ViewState:
        """Adopt a URL changed from outside (back/forward navigation).

        Does not call ``on_navigate``; ``on_change`` fires if the state moved.
        """
        self._url = url if isinstance(url, URL) else URL(url)
        new_state = parse_view_state(self._url.query)
        if new_state == self._state:
            return self._state
        _logger.debug("View state restored from URL: %s", new_state)
        self._state = new_state
        if self._on_change is not None:
            self._on_change(new_state)
        return new_state
