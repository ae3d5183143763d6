"""Trailing debounce between search keystrokes and the committed search term."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from fleetrecords._constants import SEARCH_DEBOUNCE_SECONDS

_logger = logging.getLogger(__name__)


class SearchDebouncer:
    """Echo raw input immediately; commit it after a quiet period.

    Every :meth:`feed` restarts the timer, so only the last value typed
    before ``delay`` seconds of silence reaches ``commit``. Timers run on
    the event loop that is current when input arrives.

    After :meth:`close` the pending commit is dropped and further input
    is ignored.
    """

    def __init__(
        self,
        commit: Callable[[str], object],
        *,
        delay: float = SEARCH_DEBOUNCE_SECONDS,
        initial: str = "",
    ) -> None:
        if delay < 0:
            raise ValueError(f"delay must not be negative, got {delay}")
        self._commit = commit
        self._delay = delay
        self._raw = initial
        self._handle: asyncio.TimerHandle | None = None
        self._closed = False

    @property
    def raw_value(self) -> str:
        """The text currently shown in the input control."""
        return self._raw

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def feed(self, text: str) -> None:
        """Accept a keystroke's worth of input and (re)start the quiet-period timer."""
        if self._closed:
            return
        self._raw = text
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire)

    def flush(self) -> bool:
        """Commit the pending value now. Returns ``False`` if nothing was pending."""
        if self._closed or self._handle is None:
            return False
        self._cancel_timer()
        self._deliver()
        return True

    def cancel(self) -> None:
        """Drop the pending commit, keeping the raw value."""
        self._cancel_timer()

    def close(self) -> None:
        self._closed = True
        self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if self._closed:
            return
        self._deliver()

    def _deliver(self) -> None:
        _logger.debug("Committing search %r", self._raw)
        self._commit(self._raw)
