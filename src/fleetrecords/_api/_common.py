"""Shared helpers for records-backend endpoint modules.

It is internal to fleetrecords and may change at any time.
"""

from __future__ import annotations

from typing import Any, NoReturn

from fleetrecords._constants import PERMISSION_DENIED_CODES, TABLE_MISSING_CODES
from fleetrecords.exceptions import (
    FleetApiError,
    FleetPermissionError,
    FleetTableMissingError,
    FleetTransportError,
)


def eq(value: Any) -> str:
    """PostgREST equality filter operand."""
    return f"eq.{value}"


def raise_for_error(*, endpoint: str, status: int, body: Any) -> NoReturn:
    """Map an error response onto the exception hierarchy.

    PostgREST error bodies look like ``{"code", "message", "details", "hint"}``;
    anything else is reported as a transport failure.
    """
    if not isinstance(body, dict):
        raise FleetTransportError(
            f"HTTP {status} from {endpoint}",
            status_code=status,
            endpoint=endpoint,
        )

    code = str(body.get("code") or "")
    message = str(body.get("message") or body.get("msg") or "")
    text = f"{endpoint} failed: status={status} code={code} message={message}"

    if code in TABLE_MISSING_CODES:
        raise FleetTableMissingError(text, code=code, endpoint=endpoint)
    if status in (401, 403) or code in PERMISSION_DENIED_CODES:
        raise FleetPermissionError(text, code=code or str(status), endpoint=endpoint)
    raise FleetApiError(text, code=code or str(status), endpoint=endpoint)
