"""Custom exception hierarchy for fleetrecords."""

from __future__ import annotations


class FleetError(Exception):
    """Base exception for all fleetrecords errors."""


class FleetConfigError(FleetError):
    """Invalid or missing configuration."""


class FleetTransportError(FleetError):
    """HTTP-level failure (network, timeout, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class FleetApiError(FleetError):
    """Remote returned an error body (application-level error)."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class FleetTableMissingError(FleetApiError):
    """The vehicles relation does not exist (Postgres code ``42P01``).

    Seen on fresh projects before migrations ran. The record store treats
    it like any other load failure and falls back to fixtures.
    """


class FleetPermissionError(FleetApiError):
    """Request rejected by the remote (HTTP 401/403 or row-level security)."""


class RecordNotFoundError(FleetApiError):
    """No record with the requested id exists (locally or remotely)."""
