"""High-level async client for the fleet records backend."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from fleetrecords._api import vehicles as _vehicles_api
from fleetrecords._transport import RestTransport, TraceCallback
from fleetrecords.config import FleetConfig
from fleetrecords.exceptions import FleetError
from fleetrecords.models.vehicle import VehicleRecord

_logger = logging.getLogger(__name__)


class RecordsRemote(Protocol):
    """The remote side the record store and the mutation coordinator consume."""

    async def fetch_records(self, location_id: str) -> list[VehicleRecord]:
        ...

    async def update_record(
        self,
        record_id: str,
        fields: Mapping[str, Any],
        *,
        location_id: str | None = None,
    ) -> VehicleRecord:
        ...


class FleetClient:
    """Async client for the vehicles table.

    Usage::

        async with FleetClient(config) as client:
            records = await client.fetch_records("location-uuid")
    """

    def __init__(
        self,
        config: FleetConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        on_api_trace: TraceCallback | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: RestTransport | None = None
        self._on_api_trace = on_api_trace

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FleetClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.request_timeout),
            )
        self._transport = RestTransport(
            self._config,
            self._http_session,
            trace=self._on_api_trace,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    @property
    def config(self) -> FleetConfig:
        return self._config

    def _require_transport(self) -> RestTransport:
        if self._transport is None:
            raise FleetError("Client not initialized. Use 'async with FleetClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    async def fetch_records(self, location_id: str) -> list[VehicleRecord]:
        """Fetch all vehicles of a location."""
        transport = self._require_transport()
        records = await _vehicles_api.fetch_vehicle_records(transport, location_id)
        _logger.debug("Fetched %d vehicles for location=%s", len(records), location_id)
        return records

    async def update_record(
        self,
        record_id: str,
        fields: Mapping[str, Any],
        *,
        location_id: str | None = None,
    ) -> VehicleRecord:
        """Partially update one vehicle; the server recomputes ``updated_at``.

        ``location_id`` defaults to the configured location, which keeps the
        write scoped to the tenant that owns the row.
        """
        transport = self._require_transport()
        return await _vehicles_api.update_vehicle_record(
            transport,
            record_id,
            fields,
            location_id=location_id or self._config.location_id,
        )
