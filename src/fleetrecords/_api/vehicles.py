"""Vehicle endpoints on the ``vehicles`` table."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from fleetrecords._api._common import eq
from fleetrecords._constants import VEHICLE_COLUMNS, VEHICLES_ENDPOINT
from fleetrecords._transport import Transport
from fleetrecords.exceptions import FleetApiError, RecordNotFoundError
from fleetrecords.models.vehicle import VehicleRecord

_logger = logging.getLogger(__name__)

# The server stamps updated_at itself on every write.
_SERVER_OWNED_FIELDS: frozenset[str] = frozenset({"id", "updated_at", "created_at"})


def _parse_rows(endpoint: str, decoded: Any) -> list[VehicleRecord]:
    if decoded is None:
        return []
    if not isinstance(decoded, list):
        raise FleetApiError(
            f"{endpoint} returned {type(decoded).__name__}, expected a list",
            code="invalid_payload",
            endpoint=endpoint,
        )
    records: list[VehicleRecord] = []
    for item in decoded:
        try:
            records.append(VehicleRecord.model_validate(item))
        except ValidationError:
            _logger.warning("Skipping malformed vehicle row from %s", endpoint, exc_info=True)
    return records


async def fetch_vehicle_records(transport: Transport, location_id: str) -> list[VehicleRecord]:
    """Fetch every vehicle of one location, most recently updated first."""
    params = {
        "select": ",".join(VEHICLE_COLUMNS),
        "location_id": eq(location_id),
        "order": "updated_at.desc",
    }
    decoded = await transport.request("GET", VEHICLES_ENDPOINT, params=params)
    return _parse_rows(VEHICLES_ENDPOINT, decoded)


def build_update_payload(fields: Mapping[str, Any]) -> dict[str, Any]:
    """JSON-encode a partial record for the wire, dropping server-owned columns."""
    unknown = set(fields) - set(VehicleRecord.model_fields)
    if unknown:
        raise ValueError(f"Unknown vehicle fields: {', '.join(sorted(unknown))}")
    payload: dict[str, Any] = {}
    for key, value in fields.items():
        if key in _SERVER_OWNED_FIELDS:
            continue
        if isinstance(value, datetime):
            value = value.isoformat()
        payload[key] = value
    return payload


async def update_vehicle_record(
    transport: Transport,
    record_id: str,
    fields: Mapping[str, Any],
    *,
    location_id: str | None = None,
) -> VehicleRecord:
    """Partially update one vehicle and return the server's merged row.

    Raises
    ------
    RecordNotFoundError
        When no row matched ``record_id`` (and ``location_id``, if given).
    """
    params = {"id": eq(record_id)}
    if location_id:
        params["location_id"] = eq(location_id)
    decoded = await transport.request(
        "PATCH",
        VEHICLES_ENDPOINT,
        params=params,
        json_body=build_update_payload(fields),
        headers={"prefer": "return=representation"},
    )
    rows = _parse_rows(VEHICLES_ENDPOINT, decoded)
    if not rows:
        raise RecordNotFoundError(
            f"No vehicle {record_id} to update",
            code="not_found",
            endpoint=VEHICLES_ENDPOINT,
        )
    return rows[0]
