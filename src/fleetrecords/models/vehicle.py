"""Vehicle record model."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator

from fleetrecords.models._base import FleetBaseModel, FleetTimestamp


class VehicleStatus(StrEnum):
    """Operational status of a fleet vehicle."""

    AVAILABLE = "available"
    RENTED = "rented"
    MAINTENANCE = "maintenance"
    OUT_OF_SERVICE = "out_of_service"


# field -> the timestamp that follows it
_TRACKED_TIMESTAMPS: dict[str, str] = {
    "wash_status": "wash_last_updated",
    "current_mileage": "last_mileage_update",
}

_IMMUTABLE_FIELDS: frozenset[str] = frozenset({"id"})


class VehicleRecord(FleetBaseModel):
    """A vehicle tracked by the fleet console.

    Fields mirror the remote ``vehicles`` table.
    """

    id: str
    """Primary key, unique within a record store."""
    vehicle_id: str = ""
    """Human-readable fleet code (e.g. ``"LAM-001"``)."""
    make: str = ""
    model: str = ""
    year: int | None = None
    license_plate: str = ""
    status: VehicleStatus = VehicleStatus.AVAILABLE
    wash_status: bool = False
    """``True`` when the vehicle is clean."""
    wash_last_updated: FleetTimestamp = None
    current_mileage: int = Field(default=0, ge=0)
    last_mileage_update: FleetTimestamp = None
    location_id: str | None = None
    created_at: FleetTimestamp = None
    updated_at: FleetTimestamp = None
    photo_url: str | None = None

    @field_validator("id", "vehicle_id", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("current_mileage", mode="before")
    @classmethod
    def _coerce_mileage(cls, value: Any) -> Any:
        # numeric columns can arrive as "12450.0"
        if isinstance(value, str):
            try:
                return int(float(value))
            except (ValueError, OverflowError) as exc:
                raise ValueError(f"invalid mileage: {value!r}") from exc
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    @property
    def is_clean(self) -> bool:
        return self.wash_status

    def with_changes(
        self,
        patch: Mapping[str, Any],
        *,
        now: datetime,
        stamp: bool = True,
    ) -> VehicleRecord:
        """Return a validated copy with *patch* merged in.

        With ``stamp`` enabled the per-field timestamps move only when their
        field actually changes, and ``updated_at`` moves on any change.
        Explicit timestamps in *patch* always win. Returns ``self`` when the
        patch changes nothing.

        Raises
        ------
        ValueError
            For unknown fields or an attempt to change ``id``.
        pydantic.ValidationError
            When the merged record is invalid (bad status, negative mileage).
        """
        unknown = set(patch) - set(type(self).model_fields)
        if unknown:
            raise ValueError(f"Unknown vehicle fields: {', '.join(sorted(unknown))}")
        current = self.model_dump()
        for field_name in _IMMUTABLE_FIELDS & set(patch):
            if patch[field_name] != current[field_name]:
                raise ValueError(f"{field_name} cannot be changed")

        candidate = type(self).model_validate({**current, **patch})
        merged = candidate.model_dump()
        changed = {name for name, value in merged.items() if value != current[name]}
        if not changed:
            return self
        if not stamp:
            return candidate

        stamps: dict[str, Any] = {}
        for field_name, ts_field in _TRACKED_TIMESTAMPS.items():
            if field_name in changed and ts_field not in patch:
                stamps[ts_field] = now
        if "updated_at" not in patch:
            stamps["updated_at"] = now
        if not stamps:
            return candidate
        return type(self).model_validate({**merged, **stamps})
