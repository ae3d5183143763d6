"""Fleet record models."""

from fleetrecords.models._base import FleetBaseModel, FleetTimestamp, parse_timestamp, utcnow
from fleetrecords.models.context import LocationContext
from fleetrecords.models.page import FleetPage, FleetStats
from fleetrecords.models.vehicle import VehicleRecord, VehicleStatus
from fleetrecords.models.view_state import (
    SORTABLE_FIELDS,
    STATUS_ALL,
    SortDirection,
    StatusFilter,
    ViewState,
)

__all__ = [
    "FleetBaseModel",
    "FleetPage",
    "FleetStats",
    "FleetTimestamp",
    "LocationContext",
    "SORTABLE_FIELDS",
    "STATUS_ALL",
    "SortDirection",
    "StatusFilter",
    "VehicleRecord",
    "VehicleStatus",
    "ViewState",
    "parse_timestamp",
    "utcnow",
]
