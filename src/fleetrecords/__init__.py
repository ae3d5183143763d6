"""fleetrecords - Async fleet-records engine for a rental operations console."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fleetrecords")
except PackageNotFoundError:
    __version__ = "0+local"
from fleetrecords.client import FleetClient, RecordsRemote
from fleetrecords.config import FleetConfig
from fleetrecords.coordinator import (
    MutationKind,
    MutationOutcome,
    MutationResult,
    OptimisticMutationCoordinator,
)
from fleetrecords.debounce import SearchDebouncer
from fleetrecords.engine import FleetQuery, compute_stats, derive_page
from fleetrecords.exceptions import (
    FleetApiError,
    FleetConfigError,
    FleetError,
    FleetPermissionError,
    FleetTableMissingError,
    FleetTransportError,
    RecordNotFoundError,
)
from fleetrecords.models import (
    FleetPage,
    FleetStats,
    LocationContext,
    SortDirection,
    VehicleRecord,
    VehicleStatus,
    ViewState,
)
from fleetrecords.state import RecordSource, RecordStore
from fleetrecords.view import FleetView
from fleetrecords.view_controller import ViewStateController

__all__ = [
    "__version__",
    "FleetApiError",
    "FleetClient",
    "FleetConfig",
    "FleetConfigError",
    "FleetError",
    "FleetPage",
    "FleetPermissionError",
    "FleetQuery",
    "FleetStats",
    "FleetTableMissingError",
    "FleetTransportError",
    "FleetView",
    "LocationContext",
    "MutationKind",
    "MutationOutcome",
    "MutationResult",
    "OptimisticMutationCoordinator",
    "RecordNotFoundError",
    "RecordSource",
    "RecordStore",
    "RecordsRemote",
    "SearchDebouncer",
    "SortDirection",
    "VehicleRecord",
    "VehicleStatus",
    "ViewState",
    "ViewStateController",
    "compute_stats",
    "derive_page",
]
