"""Internal constants shared across the library."""

USER_AGENT = "fleetrecords/1.0"
APPLICATION_NAME = "RENTAGAIN"

#: Rows shown per table page.
PAGE_SIZE = 10

#: Quiet period before a typed search term is committed.
SEARCH_DEBOUNCE_SECONDS = 0.3

VEHICLES_ENDPOINT = "/rest/v1/vehicles"

VEHICLE_COLUMNS: tuple[str, ...] = (
    "id",
    "vehicle_id",
    "make",
    "model",
    "year",
    "status",
    "license_plate",
    "wash_status",
    "wash_last_updated",
    "current_mileage",
    "last_mileage_update",
    "created_at",
    "updated_at",
    "location_id",
    "photo_url",
)

TABLE_MISSING_CODES: frozenset[str] = frozenset({"42P01", "PGRST205"})
PERMISSION_DENIED_CODES: frozenset[str] = frozenset({"42501", "PGRST301", "PGRST302"})
