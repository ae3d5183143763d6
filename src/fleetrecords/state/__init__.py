"""State/store layer.

The record store is the single shared mutable resource of the fleet
console. Only the load path and the optimistic mutation coordinator
write to it; everything else reads it and reacts to its change events.
"""

from fleetrecords.state.events import ChangeSource, StoreChange
from fleetrecords.state.fixtures import FIXTURE_RECORDS
from fleetrecords.state.store import RecordSource, RecordStore

__all__ = [
    "FIXTURE_RECORDS",
    "ChangeSource",
    "RecordSource",
    "RecordStore",
    "StoreChange",
]
