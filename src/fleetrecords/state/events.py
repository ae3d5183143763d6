"""Change events emitted by the record store."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from fleetrecords.models._base import utcnow
from fleetrecords.models.vehicle import VehicleRecord


class ChangeSource(StrEnum):
    REMOTE = "remote"
    FIXTURE = "fixture"
    OPTIMISTIC = "optimistic"
    ROLLBACK = "rollback"


class StoreChange(BaseModel):
    """One write to the record store.

    A load replaces the whole collection and carries ``record_id=None``;
    a record patch carries the record before and after the write.
    """

    model_config = ConfigDict(frozen=True)

    source: ChangeSource
    version: int
    record_id: str | None = None
    before: VehicleRecord | None = None
    after: VehicleRecord | None = None
    observed_at: datetime = Field(default_factory=utcnow)
