"""View state: the search, filter, sort and page selections of the fleet table."""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fleetrecords.models.vehicle import VehicleRecord, VehicleStatus

STATUS_ALL: Literal["all"] = "all"

StatusFilter = VehicleStatus | Literal["all"]

#: Record fields the table can be sorted by.
SORTABLE_FIELDS: frozenset[str] = frozenset(VehicleRecord.model_fields)


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> SortDirection:
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


class ViewState(BaseModel):
    """Immutable snapshot of the table selections.

    Instances are hashable so they can key the page cache.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    search_query: str = ""
    status_filter: StatusFilter = STATUS_ALL
    sort_key: str | None = None
    sort_direction: SortDirection = SortDirection.ASC
    current_page: int = Field(default=1, ge=1)

    @field_validator("sort_key")
    @classmethod
    def _known_sort_key(cls, value: str | None) -> str | None:
        if value is not None and value not in SORTABLE_FIELDS:
            raise ValueError(f"Unknown sort key: {value!r}")
        return value
