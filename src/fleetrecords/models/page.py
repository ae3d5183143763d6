"""Derived output of the filter/sort/paginate pipeline."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from fleetrecords.models.vehicle import VehicleRecord


class FleetPage(BaseModel):
    """One visible page of the fleet table."""

    model_config = ConfigDict(frozen=True)

    filtered_count: int
    page_records: tuple[VehicleRecord, ...]
    page: int
    page_size: int
    total_pages: int
    start_index: int
    """Zero-based index of the first page row within the filtered list."""

    @property
    def is_empty(self) -> bool:
        return not self.page_records

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


class FleetStats(BaseModel):
    """Per-status counts over the whole record store."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    available: int = 0
    rented: int = 0
    maintenance: int = 0
    out_of_service: int = 0
    utilization_rate: float = 0.0
    """Percentage of rentable vehicles (available + rented) currently rented."""
