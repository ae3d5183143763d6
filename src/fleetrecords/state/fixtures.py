"""Deterministic fixture fleet used when the remote load fails."""

from __future__ import annotations

from typing import Any

from fleetrecords.models.vehicle import VehicleRecord

_FIXTURE_LOCATION = "test-location-uuid"

_FIXTURE_ROWS: tuple[dict[str, Any], ...] = (
    {
        "id": "1",
        "vehicle_id": "LAM-001",
        "make": "Lamborghini",
        "model": "Huracán",
        "year": 2023,
        "status": "available",
        "license_plate": "LAM-123",
        "wash_status": True,
        "wash_last_updated": "2024-07-14T14:00:00Z",
        "current_mileage": 12450,
        "last_mileage_update": "2024-07-14T16:30:00Z",
        "created_at": "2024-01-15T10:00:00Z",
        "updated_at": "2024-07-14T16:30:00Z",
        "photo_url": "https://images.unsplash.com/photo-1544636331-e26879cd4d9b?w=300&h=200&fit=crop&crop=center",
    },
    {
        "id": "2",
        "vehicle_id": "FER-002",
        "make": "Ferrari",
        "model": "488 GTB",
        "year": 2022,
        "status": "rented",
        "license_plate": "FER-456",
        "wash_status": False,
        "wash_last_updated": "2024-07-12T09:00:00Z",
        "current_mileage": 28750,
        "last_mileage_update": "2024-07-15T09:15:00Z",
        "created_at": "2024-01-20T14:00:00Z",
        "updated_at": "2024-07-15T09:15:00Z",
        "photo_url": "https://images.unsplash.com/photo-1583121274602-3e2820c69888?w=300&h=200&fit=crop&crop=center",
    },
    {
        "id": "3",
        "vehicle_id": "POR-003",
        "make": "Porsche",
        "model": "911 Turbo S",
        "year": 2023,
        "status": "maintenance",
        "license_plate": "POR-789",
        "wash_status": False,
        "wash_last_updated": "2024-07-10T16:30:00Z",
        "current_mileage": 15320,
        "last_mileage_update": "2024-07-13T11:45:00Z",
        "created_at": "2024-02-01T09:00:00Z",
        "updated_at": "2024-07-13T11:45:00Z",
    },
    {
        "id": "4",
        "vehicle_id": "MCL-004",
        "make": "McLaren",
        "model": "720S",
        "year": 2022,
        "status": "available",
        "license_plate": "MCL-321",
        "wash_status": True,
        "wash_last_updated": "2024-07-14T11:15:00Z",
        "current_mileage": 8960,
        "last_mileage_update": "2024-07-14T14:20:00Z",
        "created_at": "2024-02-10T13:00:00Z",
        "updated_at": "2024-07-14T14:20:00Z",
        "photo_url": "https://images.unsplash.com/photo-1558618666-fcd25c85cd64?w=300&h=200&fit=crop&crop=center",
    },
    {
        "id": "5",
        "vehicle_id": "BEN-005",
        "make": "Bentley",
        "model": "Continental GT",
        "year": 2023,
        "status": "out_of_service",
        "license_plate": "BEN-654",
        "wash_status": False,
        "wash_last_updated": "2024-07-11T13:45:00Z",
        "current_mileage": 22100,
        "last_mileage_update": "2024-07-12T08:30:00Z",
        "created_at": "2024-02-15T11:00:00Z",
        "updated_at": "2024-07-12T08:30:00Z",
        "photo_url": "https://images.unsplash.com/photo-1563720223185-11003d516935?w=300&h=200&fit=crop&crop=center",
    },
    {
        "id": "6",
        "vehicle_id": "AST-006",
        "make": "Aston Martin",
        "model": "DB11",
        "year": 2023,
        "status": "available",
        "license_plate": "AST-987",
        "wash_status": True,
        "wash_last_updated": "2024-07-15T10:30:00Z",
        "current_mileage": 5420,
        "last_mileage_update": "2024-07-15T12:00:00Z",
        "created_at": "2024-03-01T15:00:00Z",
        "updated_at": "2024-07-15T12:00:00Z",
    },
)

FIXTURE_RECORDS: tuple[VehicleRecord, ...] = tuple(
    VehicleRecord.model_validate({**row, "location_id": _FIXTURE_LOCATION}) for row in _FIXTURE_ROWS
)
