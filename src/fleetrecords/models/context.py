"""Explicit location context threaded into load and mutate calls."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class LocationContext(BaseModel):
    """The rental location whose fleet is being operated on."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    location_id: str
    user_id: str | None = None

    @field_validator("location_id")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("location_id must be non-empty")
        return value
