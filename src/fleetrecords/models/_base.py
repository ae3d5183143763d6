"""Base model for fleet records.

Every record model inherits from :class:`FleetBaseModel` which provides:

* frozen instances, so a record can be shared between the store, the
  memoized page and mutation snapshots without defensive copies.
* A ``model_validator(mode="before")`` that drops placeholder values
  (``""`` and whitespace-only strings) so the field default is used.
* ISO-8601 / epoch timestamp coercion through :data:`FleetTimestamp`.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def utcnow() -> datetime:
    return datetime.now(UTC)


def parse_timestamp(value: Any) -> datetime | None:
    """Convert an ISO string or epoch number (seconds **or** milliseconds) to a UTC datetime.

    Naive datetimes are assumed to be UTC. Returns ``None`` for ``None``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            ts = float(value)
            if ts >= _MS_THRESHOLD:
                ts /= 1000.0
            return datetime.fromtimestamp(ts, tz=UTC)
        except (OverflowError, OSError) as exc:
            # pydantic only turns ValueError into a validation error
            raise ValueError(f"timestamp out of range: {value!r}") from exc
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)


FleetTimestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
"""Annotated type that coerces remote timestamps to aware UTC datetimes."""


class FleetBaseModel(BaseModel):
    """Base for fleet models.

    Handles:
    * Placeholder strings (``""``) → dropped so the field default is used
    * Unknown keys from the remote → ignored
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_placeholders(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return {
            key: value
            for key, value in values.items()
            if value is not None and not (isinstance(value, str) and not value.strip())
        }
