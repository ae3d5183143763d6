"""Client and engine configuration for fleetrecords."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from yarl import URL

from fleetrecords._constants import APPLICATION_NAME, PAGE_SIZE, SEARCH_DEBOUNCE_SECONDS
from fleetrecords.exceptions import FleetConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _clean_base_url(value: str) -> str:
    cleaned = value.strip().rstrip("/")
    try:
        parsed = URL(cleaned)
    except ValueError as exc:
        raise FleetConfigError(f"Invalid base URL: {value!r}") from exc
    if not parsed.is_absolute() or parsed.scheme not in {"http", "https"}:
        raise FleetConfigError(f"Invalid base URL: {value!r}")
    return cleaned


@dataclasses.dataclass(frozen=True)
class FleetConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Root of the records backend (a Supabase project URL). Trailing
        slashes are stripped.
    api_key : str
        Project API key, sent as ``apikey`` and bearer token.
    location_id : str or None
        Default location whose fleet is loaded when no explicit
        :class:`~fleetrecords.models.LocationContext` is given.
    schema : str
        Database schema exposed by the REST layer.
    application_name : str
        Value of the ``x-application-name`` request header.
    page_size : int
        Rows per table page.
    search_debounce_seconds : float
        Quiet period before a typed search term is committed.
    request_timeout : float
        Total timeout in seconds for a single remote request.
    fixture_fallback : bool
        Load the built-in fixture fleet when the remote fetch fails.
        When disabled a failed load leaves the store empty, still in
        degraded mode.
    api_trace_enabled : bool
        Enable the transport-level request/response trace callback.
    """

    base_url: str
    api_key: str
    location_id: str | None = None
    schema: str = "public"
    application_name: str = APPLICATION_NAME
    page_size: int = PAGE_SIZE
    search_debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS
    request_timeout: float = 10.0
    fixture_fallback: bool = True
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", _clean_base_url(self.base_url))
        if not self.api_key or not self.api_key.strip():
            raise FleetConfigError("api_key must be non-empty")
        object.__setattr__(self, "api_key", self.api_key.strip())
        if self.page_size < 1:
            raise FleetConfigError(f"page_size must be positive, got {self.page_size}")
        if self.search_debounce_seconds < 0:
            raise FleetConfigError("search_debounce_seconds must not be negative")

    @classmethod
    def from_env(cls, **overrides: Any) -> FleetConfig:
        """Create configuration from environment variables.

        Reads ``FLEET_SUPABASE_URL``, ``FLEET_SUPABASE_ANON_KEY`` and the
        optional ``FLEET_*`` variables. Explicit keyword arguments override
        environment values.

        Raises
        ------
        FleetConfigError
            When the URL or key is missing, or a numeric variable is not a number.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "FLEET_SUPABASE_URL": "base_url",
            "FLEET_SUPABASE_ANON_KEY": "api_key",
            "FLEET_LOCATION_ID": "location_id",
            "FLEET_SCHEMA": "schema",
            "FLEET_APPLICATION_NAME": "application_name",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None and val.strip():
                config_kwargs[field_name] = val.strip()

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type]] = {
            "FLEET_PAGE_SIZE": ("page_size", int),
            "FLEET_SEARCH_DEBOUNCE": ("search_debounce_seconds", float),
            "FLEET_REQUEST_TIMEOUT": ("request_timeout", float),
        }
        for env_key, (field_name, caster) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = caster(val)
            except ValueError as exc:
                raise FleetConfigError(f"{env_key} must be numeric, got {val!r}") from exc

        if "fixture_fallback" not in overrides:
            config_kwargs["fixture_fallback"] = _env_bool(env.get("FLEET_FIXTURE_FALLBACK"), True)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("FLEET_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        missing = [name for name in ("base_url", "api_key") if not config_kwargs.get(name)]
        if missing:
            raise FleetConfigError(f"Missing required configuration: {', '.join(missing)}")

        return cls(**config_kwargs)
