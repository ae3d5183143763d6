from __future__ import annotations

import pytest

from fleetrecords.config import FleetConfig
from fleetrecords.exceptions import FleetConfigError

_ENV_KEYS = (
    "FLEET_SUPABASE_URL",
    "FLEET_SUPABASE_ANON_KEY",
    "FLEET_LOCATION_ID",
    "FLEET_SCHEMA",
    "FLEET_APPLICATION_NAME",
    "FLEET_PAGE_SIZE",
    "FLEET_SEARCH_DEBOUNCE",
    "FLEET_REQUEST_TIMEOUT",
    "FLEET_FIXTURE_FALLBACK",
    "FLEET_API_TRACE_ENABLED",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_from_env_reads_all_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLEET_SUPABASE_URL", "https://project.supabase.co/")
    monkeypatch.setenv("FLEET_SUPABASE_ANON_KEY", " anon-key ")
    monkeypatch.setenv("FLEET_LOCATION_ID", "loc-1")
    monkeypatch.setenv("FLEET_PAGE_SIZE", "25")
    monkeypatch.setenv("FLEET_SEARCH_DEBOUNCE", "0.5")
    monkeypatch.setenv("FLEET_FIXTURE_FALLBACK", "off")
    monkeypatch.setenv("FLEET_API_TRACE_ENABLED", "yes")

    config = FleetConfig.from_env()

    assert config.base_url == "https://project.supabase.co"
    assert config.api_key == "anon-key"
    assert config.location_id == "loc-1"
    assert config.page_size == 25
    assert config.search_debounce_seconds == 0.5
    assert config.fixture_fallback is False
    assert config.api_trace_enabled is True
    assert config.schema == "public"
    assert config.application_name == "RENTAGAIN"


def test_defaults() -> None:
    config = FleetConfig(base_url="http://localhost:54321", api_key="k")
    assert config.page_size == 10
    assert config.search_debounce_seconds == 0.3
    assert config.fixture_fallback is True
    assert config.location_id is None


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLEET_SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("FLEET_SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setenv("FLEET_PAGE_SIZE", "not-a-number")

    config = FleetConfig.from_env(page_size=5, fixture_fallback=False)

    assert config.page_size == 5
    assert config.fixture_fallback is False


def test_missing_credentials_raise() -> None:
    with pytest.raises(FleetConfigError, match="base_url, api_key"):
        FleetConfig.from_env()


def test_bad_numeric_variable_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLEET_SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("FLEET_SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setenv("FLEET_REQUEST_TIMEOUT", "soon")
    with pytest.raises(FleetConfigError, match="FLEET_REQUEST_TIMEOUT"):
        FleetConfig.from_env()


@pytest.mark.parametrize("url", ["project.supabase.co", "ftp://project.supabase.co", ""])
def test_invalid_base_url_raises(url: str) -> None:
    with pytest.raises(FleetConfigError):
        FleetConfig(base_url=url, api_key="k")


@pytest.mark.parametrize(
    "kwargs",
    [{"api_key": "  "}, {"page_size": 0}, {"search_debounce_seconds": -1.0}],
)
def test_invalid_values_raise(kwargs: dict[str, object]) -> None:
    params: dict[str, object] = {"base_url": "https://project.supabase.co", "api_key": "k", **kwargs}
    with pytest.raises(FleetConfigError):
        FleetConfig(**params)  # type: ignore[arg-type]
