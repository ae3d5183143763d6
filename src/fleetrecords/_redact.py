"""Helpers for safe debug logging.

Requests to the records backend carry the project API key both as a
header and, for some deployments, as a query parameter. This module
redacts such fields before they are emitted in DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "apikey",
        "api_key",
        "authorization",
        "password",
        "token",
        "accesstoken",
        "refreshtoken",
        "cookie",
    }
)


def _normalize_key(key: Any) -> str:
    return str(key).replace("-", "").replace("_", "").lower()


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return value[:max_string] + f"...<{len(value) - max_string} more chars>"
        return value

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for key, item in value.items():
            normalized = _normalize_key(key)
            if normalized in _SENSITIVE_VALUE_KEYS or normalized.endswith("token"):
                redacted[str(key)] = "<redacted>"
            else:
                redacted[str(key)] = redact_for_log(item, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]

    return value
