"""HTTP transport for the PostgREST records backend."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol

import aiohttp

from fleetrecords._api._common import raise_for_error
from fleetrecords._constants import USER_AGENT
from fleetrecords._redact import redact_for_log
from fleetrecords.config import FleetConfig
from fleetrecords.exceptions import FleetTransportError

_logger = logging.getLogger(__name__)

#: Callback receiving ``(method, endpoint, request_info, response_info)``.
TraceCallback = Callable[[str, str, dict[str, Any], dict[str, Any]], None]


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`RestTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        ...


class RestTransport:
    """JSON-over-HTTP transport with project key authentication."""

    def __init__(
        self,
        config: FleetConfig,
        http_session: aiohttp.ClientSession,
        *,
        trace: TraceCallback | None = None,
    ) -> None:
        self._config = config
        self._http = http_session
        self._trace = trace if config.api_trace_enabled else None

    def _base_headers(self, method: str) -> dict[str, str]:
        headers: dict[str, str] = {
            "accept": "application/json",
            "apikey": self._config.api_key,
            "authorization": f"Bearer {self._config.api_key}",
            "user-agent": USER_AGENT,
            "x-application-name": self._config.application_name,
        }
        if method == "GET":
            headers["accept-profile"] = self._config.schema
        else:
            headers["content-type"] = "application/json"
            headers["content-profile"] = self._config.schema
        return headers

    def _emit_trace(self, method: str, endpoint: str, request: dict[str, Any], response: dict[str, Any]) -> None:
        if self._trace is None:
            return
        try:
            self._trace(method, endpoint, redact_for_log(request), redact_for_log(response))
        except Exception:
            _logger.debug("API trace callback failed", exc_info=True)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        An empty body decodes to ``None``. Non-2xx responses are mapped onto
        the exception hierarchy by :func:`raise_for_error`.
        """
        all_headers = self._base_headers(method)
        if headers:
            all_headers.update(headers)
        url = f"{self._config.base_url}{endpoint}"
        request_info: dict[str, Any] = {"params": dict(params or {}), "headers": all_headers, "body": json_body}

        _logger.debug("%s %s %s", method, url, redact_for_log(request_info["params"]))

        try:
            async with self._http.request(
                method,
                url,
                params=dict(params or {}),
                json=json_body,
                headers=all_headers,
            ) as resp:
                status = resp.status
                text = await resp.text()
        except aiohttp.ClientError as exc:
            raise FleetTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
        except TimeoutError as exc:
            raise FleetTransportError(
                f"Request to {endpoint} timed out",
                endpoint=endpoint,
            ) from exc

        body: Any = None
        if text.strip():
            try:
                body = json.loads(text)
            except json.JSONDecodeError as exc:
                self._emit_trace(method, endpoint, request_info, {"status": status, "text": text[:200]})
                raise FleetTransportError(
                    f"Invalid JSON from {endpoint}: {text[:200]}",
                    status_code=status,
                    endpoint=endpoint,
                ) from exc

        self._emit_trace(method, endpoint, request_info, {"status": status, "body": body})

        if status >= 400:
            raise_for_error(endpoint=endpoint, status=status, body=body)
        return body
