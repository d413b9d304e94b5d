"""HTTP transport for the PostgREST-style data service."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from jmsfleet._constants import MISSING_TABLE_CODES, REST_PREFIX, USER_AGENT
from jmsfleet._redact import redact_for_log
from jmsfleet.config import JmsConfig
from jmsfleet.exceptions import JmsApiError, JmsResourceNotFoundError, JmsTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the ``_api`` helpers.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`RestTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        table: str,
        *,
        params: Mapping[str, str] | None = None,
        body: Any = None,
        prefer: str | None = None,
    ) -> Any:
        ...


def _error_from_response(table: str, status: int, text: str) -> JmsApiError:
    """Map an error body (``{"code", "message", "details", "hint"}``) to an exception."""
    code = ""
    message = text[:200]
    try:
        payload = json.loads(text) if text else {}
    except json.JSONDecodeError:
        payload = {}
    if isinstance(payload, dict):
        code = str(payload.get("code") or "")
        message = str(payload.get("message") or message)

    if code in MISSING_TABLE_CODES:
        return JmsResourceNotFoundError(
            f"Table {table!r} is not available: {message}",
            code=code,
            table=table,
            status_code=status,
        )
    return JmsApiError(
        f"{table} request failed: HTTP {status} code={code or '-'} message={message}",
        code=code,
        table=table,
        status_code=status,
    )


class RestTransport:
    """aiohttp transport that speaks the PostgREST conventions.

    Every request targets ``{supabase_url}/rest/v1/{table}`` and carries the
    API key both as ``apikey`` and as bearer token.
    """

    def __init__(self, config: JmsConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = (
            aiohttp.ClientTimeout(total=config.request_timeout) if config.request_timeout is not None else None
        )

    def _headers(self, prefer: str | None) -> dict[str, str]:
        headers: dict[str, str] = {
            "apikey": self._config.api_key,
            "authorization": f"Bearer {self._config.api_key}",
            "accept": "application/json",
            "accept-profile": self._config.schema,
            "content-profile": self._config.schema,
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
        }
        if prefer:
            headers["prefer"] = prefer
        return headers

    async def request(
        self,
        method: str,
        table: str,
        *,
        params: Mapping[str, str] | None = None,
        body: Any = None,
        prefer: str | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Returns ``None`` for empty bodies (``Prefer: return=minimal`` and
        ``204 No Content`` responses).

        Raises
        ------
        JmsTransportError
            Network failure or a body that is not JSON.
        JmsResourceNotFoundError
            The table does not exist on the service.
        JmsApiError
            Any other non-2xx answer.
        """
        url = f"{self._config.supabase_url}{REST_PREFIX}/{table}"
        endpoint = f"{method} {table}"
        data = json.dumps(body, separators=(",", ":"), default=str) if body is not None else None

        _logger.debug("%s %s params=%s", method, url, redact_for_log(dict(params or {})))
        if self._config.api_trace_enabled and body is not None:
            _logger.debug("Request body for %s: %s", endpoint, redact_for_log(body))

        kwargs: dict[str, Any] = {
            "params": dict(params or {}),
            "data": data,
            "headers": self._headers(prefer),
        }
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout

        try:
            async with self._http.request(method, url, **kwargs) as resp:
                status = resp.status
                text = await resp.text()
        except aiohttp.ClientError as exc:
            raise JmsTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
        except TimeoutError as exc:
            raise JmsTransportError(
                f"Request to {endpoint} timed out",
                endpoint=endpoint,
            ) from exc

        if status >= 400:
            raise _error_from_response(table, status, text)

        if not text.strip():
            return None

        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            raise JmsTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        if self._config.api_trace_enabled:
            _logger.debug("Response from %s: %s", endpoint, redact_for_log(result))
        return result
