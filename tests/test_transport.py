from __future__ import annotations

import logging
from typing import Any

import aiohttp
import pytest

from jmsfleet._api import tables as tables_api
from jmsfleet._transport import RestTransport
from jmsfleet.config import JmsConfig
from jmsfleet.exceptions import JmsApiError, JmsResourceNotFoundError, JmsTransportError
from jmsfleet.persistence import RestPersistence


class _RecordingTransport:
    def __init__(self, response: Any = None) -> None:
        self.response = response
        self.requests: list[dict[str, Any]] = []

    async def request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        body: Any = None,
        prefer: str | None = None,
    ) -> Any:
        self.requests.append({"method": method, "table": table, "params": params, "body": body, "prefer": prefer})
        return self.response


class _FakeResponse:
    def __init__(self, status: int, text: str) -> None:
        self.status = status
        self._text = text

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        return None


class _FakeHttpSession:
    """Stands in for ``aiohttp.ClientSession.request``."""

    def __init__(self, status: int = 200, text: str = "", error: Exception | None = None) -> None:
        self.status = status
        self.text = text
        self.error = error
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return _FakeResponse(self.status, self.text)


def _config() -> JmsConfig:
    return JmsConfig(supabase_url="https://fleet.example.co/", api_key="anon-key")


@pytest.mark.asyncio
async def test_list_rows_selects_all_and_orders() -> None:
    transport = _RecordingTransport([{"id": 1}, "noise", {"id": 2}])

    rows = await tables_api.list_rows(transport, "rentals", order_by="date", ascending=False)

    assert rows == [{"id": 1}, {"id": 2}]
    assert transport.requests[0]["method"] == "GET"
    assert transport.requests[0]["params"] == {"select": "*", "order": "date.desc"}


@pytest.mark.asyncio
async def test_get_one_filters_by_column() -> None:
    transport = _RecordingTransport([])

    row = await tables_api.get_one(transport, "app_users", "ana@jms.com", column="email")

    assert row is None
    assert transport.requests[0]["params"] == {"select": "*", "limit": "1", "email": "eq.ana@jms.com"}


@pytest.mark.asyncio
async def test_write_requests_use_prefer_headers() -> None:
    transport = _RecordingTransport([{"id": 9, "name": "Marina"}])
    persistence = RestPersistence(transport)

    inserted = await persistence.insert("rental_locations", {"name": "Marina"})
    await persistence.update("rental_locations", {"name": "Píer"}, 9)
    await persistence.delete("rental_locations", 9)
    await persistence.upsert("price_table", {"id": 1, "half_day": 300})

    assert inserted == {"id": 9, "name": "Marina"}
    post, patch, delete, upsert = transport.requests
    assert post["body"] == [{"name": "Marina"}]
    assert post["prefer"] == "return=representation"
    assert patch["params"] == {"id": "eq.9"}
    assert patch["prefer"] == "return=minimal"
    assert delete["method"] == "DELETE"
    assert upsert["prefer"] == "resolution=merge-duplicates,return=representation"


@pytest.mark.asyncio
async def test_rest_transport_sends_key_headers_and_decodes_json() -> None:
    http = _FakeHttpSession(text='[{"id": 1}]')
    transport = RestTransport(_config(), http)

    result = await transport.request("GET", "costs", params={"select": "*"})

    assert result == [{"id": 1}]
    method, url, kwargs = http.calls[0]
    assert method == "GET"
    assert url == "https://fleet.example.co/rest/v1/costs"
    assert kwargs["headers"]["apikey"] == "anon-key"
    assert kwargs["headers"]["authorization"] == "Bearer anon-key"
    assert "prefer" not in kwargs["headers"]


@pytest.mark.asyncio
async def test_rest_transport_returns_none_for_empty_body() -> None:
    transport = RestTransport(_config(), _FakeHttpSession(status=204, text=""))
    assert await transport.request("DELETE", "costs", params={"id": "eq.1"}, prefer="return=minimal") is None


@pytest.mark.asyncio
async def test_missing_table_maps_to_resource_not_found() -> None:
    body = '{"code": "PGRST205", "message": "Could not find the table public.checklists"}'
    transport = RestTransport(_config(), _FakeHttpSession(status=404, text=body))

    with pytest.raises(JmsResourceNotFoundError) as exc_info:
        await transport.request("GET", "checklists")

    assert exc_info.value.code == "PGRST205"
    assert exc_info.value.table == "checklists"


@pytest.mark.asyncio
async def test_other_service_errors_map_to_api_error() -> None:
    body = '{"code": "23505", "message": "duplicate key value"}'
    transport = RestTransport(_config(), _FakeHttpSession(status=409, text=body))

    with pytest.raises(JmsApiError) as exc_info:
        await transport.request("POST", "app_users", body=[{"email": "a@jms.com"}])

    assert not isinstance(exc_info.value, JmsResourceNotFoundError)
    assert exc_info.value.code == "23505"
    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_network_failures_and_bad_json_map_to_transport_error() -> None:
    offline = RestTransport(_config(), _FakeHttpSession(error=aiohttp.ClientConnectionError("refused")))
    with pytest.raises(JmsTransportError):
        await offline.request("GET", "costs")

    garbled = RestTransport(_config(), _FakeHttpSession(text="<html>"))
    with pytest.raises(JmsTransportError) as exc_info:
        await garbled.request("GET", "costs")
    assert exc_info.value.status_code == 200


@pytest.mark.asyncio
async def test_request_logs_never_show_password_filters_or_bodies(caplog: pytest.LogCaptureFixture) -> None:
    config = JmsConfig(supabase_url="https://fleet.example.co", api_key="anon-key", api_trace_enabled=True)
    http = _FakeHttpSession(text='[{"email": "ana@jms.com", "password": "segredo"}]')
    transport = RestTransport(config, http)
    caplog.set_level(logging.DEBUG, logger="jmsfleet._transport")

    await transport.request("GET", "app_users", params={"email": "eq.ana@jms.com", "password": "eq.segredo"})
    await transport.request("POST", "app_users", body=[{"email": "bia@jms.com", "password": "outro"}])

    assert "ana@jms.com" in caplog.text
    assert "segredo" not in caplog.text
    assert "outro" not in caplog.text
    assert http.calls[0][2]["params"]["password"] == "eq.segredo"
