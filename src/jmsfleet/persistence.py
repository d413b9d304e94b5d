"""Persistence collaborator used by the sync operations.

The client only ever talks to the data service through this interface.
Rows crossing it are flat ``snake_case`` dicts; mapping them into view
models is the job of :mod:`jmsfleet.mapping`.
"""

from __future__ import annotations

from typing import Any, Protocol

from jmsfleet._api import tables as _tables_api
from jmsfleet._transport import Transport


class Persistence(Protocol):
    """Structural interface of the hosted CRUD store."""

    async def list(self, table: str, *, order_by: str | None = None, ascending: bool = True) -> list[dict[str, Any]]:
        ...

    async def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any] | None:
        ...

    async def update(self, table: str, record: dict[str, Any], match_id: Any) -> None:
        ...

    async def delete(self, table: str, match_id: Any) -> None:
        ...

    async def get_one(self, table: str, value: Any, *, column: str = "id") -> dict[str, Any] | None:
        ...

    async def upsert(self, table: str, record: dict[str, Any]) -> dict[str, Any] | None:
        ...


class RestPersistence:
    """:class:`Persistence` backed by the PostgREST table endpoints."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def list(self, table: str, *, order_by: str | None = None, ascending: bool = True) -> list[dict[str, Any]]:
        return await _tables_api.list_rows(self._transport, table, order_by=order_by, ascending=ascending)

    async def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any] | None:
        return await _tables_api.insert_row(self._transport, table, record)

    async def update(self, table: str, record: dict[str, Any], match_id: Any) -> None:
        await _tables_api.update_row(self._transport, table, record, match_id)

    async def delete(self, table: str, match_id: Any) -> None:
        await _tables_api.delete_row(self._transport, table, match_id)

    async def get_one(self, table: str, value: Any, *, column: str = "id") -> dict[str, Any] | None:
        return await _tables_api.get_one(self._transport, table, value, column=column)

    async def upsert(self, table: str, record: dict[str, Any]) -> dict[str, Any] | None:
        return await _tables_api.upsert_row(self._transport, table, record)
