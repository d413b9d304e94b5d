"""Table endpoints.

Endpoints (all under ``/rest/v1/<table>``):
  - GET     list rows / fetch one row by column value
  - POST    insert (and upsert with ``resolution=merge-duplicates``)
  - PATCH   update rows matching ``id``
  - DELETE  delete rows matching ``id``
"""

from __future__ import annotations

import logging
from typing import Any

from jmsfleet._api._common import (
    PREFER_MINIMAL,
    PREFER_REPRESENTATION,
    PREFER_UPSERT,
    as_rows,
    eq_filter,
    first_row,
    order_param,
)
from jmsfleet._transport import Transport

_logger = logging.getLogger(__name__)


async def list_rows(
    transport: Transport,
    table: str,
    *,
    order_by: str | None = None,
    ascending: bool = True,
) -> list[dict[str, Any]]:
    """Fetch every row of *table*, optionally ordered by one column."""
    params = {"select": "*", **order_param(order_by, ascending=ascending)}
    decoded = await transport.request("GET", table, params=params)
    rows = as_rows(decoded)
    _logger.debug("Fetched %d rows from %s", len(rows), table)
    return rows


async def get_one(
    transport: Transport,
    table: str,
    value: Any,
    *,
    column: str = "id",
) -> dict[str, Any] | None:
    """Fetch the first row whose *column* equals *value*, or ``None``."""
    params = {"select": "*", "limit": "1", **eq_filter(column, value)}
    decoded = await transport.request("GET", table, params=params)
    return first_row(decoded)


async def insert_row(transport: Transport, table: str, record: dict[str, Any]) -> dict[str, Any] | None:
    """Insert *record* and return the inserted row when the service echoes it."""
    decoded = await transport.request("POST", table, body=[record], prefer=PREFER_REPRESENTATION)
    return first_row(decoded)


async def update_row(transport: Transport, table: str, record: dict[str, Any], match_id: Any) -> None:
    """Update the row with ``id == match_id``. No body is returned."""
    await transport.request("PATCH", table, params=eq_filter("id", match_id), body=record, prefer=PREFER_MINIMAL)


async def delete_row(transport: Transport, table: str, match_id: Any) -> None:
    await transport.request("DELETE", table, params=eq_filter("id", match_id), prefer=PREFER_MINIMAL)


async def upsert_row(transport: Transport, table: str, record: dict[str, Any]) -> dict[str, Any] | None:
    """Insert or merge *record* on its primary key."""
    decoded = await transport.request("POST", table, body=[record], prefer=PREFER_UPSERT)
    return first_row(decoded)
