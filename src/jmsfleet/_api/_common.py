"""Shared helpers for the table endpoint module.

This module centralizes the repeated PostgREST query-string patterns:
- equality filters (``column=eq.value``)
- ordering (``order=column.asc``)
- normalizing representation bodies (lists vs single objects)

It is internal to jmsfleet and may change at any time.
"""

from __future__ import annotations

from typing import Any

PREFER_REPRESENTATION = "return=representation"
PREFER_MINIMAL = "return=minimal"
PREFER_UPSERT = "resolution=merge-duplicates,return=representation"


def eq_filter(column: str, value: Any) -> dict[str, str]:
    """Build a ``column=eq.value`` filter."""
    if isinstance(value, bool):
        rendered = "true" if value else "false"
    else:
        rendered = str(value)
    return {column: f"eq.{rendered}"}


def order_param(column: str | None, *, ascending: bool = True) -> dict[str, str]:
    if not column:
        return {}
    direction = "asc" if ascending else "desc"
    return {"order": f"{column}.{direction}"}


def as_rows(decoded: Any) -> list[dict[str, Any]]:
    """Return *decoded* as a list of row dicts, dropping anything else."""
    if isinstance(decoded, dict):
        return [decoded]
    if not isinstance(decoded, list):
        return []
    return [row for row in decoded if isinstance(row, dict)]


def first_row(decoded: Any) -> dict[str, Any] | None:
    rows = as_rows(decoded)
    return rows[0] if rows else None
