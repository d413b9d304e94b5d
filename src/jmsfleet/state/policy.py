"""Deterministic ordering policy for entity collections.

This module intentionally contains *no* row parsing. It orders already
mapped models so derived views do not have to re-sort by the natural key
of a kind on every render.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from jmsfleet.mapping.normalize import collation_key
from jmsfleet.state.events import EntityKind

# Kinds without a natural sort key: new entities go first, order is kept.
PREPEND_KINDS: frozenset[EntityKind] = frozenset({EntityKind.USERS, EntityKind.RENTALS, EntityKind.CHECKLISTS})


def _id_key(entity: Any) -> tuple[int, int, str]:
    value = getattr(entity, "id", None)
    if isinstance(value, int):
        return (0, value, "")
    if value is None:
        return (2, 0, "")
    return (1, 0, str(value))


def _costs_by_date_desc(items: Sequence[Any]) -> list[Any]:
    dated = [item for item in items if getattr(item, "date", "")]
    undated = [item for item in items if not getattr(item, "date", "")]
    # ISO dates compare correctly as strings; reverse=True keeps ties stable.
    return sorted(dated, key=lambda item: item.date, reverse=True) + undated


def order_entities(kind: EntityKind, items: Sequence[Any]) -> list[Any]:
    """Return *items* in the natural order of *kind*.

    - costs: purchase date descending, undated records last
    - locations: name, accent and case insensitive
    - fleet: id ascending
    - users, rentals, checklists: unchanged
    """
    if kind == EntityKind.COSTS:
        return _costs_by_date_desc(items)
    if kind == EntityKind.LOCATIONS:
        return sorted(items, key=lambda item: collation_key(getattr(item, "name", "")))
    if kind == EntityKind.FLEET:
        return sorted(items, key=_id_key)
    return list(items)


def insert_entity(kind: EntityKind, items: Sequence[Any], entity: Any) -> list[Any]:
    """Add *entity* to *items* and restore the natural order."""
    if kind in PREPEND_KINDS:
        return [entity, *items]
    return order_entities(kind, [*items, entity])


def is_expired(now: float, expires_at: float) -> bool:
    return now >= expires_at
