"""Kind-level mapping between persisted rows and record models.

No other component reads raw column names: loaders and sync operations
go through :func:`map_rows`, :func:`to_view_model` and :func:`to_record`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from jmsfleet._constants import (
    TABLE_CHECKLISTS,
    TABLE_COSTS,
    TABLE_FLEET,
    TABLE_LOCATIONS,
    TABLE_RENTALS,
    TABLE_USERS,
)
from jmsfleet.models import AppUser, Checklist, Cost, FleetItem, JmsRecord, Rental, RentalLocation
from jmsfleet.state.events import EntityKind

_logger = logging.getLogger(__name__)

RECORD_TYPES: dict[EntityKind, type[JmsRecord]] = {
    EntityKind.USERS: AppUser,
    EntityKind.RENTALS: Rental,
    EntityKind.COSTS: Cost,
    EntityKind.LOCATIONS: RentalLocation,
    EntityKind.FLEET: FleetItem,
    EntityKind.CHECKLISTS: Checklist,
}

TABLES: dict[EntityKind, str] = {
    EntityKind.USERS: TABLE_USERS,
    EntityKind.RENTALS: TABLE_RENTALS,
    EntityKind.COSTS: TABLE_COSTS,
    EntityKind.LOCATIONS: TABLE_LOCATIONS,
    EntityKind.FLEET: TABLE_FLEET,
    EntityKind.CHECKLISTS: TABLE_CHECKLISTS,
}

# Kinds whose primary key is assigned by the service on insert.
SERVER_ASSIGNED_IDS: frozenset[EntityKind] = frozenset(
    {
        EntityKind.USERS,
        EntityKind.RENTALS,
        EntityKind.COSTS,
        EntityKind.LOCATIONS,
        EntityKind.FLEET,
    }
)


def to_view_model(kind: EntityKind, row: Mapping[str, Any] | None) -> JmsRecord:
    """Map one persisted row of *kind*. Never raises."""
    return RECORD_TYPES[kind].from_record(row)


def map_rows(kind: EntityKind, rows: Iterable[Any]) -> list[JmsRecord]:
    """Map a fetched collection, skipping entries that are not rows at all."""
    mapped: list[JmsRecord] = []
    skipped = 0
    for row in rows:
        if not isinstance(row, Mapping):
            skipped += 1
            continue
        mapped.append(to_view_model(kind, row))
    if skipped:
        _logger.debug("Skipped %d non-object rows for %s", skipped, kind)
    return mapped


def to_record(kind: EntityKind, model: JmsRecord, *, include_id: bool | None = None) -> dict[str, Any]:
    """Serialize *model* for persistence.

    By default the id is written only for kinds whose keys are generated
    client side.
    """
    expected = RECORD_TYPES[kind]
    if not isinstance(model, expected):
        raise TypeError(f"{kind} expects {expected.__name__}, got {type(model).__name__}")
    if include_id is None:
        include_id = kind not in SERVER_ASSIGNED_IDS
    return model.to_record(include_id=include_id)
