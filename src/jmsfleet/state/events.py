"""Normalized store events.

Sync operations and loaders convert persistence results into these
events. Only the state/store layer is allowed to apply them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EntityKind(StrEnum):
    USERS = "users"
    RENTALS = "rentals"
    COSTS = "costs"
    LOCATIONS = "locations"
    FLEET = "fleet"
    CHECKLISTS = "checklists"


class StoreOp(StrEnum):
    INSERT = "insert"
    REPLACE = "replace"
    REMOVE = "remove"
    RESET = "reset"


class LoadState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"


class StoreEvent(BaseModel):
    """A confirmed change to apply to the entity store.

    ``entity`` is required for ``INSERT``/``REPLACE``, ``entity_id`` for
    ``REMOVE`` and ``entities`` for ``RESET``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: EntityKind
    op: StoreOp
    entity: Any = None
    entity_id: int | str | None = None
    entities: tuple[Any, ...] = ()
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def _check_payload(self) -> StoreEvent:
        if self.op in (StoreOp.INSERT, StoreOp.REPLACE) and self.entity is None:
            raise ValueError(f"{self.op} event requires an entity")
        if self.op == StoreOp.REMOVE and self.entity_id is None:
            raise ValueError("remove event requires an entity_id")
        return self

    @property
    def target_id(self) -> int | str | None:
        if self.entity_id is not None:
            return self.entity_id
        return getattr(self.entity, "id", None)
