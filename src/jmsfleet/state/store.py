"""Deterministic in-memory entity store.

This is the only component allowed to hold the entity collections. It is
fed exclusively through :meth:`EntityStore.apply` (and the load helpers
built on it), which the sync operations call after the data service
confirmed a change.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from jmsfleet.exceptions import JmsStateError
from jmsfleet.mapping.normalize import coerce_id
from jmsfleet.models.settings import CompanyProfile, PriceTable
from jmsfleet.state.events import EntityKind, LoadState, StoreEvent, StoreOp
from jmsfleet.state.policy import insert_entity, order_entities

_logger = logging.getLogger(__name__)

Listener = Callable[[int], None]


def _same_id(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return False
    return coerce_id(left) == coerce_id(right)


class EntityStore:
    """In-memory store for the entity collections.

    Snapshots returned by :meth:`items` are tuples of frozen models. A
    snapshot stays the *same object* until its kind is mutated, so
    derived views can memoize on identity.
    """

    def __init__(self) -> None:
        self._items: dict[EntityKind, tuple[Any, ...]] = {kind: () for kind in EntityKind}
        self._load_states: dict[EntityKind, LoadState] = {kind: LoadState.IDLE for kind in EntityKind}
        self._pending_loads: dict[EntityKind, LoadState] = {}
        self._company_profile: CompanyProfile | None = None
        self._price_table: PriceTable | None = None
        self._listeners: list[Listener] = []
        self._version = 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        """Monotonic counter bumped on every effective mutation."""
        return self._version

    def items(self, kind: EntityKind) -> tuple[Any, ...]:
        return self._items[kind]

    def get(self, kind: EntityKind, entity_id: Any) -> Any | None:
        for entity in self._items[kind]:
            if _same_id(getattr(entity, "id", None), entity_id):
                return entity
        return None

    def load_state(self, kind: EntityKind) -> LoadState:
        return self._load_states[kind]

    @property
    def company_profile(self) -> CompanyProfile | None:
        return self._company_profile

    @property
    def price_table(self) -> PriceTable | None:
        return self._price_table

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def begin_load(self, kind: EntityKind) -> None:
        """Mark *kind* as loading (``IDLE|LOADED -> LOADING``)."""
        current = self._load_states[kind]
        if current == LoadState.LOADING:
            raise JmsStateError(f"{kind} is already loading")
        self._pending_loads[kind] = current
        self._load_states[kind] = LoadState.LOADING

    def load(self, kind: EntityKind, entities: Iterable[Any]) -> None:
        """Replace the whole collection and mark *kind* as loaded."""
        self.apply(StoreEvent(kind=kind, op=StoreOp.RESET, entities=tuple(entities)))
        self._pending_loads.pop(kind, None)
        self._load_states[kind] = LoadState.LOADED

    def fail_load(self, kind: EntityKind) -> None:
        """Abort a load; the kind returns to the state it had before."""
        previous = self._pending_loads.pop(kind, None)
        if previous is not None:
            self._load_states[kind] = previous

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def apply(self, event: StoreEvent) -> None:
        """Apply a confirmed change."""
        kind = event.kind
        current = self._items[kind]

        if event.op == StoreOp.RESET:
            updated = order_entities(kind, event.entities)
        elif event.op == StoreOp.INSERT:
            target = event.target_id
            remaining = [item for item in current if not _same_id(getattr(item, "id", None), target)]
            updated = insert_entity(kind, remaining, event.entity)
        elif event.op == StoreOp.REPLACE:
            target = event.target_id
            if not any(_same_id(getattr(item, "id", None), target) for item in current):
                _logger.debug("Replace for unknown %s id=%s ignored", kind, target)
                return
            replaced = [event.entity if _same_id(getattr(item, "id", None), target) else item for item in current]
            updated = order_entities(kind, replaced)
        else:
            target = event.target_id
            updated = [item for item in current if not _same_id(getattr(item, "id", None), target)]
            if len(updated) == len(current):
                _logger.debug("Remove for unknown %s id=%s ignored", kind, target)
                return

        self._items[kind] = tuple(updated)
        _logger.debug("Applied %s to %s (%d items)", event.op, kind, len(updated))
        self._bump()

    def set_settings(
        self,
        *,
        company_profile: CompanyProfile | None = None,
        price_table: PriceTable | None = None,
    ) -> None:
        """Store the singleton settings records that are given."""
        if company_profile is None and price_table is None:
            return
        if company_profile is not None:
            self._company_profile = company_profile
        if price_table is not None:
            self._price_table = price_table
        self._bump()

    # ------------------------------------------------------------------
    # Change listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with the new version after every change.

        Returns a callable that removes the listener again.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _bump(self) -> None:
        self._version += 1
        for listener in list(self._listeners):
            listener(self._version)
