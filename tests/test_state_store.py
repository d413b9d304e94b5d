from __future__ import annotations

import pytest
from pydantic import ValidationError

from jmsfleet.exceptions import JmsStateError
from jmsfleet.models import Cost, FleetItem, Rental, RentalLocation
from jmsfleet.models.settings import PriceTable
from jmsfleet.state.events import EntityKind, LoadState, StoreEvent, StoreOp
from jmsfleet.state.store import EntityStore


def _insert(store: EntityStore, kind: EntityKind, entity: object) -> None:
    store.apply(StoreEvent(kind=kind, op=StoreOp.INSERT, entity=entity))


def test_rentals_are_prepended_on_insert() -> None:
    store = EntityStore()
    store.load(EntityKind.RENTALS, [Rental(id=1, client_name="Ana")])

    _insert(store, EntityKind.RENTALS, Rental(id=2, client_name="Bia"))

    assert [rental.id for rental in store.items(EntityKind.RENTALS)] == [2, 1]


def test_costs_are_kept_newest_first_with_undated_last() -> None:
    store = EntityStore()
    store.load(
        EntityKind.COSTS,
        [Cost(id=1, date="2024-01-10"), Cost(id=2), Cost(id=3, date="2024-03-01")],
    )

    _insert(store, EntityKind.COSTS, Cost(id=4, date="2024-02-01"))

    assert [cost.id for cost in store.items(EntityKind.COSTS)] == [3, 4, 1, 2]


def test_locations_are_ordered_by_name_ignoring_accents() -> None:
    store = EntityStore()
    store.load(EntityKind.LOCATIONS, [RentalLocation(id=1, name="Praia"), RentalLocation(id=2, name="Ângra")])

    _insert(store, EntityKind.LOCATIONS, RentalLocation(id=3, name="Barra"))

    assert [location.name for location in store.items(EntityKind.LOCATIONS)] == ["Ângra", "Barra", "Praia"]


def test_fleet_is_ordered_by_id() -> None:
    store = EntityStore()
    store.load(EntityKind.FLEET, [FleetItem(id=5, name="B"), FleetItem(id=2, name="A")])

    _insert(store, EntityKind.FLEET, FleetItem(id=3, name="C"))

    assert [item.id for item in store.items(EntityKind.FLEET)] == [2, 3, 5]


def test_insert_with_existing_id_replaces_instead_of_duplicating() -> None:
    store = EntityStore()
    store.load(EntityKind.RENTALS, [Rental(id=1, client_name="Ana")])

    _insert(store, EntityKind.RENTALS, Rental(id="1", client_name="Ana Maria"))

    items = store.items(EntityKind.RENTALS)
    assert len(items) == 1
    assert items[0].client_name == "Ana Maria"


def test_replace_and_remove_match_ids_across_int_and_str() -> None:
    store = EntityStore()
    store.load(EntityKind.RENTALS, [Rental(id=1, client_name="Ana"), Rental(id=2, client_name="Bia")])

    store.apply(StoreEvent(kind=EntityKind.RENTALS, op=StoreOp.REPLACE, entity=Rental(id=2, client_name="Beatriz")))
    store.apply(StoreEvent(kind=EntityKind.RENTALS, op=StoreOp.REMOVE, entity_id="1"))

    assert [rental.client_name for rental in store.items(EntityKind.RENTALS)] == ["Beatriz"]


def test_unknown_ids_leave_the_snapshot_untouched() -> None:
    store = EntityStore()
    store.load(EntityKind.RENTALS, [Rental(id=1)])
    snapshot = store.items(EntityKind.RENTALS)
    version = store.version

    store.apply(StoreEvent(kind=EntityKind.RENTALS, op=StoreOp.REPLACE, entity=Rental(id=9)))
    store.apply(StoreEvent(kind=EntityKind.RENTALS, op=StoreOp.REMOVE, entity_id=9))

    assert store.items(EntityKind.RENTALS) is snapshot
    assert store.version == version


def test_snapshot_identity_changes_only_for_the_mutated_kind() -> None:
    store = EntityStore()
    store.load(EntityKind.RENTALS, [Rental(id=1)])
    store.load(EntityKind.COSTS, [Cost(id=1)])
    rentals = store.items(EntityKind.RENTALS)
    costs = store.items(EntityKind.COSTS)

    _insert(store, EntityKind.COSTS, Cost(id=2))

    assert store.items(EntityKind.RENTALS) is rentals
    assert store.items(EntityKind.COSTS) is not costs


def test_get_finds_entity_by_normalized_id() -> None:
    store = EntityStore()
    store.load(EntityKind.FLEET, [FleetItem(id=7, name="VX")])

    assert store.get(EntityKind.FLEET, "7").name == "VX"
    assert store.get(EntityKind.FLEET, 8) is None


def test_load_state_transitions() -> None:
    store = EntityStore()
    assert store.load_state(EntityKind.USERS) == LoadState.IDLE

    store.begin_load(EntityKind.USERS)
    assert store.load_state(EntityKind.USERS) == LoadState.LOADING
    with pytest.raises(JmsStateError):
        store.begin_load(EntityKind.USERS)

    store.fail_load(EntityKind.USERS)
    assert store.load_state(EntityKind.USERS) == LoadState.IDLE

    store.begin_load(EntityKind.USERS)
    store.load(EntityKind.USERS, [])
    assert store.load_state(EntityKind.USERS) == LoadState.LOADED


def test_listeners_receive_versions_until_unsubscribed() -> None:
    store = EntityStore()
    seen: list[int] = []
    unsubscribe = store.subscribe(seen.append)

    store.load(EntityKind.RENTALS, [Rental(id=1)])
    store.set_settings(price_table=PriceTable(half_day=300))
    unsubscribe()
    _insert(store, EntityKind.RENTALS, Rental(id=2))

    assert seen == [1, 2]
    assert store.version == 3
    assert store.price_table is not None
    assert store.price_table.half_day == 300.0


def test_set_settings_without_values_is_a_no_op() -> None:
    store = EntityStore()
    store.set_settings()
    assert store.version == 0
    assert store.company_profile is None


def test_store_event_requires_payload_for_op() -> None:
    with pytest.raises(ValidationError):
        StoreEvent(kind=EntityKind.RENTALS, op=StoreOp.INSERT)
    with pytest.raises(ValidationError):
        StoreEvent(kind=EntityKind.RENTALS, op=StoreOp.REMOVE)
