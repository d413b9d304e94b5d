"""Internal read operations for :class:`jmsfleet.client.JmsClient`.

These functions keep `client.py` small without changing the public API.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from jmsfleet._constants import SINGLETON_ID, TABLE_COMPANY_PROFILE, TABLE_PRICE_TABLE
from jmsfleet.exceptions import JmsError, JmsResourceNotFoundError
from jmsfleet.mapping.records import TABLES, map_rows
from jmsfleet.models import CompanyProfile, PriceTable
from jmsfleet.state.events import EntityKind

if TYPE_CHECKING:
    from jmsfleet.client import JmsClient

_logger = logging.getLogger(__name__)

# Tables that may not be provisioned yet; a missing table loads as empty.
OPTIONAL_KINDS: frozenset[EntityKind] = frozenset({EntityKind.LOCATIONS, EntityKind.FLEET, EntityKind.CHECKLISTS})

_ORDER_BY: dict[EntityKind, tuple[str, bool]] = {
    EntityKind.COSTS: ("date", False),
    EntityKind.LOCATIONS: ("name", True),
    EntityKind.FLEET: ("id", True),
}

_LOAD_FAILED = "Erro ao carregar dados"


async def load_kind(client: JmsClient, kind: EntityKind) -> tuple[Any, ...]:
    """Fetch the whole collection of *kind* into the store.

    Raises
    ------
    JmsError
        The fetch failed. The store keeps its previous collection and load
        state.
    """
    persistence = client._require_persistence()
    store = client.store
    order_by, ascending = _ORDER_BY.get(kind, (None, True))

    store.begin_load(kind)
    try:
        rows = await persistence.list(TABLES[kind], order_by=order_by, ascending=ascending)
    except JmsResourceNotFoundError:
        if kind not in OPTIONAL_KINDS:
            store.fail_load(kind)
            raise
        _logger.debug("Table %s is not provisioned, loading %s as empty", TABLES[kind], kind)
        rows = []
    except JmsError:
        store.fail_load(kind)
        raise

    store.load(kind, map_rows(kind, rows))
    return store.items(kind)


async def _load_reporting(client: JmsClient, kind: EntityKind) -> bool:
    try:
        await load_kind(client, kind)
    except JmsError as exc:
        _logger.warning("Loading %s failed: %s", kind, exc)
        _logger.debug("Load failure details", exc_info=exc)
        client.notifier.failure(f"{_LOAD_FAILED}: {exc}")
        return False
    return True


async def bootstrap(client: JmsClient) -> bool:
    """Load the subset needed before sign-in (the user accounts)."""
    return await _load_reporting(client, EntityKind.USERS)


async def load_settings(client: JmsClient) -> bool:
    """Load the singleton settings records. Missing tables or rows are fine."""
    persistence = client._require_persistence()
    ok = True
    loaded: dict[str, Any] = {}
    for table, model, key in (
        (TABLE_COMPANY_PROFILE, CompanyProfile, "company_profile"),
        (TABLE_PRICE_TABLE, PriceTable, "price_table"),
    ):
        try:
            row = await persistence.get_one(table, SINGLETON_ID)
        except JmsResourceNotFoundError:
            _logger.debug("Settings table %s is not provisioned", table)
            continue
        except JmsError as exc:
            _logger.warning("Loading %s failed: %s", table, exc)
            client.notifier.failure(f"{_LOAD_FAILED}: {exc}")
            ok = False
            continue
        if row is not None:
            loaded[key] = model.from_record(row)

    client.store.set_settings(**loaded)
    return ok


async def load_all(client: JmsClient) -> bool:
    """Full reload after sign-in: every collection plus the settings.

    Each kind is loaded independently; a failure of one does not keep
    the others from loading. Returns ``True`` when everything loaded.
    """
    results = [await _load_reporting(client, kind) for kind in EntityKind]
    results.append(await load_settings(client))
    return all(results)
