"""High-level async client for the back-office data service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from jmsfleet._client import auth as _auth
from jmsfleet._client import commands as _commands
from jmsfleet._client import reads as _reads
from jmsfleet._transport import RestTransport
from jmsfleet.config import JmsConfig
from jmsfleet.exceptions import JmsError
from jmsfleet.models import (
    AppUser,
    Checklist,
    CompanyProfile,
    Cost,
    FleetItem,
    JmsRecord,
    PriceTable,
    Rental,
    RentalLocation,
)
from jmsfleet.persistence import Persistence, RestPersistence
from jmsfleet.session import Session
from jmsfleet.state.events import EntityKind
from jmsfleet.state.notifications import Notifier
from jmsfleet.state.store import EntityStore
from jmsfleet.viewstate.forms import ResetPasswordForm, SignUpForm

_logger = logging.getLogger(__name__)


class JmsClient:
    """Async client owning the entity store and the sync operations.

    Usage::

        async with JmsClient(JmsConfig.from_env()) as client:
            await client.login("gerente@jms.com", "secret")
            rentals = client.store.items(EntityKind.RENTALS)

    The store, notifier and persistence collaborator can be injected;
    tests pass an in-memory persistence double instead of the REST one.
    """

    def __init__(
        self,
        config: JmsConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        persistence: Persistence | None = None,
        store: EntityStore | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._external_persistence = persistence is not None
        self._persistence = persistence
        self.store = store if store is not None else EntityStore()
        self.notifier = notifier if notifier is not None else Notifier(ttl=config.notification_ttl)
        self._session: Session | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> JmsClient:
        if self._persistence is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._persistence = RestPersistence(RestTransport(self._config, self._http_session))
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_persistence:
            self._persistence = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_persistence(self) -> Persistence:
        if self._persistence is None:
            raise JmsError("Client not initialized. Use 'async with JmsClient(...) as client:'")
        return self._persistence

    @property
    def config(self) -> JmsConfig:
        return self._config

    @property
    def session(self) -> Session | None:
        """Current-user projection, ``None`` when signed out."""
        return self._session

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str, *, load: bool = True) -> Session:
        return await _auth.login(self, email, password, load=load)

    def logout(self) -> None:
        _auth.logout(self)

    async def sign_up(self, data: Mapping[str, Any] | SignUpForm) -> AppUser | None:
        return await _auth.sign_up(self, data)

    async def find_account(self, email: str) -> AppUser | None:
        return await _auth.find_account(self, email)

    async def reset_password(self, email: str, data: Mapping[str, Any] | ResetPasswordForm) -> bool:
        return await _auth.reset_password(self, email, data)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def bootstrap(self) -> bool:
        """Load the user accounts needed before sign-in."""
        return await _reads.bootstrap(self)

    async def load_all(self) -> bool:
        return await _reads.load_all(self)

    async def load(self, kind: EntityKind) -> tuple[Any, ...]:
        return await _reads.load_kind(self, kind)

    # ------------------------------------------------------------------
    # Sync operations
    # ------------------------------------------------------------------

    async def create(self, kind: EntityKind, entity: JmsRecord) -> JmsRecord | None:
        if kind == EntityKind.USERS:
            return await self.create_user(entity)  # type: ignore[arg-type]
        return await _commands.create_entity(self, kind, entity)

    async def update(self, kind: EntityKind, entity: JmsRecord) -> JmsRecord | None:
        if kind == EntityKind.USERS:
            return await self.update_user(entity)  # type: ignore[arg-type]
        return await _commands.update_entity(self, kind, entity)

    async def delete(self, kind: EntityKind, entity_id: int | str) -> bool:
        return await _commands.delete_entity(self, kind, entity_id)

    async def create_user(self, user: AppUser) -> AppUser | None:
        return await _commands.create_user(self, user)

    async def update_user(self, user: AppUser) -> AppUser | None:
        return await _commands.update_user(self, user)

    async def delete_user(self, user_id: int | str) -> bool:
        return await _commands.delete_entity(self, EntityKind.USERS, user_id)

    async def create_rental(self, rental: Rental) -> JmsRecord | None:
        return await _commands.create_entity(self, EntityKind.RENTALS, rental)

    async def update_rental(self, rental: Rental) -> JmsRecord | None:
        return await _commands.update_entity(self, EntityKind.RENTALS, rental)

    async def delete_rental(self, rental_id: int | str) -> bool:
        return await _commands.delete_entity(self, EntityKind.RENTALS, rental_id)

    async def create_cost(self, cost: Cost) -> JmsRecord | None:
        return await _commands.create_entity(self, EntityKind.COSTS, cost)

    async def update_cost(self, cost: Cost) -> JmsRecord | None:
        return await _commands.update_entity(self, EntityKind.COSTS, cost)

    async def delete_cost(self, cost_id: int | str) -> bool:
        return await _commands.delete_entity(self, EntityKind.COSTS, cost_id)

    async def create_location(self, location: RentalLocation) -> JmsRecord | None:
        return await _commands.create_entity(self, EntityKind.LOCATIONS, location)

    async def update_location(self, location: RentalLocation) -> JmsRecord | None:
        return await _commands.update_entity(self, EntityKind.LOCATIONS, location)

    async def delete_location(self, location_id: int | str) -> bool:
        return await _commands.delete_entity(self, EntityKind.LOCATIONS, location_id)

    async def create_fleet_item(self, item: FleetItem) -> JmsRecord | None:
        return await _commands.create_entity(self, EntityKind.FLEET, item)

    async def update_fleet_item(self, item: FleetItem) -> JmsRecord | None:
        return await _commands.update_entity(self, EntityKind.FLEET, item)

    async def delete_fleet_item(self, item_id: int | str) -> bool:
        return await _commands.delete_entity(self, EntityKind.FLEET, item_id)

    async def create_checklist(self, checklist: Checklist) -> JmsRecord | None:
        return await _commands.create_entity(self, EntityKind.CHECKLISTS, checklist)

    async def update_checklist(self, checklist: Checklist) -> Checklist | None:
        return await _commands.update_checklist(self, checklist)

    async def delete_checklist(self, checklist_id: str) -> bool:
        return await _commands.delete_entity(self, EntityKind.CHECKLISTS, checklist_id)

    async def save_company_profile(self, profile: CompanyProfile) -> CompanyProfile | None:
        return await _commands.save_company_profile(self, profile)

    async def save_price_table(self, prices: PriceTable) -> PriceTable | None:
        return await _commands.save_price_table(self, prices)
