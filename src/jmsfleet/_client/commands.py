"""Internal sync operations for :class:`jmsfleet.client.JmsClient`.

Every operation follows the same confirm-then-apply protocol: serialize,
call the persistence collaborator, and only touch the entity store once
the call succeeded. Failures are logged, notified and reported through
the return value (``None`` / ``False``); they are never retried.
"""

from __future__ import annotations

import dataclasses
import logging
import re
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from jmsfleet._constants import SINGLETON_ID, TABLE_COMPANY_PROFILE, TABLE_PRICE_TABLE
from jmsfleet.exceptions import JmsError, JmsStateError, JmsValidationError
from jmsfleet.mapping.records import TABLES, to_record, to_view_model
from jmsfleet.models import AppUser, Checklist, CompanyProfile, JmsRecord, PriceTable
from jmsfleet.state.events import EntityKind, StoreEvent, StoreOp

if TYPE_CHECKING:
    from jmsfleet.client import JmsClient

_logger = logging.getLogger(__name__)

_CHECKLIST_ID = re.compile(r"^#LOC-(\d{4})-(\d+)$")


@dataclasses.dataclass(frozen=True, slots=True)
class _Messages:
    created: str
    updated: str
    deleted: str
    save_failed: str
    delete_failed: str


_MESSAGES: dict[EntityKind, _Messages] = {
    EntityKind.USERS: _Messages(
        created="Usuário salvo com sucesso!",
        updated="Usuário salvo com sucesso!",
        deleted="Usuário excluído com sucesso!",
        save_failed="Erro ao salvar usuário",
        delete_failed="Erro ao excluir usuário",
    ),
    EntityKind.RENTALS: _Messages(
        created="Locação salva com sucesso!",
        updated="Locação salva com sucesso!",
        deleted="Locação excluída com sucesso!",
        save_failed="Erro ao salvar locação",
        delete_failed="Erro ao excluir locação",
    ),
    EntityKind.COSTS: _Messages(
        created="Custo adicionado com sucesso!",
        updated="Custo atualizado com sucesso!",
        deleted="Custo excluído com sucesso!",
        save_failed="Erro ao salvar custo",
        delete_failed="Erro ao excluir custo",
    ),
    EntityKind.LOCATIONS: _Messages(
        created="Local adicionado com sucesso!",
        updated="Local atualizado com sucesso!",
        deleted="Local excluído com sucesso!",
        save_failed="Erro ao salvar local",
        delete_failed="Erro ao excluir local",
    ),
    EntityKind.FLEET: _Messages(
        created="Jet Ski adicionado!",
        updated="Jet Ski atualizado!",
        deleted="Equipamento removido.",
        save_failed="Erro ao salvar Jet Ski",
        delete_failed="Erro ao excluir",
    ),
    EntityKind.CHECKLISTS: _Messages(
        created="Checklist salvo com sucesso!",
        updated="Checklist atualizado com sucesso!",
        deleted="Checklist excluído com sucesso!",
        save_failed="Erro ao salvar checklist",
        delete_failed="Erro ao excluir checklist",
    ),
}

DUPLICATE_EMAIL_MESSAGE = "Este e-mail já está cadastrado."


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


def _report_failure(client: JmsClient, message: str, exc: JmsError) -> None:
    _logger.warning("%s: %s", message, exc)
    _logger.debug("Persistence failure details", exc_info=exc)
    client.notifier.failure(f"{message}: {exc}")


def next_checklist_id(existing: Any, *, year: int | None = None) -> str:
    """Next free ``#LOC-<year>-<n>`` id among *existing* checklists."""
    year = year if year is not None else datetime.now(UTC).year
    highest = 0
    for checklist in existing:
        match = _CHECKLIST_ID.match(str(getattr(checklist, "id", "") or ""))
        if match and int(match.group(1)) == year:
            highest = max(highest, int(match.group(2)))
    return f"#LOC-{year}-{highest + 1:03d}"


def ensure_unique_email(client: JmsClient, user: AppUser) -> None:
    """Reject *user* when another active user already has the email."""
    if not user.is_active or not user.email:
        return
    email = user.email.casefold()
    for other in client.store.items(EntityKind.USERS):
        if other.is_active and other.email.casefold() == email and other.id != user.id:
            raise JmsValidationError(DUPLICATE_EMAIL_MESSAGE, field_errors={"email": DUPLICATE_EMAIL_MESSAGE})


# ----------------------------------------------------------------------
# Generic protocol
# ----------------------------------------------------------------------


async def create_entity(
    client: JmsClient,
    kind: EntityKind,
    entity: JmsRecord,
    *,
    success_message: str | None = None,
) -> JmsRecord | None:
    """Insert *entity*; on success the mapped (echoed) row enters the store."""
    persistence = client._require_persistence()
    messages = _MESSAGES[kind]

    if kind == EntityKind.CHECKLISTS and entity.id is None:
        entity = entity.model_copy(update={"id": next_checklist_id(client.store.items(kind))})

    record = to_record(kind, entity)
    try:
        echoed = await persistence.insert(TABLES[kind], record)
    except JmsError as exc:
        _report_failure(client, messages.save_failed, exc)
        return None

    created = to_view_model(kind, echoed) if echoed else entity
    if created.id is None:
        # Service did not echo a key; a timestamp id stands in until the next reload.
        created = created.model_copy(update={"id": _now_ms()})

    client.store.apply(StoreEvent(kind=kind, op=StoreOp.INSERT, entity=created))
    client.notifier.success(success_message or messages.created)
    return created


async def update_entity(
    client: JmsClient,
    kind: EntityKind,
    entity: JmsRecord,
    *,
    success_message: str | None = None,
) -> JmsRecord | None:
    """Update the row matching ``entity.id`` and replace it in the store."""
    if entity.id is None:
        raise JmsStateError(f"Cannot update a {kind} entity without an id")
    persistence = client._require_persistence()
    messages = _MESSAGES[kind]

    record = to_record(kind, entity, include_id=False)
    try:
        await persistence.update(TABLES[kind], record, entity.id)
    except JmsError as exc:
        _report_failure(client, messages.save_failed, exc)
        return None

    client.store.apply(StoreEvent(kind=kind, op=StoreOp.REPLACE, entity=entity))
    client.notifier.success(success_message or messages.updated)
    return entity


async def delete_entity(
    client: JmsClient,
    kind: EntityKind,
    entity_id: int | str,
    *,
    success_message: str | None = None,
) -> bool:
    """Delete the row matching *entity_id* and remove it from the store."""
    persistence = client._require_persistence()
    messages = _MESSAGES[kind]

    try:
        await persistence.delete(TABLES[kind], entity_id)
    except JmsError as exc:
        _report_failure(client, messages.delete_failed, exc)
        return False

    client.store.apply(StoreEvent(kind=kind, op=StoreOp.REMOVE, entity_id=entity_id))
    client.notifier.success(success_message or messages.deleted)
    return True


# ----------------------------------------------------------------------
# Kind-specific operations
# ----------------------------------------------------------------------


async def create_user(client: JmsClient, user: AppUser, *, success_message: str | None = None) -> AppUser | None:
    ensure_unique_email(client, user)
    created = await create_entity(client, EntityKind.USERS, user, success_message=success_message)
    return created if isinstance(created, AppUser) else None


async def update_user(client: JmsClient, user: AppUser) -> AppUser | None:
    """Update a user, keeping the stored password when none was typed.

    When the edited user is the signed-in identity, the session projection
    picks up the new name, avatar and roles.
    """
    ensure_unique_email(client, user)
    if not user.password:
        existing = client.store.get(EntityKind.USERS, user.id)
        if existing is not None and existing.password:
            user = user.model_copy(update={"password": existing.password})

    updated = await update_entity(client, EntityKind.USERS, user)
    if not isinstance(updated, AppUser):
        return None

    session = client.session
    if session is not None and session.matches(updated):
        client._session = session.with_user_changes(updated)
        _logger.debug("Session projection refreshed for %s", session.email)
    return updated


async def update_checklist(client: JmsClient, checklist: Checklist) -> Checklist | None:
    updated = await update_entity(client, EntityKind.CHECKLISTS, checklist)
    return updated if isinstance(updated, Checklist) else None


async def save_company_profile(client: JmsClient, profile: CompanyProfile) -> CompanyProfile | None:
    """Upsert the singleton company profile (id is forced to 1)."""
    persistence = client._require_persistence()
    profile = profile.model_copy(update={"id": SINGLETON_ID})
    try:
        echoed = await persistence.upsert(TABLE_COMPANY_PROFILE, profile.to_record())
    except JmsError as exc:
        _report_failure(client, "Erro ao salvar perfil", exc)
        return None

    saved = CompanyProfile.from_record(echoed) if echoed else profile
    client.store.set_settings(company_profile=saved)
    client.notifier.success("Perfil da empresa atualizado com sucesso!")
    return saved


async def save_price_table(client: JmsClient, prices: PriceTable) -> PriceTable | None:
    """Upsert the singleton price table (id is forced to 1)."""
    persistence = client._require_persistence()
    prices = prices.model_copy(update={"id": SINGLETON_ID})
    try:
        echoed = await persistence.upsert(TABLE_PRICE_TABLE, prices.to_record())
    except JmsError as exc:
        _report_failure(client, "Erro ao salvar tabela de preços", exc)
        return None

    saved = PriceTable.from_record(echoed) if echoed else prices
    client.store.set_settings(price_table=saved)
    client.notifier.success("Tabela de preços atualizada com sucesso!")
    return saved
