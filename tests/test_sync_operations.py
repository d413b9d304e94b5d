from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from jmsfleet._client import commands as _commands
from jmsfleet.client import JmsClient
from jmsfleet.config import JmsConfig
from jmsfleet.exceptions import (
    JmsApiError,
    JmsAuthenticationError,
    JmsResourceNotFoundError,
    JmsStateError,
    JmsTransportError,
    JmsValidationError,
)
from jmsfleet.models import AppUser, Checklist, CompanyProfile, Cost, PriceTable, Rental, Role, UserStatus
from jmsfleet.state.events import EntityKind, LoadState
from jmsfleet.state.notifications import NotificationLevel, Notifier


class FakePersistence:
    """In-memory stand-in for the hosted CRUD store."""

    def __init__(self, tables: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.calls: list[tuple[Any, ...]] = []
        self.failures: dict[str, Exception] = {}
        self.missing: set[str] = set()
        self.echo = True
        self._next_id = 100

    def _check(self, op: str, table: str) -> None:
        if table in self.missing:
            raise JmsResourceNotFoundError(
                f"Table {table!r} is not available", code="PGRST205", table=table, status_code=404
            )
        if op in self.failures:
            raise self.failures[op]

    async def list(self, table: str, *, order_by: str | None = None, ascending: bool = True) -> list[dict[str, Any]]:
        self.calls.append(("list", table, order_by, ascending))
        self._check("list", table)
        return [dict(row) for row in self.tables.get(table, [])]

    async def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any] | None:
        self.calls.append(("insert", table, dict(record)))
        self._check("insert", table)
        row = dict(record)
        if "id" not in row:
            row["id"] = self._next_id
            self._next_id += 1
        self.tables.setdefault(table, []).append(row)
        return dict(row) if self.echo else None

    async def update(self, table: str, record: dict[str, Any], match_id: Any) -> None:
        self.calls.append(("update", table, dict(record), match_id))
        self._check("update", table)
        for row in self.tables.get(table, []):
            if row.get("id") == match_id:
                row.update(record)

    async def delete(self, table: str, match_id: Any) -> None:
        self.calls.append(("delete", table, match_id))
        self._check("delete", table)
        self.tables[table] = [row for row in self.tables.get(table, []) if row.get("id") != match_id]

    async def get_one(self, table: str, value: Any, *, column: str = "id") -> dict[str, Any] | None:
        self.calls.append(("get_one", table, value, column))
        self._check("get_one", table)
        for row in self.tables.get(table, []):
            if row.get(column) == value:
                return dict(row)
        return None

    async def upsert(self, table: str, record: dict[str, Any]) -> dict[str, Any] | None:
        self.calls.append(("upsert", table, dict(record)))
        self._check("upsert", table)
        self.tables[table] = [dict(record)]
        return dict(record) if self.echo else None

    def ops(self, op: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == op]


_MANAGER = {
    "id": 1,
    "full_name": "Gerente JMS",
    "email": "gerente@jms.com",
    "role": "Gerente",
    "status": "Ativo",
    "password": "admin",
}


def _make_client(tables: dict[str, list[dict[str, Any]]] | None = None) -> tuple[JmsClient, FakePersistence]:
    persistence = FakePersistence(tables)
    config = JmsConfig(supabase_url="https://example.supabase.co", api_key="service-key")
    client = JmsClient(config, persistence=persistence, notifier=Notifier(clock=lambda: 0.0))
    return client, persistence


# ----------------------------------------------------------------------
# Loading
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_load_all_maps_rows_and_treats_missing_optional_tables_as_empty() -> None:
    client, persistence = _make_client(
        {
            "app_users": [_MANAGER],
            "rentals": [{"id": 1, "client_name": "Ana", "value": "200"}],
            "costs": [{"id": 1, "type": "Taxa", "value": 50, "date": "2024-01-01"}],
            "company_profile": [{"id": 1, "business_name": "JMS"}],
        }
    )
    persistence.missing.update({"fleet", "checklists"})

    assert await client.load_all() is True

    store = client.store
    assert store.items(EntityKind.RENTALS)[0].value == 200.0
    assert store.items(EntityKind.FLEET) == ()
    assert store.load_state(EntityKind.CHECKLISTS) == LoadState.LOADED
    assert store.company_profile is not None
    assert store.company_profile.business_name == "JMS"
    assert store.price_table is None
    assert ("list", "costs", "date", False) in persistence.calls
    assert client.notifier.current is None


@pytest.mark.asyncio
async def test_missing_required_table_fails_and_restores_load_state() -> None:
    client, persistence = _make_client()
    persistence.missing.add("rentals")

    with pytest.raises(JmsResourceNotFoundError):
        await client.load(EntityKind.RENTALS)
    assert client.store.load_state(EntityKind.RENTALS) == LoadState.IDLE

    assert await client.load_all() is False
    notification = client.notifier.current
    assert notification is not None
    assert notification.level == NotificationLevel.FAILURE
    assert notification.message.startswith("Erro ao carregar dados")


# ----------------------------------------------------------------------
# Create / update / delete
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_rental_applies_echoed_row_after_insert() -> None:
    client, persistence = _make_client({"rentals": [{"id": 1, "client_name": "Ana"}]})
    await client.load(EntityKind.RENTALS)

    created = await client.create_rental(Rental(client_name="bruno costa", value=150))

    assert created is not None
    assert created.id == 100
    insert = persistence.ops("insert")[0]
    assert insert[1] == "rentals"
    assert "id" not in insert[2]
    assert insert[2]["client_initial"] == "BC"
    assert [rental.id for rental in client.store.items(EntityKind.RENTALS)] == [100, 1]
    assert client.notifier.current is not None
    assert client.notifier.current.message == "Locação salva com sucesso!"


@pytest.mark.asyncio
async def test_create_without_echo_uses_timestamp_id(monkeypatch: pytest.MonkeyPatch) -> None:
    client, persistence = _make_client()
    persistence.echo = False
    monkeypatch.setattr(_commands, "_now_ms", lambda: 1700000000000)

    created = await client.create_cost(Cost(type="Taxa", value=10, date="2024-01-01"))

    assert created is not None
    assert created.id == 1700000000000
    assert client.store.get(EntityKind.COSTS, 1700000000000) is created


@pytest.mark.asyncio
async def test_failed_create_leaves_store_untouched_and_notifies() -> None:
    client, persistence = _make_client()
    persistence.failures["insert"] = JmsApiError("rentals request failed", code="23502", table="rentals")
    version = client.store.version

    assert await client.create_rental(Rental(client_name="Ana")) is None

    assert client.store.items(EntityKind.RENTALS) == ()
    assert client.store.version == version
    notification = client.notifier.current
    assert notification is not None
    assert notification.is_failure
    assert notification.message.startswith("Erro ao salvar locação: ")


@pytest.mark.asyncio
async def test_failed_update_leaves_state_untouched() -> None:
    client, persistence = _make_client({"costs": [{"id": 1, "type": "Taxa", "value": 50, "date": "2024-01-01"}]})
    await client.load(EntityKind.COSTS)
    before = client.store.items(EntityKind.COSTS)
    persistence.failures["update"] = JmsTransportError("Request to PATCH costs failed", endpoint="PATCH costs")

    edited = before[0].model_copy(update={"value": 80.0})
    assert await client.update_cost(edited) is None

    assert client.store.items(EntityKind.COSTS) is before
    assert client.store.items(EntityKind.COSTS)[0].value == 50.0


@pytest.mark.asyncio
async def test_update_sends_record_without_id_and_replaces_entity() -> None:
    client, persistence = _make_client({"costs": [{"id": 1, "type": "Taxa", "value": 50, "date": "2024-01-01"}]})
    await client.load(EntityKind.COSTS)

    edited = client.store.items(EntityKind.COSTS)[0].model_copy(update={"value": 80.0, "is_paid": True})
    assert await client.update_cost(edited) is edited

    _, table, record, match_id = persistence.ops("update")[0]
    assert (table, match_id) == ("costs", 1)
    assert "id" not in record
    assert record["is_paid"] is True
    assert client.store.get(EntityKind.COSTS, 1).value == 80.0
    assert client.notifier.current is not None
    assert client.notifier.current.message == "Custo atualizado com sucesso!"


@pytest.mark.asyncio
async def test_update_without_id_is_rejected() -> None:
    client, persistence = _make_client()
    with pytest.raises(JmsStateError):
        await client.update_rental(Rental(client_name="Ana"))
    assert persistence.calls == []


@pytest.mark.asyncio
async def test_delete_removes_entity_after_confirmation() -> None:
    client, persistence = _make_client({"fleet": [{"id": 1, "name": "VX"}, {"id": 2, "name": "GTI"}]})
    await client.load(EntityKind.FLEET)

    assert await client.delete_fleet_item(1) is True
    assert [item.id for item in client.store.items(EntityKind.FLEET)] == [2]
    assert client.notifier.current is not None
    assert client.notifier.current.message == "Equipamento removido."

    persistence.failures["delete"] = JmsApiError("boom")
    assert await client.delete_fleet_item(2) is False
    assert [item.id for item in client.store.items(EntityKind.FLEET)] == [2]


@pytest.mark.asyncio
async def test_checklist_create_assigns_sequential_client_id() -> None:
    year = datetime.now(UTC).year
    client, persistence = _make_client(
        {"checklists": [{"id": f"#LOC-{year}-004", "client_name": "Ana", "jet_ski": "VX", "date": f"{year}-01-02"}]}
    )
    await client.load(EntityKind.CHECKLISTS)

    created = await client.create_checklist(Checklist(client_name="Bia", jet_ski="GTI", date=f"{year}-01-03"))

    assert created is not None
    assert created.id == f"#LOC-{year}-005"
    assert persistence.ops("insert")[0][2]["id"] == f"#LOC-{year}-005"
    assert client.store.items(EntityKind.CHECKLISTS)[0].id == f"#LOC-{year}-005"


def test_next_checklist_id_ignores_other_years_and_foreign_ids() -> None:
    existing = [Checklist(id="#LOC-2023-900"), Checklist(id="#LOC-2024-7"), Checklist(id="manual")]
    assert _commands.next_checklist_id(existing, year=2024) == "#LOC-2024-008"
    assert _commands.next_checklist_id([], year=2025) == "#LOC-2025-001"


# ----------------------------------------------------------------------
# Users and session
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_user_rejects_duplicate_active_email() -> None:
    client, persistence = _make_client({"app_users": [_MANAGER]})
    await client.load(EntityKind.USERS)

    duplicate = AppUser(name="Outro", email="GERENTE@jms.com", roles=frozenset({Role.FINANCE}), password="x")
    with pytest.raises(JmsValidationError) as exc_info:
        await client.create_user(duplicate)

    assert exc_info.value.field_errors == {"email": "Este e-mail já está cadastrado."}
    assert persistence.ops("insert") == []


@pytest.mark.asyncio
async def test_inactive_user_email_may_be_reused() -> None:
    client, _ = _make_client({"app_users": [{**_MANAGER, "status": "Inativo"}]})
    await client.load(EntityKind.USERS)

    created = await client.create_user(
        AppUser(name="Novo", email="gerente@jms.com", roles=frozenset({Role.MANAGER}), password="x")
    )
    assert created is not None
    assert created.status is UserStatus.ACTIVE


@pytest.mark.asyncio
async def test_editing_the_signed_in_user_refreshes_the_session() -> None:
    client, persistence = _make_client({"app_users": [_MANAGER]})
    await client.login("gerente@jms.com", "admin", load=False)

    stored = client.store.get(EntityKind.USERS, 1)
    edited = stored.model_copy(
        update={"name": "Gerente Geral", "roles": frozenset({Role.MANAGER, Role.FINANCE}), "password": ""}
    )
    updated = await client.update_user(edited)

    assert updated is not None
    assert updated.password == "admin"
    assert persistence.ops("update")[0][2]["password"] == "admin"
    assert client.session is not None
    assert client.session.name == "Gerente Geral"
    assert client.session.has_role(Role.FINANCE)


@pytest.mark.asyncio
async def test_login_rejects_wrong_password_and_role_less_users() -> None:
    client, _ = _make_client({"app_users": [_MANAGER, {**_MANAGER, "id": 2, "email": "sem@jms.com", "role": ""}]})

    with pytest.raises(JmsAuthenticationError) as exc_info:
        await client.login("gerente@jms.com", "wrong", load=False)
    assert str(exc_info.value) == "Credenciais inválidas. Tente novamente."

    with pytest.raises(JmsAuthenticationError) as exc_info:
        await client.login("sem@jms.com", "admin", load=False)
    assert str(exc_info.value) == "Usuário sem perfil de acesso."
    assert client.session is None


@pytest.mark.asyncio
async def test_login_loads_everything_and_logout_clears_session() -> None:
    client, _ = _make_client({"app_users": [_MANAGER], "rentals": [{"id": 1, "client_name": "Ana"}]})

    session = await client.login(" Gerente@JMS.com ", "admin")

    assert session.user_id == 1
    assert session.has_role(Role.MANAGER)
    assert len(client.store.items(EntityKind.RENTALS)) == 1
    client.logout()
    assert client.session is None


@pytest.mark.asyncio
async def test_sign_up_creates_visitor_account() -> None:
    client, persistence = _make_client({"app_users": [_MANAGER]})

    created = await client.sign_up(
        {"fullName": "Nova Pessoa", "email": "nova@jms.com", "password": "abc", "confirmPassword": "abc"}
    )

    assert created is not None
    assert created.roles == frozenset({Role.VISITOR})
    assert persistence.ops("insert")[0][2]["role"] == "Visitante"
    assert client.notifier.current is not None
    assert client.notifier.current.message == "Conta criada com sucesso!"


@pytest.mark.asyncio
async def test_sign_up_rejects_existing_email_and_bad_forms() -> None:
    client, persistence = _make_client({"app_users": [_MANAGER]})

    with pytest.raises(JmsValidationError):
        await client.sign_up(
            {"full_name": "X", "email": "gerente@jms.com", "password": "a", "confirm_password": "a"}
        )
    with pytest.raises(JmsValidationError) as exc_info:
        await client.sign_up({"full_name": "X", "email": "x@jms.com", "password": "a", "confirm_password": "b"})
    assert exc_info.value.field_errors == {"confirm_password": "As senhas não coincidem."}
    assert persistence.ops("insert") == []


@pytest.mark.asyncio
async def test_reset_password_updates_the_account() -> None:
    client, persistence = _make_client({"app_users": [_MANAGER]})

    assert await client.reset_password("gerente@jms.com", {"password": "nova", "confirm_password": "nova"}) is True
    assert persistence.tables["app_users"][0]["password"] == "nova"

    assert await client.reset_password("ninguem@jms.com", {"password": "a", "confirm_password": "a"}) is False
    assert client.notifier.current is not None
    assert client.notifier.current.message == "E-mail não encontrado."


# ----------------------------------------------------------------------
# Settings
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_save_company_profile_upserts_singleton() -> None:
    client, persistence = _make_client()

    saved = await client.save_company_profile(CompanyProfile(id=7, business_name="JMS Jet Ski", cnpj="00.000"))

    assert saved is not None
    assert persistence.ops("upsert")[0][2]["id"] == 1
    assert client.store.company_profile == saved
    assert client.notifier.current is not None
    assert client.notifier.current.message == "Perfil da empresa atualizado com sucesso!"


@pytest.mark.asyncio
async def test_save_price_table_failure_is_reported() -> None:
    client, persistence = _make_client()
    persistence.failures["upsert"] = JmsApiError("denied", code="42501")

    assert await client.save_price_table(PriceTable(half_day=300)) is None
    assert client.store.price_table is None
    assert client.notifier.current is not None
    assert client.notifier.current.message == "Erro ao salvar tabela de preços: denied"
