"""Predicate sets of the back-office screens.

Each ``*_predicates`` function maps the screen's filter values (as the
dropdowns and search boxes hold them) to predicates for
:func:`jmsfleet.views.query.apply_filters`. The ``*_table`` factories
return a ready :class:`~jmsfleet.views.query.TableView`.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any

from jmsfleet._constants import DEFAULT_PAGE_SIZE
from jmsfleet.mapping.normalize import utc_calendar_date
from jmsfleet.views.query import (
    Predicate,
    SortState,
    TableView,
    calendar_match,
    contains_member,
    equals,
    is_wildcard,
    text_search,
)

PERIOD_THIS_MONTH = "Este Mês"
PERIOD_LAST_MONTH = "Mês Passado"
STATUS_PAID = "Pago"
STATUS_PENDING = "Pendente"
FLEET_ACTIVE = "Ativos"
FLEET_INACTIVE = "Inativos"


def _today(filters: Mapping[str, Any]) -> date:
    today = filters.get("today")
    if isinstance(today, date):
        return today
    return datetime.now(UTC).date()


def period_match(field: str, period: Any, today: date) -> Predicate | None:
    """``"Este Mês"`` / ``"Mês Passado"`` relative to *today* (UTC dates)."""
    if is_wildcard(period):
        return None
    if period == PERIOD_THIS_MONTH:
        year, month = today.year, today.month
    elif period == PERIOD_LAST_MONTH:
        year, month = (today.year - 1, 12) if today.month == 1 else (today.year, today.month - 1)
    else:
        return None

    def _match(item: Any) -> bool:
        day = utc_calendar_date(getattr(item, field, None))
        return day is not None and day.year == year and day.month == month

    return _match


def paid_status(status: Any) -> Predicate | None:
    """``"Pago"`` keeps settled costs, ``"Pendente"`` the open ones."""
    if status == STATUS_PAID:
        return lambda item: bool(item.is_paid)
    if status == STATUS_PENDING:
        return lambda item: not item.is_paid
    return None


def user_predicates(filters: Mapping[str, Any]) -> list[Predicate | None]:
    return [
        text_search(filters.get("search"), "name", "email"),
        contains_member("roles", filters.get("role")),
        equals("status", filters.get("status")),
    ]


def rental_predicates(filters: Mapping[str, Any]) -> list[Predicate | None]:
    return [
        text_search(filters.get("search"), "client_name", "client_doc"),
        equals("status", filters.get("status")),
        equals("location", filters.get("location")),
        equals("rental_type", filters.get("rental_type")),
        calendar_match("date", month=filters.get("month"), year=filters.get("year")),
    ]


def cost_base_predicates(filters: Mapping[str, Any]) -> list[Predicate | None]:
    """Cost screen filters *without* the paid/pending status."""
    return [
        period_match("date", filters.get("period"), _today(filters)),
        text_search(filters.get("search"), "type", "investor"),
    ]


def cost_predicates(filters: Mapping[str, Any]) -> list[Predicate | None]:
    return [*cost_base_predicates(filters), paid_status(filters.get("status"))]


def financial_dashboard_predicates(filters: Mapping[str, Any]) -> list[Predicate | None]:
    return [
        calendar_match("date", year=filters.get("year")),
        equals("investor", filters.get("investor")),
        paid_status(filters.get("status")),
    ]


def checklist_predicates(filters: Mapping[str, Any]) -> list[Predicate | None]:
    return [
        text_search(filters.get("search"), "client_name", "id", "jet_ski"),
        equals("status_check_in", filters.get("status_check_in")),
        equals("status_check_out", filters.get("status_check_out")),
    ]


def fleet_predicates(filters: Mapping[str, Any]) -> list[Predicate | None]:
    active = filters.get("active")
    active_predicate: Predicate | None = None
    if active == FLEET_ACTIVE:
        active_predicate = lambda item: bool(item.is_active)  # noqa: E731
    elif active == FLEET_INACTIVE:
        active_predicate = lambda item: not item.is_active  # noqa: E731
    return [
        text_search(filters.get("search"), "name", "plate"),
        equals("status", filters.get("status")),
        equals("category", filters.get("category")),
        active_predicate,
    ]


def location_predicates(filters: Mapping[str, Any]) -> list[Predicate | None]:
    return [text_search(filters.get("search"), "name")]


def users_table(page_size: int = DEFAULT_PAGE_SIZE) -> TableView:
    return TableView(
        user_predicates,
        filters={"search": "", "role": "Todos Perfis", "status": "Todos Status"},
        page_size=page_size,
    )


def rentals_table(page_size: int = DEFAULT_PAGE_SIZE) -> TableView:
    return TableView(
        rental_predicates,
        filters={"search": "", "status": "Todos", "location": "Todas"},
        page_size=page_size,
    )


def costs_table(page_size: int = DEFAULT_PAGE_SIZE) -> TableView:
    return TableView(
        cost_predicates,
        filters={"search": "", "period": "Todos os Períodos", "status": "Status: Todos"},
        page_size=page_size,
    )


def checklists_table(page_size: int = DEFAULT_PAGE_SIZE) -> TableView:
    return TableView(checklist_predicates, filters={"search": ""}, page_size=page_size)


def fleet_table(page_size: int = DEFAULT_PAGE_SIZE) -> TableView:
    return TableView(fleet_predicates, filters={"search": ""}, sort=SortState(key="id"), page_size=page_size)


def locations_table(page_size: int = DEFAULT_PAGE_SIZE) -> TableView:
    return TableView(location_predicates, filters={"search": ""}, page_size=page_size)
