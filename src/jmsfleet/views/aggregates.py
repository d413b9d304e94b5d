"""Financial and dashboard aggregates.

All functions are pure and take already filtered collections, except
:func:`cost_screen_summary` which applies the cost screen's base filters
itself so the summary cards ignore the table's paid/pending filter.
"""

from __future__ import annotations

import dataclasses
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import Any

from jmsfleet._constants import MONTH_LABELS
from jmsfleet.mapping.normalize import collation_key, utc_calendar_date
from jmsfleet.models import Cost, Rental, RentalStatus
from jmsfleet.views.query import apply_filters
from jmsfleet.views.screens import cost_base_predicates

GROUP_INVESTOR = "Grupo"
OTHERS_LABEL = "Outros"


@dataclasses.dataclass(frozen=True, slots=True)
class CostSummary:
    total: float
    paid: float
    pending_balance: float
    discounts: float
    count: int


@dataclasses.dataclass(frozen=True, slots=True)
class CategoryShare:
    name: str
    value: float
    percentage: float


@dataclasses.dataclass(frozen=True, slots=True)
class RentalDashboardStats:
    month_revenue: float
    year_revenue: float
    total_rentals: int
    by_status: dict[str, int]
    monthly_revenue: tuple[float, ...]
    labels: tuple[str, ...] = MONTH_LABELS


def summarize_costs(costs: Iterable[Cost]) -> CostSummary:
    """Total, paid, pending balance and discounts of *costs*.

    The pending balance only counts records not marked paid. Discounts are
    ``total - paid`` over every record, whatever its paid flag.
    """
    total = paid = pending = 0.0
    count = 0
    for cost in costs:
        count += 1
        total += cost.value
        paid += cost.paid_value
        if not cost.is_paid:
            pending += cost.value - cost.paid_value
    return CostSummary(total=total, paid=paid, pending_balance=pending, discounts=total - paid, count=count)


def cost_screen_summary(costs: Sequence[Cost], filters: Mapping[str, Any]) -> CostSummary:
    """Summary cards of the cost screen (period and search only)."""
    return summarize_costs(apply_filters(costs, cost_base_predicates(filters)))


def monthly_cost_totals(costs: Iterable[Cost]) -> tuple[float, ...]:
    """Sum of ``value`` per UTC calendar month, January first."""
    totals = [0.0] * 12
    for cost in costs:
        day = utc_calendar_date(cost.date)
        if day is not None:
            totals[day.month - 1] += cost.value
    return tuple(totals)


def available_years(costs: Iterable[Cost]) -> list[str]:
    """Distinct years of the dated records, most recent first."""
    years = {cost.date[:4] for cost in costs if cost.date}
    return sorted(years, key=int, reverse=True)


def available_investors(costs: Iterable[Cost]) -> list[str]:
    investors = {cost.investor for cost in costs if cost.investor}
    return sorted(investors, key=collation_key)


def investor_contributions(costs: Sequence[Cost], investors: Iterable[str] | None = None) -> list[tuple[str, float]]:
    """Paid amount per individual investor, largest first.

    The shared ``"Grupo"`` bucket is not an individual investor and is
    left out. Investors without payments are listed with ``0.0``.
    """
    names = investors if investors is not None else available_investors(costs)
    contributions: dict[str, float] = {name: 0.0 for name in names if name != GROUP_INVESTOR}
    for cost in costs:
        if cost.investor in contributions:
            contributions[cost.investor] += cost.paid_value
    return sorted(contributions.items(), key=lambda entry: entry[1], reverse=True)


def expense_by_category(costs: Sequence[Cost], *, top: int = 5) -> list[CategoryShare]:
    """Expense per category: the *top* largest plus an ``"Outros"`` bucket."""
    categories: dict[str, float] = {}
    for cost in costs:
        categories[cost.type] = categories.get(cost.type, 0.0) + cost.value

    ranked = sorted(categories.items(), key=lambda entry: entry[1], reverse=True)
    shown = ranked[:top]
    others = sum(value for _, value in ranked[top:])
    if others > 0:
        shown.append((OTHERS_LABEL, others))

    total = sum(cost.value for cost in costs) or 1.0
    return [CategoryShare(name=name, value=value, percentage=value / total * 100) for name, value in shown]


def rental_dashboard_stats(rentals: Iterable[Rental], today: date) -> RentalDashboardStats:
    """Revenue of *today*'s month and year, counts, and monthly series."""
    month_revenue = year_revenue = 0.0
    monthly = [0.0] * 12
    by_status: Counter[str] = Counter({status.value: 0 for status in RentalStatus})
    total = 0
    for rental in rentals:
        total += 1
        by_status[rental.status.value] += 1
        day = utc_calendar_date(rental.date)
        if day is None or day.year != today.year:
            continue
        year_revenue += rental.value
        monthly[day.month - 1] += rental.value
        if day.month == today.month:
            month_revenue += rental.value
    return RentalDashboardStats(
        month_revenue=month_revenue,
        year_revenue=year_revenue,
        total_rentals=total,
        by_status=dict(by_status),
        monthly_revenue=tuple(monthly),
    )
