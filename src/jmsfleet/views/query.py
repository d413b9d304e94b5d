"""Generic filter / sort / paginate utility.

Everything here is pure: functions take a snapshot of a collection plus
parameters and return new sequences. :class:`TableView` only adds the
per-table parameter state (filters, sort, page) and memoization.

Conventions:

* A filter whose value is a wildcard (``"Todos"``, ``"Todos Status"`` and
  the like, or empty) is a no-op and builds no predicate.
* ``None`` and ``""`` count as missing values when sorting; they always
  go last, whatever the direction.
* An empty result has ``0`` pages and an empty page ``1`` flagged with
  ``has_results=False``.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from jmsfleet._constants import DEFAULT_PAGE_SIZE, MONTH_LABELS, WILDCARDS
from jmsfleet.mapping.normalize import collation_key, safe_int, utc_calendar_date

_logger = logging.getLogger(__name__)

Predicate = Callable[[Any], bool]
PredicateBuilder = Callable[[Mapping[str, Any]], Iterable[Predicate | None]]


def is_wildcard(value: Any) -> bool:
    """Whether a filter value means "match everything"."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in WILDCARDS
    return False


def _field_text(item: Any, field: str) -> str:
    value = getattr(item, field, None)
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        return str(value.value)
    return str(value)


# ----------------------------------------------------------------------
# Predicates
# ----------------------------------------------------------------------


def text_search(term: str | None, *fields: str) -> Predicate | None:
    """Case-insensitive substring match over any of *fields*."""
    if term is None or not term.strip():
        return None
    needle = term.strip().casefold()

    def _match(item: Any) -> bool:
        return any(needle in _field_text(item, field).casefold() for field in fields)

    return _match


def equals(field: str, value: Any) -> Predicate | None:
    """Exact match on *field*; wildcards disable the predicate."""
    if is_wildcard(value):
        return None
    wanted = value.value if isinstance(value, enum.Enum) else value

    def _match(item: Any) -> bool:
        current = getattr(item, field, None)
        if isinstance(current, enum.Enum):
            current = current.value
        return bool(current == wanted)

    return _match


def contains_member(field: str, value: Any) -> Predicate | None:
    """Set membership on a collection field (e.g. a user's roles)."""
    if is_wildcard(value):
        return None
    wanted = value.value if isinstance(value, enum.Enum) else value

    def _match(item: Any) -> bool:
        members = getattr(item, field, None) or ()
        return any((member.value if isinstance(member, enum.Enum) else member) == wanted for member in members)

    return _match


def month_number(value: Any) -> int | None:
    """Month filter value (``3``, ``"3"``, ``"Mar"``) to ``1..12``."""
    if isinstance(value, str):
        label = value.strip()[:3].casefold()
        for index, month_label in enumerate(MONTH_LABELS, start=1):
            if month_label.casefold() == label:
                return index
    number = safe_int(value)
    if number is not None and 1 <= number <= 12:
        return number
    return None


def calendar_match(field: str, *, month: Any = None, year: Any = None) -> Predicate | None:
    """Match the UTC calendar month and/or year of a stored date."""
    wanted_month = None if is_wildcard(month) else month_number(month)
    wanted_year = None if is_wildcard(year) else safe_int(year)
    if wanted_month is None and wanted_year is None:
        return None

    def _match(item: Any) -> bool:
        day = utc_calendar_date(getattr(item, field, None))
        if day is None:
            return False
        if wanted_month is not None and day.month != wanted_month:
            return False
        return wanted_year is None or day.year == wanted_year

    return _match


def apply_filters(items: Iterable[Any], predicates: Iterable[Predicate | None]) -> list[Any]:
    """Keep the items satisfying every (non-``None``) predicate."""
    active = [predicate for predicate in predicates if predicate is not None]
    if not active:
        return list(items)
    return [item for item in items if all(predicate(item) for predicate in active)]


# ----------------------------------------------------------------------
# Sorting
# ----------------------------------------------------------------------


@dataclasses.dataclass(frozen=True, slots=True)
class SortState:
    """Active sort column and direction of one table."""

    key: str | None = None
    ascending: bool = True

    def toggle(self, key: str) -> SortState:
        """Header click: flip direction on the active key, else sort ascending."""
        if key == self.key:
            return SortState(key=key, ascending=not self.ascending)
        return SortState(key=key, ascending=True)


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _sort_key(value: Any) -> tuple[int, Any]:
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        return (0, value)
    if isinstance(value, str):
        return (1, collation_key(value))
    return (2, collation_key(str(value)))


def sort_items(
    items: Iterable[Any],
    key: str | None,
    *,
    ascending: bool = True,
    key_func: Callable[[Any], Any] | None = None,
) -> list[Any]:
    """Sort by attribute *key* (or *key_func*), missing values last.

    Descending order is the exact reverse of ascending order over the
    non-missing values.
    """
    materialized = list(items)
    if key is None and key_func is None:
        return materialized

    def _value(item: Any) -> Any:
        return key_func(item) if key_func is not None else getattr(item, key or "", None)

    present = [item for item in materialized if not _is_missing(_value(item))]
    missing = [item for item in materialized if _is_missing(_value(item))]
    ordered = sorted(present, key=lambda item: _sort_key(_value(item)))
    if not ascending:
        ordered.reverse()
    return ordered + missing


# ----------------------------------------------------------------------
# Pagination
# ----------------------------------------------------------------------


def page_count(total_items: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    return math.ceil(total_items / page_size) if total_items > 0 else 0


def clamp_page(page: int, total_pages: int) -> int:
    """Clamp *page* into ``[1, max(total_pages, 1)]``."""
    return max(1, min(page, max(total_pages, 1)))


@dataclasses.dataclass(frozen=True, slots=True)
class Page:
    items: tuple[Any, ...]
    number: int
    total_pages: int
    total_items: int
    page_size: int

    @property
    def has_results(self) -> bool:
        return self.total_items > 0

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages

    @property
    def start_index(self) -> int:
        """1-based index of the first item shown (``0`` when empty)."""
        return (self.number - 1) * self.page_size + 1 if self.items else 0

    @property
    def end_index(self) -> int:
        return self.start_index + len(self.items) - 1 if self.items else 0


def paginate(items: Sequence[Any], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Page:
    total = len(items)
    pages = page_count(total, page_size)
    number = clamp_page(page, pages)
    start = (number - 1) * page_size
    return Page(
        items=tuple(items[start : start + page_size]),
        number=number,
        total_pages=pages,
        total_items=total,
        page_size=page_size,
    )


# ----------------------------------------------------------------------
# Table state
# ----------------------------------------------------------------------


class TableView:
    """Filter/sort/page state of one table, memoized on its inputs.

    *build_predicates* turns the current filter values into predicates
    (see :mod:`jmsfleet.views.screens`). Rendering the same snapshot
    object with unchanged parameters returns the cached :class:`Page`.
    """

    def __init__(
        self,
        build_predicates: PredicateBuilder,
        *,
        filters: Mapping[str, Any] | None = None,
        sort: SortState | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._build_predicates = build_predicates
        self._filters: dict[str, Any] = dict(filters or {})
        self._sort = sort or SortState()
        self._page_size = page_size
        self._page = 1
        self._total_pages = 0
        self._memo_source: Sequence[Any] | None = None
        self._memo_key: tuple[Any, ...] | None = None
        self._memo_filtered: list[Any] = []
        self._memo_page: Page | None = None

    @property
    def filters(self) -> dict[str, Any]:
        return dict(self._filters)

    @property
    def sort(self) -> SortState:
        return self._sort

    @property
    def page(self) -> int:
        return self._page

    def set_filter(self, name: str, value: Any) -> None:
        """Change one filter; any effective change returns to page 1."""
        if self._filters.get(name) == value:
            return
        self._filters[name] = value
        self._page = 1

    def sort_by(self, key: str) -> SortState:
        self._sort = self._sort.toggle(key)
        return self._sort

    def go_to(self, page: int) -> int:
        self._page = clamp_page(page, self._total_pages)
        return self._page

    def next_page(self) -> int:
        return self.go_to(self._page + 1)

    def previous_page(self) -> int:
        return self.go_to(self._page - 1)

    def _key(self) -> tuple[Any, ...]:
        return (tuple(sorted(self._filters.items())), self._sort, self._page_size)

    def filtered(self, items: Sequence[Any]) -> list[Any]:
        """Filtered and sorted rows, before pagination."""
        key = self._key()
        if self._memo_source is items and self._memo_key == key:
            return self._memo_filtered
        rows = apply_filters(items, self._build_predicates(self._filters))
        rows = sort_items(rows, self._sort.key, ascending=self._sort.ascending)
        self._memo_source = items
        self._memo_key = key
        self._memo_filtered = rows
        self._memo_page = None
        return rows

    def render(self, items: Sequence[Any]) -> Page:
        rows = self.filtered(items)
        cached = self._memo_page
        if cached is not None and cached.number == self._page:
            return cached
        page = paginate(rows, self._page, self._page_size)
        self._total_pages = page.total_pages
        self._page = page.number
        self._memo_page = page
        return page
