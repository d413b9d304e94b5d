"""Derived views: pure computations over entity store snapshots."""

from jmsfleet.views.aggregates import CostSummary, summarize_costs
from jmsfleet.views.query import Page, SortState, TableView, apply_filters, paginate, sort_items

__all__ = [
    "CostSummary",
    "Page",
    "SortState",
    "TableView",
    "apply_filters",
    "paginate",
    "sort_items",
    "summarize_costs",
]
