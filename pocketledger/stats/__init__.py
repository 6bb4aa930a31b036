"""Statistics package: time ranges, aggregation, budget usage."""

from pocketledger.stats.aggregation import (
    OTHER_CATEGORY,
    category_breakdown,
    chart_series,
    round_percent,
    totals,
)
from pocketledger.stats.budgets import budget_status, evaluate_budgets
from pocketledger.stats.ranges import (
    bounds,
    coerce_range,
    end_of_day,
    end_of_month,
    end_of_week,
    end_of_year,
    reference_time,
    start_of_day,
    start_of_month,
    start_of_week,
    start_of_year,
)
from pocketledger.stats.reports import LedgerReports

__all__ = [
    "OTHER_CATEGORY",
    "LedgerReports",
    "bounds",
    "budget_status",
    "category_breakdown",
    "chart_series",
    "coerce_range",
    "end_of_day",
    "end_of_month",
    "end_of_week",
    "end_of_year",
    "evaluate_budgets",
    "reference_time",
    "round_percent",
    "start_of_day",
    "start_of_month",
    "start_of_week",
    "start_of_year",
    "totals",
]
