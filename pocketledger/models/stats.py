"""
Derived View Models

Read-only results of the aggregation engine and the budget evaluator.
These are recomputed from the ledger on every request and are never
persisted.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from pocketledger.models.ledger import as_local


class RangeKey(str, Enum):
    """Granularity of an aggregation window."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class BudgetStatus(str, Enum):
    """How close spending is to a budget limit."""
    OK = "ok"
    WARNING = "warning"
    OVER = "over"


class StatsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RangeBounds(StatsModel):
    """Inclusive [from, to] window in local time."""

    from_: datetime = Field(
        ...,
        alias="from",
        description="First instant of the window (inclusive)"
    )
    to: datetime = Field(
        ...,
        description="Last instant of the window (inclusive)"
    )

    def contains(self, moment: datetime) -> bool:
        # Bounds are millisecond-precise
        moment = as_local(moment)
        moment = moment.replace(microsecond=moment.microsecond // 1000 * 1000)
        return self.from_ <= moment <= self.to


class RangeTotals(RangeBounds):
    """Income/expense totals over a window. Transfers are excluded."""

    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    net: Decimal = Decimal("0")


class ChartPoint(StatsModel):
    """One bucket of a chart series."""

    label: str
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")


class CategoryShare(StatsModel):
    """Expense total for one category and its share of all expenses."""

    category: str
    amount: Decimal
    percent: int = Field(ge=0, le=100)


class BudgetUsage(StatsModel):
    """A budget joined with the current month's spending."""

    category: str
    limit: Decimal
    created_at: datetime
    spent: Decimal
    remaining: Decimal
    percent: int = Field(ge=0, le=100)
    status: BudgetStatus
