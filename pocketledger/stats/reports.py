"""
Ledger Reports

Read-side facade over the aggregation engine and the budget evaluator.

Every call reads the store's current transactions and recomputes.
Nothing is cached, so a report can never be stale after a mutation.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Union

from pocketledger.config import LedgerSettings
from pocketledger.models.stats import (
    BudgetUsage,
    CategoryShare,
    ChartPoint,
    RangeKey,
    RangeTotals,
)
from pocketledger.stats.aggregation import (
    category_breakdown,
    chart_series,
    round_percent,
    totals,
)
from pocketledger.stats.budgets import evaluate_budgets

if TYPE_CHECKING:
    from pocketledger.ledger.store import LedgerStore


class LedgerReports:
    """
    Pull-based statistics over a LedgerStore.

    GUARANTEES:
    - Only returns figures computed from stored transactions
    - Empty windows yield zero totals, never missing data
    """

    def __init__(self, store: "LedgerStore", settings: Optional[LedgerSettings] = None):
        self._store = store
        self._settings = settings or LedgerSettings()

    def totals(self, range_: Union[RangeKey, str], ref: Optional[datetime] = None) -> RangeTotals:
        return totals(self._store.transactions(), range_, ref)

    def chart(self, range_: Union[RangeKey, str], ref: Optional[datetime] = None) -> list[ChartPoint]:
        return chart_series(self._store.transactions(), range_, ref)

    def categories(
        self,
        range_: Union[RangeKey, str],
        ref: Optional[datetime] = None,
    ) -> list[CategoryShare]:
        return category_breakdown(self._store.transactions(), range_, ref)

    def budget_usage(self, now: Optional[datetime] = None) -> list[BudgetUsage]:
        return evaluate_budgets(
            self._store.budgets(),
            self._store.transactions(),
            now=now,
            warning_percent=self._settings.budget_warning_percent,
        )

    def spending_ratio(self, range_: Union[RangeKey, str], ref: Optional[datetime] = None) -> int:
        """
        Expense as a percent of income over the window.

        Income below 1 is treated as 1 and the result is capped at 100,
        so overspending (or expenses with no income) reads as 100.
        """
        window = self.totals(range_, ref)
        return min(100, round_percent(window.expense, max(window.income, Decimal("1"))))
