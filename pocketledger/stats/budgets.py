"""
Budget Evaluator

Joins each budget with the expenses of the current calendar month.
Budgets are always evaluated against the month containing `now`,
independent of whatever range a caller is displaying.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from pocketledger.models.ledger import Budget, Transaction, TransactionType
from pocketledger.models.stats import BudgetStatus, BudgetUsage, RangeKey
from pocketledger.stats.aggregation import round_percent
from pocketledger.stats.ranges import bounds


DEFAULT_WARNING_PERCENT = 80


def budget_status(percent: int, warning_percent: int = DEFAULT_WARNING_PERCENT) -> BudgetStatus:
    if percent >= 100:
        return BudgetStatus.OVER
    if percent >= warning_percent:
        return BudgetStatus.WARNING
    return BudgetStatus.OK


def evaluate_budgets(
    budgets: Iterable[Budget],
    transactions: Iterable[Transaction],
    now: Optional[datetime] = None,
    warning_percent: int = DEFAULT_WARNING_PERCENT,
) -> list[BudgetUsage]:
    """
    Compute spending against every budget for the month of `now`.

    Args:
        budgets: Budgets to evaluate, output keeps their order
        transactions: All transactions; only this month's expenses count
        now: Reference instant, defaults to the current time
        warning_percent: Usage percent at which status becomes warning

    Returns:
        One BudgetUsage per budget
    """
    month = bounds(RangeKey.MONTH, now)

    spent_by_category: dict[str, Decimal] = {}
    for tx in transactions:
        if tx.type != TransactionType.EXPENSE or tx.category is None:
            continue
        if not month.contains(tx.created_at):
            continue
        spent_by_category[tx.category] = spent_by_category.get(tx.category, Decimal("0")) + tx.amount

    usage = []
    for budget in budgets:
        spent = spent_by_category.get(budget.category, Decimal("0"))
        percent = min(100, round_percent(spent, budget.limit))

        usage.append(BudgetUsage(
            category=budget.category,
            limit=budget.limit,
            created_at=budget.created_at,
            spent=spent,
            remaining=max(Decimal("0"), budget.limit - spent),
            percent=percent,
            status=budget_status(percent, warning_percent),
        ))

    return usage
