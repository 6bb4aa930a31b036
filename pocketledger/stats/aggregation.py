"""
Aggregation Engine

Pure functions over a list of transactions. Nothing here is cached;
callers recompute from the store's current transactions whenever
they need a fresh view.

Transfers move money between the user's own wallets, so they never
count as income or expense.
"""

import calendar
from collections import defaultdict
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Union

from pocketledger.models.ledger import Transaction, TransactionType
from pocketledger.models.stats import (
    CategoryShare,
    ChartPoint,
    RangeKey,
    RangeTotals,
)
from pocketledger.stats.ranges import reference_time, bounds, coerce_range


OTHER_CATEGORY = "Other"

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTH_LABELS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def round_percent(part: Decimal, whole: Decimal) -> int:
    """part/whole as a whole percent, halves rounded up. 0 when whole is 0."""
    if not whole:
        return 0
    return int((part / whole * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _clamp(n: int, low: int, high: int) -> int:
    return max(low, min(high, n))


def totals(
    transactions: Iterable[Transaction],
    range_: Union[RangeKey, str],
    ref: Optional[datetime] = None,
) -> RangeTotals:
    """Sum income and expense inside the window."""
    window = bounds(range_, ref)

    income = Decimal("0")
    expense = Decimal("0")

    for tx in transactions:
        if not window.contains(tx.created_at):
            continue
        if tx.type == TransactionType.INCOME:
            income += tx.amount
        elif tx.type == TransactionType.EXPENSE:
            expense += tx.amount

    return RangeTotals(
        from_=window.from_,
        to=window.to,
        income=income,
        expense=expense,
        net=income - expense,
    )


def _labels(range_: RangeKey, ref: datetime) -> list[str]:
    if range_ == RangeKey.DAY:
        return [str(hour) for hour in range(24)]
    if range_ == RangeKey.WEEK:
        return list(WEEKDAY_LABELS)
    if range_ == RangeKey.MONTH:
        days = calendar.monthrange(ref.year, ref.month)[1]
        return [str(day) for day in range(1, days + 1)]
    return list(MONTH_LABELS)


def _bucket(range_: RangeKey, moment: datetime, size: int) -> int:
    if range_ == RangeKey.DAY:
        index = moment.hour
    elif range_ == RangeKey.WEEK:
        index = moment.weekday()
    elif range_ == RangeKey.MONTH:
        index = moment.day - 1
    else:
        index = moment.month - 1
    return _clamp(index, 0, size - 1)


def chart_series(
    transactions: Iterable[Transaction],
    range_: Union[RangeKey, str],
    ref: Optional[datetime] = None,
) -> list[ChartPoint]:
    """
    Bucketed income/expense for charting.

    - day: 24 hourly buckets labelled "0".."23"
    - week: 7 buckets Mon..Sun
    - month: one bucket per day, "1".."N"
    - year: 12 buckets Jan..Dec
    """
    range_ = coerce_range(range_)
    moment = reference_time(ref)
    window = bounds(range_, moment)

    points = [ChartPoint(label=label) for label in _labels(range_, moment)]

    for tx in transactions:
        if tx.type == TransactionType.TRANSFER:
            continue
        if not window.contains(tx.created_at):
            continue

        point = points[_bucket(range_, tx.created_at, len(points))]
        if tx.type == TransactionType.INCOME:
            point.income += tx.amount
        else:
            point.expense += tx.amount

    return points


def category_breakdown(
    transactions: Iterable[Transaction],
    range_: Union[RangeKey, str],
    ref: Optional[datetime] = None,
) -> list[CategoryShare]:
    """
    In-window expenses grouped by category, largest first.

    Expenses without a category are grouped under "Other".
    """
    window = bounds(range_, ref)

    amounts: dict[str, Decimal] = defaultdict(Decimal)
    for tx in transactions:
        if tx.type != TransactionType.EXPENSE:
            continue
        if not window.contains(tx.created_at):
            continue
        amounts[tx.category or OTHER_CATEGORY] += tx.amount

    total = sum(amounts.values(), Decimal("0"))

    shares = [
        CategoryShare(
            category=category,
            amount=amount,
            percent=round_percent(amount, total),
        )
        for category, amount in amounts.items()
    ]
    # sorted() is stable: ties keep first-seen order
    return sorted(shares, key=lambda share: share.amount, reverse=True)
