"""
Time-Range Resolver

Turns a range key and a reference instant into an inclusive
[from, to] window of naive local datetimes.

Weeks start on Monday. End bounds are 23:59:59.999 of their day;
RangeBounds.contains compares at millisecond precision, so nothing
later in that millisecond falls between two windows.
"""

import calendar
from datetime import datetime, timedelta
from typing import Optional, Union

from pocketledger.models.ledger import as_local
from pocketledger.models.stats import RangeBounds, RangeKey


def reference_time(ref: Optional[datetime] = None) -> datetime:
    """`ref` as naive local time, or now when omitted."""
    return datetime.now() if ref is None else as_local(ref)


def coerce_range(range_: Union[RangeKey, str]) -> RangeKey:
    """Accept a RangeKey or its string value."""
    try:
        return RangeKey(range_)
    except ValueError:
        raise ValueError(
            f"Unknown range {range_!r}; expected one of "
            f"{', '.join(key.value for key in RangeKey)}"
        ) from None


def start_of_day(d: datetime) -> datetime:
    return d.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(d: datetime) -> datetime:
    return d.replace(hour=23, minute=59, second=59, microsecond=999000)


def start_of_week(d: datetime) -> datetime:
    # weekday(): Monday == 0
    return start_of_day(d - timedelta(days=d.weekday()))


def end_of_week(d: datetime) -> datetime:
    return end_of_day(start_of_week(d) + timedelta(days=6))


def start_of_month(d: datetime) -> datetime:
    return start_of_day(d.replace(day=1))


def end_of_month(d: datetime) -> datetime:
    last_day = calendar.monthrange(d.year, d.month)[1]
    return end_of_day(d.replace(day=last_day))


def start_of_year(d: datetime) -> datetime:
    return start_of_day(d.replace(month=1, day=1))


def end_of_year(d: datetime) -> datetime:
    return end_of_day(d.replace(month=12, day=31))


_RESOLVERS = {
    RangeKey.DAY: (start_of_day, end_of_day),
    RangeKey.WEEK: (start_of_week, end_of_week),
    RangeKey.MONTH: (start_of_month, end_of_month),
    RangeKey.YEAR: (start_of_year, end_of_year),
}


def bounds(range_: Union[RangeKey, str], ref: Optional[datetime] = None) -> RangeBounds:
    """
    Inclusive window of `range_` containing `ref`.

    Args:
        range_: day, week, month or year
        ref: Reference instant; defaults to now. Aware values are
            converted to local time first.

    Returns:
        RangeBounds with both ends inclusive
    """
    start, end = _RESOLVERS[coerce_range(range_)]
    moment = reference_time(ref)
    return RangeBounds(from_=start(moment), to=end(moment))
