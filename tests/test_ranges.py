"""Tests for the time-range resolver."""

import pytest
from datetime import datetime, timezone

from pocketledger.models import RangeKey
from pocketledger.stats import (
    bounds,
    end_of_day,
    end_of_month,
    end_of_week,
    start_of_day,
    start_of_week,
    start_of_year,
)


class TestRangeHelpers:
    """Tests for the start/end helpers."""

    def test_day_bounds(self):
        """Test that a day runs from midnight to the last microsecond."""
        moment = datetime(2025, 3, 9, 17, 45, 12, 345)
        assert start_of_day(moment) == datetime(2025, 3, 9, 0, 0, 0, 0)
        assert end_of_day(moment) == datetime(2025, 3, 9, 23, 59, 59, 999000)

    def test_week_starts_on_monday(self):
        """Test Wednesday 2025-01-15 falls in Mon 13th .. Sun 19th."""
        wednesday = datetime(2025, 1, 15, 12, 0)
        assert start_of_week(wednesday) == datetime(2025, 1, 13)
        assert end_of_week(wednesday) == datetime(2025, 1, 19, 23, 59, 59, 999000)

    def test_sunday_belongs_to_previous_monday(self):
        """Test that Sunday is the last day of its week."""
        sunday = datetime(2025, 1, 19, 8, 0)
        assert start_of_week(sunday) == datetime(2025, 1, 13)

    def test_week_across_month_boundary(self):
        """Test a week spanning two months."""
        friday = datetime(2025, 1, 31, 9, 0)
        assert start_of_week(friday) == datetime(2025, 1, 27)
        assert end_of_week(friday).date() == datetime(2025, 2, 2).date()

    def test_end_of_month_handles_leap_year(self):
        """Test February in a leap year."""
        assert end_of_month(datetime(2024, 2, 10)) == datetime(2024, 2, 29, 23, 59, 59, 999000)
        assert end_of_month(datetime(2025, 2, 10)).day == 28

    def test_start_of_year(self):
        assert start_of_year(datetime(2025, 7, 4, 10, 30)) == datetime(2025, 1, 1)


class TestBounds:
    """Tests for bounds()."""

    @pytest.mark.parametrize("range_, expected_from, expected_to", [
        ("day", datetime(2025, 1, 15), datetime(2025, 1, 15, 23, 59, 59, 999000)),
        ("week", datetime(2025, 1, 13), datetime(2025, 1, 19, 23, 59, 59, 999000)),
        ("month", datetime(2025, 1, 1), datetime(2025, 1, 31, 23, 59, 59, 999000)),
        ("year", datetime(2025, 1, 1), datetime(2025, 12, 31, 23, 59, 59, 999000)),
    ])
    def test_bounds_for_each_range(self, ref, range_, expected_from, expected_to):
        """Test bounds for every range key around a Wednesday reference."""
        window = bounds(range_, ref)
        assert window.from_ == expected_from
        assert window.to == expected_to

    def test_accepts_enum(self, ref):
        """Test that RangeKey members work like their string values."""
        assert bounds(RangeKey.WEEK, ref) == bounds("week", ref)

    def test_unknown_range_rejected(self, ref):
        """Test that an unknown range key raises."""
        with pytest.raises(ValueError, match="Unknown range"):
            bounds("fortnight", ref)

    def test_bounds_are_inclusive(self, ref):
        """Test both ends count as inside the window."""
        window = bounds("day", ref)
        assert window.contains(window.from_)
        assert window.contains(window.to)
        assert not window.contains(datetime(2025, 1, 16))

    def test_last_millisecond_of_day_is_inside(self, ref):
        """Test that sub-millisecond instants after 23:59:59.999 stay in their day."""
        window = bounds("day", ref)
        assert window.to == datetime(2025, 1, 15, 23, 59, 59, 999000)
        assert window.contains(datetime(2025, 1, 15, 23, 59, 59, 999999))
        assert not bounds("day", datetime(2025, 1, 16)).contains(datetime(2025, 1, 15, 23, 59, 59, 999999))

    def test_aware_reference_converted_to_local(self):
        """Test that an aware reference is resolved on local calendar fields."""
        aware = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
        local = aware.astimezone().replace(tzinfo=None)
        window = bounds("day", aware)
        assert window.from_ == start_of_day(local)
        assert window.from_.tzinfo is None

    def test_default_reference_is_now(self):
        """Test that omitting ref uses the current time."""
        window = bounds("day")
        assert window.contains(datetime.now())

    def test_serializes_from_alias(self, ref):
        """Test that the window serializes with a 'from' key."""
        dumped = bounds("day", ref).model_dump(by_alias=True)
        assert set(dumped) == {"from", "to"}
