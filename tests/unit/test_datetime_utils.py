"""Tests for calendar helpers."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from app.utils.datetime_utils import (
    add_days,
    add_months,
    ensure_aware,
    is_business_day,
    is_nth_business_day,
    nth_business_day,
    start_of_day,
    to_date,
)


class TestNormalization:
    """Test date normalization."""

    def test_ensure_aware_adds_utc(self):
        """Naive datetimes are treated as UTC."""
        assert ensure_aware(datetime(2024, 1, 1)).tzinfo is UTC

    def test_to_date_converts_to_utc(self):
        """Offset datetimes are converted before taking the date."""
        value = datetime(2024, 1, 1, 23, 30, tzinfo=timezone(timedelta(hours=-3)))
        assert to_date(value) == date(2024, 1, 2)

    def test_to_date_passes_dates_through(self):
        assert to_date(date(2024, 5, 5)) == date(2024, 5, 5)

    def test_start_of_day(self):
        assert start_of_day(date(2024, 3, 1)) == datetime(2024, 3, 1, tzinfo=UTC)


class TestCalendarArithmetic:
    """Test month and day arithmetic."""

    def test_add_twelve_months(self):
        assert add_months(date(2023, 1, 1), 12) == date(2024, 1, 1)

    def test_add_month_clamps_to_month_end(self):
        """Jan 31 + 1 month is the last day of February."""
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_add_days(self):
        assert add_days(datetime(2024, 1, 1, tzinfo=UTC), 60) == date(2024, 3, 1)


class TestBusinessDays:
    """Test business day helpers."""

    def test_weekend_is_not_business_day(self):
        assert is_business_day(date(2024, 6, 1)) is False

    def test_weekday_is_business_day(self):
        assert is_business_day(date(2024, 6, 3)) is True

    def test_fifth_business_day_month_starting_monday(self):
        assert nth_business_day(2024, 1, 5) == date(2024, 1, 5)

    def test_fifth_business_day_month_starting_friday(self):
        assert nth_business_day(2024, 3, 5) == date(2024, 3, 7)

    def test_fifth_business_day_month_starting_saturday(self):
        assert nth_business_day(2024, 6, 5) == date(2024, 6, 7)

    def test_is_nth_business_day(self):
        assert is_nth_business_day(date(2024, 6, 7)) is True
        assert is_nth_business_day(date(2024, 6, 6)) is False

    def test_invalid_ordinal(self):
        with pytest.raises(ValueError):
            nth_business_day(2024, 6, 0)

    def test_ordinal_beyond_month(self):
        with pytest.raises(ValueError):
            nth_business_day(2024, 2, 30)
