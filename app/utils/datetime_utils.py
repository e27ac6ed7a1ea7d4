"""
Datetime utilities.

Provides timezone-aware datetime functions and calendar helpers used by
the accrual and payout rules.
"""

from datetime import UTC, date, datetime, timedelta

from dateutil.relativedelta import relativedelta


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    """
    Attach UTC to naive datetimes.

    Args:
        value: Datetime that may come back naive from the database

    Returns:
        Timezone-aware datetime
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def to_date(value: date | datetime) -> date:
    """
    Normalize a date or datetime to a calendar date (UTC).

    Args:
        value: Date or datetime

    Returns:
        Calendar date
    """
    if isinstance(value, datetime):
        return ensure_aware(value).astimezone(UTC).date()
    return value


def start_of_day(value: date | datetime) -> datetime:
    """Midnight UTC of the given day."""
    day = to_date(value)
    return datetime(day.year, day.month, day.day, tzinfo=UTC)


def add_months(value: date | datetime, months: int) -> date:
    """
    Add calendar months, clamping to the last day of shorter months.

    Args:
        value: Start date
        months: Number of months to add

    Returns:
        Resulting calendar date
    """
    return to_date(value) + relativedelta(months=months)


def add_days(value: date | datetime, days: int) -> date:
    """Add whole days to a calendar date."""
    return to_date(value) + timedelta(days=days)


def is_business_day(value: date | datetime) -> bool:
    """
    Check if day is a business day (Monday to Friday).

    Holidays are not taken into account.
    """
    return to_date(value).weekday() < 5


def nth_business_day(year: int, month: int, n: int) -> date:
    """
    Get the n-th business day of a month.

    Args:
        year: Calendar year
        month: Calendar month (1-12)
        n: Ordinal of the business day (1-based)

    Returns:
        Date of the n-th business day

    Raises:
        ValueError: If n is not positive or the month has fewer business days
    """
    if n < 1:
        raise ValueError("n must be positive")

    day = date(year, month, 1)
    count = 0
    while day.month == month:
        if is_business_day(day):
            count += 1
            if count == n:
                return day
        day += timedelta(days=1)

    raise ValueError(f"{year}-{month:02d} has fewer than {n} business days")


def is_nth_business_day(value: date | datetime, n: int = 5) -> bool:
    """
    Check if day is the n-th business day of its month.

    Args:
        value: Day to check
        n: Business day ordinal (default: fifth)

    Returns:
        True if the day is exactly the n-th business day
    """
    day = to_date(value)
    return day == nth_business_day(day.year, day.month, n)
