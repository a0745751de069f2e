"""Calendar arithmetic shared by the aggregators."""

import calendar
from datetime import date, datetime, timedelta


def start_of_month(value: datetime) -> datetime:
    """First day of value's month at 00:00."""
    return datetime(value.year, value.month, 1)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """
    Half-open window [first day 00:00, first day of next month 00:00).

    The upper bound is exclusive so a transaction at 23:59 on the last
    day is inside the month and one at 00:00 on the 1st is not.
    """
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


def add_months(value: date, months: int) -> date:
    """Shift by whole calendar months, clamping the day to the month end."""
    total = value.year * 12 + (value.month - 1) + months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def whole_months_between(start: date, end: date) -> int:
    """
    Number of complete calendar months from start to end.

    Jan 31 → Feb 28 is 0 months; Jan 15 → Mar 15 is 2.
    Negative when end is before start.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if months > 0 and end.day < start.day:
        months -= 1
    elif months < 0 and end.day > start.day:
        months += 1
    return months


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative if end is earlier)."""
    return (_as_date(end) - _as_date(start)).days


def days_elapsed_in_month(now: datetime, year: int, month: int) -> int:
    """
    Whole days from the month start to now, capped at the month length.

    Zero on the first day of the month and for months that have not
    started yet.
    """
    start, end = month_bounds(year, month)
    cutoff = min(now, end)
    if cutoff <= start:
        return 0
    return (cutoff - start).days


def month_progress(now: datetime) -> int:
    """Integer percentage of the current month that has elapsed."""
    start, end = month_bounds(now.year, now.month)
    days_in_month = (end - start).days
    elapsed = (now - start).days
    return int(elapsed / days_in_month * 100)


def day_window(value: datetime) -> tuple[datetime, datetime]:
    """[00:00 of value's day, 00:00 of the next day)."""
    day_start = datetime(value.year, value.month, value.day)
    return day_start, day_start + timedelta(days=1)


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value
