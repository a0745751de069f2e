"""Weekly and monthly expense series for the dashboard charts."""

import calendar
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from simple_budget.aggregation.budget import total_spent, transactions_in_window
from simple_budget.aggregation.periods import add_months, day_window, month_bounds
from simple_budget.models.finance import Transaction
from simple_budget.models.summaries import MonthlySpending, WeeklySpending


def weekly_spending(
    transactions: Iterable[Transaction],
    now: Optional[datetime] = None,
    days: int = 7,
) -> list[WeeklySpending]:
    """Expense total per day for the last `days` days, oldest first, today last."""
    transactions = list(transactions)
    now = now or datetime.now()

    result = []
    for offset in reversed(range(days)):
        day = now - timedelta(days=offset)
        day_start, day_end = day_window(day)
        amount = total_spent(transactions_in_window(transactions, day_start, day_end))
        result.append(WeeklySpending(
            day=calendar.day_abbr[day_start.weekday()],
            spent_on=day_start.date(),
            amount=amount,
        ))
    return result


def monthly_spending(
    transactions: Iterable[Transaction],
    now: Optional[datetime] = None,
    months: int = 6,
) -> list[MonthlySpending]:
    """Expense total per month for the last `months` months, current month last."""
    transactions = list(transactions)
    now = now or datetime.now()

    result = []
    for offset in reversed(range(months)):
        point = add_months(now.date().replace(day=1), -offset)
        start, end = month_bounds(point.year, point.month)
        amount = total_spent(transactions_in_window(transactions, start, end))
        result.append(MonthlySpending(
            month=calendar.month_abbr[point.month],
            year=point.year,
            month_number=point.month,
            amount=amount,
        ))
    return result


def empty_series(series: list) -> bool:
    """True when every point is zero; charts show a placeholder instead."""
    return all(point.amount == Decimal("0") for point in series)
