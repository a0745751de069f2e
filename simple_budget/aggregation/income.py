"""
Income Model

Turns a budget's income sources into a monthly-equivalent income figure.
The frequency multipliers are fixed approximations (see IncomeFrequency),
not a payroll calendar.
"""

from decimal import Decimal
from typing import Iterable, Optional

from simple_budget.models.finance import Budget, IncomeSource


def monthly_value(source: IncomeSource) -> Decimal:
    """amount × frequency multiplier."""
    return source.amount * source.frequency.multiplier


def total_monthly_income(sources: Iterable[IncomeSource]) -> Decimal:
    """Sum of monthly values; 0 for no sources."""
    return sum((monthly_value(source) for source in sources), Decimal("0"))


def budget_income(budget: Optional[Budget]) -> Decimal:
    """Total monthly income of a budget, 0 when there is no budget."""
    if budget is None:
        return Decimal("0")
    return total_monthly_income(budget.income_sources)
