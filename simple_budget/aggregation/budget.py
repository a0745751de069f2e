"""
Budget Aggregator

Computes the month-level figures the dashboard shows: total spent,
spending per category, remaining budget, daily average and the colour
tier of the progress bar.

DESIGN DECISION: Income is tracked through Budget.income_sources only.
Transactions of type income are history; they never count toward
total_spent and never add to total_monthly_income.

DESIGN DECISION: Absence is not zero. Without a budget for the month,
remaining_budget, usage_percentage and progress_tier are None so the
UI can prompt "set a budget" instead of showing a misleading 0.
"""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from simple_budget.aggregation.income import budget_income
from simple_budget.aggregation.periods import (
    days_elapsed_in_month,
    month_bounds,
    month_progress,
)
from simple_budget.config import BudgetSettings, get_settings
from simple_budget.models.finance import Budget, Transaction
from simple_budget.models.summaries import (
    BudgetMode,
    BudgetSummary,
    CategorySpending,
    ProgressTier,
)


def transactions_in_window(
    transactions: Iterable[Transaction],
    start: datetime,
    end: datetime,
) -> list[Transaction]:
    """Transactions dated in [start, end)."""
    return [t for t in transactions if start <= t.date < end]


def total_spent(transactions: Iterable[Transaction]) -> Decimal:
    """Sum of expense amounts; income transactions are ignored."""
    return sum(
        (t.amount for t in transactions if t.is_expense),
        Decimal("0"),
    )


def category_spending(transactions: Iterable[Transaction]) -> list[CategorySpending]:
    """
    Expense totals per category, largest first.

    Blank categories are grouped under "Uncategorized". Ties are broken
    by category name so the order is stable between loads.
    """
    totals: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for transaction in transactions:
        if transaction.is_expense:
            totals[transaction.category_label] += transaction.amount

    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return [CategorySpending(category=name, amount=amount) for name, amount in ordered]


def transactions_for_category(
    transactions: Iterable[Transaction],
    category: str,
) -> list[Transaction]:
    return [t for t in transactions if t.category_label == category]


def remaining_budget(
    budget: Optional[Budget],
    spent: Decimal,
) -> tuple[Optional[Decimal], Optional[BudgetMode]]:
    """
    Remaining budget and the mode that produced it.

    Income mode (income sources exist): total income - budget amount.
    Ceiling mode: budget amount - spent.
    """
    if budget is None:
        return None, None
    if budget.has_income_sources:
        return budget_income(budget) - budget.amount, BudgetMode.INCOME
    return budget.amount - spent, BudgetMode.CEILING


def usage_ratio(spent: Decimal, budget_amount: Optional[Decimal]) -> Optional[float]:
    """spent / budget, or None when there is no positive budget."""
    if budget_amount is None or budget_amount <= 0:
        return None
    return float(spent / budget_amount)


def usage_percentage(spent: Decimal, budget_amount: Optional[Decimal]) -> Optional[float]:
    ratio = usage_ratio(spent, budget_amount)
    if ratio is None:
        return None
    return ratio * 100


def progress_tier(
    spent: Decimal,
    budget_amount: Optional[Decimal],
    settings: Optional[BudgetSettings] = None,
) -> Optional[ProgressTier]:
    """
    Colour tier for a spend-versus-budget bar.

    ratio >= over_limit_threshold (1.0) → OVER_LIMIT
    ratio >= warning_threshold (0.75)   → WARNING
    otherwise                           → NOMINAL
    """
    ratio = usage_ratio(spent, budget_amount)
    if ratio is None:
        return None

    settings = settings or get_settings().budget
    if ratio >= settings.over_limit_threshold:
        return ProgressTier.OVER_LIMIT
    if ratio >= settings.warning_threshold:
        return ProgressTier.WARNING
    return ProgressTier.NOMINAL


def daily_average(spent: Decimal, days_elapsed: int) -> Decimal:
    """spent / max(days_elapsed, 1)."""
    return spent / Decimal(max(days_elapsed, 1))


def category_budget_estimate(
    category: str,
    spending: list[CategorySpending],
    total_budget: Decimal,
) -> Optional[Decimal]:
    """
    Share of the total budget proportional to the category's share of spend.

    There are no per-category budgets; this is an estimate for display.
    """
    total = sum((entry.amount for entry in spending), Decimal("0"))
    if total == 0:
        return None

    category_amount = next(
        (entry.amount for entry in spending if entry.category == category),
        Decimal("0"),
    )
    return total_budget * (category_amount / total)


def summarize_month(
    budget: Optional[Budget],
    transactions: Iterable[Transaction],
    year: int,
    month: int,
    now: Optional[datetime] = None,
    settings: Optional[BudgetSettings] = None,
) -> BudgetSummary:
    """
    Compute every month-level figure from one snapshot.

    `transactions` may include transactions outside the month; only those
    in [start of month, start of next month) are used.
    """
    now = now or datetime.now()
    settings = settings or get_settings().budget

    start, end = month_bounds(year, month)
    in_month = transactions_in_window(transactions, start, end)

    spent = total_spent(in_month)
    categories = category_spending(in_month)
    remaining, mode = remaining_budget(budget, spent)
    budget_amount = budget.amount if budget is not None else None

    if start <= now < end:
        progress = month_progress(now)
    elif now >= end:
        progress = 100
    else:
        progress = 0

    return BudgetSummary(
        year=year,
        month=month,
        has_budget=budget is not None,
        budget_amount=budget_amount,
        total_monthly_income=budget_income(budget),
        total_spent=spent,
        remaining_budget=remaining,
        budget_mode=mode,
        usage_percentage=usage_percentage(spent, budget_amount),
        progress_tier=progress_tier(spent, budget_amount, settings),
        category_spending=categories,
        daily_average=daily_average(spent, days_elapsed_in_month(now, year, month)),
        top_category=categories[0].category if categories else None,
        transaction_count=len(in_month),
        month_progress=progress,
    )
