"""Per-account display helpers for debt accounts."""

from datetime import date
from decimal import Decimal
from typing import Optional

from simple_budget.aggregation.periods import add_months, days_between
from simple_budget.models.finance import Account


def monthly_interest_amount(account: Account) -> Decimal:
    """
    One month of simple interest on a debt balance.

    Display-only projection; it is never applied to the balance.
    """
    if not account.is_debt or account.interest_rate <= 0:
        return Decimal("0")
    monthly_rate = account.interest_rate / Decimal("100") / Decimal("12")
    return account.balance * monthly_rate


def days_until_due(account: Account, today: Optional[date] = None) -> Optional[int]:
    if account.due_date is None:
        return None
    return days_between(today or date.today(), account.due_date)


def is_past_due(account: Account, today: Optional[date] = None) -> bool:
    days = days_until_due(account, today)
    return days is not None and days < 0


def next_due_date(account: Account) -> Optional[date]:
    """The due date one calendar month later."""
    if account.due_date is None:
        return None
    return add_months(account.due_date, 1)


def roll_due_date_forward(account: Account) -> Account:
    """Copy of the account with its due date moved to next month."""
    if account.due_date is None:
        return account
    return account.model_copy(update={"due_date": next_due_date(account)})
