"""
Net-Worth Estimator

Current net worth comes straight from account balances. There are no
stored balance snapshots, so the prior-period figure is an approximation
built from transaction deltas, and it is withheld when the transaction
history is too thin to mean anything.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from simple_budget.aggregation.periods import start_of_month
from simple_budget.config import BudgetSettings, get_settings
from simple_budget.models.finance import Account, Transaction, TransactionType
from simple_budget.models.summaries import NetWorthSummary


def total_assets(accounts: Iterable[Account]) -> Decimal:
    """Non-debt balances, each floored at 0."""
    return sum(
        (max(account.balance, Decimal("0")) for account in accounts if not account.is_debt),
        Decimal("0"),
    )


def total_debt(accounts: Iterable[Account]) -> Decimal:
    return sum(
        (account.balance for account in accounts if account.is_debt),
        Decimal("0"),
    )


def total_net_worth(accounts: Iterable[Account]) -> Decimal:
    accounts = list(accounts)
    return total_assets(accounts) - total_debt(accounts)


def total_accounts_balance(accounts: Iterable[Account]) -> Decimal:
    """Plain sum of every balance, debt included."""
    return sum((account.balance for account in accounts), Decimal("0"))


def signed_amount(transaction: Transaction) -> Decimal:
    """Income raises net worth, expenses lower it."""
    if transaction.transaction_type == TransactionType.INCOME:
        return transaction.amount
    return -transaction.amount


def has_sufficient_history(
    transactions: Iterable[Transaction],
    now: Optional[datetime] = None,
    settings: Optional[BudgetSettings] = None,
) -> bool:
    """
    Whether a prior-period estimate would be meaningful.

    Requires a minimum number of transactions, an oldest transaction of a
    minimum age, and a minimum total volume.
    """
    transactions = list(transactions)
    now = now or datetime.now()
    settings = settings or get_settings().budget

    if not transactions or len(transactions) < settings.net_worth_min_transactions:
        return False

    oldest = min(t.date for t in transactions)
    if (now - oldest).days < settings.net_worth_min_history_days:
        return False

    volume = sum((t.amount for t in transactions), Decimal("0"))
    return volume >= Decimal(str(settings.net_worth_min_volume))


def estimate_prior_net_worth(
    accounts: Iterable[Account],
    transactions: Iterable[Transaction],
    now: Optional[datetime] = None,
    settings: Optional[BudgetSettings] = None,
) -> Optional[Decimal]:
    """
    Approximate net worth at the end of the previous month.

    Current net worth minus the net of every transaction dated on or
    before the end of the previous month. None when history is too thin.
    """
    transactions = list(transactions)
    now = now or datetime.now()
    if not has_sufficient_history(transactions, now, settings):
        return None

    cutoff = start_of_month(now)
    delta = sum(
        (signed_amount(t) for t in transactions if t.date < cutoff),
        Decimal("0"),
    )
    return total_net_worth(accounts) - delta


def summarize_net_worth(
    accounts: Iterable[Account],
    transactions: Iterable[Transaction],
    now: Optional[datetime] = None,
    settings: Optional[BudgetSettings] = None,
) -> NetWorthSummary:
    accounts = list(accounts)
    current = total_net_worth(accounts)
    prior = estimate_prior_net_worth(accounts, transactions, now, settings)

    change_amount = None
    change_percentage = None
    if prior is not None:
        change_amount = current - prior
        if prior != 0:
            change_percentage = float(change_amount / abs(prior)) * 100

    return NetWorthSummary(
        total_assets=total_assets(accounts),
        total_debt=total_debt(accounts),
        net_worth=current,
        total_accounts_balance=total_accounts_balance(accounts),
        has_sufficient_history=prior is not None,
        prior_net_worth=prior,
        change_amount=change_amount,
        change_percentage=change_percentage,
    )
