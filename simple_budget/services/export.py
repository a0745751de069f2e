"""
CSV export of transactions.

Format:
    Date,Title,Amount,Category,Account,Notes
    2025-06-03,"Groceries",45.67,"Food","My Checking",""

Dates are ISO (YYYY-MM-DD), amounts have two decimals, and every text
column is double-quoted with embedded quotes doubled.
"""

from datetime import date
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union
from uuid import UUID

from simple_budget.models.finance import Account, Transaction

CSV_HEADER = "Date,Title,Amount,Category,Account,Notes"


def _quote(value: Optional[str]) -> str:
    text = value or ""
    return '"' + text.replace('"', '""') + '"'


def transaction_to_csv_row(
    transaction: Transaction,
    accounts_by_id: Optional[Mapping[UUID, Account]] = None,
) -> str:
    account_name = ""
    if transaction.account_id is not None and accounts_by_id:
        account = accounts_by_id.get(transaction.account_id)
        account_name = account.name if account else ""

    return ",".join([
        transaction.date.date().isoformat(),
        _quote(transaction.title),
        f"{transaction.amount:.2f}",
        _quote(transaction.category_label),
        _quote(account_name),
        _quote(transaction.notes),
    ])


def transactions_to_csv(
    transactions: Iterable[Transaction],
    accounts: Iterable[Account] = (),
) -> str:
    """Render transactions as CSV text, header first, one line per row."""
    accounts_by_id = {account.id: account for account in accounts}
    lines = [CSV_HEADER]
    lines.extend(transaction_to_csv_row(t, accounts_by_id) for t in transactions)
    return "\n".join(lines) + "\n"


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"transactions_{today.isoformat()}.csv"


def write_transactions_csv(
    transactions: Iterable[Transaction],
    directory: Union[str, Path],
    accounts: Iterable[Account] = (),
    today: Optional[date] = None,
) -> Path:
    """Write the CSV export into `directory` and return its path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / export_filename(today)
    target.write_text(transactions_to_csv(transactions, accounts), encoding="utf-8")
    return target
