"""
SQLite Storage Implementation

DESIGN DECISION: SQLite is the embedded store because:
1. It is a single local file - nothing to install or run
2. Its online-backup API gives consistent backups of a live store
3. UNIQUE constraints enforce "one budget per month" and
   "account names are unique" at the data layer too

TRADEOFFS:
- One connection, single writer (fine for a personal, local app)
- Money is stored as TEXT so Decimals round-trip exactly
- Income sources are a JSON column rather than their own table

The implementation follows the abstract interface, so the flows and the
aggregation engine never see SQL.
"""

import json
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union
from uuid import UUID

import structlog
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from simple_budget.config import get_settings
from simple_budget.models.audit import AuditEvent, AuditEventType, AuditSeverity
from simple_budget.models.finance import (
    Account,
    AccountType,
    Budget,
    IncomeSource,
    SavingsGoal,
    Transaction,
    TransactionType,
)
from simple_budget.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    EntityType,
    FinanceStorageInterface,
    NotFoundError,
    StorageError,
    StoreUnavailableError,
)

logger = structlog.get_logger(__name__)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    name_key TEXT NOT NULL UNIQUE,
    account_type TEXT NOT NULL,
    balance TEXT NOT NULL,
    is_debt INTEGER NOT NULL DEFAULT 0,
    interest_rate TEXT NOT NULL DEFAULT '0',
    due_date TEXT,
    icon TEXT,
    notes TEXT
);

CREATE TABLE IF NOT EXISTS transactions (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    amount TEXT NOT NULL,
    category TEXT NOT NULL DEFAULT '',
    date TEXT NOT NULL,
    created_at TEXT NOT NULL,
    transaction_type TEXT NOT NULL,
    notes TEXT,
    account_id TEXT
);

CREATE INDEX IF NOT EXISTS ix_transactions_date ON transactions (date);
CREATE INDEX IF NOT EXISTS ix_transactions_account ON transactions (account_id);

CREATE TABLE IF NOT EXISTS budgets (
    id TEXT PRIMARY KEY,
    amount TEXT NOT NULL,
    month TEXT NOT NULL,
    year INTEGER NOT NULL,
    notes TEXT,
    income_sources_json TEXT,
    UNIQUE (month, year)
);

CREATE TABLE IF NOT EXISTS savings_goals (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    target_amount TEXT NOT NULL,
    current_amount TEXT NOT NULL,
    created_at TEXT NOT NULL,
    deadline TEXT,
    notes TEXT,
    account_id TEXT
);

CREATE TABLE IF NOT EXISTS audit_events (
    event_id TEXT PRIMARY KEY,
    timestamp TEXT NOT NULL,
    event_type TEXT NOT NULL,
    severity TEXT NOT NULL,
    entity_type TEXT,
    entity_id TEXT,
    correlation_id TEXT,
    description TEXT NOT NULL,
    details_json TEXT,
    error_message TEXT,
    is_user_action INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS ix_audit_entity ON audit_events (entity_type, entity_id);
"""

# Transient failures ("database is locked") are retried; anything else surfaces.
_retry_transient = retry(
    retry=retry_if_exception_type(sqlite3.OperationalError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
    reraise=True,
)


def _ts(value: datetime) -> str:
    """Fixed-width ISO text so stored timestamps compare correctly as strings."""
    return value.isoformat(timespec="microseconds")


def _opt_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _opt_uuid(value: Optional[str]) -> Optional[UUID]:
    return UUID(value) if value else None


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    """Re-raise sqlite errors as storage errors."""
    try:
        yield
    except StorageError:
        raise
    except sqlite3.IntegrityError as e:
        raise DuplicateError(f"Failed to {action}: {e}") from e
    except sqlite3.Error as e:
        raise StorageError(f"Failed to {action}: {e}") from e


class SQLiteClient:
    """
    Low-level SQLite wrapper.

    Owns the single connection, creates the schema, retries transient
    errors, and performs backup/restore through SQLite's online-backup API.
    """

    def __init__(self, database_path: Optional[str] = None):
        self._database_path = database_path or get_settings().store.database_path
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def database_path(self) -> str:
        return self._database_path

    @property
    def is_in_memory(self) -> bool:
        return self._database_path == ":memory:"

    @_retry_transient
    def _open(self) -> sqlite3.Connection:
        if not self.is_in_memory:
            Path(self._database_path).parent.mkdir(parents=True, exist_ok=True)
        # Streamlit runs the script on worker threads.
        conn = sqlite3.connect(self._database_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.executescript(SCHEMA_SQL)
        return conn

    def connect(self) -> sqlite3.Connection:
        """Open the store (once) and make sure the schema exists."""
        if self._conn is None:
            try:
                self._conn = self._open()
            except sqlite3.Error as e:
                raise StoreUnavailableError(
                    f"Failed to open store at {self._database_path}: {e}"
                ) from e
            logger.debug("store_opened", database_path=self._database_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @_retry_transient
    def query(self, sql: str, params: Iterable = ()) -> list[sqlite3.Row]:
        return self.connect().execute(sql, tuple(params)).fetchall()

    @_retry_transient
    def execute(self, sql: str, params: Iterable = ()) -> int:
        """Run one write statement in its own commit; returns rowcount."""
        conn = self.connect()
        with conn:
            return conn.execute(sql, tuple(params)).rowcount

    @_retry_transient
    def execute_many(self, statements: list[tuple[str, Iterable]]) -> list[int]:
        """Run several write statements in one commit; returns rowcounts."""
        conn = self.connect()
        with conn:
            return [conn.execute(sql, tuple(params)).rowcount for sql, params in statements]

    def backup_to(self, target: Union[str, Path]) -> Path:
        """Copy the live store to `target` (overwriting it)."""
        target = Path(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        source = self.connect()
        destination = sqlite3.connect(str(target))
        try:
            with _translate_errors("create backup"):
                source.backup(destination)
        finally:
            destination.close()
        return target

    def restore_from(self, source_path: Union[str, Path]) -> None:
        """
        Replace the active store with the contents of a backup.

        DESTRUCTIVE: every current record is overwritten.

        Raises:
            NotFoundError: If the backup file does not exist
            StorageError: If the file is not a SimpleBudget store
        """
        source_path = Path(source_path)
        if not source_path.is_file():
            raise NotFoundError(f"Backup not found: {source_path}")

        source = sqlite3.connect(str(source_path))
        try:
            with _translate_errors("restore backup"):
                tables = {
                    row[0] for row in source.execute(
                        "SELECT name FROM sqlite_master WHERE type = 'table'"
                    )
                }
                if "accounts" not in tables or "transactions" not in tables:
                    raise StorageError(f"Not a SimpleBudget backup: {source_path}")
                source.backup(self.connect())
                self.connect().executescript(SCHEMA_SQL)
        finally:
            source.close()


class SQLiteFinanceStorage(FinanceStorageInterface):
    """
    SQLite implementation of account, transaction, budget and goal storage.

    One row per entity. Budget income sources are JSON-serialized.
    """

    def __init__(self, client: Optional[SQLiteClient] = None):
        self._client = client or SQLiteClient()

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def _account_to_row(self, account: Account) -> tuple:
        return (
            account.name,
            account.name.casefold(),
            account.account_type.value,
            str(account.balance),
            int(account.is_debt),
            str(account.interest_rate),
            account.due_date.isoformat() if account.due_date else None,
            account.icon,
            account.notes,
            str(account.id),
        )

    def _row_to_account(self, row: sqlite3.Row) -> Account:
        return Account(
            id=UUID(row["id"]),
            name=row["name"],
            account_type=AccountType(row["account_type"]),
            balance=Decimal(row["balance"]),
            is_debt=bool(row["is_debt"]),
            interest_rate=Decimal(row["interest_rate"]),
            due_date=_opt_date(row["due_date"]),
            icon=row["icon"],
            notes=row["notes"],
        )

    def save_account(self, account: Account) -> Account:
        with _translate_errors(f"save account '{account.name}'"):
            self._client.execute(
                """
                INSERT INTO accounts (name, name_key, account_type, balance, is_debt,
                                      interest_rate, due_date, icon, notes, id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._account_to_row(account),
            )
        return account

    def update_account(self, account: Account) -> Account:
        with _translate_errors(f"update account '{account.name}'"):
            updated = self._client.execute(
                """
                UPDATE accounts
                SET name = ?, name_key = ?, account_type = ?, balance = ?, is_debt = ?,
                    interest_rate = ?, due_date = ?, icon = ?, notes = ?
                WHERE id = ?
                """,
                self._account_to_row(account),
            )
        if updated == 0:
            raise NotFoundError(f"Account not found: {account.id}")
        return account

    def get_account(self, account_id: UUID) -> Optional[Account]:
        with _translate_errors("get account"):
            rows = self._client.query("SELECT * FROM accounts WHERE id = ?", (str(account_id),))
        return self._row_to_account(rows[0]) if rows else None

    def find_account_by_name(self, name: str) -> Optional[Account]:
        with _translate_errors("find account"):
            rows = self._client.query(
                "SELECT * FROM accounts WHERE name_key = ?",
                (name.strip().casefold(),),
            )
        return self._row_to_account(rows[0]) if rows else None

    def list_accounts(self) -> list[Account]:
        with _translate_errors("list accounts"):
            rows = self._client.query("SELECT * FROM accounts ORDER BY name_key")
        return [self._row_to_account(row) for row in rows]

    def delete_account(self, account_id: UUID) -> bool:
        key = str(account_id)
        with _translate_errors("delete account"):
            counts = self._client.execute_many([
                ("UPDATE savings_goals SET account_id = NULL WHERE account_id = ?", (key,)),
                ("UPDATE transactions SET account_id = NULL WHERE account_id = ?", (key,)),
                ("DELETE FROM accounts WHERE id = ?", (key,)),
            ])
        return counts[-1] > 0

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def _transaction_to_row(self, transaction: Transaction) -> tuple:
        return (
            transaction.title,
            str(transaction.amount),
            transaction.category,
            _ts(transaction.date),
            _ts(transaction.created_at),
            transaction.transaction_type.value,
            transaction.notes,
            str(transaction.account_id) if transaction.account_id else None,
            str(transaction.id),
        )

    def _row_to_transaction(self, row: sqlite3.Row) -> Transaction:
        return Transaction(
            id=UUID(row["id"]),
            title=row["title"],
            amount=Decimal(row["amount"]),
            category=row["category"] or "",
            date=datetime.fromisoformat(row["date"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            transaction_type=TransactionType(row["transaction_type"]),
            notes=row["notes"],
            account_id=_opt_uuid(row["account_id"]),
        )

    def save_transaction(self, transaction: Transaction) -> Transaction:
        with _translate_errors(f"save transaction '{transaction.title}'"):
            self._client.execute(
                """
                INSERT INTO transactions (title, amount, category, date, created_at,
                                          transaction_type, notes, account_id, id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._transaction_to_row(transaction),
            )
        return transaction

    def update_transaction(self, transaction: Transaction) -> Transaction:
        with _translate_errors(f"update transaction '{transaction.title}'"):
            updated = self._client.execute(
                """
                UPDATE transactions
                SET title = ?, amount = ?, category = ?, date = ?, created_at = ?,
                    transaction_type = ?, notes = ?, account_id = ?
                WHERE id = ?
                """,
                self._transaction_to_row(transaction),
            )
        if updated == 0:
            raise NotFoundError(f"Transaction not found: {transaction.id}")
        return transaction

    def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        with _translate_errors("get transaction"):
            rows = self._client.query(
                "SELECT * FROM transactions WHERE id = ?", (str(transaction_id),)
            )
        return self._row_to_transaction(rows[0]) if rows else None

    def _date_filters(
        self,
        date_from: Optional[datetime],
        date_to: Optional[datetime],
    ) -> tuple[list[str], list]:
        clauses, params = [], []
        if date_from is not None:
            clauses.append("date >= ?")
            params.append(_ts(date_from))
        if date_to is not None:
            clauses.append("date < ?")
            params.append(_ts(date_to))
        return clauses, params

    def list_transactions(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        transaction_type: Optional[TransactionType] = None,
        category: Optional[str] = None,
        account_id: Optional[UUID] = None,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        clauses, params = self._date_filters(date_from, date_to)
        if transaction_type is not None:
            clauses.append("transaction_type = ?")
            params.append(transaction_type.value)
        if category is not None:
            clauses.append("category = ?")
            params.append(category)
        if account_id is not None:
            clauses.append("account_id = ?")
            params.append(str(account_id))

        sql = "SELECT * FROM transactions"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY date DESC, created_at DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        with _translate_errors("list transactions"):
            rows = self._client.query(sql, params)
        return [self._row_to_transaction(row) for row in rows]

    def delete_transaction(self, transaction_id: UUID) -> bool:
        with _translate_errors("delete transaction"):
            deleted = self._client.execute(
                "DELETE FROM transactions WHERE id = ?", (str(transaction_id),)
            )
        return deleted > 0

    def delete_transactions(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> int:
        clauses, params = self._date_filters(date_from, date_to)
        sql = "DELETE FROM transactions"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        with _translate_errors("batch delete transactions"):
            return self._client.execute(sql, params)

    def count_transactions(self) -> int:
        with _translate_errors("count transactions"):
            rows = self._client.query("SELECT COUNT(*) FROM transactions")
        return rows[0][0]

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    def _encode_income_sources(self, sources: list[IncomeSource]) -> str:
        return json.dumps([source.model_dump(mode="json") for source in sources])

    def _decode_income_sources(self, payload: Optional[str], budget_id: str) -> list[IncomeSource]:
        """Unreadable JSON means "no income sources", not a failed load."""
        if not payload:
            return []
        try:
            return [IncomeSource.model_validate(item) for item in json.loads(payload)]
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            logger.warning(
                "income_sources_decode_failed",
                budget_id=budget_id,
                error=str(e),
            )
            return []

    def _row_to_budget(self, row: sqlite3.Row) -> Budget:
        return Budget(
            id=UUID(row["id"]),
            amount=Decimal(row["amount"]),
            month=row["month"],
            year=row["year"],
            notes=row["notes"],
            income_sources=self._decode_income_sources(row["income_sources_json"], row["id"]),
        )

    def upsert_budget(self, budget: Budget) -> Budget:
        with _translate_errors(f"save budget {budget.year}-{budget.month}"):
            self._client.execute(
                """
                INSERT INTO budgets (id, amount, month, year, notes, income_sources_json)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT (month, year) DO UPDATE SET
                    amount = excluded.amount,
                    notes = excluded.notes,
                    income_sources_json = excluded.income_sources_json
                """,
                (
                    str(budget.id),
                    str(budget.amount),
                    budget.month,
                    budget.year,
                    budget.notes,
                    self._encode_income_sources(budget.income_sources),
                ),
            )
        stored = self.get_budget(budget.month, budget.year)
        if stored is None:
            raise StorageError(f"Budget {budget.year}-{budget.month} missing after save")
        return stored

    def get_budget(self, month: str, year: int) -> Optional[Budget]:
        with _translate_errors("get budget"):
            rows = self._client.query(
                "SELECT * FROM budgets WHERE month = ? AND year = ?",
                (month, year),
            )
        return self._row_to_budget(rows[0]) if rows else None

    def list_budgets(self) -> list[Budget]:
        with _translate_errors("list budgets"):
            rows = self._client.query("SELECT * FROM budgets ORDER BY year DESC, month DESC")
        return [self._row_to_budget(row) for row in rows]

    def delete_budget(self, budget_id: UUID) -> bool:
        with _translate_errors("delete budget"):
            deleted = self._client.execute("DELETE FROM budgets WHERE id = ?", (str(budget_id),))
        return deleted > 0

    # -------------------------------------------------------------------------
    # Savings goals
    # -------------------------------------------------------------------------

    def _goal_to_row(self, goal: SavingsGoal) -> tuple:
        return (
            goal.name,
            str(goal.target_amount),
            str(goal.current_amount),
            _ts(goal.created_at),
            goal.deadline.isoformat() if goal.deadline else None,
            goal.notes,
            str(goal.account_id) if goal.account_id else None,
            str(goal.id),
        )

    def _row_to_goal(self, row: sqlite3.Row) -> SavingsGoal:
        return SavingsGoal(
            id=UUID(row["id"]),
            name=row["name"],
            target_amount=Decimal(row["target_amount"]),
            current_amount=Decimal(row["current_amount"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            deadline=_opt_date(row["deadline"]),
            notes=row["notes"],
            account_id=_opt_uuid(row["account_id"]),
        )

    def save_goal(self, goal: SavingsGoal) -> SavingsGoal:
        with _translate_errors(f"save goal '{goal.name}'"):
            self._client.execute(
                """
                INSERT INTO savings_goals (name, target_amount, current_amount, created_at,
                                           deadline, notes, account_id, id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._goal_to_row(goal),
            )
        return goal

    def update_goal(self, goal: SavingsGoal) -> SavingsGoal:
        with _translate_errors(f"update goal '{goal.name}'"):
            updated = self._client.execute(
                """
                UPDATE savings_goals
                SET name = ?, target_amount = ?, current_amount = ?, created_at = ?,
                    deadline = ?, notes = ?, account_id = ?
                WHERE id = ?
                """,
                self._goal_to_row(goal),
            )
        if updated == 0:
            raise NotFoundError(f"Goal not found: {goal.id}")
        return goal

    def get_goal(self, goal_id: UUID) -> Optional[SavingsGoal]:
        with _translate_errors("get goal"):
            rows = self._client.query("SELECT * FROM savings_goals WHERE id = ?", (str(goal_id),))
        return self._row_to_goal(rows[0]) if rows else None

    def list_goals(self, account_id: Optional[UUID] = None) -> list[SavingsGoal]:
        sql = "SELECT * FROM savings_goals"
        params: list = []
        if account_id is not None:
            sql += " WHERE account_id = ?"
            params.append(str(account_id))
        sql += " ORDER BY created_at"
        with _translate_errors("list goals"):
            rows = self._client.query(sql, params)
        return [self._row_to_goal(row) for row in rows]

    def delete_goal(self, goal_id: UUID) -> bool:
        with _translate_errors("delete goal"):
            deleted = self._client.execute(
                "DELETE FROM savings_goals WHERE id = ?", (str(goal_id),)
            )
        return deleted > 0

    # -------------------------------------------------------------------------
    # Batch
    # -------------------------------------------------------------------------

    def delete_all_records(self, entity: EntityType) -> int:
        with _translate_errors(f"delete all {entity.value}"):
            return self._client.execute(f"DELETE FROM {entity.value}")


class SQLiteAuditStorage(AuditStorageInterface):
    """
    SQLite implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[SQLiteClient] = None):
        self._client = client or SQLiteClient()

    def _row_to_event(self, row: sqlite3.Row) -> AuditEvent:
        return AuditEvent(
            event_id=UUID(row["event_id"]),
            timestamp=datetime.fromisoformat(row["timestamp"]),
            event_type=AuditEventType(row["event_type"]),
            severity=AuditSeverity(row["severity"]),
            entity_type=row["entity_type"],
            entity_id=_opt_uuid(row["entity_id"]),
            correlation_id=_opt_uuid(row["correlation_id"]),
            description=row["description"],
            details=json.loads(row["details_json"]) if row["details_json"] else {},
            error_message=row["error_message"],
            is_user_action=bool(row["is_user_action"]),
        )

    def append_event(self, event: AuditEvent) -> bool:
        try:
            self._client.execute(
                """
                INSERT INTO audit_events (event_id, timestamp, event_type, severity,
                                          entity_type, entity_id, correlation_id, description,
                                          details_json, error_message, is_user_action)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                event.to_row(),
            )
            return True
        except (sqlite3.Error, StorageError) as e:
            # Audit logging must not break the main flow
            logger.warning(
                "audit_event_write_failed",
                event_id=str(event.event_id),
                error=str(e),
            )
            return False

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        with _translate_errors("get audit events"):
            rows = self._client.query(
                """
                SELECT * FROM audit_events
                WHERE entity_type = ? AND entity_id = ?
                ORDER BY timestamp, rowid
                """,
                (entity_type, str(entity_id)),
            )
        return [self._row_to_event(row) for row in rows]

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        with _translate_errors("get audit events"):
            rows = self._client.query(
                "SELECT * FROM audit_events ORDER BY timestamp DESC, rowid DESC LIMIT ?",
                (limit,),
            )
        return [self._row_to_event(row) for row in rows]
