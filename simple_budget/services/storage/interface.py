"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep SQLite today and swap the backend later
2. Keep the aggregation engine decoupled from persistence
3. Give the flows explicit query methods that return value-typed records

The interface is intentionally simple - we're not building a full ORM.
Just the predicates the app needs: (month, year) for budgets, a date
range for transactions, a case-insensitive name for accounts.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from simple_budget.models.audit import AuditEvent
from simple_budget.models.finance import (
    Account,
    Budget,
    SavingsGoal,
    Transaction,
    TransactionType,
)


class EntityType(str, Enum):
    """Record kinds held by the store, named after their tables."""
    ACCOUNT = "accounts"
    TRANSACTION = "transactions"
    BUDGET = "budgets"
    SAVINGS_GOAL = "savings_goals"


class AccountStorageInterface(ABC):
    """Account persistence."""

    @abstractmethod
    def save_account(self, account: Account) -> Account:
        """
        Insert a new account.

        Raises:
            DuplicateError: If an account with the same name (any case) exists
            StorageError: If the write fails
        """

    @abstractmethod
    def update_account(self, account: Account) -> Account:
        """
        Replace an existing account.

        Raises:
            NotFoundError: If the account does not exist
            DuplicateError: If the new name collides with another account
        """

    @abstractmethod
    def get_account(self, account_id: UUID) -> Optional[Account]:
        pass

    @abstractmethod
    def find_account_by_name(self, name: str) -> Optional[Account]:
        """Case-insensitive exact name lookup."""

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """All accounts, sorted by name."""

    @abstractmethod
    def delete_account(self, account_id: UUID) -> bool:
        """
        Delete an account.

        Goals and transactions that referenced it are kept, with their
        account reference cleared. Returns False if nothing was deleted.
        """

    def account_name_exists(
        self,
        name: str,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        existing = self.find_account_by_name(name)
        return existing is not None and existing.id != exclude_id


class TransactionStorageInterface(ABC):
    """Transaction persistence."""

    @abstractmethod
    def save_transaction(self, transaction: Transaction) -> Transaction:
        pass

    @abstractmethod
    def update_transaction(self, transaction: Transaction) -> Transaction:
        """
        Raises:
            NotFoundError: If the transaction does not exist
        """

    @abstractmethod
    def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        pass

    @abstractmethod
    def list_transactions(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        transaction_type: Optional[TransactionType] = None,
        category: Optional[str] = None,
        account_id: Optional[UUID] = None,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        """
        List transactions, newest first.

        Args:
            date_from: Include transactions on or after this moment
            date_to: Include transactions strictly before this moment
            transaction_type: Only expenses or only income
            category: Exact category match
            account_id: Only transactions linked to this account
            limit: Maximum number of results
        """

    @abstractmethod
    def delete_transaction(self, transaction_id: UUID) -> bool:
        pass

    @abstractmethod
    def delete_transactions(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> int:
        """Batch delete transactions in [date_from, date_to). Returns the count."""

    @abstractmethod
    def count_transactions(self) -> int:
        pass


class BudgetStorageInterface(ABC):
    """Budget persistence. One budget per (month, year)."""

    @abstractmethod
    def upsert_budget(self, budget: Budget) -> Budget:
        """
        Insert or replace the budget for budget.month / budget.year.

        When a budget already exists for that month it keeps its id;
        the returned budget reflects what was stored.
        """

    @abstractmethod
    def get_budget(self, month: str, year: int) -> Optional[Budget]:
        pass

    @abstractmethod
    def list_budgets(self) -> list[Budget]:
        """All budgets, most recent month first."""

    @abstractmethod
    def delete_budget(self, budget_id: UUID) -> bool:
        pass


class GoalStorageInterface(ABC):
    """Savings goal persistence."""

    @abstractmethod
    def save_goal(self, goal: SavingsGoal) -> SavingsGoal:
        pass

    @abstractmethod
    def update_goal(self, goal: SavingsGoal) -> SavingsGoal:
        """
        Raises:
            NotFoundError: If the goal does not exist
        """

    @abstractmethod
    def get_goal(self, goal_id: UUID) -> Optional[SavingsGoal]:
        pass

    @abstractmethod
    def list_goals(self, account_id: Optional[UUID] = None) -> list[SavingsGoal]:
        """Goals, oldest first, optionally only those linked to an account."""

    @abstractmethod
    def delete_goal(self, goal_id: UUID) -> bool:
        pass


class FinanceStorageInterface(
    AccountStorageInterface,
    TransactionStorageInterface,
    BudgetStorageInterface,
    GoalStorageInterface,
):
    """Everything the flows need from one store."""

    @abstractmethod
    def delete_all_records(self, entity: EntityType) -> int:
        """Batch delete every record of one kind. Returns the count."""


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """All events for one entity, in chronological order."""

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """The most recent events, newest first."""


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class StoreUnavailableError(StorageError):
    """Could not open the storage backend."""
    pass
