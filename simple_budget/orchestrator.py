"""
Main Orchestrator for SimpleBudget

This module ties together all the components and defines the
end-to-end flows for:
1. Ledger (accounts and transactions)
2. Planning (monthly budgets, income sources, savings goals)
3. Maintenance (first-launch seeding, reset, backup/restore, CSV export)
4. Dashboard (load a snapshot → compute every displayed figure)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No draft is written unless it validates cleanly
- Aggregation only ever sees a snapshot, never the store
- Every write is audited, and so is every failed write

This is the "glue" that ensures the system works correctly
even when individual components might behave unexpectedly.
"""

from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Iterator, NamedTuple, Optional, Union
from uuid import UUID

from simple_budget.aggregation import (
    evaluate_goal,
    monthly_spending,
    roll_due_date_forward,
    sort_goals,
    summarize_month,
    summarize_net_worth,
    weekly_spending,
)
from simple_budget.audit import AuditLogger, create_correlation_id
from simple_budget.config import BudgetSettings, PreferencesStore, get_settings
from simple_budget.models.audit import AuditEventType
from simple_budget.models.drafts import (
    AccountDraft,
    BudgetDraft,
    GoalDraft,
    RawAmount,
    TransactionDraft,
    ValidationResult,
)
from simple_budget.models.finance import (
    Account,
    AccountType,
    Budget,
    IncomeSource,
    SavingsGoal,
    Transaction,
    to_local_naive,
)
from simple_budget.models.summaries import (
    DashboardSnapshot,
    GoalProgress,
    GoalSortOption,
)
from simple_budget.services.backup import BackupService
from simple_budget.services.export import export_filename, transactions_to_csv
from simple_budget.services.storage import (
    EntityType,
    FinanceStorageInterface,
    NotFoundError,
    SQLiteAuditStorage,
    SQLiteClient,
    SQLiteFinanceStorage,
    StorageError,
)
from simple_budget.validation import (
    FinanceValidator,
    ValidationFailedError,
    parse_amount,
)


# Accounts created on first launch: (name, type, icon, notes)
DEFAULT_ACCOUNTS = [
    ("My Savings", AccountType.SAVINGS, "banknote", "Default savings account"),
    ("My Investments", AccountType.INVESTMENT, "chart.line.uptrend", "Default investment account"),
]

# Accounts recreated by a store reset
RESET_ACCOUNTS = [
    ("My Checking", AccountType.CHECKING, "creditcard", "Default checking account"),
] + DEFAULT_ACCOUNTS


class _StoreFlow:
    """Validation gate and failure auditing shared by the writing flows."""

    def __init__(
        self,
        storage: FinanceStorageInterface,
        validator: Optional[FinanceValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._validator = validator or FinanceValidator(storage)
        self._audit_logger = audit_logger or AuditLogger()

    def _ensure_valid(
        self,
        result: ValidationResult,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        if not result.is_valid:
            self._audit_logger.log_validation_failed(result, correlation_id)
            raise ValidationFailedError(result)

    @contextmanager
    def _writing(
        self,
        entity_type: str,
        entity_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Iterator[None]:
        """Audit a failed write, then let the StorageError propagate."""
        try:
            yield
        except StorageError as e:
            self._audit_logger.log_save_failed(
                entity_type=entity_type,
                error_message=str(e),
                entity_id=entity_id,
                correlation_id=correlation_id,
            )
            raise


class LedgerFlow(_StoreFlow):
    """
    Accounts and transactions.

    Every write goes draft → validate → build entity → store → audit.
    """

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def accounts(self) -> list[Account]:
        return self._storage.list_accounts()

    def _require_account(self, account_id: UUID) -> Account:
        account = self._storage.get_account(account_id)
        if account is None:
            raise NotFoundError(f"Account not found: {account_id}")
        return account

    def add_account(self, draft: AccountDraft) -> Account:
        self._ensure_valid(self._validator.validate_account_draft(draft))
        account = self._validator.build_account(draft)

        with self._writing("account", account.id):
            self._storage.save_account(account)

        self._audit_logger.log_entity_written(
            AuditEventType.ACCOUNT_CREATED,
            entity_type="account",
            entity_id=account.id,
            description=f"Account '{account.name}' created",
            details={"account_type": account.account_type.value, "is_debt": account.is_debt},
        )
        return account

    def update_account(self, account_id: UUID, draft: AccountDraft) -> Account:
        """
        Replace an account's fields from a form.

        Raises:
            NotFoundError: If the account does not exist
            ValidationFailedError: If the form has errors
        """
        self._require_account(account_id)
        self._ensure_valid(self._validator.validate_account_draft(draft, account_id))
        account = self._validator.build_account(draft, account_id)

        with self._writing("account", account_id):
            self._storage.update_account(account)

        self._audit_logger.log_entity_written(
            AuditEventType.ACCOUNT_UPDATED,
            entity_type="account",
            entity_id=account_id,
            description=f"Account '{account.name}' updated",
        )
        return account

    def rename_account(self, account_id: UUID, new_name: str) -> Account:
        current = self._require_account(account_id)
        draft = AccountDraft(
            name=new_name,
            account_type=current.account_type,
            balance=current.balance,
            is_debt=current.is_debt,
            interest_rate=current.interest_rate,
            due_date=current.due_date,
            icon=current.icon,
            notes=current.notes,
        )
        return self.update_account(account_id, draft)

    def advance_due_date(self, account_id: UUID) -> Account:
        """Move a debt account's due date to the same day next month."""
        account = roll_due_date_forward(self._require_account(account_id))

        with self._writing("account", account_id):
            self._storage.update_account(account)

        self._audit_logger.log_entity_written(
            AuditEventType.ACCOUNT_UPDATED,
            entity_type="account",
            entity_id=account_id,
            description=f"Due date of '{account.name}' moved to {account.due_date}",
        )
        return account

    def delete_account(self, account_id: UUID) -> bool:
        """Delete an account; linked goals and transactions are unlinked, not deleted."""
        with self._writing("account", account_id):
            deleted = self._storage.delete_account(account_id)

        if deleted:
            self._audit_logger.log_entity_written(
                AuditEventType.ACCOUNT_DELETED,
                entity_type="account",
                entity_id=account_id,
                description="Account deleted",
            )
        return deleted

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def transactions(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        category: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        return self._storage.list_transactions(
            date_from=date_from,
            date_to=date_to,
            category=category,
            limit=limit,
        )

    def record_transaction(self, draft: TransactionDraft) -> Transaction:
        self._ensure_valid(self._validator.validate_transaction_draft(draft))
        transaction = self._validator.build_transaction(draft)

        with self._writing("transaction", transaction.id):
            self._storage.save_transaction(transaction)

        self._audit_logger.log_entity_written(
            AuditEventType.TRANSACTION_RECORDED,
            entity_type="transaction",
            entity_id=transaction.id,
            description=f"{transaction.transaction_type.value.capitalize()} '{transaction.title}' recorded",
            details={"amount": str(transaction.amount), "category": transaction.category_label},
        )
        return transaction

    def update_transaction(self, transaction_id: UUID, draft: TransactionDraft) -> Transaction:
        existing = self._storage.get_transaction(transaction_id)
        if existing is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

        self._ensure_valid(self._validator.validate_transaction_draft(draft))
        transaction = self._validator.build_transaction(draft, transaction_id)
        transaction = transaction.model_copy(update={"created_at": existing.created_at})

        with self._writing("transaction", transaction_id):
            self._storage.update_transaction(transaction)

        self._audit_logger.log_entity_written(
            AuditEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction '{transaction.title}' updated",
        )
        return transaction

    def delete_transaction(self, transaction_id: UUID) -> bool:
        with self._writing("transaction", transaction_id):
            deleted = self._storage.delete_transaction(transaction_id)

        if deleted:
            self._audit_logger.log_entity_written(
                AuditEventType.TRANSACTION_DELETED,
                entity_type="transaction",
                entity_id=transaction_id,
                description="Transaction deleted",
            )
        return deleted

    def delete_transactions(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> int:
        """Batch delete every transaction dated in [date_from, date_to)."""
        with self._writing("transaction"):
            deleted = self._storage.delete_transactions(date_from, date_to)

        self._audit_logger.log_batch_deleted(
            entity_type="transaction",
            deleted_count=deleted,
            criteria={
                "date_from": date_from.isoformat() if date_from else None,
                "date_to": date_to.isoformat() if date_to else None,
            },
        )
        return deleted


class PlanningFlow(_StoreFlow):
    """Monthly budgets, their income sources, and savings goals."""

    def __init__(
        self,
        storage: FinanceStorageInterface,
        validator: Optional[FinanceValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        preferences: Optional[PreferencesStore] = None,
    ):
        super().__init__(storage, validator, audit_logger)
        self._preferences = preferences

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    def get_budget(self, year: int, month: int) -> Optional[Budget]:
        return self._storage.get_budget(f"{month:02d}", year)

    def save_budget(self, draft: BudgetDraft) -> Budget:
        """
        Create or replace the budget for draft.month / draft.year.

        There is never more than one budget per month; saving again
        overwrites the amount, notes and income sources.
        """
        self._ensure_valid(self._validator.validate_budget_draft(draft))
        budget = self._validator.build_budget(draft)

        with self._writing("budget", budget.id):
            stored = self._storage.upsert_budget(budget)

        self._audit_logger.log_entity_written(
            AuditEventType.BUDGET_SAVED,
            entity_type="budget",
            entity_id=stored.id,
            description=f"Budget for {stored.year}-{stored.month} saved",
            details={
                "amount": str(stored.amount),
                "income_sources": len(stored.income_sources),
            },
        )
        if self._preferences is not None:
            self._preferences.update(last_budget_update=datetime.now())
        return stored

    def delete_budget(self, year: int, month: int) -> bool:
        """Remove the budget (and its income sources) for one month. Returns False if there was none."""
        budget = self.get_budget(year, month)
        if budget is None:
            return False

        with self._writing("budget", budget.id):
            deleted = self._storage.delete_budget(budget.id)

        if deleted:
            self._audit_logger.log_entity_written(
                AuditEventType.BUDGET_DELETED,
                entity_type="budget",
                entity_id=budget.id,
                description=f"Budget for {budget.year}-{budget.month} deleted",
            )
        return deleted

    def _require_budget(self, year: int, month: int) -> Budget:
        budget = self.get_budget(year, month)
        if budget is None:
            raise NotFoundError(f"No budget for {year}-{month:02d}")
        return budget

    def _resave(self, budget: Budget, income_sources: list[IncomeSource]) -> Budget:
        return self.save_budget(BudgetDraft(
            amount=budget.amount,
            month=budget.month_number,
            year=budget.year,
            notes=budget.notes,
            income_sources=income_sources,
        ))

    def add_income_source(self, year: int, month: int, source: IncomeSource) -> Budget:
        budget = self._require_budget(year, month)
        return self._resave(budget, budget.income_sources + [source])

    def remove_income_source(self, year: int, month: int, source_id: UUID) -> Budget:
        budget = self._require_budget(year, month)
        remaining = [s for s in budget.income_sources if s.id != source_id]
        if len(remaining) == len(budget.income_sources):
            raise NotFoundError(f"Income source not found: {source_id}")
        return self._resave(budget, remaining)

    # -------------------------------------------------------------------------
    # Savings goals
    # -------------------------------------------------------------------------

    def goals(
        self,
        option: GoalSortOption = GoalSortOption.DATE_CREATED,
        today: Optional[date] = None,
    ) -> list[GoalProgress]:
        goals = sort_goals(self._storage.list_goals(), option)
        return [evaluate_goal(goal, today) for goal in goals]

    def create_goal(self, draft: GoalDraft, today: Optional[date] = None) -> SavingsGoal:
        self._ensure_valid(self._validator.validate_goal_draft(draft, today))
        goal = self._validator.build_goal(draft)

        with self._writing("goal", goal.id):
            self._storage.save_goal(goal)

        self._audit_logger.log_entity_written(
            AuditEventType.GOAL_CREATED,
            entity_type="goal",
            entity_id=goal.id,
            description=f"Goal '{goal.name}' created",
            details={"target_amount": str(goal.target_amount)},
        )
        return goal

    def update_goal_amount(self, goal_id: UUID, raw_amount: RawAmount) -> SavingsGoal:
        """
        Set a goal's current amount.

        Raises:
            NotFoundError: If the goal does not exist
            ValidationFailedError: If the amount is not numeric, negative
                                   or above the target
        """
        goal = self._storage.get_goal(goal_id)
        if goal is None:
            raise NotFoundError(f"Goal not found: {goal_id}")

        self._ensure_valid(self._validator.validate_goal_amount(goal, raw_amount))
        updated = goal.model_copy(update={"current_amount": parse_amount(raw_amount)})

        with self._writing("goal", goal_id):
            self._storage.update_goal(updated)

        self._audit_logger.log_entity_written(
            AuditEventType.GOAL_AMOUNT_UPDATED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Goal '{goal.name}' amount updated",
            details={"from": str(goal.current_amount), "to": str(updated.current_amount)},
        )
        return updated

    def delete_goal(self, goal_id: UUID) -> bool:
        with self._writing("goal", goal_id):
            deleted = self._storage.delete_goal(goal_id)

        if deleted:
            self._audit_logger.log_entity_written(
                AuditEventType.GOAL_DELETED,
                entity_type="goal",
                entity_id=goal_id,
                description="Goal deleted",
            )
        return deleted


class MaintenanceFlow(_StoreFlow):
    """
    First-launch seeding, reset, backup/restore and export.

    Reset and restore are DESTRUCTIVE; the UI asks for confirmation
    before calling them.
    """

    def __init__(
        self,
        storage: FinanceStorageInterface,
        preferences: PreferencesStore,
        backup_service: Optional[BackupService] = None,
        validator: Optional[FinanceValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(storage, validator, audit_logger)
        self._preferences = preferences
        self._backup_service = backup_service

    def _create_accounts(
        self,
        specs: list[tuple[str, AccountType, str, str]],
        correlation_id: UUID,
    ) -> list[Account]:
        created = []
        for name, account_type, icon, notes in specs:
            if self._storage.find_account_by_name(name) is not None:
                continue
            account = Account(name=name, account_type=account_type, icon=icon, notes=notes)
            with self._writing("account", account.id, correlation_id):
                self._storage.save_account(account)
            created.append(account)
        return created

    def seed_default_accounts(self) -> list[Account]:
        """
        Create the default accounts on first launch.

        Runs once: afterwards the preferences flag short-circuits it.
        Names that already exist (any case) are skipped.
        """
        if self._preferences.load().has_initialized_accounts:
            return []

        correlation_id = create_correlation_id()
        created = self._create_accounts(DEFAULT_ACCOUNTS, correlation_id)
        self._preferences.update(has_initialized_accounts=True)

        self._audit_logger.log_maintenance(
            AuditEventType.DEFAULT_ACCOUNTS_SEEDED,
            description=f"Seeded {len(created)} default account(s)",
            details={"accounts": [account.name for account in created]},
            correlation_id=correlation_id,
        )
        return created

    def reset_store(self) -> dict[str, int]:
        """
        Delete every record, reset preferences and recreate the default accounts.

        The audit log is kept. Returns the number of deleted records per kind.
        """
        correlation_id = create_correlation_id()
        deleted = {}
        for entity in EntityType:
            with self._writing(entity.value, correlation_id=correlation_id):
                deleted[entity.value] = self._storage.delete_all_records(entity)

        self._preferences.reset()
        created = self._create_accounts(RESET_ACCOUNTS, correlation_id)
        self._preferences.update(has_initialized_accounts=True)

        self._audit_logger.log_maintenance(
            AuditEventType.STORE_RESET,
            description="Store reset to defaults",
            details={"deleted": deleted, "recreated": [a.name for a in created]},
            correlation_id=correlation_id,
        )
        return deleted

    def _require_backups(self) -> BackupService:
        if self._backup_service is None:
            raise StorageError("Backups are not configured")
        return self._backup_service

    def create_backup(self, now: Optional[datetime] = None) -> Path:
        with self._writing("store"):
            path = self._require_backups().create_backup(now)
        self._audit_logger.log_maintenance(
            AuditEventType.BACKUP_CREATED,
            description=f"Backup written to {path.name}",
            details={"path": str(path)},
        )
        return path

    def list_backups(self) -> list[Path]:
        return self._require_backups().list_backups()

    def restore_backup(self, path: Union[str, Path]) -> None:
        """Replace the whole store with a backup. DESTRUCTIVE."""
        with self._writing("store"):
            self._require_backups().restore(path)
        self._audit_logger.log_maintenance(
            AuditEventType.BACKUP_RESTORED,
            description=f"Store restored from {Path(path).name}",
            details={"path": str(path)},
        )

    def export_transactions(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        today: Optional[date] = None,
    ) -> tuple[str, str]:
        """
        Render transactions in [date_from, date_to) as CSV.

        Returns:
            (file_name, csv_text)
        """
        transactions = self._storage.list_transactions(date_from=date_from, date_to=date_to)
        csv_text = transactions_to_csv(transactions, self._storage.list_accounts())
        filename = export_filename(today)

        self._audit_logger.log_maintenance(
            AuditEventType.TRANSACTIONS_EXPORTED,
            description=f"Exported {len(transactions)} transaction(s)",
            details={"file_name": filename},
        )
        return filename, csv_text


class DashboardFlow:
    """
    Load a snapshot from the store and compute the dashboard.

    Every figure is recomputed on each load; nothing derived is stored.
    """

    def __init__(
        self,
        storage: FinanceStorageInterface,
        settings: Optional[BudgetSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._settings = settings
        self._audit_logger = audit_logger or AuditLogger()

    def load(
        self,
        now: Optional[datetime] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
        goal_sort: GoalSortOption = GoalSortOption.DATE_CREATED,
    ) -> DashboardSnapshot:
        """
        Build the dashboard for one month (the current month by default).

        Raises:
            StorageError: If the snapshot cannot be read
        """
        now = to_local_naive(now or datetime.now())
        year = year or now.year
        month = month or now.month
        settings = self._settings or get_settings().budget

        try:
            budget = self._storage.get_budget(f"{month:02d}", year)
            transactions = self._storage.list_transactions()
            accounts = self._storage.list_accounts()
            goals = self._storage.list_goals()
        except StorageError as e:
            self._audit_logger.log_error(
                error_type="dashboard_load_failed",
                error_message=str(e),
                details={"year": year, "month": month},
            )
            raise

        return DashboardSnapshot(
            generated_at=now,
            budget=summarize_month(budget, transactions, year, month, now, settings),
            net_worth=summarize_net_worth(accounts, transactions, now, settings),
            goals=[evaluate_goal(goal, now.date()) for goal in sort_goals(goals, goal_sort)],
            weekly_spending=weekly_spending(transactions, now, settings.weekly_window_days),
            monthly_spending=monthly_spending(transactions, now, settings.monthly_window_months),
            recent_transactions=transactions[:settings.recent_transactions_limit],
            accounts=accounts,
            savings_goals=goals,
        )


class AppComponents(NamedTuple):
    client: SQLiteClient
    storage: SQLiteFinanceStorage
    audit_logger: AuditLogger
    validator: FinanceValidator
    preferences: PreferencesStore
    ledger: LedgerFlow
    planning: PlanningFlow
    maintenance: MaintenanceFlow
    dashboard: DashboardFlow


def create_app_components(
    database_path: Optional[str] = None,
    backup_dir: Optional[Union[str, Path]] = None,
    preferences_path: Optional[Union[str, Path]] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        database_path: SQLite file (or ':memory:'); defaults to settings
        backup_dir: Where backups are written; defaults to settings
        preferences_path: Preferences JSON file; defaults to settings

    Raises:
        StoreUnavailableError: If the store cannot be opened
    """
    store_settings = get_settings().store

    client = SQLiteClient(database_path or store_settings.database_path)
    client.connect()
    storage = SQLiteFinanceStorage(client)
    audit_logger = AuditLogger(SQLiteAuditStorage(client))
    validator = FinanceValidator(storage)
    preferences = PreferencesStore(preferences_path or store_settings.preferences_path)
    backup_service = BackupService(client, backup_dir or store_settings.backup_path)

    return AppComponents(
        client=client,
        storage=storage,
        audit_logger=audit_logger,
        validator=validator,
        preferences=preferences,
        ledger=LedgerFlow(storage, validator, audit_logger),
        planning=PlanningFlow(storage, validator, audit_logger, preferences),
        maintenance=MaintenanceFlow(storage, preferences, backup_service, validator, audit_logger),
        dashboard=DashboardFlow(storage, audit_logger=audit_logger),
    )
