"""
Integration tests for the flows.

Each test gets a fresh in-memory store wired by create_app_components.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from simple_budget.models.audit import AuditEventType
from simple_budget.models.drafts import (
    AccountDraft,
    BudgetDraft,
    GoalDraft,
    TransactionDraft,
)
from simple_budget.models.finance import (
    AccountType,
    IncomeSource,
    TransactionType,
)
from simple_budget.models.summaries import BudgetMode, GoalSortOption
from simple_budget.services.storage import (
    DuplicateError,
    NotFoundError,
    SQLiteAuditStorage,
    StorageError,
)
from simple_budget.validation import ValidationFailedError


def recorded_event_types(components):
    audit_storage = SQLiteAuditStorage(components.client)
    return [event.event_type for event in audit_storage.get_recent_events()]


class TestLedgerFlow:
    """Tests for account and transaction writes."""

    def test_add_account(self, components):
        account = components.ledger.add_account(AccountDraft(name="Checking", balance="500"))
        assert components.storage.get_account(account.id).balance == Decimal("500")
        assert AuditEventType.ACCOUNT_CREATED in recorded_event_types(components)

    def test_duplicate_account_is_rejected(self, components):
        components.ledger.add_account(AccountDraft(name="Checking"))
        with pytest.raises(ValidationFailedError) as exc_info:
            components.ledger.add_account(AccountDraft(name="checking"))

        assert exc_info.value.result.issues[0].issue_type == "duplicate"
        assert len(components.storage.list_accounts()) == 1
        assert AuditEventType.VALIDATION_FAILED in recorded_event_types(components)

    def test_rename_account(self, components):
        account = components.ledger.add_account(AccountDraft(name="Checking", balance="75"))
        renamed = components.ledger.rename_account(account.id, "Everyday")

        assert renamed.id == account.id
        assert renamed.balance == Decimal("75")
        assert components.storage.find_account_by_name("everyday").id == account.id

    def test_rename_to_taken_name(self, components):
        components.ledger.add_account(AccountDraft(name="Checking"))
        other = components.ledger.add_account(AccountDraft(name="Savings"))
        with pytest.raises(ValidationFailedError):
            components.ledger.rename_account(other.id, "CHECKING")

    def test_update_missing_account(self, components):
        with pytest.raises(NotFoundError):
            components.ledger.rename_account(uuid4(), "Anything")

    def test_advance_due_date(self, components):
        card = components.ledger.add_account(AccountDraft(
            name="Visa",
            account_type=AccountType.CREDIT_CARD,
            balance="300",
            is_debt=True,
            due_date=date(2025, 1, 31),
        ))
        advanced = components.ledger.advance_due_date(card.id)
        assert advanced.due_date == date(2025, 2, 28)
        assert components.storage.get_account(card.id).due_date == date(2025, 2, 28)

    def test_delete_account_keeps_linked_records(self, components):
        account = components.ledger.add_account(AccountDraft(name="Savings"))
        transaction = components.ledger.record_transaction(TransactionDraft(
            title="Deposit", amount="50", account_id=account.id
        ))

        assert components.ledger.delete_account(account.id)
        assert components.storage.get_transaction(transaction.id).account_id is None

    def test_record_invalid_transaction_writes_nothing(self, components):
        with pytest.raises(ValidationFailedError):
            components.ledger.record_transaction(TransactionDraft(title="Coffee", amount="-3"))
        assert components.storage.count_transactions() == 0

    def test_overlong_title_is_a_validation_error(self, components):
        with pytest.raises(ValidationFailedError) as exc_info:
            components.ledger.record_transaction(TransactionDraft(title="x" * 201, amount="5"))

        assert exc_info.value.result.issues[0].issue_type == "too_long"
        assert components.storage.count_transactions() == 0

    def test_offset_aware_date_is_stored_as_local_time(self, components, now):
        aware = datetime(2025, 6, 3, 10, 0, tzinfo=timezone.utc)
        transaction = components.ledger.record_transaction(TransactionDraft(
            title="Coffee", amount="3", date=aware.isoformat()
        ))

        stored = components.storage.get_transaction(transaction.id)
        assert stored.date.tzinfo is None
        assert stored.date == aware.astimezone().replace(tzinfo=None)
        assert components.dashboard.load(now).budget.total_spent == Decimal("3")

    def test_update_transaction_keeps_created_at(self, components):
        original = components.ledger.record_transaction(TransactionDraft(
            title="Coffee", amount="3", date=datetime(2025, 6, 3)
        ))
        updated = components.ledger.update_transaction(original.id, TransactionDraft(
            title="Coffee and cake", amount="7.5", date=datetime(2025, 6, 3)
        ))

        loaded = components.storage.get_transaction(original.id)
        assert loaded.title == "Coffee and cake"
        assert loaded.amount == Decimal("7.5")
        assert loaded.created_at == original.created_at == updated.created_at

    def test_batch_delete(self, components):
        for day in (1, 10, 20):
            components.ledger.record_transaction(TransactionDraft(
                title=f"Day {day}", amount="1", date=datetime(2025, 6, day)
            ))
        deleted = components.ledger.delete_transactions(datetime(2025, 6, 5), datetime(2025, 6, 21))
        assert deleted == 2
        assert [t.title for t in components.ledger.transactions()] == ["Day 1"]
        assert AuditEventType.TRANSACTIONS_BATCH_DELETED in recorded_event_types(components)

    def test_storage_failure_is_audited_and_raised(self, components, monkeypatch):
        def fail(transaction):
            raise StorageError("database is on fire")

        monkeypatch.setattr(components.storage, "save_transaction", fail)
        with pytest.raises(StorageError):
            components.ledger.record_transaction(TransactionDraft(title="Coffee", amount="3"))
        assert AuditEventType.SAVE_FAILED in recorded_event_types(components)


class TestPlanningFlow:
    """Tests for budgets, income sources and goals."""

    def test_save_budget_is_upsert(self, components):
        first = components.planning.save_budget(BudgetDraft(amount="1500", month=6, year=2025))
        second = components.planning.save_budget(BudgetDraft(amount="1700", month=6, year=2025))

        assert second.id == first.id
        assert components.planning.get_budget(2025, 6).amount == Decimal("1700")
        assert len(components.storage.list_budgets()) == 1
        assert components.preferences.load().last_budget_update is not None

    def test_income_sources(self, components):
        components.planning.save_budget(BudgetDraft(amount="1500", month=6, year=2025))
        salary = IncomeSource(name="Salary", amount=Decimal("1500"))
        bonus = IncomeSource(name="Bonus", amount=Decimal("500"))

        components.planning.add_income_source(2025, 6, salary)
        budget = components.planning.add_income_source(2025, 6, bonus)
        assert [s.name for s in budget.income_sources] == ["Salary", "Bonus"]

        # 500 of income would leave a 1500 budget uncovered
        with pytest.raises(ValidationFailedError):
            components.planning.remove_income_source(2025, 6, salary.id)
        assert len(components.planning.get_budget(2025, 6).income_sources) == 2

        budget = components.planning.remove_income_source(2025, 6, bonus.id)
        assert [s.name for s in budget.income_sources] == ["Salary"]

    def test_delete_budget(self, components):
        components.planning.save_budget(BudgetDraft(amount="1500", month=6, year=2025))

        assert components.planning.delete_budget(2025, 6)
        assert components.planning.get_budget(2025, 6) is None
        assert not components.planning.delete_budget(2025, 6)
        assert AuditEventType.BUDGET_DELETED in recorded_event_types(components)

    def test_income_source_needs_budget(self, components):
        with pytest.raises(NotFoundError):
            components.planning.add_income_source(2025, 6, IncomeSource(name="Salary", amount=Decimal("1")))

    def test_remove_unknown_income_source(self, components):
        components.planning.save_budget(BudgetDraft(amount="0", month=6, year=2025))
        with pytest.raises(NotFoundError):
            components.planning.remove_income_source(2025, 6, IncomeSource(name="x", amount=Decimal("1")).id)

    def test_goal_lifecycle(self, components, today):
        goal = components.planning.create_goal(
            GoalDraft(name="Car", target_amount="25000", current_amount="15000",
                      deadline=date(2025, 12, 20)),
            today,
        )
        updated = components.planning.update_goal_amount(goal.id, "16,000")
        assert updated.current_amount == Decimal("16000")

        with pytest.raises(ValidationFailedError):
            components.planning.update_goal_amount(goal.id, "30000")
        assert components.storage.get_goal(goal.id).current_amount == Decimal("16000")

        progress = components.planning.goals(GoalSortOption.PROGRESS, today)
        assert progress[0].remaining_amount == Decimal("9000")

        assert components.planning.delete_goal(goal.id)
        assert components.planning.goals() == []

    def test_overlong_goal_notes_is_a_validation_error(self, components, today):
        with pytest.raises(ValidationFailedError) as exc_info:
            components.planning.create_goal(
                GoalDraft(name="Car", target_amount="100", notes="n" * 1001), today
            )

        assert exc_info.value.result.issues[0].field == "notes"
        assert components.planning.goals() == []

    def test_update_missing_goal(self, components):
        with pytest.raises(NotFoundError):
            components.planning.update_goal_amount(uuid4(), "1")


class TestMaintenanceFlow:
    """Tests for seeding, reset, backup and export."""

    def test_seed_default_accounts_once(self, components):
        created = components.maintenance.seed_default_accounts()
        assert [a.name for a in created] == ["My Savings", "My Investments"]
        assert components.preferences.load().has_initialized_accounts

        assert components.maintenance.seed_default_accounts() == []
        assert len(components.storage.list_accounts()) == 2

    def test_seed_skips_existing_names(self, components):
        components.ledger.add_account(AccountDraft(name="my savings", balance="10"))
        created = components.maintenance.seed_default_accounts()
        assert [a.name for a in created] == ["My Investments"]

    def test_reset_store(self, components):
        components.ledger.add_account(AccountDraft(name="Brokerage", balance="9000"))
        components.ledger.record_transaction(TransactionDraft(title="Coffee", amount="3"))
        components.planning.save_budget(BudgetDraft(amount="1500", month=6, year=2025))
        components.planning.create_goal(GoalDraft(name="Car", target_amount="100"))
        components.preferences.update(privacy_mode=True, selected_tab=3)

        deleted = components.maintenance.reset_store()

        assert deleted == {"accounts": 1, "transactions": 1, "budgets": 1, "savings_goals": 1}
        accounts = components.storage.list_accounts()
        assert {a.name for a in accounts} == {"My Checking", "My Savings", "My Investments"}
        assert all(a.balance == Decimal("0") for a in accounts)
        assert components.storage.count_transactions() == 0
        assert components.storage.list_goals() == []

        preferences = components.preferences.load()
        assert preferences.privacy_mode
        assert preferences.selected_tab == 0
        assert AuditEventType.STORE_RESET in recorded_event_types(components)

    def test_backup_and_restore(self, components):
        components.ledger.add_account(AccountDraft(name="Checking", balance="500"))
        older = components.maintenance.create_backup(datetime(2025, 6, 19, 12, 0))
        components.ledger.record_transaction(TransactionDraft(title="Coffee", amount="3"))
        newer = components.maintenance.create_backup(datetime(2025, 6, 20, 12, 0))

        assert components.maintenance.list_backups() == [newer, older]

        components.maintenance.restore_backup(older)
        assert components.storage.count_transactions() == 0
        assert [a.name for a in components.storage.list_accounts()] == ["Checking"]

    def test_backup_in_same_second_is_refused(self, components, now):
        first = components.maintenance.create_backup(now)
        with pytest.raises(DuplicateError):
            components.maintenance.create_backup(now)

        assert components.maintenance.list_backups() == [first]
        assert AuditEventType.SAVE_FAILED in recorded_event_types(components)

    def test_restore_missing_backup(self, components):
        with pytest.raises(NotFoundError):
            components.maintenance.restore_backup("SimpleBudgetBackup-1.sqlite")

    def test_export(self, components, today):
        account = components.ledger.add_account(AccountDraft(name="Checking"))
        components.ledger.record_transaction(TransactionDraft(
            title="Groceries", amount="45.6", category="Food",
            date=datetime(2025, 6, 3, 10, 0), account_id=account.id,
        ))

        filename, csv_text = components.maintenance.export_transactions(today=today)

        assert filename == "transactions_2025-06-20.csv"
        assert csv_text.splitlines() == [
            "Date,Title,Amount,Category,Account,Notes",
            '2025-06-03,"Groceries",45.60,"Food","Checking",""',
        ]


class TestDashboardFlow:
    """Tests for the computed dashboard snapshot."""

    def test_load(self, components, now):
        components.ledger.add_account(AccountDraft(name="Checking", balance="500"))
        components.ledger.add_account(AccountDraft(name="Savings", account_type=AccountType.SAVINGS, balance="1000"))
        components.ledger.add_account(AccountDraft(
            name="Card", account_type=AccountType.CREDIT_CARD, balance="300", is_debt=True
        ))
        components.planning.save_budget(BudgetDraft(amount="1500", month=6, year=2025))
        components.ledger.record_transaction(TransactionDraft(
            title="Groceries", amount="45.67", category="Food", date=datetime(2025, 6, 3, 10, 0)
        ))
        components.ledger.record_transaction(TransactionDraft(
            title="Rent", amount="900", category="Housing", date=datetime(2025, 6, 1, 9, 0)
        ))
        components.ledger.record_transaction(TransactionDraft(
            title="Salary", amount="3000", category="Income", date=datetime(2025, 6, 1, 8, 0),
            transaction_type=TransactionType.INCOME,
        ))
        components.planning.create_goal(
            GoalDraft(name="Car", target_amount="25000", current_amount="15000",
                      deadline=date(2025, 12, 20)),
            now.date(),
        )

        snapshot = components.dashboard.load(now)

        assert snapshot.budget.total_spent == Decimal("45.67") + Decimal("900")
        assert snapshot.budget.remaining_budget == Decimal("554.33")
        assert snapshot.budget.budget_mode == BudgetMode.CEILING
        assert snapshot.net_worth.net_worth == Decimal("1200")
        assert not snapshot.net_worth.has_sufficient_history
        assert snapshot.goals[0].required_monthly_contribution == Decimal("1666.67")
        assert [t.title for t in snapshot.recent_transactions] == ["Groceries", "Rent", "Salary"]
        assert len(snapshot.weekly_spending) == 7
        assert len(snapshot.monthly_spending) == 6

    def test_load_empty_store(self, components, now):
        snapshot = components.dashboard.load(now - timedelta(days=400))
        assert not snapshot.budget.has_budget
        assert snapshot.net_worth.net_worth == Decimal("0")
        assert snapshot.goals == []

    def test_load_failure_is_audited_and_raised(self, components, now, monkeypatch):
        def fail(**filters):
            raise StorageError("database is locked")

        monkeypatch.setattr(components.storage, "list_transactions", fail)
        with pytest.raises(StorageError):
            components.dashboard.load(now)
        assert AuditEventType.SYSTEM_ERROR in recorded_event_types(components)
