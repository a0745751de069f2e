"""
Tests for SimpleBudget models

Test strategy:
1. Unit tests for individual components (models, aggregation, validators)
2. Integration tests for flows against an in-memory SQLite store
3. No files outside pytest's tmp_path, no network
"""

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from simple_budget.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from simple_budget.models.drafts import ValidationIssue, ValidationResult
from simple_budget.models.finance import (
    Account,
    AccountType,
    Budget,
    IncomeFrequency,
    IncomeSource,
    SavingsGoal,
    Transaction,
    TransactionType,
    to_local_naive,
)


class TestFinanceModels:
    """Tests for the stored entities."""

    def test_account_strips_whitespace(self):
        """Test that whitespace is stripped from account names."""
        account = Account(name="  My Checking  ")
        assert account.name == "My Checking"

    def test_account_rejects_empty_name(self):
        with pytest.raises(ValueError):
            Account(name="   ")

    def test_account_interest_rate_bounds(self):
        """Test that interest rates outside 0-100 are rejected."""
        with pytest.raises(ValueError):
            Account(name="Card", is_debt=True, interest_rate=Decimal("120"))

    def test_debt_account_types(self):
        assert AccountType.CREDIT_CARD.is_debt_type
        assert AccountType.MORTGAGE.is_debt_type
        assert not AccountType.SAVINGS.is_debt_type
        assert not AccountType.CHECKING.is_debt_type

    def test_transaction_rejects_negative_amount(self):
        """Direction comes from transaction_type, never from the sign."""
        with pytest.raises(ValueError):
            Transaction(title="Refund", amount=Decimal("-5"), date=datetime(2025, 6, 1))

    def test_transaction_blank_category_label(self):
        transaction = Transaction(
            title="Coffee",
            amount=Decimal("3.50"),
            category="",
            date=datetime(2025, 6, 1),
        )
        assert transaction.category_label == "Uncategorized"
        assert transaction.is_expense

    def test_transaction_dates_are_naive_local_time(self):
        aware = datetime(2025, 6, 3, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        transaction = Transaction(
            title="Coffee",
            amount=Decimal("3"),
            date=aware,
            created_at=aware,
        )
        expected = aware.astimezone().replace(tzinfo=None)
        assert transaction.date == expected
        assert transaction.created_at == expected

    def test_naive_dates_are_untouched(self):
        naive = datetime(2025, 6, 3, 10, 0)
        assert to_local_naive(naive) is naive
        goal = SavingsGoal(name="Trip", target_amount=Decimal("100"), created_at=naive)
        assert goal.created_at == naive

    def test_income_transaction_is_not_expense(self):
        transaction = Transaction(
            title="Salary",
            amount=Decimal("2000"),
            date=datetime(2025, 6, 1),
            transaction_type=TransactionType.INCOME,
        )
        assert not transaction.is_expense

    def test_budget_month_is_zero_padded(self):
        """Test that 6 and '6' are both stored as '06'."""
        assert Budget(amount=Decimal("100"), month=6, year=2025).month == "06"
        assert Budget(amount=Decimal("100"), month="6", year=2025).month == "06"
        assert Budget(amount=Decimal("100"), month="11", year=2025).month_number == 11

    def test_budget_rejects_invalid_month(self):
        with pytest.raises(ValueError):
            Budget(amount=Decimal("100"), month="13", year=2025)

    def test_budget_has_income_sources(self):
        budget = Budget(amount=Decimal("100"), month=1, year=2025)
        assert not budget.has_income_sources

        budget.income_sources.append(IncomeSource(name="Salary", amount=Decimal("2000")))
        assert budget.has_income_sources

    def test_savings_goal_defaults(self):
        goal = SavingsGoal(name="Vacation", target_amount=Decimal("3000"))
        assert goal.current_amount == Decimal("0")
        assert goal.deadline is None
        assert goal.account_id is None


class TestIncomeFrequency:
    """Tests for the monthly-equivalent multipliers."""

    def test_multipliers(self):
        assert IncomeFrequency.MONTHLY.multiplier == Decimal("1.0")
        assert IncomeFrequency.BIWEEKLY.multiplier == Decimal("2.17")
        assert IncomeFrequency.WEEKLY.multiplier == Decimal("4.33")

    def test_frequency_values(self):
        assert IncomeFrequency("Bi-weekly") == IncomeFrequency.BIWEEKLY
        assert [f.value for f in IncomeFrequency] == ["Monthly", "Bi-weekly", "Weekly"]


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            description="Account created",
        )
        assert event.event_id is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        entity_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.BUDGET_SAVED,
            entity_type="budget",
            entity_id=entity_id,
            description="Budget saved",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "budget_saved"
        assert log_dict["entity_id"] == str(entity_id)
        assert log_dict["correlation_id"] is None

    def test_audit_event_to_row(self):
        """Test conversion to an audit_events row."""
        event = AuditEvent(
            event_type=AuditEventType.GOAL_CREATED,
            description="Goal created",
            details={"target_amount": Decimal("1000")},
            is_user_action=True,
        )
        row = event.to_row()
        assert len(row) == 11
        assert row[2] == "goal_created"
        assert json.loads(row[8]) == {"target_amount": "1000"}
        assert row[10] == 1

    def test_audit_event_builder_save_failed(self):
        event = AuditEventBuilder.save_failed("transaction", "disk full")
        assert event.event_type == AuditEventType.SAVE_FAILED
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk full"

    def test_audit_event_builder_destructive_maintenance_is_warning(self):
        reset = AuditEventBuilder.maintenance(AuditEventType.STORE_RESET, "Reset")
        backup = AuditEventBuilder.maintenance(AuditEventType.BACKUP_CREATED, "Backup")
        assert reset.severity == AuditSeverity.WARNING
        assert backup.severity == AuditSeverity.INFO

    def test_audit_event_builder_batch_deleted(self):
        event = AuditEventBuilder.batch_deleted("transaction", 4, {"date_from": None})
        assert event.details["deleted_count"] == 4
        assert "4" in event.description


class TestValidationResult:
    """Tests for validation result model."""

    def test_validation_result_has_errors(self):
        result = ValidationResult(
            entity_type="goal",
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="target_amount",
                    issue_type="missing",
                    message="Target amount is required",
                    severity="error",
                ),
                ValidationIssue(
                    field="deadline",
                    issue_type="past_date",
                    message="Deadline is in the past",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors
        assert result.error_count == 1
        assert result.error_messages == ["Target amount is required"]

    def test_validation_result_warnings_only(self):
        result = ValidationResult(
            entity_type="account",
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="due_date",
                    issue_type="ignored",
                    message="Due date only applies to debt accounts",
                    severity="warning",
                ),
            ],
            warnings=["Due date only applies to debt accounts"],
        )
        assert not result.has_errors
        assert result.error_count == 0

    def test_validation_issue_rejects_unknown_severity(self):
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")
