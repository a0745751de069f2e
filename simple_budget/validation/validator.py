"""
Form Validation

DESIGN DECISION: Drafts are validated before anything is written.

The validator checks:
- Required fields presence
- Amounts that are numeric and in range
- Business rules (unique account names, budget within income,
  goal progress within target)

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the form can show them; a draft with any error-level
issue is not written. Warnings never block a write.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

import structlog

from simple_budget.aggregation.income import total_monthly_income
from simple_budget.models.drafts import (
    AccountDraft,
    BudgetDraft,
    GoalDraft,
    RawAmount,
    TransactionDraft,
    ValidationIssue,
    ValidationResult,
)
from simple_budget.models.finance import (
    UNCATEGORIZED,
    Account,
    Budget,
    SavingsGoal,
    Transaction,
)
from simple_budget.services.storage import AccountStorageInterface, StorageError

logger = structlog.get_logger(__name__)


class ValidationFailedError(Exception):
    """A draft had error-level issues; nothing was written."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(
            f"{result.entity_type} validation failed: " + "; ".join(result.error_messages)
        )


def parse_amount(raw: Optional[RawAmount]) -> Optional[Decimal]:
    """
    Parse user-typed money text.

    Accepts thousands separators ("1,250.50"). Returns None for blank,
    non-numeric or non-finite input.
    """
    if raw is None:
        return None
    if isinstance(raw, Decimal):
        return raw if raw.is_finite() else None
    text = str(raw).strip().replace(",", "")
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def _is_blank(raw: Optional[RawAmount]) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def _result(entity_type: str, issues: list[ValidationIssue]) -> ValidationResult:
    return ValidationResult(
        entity_type=entity_type,
        is_valid=not any(issue.severity == "error" for issue in issues),
        issues=issues,
        warnings=[issue.message for issue in issues if issue.severity == "warning"],
    )


class FinanceValidator:
    """
    Validates form drafts for accounts, transactions, budgets and goals.

    Duplicate account names are only checked when account storage is given.
    """

    def __init__(
        self,
        account_storage: Optional[AccountStorageInterface] = None,
    ):
        """
        Initialize validator.

        Args:
            account_storage: Storage interface for duplicate-name checks.
                             If None, duplicate checking is skipped.
        """
        self._storage = account_storage

    def _check_amount(
        self,
        raw: Optional[RawAmount],
        field: str,
        label: str,
        issues: list[ValidationIssue],
        required: bool = True,
    ) -> Optional[Decimal]:
        """Parse one amount field, appending missing / not-numeric issues."""
        if _is_blank(raw):
            if required:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{label} is required",
                    severity="error",
                    suggested_fix=f"Enter the {label.lower()}",
                ))
            return None

        value = parse_amount(raw)
        if value is None:
            issues.append(ValidationIssue(
                field=field,
                issue_type="not_numeric",
                message=f"{label} must be a number",
                severity="error",
                suggested_fix="Use digits and an optional decimal point, e.g. 1250.50",
            ))
        return value

    def _check_name(
        self,
        value: str,
        field: str,
        label: str,
        issues: list[ValidationIssue],
    ) -> None:
        if not value or not value.strip():
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
                severity="error",
            ))

    def _check_length(
        self,
        value: Optional[str],
        field: str,
        label: str,
        limit: int,
        issues: list[ValidationIssue],
    ) -> bool:
        """Append a too_long issue when value exceeds limit. Returns True if it fits."""
        if value and len(value) > limit:
            issues.append(ValidationIssue(
                field=field,
                issue_type="too_long",
                message=f"{label} must be {limit} characters or fewer",
                severity="error",
                suggested_fix=f"Shorten the {label.lower()}",
            ))
            return False
        return True

    def _name_taken(self, name: str, exclude_id: Optional[UUID]) -> bool:
        if self._storage is None:
            return False
        try:
            return self._storage.account_name_exists(name, exclude_id)
        except StorageError as e:
            # The unique index still rejects the write
            logger.warning("duplicate_check_failed", name=name, error=str(e))
            return False

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def validate_account_draft(
        self,
        draft: AccountDraft,
        account_id: Optional[UUID] = None,
    ) -> ValidationResult:
        """
        Validate an account form.

        Args:
            draft: The submitted form
            account_id: Id of the account being edited, so it does not
                        collide with its own name
        """
        issues: list[ValidationIssue] = []

        self._check_name(draft.name, "name", "Account name", issues)
        fits = self._check_length(draft.name, "name", "Account name", 100, issues)
        if fits and draft.name and self._name_taken(draft.name, account_id):
            issues.append(ValidationIssue(
                field="name",
                issue_type="duplicate",
                message=f"An account named '{draft.name}' already exists",
                severity="error",
                suggested_fix="Choose a different name",
            ))

        self._check_amount(draft.balance, "balance", "Balance", issues, required=False)

        rate = self._check_amount(
            draft.interest_rate, "interest_rate", "Interest rate", issues, required=False
        )
        if rate is not None and not (Decimal("0") <= rate <= Decimal("100")):
            issues.append(ValidationIssue(
                field="interest_rate",
                issue_type="out_of_range",
                message="Interest rate must be between 0 and 100 percent",
                severity="error",
            ))

        if not draft.is_debt:
            if rate is not None and rate > 0:
                issues.append(ValidationIssue(
                    field="interest_rate",
                    issue_type="ignored",
                    message="Interest rate only applies to debt accounts",
                    severity="warning",
                    suggested_fix="Mark the account as debt or clear the rate",
                ))
            if draft.due_date is not None:
                issues.append(ValidationIssue(
                    field="due_date",
                    issue_type="ignored",
                    message="Due date only applies to debt accounts",
                    severity="warning",
                ))

        self._check_length(draft.notes, "notes", "Notes", 1000, issues)

        return _result("account", issues)

    def build_account(
        self,
        draft: AccountDraft,
        account_id: Optional[UUID] = None,
    ) -> Account:
        """Turn a validated draft into an Account."""
        fields = dict(
            name=draft.name,
            account_type=draft.account_type,
            balance=parse_amount(draft.balance) or Decimal("0"),
            is_debt=draft.is_debt,
            interest_rate=(parse_amount(draft.interest_rate) or Decimal("0")) if draft.is_debt else Decimal("0"),
            due_date=draft.due_date if draft.is_debt else None,
            icon=draft.icon,
            notes=draft.notes,
        )
        if account_id is not None:
            fields["id"] = account_id
        return Account(**fields)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def validate_transaction_draft(self, draft: TransactionDraft) -> ValidationResult:
        issues: list[ValidationIssue] = []

        self._check_name(draft.title, "title", "Title", issues)
        self._check_length(draft.title, "title", "Title", 200, issues)
        self._check_length(draft.category, "category", "Category", 100, issues)
        self._check_length(draft.notes, "notes", "Notes", 1000, issues)

        amount = self._check_amount(draft.amount, "amount", "Amount", issues)
        if amount is not None and amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Choose Income or Expense instead of a negative amount",
            ))

        return _result("transaction", issues)

    def build_transaction(
        self,
        draft: TransactionDraft,
        transaction_id: Optional[UUID] = None,
    ) -> Transaction:
        fields = dict(
            title=draft.title,
            amount=parse_amount(draft.amount),
            category=draft.category or UNCATEGORIZED,
            date=draft.date,
            transaction_type=draft.transaction_type,
            notes=draft.notes,
            account_id=draft.account_id,
        )
        if transaction_id is not None:
            fields["id"] = transaction_id
        return Transaction(**fields)

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    def validate_budget_draft(self, draft: BudgetDraft) -> ValidationResult:
        issues: list[ValidationIssue] = []

        amount = self._check_amount(draft.amount, "amount", "Budget amount", issues)
        if amount is not None and amount < 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Budget amount cannot be negative",
                severity="error",
            ))

        if not 1 <= draft.month <= 12:
            issues.append(ValidationIssue(
                field="month",
                issue_type="out_of_range",
                message="Month must be between 1 and 12",
                severity="error",
            ))
        if not 1900 <= draft.year <= 9999:
            issues.append(ValidationIssue(
                field="year",
                issue_type="out_of_range",
                message="Year is out of range",
                severity="error",
            ))

        self._check_length(draft.notes, "notes", "Notes", 2000, issues)

        seen_names: set[str] = set()
        for source in draft.income_sources:
            key = source.name.casefold()
            if key in seen_names:
                issues.append(ValidationIssue(
                    field="income_sources",
                    issue_type="duplicate",
                    message=f"Income source '{source.name}' is listed more than once",
                    severity="warning",
                ))
            seen_names.add(key)

        if draft.income_sources and amount is not None:
            income = total_monthly_income(draft.income_sources)
            if amount > income:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="exceeds_income",
                    message=(
                        f"Budget ({amount:,.2f}) exceeds total monthly "
                        f"income ({income:,.2f})"
                    ),
                    severity="error",
                    suggested_fix="Lower the budget or add income sources",
                ))

        return _result("budget", issues)

    def build_budget(self, draft: BudgetDraft) -> Budget:
        return Budget(
            amount=parse_amount(draft.amount),
            month=draft.month,
            year=draft.year,
            notes=draft.notes,
            income_sources=draft.income_sources,
        )

    # -------------------------------------------------------------------------
    # Savings goals
    # -------------------------------------------------------------------------

    def _check_goal_amount(
        self,
        current: Optional[Decimal],
        target: Optional[Decimal],
        issues: list[ValidationIssue],
    ) -> None:
        if current is None:
            return
        if current < 0:
            issues.append(ValidationIssue(
                field="current_amount",
                issue_type="invalid_value",
                message="Current amount cannot be negative",
                severity="error",
            ))
        elif target is not None and current > target:
            issues.append(ValidationIssue(
                field="current_amount",
                issue_type="exceeds_target",
                message="Current amount cannot exceed the target amount",
                severity="error",
                suggested_fix="Raise the target or lower the current amount",
            ))

    def validate_goal_draft(
        self,
        draft: GoalDraft,
        today: Optional[date] = None,
    ) -> ValidationResult:
        issues: list[ValidationIssue] = []
        today = today or date.today()

        self._check_name(draft.name, "name", "Goal name", issues)
        self._check_length(draft.name, "name", "Goal name", 100, issues)
        self._check_length(draft.notes, "notes", "Notes", 1000, issues)

        target = self._check_amount(draft.target_amount, "target_amount", "Target amount", issues)
        if target is not None and target <= 0:
            issues.append(ValidationIssue(
                field="target_amount",
                issue_type="invalid_value",
                message="Target amount must be greater than zero",
                severity="error",
            ))
            target = None

        current = self._check_amount(
            draft.current_amount, "current_amount", "Current amount", issues, required=False
        )
        self._check_goal_amount(current, target, issues)

        if draft.deadline is not None and draft.deadline < today:
            issues.append(ValidationIssue(
                field="deadline",
                issue_type="past_date",
                message=f"Deadline ({draft.deadline}) is in the past",
                severity="warning",
                suggested_fix="Pick a future date if you want a monthly savings target",
            ))

        return _result("goal", issues)

    def build_goal(self, draft: GoalDraft) -> SavingsGoal:
        return SavingsGoal(
            name=draft.name,
            target_amount=parse_amount(draft.target_amount),
            current_amount=parse_amount(draft.current_amount) or Decimal("0"),
            deadline=draft.deadline,
            notes=draft.notes,
            account_id=draft.account_id,
        )

    def validate_goal_amount(
        self,
        goal: SavingsGoal,
        raw_amount: RawAmount,
    ) -> ValidationResult:
        """Validate a new current amount for an existing goal."""
        issues: list[ValidationIssue] = []
        current = self._check_amount(raw_amount, "current_amount", "Current amount", issues)
        self._check_goal_amount(current, goal.target_amount, issues)
        return _result("goal", issues)

    # -------------------------------------------------------------------------
    # Presentation
    # -------------------------------------------------------------------------

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what the forms show.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []

        if result.has_errors:
            lines.append(f"❌ The {result.entity_type} could not be saved:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please note:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
