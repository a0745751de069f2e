"""
Draft and Validation Models

A draft is what a form submits: UNVERIFIED input, amounts still as the
raw text the user typed. Drafts go through FinanceValidator; only a draft
that validates cleanly is turned into an entity and written.

This keeps "non-numeric amount" and "duplicate name" as reportable
validation issues instead of exceptions thrown from deep inside a model.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from simple_budget.models.finance import (
    UNCATEGORIZED,
    AccountType,
    IncomeSource,
    TransactionType,
    to_local_naive,
)

RawAmount = Union[str, Decimal, int, float]


class AccountDraft(BaseModel):
    """Account form input."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    account_type: AccountType = AccountType.CHECKING
    balance: RawAmount = "0"
    is_debt: bool = False
    interest_rate: RawAmount = ""
    due_date: Optional[date] = None
    icon: Optional[str] = None
    notes: Optional[str] = None


class TransactionDraft(BaseModel):
    """Transaction form input."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = ""
    amount: RawAmount = ""
    category: str = UNCATEGORIZED
    date: datetime = Field(default_factory=datetime.now)
    transaction_type: TransactionType = TransactionType.EXPENSE
    notes: Optional[str] = None
    account_id: Optional[UUID] = None

    @field_validator('date')
    @classmethod
    def naive_local_time(cls, v: datetime) -> datetime:
        return to_local_naive(v)


class BudgetDraft(BaseModel):
    """Budget form input for one month."""
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: RawAmount = ""
    month: int = Field(..., description="Calendar month number")
    year: int
    notes: Optional[str] = None
    income_sources: list[IncomeSource] = Field(default_factory=list)


class GoalDraft(BaseModel):
    """Savings goal form input."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    target_amount: RawAmount = ""
    current_amount: RawAmount = "0"
    deadline: Optional[date] = None
    notes: Optional[str] = None
    account_id: Optional[UUID] = None


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'not_numeric', 'duplicate')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Outcome of validating one draft.

    Warnings never block a write; any error does.
    """

    entity_type: str = Field(
        ...,
        description="What was validated (account, transaction, budget, goal)"
    )
    validated_at: datetime = Field(
        default_factory=datetime.now
    )
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def error_messages(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "error"]
