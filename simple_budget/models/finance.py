"""
Core Data Models for SimpleBudget

These models define the schemas for everything the store holds:
accounts, transactions, monthly budgets (with embedded income sources)
and savings goals.

DESIGN DECISION: Money is always Decimal. Float arithmetic would make
"sum of categories == total spent" only approximately true.

DESIGN DECISION: Cross-field business rules that depend on user intent
(current amount within target, unique account names) belong to the
validator, not to these models. A stored goal that overshot its target
must still load.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def to_local_naive(value: datetime) -> datetime:
    """Convert an offset-aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """
    Supported account types.

    Asset types and debt types share one enum; Account.is_debt carries
    the classification the net-worth figures use.
    """
    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT = "investment"
    OTHER = "other"
    CREDIT_CARD = "creditcard"
    LOAN = "loan"
    MORTGAGE = "mortgage"
    OTHER_DEBT = "otherdebt"

    @property
    def is_debt_type(self) -> bool:
        return self in DEBT_ACCOUNT_TYPES


DEBT_ACCOUNT_TYPES = frozenset({
    AccountType.CREDIT_CARD,
    AccountType.LOAN,
    AccountType.MORTGAGE,
    AccountType.OTHER_DEBT,
})


class TransactionType(str, Enum):
    """
    Direction of a transaction.

    The amount itself is always unsigned; this decides its effect.
    """
    EXPENSE = "expense"
    INCOME = "income"


class IncomeFrequency(str, Enum):
    """How often an income source pays out."""
    MONTHLY = "Monthly"
    BIWEEKLY = "Bi-weekly"
    WEEKLY = "Weekly"

    @property
    def multiplier(self) -> Decimal:
        """Fixed monthly-equivalent factor (26/12 and 52/12, rounded)."""
        return FREQUENCY_MULTIPLIERS[self]


FREQUENCY_MULTIPLIERS = {
    IncomeFrequency.MONTHLY: Decimal("1.0"),
    IncomeFrequency.BIWEEKLY: Decimal("2.17"),
    IncomeFrequency.WEEKLY: Decimal("4.33"),
}

UNCATEGORIZED = "Uncategorized"

# Suggestion list offered by the transaction form; category stays free text.
SUGGESTED_CATEGORIES = [
    "Food",
    "Transportation",
    "Housing",
    "Entertainment",
    "Shopping",
    "Utilities",
    "Healthcare",
    "Education",
    "Travel",
    "Personal",
    "Income",
    UNCATEGORIZED,
]


# =============================================================================
# ENTITIES
# =============================================================================

class Account(BaseModel):
    """
    A bank, investment or debt account.

    For debt accounts the balance is the amount owed (positive).
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Account name (unique, case-insensitive)"
    )
    account_type: AccountType = AccountType.CHECKING
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Signed balance"
    )
    is_debt: bool = False
    interest_rate: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        le=100,
        description="Annual interest rate in percent (debt only)"
    )
    due_date: Optional[date] = Field(
        default=None,
        description="Next payment due date (debt only)"
    )
    icon: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


class Transaction(BaseModel):
    """A single expense or income entry."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    title: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Unsigned amount; transaction_type decides its effect"
    )
    category: str = Field(default=UNCATEGORIZED, max_length=100)
    date: datetime = Field(
        ...,
        description="Effective date of the transaction"
    )
    created_at: datetime = Field(default_factory=datetime.now)
    transaction_type: TransactionType = TransactionType.EXPENSE
    notes: Optional[str] = Field(default=None, max_length=1000)
    account_id: Optional[UUID] = None

    @field_validator('date', 'created_at')
    @classmethod
    def naive_local_time(cls, v: datetime) -> datetime:
        """Stored timestamps are naive local time so month windows compare."""
        return to_local_naive(v)

    @property
    def is_expense(self) -> bool:
        return self.transaction_type == TransactionType.EXPENSE

    @property
    def category_label(self) -> str:
        """Category for grouping; blank categories count as Uncategorized."""
        return self.category if self.category else UNCATEGORIZED


class IncomeSource(BaseModel):
    """
    A named income stream embedded in a Budget.

    Serialized as part of the budget's income_sources JSON column.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., ge=0)
    frequency: IncomeFrequency = IncomeFrequency.MONTHLY


class Budget(BaseModel):
    """
    Expense ceiling for one calendar month.

    At most one budget exists per (month, year); writes are upserts.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Expense budget ceiling for the month"
    )
    month: str = Field(
        ...,
        pattern=r"^(0[1-9]|1[0-2])$",
        description="Two-digit month, '01' to '12'"
    )
    year: int = Field(..., ge=1900, le=9999)
    notes: Optional[str] = Field(default=None, max_length=2000)
    income_sources: list[IncomeSource] = Field(default_factory=list)

    @field_validator('month', mode='before')
    @classmethod
    def pad_month(cls, v):
        """Accept 6 or '6' and store '06'."""
        if isinstance(v, int):
            return f"{v:02d}"
        if isinstance(v, str) and v.strip().isdigit() and len(v.strip()) == 1:
            return f"0{v.strip()}"
        return v

    @property
    def month_number(self) -> int:
        return int(self.month)

    @property
    def has_income_sources(self) -> bool:
        return len(self.income_sources) > 0


class SavingsGoal(BaseModel):
    """A target amount to save, optionally by a deadline."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=100)
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    created_at: datetime = Field(default_factory=datetime.now)
    deadline: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    account_id: Optional[UUID] = None

    @field_validator('created_at')
    @classmethod
    def naive_local_time(cls, v: datetime) -> datetime:
        return to_local_naive(v)
