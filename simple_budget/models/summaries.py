"""
Derived value models.

These are what the aggregation engine hands to the presentation layer.
They are computed on every load and never stored.

Optional fields are the "absent" state: None means "nothing to show"
(no budget set, no deadline, not enough history), which the UI renders
as an empty or prompt state rather than as zero.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from simple_budget.models.finance import Account, SavingsGoal, Transaction


class ProgressTier(str, Enum):
    """Colour tier of a spend-versus-budget bar."""
    NOMINAL = "nominal"
    WARNING = "warning"
    OVER_LIMIT = "over_limit"


class BudgetMode(str, Enum):
    """Which formula produced remaining_budget."""
    INCOME = "income"      # total income - budget amount
    CEILING = "ceiling"    # budget amount - total spent


class GoalSortOption(str, Enum):
    DATE_CREATED = "Date Created"
    PROGRESS = "Progress"
    DEADLINE = "Deadline"
    REMAINING = "Remaining Amount"


class CategorySpending(BaseModel):
    category: str
    amount: Decimal


class WeeklySpending(BaseModel):
    day: str = Field(..., description="Short weekday label, e.g. 'Mon'")
    spent_on: date
    amount: Decimal


class MonthlySpending(BaseModel):
    month: str = Field(..., description="Short month label, e.g. 'Jun'")
    year: int
    month_number: int
    amount: Decimal


class BudgetSummary(BaseModel):
    """Everything the dashboard shows about one month."""

    year: int
    month: int
    has_budget: bool
    budget_amount: Optional[Decimal] = None
    total_monthly_income: Decimal = Decimal("0")
    total_spent: Decimal = Decimal("0")
    remaining_budget: Optional[Decimal] = None
    budget_mode: Optional[BudgetMode] = None
    usage_percentage: Optional[float] = None
    progress_tier: Optional[ProgressTier] = None
    category_spending: list[CategorySpending] = Field(default_factory=list)
    daily_average: Decimal = Decimal("0")
    top_category: Optional[str] = None
    transaction_count: int = 0
    month_progress: int = Field(default=0, ge=0, le=100)


class GoalProgress(BaseModel):
    """Derived figures for one savings goal."""

    goal_id: UUID
    name: str
    target_amount: Decimal
    current_amount: Decimal
    progress_ratio: float = Field(..., ge=0.0, le=1.0)
    progress_percentage: float = Field(..., ge=0.0, le=100.0)
    is_complete: bool
    remaining_amount: Decimal = Field(..., ge=0)
    deadline: Optional[date] = None
    days_remaining: Optional[int] = None
    is_past_deadline: bool = False
    required_monthly_contribution: Optional[Decimal] = None


class NetWorthSummary(BaseModel):
    """
    Current net worth plus an approximate prior-period comparison.

    prior_net_worth and the change fields are None whenever
    has_sufficient_history is False.
    """

    total_assets: Decimal
    total_debt: Decimal
    net_worth: Decimal
    total_accounts_balance: Decimal
    has_sufficient_history: bool = False
    prior_net_worth: Optional[Decimal] = None
    change_amount: Optional[Decimal] = None
    change_percentage: Optional[float] = None


class DashboardSnapshot(BaseModel):
    """One load → compute cycle, ready to render."""

    generated_at: datetime
    budget: BudgetSummary
    net_worth: NetWorthSummary
    goals: list[GoalProgress] = Field(default_factory=list)
    weekly_spending: list[WeeklySpending] = Field(default_factory=list)
    monthly_spending: list[MonthlySpending] = Field(default_factory=list)
    recent_transactions: list[Transaction] = Field(default_factory=list)
    accounts: list[Account] = Field(default_factory=list)
    savings_goals: list[SavingsGoal] = Field(default_factory=list)
