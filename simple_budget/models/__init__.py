"""
Data Models Package

This package contains all Pydantic models used in SimpleBudget.
All data flowing through the system must conform to these schemas.
"""

from simple_budget.models.finance import (
    DEBT_ACCOUNT_TYPES,
    FREQUENCY_MULTIPLIERS,
    SUGGESTED_CATEGORIES,
    UNCATEGORIZED,
    Account,
    AccountType,
    Budget,
    IncomeFrequency,
    IncomeSource,
    SavingsGoal,
    Transaction,
    TransactionType,
)
from simple_budget.models.drafts import (
    AccountDraft,
    BudgetDraft,
    GoalDraft,
    TransactionDraft,
    ValidationIssue,
    ValidationResult,
)
from simple_budget.models.summaries import (
    BudgetMode,
    BudgetSummary,
    CategorySpending,
    DashboardSnapshot,
    GoalProgress,
    GoalSortOption,
    MonthlySpending,
    NetWorthSummary,
    ProgressTier,
    WeeklySpending,
)
from simple_budget.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entities
    "DEBT_ACCOUNT_TYPES",
    "FREQUENCY_MULTIPLIERS",
    "SUGGESTED_CATEGORIES",
    "UNCATEGORIZED",
    "Account",
    "AccountType",
    "Budget",
    "IncomeFrequency",
    "IncomeSource",
    "SavingsGoal",
    "Transaction",
    "TransactionType",
    # Drafts and validation
    "AccountDraft",
    "BudgetDraft",
    "GoalDraft",
    "TransactionDraft",
    "ValidationIssue",
    "ValidationResult",
    # Derived values
    "BudgetMode",
    "BudgetSummary",
    "CategorySpending",
    "DashboardSnapshot",
    "GoalProgress",
    "GoalSortOption",
    "MonthlySpending",
    "NetWorthSummary",
    "ProgressTier",
    "WeeklySpending",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
