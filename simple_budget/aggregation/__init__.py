"""
Aggregation engine.

Pure functions from a store snapshot to display values. Nothing in this
package reads from or writes to storage.
"""

from simple_budget.aggregation.accounts import (
    days_until_due,
    is_past_due,
    monthly_interest_amount,
    next_due_date,
    roll_due_date_forward,
)
from simple_budget.aggregation.budget import (
    category_budget_estimate,
    category_spending,
    daily_average,
    progress_tier,
    remaining_budget,
    summarize_month,
    total_spent,
    transactions_for_category,
    transactions_in_window,
    usage_percentage,
)
from simple_budget.aggregation.goals import (
    days_remaining,
    evaluate_goal,
    is_complete,
    is_past_deadline,
    progress_percentage,
    progress_ratio,
    remaining_amount,
    required_monthly_contribution,
    sort_goals,
)
from simple_budget.aggregation.income import (
    budget_income,
    monthly_value,
    total_monthly_income,
)
from simple_budget.aggregation.net_worth import (
    estimate_prior_net_worth,
    has_sufficient_history,
    signed_amount,
    summarize_net_worth,
    total_accounts_balance,
    total_assets,
    total_debt,
    total_net_worth,
)
from simple_budget.aggregation.periods import month_bounds
from simple_budget.aggregation.trends import monthly_spending, weekly_spending

__all__ = [
    # Accounts
    "days_until_due",
    "is_past_due",
    "monthly_interest_amount",
    "next_due_date",
    "roll_due_date_forward",
    # Budget
    "category_budget_estimate",
    "category_spending",
    "daily_average",
    "progress_tier",
    "remaining_budget",
    "summarize_month",
    "total_spent",
    "transactions_for_category",
    "transactions_in_window",
    "usage_percentage",
    # Goals
    "days_remaining",
    "evaluate_goal",
    "is_complete",
    "is_past_deadline",
    "progress_percentage",
    "progress_ratio",
    "remaining_amount",
    "required_monthly_contribution",
    "sort_goals",
    # Income
    "budget_income",
    "monthly_value",
    "total_monthly_income",
    # Net worth
    "estimate_prior_net_worth",
    "has_sufficient_history",
    "signed_amount",
    "summarize_net_worth",
    "total_accounts_balance",
    "total_assets",
    "total_debt",
    "total_net_worth",
    # Periods and trends
    "month_bounds",
    "monthly_spending",
    "weekly_spending",
]
