"""
Goal Tracker

Progress, completion and deadline status for savings goals, plus the
monthly contribution needed to hit a deadline.

Every figure here is derived from the goal and "today"; nothing is stored.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from simple_budget.aggregation.periods import days_between, whole_months_between
from simple_budget.models.finance import SavingsGoal
from simple_budget.models.summaries import GoalProgress, GoalSortOption

CENTS = Decimal("0.01")


def progress_ratio(goal: SavingsGoal) -> float:
    """current / target clamped to [0, 1]; 0 when the target is not positive."""
    if goal.target_amount <= 0:
        return 0.0
    ratio = float(goal.current_amount / goal.target_amount)
    return min(max(ratio, 0.0), 1.0)


def progress_percentage(goal: SavingsGoal) -> float:
    return progress_ratio(goal) * 100


def is_complete(goal: SavingsGoal) -> bool:
    return goal.current_amount >= goal.target_amount


def remaining_amount(goal: SavingsGoal) -> Decimal:
    return max(Decimal("0"), goal.target_amount - goal.current_amount)


def days_remaining(goal: SavingsGoal, today: Optional[date] = None) -> Optional[int]:
    """Days until the deadline (negative once passed), None without one."""
    if goal.deadline is None:
        return None
    return days_between(today or date.today(), goal.deadline)


def is_past_deadline(goal: SavingsGoal, today: Optional[date] = None) -> bool:
    days = days_remaining(goal, today)
    return days is not None and days < 0


def required_monthly_contribution(
    goal: SavingsGoal,
    today: Optional[date] = None,
) -> Optional[Decimal]:
    """
    Amount to save per month to reach the target by the deadline.

    None when the goal is complete, has no deadline, the deadline is not
    in the future, or less than one whole month remains.
    """
    today = today or date.today()
    if goal.deadline is None or is_complete(goal) or goal.deadline <= today:
        return None

    months = whole_months_between(today, goal.deadline)
    if months <= 0:
        return None

    remaining = goal.target_amount - goal.current_amount
    return (remaining / Decimal(months)).quantize(CENTS, rounding=ROUND_HALF_UP)


def evaluate_goal(goal: SavingsGoal, today: Optional[date] = None) -> GoalProgress:
    today = today or date.today()
    return GoalProgress(
        goal_id=goal.id,
        name=goal.name,
        target_amount=goal.target_amount,
        current_amount=goal.current_amount,
        progress_ratio=progress_ratio(goal),
        progress_percentage=progress_percentage(goal),
        is_complete=is_complete(goal),
        remaining_amount=remaining_amount(goal),
        deadline=goal.deadline,
        days_remaining=days_remaining(goal, today),
        is_past_deadline=is_past_deadline(goal, today),
        required_monthly_contribution=required_monthly_contribution(goal, today),
    )


def sort_goals(
    goals: Iterable[SavingsGoal],
    option: GoalSortOption = GoalSortOption.DATE_CREATED,
) -> list[SavingsGoal]:
    """
    Order goals for the goal list.

    DATE_CREATED: newest first. PROGRESS: highest ratio first.
    DEADLINE: soonest first, goals without a deadline last.
    REMAINING: largest remaining amount first.
    """
    goals = list(goals)
    if option == GoalSortOption.PROGRESS:
        return sorted(goals, key=progress_ratio, reverse=True)
    if option == GoalSortOption.DEADLINE:
        return sorted(goals, key=lambda g: (g.deadline is None, g.deadline or date.max))
    if option == GoalSortOption.REMAINING:
        return sorted(goals, key=remaining_amount, reverse=True)
    return sorted(goals, key=lambda g: g.created_at, reverse=True)
