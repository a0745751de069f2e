"""Tests for the goal tracker."""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from simple_budget.aggregation.goals import (
    days_remaining,
    evaluate_goal,
    is_complete,
    is_past_deadline,
    progress_ratio,
    remaining_amount,
    required_monthly_contribution,
    sort_goals,
)
from simple_budget.models.finance import SavingsGoal
from simple_budget.models.summaries import GoalSortOption


def goal(target, current, deadline=None, name="Goal", created_at=None):
    return SavingsGoal(
        name=name,
        target_amount=Decimal(target),
        current_amount=Decimal(current),
        deadline=deadline,
        created_at=created_at or datetime(2025, 1, 1),
    )


class TestProgress:
    """Tests for progress ratio and completion."""

    def test_completed_goal(self, today):
        """Goal 10000/10000 is complete with nothing left to save."""
        g = goal("10000", "10000", deadline=date(2025, 12, 31))
        assert is_complete(g)
        assert progress_ratio(g) == 1.0
        assert remaining_amount(g) == Decimal("0")
        assert required_monthly_contribution(g, today) is None

    def test_ratio_is_clamped_when_overshooting(self):
        g = goal("1000", "1500")
        assert progress_ratio(g) == 1.0
        assert remaining_amount(g) == Decimal("0")

    def test_ratio_zero_for_non_positive_target(self):
        assert progress_ratio(goal("0", "50")) == 0.0
        assert progress_ratio(goal("-10", "50")) == 0.0

    def test_partial_progress(self):
        g = goal("4000", "1000")
        assert progress_ratio(g) == pytest.approx(0.25)
        assert not is_complete(g)


class TestDeadlines:
    """Tests for deadline status and monthly contribution."""

    def test_six_months_to_go(self, today):
        """25000 target, 15000 saved, six months left → 1666.67 per month."""
        g = goal("25000", "15000", deadline=date(2025, 12, 20))
        assert remaining_amount(g) == Decimal("10000")
        assert required_monthly_contribution(g, today) == Decimal("1666.67")

    def test_no_deadline(self, today):
        g = goal("1000", "100")
        assert days_remaining(g, today) is None
        assert not is_past_deadline(g, today)
        assert required_monthly_contribution(g, today) is None

    def test_past_deadline(self, today):
        g = goal("1000", "100", deadline=today - timedelta(days=3))
        assert days_remaining(g, today) == -3
        assert is_past_deadline(g, today)
        assert required_monthly_contribution(g, today) is None

    def test_less_than_a_month_left(self, today):
        g = goal("1000", "100", deadline=today + timedelta(days=20))
        assert required_monthly_contribution(g, today) is None

    def test_deadline_today_is_not_past(self, today):
        g = goal("1000", "100", deadline=today)
        assert days_remaining(g, today) == 0
        assert not is_past_deadline(g, today)

    def test_evaluate_goal(self, today):
        g = goal("25000", "15000", deadline=date(2025, 12, 20), name="Car")
        progress = evaluate_goal(g, today)
        assert progress.goal_id == g.id
        assert progress.name == "Car"
        assert progress.progress_percentage == pytest.approx(60.0)
        assert progress.days_remaining == (date(2025, 12, 20) - today).days
        assert progress.required_monthly_contribution == Decimal("1666.67")


class TestSortGoals:
    """Tests for goal list ordering."""

    @pytest.fixture
    def goals(self):
        return [
            goal("1000", "900", deadline=date(2025, 9, 1), name="Almost", created_at=datetime(2025, 1, 1)),
            goal("5000", "500", deadline=None, name="Long", created_at=datetime(2025, 3, 1)),
            goal("2000", "1000", deadline=date(2025, 7, 1), name="Half", created_at=datetime(2025, 2, 1)),
        ]

    def test_by_date_created_newest_first(self, goals):
        assert [g.name for g in sort_goals(goals, GoalSortOption.DATE_CREATED)] == ["Long", "Half", "Almost"]

    def test_by_progress(self, goals):
        assert [g.name for g in sort_goals(goals, GoalSortOption.PROGRESS)] == ["Almost", "Half", "Long"]

    def test_by_deadline_missing_last(self, goals):
        assert [g.name for g in sort_goals(goals, GoalSortOption.DEADLINE)] == ["Half", "Almost", "Long"]

    def test_by_remaining(self, goals):
        assert [g.name for g in sort_goals(goals, GoalSortOption.REMAINING)] == ["Long", "Half", "Almost"]
