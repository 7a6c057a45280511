"""Unit tests for budget and goal view models"""

import pytest
from datetime import date
from decimal import Decimal
from wallet_tracker.domain.models import Budget, BudgetStatus, Goal
from wallet_tracker.domain.views import budget_view, calculate_percentage, goal_progress


@pytest.fixture
def food_budget() -> Budget:
    return Budget(
        id="budget_1",
        user_id="user_1",
        category_id="food",
        amount_limit=Decimal("500000"),
        period_month=6,
        period_year=2024,
    )


def test_budget_view_warning(food_budget):
    view = budget_view(food_budget, Decimal("450000"))

    assert view.spent == Decimal("450000")
    assert view.remaining == Decimal("50000")
    assert view.percentage == 90
    assert view.status == BudgetStatus.WARNING


def test_budget_view_over_is_clamped(food_budget):
    view = budget_view(food_budget, Decimal("550000"))

    assert view.remaining == Decimal("-50000")
    assert view.percentage == 100
    assert view.status == BudgetStatus.OVER


@pytest.mark.parametrize(
    "spent, status",
    [
        ("0", BudgetStatus.OK),
        ("399999", BudgetStatus.OK),
        ("400000", BudgetStatus.WARNING),
        ("499999", BudgetStatus.WARNING),
        ("500000", BudgetStatus.OVER),
    ],
)
def test_budget_status_thresholds(food_budget, spent, status):
    assert budget_view(food_budget, Decimal(spent)).status == status


def test_budget_view_custom_threshold(food_budget):
    assert budget_view(food_budget, Decimal("350000"), warning_threshold=70).status == BudgetStatus.WARNING


def test_zero_limit_yields_zero_percentage():
    assert calculate_percentage(Decimal("10"), Decimal("0")) == 0


def test_negative_spend_clamped_to_zero():
    assert calculate_percentage(Decimal("-10"), Decimal("100")) == 0


def test_goal_progress():
    goal = Goal(
        id="goal_1",
        user_id="user_1",
        name="Laptop",
        target_amount=Decimal("10000000"),
        current_amount=Decimal("2500000"),
        deadline=date(2025, 1, 1),
    )

    progress = goal_progress(goal)

    assert progress.percentage == 25
    assert progress.remaining == Decimal("7500000")
    assert progress.completed is False


def test_goal_progress_completed_when_target_reached():
    goal = Goal(id="goal_1", user_id="user_1", name="Trip", target_amount=Decimal("100"), current_amount=Decimal("120"))

    progress = goal_progress(goal)

    assert progress.percentage == 100
    assert progress.remaining == Decimal("0")
    assert progress.completed is True
