"""Budget and goal view models for progress bars"""

from decimal import Decimal

from wallet_tracker.domain.models import (
    Budget,
    BudgetStatus,
    BudgetView,
    Goal,
    GoalProgress,
)

HUNDRED = Decimal("100")


def calculate_percentage(amount: Decimal, limit: Decimal) -> Decimal:
    """Share of limit consumed, clamped to [0, 100]; 0 when limit <= 0"""
    if not limit or limit <= 0:
        return Decimal("0")
    percentage = Decimal(amount) / Decimal(limit) * HUNDRED
    return max(Decimal("0"), min(percentage, HUNDRED))


def classify(percentage: Decimal, warning_threshold: int = 80) -> BudgetStatus:
    if percentage >= HUNDRED:
        return BudgetStatus.OVER
    if percentage >= warning_threshold:
        return BudgetStatus.WARNING
    return BudgetStatus.OK


def budget_view(budget: Budget, spent: Decimal, warning_threshold: int = 80) -> BudgetView:
    """
    Combine a budget limit with its spend aggregate.

    remaining may go negative when over budget; percentage is clamped for
    display even though spend can exceed the limit.

    Example:
        limit 500000, spent 450000 -> remaining 50000, 90%, WARNING
        limit 500000, spent 550000 -> remaining -50000, 100%, OVER
    """
    limit = Decimal(budget.amount_limit)
    spent = Decimal(spent)
    percentage = calculate_percentage(spent, limit)

    return BudgetView(
        budget=budget,
        spent=spent,
        limit=limit,
        remaining=limit - spent,
        percentage=percentage,
        status=classify(percentage, warning_threshold),
    )


def goal_progress(goal: Goal) -> GoalProgress:
    current = Decimal(goal.current_amount or 0)
    target = Decimal(goal.target_amount)
    return GoalProgress(
        goal=goal,
        current=current,
        target=target,
        remaining=max(target - current, Decimal("0")),
        percentage=calculate_percentage(current, target),
        completed=target > 0 and current >= target,
    )
