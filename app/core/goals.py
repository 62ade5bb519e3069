"""Goal progress evaluation and bonus wording."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from app.core.compensation import HUNDRED, ZERO, to_decimal
from app.core.formatting import format_money
from app.core.constants import GOAL_COMMISSION, GOAL_SALES, GOAL_TYPE_ENUM
from app.errors import ValidationError

METRIC_LABELS = {
    GOAL_SALES: "sales",
    GOAL_COMMISSION: "commission",
}
DEFAULT_METRIC_LABEL = "revenue"


@dataclass
class GoalProgress:
    current: Decimal
    target: Decimal
    progress_percent: Decimal
    remaining: Decimal
    achieved: bool
    bonus_amount: Optional[Decimal] = None
    bonus_description: Optional[str] = None


def validate_goal(
    user_id: Optional[int],
    creator_id: Optional[int],
    target: Any,
    month: int,
    goal_type: Optional[str] = None,
) -> None:
    if user_id is not None and creator_id is not None:
        raise ValidationError("A goal is either global, per user or per creator, not both")
    if to_decimal(target) <= ZERO:
        raise ValidationError("Target must be greater than 0")
    if month < 0 or month > 12:
        raise ValidationError("Month must be between 0 (yearly) and 12")
    if goal_type is not None and goal_type not in GOAL_TYPE_ENUM:
        raise ValidationError(f"Unknown goal type '{goal_type}'")


def describe_bonus(goal: Any, creator_name: Optional[str] = None, chatter_view: bool = False) -> Optional[str]:
    """Human readable description of what unlocks a goal's bonus."""

    bonus = to_decimal(getattr(goal, "bonus_amount", None))
    if bonus <= ZERO:
        return None

    bonus_text = format_money(bonus)
    if getattr(goal, "creator_id", None) is not None:
        name = creator_name
        if name is None and getattr(goal, "creator", None) is not None:
            name = goal.creator.name
        name = name or "the creator"
        metric = METRIC_LABELS.get(goal.type, DEFAULT_METRIC_LABEL)
        target_text = format_money(to_decimal(goal.target))
        if chatter_view:
            return (
                f"{bonus_text} bonus will be unlocked for chatters if {name} reaches "
                f"{metric} of {target_text} in this period."
            )
        return f"Bonus: {bonus_text} when {name} reaches {metric} of {target_text}."

    return f"Bonus: {bonus_text} will be unlocked when this goal is achieved."


def compute_goal_progress(
    goal: Any,
    current: Any,
    creator_name: Optional[str] = None,
    chatter_view: bool = False,
) -> GoalProgress:
    """Compare an aggregated figure against the goal target.

    The percentage is clamped to 0..100 for display while ``achieved`` uses the
    raw comparison. The bonus is informational; nothing here creates payments.
    """

    target = to_decimal(goal.target)
    if target < ZERO:
        raise ValidationError("Target cannot be negative")
    current_value = to_decimal(current)
    achieved = current_value >= target

    if target == ZERO:
        progress = HUNDRED if achieved else ZERO
    else:
        progress = current_value / target * HUNDRED
        progress = min(HUNDRED, max(ZERO, progress))

    bonus = getattr(goal, "bonus_amount", None)
    return GoalProgress(
        current=current_value,
        target=target,
        progress_percent=progress,
        remaining=max(ZERO, target - current_value),
        achieved=achieved,
        bonus_amount=to_decimal(bonus) if bonus is not None else None,
        bonus_description=describe_bonus(goal, creator_name, chatter_view),
    )
