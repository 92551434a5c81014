"""Mini README: Goal progress evaluation for budget categories.

Structure:
    * GoalProgress - report describing how a category stands against its goal.
    * evaluate_goal - pure evaluation of a goal against one month's category row.
    * GoalTracker - resolves categories through the store and builds reports.

Evaluation never mutates categories or months. Balance targets are
measured against the category's current balance: a dated target spreads
``target - balance`` over the months left until its date (the first months
take any extra milliunits), and monthly funding asks for whatever part of
the funding amount has not been budgeted this month. An underfunded or
overdue goal is reported through flags, not raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..logging_utils import get_logger
from ..money import split_evenly
from ..months import MonthKey
from ..store import (
    CategoryId,
    CategoryMonth,
    EntityStore,
    Goal,
    MonthlyFunding,
    TargetCategoryBalance,
    TargetCategoryBalanceByDate,
)

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class GoalProgress:
    """Derived state of a category goal in one month."""

    category_id: CategoryId
    month: MonthKey
    kind: str
    progress: float
    required_this_month: int
    still_needed: int
    schedule: Tuple[int, ...] = ()
    months_remaining: Optional[int] = None
    overdue: bool = False

    @property
    def underfunded(self) -> bool:
        return self.still_needed > 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "category_id": self.category_id.value,
            "month": self.month.isoformat(),
            "kind": self.kind,
            "progress": self.progress,
            "required_this_month": self.required_this_month,
            "still_needed": self.still_needed,
            "schedule": list(self.schedule),
            "months_remaining": self.months_remaining,
            "overdue": self.overdue,
            "underfunded": self.underfunded,
        }


def _ratio(value: int, target: int) -> float:
    if target <= 0:
        return 1.0
    if value <= 0:
        return 0.0
    return min(1.0, value / target)


def evaluate_goal(
    category_id: CategoryId,
    goal: Goal,
    row: CategoryMonth,
    month: MonthKey,
) -> GoalProgress:
    """Evaluate ``goal`` against the category figures of ``month``."""

    kind = goal.kind

    if isinstance(kind, MonthlyFunding):
        required = max(0, kind.funding_balance - row.budgeted)
        return GoalProgress(
            category_id=category_id,
            month=month,
            kind="monthly_funding",
            progress=_ratio(row.budgeted, kind.funding_balance),
            required_this_month=required,
            still_needed=required,
            schedule=(max(0, kind.funding_balance),),
        )

    shortfall = max(0, kind.target - row.balance)

    if isinstance(kind, TargetCategoryBalanceByDate):
        months_remaining = month.months_until(kind.by_date) + 1
        if months_remaining <= 0:
            return GoalProgress(
                category_id=category_id,
                month=month,
                kind="target_balance_by_date",
                progress=_ratio(row.balance, kind.target),
                required_this_month=shortfall,
                still_needed=shortfall,
                schedule=(shortfall,) if shortfall else (),
                months_remaining=0,
                overdue=row.balance < kind.target,
            )
        # schedule[0] is the ceiling share of the shortfall
        schedule = tuple(split_evenly(shortfall, months_remaining))
        return GoalProgress(
            category_id=category_id,
            month=month,
            kind="target_balance_by_date",
            progress=_ratio(row.balance, kind.target),
            required_this_month=schedule[0],
            still_needed=schedule[0],
            schedule=schedule,
            months_remaining=months_remaining,
        )

    if isinstance(kind, TargetCategoryBalance):
        return GoalProgress(
            category_id=category_id,
            month=month,
            kind="target_balance",
            progress=_ratio(row.balance, kind.target),
            required_this_month=shortfall,
            still_needed=shortfall,
            schedule=(shortfall,) if shortfall else (),
        )

    raise TypeError(f"Unsupported goal kind: {kind!r}")


class GoalTracker:
    """Evaluate category goals through the entity store."""

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def evaluate(self, category_id: CategoryId, month: MonthKey) -> Optional[GoalProgress]:
        """Return the goal progress for a category, or ``None`` without a goal."""

        category = self._store.get_category(category_id)
        if category.goal is None:
            return None
        row = self._store.get_category_month(category_id, month)
        progress = evaluate_goal(category_id, category.goal, row, month)
        if progress.overdue:
            LOGGER.info("Goal for %s is overdue in %s", category_id, month)
        return progress

    def report(self, month: MonthKey) -> List[GoalProgress]:
        """Evaluate every active category goal for ``month``."""

        self._store.get_month(month)
        reports: List[GoalProgress] = []
        for category in self._store.list_categories():
            if category.goal is None:
                continue
            row = self._store.get_category_month(category.category_id, month)
            reports.append(evaluate_goal(category.category_id, category.goal, row, month))
        LOGGER.debug("Evaluated %s goals for %s", len(reports), month)
        return reports
