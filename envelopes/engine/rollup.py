"""Mini README: Month rollup engine keeping month and category chains consistent.

Structure:
    * MonthSummary - read-only view of one month's aggregates.
    * MonthRollupEngine - opens months, assigns budgeted amounts, applies
      category activity, and can rebuild every aggregate from scratch.

Two chains are maintained incrementally so reads stay O(1):

    balance(c, m)        = balance(c, m-1) + budgeted(c, m) + activity(c, m)
    to_be_budgeted(m)    = to_be_budgeted(m-1) + income(m) - budgeted(m)

Any change in month ``m`` is therefore pushed into ``m`` and every later
month that already exists. ``recompute`` replays the whole history and is
used after restoring a snapshot.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Optional

from ..errors import (
    InvalidAllocationError,
    MonthOutOfOrderError,
    NotFoundError,
)
from ..logging_utils import get_logger
from ..money import ensure_milliunits
from ..months import MonthKey
from ..store import CategoryId, CategoryMonth, EntityStore, Month, Transaction

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class MonthSummary:
    """Aggregates reported for one budget month."""

    month: MonthKey
    income: int
    budgeted: int
    activity: int
    to_be_budgeted: int
    age_of_money: Optional[int] = None
    note: str = ""

    def as_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["month"] = self.month.isoformat()
        return payload


class MonthRollupEngine:
    """Maintain per-month aggregates and category carry-forward."""

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def _is_inflow(self, category_id: Optional[CategoryId]) -> bool:
        return category_id is not None and category_id == self._store.inflow_category_id

    # ------------------------------------------------------------- months

    def advance_to_month(self, new_month: MonthKey) -> Month:
        """Open ``new_month`` directly after the latest existing month.

        The first month of a budget starts from zero. Later months inherit
        the previous month's to-be-budgeted figure and every category's
        closing balance.
        """

        if not isinstance(new_month, MonthKey):
            raise MonthOutOfOrderError(f"Not a calendar month: {new_month!r}")
        if new_month in self._store.list_months():
            raise MonthOutOfOrderError(f"Month {new_month} already exists")
        previous_key = self._store.last_month
        self._store.add_month(new_month)
        month = self._store.get_month(new_month)
        if previous_key is not None:
            previous = self._store.get_month(previous_key, include_deleted=True)
            month.to_be_budgeted = previous.to_be_budgeted
            for category_id, row in month.categories.items():
                row.balance = previous.categories[category_id].balance
        LOGGER.info("Opened month %s (to be budgeted %s)", new_month, month.to_be_budgeted)
        return month

    # ---------------------------------------------------------- budgeting

    def validate_budgeted(self, category_id: CategoryId, month_key: MonthKey, amount: int) -> None:
        try:
            ensure_milliunits(amount)
        except TypeError as error:
            raise InvalidAllocationError(str(error)) from error
        self._store.get_category(category_id)
        if self._is_inflow(category_id):
            raise InvalidAllocationError("Money cannot be budgeted into the inflow category")
        self._store.get_month(month_key)

    def set_budgeted(self, category_id: CategoryId, month_key: MonthKey, amount: int) -> CategoryMonth:
        """Set the budgeted amount of a category for one month."""

        self.validate_budgeted(category_id, month_key, amount)
        month = self._store.get_month(month_key)
        row = month.categories[category_id]
        delta = amount - row.budgeted
        if delta == 0:
            return row
        row.budgeted = amount
        month.budgeted += delta
        self._carry_category(category_id, month_key, delta)
        self._carry_to_be_budgeted(month_key, -delta)
        LOGGER.info("Budgeted %s to %s in %s (delta %s)", amount, category_id, month_key, delta)
        return row

    # ----------------------------------------------------------- activity

    def validate_activity(self, category_id: CategoryId, month_key: MonthKey, *, historical: bool = False) -> None:
        """Raise unless a transaction may post activity to this category/month."""

        self._store.get_category(category_id, include_deleted=historical)
        try:
            self._store.get_month(month_key, include_deleted=historical)
        except NotFoundError as error:
            raise NotFoundError(f"Month {month_key} has not been opened in this budget") from error

    def apply_activity(self, category_id: CategoryId, month_key: MonthKey, amount: int) -> None:
        """Post transaction ``amount`` to a category and its month.

        Inflows to the to-be-budgeted category count as month income and do
        not touch any category row.
        """

        month = self._store.get_month(month_key, include_deleted=True)
        if self._is_inflow(category_id):
            month.income += amount
            self._carry_to_be_budgeted(month_key, amount)
            return
        month.categories[category_id].activity += amount
        month.activity += amount
        self._carry_category(category_id, month_key, amount)

    # -------------------------------------------------------------- chains

    def _carry_category(self, category_id: CategoryId, month_key: MonthKey, delta: int) -> None:
        for month in self._store.months_from(month_key):
            month.categories[category_id].balance += delta

    def _carry_to_be_budgeted(self, month_key: MonthKey, delta: int) -> None:
        for month in self._store.months_from(month_key):
            month.to_be_budgeted += delta

    def recompute(self, transactions: Iterable[Transaction]) -> None:
        """Rebuild every month aggregate from transactions and budgeted rows."""

        months = [self._store.get_month(key, include_deleted=True) for key in self._store.list_months()]
        by_key = {month.month: month for month in months}
        for month in months:
            month.income = 0
            month.activity = 0
            month.budgeted = sum(row.budgeted for row in month.categories.values())
            for row in month.categories.values():
                row.activity = 0

        for transaction in transactions:
            if transaction.is_deleted or transaction.category is None:
                continue
            month = by_key.get(transaction.month)
            if month is None:
                raise NotFoundError(
                    f"Transaction {transaction.transaction_id} falls outside the budget months"
                )
            if self._is_inflow(transaction.category):
                month.income += transaction.amount
            else:
                month.categories[transaction.category].activity += transaction.amount
                month.activity += transaction.amount

        previous: Optional[Month] = None
        for month in months:
            carried = previous.to_be_budgeted if previous else 0
            month.to_be_budgeted = carried + month.income - month.budgeted
            for category_id, row in month.categories.items():
                opening = previous.categories[category_id].balance if previous else 0
                row.balance = opening + row.budgeted + row.activity
            previous = month
        LOGGER.debug("Recomputed rollups for %s months", len(months))

    # ------------------------------------------------------------- reports

    def month_summary(self, month_key: MonthKey) -> MonthSummary:
        month = self._store.get_month(month_key)
        return MonthSummary(
            month=month.month,
            income=month.income,
            budgeted=month.budgeted,
            activity=month.activity,
            to_be_budgeted=month.to_be_budgeted,
            note=month.note,
        )
