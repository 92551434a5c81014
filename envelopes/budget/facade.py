"""Mini README: Budget facade composing the store, engines and goal tracker.

Structure:
    * Budget - the object external callers hold. It adds entities, records
      and edits transactions, assigns budgeted amounts, opens months, and
      answers balance, month, goal and age-of-money queries.

Every public mutation runs under one re-entrant lock and validates before
it mutates, so a raised ``BudgetError`` always means nothing changed.
Reads take the same lock to avoid observing half-applied updates, except
for age of money: it copies the (immutable) transactions under the lock
and scans them after releasing it.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date
from typing import Any, Dict, List, Optional, Union

from ..engine import MonthRollupEngine, MonthSummary, TransactionEngine, age_of_money
from ..errors import (
    BudgetError,
    InvalidAllocationError,
    InvalidTransactionError,
    NotFoundError,
    SnapshotLoadError,
)
from ..formatting import BudgetSettings
from ..goals import GoalProgress, GoalTracker
from ..logging_utils import get_logger
from ..money import ensure_milliunits
from ..months import MonthKey
from ..store import (
    Account,
    AccountId,
    AccountKind,
    Category,
    CategoryGroupId,
    CategoryId,
    CategoryMonth,
    ClearedStatus,
    EntityStore,
    Goal,
    GoalKind,
    Payee,
    PayeeId,
    Transaction,
    TransactionId,
)

LOGGER = get_logger(__name__)

INFLOW_GROUP_NAME = "Inflow"
INFLOW_CATEGORY_NAME = "To Be Budgeted"
STARTING_BALANCE_PAYEE = "Starting Balance"
SNAPSHOT_FORMAT_VERSION = 1


def transfer_payee_name(account_name: str) -> str:
    return f"Transfer : {account_name}"


class Budget:
    """Envelope budget: the root owner of every entity and aggregate."""

    def __init__(
        self,
        name: str,
        *,
        settings: Optional[BudgetSettings] = None,
        store: Optional[EntityStore] = None,
    ) -> None:
        self.name = name
        self.settings = settings or BudgetSettings()
        self._store = store or EntityStore()
        self._rollup = MonthRollupEngine(self._store)
        self._transactions = TransactionEngine(self._store, self._rollup)
        self._goals = GoalTracker(self._store)
        self._lock = threading.RLock()

    @classmethod
    def with_name(
        cls,
        name: str,
        *,
        first_month: Optional[MonthKey] = None,
        settings: Optional[BudgetSettings] = None,
    ) -> "Budget":
        """Create an empty budget with its inflow category and first month."""

        budget = cls(name, settings=settings)
        store = budget._store
        group_id = store.add_category_group(INFLOW_GROUP_NAME, is_hidden=True)
        store.inflow_category_id = store.add_category(group_id, INFLOW_CATEGORY_NAME, is_hidden=True)
        budget._rollup.advance_to_month(first_month or MonthKey.from_date(date.today()))
        LOGGER.info("Created budget '%s' starting %s", name, store.first_month)
        return budget

    # ----------------------------------------------------------- properties

    @property
    def store(self) -> EntityStore:
        return self._store

    @property
    def inflow_category(self) -> CategoryId:
        if self._store.inflow_category_id is None:
            raise NotFoundError(
                f"Budget '{self.name}' has no inflow category; create it with Budget.with_name"
            )
        return self._store.inflow_category_id

    @property
    def current_month(self) -> MonthKey:
        last = self._store.last_month
        if last is None:
            raise NotFoundError(f"Budget '{self.name}' has no months; create it with Budget.with_name")
        return last

    # ------------------------------------------------------------- accounts

    def add_account(
        self,
        name: str,
        kind: AccountKind,
        *,
        on_budget: Optional[bool] = None,
        note: str = "",
        starting_balance: int = 0,
        opened_on: Optional[date] = None,
    ) -> AccountId:
        """Add an account, its transfer payee, and an optional starting balance."""

        kind = AccountKind(kind)
        if on_budget is None:
            on_budget = kind.on_budget_by_default
        try:
            ensure_milliunits(starting_balance)
        except TypeError as error:
            raise InvalidTransactionError(str(error)) from error
        with self._lock:
            opened_on = opened_on or self.current_month.first_day
            if starting_balance and on_budget:
                self._rollup.validate_activity(self.inflow_category, MonthKey.from_date(opened_on))

            account_id = self._store.add_account(name, kind, on_budget=on_budget, note=note)
            self._store.add_payee(transfer_payee_name(name), transfer_account=account_id)
            if starting_balance:
                self._record(
                    Transaction(
                        date=opened_on,
                        amount=starting_balance,
                        account=account_id,
                        payee=self._starting_balance_payee(),
                        category=self.inflow_category if on_budget else None,
                        cleared=ClearedStatus.CLEARED,
                        approved=True,
                    )
                )
            LOGGER.info("Added %s account '%s' as %s", kind.value, name, account_id)
            return account_id

    def _starting_balance_payee(self) -> PayeeId:
        for payee in self._store.list_payees():
            if payee.name == STARTING_BALANCE_PAYEE and payee.transfer_account is None:
                return payee.payee_id
        return self._store.add_payee(STARTING_BALANCE_PAYEE)

    def close_account(self, account_id: AccountId) -> Account:
        with self._lock:
            account = self._store.get_account(account_id)
            account.is_closed = True
            LOGGER.info("Closed account %s", account_id)
            return replace(account)

    def reopen_account(self, account_id: AccountId) -> Account:
        with self._lock:
            account = self._store.get_account(account_id)
            account.is_closed = False
            LOGGER.info("Reopened account %s", account_id)
            return replace(account)

    def delete_account(self, account_id: AccountId) -> None:
        """Soft-delete an account together with its transfer payee."""

        with self._lock:
            account = self._store.get_account(account_id)
            account.is_deleted = True
            for payee in self._store.list_payees():
                if payee.transfer_account == account_id:
                    payee.is_deleted = True
            LOGGER.info("Deleted account %s", account_id)

    def get_account(self, account_id: AccountId, *, include_deleted: bool = False) -> Account:
        with self._lock:
            return replace(self._store.get_account(account_id, include_deleted=include_deleted))

    def accounts(self, *, include_deleted: bool = False) -> List[Account]:
        with self._lock:
            return [replace(account) for account in self._store.list_accounts(include_deleted=include_deleted)]

    # --------------------------------------------------------------- payees

    def add_payee(self, name: str) -> PayeeId:
        with self._lock:
            payee_id = self._store.add_payee(name)
            LOGGER.info("Added payee '%s' as %s", name, payee_id)
            return payee_id

    def delete_payee(self, payee_id: PayeeId) -> None:
        with self._lock:
            self._store.get_payee(payee_id).is_deleted = True
            LOGGER.info("Deleted payee %s", payee_id)

    def payees(self, *, include_deleted: bool = False) -> List[Payee]:
        with self._lock:
            return [replace(payee) for payee in self._store.list_payees(include_deleted=include_deleted)]

    # ----------------------------------------------------------- categories

    def add_category_group(self, name: str) -> CategoryGroupId:
        with self._lock:
            group_id = self._store.add_category_group(name)
            LOGGER.info("Added category group '%s' as %s", name, group_id)
            return group_id

    def add_category(
        self,
        group_id: CategoryGroupId,
        name: str,
        *,
        note: str = "",
        goal: Optional[Union[Goal, GoalKind]] = None,
    ) -> CategoryId:
        with self._lock:
            category_id = self._store.add_category(group_id, name, note=note, goal=self._as_goal(goal))
            LOGGER.info("Added category '%s' as %s", name, category_id)
            return category_id

    def _as_goal(self, goal: Optional[Union[Goal, GoalKind]]) -> Optional[Goal]:
        if goal is None or isinstance(goal, Goal):
            return goal
        return Goal(kind=goal, creation_month=self.current_month)

    def set_category_goal(self, category_id: CategoryId, goal: Union[Goal, GoalKind]) -> Category:
        """Attach a goal; a bare goal kind is created in the current month."""

        with self._lock:
            category = self._require_budget_category(category_id)
            category.goal = self._as_goal(goal)
            LOGGER.info("Set goal on %s: %s", category_id, category.goal)
            return replace(category)

    def clear_category_goal(self, category_id: CategoryId) -> Category:
        with self._lock:
            category = self._require_budget_category(category_id)
            category.goal = None
            return replace(category)

    def hide_category(self, category_id: CategoryId, *, hidden: bool = True) -> Category:
        with self._lock:
            category = self._require_budget_category(category_id)
            category.is_hidden = hidden
            return replace(category)

    def delete_category_group(self, group_id: CategoryGroupId) -> None:
        with self._lock:
            group = self._store.get_category_group(group_id)
            if self.inflow_category in group.category_ids:
                raise InvalidAllocationError("The inflow category group cannot be deleted")
            group.is_deleted = True
            LOGGER.info("Deleted category group %s", group_id)

    def _require_budget_category(self, category_id: CategoryId) -> Category:
        category = self._store.get_category(category_id)
        if category_id == self.inflow_category:
            raise InvalidAllocationError("The inflow category cannot be changed")
        return category

    def get_category(self, category_id: CategoryId, *, include_deleted: bool = False) -> Category:
        with self._lock:
            return replace(self._store.get_category(category_id, include_deleted=include_deleted))

    def categories(self, *, include_deleted: bool = False) -> List[Category]:
        with self._lock:
            return [
                replace(category)
                for category in self._store.list_categories(include_deleted=include_deleted)
            ]

    def category_month(self, category_id: CategoryId, month: Optional[MonthKey] = None) -> CategoryMonth:
        """Return a copy of the category's figures for ``month``."""

        with self._lock:
            return replace(self._store.get_category_month(category_id, month or self.current_month))

    # --------------------------------------------------------- transactions

    def _resolve_transfer(self, transaction: Transaction) -> Transaction:
        """Fill in the transfer account from a transfer payee and vice versa."""

        if transaction.payee is not None:
            payee = self._store.get_payee(transaction.payee)
            if payee.transfer_account is not None:
                if transaction.transfer_account is None:
                    return replace(transaction, transfer_account=payee.transfer_account)
                if transaction.transfer_account != payee.transfer_account:
                    raise InvalidTransactionError(
                        f"Payee {payee.payee_id} transfers to {payee.transfer_account}, "
                        f"not {transaction.transfer_account}"
                    )
        if transaction.transfer_account is not None and transaction.payee is None:
            for payee in self._store.list_payees():
                if payee.transfer_account == transaction.transfer_account:
                    return replace(transaction, payee=payee.payee_id)
        return transaction

    def _record(self, transaction: Transaction) -> TransactionId:
        transaction = replace(self._resolve_transfer(transaction), transaction_id=None, is_deleted=False)
        self._transactions.commit(transaction)
        return self._store.add_transaction(transaction)

    def record_transaction(self, transaction: Transaction) -> TransactionId:
        """Validate, post and store a transaction."""

        with self._lock:
            try:
                transaction_id = self._record(transaction)
            except BudgetError as error:
                LOGGER.warning("Rejected transaction on %s: %s", transaction.account, error)
                raise
            LOGGER.info(
                "Recorded %s as %s on %s", transaction.amount, transaction_id, transaction.account
            )
            return transaction_id

    def update_transaction(self, transaction_id: TransactionId, transaction: Transaction) -> Transaction:
        """Replace a posted transaction, reversing the old effects first."""

        with self._lock:
            try:
                previous = self._store.get_transaction(transaction_id)
                updated = replace(
                    self._resolve_transfer(transaction), transaction_id=transaction_id, is_deleted=False
                )
                reversal = self._transactions.plan(previous.reversed(), historical=True)
                posting = self._transactions.plan(updated)
            except BudgetError as error:
                LOGGER.warning("Rejected update of transaction %s: %s", transaction_id, error)
                raise
            self._transactions.apply(reversal)
            self._transactions.apply(posting)
            self._store.replace_transaction(updated)
            LOGGER.info("Updated transaction %s", transaction_id)
            return updated

    def delete_transaction(self, transaction_id: TransactionId) -> None:
        with self._lock:
            try:
                transaction = self._store.get_transaction(transaction_id)
                self._transactions.reverse(transaction)
            except BudgetError as error:
                LOGGER.warning("Rejected deletion of transaction %s: %s", transaction_id, error)
                raise
            self._store.replace_transaction(replace(transaction, is_deleted=True))
            LOGGER.info("Deleted transaction %s", transaction_id)

    def set_cleared_status(self, transaction_id: TransactionId, status: ClearedStatus) -> Transaction:
        with self._lock:
            try:
                transaction = self._store.get_transaction(transaction_id)
                status = ClearedStatus(status)
                self._transactions.change_cleared_status(transaction, status)
            except BudgetError as error:
                LOGGER.warning("Rejected cleared status change on %s: %s", transaction_id, error)
                raise
            updated = replace(transaction, cleared=status)
            self._store.replace_transaction(updated)
            return updated

    def get_transaction(self, transaction_id: TransactionId, *, include_deleted: bool = False) -> Transaction:
        with self._lock:
            return self._store.get_transaction(transaction_id, include_deleted=include_deleted)

    def transactions(self, *, include_deleted: bool = False) -> List[Transaction]:
        with self._lock:
            return self._store.list_transactions(include_deleted=include_deleted)

    # --------------------------------------------------------------- months

    def set_category_budgeted(self, category_id: CategoryId, month: MonthKey, amount: int) -> CategoryMonth:
        with self._lock:
            return replace(self._rollup.set_budgeted(category_id, month, amount))

    def advance_to_month(self, new_month: MonthKey) -> MonthKey:
        with self._lock:
            return self._rollup.advance_to_month(new_month).month

    def advance_month(self) -> MonthKey:
        """Open the month following the current one."""

        with self._lock:
            return self._rollup.advance_to_month(self.current_month.next()).month

    def months(self) -> List[MonthKey]:
        with self._lock:
            return self._store.list_months()

    def month_summary(self, month: Optional[MonthKey] = None) -> MonthSummary:
        """Return month aggregates including the derived age of money."""

        with self._lock:
            summary = self._rollup.month_summary(month or self.current_month)
        return replace(summary, age_of_money=self.age_of_money(summary.month))

    def age_of_money(self, month: Optional[MonthKey] = None, *, as_of: Optional[date] = None) -> Optional[int]:
        """Compute age of money at ``as_of`` (default: the month's last day)."""

        with self._lock:
            month_key = month or self.current_month
            self._store.get_month(month_key)
            history = tuple(self._store.list_transactions())
            on_budget = frozenset(
                account.account_id
                for account in self._store.list_accounts(include_deleted=True)
                if account.on_budget
            )
        return age_of_money(history, on_budget, as_of or month_key.last_day)

    def recompute(self) -> None:
        """Rebuild every derived balance from transactions and allocations."""

        with self._lock:
            history = self._store.list_transactions(include_deleted=True)
            self._transactions.rebuild_account_balances(history)
            self._rollup.recompute(history)

    # ---------------------------------------------------------------- goals

    def goal_progress(self, category_id: CategoryId, month: Optional[MonthKey] = None) -> Optional[GoalProgress]:
        with self._lock:
            return self._goals.evaluate(category_id, month or self.current_month)

    def goal_report(self, month: Optional[MonthKey] = None) -> List[GoalProgress]:
        with self._lock:
            return self._goals.report(month or self.current_month)

    # ------------------------------------------------------------ snapshots

    def snapshot(self) -> Dict[str, Any]:
        """Export the whole budget as JSON-ready data."""

        with self._lock:
            return {
                "format_version": SNAPSHOT_FORMAT_VERSION,
                "name": self.name,
                "settings": self.settings.as_dict(),
                "state": self._store.export_state(),
            }

    @classmethod
    def restore(cls, payload: Dict[str, Any]) -> "Budget":
        """Rebuild a budget from ``snapshot`` output and verify its aggregates."""

        try:
            if payload["format_version"] != SNAPSHOT_FORMAT_VERSION:
                raise SnapshotLoadError(f"Unsupported snapshot version {payload['format_version']!r}")
            name = str(payload["name"])
            settings = BudgetSettings.from_dict(payload["settings"])
            state = payload["state"]
        except (KeyError, TypeError, ValueError) as error:
            raise SnapshotLoadError(f"Malformed budget snapshot: {error}") from error

        store = EntityStore.import_state(state)
        if store.inflow_category_id is None or store.last_month is None:
            raise SnapshotLoadError("Snapshot has no inflow category or months")
        budget = cls(name, settings=settings, store=store)
        try:
            budget.recompute()
        except NotFoundError as error:
            raise SnapshotLoadError(str(error)) from error

        recomputed = store.export_state()
        for collection in ("accounts", "months"):
            if recomputed[collection] != state[collection]:
                raise SnapshotLoadError(f"Stored {collection} disagree with the transaction history")
        LOGGER.info("Restored budget '%s' with %s transactions", name, len(state["transactions"]))
        return budget
