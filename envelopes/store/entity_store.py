"""Mini README: Arena-style store owning every entity of one budget.

Structure:
    * EntityStore - collections keyed by opaque identifiers with add/get/list
      operations and monotonic identifier counters.

Identifiers are minted from per-collection counters and never reused.
Entities are soft-deleted through flags so historical transactions stay
resolvable: lookups hide deleted entities unless ``include_deleted=True``.
Every lookup validates the identifier and raises ``NotFoundError`` rather
than indexing blindly. The store performs no balance arithmetic; the
engines in ``envelopes.engine`` own that.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterator, List, Optional

from ..errors import MonthOutOfOrderError, NotFoundError, SnapshotLoadError
from ..logging_utils import get_logger
from ..months import MonthKey
from .entities import (
    Account,
    AccountId,
    AccountKind,
    Category,
    CategoryGroup,
    CategoryGroupId,
    CategoryId,
    CategoryMonth,
    Goal,
    Month,
    Payee,
    PayeeId,
    Transaction,
    TransactionId,
)

LOGGER = get_logger(__name__)

_SEQUENCE_NAMES = ("account", "payee", "category_group", "category", "transaction")


class EntityStore:
    """Own the entity collections of a single budget."""

    def __init__(self) -> None:
        self._accounts: Dict[AccountId, Account] = {}
        self._payees: Dict[PayeeId, Payee] = {}
        self._groups: Dict[CategoryGroupId, CategoryGroup] = {}
        self._categories: Dict[CategoryId, Category] = {}
        self._months: Dict[MonthKey, Month] = {}
        self._transactions: Dict[TransactionId, Transaction] = {}
        self._sequences: Dict[str, int] = {name: 0 for name in _SEQUENCE_NAMES}
        self.inflow_category_id: Optional[CategoryId] = None

    def _next_value(self, sequence: str) -> int:
        self._sequences[sequence] += 1
        return self._sequences[sequence]

    # ------------------------------------------------------------------ add

    def add_account(
        self,
        name: str,
        kind: AccountKind,
        *,
        on_budget: bool,
        note: str = "",
    ) -> AccountId:
        account_id = AccountId(self._next_value("account"))
        self._accounts[account_id] = Account(
            account_id=account_id,
            name=name,
            kind=AccountKind(kind),
            on_budget=on_budget,
            note=note,
        )
        LOGGER.debug("Stored account %s (%s)", account_id, name)
        return account_id

    def add_payee(self, name: str, *, transfer_account: Optional[AccountId] = None) -> PayeeId:
        if transfer_account is not None:
            self.get_account(transfer_account)
        payee_id = PayeeId(self._next_value("payee"))
        self._payees[payee_id] = Payee(payee_id=payee_id, name=name, transfer_account=transfer_account)
        LOGGER.debug("Stored payee %s (%s)", payee_id, name)
        return payee_id

    def add_category_group(self, name: str, *, is_hidden: bool = False) -> CategoryGroupId:
        group_id = CategoryGroupId(self._next_value("category_group"))
        self._groups[group_id] = CategoryGroup(group_id=group_id, name=name, is_hidden=is_hidden)
        LOGGER.debug("Stored category group %s (%s)", group_id, name)
        return group_id

    def add_category(
        self,
        group_id: CategoryGroupId,
        name: str,
        *,
        note: str = "",
        goal: Optional[Goal] = None,
        is_hidden: bool = False,
    ) -> CategoryId:
        """Add a category and give it an empty row in every existing month."""

        group = self.get_category_group(group_id)
        category_id = CategoryId(self._next_value("category"))
        self._categories[category_id] = Category(
            category_id=category_id,
            group_id=group_id,
            name=name,
            is_hidden=is_hidden,
            note=note,
            goal=goal,
        )
        group.category_ids.append(category_id)
        for month in self._months.values():
            month.categories[category_id] = CategoryMonth()
        LOGGER.debug("Stored category %s (%s) in group %s", category_id, name, group_id)
        return category_id

    def add_month(self, month_key: MonthKey) -> MonthKey:
        """Append ``month_key`` to the gapless month sequence."""

        last = self.last_month
        if last is not None and month_key != last.next():
            raise MonthOutOfOrderError(
                f"Month {month_key} cannot follow {last}; expected {last.next()}"
            )
        self._months[month_key] = Month(
            month=month_key,
            categories={category_id: CategoryMonth() for category_id in self._categories},
        )
        LOGGER.debug("Stored month %s", month_key)
        return month_key

    def add_transaction(self, transaction: Transaction) -> TransactionId:
        self.get_account(transaction.account, include_deleted=True)
        transaction_id = TransactionId(self._next_value("transaction"))
        self._transactions[transaction_id] = replace(transaction, transaction_id=transaction_id)
        return transaction_id

    def replace_transaction(self, transaction: Transaction) -> None:
        """Overwrite a stored transaction, keeping its identifier."""

        if transaction.transaction_id not in self._transactions:
            raise NotFoundError(f"Transaction {transaction.transaction_id} not found")
        self._transactions[transaction.transaction_id] = transaction

    # --------------------------------------------------------------- lookup

    def get_account(self, account_id: AccountId, *, include_deleted: bool = False) -> Account:
        account = self._accounts.get(account_id) if isinstance(account_id, AccountId) else None
        if account is None or (account.is_deleted and not include_deleted):
            raise NotFoundError(f"Account {account_id} not found")
        return account

    def get_payee(self, payee_id: PayeeId, *, include_deleted: bool = False) -> Payee:
        payee = self._payees.get(payee_id) if isinstance(payee_id, PayeeId) else None
        if payee is None or (payee.is_deleted and not include_deleted):
            raise NotFoundError(f"Payee {payee_id} not found")
        return payee

    def get_category_group(
        self, group_id: CategoryGroupId, *, include_deleted: bool = False
    ) -> CategoryGroup:
        group = self._groups.get(group_id) if isinstance(group_id, CategoryGroupId) else None
        if group is None or (group.is_deleted and not include_deleted):
            raise NotFoundError(f"Category group {group_id} not found")
        return group

    def get_category(self, category_id: CategoryId, *, include_deleted: bool = False) -> Category:
        """Return a category; it counts as deleted when its group is."""

        category = self._categories.get(category_id) if isinstance(category_id, CategoryId) else None
        if category is None:
            raise NotFoundError(f"Category {category_id} not found")
        if not include_deleted and self._groups[category.group_id].is_deleted:
            raise NotFoundError(f"Category {category_id} not found")
        return category

    def get_month(self, month_key: MonthKey, *, include_deleted: bool = False) -> Month:
        month = self._months.get(month_key) if isinstance(month_key, MonthKey) else None
        if month is None or (month.is_deleted and not include_deleted):
            raise NotFoundError(f"Month {month_key} not found")
        return month

    def get_category_month(self, category_id: CategoryId, month_key: MonthKey) -> CategoryMonth:
        self.get_category(category_id, include_deleted=True)
        month = self.get_month(month_key, include_deleted=True)
        return month.categories[category_id]

    def get_transaction(
        self, transaction_id: TransactionId, *, include_deleted: bool = False
    ) -> Transaction:
        transaction = (
            self._transactions.get(transaction_id)
            if isinstance(transaction_id, TransactionId)
            else None
        )
        if transaction is None or (transaction.is_deleted and not include_deleted):
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return transaction

    # -------------------------------------------------------------- listing

    def list_accounts(self, *, include_deleted: bool = False) -> List[Account]:
        return [a for a in self._accounts.values() if include_deleted or not a.is_deleted]

    def list_payees(self, *, include_deleted: bool = False) -> List[Payee]:
        return [p for p in self._payees.values() if include_deleted or not p.is_deleted]

    def list_category_groups(self, *, include_deleted: bool = False) -> List[CategoryGroup]:
        return [g for g in self._groups.values() if include_deleted or not g.is_deleted]

    def list_categories(self, *, include_deleted: bool = False) -> List[Category]:
        return [
            category
            for category in self._categories.values()
            if include_deleted or not self._groups[category.group_id].is_deleted
        ]

    def list_transactions(self, *, include_deleted: bool = False) -> List[Transaction]:
        """Return transactions ordered by date, then identifier."""

        return sorted(
            (t for t in self._transactions.values() if include_deleted or not t.is_deleted),
            key=lambda transaction: (transaction.date, transaction.transaction_id),
        )

    def list_months(self) -> List[MonthKey]:
        return sorted(self._months)

    def months_from(self, month_key: MonthKey) -> Iterator[Month]:
        """Yield ``month_key`` and every later month in order."""

        for key in self.list_months():
            if key >= month_key:
                yield self._months[key]

    @property
    def first_month(self) -> Optional[MonthKey]:
        return min(self._months) if self._months else None

    @property
    def last_month(self) -> Optional[MonthKey]:
        return max(self._months) if self._months else None

    # ------------------------------------------------------------ snapshots

    def export_state(self) -> Dict[str, Any]:
        """Return every collection plus the identifier counters."""

        return {
            "sequences": dict(self._sequences),
            "inflow_category_id": (
                self.inflow_category_id.value if self.inflow_category_id else None
            ),
            "accounts": [account.as_dict() for account in self._accounts.values()],
            "payees": [payee.as_dict() for payee in self._payees.values()],
            "category_groups": [group.as_dict() for group in self._groups.values()],
            "categories": [category.as_dict() for category in self._categories.values()],
            "months": [self._months[key].as_dict() for key in self.list_months()],
            "transactions": [
                transaction.as_dict() for transaction in self._transactions.values()
            ],
        }

    @classmethod
    def import_state(cls, state: Dict[str, Any]) -> "EntityStore":
        """Rebuild a store from ``export_state`` output."""

        store = cls()
        try:
            for name in _SEQUENCE_NAMES:
                store._sequences[name] = int(state["sequences"][name])
            for payload in state["accounts"]:
                account = Account.from_dict(payload)
                store._accounts[account.account_id] = account
            for payload in state["payees"]:
                payee = Payee.from_dict(payload)
                store._payees[payee.payee_id] = payee
            for payload in state["category_groups"]:
                group = CategoryGroup.from_dict(payload)
                store._groups[group.group_id] = group
            for payload in state["categories"]:
                category = Category.from_dict(payload)
                store._categories[category.category_id] = category
            for payload in state["months"]:
                month = Month.from_dict(payload)
                store._months[month.month] = month
            for payload in state["transactions"]:
                transaction = Transaction.from_dict(payload)
                if transaction.transaction_id is None:
                    raise ValueError("transaction without identifier")
                store._transactions[transaction.transaction_id] = transaction
            inflow_value = state.get("inflow_category_id")
            store.inflow_category_id = CategoryId(int(inflow_value)) if inflow_value is not None else None
        except (KeyError, TypeError, ValueError) as error:
            raise SnapshotLoadError(f"Malformed budget state: {error}") from error
        store._check_references()
        return store

    def _check_references(self) -> None:
        """Ensure every stored reference resolves and counters stay ahead."""

        collections = {
            "account": self._accounts,
            "payee": self._payees,
            "category_group": self._groups,
            "category": self._categories,
            "transaction": self._transactions,
        }
        for name, collection in collections.items():
            highest = max((key.value for key in collection), default=0)
            if highest > self._sequences[name]:
                raise SnapshotLoadError(f"Identifier counter for {name} is behind stored entities")

        for category in self._categories.values():
            if category.group_id not in self._groups:
                raise SnapshotLoadError(f"Category {category.category_id} has no group")
        for group in self._groups.values():
            for category_id in group.category_ids:
                if category_id not in self._categories:
                    raise SnapshotLoadError(f"Group {group.group_id} lists unknown {category_id}")
        for payee in self._payees.values():
            if payee.transfer_account is not None and payee.transfer_account not in self._accounts:
                raise SnapshotLoadError(f"Payee {payee.payee_id} references unknown account")
        for transaction in self._transactions.values():
            references = [
                (transaction.account, self._accounts),
                (transaction.transfer_account, self._accounts),
                (transaction.payee, self._payees),
                (transaction.category, self._categories),
            ]
            for reference, collection in references:
                if reference is not None and reference not in collection:
                    raise SnapshotLoadError(
                        f"Transaction {transaction.transaction_id} references unknown {reference}"
                    )
        months = self.list_months()
        for previous, current in zip(months, months[1:]):
            if current != previous.next():
                raise SnapshotLoadError(f"Month sequence has a gap between {previous} and {current}")
        for month in self._months.values():
            if set(month.categories) != set(self._categories):
                raise SnapshotLoadError(f"Month {month.month} category rows are incomplete")
        if self.inflow_category_id is not None and self.inflow_category_id not in self._categories:
            raise SnapshotLoadError("Inflow category is not stored")
