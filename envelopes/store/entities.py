"""Mini README: Entity types owned by the budget's entity store.

Structure:
    * EntityId and subclasses - opaque integer handles scoped to one budget.
    * AccountKind / ClearedStatus / FlagColor - enumerations of fixed choices.
    * Account, Payee, CategoryGroup, Category - mutable ledger entities.
    * Goal and its kinds - category funding targets.
    * CategoryMonth, Month - per-month budget rows and aggregates.
    * Transaction - immutable record of money moving in or between accounts.

Every entity exports itself through ``as_dict`` and can be rebuilt with
``from_dict`` so the persistence layer never needs to know field layouts.
Amounts are integer milliunits throughout.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..months import MonthKey


@dataclass(frozen=True, order=True, slots=True)
class EntityId:
    """Opaque handle into one of the store's collections."""

    value: int

    def __str__(self) -> str:
        return f"{type(self).__name__}({self.value})"


class AccountId(EntityId):
    __slots__ = ()


class PayeeId(EntityId):
    __slots__ = ()


class CategoryGroupId(EntityId):
    __slots__ = ()


class CategoryId(EntityId):
    __slots__ = ()


class TransactionId(EntityId):
    __slots__ = ()


class AccountKind(str, Enum):
    """Kinds of account a budget can hold."""

    CHECKING = "checking"
    SAVINGS = "savings"
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    LINE_OF_CREDIT = "line_of_credit"
    OTHER_ASSET = "other_asset"
    OTHER_LIABILITY = "other_liability"

    @property
    def on_budget_by_default(self) -> bool:
        return self not in (AccountKind.OTHER_ASSET, AccountKind.OTHER_LIABILITY)


class ClearedStatus(str, Enum):
    """Settlement state of a transaction."""

    CLEARED = "cleared"
    UNCLEARED = "uncleared"
    RECONCILED = "reconciled"

    @property
    def counts_as_cleared(self) -> bool:
        return self is not ClearedStatus.UNCLEARED


class FlagColor(str, Enum):
    RED = "red"
    ORANGE = "orange"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"


@dataclass(slots=True)
class Account:
    """An account holding a currency balance."""

    account_id: AccountId
    name: str
    kind: AccountKind
    on_budget: bool = True
    note: str = ""
    is_closed: bool = False
    balance: int = 0
    cleared_balance: int = 0
    uncleared_balance: int = 0
    is_deleted: bool = False

    def post(self, amount: int, *, cleared: bool) -> None:
        """Add ``amount`` to the balance, routed by settlement state."""

        self.balance += amount
        if cleared:
            self.cleared_balance += amount
        else:
            self.uncleared_balance += amount

    def reset_balances(self) -> None:
        self.balance = 0
        self.cleared_balance = 0
        self.uncleared_balance = 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "account_id": self.account_id.value,
            "name": self.name,
            "kind": self.kind.value,
            "on_budget": self.on_budget,
            "note": self.note,
            "is_closed": self.is_closed,
            "balance": self.balance,
            "cleared_balance": self.cleared_balance,
            "uncleared_balance": self.uncleared_balance,
            "is_deleted": self.is_deleted,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Account":
        return cls(
            account_id=AccountId(int(payload["account_id"])),
            name=str(payload["name"]),
            kind=AccountKind(payload["kind"]),
            on_budget=bool(payload["on_budget"]),
            note=str(payload.get("note", "")),
            is_closed=bool(payload.get("is_closed", False)),
            balance=int(payload.get("balance", 0)),
            cleared_balance=int(payload.get("cleared_balance", 0)),
            uncleared_balance=int(payload.get("uncleared_balance", 0)),
            is_deleted=bool(payload.get("is_deleted", False)),
        )


@dataclass(slots=True)
class Payee:
    """Counter-party of a transaction; transfer payees point at an account."""

    payee_id: PayeeId
    name: str
    transfer_account: Optional[AccountId] = None
    is_deleted: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return {
            "payee_id": self.payee_id.value,
            "name": self.name,
            "transfer_account": _id_value(self.transfer_account),
            "is_deleted": self.is_deleted,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Payee":
        return cls(
            payee_id=PayeeId(int(payload["payee_id"])),
            name=str(payload["name"]),
            transfer_account=_optional_id(AccountId, payload.get("transfer_account")),
            is_deleted=bool(payload.get("is_deleted", False)),
        )


@dataclass(slots=True)
class CategoryGroup:
    """Named, ordered collection of categories."""

    group_id: CategoryGroupId
    name: str
    is_hidden: bool = False
    is_deleted: bool = False
    category_ids: List[CategoryId] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "group_id": self.group_id.value,
            "name": self.name,
            "is_hidden": self.is_hidden,
            "is_deleted": self.is_deleted,
            "category_ids": [category_id.value for category_id in self.category_ids],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CategoryGroup":
        return cls(
            group_id=CategoryGroupId(int(payload["group_id"])),
            name=str(payload["name"]),
            is_hidden=bool(payload.get("is_hidden", False)),
            is_deleted=bool(payload.get("is_deleted", False)),
            category_ids=[CategoryId(int(value)) for value in payload.get("category_ids", [])],
        )


@dataclass(frozen=True, slots=True)
class TargetCategoryBalance:
    """Hold at least ``target`` in the category, with no deadline."""

    target: int


@dataclass(frozen=True, slots=True)
class TargetCategoryBalanceByDate:
    """Reach ``target`` in the category by the end of ``by_date``."""

    target: int
    by_date: MonthKey


@dataclass(frozen=True, slots=True)
class MonthlyFunding:
    """Budget ``funding_balance`` into the category every month."""

    funding_balance: int


GoalKind = Union[TargetCategoryBalance, TargetCategoryBalanceByDate, MonthlyFunding]


@dataclass(frozen=True, slots=True)
class Goal:
    """A category goal; the kind is fixed once created."""

    kind: GoalKind
    creation_month: MonthKey

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"creation_month": self.creation_month.isoformat()}
        if isinstance(self.kind, TargetCategoryBalanceByDate):
            payload.update(
                kind="target_balance_by_date",
                target=self.kind.target,
                by_date=self.kind.by_date.isoformat(),
            )
        elif isinstance(self.kind, TargetCategoryBalance):
            payload.update(kind="target_balance", target=self.kind.target)
        else:
            payload.update(kind="monthly_funding", funding_balance=self.kind.funding_balance)
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Goal":
        kind_name = payload.get("kind")
        kind: GoalKind
        if kind_name == "target_balance":
            kind = TargetCategoryBalance(target=int(payload["target"]))
        elif kind_name == "target_balance_by_date":
            kind = TargetCategoryBalanceByDate(
                target=int(payload["target"]),
                by_date=MonthKey.parse(payload["by_date"]),
            )
        elif kind_name == "monthly_funding":
            kind = MonthlyFunding(funding_balance=int(payload["funding_balance"]))
        else:
            raise ValueError(f"Unsupported goal kind: {kind_name!r}")
        return cls(kind=kind, creation_month=MonthKey.parse(payload["creation_month"]))


@dataclass(slots=True)
class Category:
    """A budget envelope. Monthly figures live in ``CategoryMonth`` rows."""

    category_id: CategoryId
    group_id: CategoryGroupId
    name: str
    is_hidden: bool = False
    note: str = ""
    goal: Optional[Goal] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "category_id": self.category_id.value,
            "group_id": self.group_id.value,
            "name": self.name,
            "is_hidden": self.is_hidden,
            "note": self.note,
            "goal": self.goal.as_dict() if self.goal else None,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Category":
        goal_payload = payload.get("goal")
        return cls(
            category_id=CategoryId(int(payload["category_id"])),
            group_id=CategoryGroupId(int(payload["group_id"])),
            name=str(payload["name"]),
            is_hidden=bool(payload.get("is_hidden", False)),
            note=str(payload.get("note", "")),
            goal=Goal.from_dict(goal_payload) if goal_payload else None,
        )


@dataclass(slots=True)
class CategoryMonth:
    """Budgeted, activity and carried balance of one category in one month."""

    budgeted: int = 0
    activity: int = 0
    balance: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {"budgeted": self.budgeted, "activity": self.activity, "balance": self.balance}


@dataclass(slots=True)
class Month:
    """Month-level aggregates plus the category rows for that month."""

    month: MonthKey
    note: str = ""
    income: int = 0
    budgeted: int = 0
    activity: int = 0
    to_be_budgeted: int = 0
    is_deleted: bool = False
    categories: Dict[CategoryId, CategoryMonth] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month.isoformat(),
            "note": self.note,
            "income": self.income,
            "budgeted": self.budgeted,
            "activity": self.activity,
            "to_be_budgeted": self.to_be_budgeted,
            "is_deleted": self.is_deleted,
            "categories": {
                str(category_id.value): row.as_dict() for category_id, row in self.categories.items()
            },
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Month":
        return cls(
            month=MonthKey.parse(payload["month"]),
            note=str(payload.get("note", "")),
            income=int(payload.get("income", 0)),
            budgeted=int(payload.get("budgeted", 0)),
            activity=int(payload.get("activity", 0)),
            to_be_budgeted=int(payload.get("to_be_budgeted", 0)),
            is_deleted=bool(payload.get("is_deleted", False)),
            categories={
                CategoryId(int(key)): CategoryMonth(
                    budgeted=int(row.get("budgeted", 0)),
                    activity=int(row.get("activity", 0)),
                    balance=int(row.get("balance", 0)),
                )
                for key, row in payload.get("categories", {}).items()
            },
        )


@dataclass(frozen=True, slots=True)
class Transaction:
    """Money entering, leaving, or moving between accounts.

    ``amount`` is signed from the point of view of ``account``: positive is
    an inflow. A transfer names ``transfer_account`` which receives the
    opposite amount, and never carries a category.
    """

    date: date
    amount: int
    account: AccountId
    payee: Optional[PayeeId] = None
    category: Optional[CategoryId] = None
    transfer_account: Optional[AccountId] = None
    memo: str = ""
    cleared: ClearedStatus = ClearedStatus.UNCLEARED
    approved: bool = False
    flag_color: Optional[FlagColor] = None
    transaction_id: Optional[TransactionId] = None
    is_deleted: bool = False

    @property
    def is_transfer(self) -> bool:
        return self.transfer_account is not None

    @property
    def month(self) -> MonthKey:
        return MonthKey.from_date(self.date)

    def reversed(self) -> "Transaction":
        """Return the transaction whose effects cancel this one."""

        return replace(self, amount=-self.amount)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "transaction_id": _id_value(self.transaction_id),
            "date": self.date.isoformat(),
            "amount": self.amount,
            "account": self.account.value,
            "payee": _id_value(self.payee),
            "category": _id_value(self.category),
            "transfer_account": _id_value(self.transfer_account),
            "memo": self.memo,
            "cleared": self.cleared.value,
            "approved": self.approved,
            "flag_color": self.flag_color.value if self.flag_color else None,
            "is_deleted": self.is_deleted,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Transaction":
        flag_color = payload.get("flag_color")
        return cls(
            transaction_id=_optional_id(TransactionId, payload.get("transaction_id")),
            date=date.fromisoformat(payload["date"]),
            amount=int(payload["amount"]),
            account=AccountId(int(payload["account"])),
            payee=_optional_id(PayeeId, payload.get("payee")),
            category=_optional_id(CategoryId, payload.get("category")),
            transfer_account=_optional_id(AccountId, payload.get("transfer_account")),
            memo=str(payload.get("memo", "")),
            cleared=ClearedStatus(payload.get("cleared", ClearedStatus.UNCLEARED.value)),
            approved=bool(payload.get("approved", False)),
            flag_color=FlagColor(flag_color) if flag_color else None,
            is_deleted=bool(payload.get("is_deleted", False)),
        )


def _id_value(identifier: Optional[EntityId]) -> Optional[int]:
    return identifier.value if identifier is not None else None


def _optional_id(id_type: type, value: Any) -> Any:
    return id_type(int(value)) if value is not None else None
