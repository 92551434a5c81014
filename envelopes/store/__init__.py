"""Mini README: Entity store package for the envelopes ledger.

``entities`` holds the dataclasses that make up a budget and ``entity_store``
holds the arena that owns them. Everything outside this package refers to
entities only through the opaque identifiers exported here.
"""

from .entities import (
    Account,
    AccountId,
    AccountKind,
    Category,
    CategoryGroup,
    CategoryGroupId,
    CategoryId,
    CategoryMonth,
    ClearedStatus,
    EntityId,
    FlagColor,
    Goal,
    GoalKind,
    Month,
    MonthlyFunding,
    Payee,
    PayeeId,
    TargetCategoryBalance,
    TargetCategoryBalanceByDate,
    Transaction,
    TransactionId,
)
from .entity_store import EntityStore

__all__ = [
    "Account",
    "AccountId",
    "AccountKind",
    "Category",
    "CategoryGroup",
    "CategoryGroupId",
    "CategoryId",
    "CategoryMonth",
    "ClearedStatus",
    "EntityId",
    "EntityStore",
    "FlagColor",
    "Goal",
    "GoalKind",
    "Month",
    "MonthlyFunding",
    "Payee",
    "PayeeId",
    "TargetCategoryBalance",
    "TargetCategoryBalanceByDate",
    "Transaction",
    "TransactionId",
]
