"""Mini README: Error hierarchy raised by the ledger and budget engines.

Every mutating operation validates its inputs before touching state, so
catching one of these errors means the budget is exactly as it was before
the call. None of them are fatal; callers are expected to correct the
input and retry.
"""

from __future__ import annotations


class BudgetError(Exception):
    """Base class for all recoverable budget errors."""


class NotFoundError(BudgetError, LookupError):
    """An identifier does not resolve to an active entity."""


class ClosedAccountError(BudgetError):
    """A mutation targeted an account that has been closed."""


class InvalidTransactionError(BudgetError, ValueError):
    """A transaction combines category and transfer fields illegally."""


class InvalidAllocationError(BudgetError, ValueError):
    """A budgeted amount cannot be assigned to the requested category."""


class MonthOutOfOrderError(BudgetError, ValueError):
    """A month was created out of sequence or already exists."""


class SnapshotLoadError(BudgetError):
    """Stored budget state could not be loaded."""


__all__ = [
    "BudgetError",
    "ClosedAccountError",
    "InvalidAllocationError",
    "InvalidTransactionError",
    "MonthOutOfOrderError",
    "NotFoundError",
    "SnapshotLoadError",
]
