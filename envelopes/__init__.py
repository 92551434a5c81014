"""Mini README: Core package initializer for the envelopes budget ledger.

Exposes the budget facade, the month key, and the error hierarchy so most
callers can work from ``import envelopes`` alone. Entity types live in
``envelopes.store`` and display settings in ``envelopes.formatting``.
"""

from .budget import Budget
from .errors import (
    BudgetError,
    ClosedAccountError,
    InvalidAllocationError,
    InvalidTransactionError,
    MonthOutOfOrderError,
    NotFoundError,
    SnapshotLoadError,
)
from .logging_utils import get_logger
from .months import MonthKey

__all__ = [
    "Budget",
    "BudgetError",
    "ClosedAccountError",
    "InvalidAllocationError",
    "InvalidTransactionError",
    "MonthKey",
    "MonthOutOfOrderError",
    "NotFoundError",
    "SnapshotLoadError",
    "get_logger",
]
