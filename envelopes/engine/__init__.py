"""Mini README: Ledger engines for the envelopes budget.

``transactions`` moves money between accounts and categories, ``rollup``
keeps the month and category chains consistent, and ``age_of_money`` is a
read-only query over the transaction history.
"""

from .age_of_money import age_of_money, cash_events
from .rollup import MonthRollupEngine, MonthSummary
from .transactions import Posting, TransactionEngine

__all__ = [
    "MonthRollupEngine",
    "MonthSummary",
    "Posting",
    "TransactionEngine",
    "age_of_money",
    "cash_events",
]
