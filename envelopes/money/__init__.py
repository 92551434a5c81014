"""Mini README: Money helpers for the envelopes ledger.

All stored amounts are integer milliunits. The ``milliunits`` module
provides the exact arithmetic and the deterministic split used when a goal
target is spread over several months.
"""

from .milliunits import (
    MILLIUNITS_PER_UNIT,
    add,
    ceil_divide,
    ensure_milliunits,
    negate,
    split_evenly,
    subtract,
)

__all__ = [
    "MILLIUNITS_PER_UNIT",
    "add",
    "ceil_divide",
    "ensure_milliunits",
    "negate",
    "split_evenly",
    "subtract",
]
