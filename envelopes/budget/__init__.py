"""Mini README: Budget facade package.

``facade.Budget`` is the single entry point presentation and persistence
collaborators use: it owns the entity store and wires the transaction,
rollup and goal engines together behind one lock.
"""

from .facade import (
    INFLOW_CATEGORY_NAME,
    INFLOW_GROUP_NAME,
    STARTING_BALANCE_PAYEE,
    Budget,
    transfer_payee_name,
)

__all__ = [
    "Budget",
    "INFLOW_CATEGORY_NAME",
    "INFLOW_GROUP_NAME",
    "STARTING_BALANCE_PAYEE",
    "transfer_payee_name",
]
