"""Mini README: Age-of-money query over an immutable transaction history.

Structure:
    * cash_events - flatten transactions into dated on-budget cash movements.
    * age_of_money - days since the oldest dollar still held was received.

The metric is derived on demand and never cached. It walks inflows newest
first, accumulating them until they cover the cash currently held; the
inflow that completes the cover is the oldest dollar not yet spent, and
its age is measured against the report date. Only cleared or reconciled
transactions count. Transfers between two on-budget accounts move money
without receiving or spending it, so they are ignored; a transfer to or
from a tracking account counts on its on-budget side.

The functions take plain sequences so callers can run them on a snapshot
without holding the budget lock.
"""

from __future__ import annotations

from datetime import date
from typing import AbstractSet, List, Optional, Sequence, Tuple

from ..store import AccountId, Transaction


def cash_events(
    transactions: Sequence[Transaction],
    on_budget_accounts: AbstractSet[AccountId],
    as_of: date,
) -> List[Tuple[date, int]]:
    """Return ``(date, amount)`` cash movements of on-budget accounts."""

    events: List[Tuple[date, int]] = []
    for transaction in transactions:
        if transaction.is_deleted or not transaction.cleared.counts_as_cleared:
            continue
        if transaction.date > as_of:
            continue
        legs = [(transaction.account, transaction.amount)]
        if transaction.transfer_account is not None:
            legs.append((transaction.transfer_account, -transaction.amount))
        on_budget_legs = [leg for leg in legs if leg[0] in on_budget_accounts]
        if len(on_budget_legs) == 2:
            continue
        events.extend((transaction.date, amount) for _, amount in on_budget_legs)
    return events


def age_of_money(
    transactions: Sequence[Transaction],
    on_budget_accounts: AbstractSet[AccountId],
    as_of: date,
) -> Optional[int]:
    """Return the age of money in days, or ``None`` when no cash is held."""

    events = cash_events(transactions, on_budget_accounts, as_of)
    holdings = sum(amount for _, amount in events)
    if holdings <= 0:
        return None

    covered = 0
    inflows = sorted((event for event in events if event[1] > 0), key=lambda event: event[0], reverse=True)
    for received_on, amount in inflows:
        covered += amount
        if covered >= holdings:
            return (as_of - received_on).days
    # holdings never exceed total inflows, so the loop always returns
    return None
