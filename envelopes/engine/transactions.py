"""Mini README: Transaction engine applying and reversing ledger effects.

Structure:
    * Posting - fully validated plan of every balance a transaction touches.
    * TransactionEngine - validates, commits, reverses, and re-clears
      transactions against the entity store and the month rollup engine.

A commit touches at most three owners: the account, then either the
category (with its month) or the transfer account. All references are
resolved and checked into a ``Posting`` before the first balance moves, so
a rejected transaction leaves the budget untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from ..errors import ClosedAccountError, InvalidTransactionError, NotFoundError
from ..logging_utils import get_logger
from ..money import ensure_milliunits
from ..months import MonthKey
from ..store import Account, AccountId, CategoryId, ClearedStatus, EntityStore, Transaction
from .rollup import MonthRollupEngine

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class Posting:
    """Resolved effects of one transaction, ready to apply."""

    account_legs: List[Tuple[Account, int]] = field(default_factory=list)
    cleared: bool = False
    category_leg: Optional[Tuple[CategoryId, MonthKey, int]] = None


class TransactionEngine:
    """Apply transaction effects to accounts, categories and months."""

    def __init__(self, store: EntityStore, rollup: MonthRollupEngine) -> None:
        self._store = store
        self._rollup = rollup

    def _open_account(self, account_id: AccountId) -> Account:
        account = self._store.get_account(account_id)
        if account.is_closed:
            LOGGER.warning("Rejected mutation on closed account %s", account_id)
            raise ClosedAccountError(f"Account {account_id} ({account.name}) is closed")
        return account

    def plan(self, transaction: Transaction, *, historical: bool = False) -> Posting:
        """Validate ``transaction`` and return the effects a commit would apply.

        ``historical`` relaxes payee and category lookups so that an already
        posted transaction can still be reversed after those were deleted.
        Accounts must always be present and open.
        """

        try:
            amount = ensure_milliunits(transaction.amount)
        except TypeError as error:
            raise InvalidTransactionError(str(error)) from error

        account = self._open_account(transaction.account)
        if transaction.payee is not None:
            self._store.get_payee(transaction.payee, include_deleted=historical)

        posting = Posting(cleared=transaction.cleared.counts_as_cleared)
        posting.account_legs.append((account, amount))

        if transaction.is_transfer:
            if transaction.category is not None:
                raise InvalidTransactionError("A transfer cannot also carry a category")
            if transaction.transfer_account == transaction.account:
                raise InvalidTransactionError("An account cannot transfer to itself")
            counterpart = self._open_account(transaction.transfer_account)
            posting.account_legs.append((counterpart, -amount))
            return posting

        if account.on_budget:
            if transaction.category is None:
                raise InvalidTransactionError(
                    "On-budget transactions need either a category or a transfer account"
                )
            self._rollup.validate_activity(transaction.category, transaction.month, historical=historical)
            posting.category_leg = (transaction.category, transaction.month, amount)
        elif transaction.category is not None:
            raise InvalidTransactionError(
                f"Tracking account {account.account_id} cannot post to a category"
            )
        return posting

    def apply(self, posting: Posting) -> None:
        for account, amount in posting.account_legs:
            account.post(amount, cleared=posting.cleared)
        if posting.category_leg is not None:
            self._rollup.apply_activity(*posting.category_leg)

    def commit(self, transaction: Transaction) -> None:
        """Apply a transaction's effects atomically."""

        posting = self.plan(transaction)
        self.apply(posting)
        LOGGER.debug(
            "Committed %s on %s (category=%s transfer=%s)",
            transaction.amount,
            transaction.account,
            transaction.category,
            transaction.transfer_account,
        )

    def reverse(self, transaction: Transaction) -> None:
        """Apply the exact negation of ``commit(transaction)``."""

        posting = self.plan(transaction.reversed(), historical=True)
        self.apply(posting)
        LOGGER.debug("Reversed %s on %s", transaction.amount, transaction.account)

    def change_cleared_status(self, transaction: Transaction, status: ClearedStatus) -> None:
        """Move a transaction between the cleared and uncleared balances."""

        was_cleared = transaction.cleared.counts_as_cleared
        now_cleared = ClearedStatus(status).counts_as_cleared
        accounts = [(self._open_account(transaction.account), transaction.amount)]
        if transaction.is_transfer:
            accounts.append((self._open_account(transaction.transfer_account), -transaction.amount))
        if was_cleared == now_cleared:
            return
        for account, amount in accounts:
            # net balance is unchanged; only the split moves
            account.post(-amount, cleared=was_cleared)
            account.post(amount, cleared=now_cleared)

    def rebuild_account_balances(self, transactions: Iterable[Transaction]) -> None:
        """Recompute every account balance from the transaction history."""

        accounts = {account.account_id: account for account in self._store.list_accounts(include_deleted=True)}
        for account in accounts.values():
            account.reset_balances()
        for transaction in transactions:
            if transaction.is_deleted:
                continue
            cleared = transaction.cleared.counts_as_cleared
            legs = [(transaction.account, transaction.amount)]
            if transaction.is_transfer:
                legs.append((transaction.transfer_account, -transaction.amount))
            for account_id, amount in legs:
                if account_id not in accounts:
                    raise NotFoundError(f"Account {account_id} not found")
                accounts[account_id].post(amount, cleared=cleared)
