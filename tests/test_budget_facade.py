"""Mini README: Tests for the Budget facade.

Structure:
    * the checking account scenario with cleared/uncleared routing.
    * account lifecycle: transfer payees, starting balances, closing.
    * transaction editing: update, delete, re-clear, atomic failures.
    * category housekeeping and concurrent writers.
"""

from __future__ import annotations

import logging
import threading
from datetime import date

import pytest

from envelopes import (
    Budget,
    ClosedAccountError,
    InvalidAllocationError,
    InvalidTransactionError,
    MonthKey,
    NotFoundError,
)
from envelopes.budget import transfer_payee_name
from envelopes.store import AccountId, AccountKind, ClearedStatus, Transaction, TransactionId

JANUARY = MonthKey(2024, 1)


def _budget() -> Budget:
    return Budget.with_name("B", first_month=JANUARY)


def test_checking_account_scenario() -> None:
    """Cleared 200.00 then uncleared -150.00 splits the balance correctly."""

    budget = _budget()
    checking = budget.add_account("Checking", AccountKind.CHECKING)
    assert budget.get_account(checking).balance == 0

    budget.record_transaction(
        Transaction(
            date=date(2024, 1, 2),
            amount=200000,
            account=checking,
            category=budget.inflow_category,
            cleared=ClearedStatus.CLEARED,
        )
    )
    account = budget.get_account(checking)
    assert (account.balance, account.cleared_balance, account.uncleared_balance) == (200000, 200000, 0)

    group_id = budget.add_category_group("Bills")
    power = budget.add_category(group_id, "Power")
    budget.record_transaction(
        Transaction(
            date=date(2024, 1, 3),
            amount=-150000,
            account=checking,
            category=power,
            cleared=ClearedStatus.UNCLEARED,
        )
    )
    account = budget.get_account(checking)
    assert (account.balance, account.cleared_balance, account.uncleared_balance) == (
        50000,
        200000,
        -150000,
    )


def test_accounts_get_transfer_payees_and_starting_balances() -> None:
    """A starting balance becomes cleared income; transfers resolve from payees."""

    budget = _budget()
    checking = budget.add_account("Checking", AccountKind.CHECKING, starting_balance=100000)
    savings = budget.add_account("Savings", AccountKind.SAVINGS)
    house = budget.add_account("House", AccountKind.OTHER_ASSET, starting_balance=300000000)

    assert budget.get_account(house).on_budget is False
    assert budget.month_summary(JANUARY).income == 100000
    assert budget.month_summary(JANUARY).to_be_budgeted == 100000

    savings_payee = next(
        payee for payee in budget.payees() if payee.name == transfer_payee_name("Savings")
    )
    assert savings_payee.transfer_account == savings

    transaction_id = budget.record_transaction(
        Transaction(date=date(2024, 1, 9), amount=-25000, account=checking, payee=savings_payee.payee_id)
    )
    stored = budget.get_transaction(transaction_id)
    assert stored.transfer_account == savings
    assert budget.get_account(checking).balance == 75000
    assert budget.get_account(savings).balance == 25000
    assert budget.month_summary(JANUARY).activity == 0


def test_unknown_account_leaves_budget_unchanged() -> None:
    budget = _budget()
    group_id = budget.add_category_group("Bills")
    power = budget.add_category(group_id, "Power")
    before = budget.snapshot()
    with pytest.raises(NotFoundError):
        budget.record_transaction(
            Transaction(date=date(2024, 1, 2), amount=-1000, account=AccountId(42), category=power)
        )
    assert budget.snapshot() == before


def test_update_transaction_moves_effects() -> None:
    """Editing a transaction reverses the old category and posts to the new one."""

    budget = _budget()
    checking = budget.add_account("Checking", AccountKind.CHECKING, starting_balance=50000)
    group_id = budget.add_category_group("Everyday")
    groceries = budget.add_category(group_id, "Groceries")
    dining = budget.add_category(group_id, "Dining")
    transaction_id = budget.record_transaction(
        Transaction(date=date(2024, 1, 5), amount=-12000, account=checking, category=groceries)
    )

    budget.update_transaction(
        transaction_id,
        Transaction(date=date(2024, 1, 5), amount=-15000, account=checking, category=dining),
    )
    assert budget.category_month(groceries).activity == 0
    assert budget.category_month(dining).activity == -15000
    assert budget.get_account(checking).balance == 35000
    assert budget.get_transaction(transaction_id).amount == -15000


def test_failed_update_keeps_original_transaction() -> None:
    budget = _budget()
    checking = budget.add_account("Checking", AccountKind.CHECKING, starting_balance=50000)
    card = budget.add_account("Card", AccountKind.CREDIT_CARD)
    group_id = budget.add_category_group("Everyday")
    groceries = budget.add_category(group_id, "Groceries")
    transaction_id = budget.record_transaction(
        Transaction(date=date(2024, 1, 5), amount=-12000, account=checking, category=groceries)
    )
    budget.close_account(card)
    before = budget.snapshot()

    with pytest.raises(ClosedAccountError):
        budget.update_transaction(
            transaction_id,
            Transaction(date=date(2024, 1, 5), amount=-12000, account=card, category=groceries),
        )
    with pytest.raises(InvalidTransactionError):
        budget.update_transaction(
            transaction_id,
            Transaction(date=date(2024, 1, 5), amount=-12000, account=checking),
        )
    assert budget.snapshot() == before


def test_delete_transaction_restores_balances() -> None:
    budget = _budget()
    checking = budget.add_account("Checking", AccountKind.CHECKING, starting_balance=50000)
    group_id = budget.add_category_group("Everyday")
    groceries = budget.add_category(group_id, "Groceries")
    before_account = budget.get_account(checking)
    before_row = budget.category_month(groceries)

    transaction_id = budget.record_transaction(
        Transaction(date=date(2024, 1, 5), amount=-12000, account=checking, category=groceries)
    )
    budget.delete_transaction(transaction_id)

    assert budget.get_account(checking) == before_account
    assert budget.category_month(groceries) == before_row
    with pytest.raises(NotFoundError):
        budget.get_transaction(transaction_id)
    assert budget.get_transaction(transaction_id, include_deleted=True).is_deleted
    with pytest.raises(NotFoundError):
        budget.delete_transaction(transaction_id)


def test_set_cleared_status_keeps_total_balance() -> None:
    budget = _budget()
    checking = budget.add_account("Checking", AccountKind.CHECKING)
    group_id = budget.add_category_group("Everyday")
    groceries = budget.add_category(group_id, "Groceries")
    transaction_id = budget.record_transaction(
        Transaction(date=date(2024, 1, 5), amount=-12000, account=checking, category=groceries)
    )
    budget.set_cleared_status(transaction_id, ClearedStatus.RECONCILED)
    account = budget.get_account(checking)
    assert (account.balance, account.cleared_balance, account.uncleared_balance) == (-12000, -12000, 0)
    assert budget.get_transaction(transaction_id).cleared is ClearedStatus.RECONCILED


def test_closed_accounts_can_be_reopened() -> None:
    budget = _budget()
    checking = budget.add_account("Checking", AccountKind.CHECKING)
    budget.close_account(checking)
    with pytest.raises(ClosedAccountError):
        budget.record_transaction(
            Transaction(date=date(2024, 1, 5), amount=1000, account=checking, category=budget.inflow_category)
        )
    budget.reopen_account(checking)
    budget.record_transaction(
        Transaction(date=date(2024, 1, 5), amount=1000, account=checking, category=budget.inflow_category)
    )
    assert budget.get_account(checking).balance == 1000


def test_deleted_accounts_stay_resolvable_for_history() -> None:
    budget = _budget()
    checking = budget.add_account("Checking", AccountKind.CHECKING)
    budget.delete_account(checking)
    assert budget.accounts() == []
    assert budget.get_account(checking, include_deleted=True).is_deleted
    assert all(payee.transfer_account != checking for payee in budget.payees())


def test_category_housekeeping() -> None:
    budget = _budget()
    group_id = budget.add_category_group("Old")
    hobby = budget.add_category(group_id, "Hobby")
    assert budget.hide_category(hobby).is_hidden

    with pytest.raises(InvalidAllocationError):
        budget.delete_category_group(budget.get_category(budget.inflow_category).group_id)
    with pytest.raises(InvalidAllocationError):
        budget.set_category_goal(budget.inflow_category, None)  # type: ignore[arg-type]

    budget.delete_category_group(group_id)
    with pytest.raises(NotFoundError):
        budget.get_category(hobby)
    assert budget.get_category(hobby, include_deleted=True).name == "Hobby"


def test_concurrent_writers_do_not_lose_updates() -> None:
    """Parallel record_transaction calls serialise on the budget lock."""

    budget = _budget()
    checking = budget.add_account("Checking", AccountKind.CHECKING)
    group_id = budget.add_category_group("Everyday")
    groceries = budget.add_category(group_id, "Groceries")

    def spend() -> None:
        for _ in range(50):
            budget.record_transaction(
                Transaction(date=date(2024, 1, 7), amount=-10, account=checking, category=groceries)
            )

    workers = [threading.Thread(target=spend) for _ in range(4)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    account = budget.get_account(checking)
    assert account.balance == -2000
    assert account.uncleared_balance == -2000
    assert budget.category_month(groceries).activity == -2000
    assert len(budget.transactions()) == 200


def test_bare_budget_reports_missing_months() -> None:
    """A budget built without with_name raises a budget error, not an assertion."""

    bare = Budget("B")
    with pytest.raises(NotFoundError):
        bare.add_account("Checking", AccountKind.CHECKING)
    with pytest.raises(NotFoundError):
        bare.inflow_category
    with pytest.raises(NotFoundError):
        bare.month_summary()


def test_transfer_payee_must_match_transfer_account() -> None:
    budget = _budget()
    checking = budget.add_account("Checking", AccountKind.CHECKING)
    savings = budget.add_account("Savings", AccountKind.SAVINGS)
    budget.add_account("Cash", AccountKind.CASH)
    cash_payee = next(
        payee for payee in budget.payees() if payee.name == transfer_payee_name("Cash")
    )
    before = budget.snapshot()

    with pytest.raises(InvalidTransactionError):
        budget.record_transaction(
            Transaction(
                date=date(2024, 1, 4),
                amount=-1000,
                account=checking,
                payee=cash_payee.payee_id,
                transfer_account=savings,
            )
        )
    assert budget.snapshot() == before


def test_rejected_edits_are_logged_as_warnings(caplog: pytest.LogCaptureFixture) -> None:
    budget = _budget()
    checking = budget.add_account("Checking", AccountKind.CHECKING)
    group_id = budget.add_category_group("Everyday")
    groceries = budget.add_category(group_id, "Groceries")
    transaction_id = budget.record_transaction(
        Transaction(date=date(2024, 1, 5), amount=-500, account=checking, category=groceries)
    )
    budget.close_account(checking)

    with caplog.at_level(logging.WARNING, logger="envelopes.budget.facade"):
        with pytest.raises(ClosedAccountError):
            budget.update_transaction(
                transaction_id,
                Transaction(date=date(2024, 1, 5), amount=-700, account=checking, category=groceries),
            )
        with pytest.raises(ClosedAccountError):
            budget.delete_transaction(transaction_id)
        with pytest.raises(NotFoundError):
            budget.set_cleared_status(TransactionId(99), ClearedStatus.CLEARED)

    warnings = [
        record.getMessage()
        for record in caplog.records
        if record.name == "envelopes.budget.facade" and record.levelno == logging.WARNING
    ]
    assert len(warnings) == 3
    assert "Rejected update" in warnings[0]
