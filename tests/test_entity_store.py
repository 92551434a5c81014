"""Mini README: Tests for the entity store.

Structure:
    * identifier minting and typing.
    * NotFound behaviour, including soft-deleted entities.
    * month sequencing and snapshot export/import.
"""

from __future__ import annotations

import pytest

from envelopes.errors import MonthOutOfOrderError, NotFoundError, SnapshotLoadError
from envelopes.months import MonthKey
from envelopes.store import AccountId, AccountKind, CategoryGroupId, EntityStore, PayeeId


def test_identifiers_are_fresh_and_typed() -> None:
    """Each add mints a new identifier and handle types never compare equal."""

    store = EntityStore()
    first = store.add_account("Checking", AccountKind.CHECKING, on_budget=True)
    second = store.add_account("Savings", AccountKind.SAVINGS, on_budget=True)
    payee = store.add_payee("Grocer")

    assert first != second
    assert first == AccountId(1)
    assert payee == PayeeId(1)
    assert AccountId(1) != PayeeId(1)
    with pytest.raises(NotFoundError):
        store.get_account(payee)  # type: ignore[arg-type]


def test_add_category_requires_existing_group() -> None:
    """A category under an unknown group fails without storing anything."""

    store = EntityStore()
    with pytest.raises(NotFoundError):
        store.add_category(CategoryGroupId(7), "Rent")
    assert store.list_categories(include_deleted=True) == []


def test_soft_deleted_entities_need_include_deleted() -> None:
    """Deleted accounts and categories of deleted groups stay resolvable on request."""

    store = EntityStore()
    account_id = store.add_account("Old card", AccountKind.CREDIT_CARD, on_budget=True)
    group_id = store.add_category_group("Retired")
    category_id = store.add_category(group_id, "Hobby")

    store.get_account(account_id).is_deleted = True
    store.get_category_group(group_id).is_deleted = True

    with pytest.raises(NotFoundError):
        store.get_account(account_id)
    with pytest.raises(NotFoundError):
        store.get_category(category_id)
    assert store.get_account(account_id, include_deleted=True).name == "Old card"
    assert store.get_category(category_id, include_deleted=True).name == "Hobby"
    assert store.list_accounts() == []
    assert len(store.list_accounts(include_deleted=True)) == 1


def test_months_are_gapless() -> None:
    """Months can only be appended directly after the latest one."""

    store = EntityStore()
    store.add_month(MonthKey(2024, 1))
    store.add_month(MonthKey(2024, 2))
    with pytest.raises(MonthOutOfOrderError):
        store.add_month(MonthKey(2024, 4))
    assert store.list_months() == [MonthKey(2024, 1), MonthKey(2024, 2)]


def test_new_categories_get_rows_in_existing_months() -> None:
    store = EntityStore()
    store.add_month(MonthKey(2024, 1))
    group_id = store.add_category_group("Bills")
    category_id = store.add_category(group_id, "Rent")
    row = store.get_category_month(category_id, MonthKey(2024, 1))
    assert (row.budgeted, row.activity, row.balance) == (0, 0, 0)


def test_export_and_import_preserve_state_and_counters() -> None:
    """Imported stores keep identifiers and continue counting past them."""

    store = EntityStore()
    store.add_month(MonthKey(2024, 1))
    store.add_account("Checking", AccountKind.CHECKING, on_budget=True)
    group_id = store.add_category_group("Bills")
    store.add_category(group_id, "Rent")

    restored = EntityStore.import_state(store.export_state())
    assert restored.export_state() == store.export_state()
    assert restored.add_account("Cash", AccountKind.CASH, on_budget=True) == AccountId(2)


def test_import_rejects_month_gaps() -> None:
    store = EntityStore()
    store.add_month(MonthKey(2024, 1))
    state = store.export_state()
    state["months"].append({"month": "2024-03", "categories": {}})
    with pytest.raises(SnapshotLoadError):
        EntityStore.import_state(state)
