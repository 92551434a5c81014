"""Mini README: Tests for the FastAPI interface.

Structure:
    * test_budget_workflow_over_http - accounts, categories, budgeting, spending.
    * test_error_status_codes - budget errors map onto 400/404/409.
    * test_snapshot_endpoint_writes_configured_file - persistence via settings.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from envelopes import Budget, MonthKey
from envelopes.configuration import get_settings
from envelopes.interface import create_application
from envelopes.persistence import load_snapshot

JANUARY = MonthKey(2024, 1)


@pytest.fixture()
def client() -> TestClient:
    return TestClient(create_application(Budget.with_name("Web", first_month=JANUARY)))


def _setup_spending(client: TestClient) -> dict:
    account = client.post(
        "/accounts",
        data={"name": "Checking", "kind": "checking", "starting_balance": "300000", "opened_on": "2024-01-01"},
    )
    assert account.status_code == 201
    group = client.post("/category-groups", data={"name": "Everyday"})
    assert group.status_code == 201
    category = client.post("/categories", data={"group_id": group.json()["group_id"], "name": "Groceries"})
    assert category.status_code == 201
    return {"account": account.json(), "category": category.json()}


def test_budget_workflow_over_http(client: TestClient) -> None:
    """Budget money, spend it, and read the month back."""

    ids = _setup_spending(client)
    assert ids["account"]["display_balance"] == "$300.00"
    category_id = ids["category"]["category_id"]

    budgeted = client.post("/budgeted", data={"category_id": category_id, "month": "2024-01", "amount": "100000"})
    assert budgeted.status_code == 200
    assert budgeted.json()["balance"] == 100000

    spent = client.post(
        "/transactions",
        data={
            "occurred_on": "2024-01-12",
            "amount": "-40000",
            "account_id": ids["account"]["account_id"],
            "category_id": category_id,
            "cleared": "cleared",
        },
    )
    assert spent.status_code == 201

    summary = client.get("/months/2024-01").json()
    assert summary["income"] == 300000
    assert summary["budgeted"] == 100000
    assert summary["activity"] == -40000
    assert summary["display_to_be_budgeted"] == "$200.00"

    rows = client.get("/months/2024-01/categories").json()["categories"]
    assert [(row["name"], row["balance"]) for row in rows] == [("Groceries", 60000)]

    goal = client.post(f"/categories/{category_id}/goal", data={"kind": "target_balance", "amount": "90000"})
    assert goal.status_code == 200
    goals = client.get("/months/2024-01/goals").json()["goals"]
    assert goals[0]["still_needed"] == 30000

    deleted = client.delete(f"/transactions/{spent.json()['transaction_id']}")
    assert deleted.status_code == 200
    assert client.get("/months/2024-01").json()["activity"] == 0

    advanced = client.post("/advance-month")
    assert advanced.status_code == 201
    assert advanced.json()["month"] == "2024-02"

    accounts = client.get("/accounts").json()["accounts"]
    assert [account["balance"] for account in accounts] == [300000]


def test_error_status_codes(client: TestClient) -> None:
    ids = _setup_spending(client)
    category_id = ids["category"]["category_id"]
    account_id = ids["account"]["account_id"]

    missing = client.post(
        "/transactions",
        data={"occurred_on": "2024-01-05", "amount": "-10", "account_id": "99", "category_id": category_id},
    )
    assert missing.status_code == 404

    uncategorised = client.post(
        "/transactions",
        data={"occurred_on": "2024-01-05", "amount": "-10", "account_id": account_id},
    )
    assert uncategorised.status_code == 400

    assert client.post("/budgeted", data={"category_id": category_id, "month": "2024-13", "amount": "1"}).status_code == 400
    assert client.get("/months/2025-06").status_code == 404
    assert client.post(f"/categories/{category_id}/goal", data={"kind": "someday", "amount": "1"}).status_code == 400

    assert client.post(f"/accounts/{account_id}/close").status_code == 200
    closed = client.post(
        "/transactions",
        data={"occurred_on": "2024-01-05", "amount": "-10", "account_id": account_id, "category_id": category_id},
    )
    assert closed.status_code == 409


def test_snapshot_endpoint_writes_configured_file(
    client: TestClient, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("ENVELOPES_DATA_DIRECTORY", str(tmp_path))
    get_settings.cache_clear()
    try:
        _setup_spending(client)
        response = client.post("/snapshot")
        assert response.status_code == 200
        restored = load_snapshot(response.json()["path"])
        assert restored.name == "Web"
        assert restored.accounts()[0].balance == 300000
    finally:
        get_settings.cache_clear()
