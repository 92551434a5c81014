"""Mini README: FastAPI JSON interface over a budget.

Structure:
    * create_application - application factory wiring routes to a ``Budget``.
    * _http_error - maps budget errors onto HTTP status codes.

The interface is a thin adapter: it converts form fields into typed values
(identifiers, ``MonthKey``, milliunit integers), calls the facade, and
returns plain JSON including display strings rendered with the budget's
currency settings. All ledger rules live in the facade and its engines.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from fastapi import FastAPI, Form, HTTPException
from fastapi.responses import JSONResponse

from ..budget import Budget
from ..configuration import get_settings
from ..errors import (
    BudgetError,
    ClosedAccountError,
    MonthOutOfOrderError,
    NotFoundError,
    SnapshotLoadError,
)
from ..logging_utils import get_logger
from ..months import MonthKey
from ..persistence import load_snapshot, save_snapshot
from ..store import (
    Account,
    AccountId,
    AccountKind,
    CategoryGroupId,
    CategoryId,
    ClearedStatus,
    MonthlyFunding,
    PayeeId,
    TargetCategoryBalance,
    TargetCategoryBalanceByDate,
    Transaction,
    TransactionId,
)

LOGGER = get_logger(__name__)


def _http_error(error: BudgetError) -> HTTPException:
    if isinstance(error, NotFoundError):
        status_code = 404
    elif isinstance(error, (ClosedAccountError, MonthOutOfOrderError)):
        status_code = 409
    else:
        status_code = 400
    return HTTPException(status_code=status_code, detail=str(error))


def _parse_month(value: str) -> MonthKey:
    try:
        return MonthKey.parse(value)
    except ValueError as error:
        raise HTTPException(status_code=400, detail=str(error)) from error


def _optional_id(id_type: type, value: Optional[int]) -> Any:
    return id_type(value) if value is not None else None


def _load_default_budget() -> Budget:
    settings = get_settings()
    if settings.snapshot_path.exists():
        try:
            return load_snapshot(settings.snapshot_path)
        except SnapshotLoadError:
            LOGGER.exception("Falling back to an empty budget")
    return Budget.with_name(settings.default_budget_name, settings=settings.budget_settings())


def create_application(budget: Optional[Budget] = None) -> FastAPI:
    """Create the FastAPI application bound to ``budget``."""

    app = FastAPI(title="Envelopes Budget", version="0.1.0")
    budget = budget or _load_default_budget()
    fmt = budget.settings.format_amount

    def account_payload(account: Account) -> Dict[str, Any]:
        payload = account.as_dict()
        payload["display_balance"] = fmt(account.balance)
        return payload

    @app.get("/accounts")
    async def list_accounts() -> JSONResponse:
        """Return every open or closed, non-deleted account."""

        accounts = [account_payload(account) for account in budget.accounts()]
        LOGGER.debug("Returning %s accounts", len(accounts))
        return JSONResponse({"accounts": accounts})

    @app.post("/accounts")
    async def add_account(
        name: str = Form(...),
        kind: AccountKind = Form(...),
        starting_balance: int = Form(0),
        on_budget: Optional[bool] = Form(None),
        opened_on: Optional[date] = Form(None),
    ) -> JSONResponse:
        try:
            account_id = budget.add_account(
                name,
                kind,
                on_budget=on_budget,
                starting_balance=starting_balance,
                opened_on=opened_on,
            )
        except BudgetError as error:
            raise _http_error(error) from error
        return JSONResponse(account_payload(budget.get_account(account_id)), status_code=201)

    @app.post("/accounts/{account_id}/close")
    async def close_account(account_id: int) -> JSONResponse:
        try:
            account = budget.close_account(AccountId(account_id))
        except BudgetError as error:
            raise _http_error(error) from error
        return JSONResponse(account_payload(account))

    @app.post("/category-groups")
    async def add_category_group(name: str = Form(...)) -> JSONResponse:
        group_id = budget.add_category_group(name)
        return JSONResponse({"group_id": group_id.value, "name": name}, status_code=201)

    @app.post("/categories")
    async def add_category(
        group_id: int = Form(...),
        name: str = Form(...),
        note: str = Form(""),
    ) -> JSONResponse:
        try:
            category_id = budget.add_category(CategoryGroupId(group_id), name, note=note)
        except BudgetError as error:
            raise _http_error(error) from error
        return JSONResponse(budget.get_category(category_id).as_dict(), status_code=201)

    @app.post("/categories/{category_id}/goal")
    async def set_goal(
        category_id: int,
        kind: str = Form(...),
        amount: int = Form(...),
        by_month: Optional[str] = Form(None),
    ) -> JSONResponse:
        """Attach a goal: ``target_balance``, ``target_balance_by_date`` or ``monthly_funding``."""

        if kind == "target_balance":
            goal_kind: Any = TargetCategoryBalance(target=amount)
        elif kind == "target_balance_by_date":
            if not by_month:
                raise HTTPException(status_code=400, detail="by_month is required for dated goals")
            goal_kind = TargetCategoryBalanceByDate(target=amount, by_date=_parse_month(by_month))
        elif kind == "monthly_funding":
            goal_kind = MonthlyFunding(funding_balance=amount)
        else:
            raise HTTPException(status_code=400, detail=f"Unsupported goal kind: {kind}")
        try:
            category = budget.set_category_goal(CategoryId(category_id), goal_kind)
        except BudgetError as error:
            raise _http_error(error) from error
        return JSONResponse(category.as_dict())

    @app.post("/transactions")
    async def record_transaction(
        occurred_on: date = Form(...),
        amount: int = Form(...),
        account_id: int = Form(...),
        payee_id: Optional[int] = Form(None),
        category_id: Optional[int] = Form(None),
        transfer_account_id: Optional[int] = Form(None),
        memo: str = Form(""),
        cleared: ClearedStatus = Form(ClearedStatus.UNCLEARED),
    ) -> JSONResponse:
        transaction = Transaction(
            date=occurred_on,
            amount=amount,
            account=AccountId(account_id),
            payee=_optional_id(PayeeId, payee_id),
            category=_optional_id(CategoryId, category_id),
            transfer_account=_optional_id(AccountId, transfer_account_id),
            memo=memo,
            cleared=cleared,
        )
        try:
            transaction_id = budget.record_transaction(transaction)
        except BudgetError as error:
            raise _http_error(error) from error
        return JSONResponse(budget.get_transaction(transaction_id).as_dict(), status_code=201)

    @app.delete("/transactions/{transaction_id}")
    async def delete_transaction(transaction_id: int) -> JSONResponse:
        try:
            budget.delete_transaction(TransactionId(transaction_id))
        except BudgetError as error:
            raise _http_error(error) from error
        return JSONResponse({"transaction_id": transaction_id, "deleted": True})

    @app.post("/budgeted")
    async def set_budgeted(
        category_id: int = Form(...),
        month: str = Form(...),
        amount: int = Form(...),
    ) -> JSONResponse:
        month_key = _parse_month(month)
        try:
            row = budget.set_category_budgeted(CategoryId(category_id), month_key, amount)
        except BudgetError as error:
            raise _http_error(error) from error
        LOGGER.info("Budgeted %s to category %s in %s via interface", amount, category_id, month_key)
        return JSONResponse({"category_id": category_id, "month": month_key.isoformat(), **row.as_dict()})

    @app.post("/advance-month")
    async def advance_month() -> JSONResponse:
        month = budget.advance_month()
        return JSONResponse(budget.month_summary(month).as_dict(), status_code=201)

    @app.get("/months/{month}")
    async def month_summary(month: str) -> JSONResponse:
        try:
            summary = budget.month_summary(_parse_month(month))
        except BudgetError as error:
            raise _http_error(error) from error
        payload = summary.as_dict()
        payload["display_to_be_budgeted"] = fmt(summary.to_be_budgeted)
        return JSONResponse(payload)

    @app.get("/months/{month}/categories")
    async def month_categories(month: str) -> JSONResponse:
        month_key = _parse_month(month)
        try:
            rows = [
                {
                    "category_id": category.category_id.value,
                    "name": category.name,
                    **budget.category_month(category.category_id, month_key).as_dict(),
                }
                for category in budget.categories()
                if category.category_id != budget.inflow_category
            ]
        except BudgetError as error:
            raise _http_error(error) from error
        return JSONResponse({"month": month_key.isoformat(), "categories": rows})

    @app.get("/months/{month}/goals")
    async def month_goals(month: str) -> JSONResponse:
        try:
            report = budget.goal_report(_parse_month(month))
        except BudgetError as error:
            raise _http_error(error) from error
        return JSONResponse({"goals": [progress.as_dict() for progress in report]})

    @app.post("/snapshot")
    async def write_snapshot() -> JSONResponse:
        """Persist the budget to the configured snapshot path."""

        path = save_snapshot(budget, get_settings().snapshot_path)
        return JSONResponse({"path": str(path)})

    return app
