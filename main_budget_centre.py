"""Mini README: Entry point CLI for the envelopes budget ledger.

This script exposes a Typer CLI that serves a budget through the FastAPI
interface or prints month summaries from a saved snapshot. Settings are
drawn from ``ENVELOPES_*`` environment variables when available.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import uvicorn

from envelopes.configuration import get_settings
from envelopes.errors import BudgetError, SnapshotLoadError
from envelopes.logging_utils import configure_root_logger
from envelopes.months import MonthKey
from envelopes.persistence import load_snapshot

cli = typer.Typer(help="Serve and inspect envelope budgets.")


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the JSON interface using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    typer.echo(
        f"Serving budget snapshot {settings.snapshot_path} on "
        f"http://{effective_host}:{effective_port}"
    )
    uvicorn.run(
        "envelopes.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def summary(
    snapshot: Optional[Path] = typer.Argument(None, help="Snapshot file; defaults to the configured one."),
    month: Optional[str] = typer.Option(None, help="Only show this month (YYYY-MM)."),
) -> None:
    """Print month aggregates and goal status from a saved budget."""

    settings = get_settings()
    configure_root_logger(settings.log_level)
    try:
        budget = load_snapshot(snapshot or settings.snapshot_path)
    except SnapshotLoadError as error:
        typer.echo(f"Cannot load budget: {error}", err=True)
        raise typer.Exit(code=1) from error

    fmt = budget.settings.format_amount
    months = [MonthKey.parse(month)] if month else budget.months()
    typer.echo(f"Budget: {budget.name}")
    for month_key in months:
        try:
            report = budget.month_summary(month_key)
            goals = budget.goal_report(month_key)
        except BudgetError as error:
            typer.echo(f"{month_key}: {error}", err=True)
            raise typer.Exit(code=1) from error
        age = f"{report.age_of_money} days" if report.age_of_money is not None else "n/a"
        typer.echo(
            f"{budget.settings.date_format.format_month(month_key)}  "
            f"income {fmt(report.income)}  budgeted {fmt(report.budgeted)}  "
            f"activity {fmt(report.activity)}  to be budgeted {fmt(report.to_be_budgeted)}  "
            f"age of money {age}"
        )
        for progress in goals:
            if progress.underfunded or progress.overdue:
                name = budget.get_category(progress.category_id).name
                status = "overdue" if progress.overdue else "underfunded"
                typer.echo(f"    {name}: {status}, still needs {fmt(progress.still_needed)}")


if __name__ == "__main__":
    cli()
