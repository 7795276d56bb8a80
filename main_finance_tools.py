"""Mini README: Command line entry point for the club ledger tools.

This script exposes a Typer CLI to serve the JSON API, import scraped
snapshots, print a season forecast, and run a sync round against a file
transport. Settings come from ``CLUBLEDGER_*`` environment variables; the
ledger store lives in the configured data directory.
"""

from __future__ import annotations

import asyncio
import json
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import typer
import uvicorn

from clubledger.configuration import get_settings
from clubledger.finance.snapshots import snapshot_from_mapping
from clubledger.forecast import ForecastOverrides, InMemoryCalendarSource, SeasonCalendar, build_forecast
from clubledger.logging_utils import configure_root_logger
from clubledger.storage import FinanceStore
from clubledger.sync import REGISTRY, synchronise

cli = typer.Typer(help="Reconstruct, forecast, and sync a club's season finances.")


def _parse_day(value: Optional[str]) -> date:
    return datetime.strptime(value, "%Y-%m-%d").date() if value else date.today()


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(False, help="Disable auto-reload."),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(f"Serving the ledger API on http://{browser_host}:{effective_port}/docs")
    uvicorn.run(
        "clubledger.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command("import-snapshots")
def import_snapshots(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON list of snapshots."),
) -> None:
    """Import scraped snapshots (amounts may be numbers or displayed text)."""

    settings = get_settings()
    configure_root_logger(settings.log_level)
    store = FinanceStore.load(settings.store_path)
    entries = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(entries, list):
        raise typer.BadParameter("Snapshot file must contain a JSON list")
    for entry in entries:
        record = snapshot_from_mapping(entry)
        initial_balance = entry.get("initial_balance")
        store.record_snapshot(
            record,
            initial_balance=None if initial_balance is None else int(initial_balance),
        )
    store.save()
    typer.echo(f"Imported {len(entries)} snapshots into {settings.store_path}")


@cli.command()
def forecast(
    season: int = typer.Argument(..., help="Season identifier."),
    reference: Optional[str] = typer.Option(None, help="Reference date (YYYY-MM-DD), defaults to today."),
    daily_sponsor: Optional[int] = typer.Option(None, help="Override the daily sponsor income."),
    home_tickets: Optional[int] = typer.Option(None, help="Override the home match ticket income."),
    friendly_tickets: Optional[int] = typer.Option(None, help="Override the friendly ticket income."),
    monday_expenses: Optional[int] = typer.Option(None, help="Override the weekly Monday expenses."),
) -> None:
    """Print the projected balance for each remaining day of a season."""

    settings = get_settings()
    configure_root_logger(settings.log_level)
    store = FinanceStore.load(settings.store_path)
    overrides = ForecastOverrides(
        daily_sponsor=daily_sponsor,
        average_home_tickets=home_tickets,
        average_friendlies_tickets=friendly_tickets,
        monday_expenses=monday_expenses,
    )
    report = asyncio.run(
        build_forecast(
            store,
            InMemoryCalendarSource(),
            SeasonCalendar.from_settings(settings),
            season,
            _parse_day(reference),
            overrides=overrides,
            strict=settings.strict_normalization,
        )
    )
    for fault in report.faults:
        typer.echo(f"warning: {fault}", err=True)
    for record in report.projection:
        typer.echo(f"{record.date.isoformat()}  {record.current:>14,}")
    typer.echo(f"Final balance: {report.final_balance}")


@cli.command()
def sync(
    sync_file: Optional[Path] = typer.Option(None, help="Remote text file; defaults to CLUBLEDGER_SYNC_FILE."),
) -> None:
    """Synchronise every season with the remote text file (last writer wins)."""

    settings = get_settings()
    configure_root_logger(settings.log_level)
    path = sync_file or settings.sync_file
    if path is None:
        raise typer.BadParameter("No sync file given and CLUBLEDGER_SYNC_FILE is not set")
    store = FinanceStore.load(settings.store_path)
    transport = REGISTRY.create("file", path=path)
    report = asyncio.run(synchronise(store, transport, marker=settings.sync_marker))
    store.save()
    seasons = ", ".join(str(season_id) for season_id in report.seasons) or "none"
    typer.echo(f"Seasons {seasons}: {report.outcome.value} (version {report.version})")


if __name__ == "__main__":
    cli()
