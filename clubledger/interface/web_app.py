"""Mini README: FastAPI service exposing the ledger engine as JSON.

Structure:
    * create_application - application factory wiring the store, the match
      calendar, the sync transport, and the routes.

Routes accept raw snapshots and calendar events, return the normalized
ledger, its statistics and forecast, and run a sync round. Collaborators
can be injected, which keeps the factory usable from tests without touching
the configured data directory.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from ..configuration import LedgerSettings, get_settings
from ..finance.normalizer import LedgerIntegrityError, normalize
from ..finance.snapshots import snapshot_from_mapping
from ..finance.statistics import LedgerStatistics
from ..forecast.calendar import (
    CalendarEvent,
    CalendarEventSource,
    EventType,
    InMemoryCalendarSource,
    SeasonCalendar,
)
from ..forecast.projector import ForecastOverrides, build_forecast
from ..logging_utils import configure_root_logger, get_logger
from ..storage.store import FinanceStore
from ..sync.codec import encode_records
from ..sync.policy import synchronise
from ..sync.registry import REGISTRY
from ..sync.transport import SyncTransport

LOGGER = get_logger(__name__)


def _default_transport(settings: LedgerSettings) -> SyncTransport:
    if settings.sync_file is not None:
        return REGISTRY.create("file", path=settings.sync_file)
    return REGISTRY.create("memory")


def create_application(
    *,
    store: Optional[FinanceStore] = None,
    calendar_source: Optional[CalendarEventSource] = None,
    transport: Optional[SyncTransport] = None,
    settings: Optional[LedgerSettings] = None,
) -> FastAPI:
    """Create the FastAPI application with routes and dependencies."""

    settings = settings or get_settings()
    configure_root_logger(settings.log_level)
    app = FastAPI(title="Club Ledger", version="0.1.0")

    if store is None:
        store = FinanceStore.load(settings.store_path)
    events = calendar_source if calendar_source is not None else InMemoryCalendarSource()
    remote = transport if transport is not None else _default_transport(settings)
    season_calendar = SeasonCalendar.from_settings(settings)

    def _persist() -> None:
        if store.path is not None:
            store.save()

    @app.get("/seasons")
    async def list_seasons() -> JSONResponse:
        """Return known seasons with their opening balance and snapshot count."""

        payload = [
            {
                "id": season_id,
                "initial_balance": _initial_balance(store, season_id),
                "snapshots": len(store.records(season_id)),
            }
            for season_id in store.season_ids()
        ]
        return JSONResponse({"seasons": payload})

    @app.post("/snapshots")
    async def record_snapshot(payload: Dict[str, Any] = Body(...)) -> JSONResponse:
        """Store a raw snapshot and upsert its season."""

        try:
            record = snapshot_from_mapping(payload, default_date=date.today())
            initial_balance = payload.get("initial_balance")
            store.record_snapshot(
                record,
                initial_balance=None if initial_balance is None else int(initial_balance),
            )
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        _persist()
        return JSONResponse(record.as_dict(), status_code=201)

    @app.post("/seasons/{season_id}/events")
    async def add_event(season_id: int, payload: Dict[str, Any] = Body(...)) -> JSONResponse:
        """Add a calendar event to the in-memory calendar."""

        if not isinstance(events, InMemoryCalendarSource):
            raise HTTPException(status_code=405, detail="Calendar source is read-only")
        try:
            event = CalendarEvent(
                season_id=season_id,
                date=date.fromisoformat(str(payload["date"])),
                type=EventType.from_str(str(payload.get("type", "match"))),
                name=payload.get("name"),
                home=bool(payload.get("home", False)),
                friendly=bool(payload.get("friendly", False)),
                reserve=bool(payload.get("reserve", False)),
            )
        except (KeyError, ValueError) as error:
            raise HTTPException(status_code=400, detail=f"Invalid event: {error}") from error
        events.add(event)
        LOGGER.debug("Added %s event on %s for season %s", event.type.value, event.date, season_id)
        return JSONResponse({"season_id": season_id, "date": event.date.isoformat()}, status_code=201)

    @app.get("/seasons/{season_id}/ledger")
    async def ledger(season_id: int, strict: bool = Query(False)) -> JSONResponse:
        """Return the normalized daily ledger and any integrity faults."""

        try:
            result = normalize(store.records(season_id), strict=strict or settings.strict_normalization)
        except LedgerIntegrityError as error:
            raise HTTPException(status_code=422, detail=str(error)) from error
        return JSONResponse(
            {
                "season_id": season_id,
                "records": [record.as_dict() for record in result.records],
                "faults": [str(fault) for fault in result.faults],
            }
        )

    @app.get("/seasons/{season_id}/statistics")
    async def statistics(season_id: int, reference_date: Optional[date] = Query(None)) -> JSONResponse:
        """Return the recurring rates extracted up to ``reference_date``."""

        reference = reference_date or date.today()
        result = normalize(store.records(season_id, until=reference))
        summary = LedgerStatistics.from_records(result.records, reference)
        return JSONResponse({"season_id": season_id, "reference_date": reference.isoformat(), **summary.as_dict()})

    @app.get("/seasons/{season_id}/forecast")
    async def forecast(
        season_id: int,
        reference_date: Optional[date] = Query(None),
        daily_sponsor: Optional[int] = Query(None),
        average_home_tickets: Optional[int] = Query(None),
        average_friendlies_tickets: Optional[int] = Query(None),
        monday_expenses: Optional[int] = Query(None),
    ) -> JSONResponse:
        """Project the season balance until the next season starts."""

        overrides = ForecastOverrides(
            daily_sponsor=daily_sponsor,
            average_home_tickets=average_home_tickets,
            average_friendlies_tickets=average_friendlies_tickets,
            monday_expenses=monday_expenses,
        )
        try:
            report = await build_forecast(
                store,
                events,
                season_calendar,
                season_id,
                reference_date or date.today(),
                overrides=overrides,
                strict=settings.strict_normalization,
            )
        except KeyError as error:
            raise HTTPException(status_code=404, detail=str(error)) from error
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        return JSONResponse(report.as_dict())

    @app.get("/seasons/{season_id}/encoded")
    async def encoded(season_id: int) -> JSONResponse:
        """Return the delta encoding of the season's raw snapshots."""

        return JSONResponse({"season_id": season_id, "payload": encode_records(store.records(season_id))})

    @app.post("/sync")
    async def sync() -> JSONResponse:
        """Run one last-writer-wins sync round for every season."""

        report = await synchronise(store, remote, marker=settings.sync_marker)
        _persist()
        return JSONResponse({**report.as_dict(), **remote.metadata()})

    return app


def _initial_balance(store: FinanceStore, season_id: int) -> Optional[int]:
    try:
        return store.get_season(season_id).initial_balance
    except KeyError:
        return None
