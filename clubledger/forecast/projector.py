"""Mini README: Day-by-day balance projection until the next season starts.

Structure:
    * ForecastOverrides - optional operator values replacing extracted statistics.
    * ForecastParameters - resolved rates actually used by a projection.
    * ForecastProjector - simulates one record per remaining day.
    * ForecastReport / build_forecast - async orchestration over the store
      and the match calendar.

Transfers, building work, prizes, and wage rates have no model here and are
carried forward unchanged. Days between the last known record and the
reference date are simulated but not returned. When the last known record
falls on the reference date the projection starts with a copy of it, which
``build_forecast`` drops.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import TYPE_CHECKING, AbstractSet, Dict, List, Optional, Sequence

from ..finance.normalizer import LedgerIntegrityError, normalize
from ..finance.records import FinanceRecord, day_of
from ..finance.statistics import LedgerStatistics
from ..logging_utils import get_logger
from .calendar import CalendarEventSource, EventType, SeasonCalendar, home_match_dates

if TYPE_CHECKING:  # pragma: no cover
    from ..storage.store import FinanceStore

LOGGER = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class ForecastOverrides:
    """Operator supplied values; ``None`` falls back to the ledger statistics."""

    daily_sponsor: Optional[int] = None
    average_home_tickets: Optional[int] = None
    average_friendlies_tickets: Optional[int] = None
    monday_expenses: Optional[int] = None


@dataclass(slots=True, frozen=True)
class ForecastParameters:
    """Rates driving a projection."""

    daily_sponsor: int
    average_home_tickets: int
    average_friendlies_tickets: int
    monday_expenses: int
    last_maintenance: int
    average_others: int

    @classmethod
    def resolve(
        cls,
        reference: FinanceRecord,
        statistics: LedgerStatistics,
        overrides: Optional[ForecastOverrides] = None,
    ) -> "ForecastParameters":
        overrides = overrides or ForecastOverrides()
        default_expenses = (
            reference.current_players_salary
            + reference.current_coaches_salary
            + statistics.last_maintenance
            - statistics.average_others
        )
        return cls(
            daily_sponsor=_pick(overrides.daily_sponsor, statistics.daily_sponsor),
            average_home_tickets=_pick(overrides.average_home_tickets, statistics.average_home_tickets),
            average_friendlies_tickets=_pick(
                overrides.average_friendlies_tickets, statistics.average_friendlies_tickets
            ),
            monday_expenses=_pick(overrides.monday_expenses, default_expenses),
            last_maintenance=statistics.last_maintenance,
            average_others=statistics.average_others,
        )

    def as_dict(self) -> Dict[str, int]:
        return {
            "daily_sponsor": self.daily_sponsor,
            "average_home_tickets": self.average_home_tickets,
            "average_friendlies_tickets": self.average_friendlies_tickets,
            "monday_expenses": self.monday_expenses,
            "last_maintenance": self.last_maintenance,
            "average_others": self.average_others,
        }


def _pick(override: Optional[int], fallback: int) -> int:
    return fallback if override is None else override


class ForecastProjector:
    """Simulate the remainder of a season one day at a time."""

    def __init__(self, calendar: SeasonCalendar) -> None:
        self.calendar = calendar

    @staticmethod
    def reference_record(past: Sequence[FinanceRecord], reference_date: date) -> FinanceRecord:
        """Latest record dated on or before ``reference_date``."""

        candidates = [record for record in past if day_of(record.date) <= reference_date]
        if not candidates:
            raise ValueError(f"No ledger records on or before {reference_date.isoformat()}")
        return max(candidates, key=lambda record: record.sort_key)

    def parameters(
        self,
        past: Sequence[FinanceRecord],
        reference_date: date,
        overrides: Optional[ForecastOverrides] = None,
    ) -> ForecastParameters:
        reference = self.reference_record(past, reference_date)
        statistics = LedgerStatistics.from_records(past, reference_date)
        return ForecastParameters.resolve(reference, statistics, overrides)

    def project(
        self,
        past: Sequence[FinanceRecord],
        reference_date: date,
        *,
        match_dates: AbstractSet[date] = frozenset(),
        overrides: Optional[ForecastOverrides] = None,
        parameters: Optional[ForecastParameters] = None,
    ) -> List[FinanceRecord]:
        """Return one simulated record per day from ``reference_date`` to the next season start.

        Simulation starts on the reference record's own date, so days between
        the last known record and ``reference_date`` (Monday postings
        included) are stepped through but not emitted. When the reference
        record is dated on ``reference_date`` the first emitted record
        duplicates it. The next season's first day is never emitted.
        """

        reference = self.reference_record(past, reference_date)
        if parameters is None:
            parameters = self.parameters(past, reference_date, overrides)
        end = self.calendar.next_season_start(reference.season_id)

        projected: List[FinanceRecord] = []
        last = reference
        day = day_of(reference.date)
        first = True
        while day < end:
            last = self._step(last, day, parameters, match_dates, first=first)
            if day >= reference_date:
                projected.append(last)
            first = False
            day += timedelta(days=1)
        LOGGER.info(
            "Projected %s days for season %s from %s until %s",
            len(projected),
            reference.season_id,
            reference_date.isoformat(),
            end.isoformat(),
        )
        return projected

    @staticmethod
    def _step(
        last: FinanceRecord,
        day: date,
        parameters: ForecastParameters,
        match_dates: AbstractSet[date],
        *,
        first: bool,
    ) -> FinanceRecord:
        current = last.current
        sponsor = last.sponsor
        tickets = last.tickets
        players = last.total_players_salary
        coaches = last.total_coaches_salary
        maintenance = last.maintenance
        others = last.others

        if day.weekday() == 0:
            players -= last.current_players_salary
            coaches -= last.current_coaches_salary
            maintenance -= parameters.last_maintenance
            others += parameters.average_others
            tickets += parameters.average_friendlies_tickets
            current += parameters.daily_sponsor - (
                parameters.monday_expenses - parameters.average_friendlies_tickets
            )
        elif day in match_dates:
            tickets += parameters.average_home_tickets
            current += parameters.average_home_tickets

        # The reference record already holds today's sponsor income.
        if not first:
            current += parameters.daily_sponsor
            sponsor += parameters.daily_sponsor

        return last.evolve(
            date=day,
            servertime=None,
            current=current,
            sponsor=sponsor,
            tickets=tickets,
            total_players_salary=players,
            total_coaches_salary=coaches,
            maintenance=maintenance,
            others=others,
        )


@dataclass(slots=True)
class ForecastReport:
    """Normalized history, the parameters used, and the projected days."""

    season_id: int
    reference_date: date
    history: List[FinanceRecord]
    parameters: ForecastParameters
    projection: List[FinanceRecord]
    faults: List[LedgerIntegrityError] = field(default_factory=list)

    @property
    def final_balance(self) -> Optional[int]:
        if self.projection:
            return self.projection[-1].current
        if self.history:
            return self.history[-1].current
        return None

    def as_dict(self) -> Dict[str, object]:
        return {
            "season_id": self.season_id,
            "reference_date": self.reference_date.isoformat(),
            "parameters": self.parameters.as_dict(),
            "history": [record.as_dict() for record in self.history],
            "projection": [record.as_dict() for record in self.projection],
            "final_balance": self.final_balance,
            "faults": [str(fault) for fault in self.faults],
        }


async def build_forecast(
    store: "FinanceStore",
    events: CalendarEventSource,
    calendar: SeasonCalendar,
    season_id: int,
    reference_date: date,
    *,
    overrides: Optional[ForecastOverrides] = None,
    strict: bool = False,
) -> ForecastReport:
    """Normalize the stored season, fetch its home matches, and project it.

    The projection starts the day after the last known record or on
    ``reference_date``, whichever is later.
    """

    normalized = normalize(store.records(season_id, until=reference_date), strict=strict)
    projector = ForecastProjector(calendar)
    reference = projector.reference_record(normalized.records, reference_date)
    known_day = day_of(reference.date)
    matches = await events.events(season_id, event_type=EventType.MATCH, since=known_day)
    parameters = projector.parameters(normalized.records, reference_date, overrides)
    projected = projector.project(
        normalized.records,
        reference_date,
        match_dates=home_match_dates(matches, known_day),
        parameters=parameters,
    )
    return ForecastReport(
        season_id=season_id,
        reference_date=reference_date,
        history=normalized.records,
        parameters=parameters,
        projection=[record for record in projected if record.date > known_day],
        faults=normalized.faults,
    )
