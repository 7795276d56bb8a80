"""Mini README: Season calendar configuration and match calendar collaborators.

Structure:
    * UnknownSeasonError - the calendar cannot place a season.
    * SeasonCalendar - injected season start dates (replaces a global table).
    * EventType / CalendarEvent - entries of a season's event calendar.
    * CalendarEventSource - abstract async query interface for events.
    * InMemoryCalendarSource - list-backed source used by the API and tests.

The projector only needs home league matches, so ``home_match_dates`` is
the helper most callers reach for.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Set

from ..logging_utils import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from ..configuration import LedgerSettings

LOGGER = get_logger(__name__)


class UnknownSeasonError(KeyError):
    """Raised when no start date is known or derivable for a season."""


class SeasonCalendar:
    """First day of every known season, with a fallback season length."""

    def __init__(self, season_starts: Mapping[int, date], *, season_length_days: int = 112) -> None:
        if season_length_days <= 0:
            raise ValueError("Season length must be positive")
        self._starts: Dict[int, date] = dict(season_starts)
        self.season_length_days = season_length_days

    @classmethod
    def from_settings(cls, settings: "LedgerSettings") -> "SeasonCalendar":
        return cls(settings.season_starts, season_length_days=settings.season_length_days)

    def start_of(self, season_id: int) -> date:
        """Return the first day of ``season_id``."""

        if season_id in self._starts:
            return self._starts[season_id]
        if season_id - 1 in self._starts:
            return self._starts[season_id - 1] + timedelta(days=self.season_length_days)
        raise UnknownSeasonError(f"No start date configured for season {season_id}")

    def next_season_start(self, season_id: int) -> date:
        """First day of the season following ``season_id`` (exclusive forecast bound)."""

        if season_id + 1 in self._starts:
            return self._starts[season_id + 1]
        return self.start_of(season_id) + timedelta(days=self.season_length_days)


class EventType(str, Enum):
    """Kinds of calendar entries."""

    MATCH = "match"
    BUY = "buy"
    SELL = "sell"
    BUILDING = "building"
    OTHER = "other"

    @classmethod
    def from_str(cls, value: str) -> "EventType":
        """Coerce arbitrary casing into a valid event type."""

        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported event type: {value}") from error


@dataclass(slots=True, frozen=True)
class CalendarEvent:
    """A dated calendar entry.

    Matches fill ``name``, ``home``, ``friendly``, ``reserve`` and
    ``match_id``; transfers (``BUY``/``SELL``) fill ``position``, ``name``,
    ``team`` and ``price``.
    """

    season_id: int
    date: date
    type: EventType
    name: Optional[str] = None
    home: bool = False
    friendly: bool = False
    reserve: bool = False
    match_id: Optional[int] = None
    position: Optional[str] = None
    team: Optional[str] = None
    price: Optional[int] = None

    @property
    def is_home_league_match(self) -> bool:
        return self.type is EventType.MATCH and self.home and not self.friendly and not self.reserve


def home_match_dates(events: Iterable[CalendarEvent], since: date) -> Set[date]:
    """Dates of home, non-friendly, non-reserve matches on or after ``since``."""

    return {event.date for event in events if event.is_home_league_match and event.date >= since}


class CalendarEventSource(ABC):
    """Queryable source of calendar events."""

    @abstractmethod
    async def events(
        self,
        season_id: int,
        *,
        event_type: Optional[EventType] = None,
        since: Optional[date] = None,
    ) -> List[CalendarEvent]:
        """Return the season's events, optionally filtered by type and date."""


class InMemoryCalendarSource(CalendarEventSource):
    """Calendar source backed by a plain list."""

    def __init__(self, events: Optional[Iterable[CalendarEvent]] = None) -> None:
        self._events: List[CalendarEvent] = list(events or [])
        LOGGER.debug("Calendar source initialised with %s events", len(self._events))

    def add(self, event: CalendarEvent) -> None:
        self._events.append(event)

    async def events(
        self,
        season_id: int,
        *,
        event_type: Optional[EventType] = None,
        since: Optional[date] = None,
    ) -> List[CalendarEvent]:
        return sorted(
            (
                event
                for event in self._events
                if event.season_id == season_id
                and (event_type is None or event.type is event_type)
                and (since is None or event.date >= since)
            ),
            key=lambda event: event.date,
        )
