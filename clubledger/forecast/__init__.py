"""Mini README: Season calendar and balance forecasting.

``calendar`` holds the injected season start dates and the match calendar
collaborators; ``projector`` simulates the remaining days of a season from
the normalized ledger and the extracted statistics.
"""

from .calendar import (
    CalendarEvent,
    CalendarEventSource,
    EventType,
    InMemoryCalendarSource,
    SeasonCalendar,
    UnknownSeasonError,
    home_match_dates,
)
from .projector import (
    ForecastOverrides,
    ForecastParameters,
    ForecastProjector,
    ForecastReport,
    build_forecast,
)

__all__ = [
    "CalendarEvent",
    "CalendarEventSource",
    "EventType",
    "ForecastOverrides",
    "ForecastParameters",
    "ForecastProjector",
    "ForecastReport",
    "InMemoryCalendarSource",
    "SeasonCalendar",
    "UnknownSeasonError",
    "build_forecast",
    "home_match_dates",
]
