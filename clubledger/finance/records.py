"""Mini README: Finance record types shared by every ledger component.

Structure:
    * FinanceRecord - one balance snapshot with season-to-date totals.
    * Season - season identifier and its opening balance.
    * Field groups - constants naming cumulative, rate, and weekly-cost fields.
    * sort_snapshots - chronological ordering by date then server time.

Records are plain slotted dataclasses. Every pass that "changes" a record
builds a new instance with ``dataclasses.replace`` so normalized views never
alias the raw snapshots held in storage.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

CUMULATIVE_FIELDS: Tuple[str, ...] = (
    "total_players_salary",
    "total_coaches_salary",
    "building",
    "tickets",
    "transfers",
    "sponsor",
    "prizes",
    "maintenance",
    "others",
)
RATE_FIELDS: Tuple[str, ...] = ("current_players_salary", "current_coaches_salary")
AMOUNT_FIELDS: Tuple[str, ...] = ("current",) + CUMULATIVE_FIELDS + RATE_FIELDS

# Posted together every Monday.
WEEKLY_COST_FIELDS: Tuple[str, ...] = (
    "total_players_salary",
    "total_coaches_salary",
    "others",
    "maintenance",
)

MONDAY = 0


@dataclass(slots=True, frozen=True)
class Season:
    """Season identifier together with its opening balance."""

    id: int
    initial_balance: int

    def as_dict(self) -> Dict[str, int]:
        return {"id": self.id, "initial_balance": self.initial_balance}


@dataclass(slots=True, frozen=True)
class FinanceRecord:
    """Snapshot of the club finances on a given day.

    ``current`` is the reported bank balance. The nine totals are
    season-to-date cumulative values and the two ``current_*_salary`` fields
    are the weekly rates in force on that day.
    """

    season_id: int
    date: date
    current: int
    servertime: Optional[str] = None
    total_players_salary: int = 0
    total_coaches_salary: int = 0
    building: int = 0
    tickets: int = 0
    transfers: int = 0
    sponsor: int = 0
    prizes: int = 0
    maintenance: int = 0
    others: int = 0
    current_players_salary: int = 0
    current_coaches_salary: int = 0

    @property
    def weekly_costs(self) -> int:
        """Sum of the totals that move on the weekly Monday posting."""

        return sum(getattr(self, name) for name in WEEKLY_COST_FIELDS)

    @property
    def is_monday(self) -> bool:
        return self.date.weekday() == MONDAY

    @property
    def sort_key(self) -> Tuple[date, str]:
        return (day_of(self.date), self.servertime or "")

    def evolve(self, **changes: object) -> "FinanceRecord":
        """Return a copy with ``changes`` applied."""

        return replace(self, **changes)

    def as_dict(self) -> Dict[str, object]:
        """Export the record with serialisable values."""

        payload: Dict[str, object] = {
            "season_id": self.season_id,
            "date": self.date.isoformat(),
            "servertime": self.servertime,
        }
        for name in AMOUNT_FIELDS:
            payload[name] = getattr(self, name)
        return payload

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object]) -> "FinanceRecord":
        """Build a record from an ``as_dict`` style mapping."""

        amounts = {name: int(payload.get(name) or 0) for name in AMOUNT_FIELDS}
        servertime = payload.get("servertime")
        return cls(
            season_id=int(payload["season_id"]),
            date=parse_date(payload["date"]),
            servertime=str(servertime) if servertime else None,
            **amounts,
        )


def parse_date(value: object) -> date:
    """Parse ISO formatted strings or date objects safely."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError("Dates must be provided as ISO strings or date/datetime instances.")


def day_of(value: date) -> date:
    """Calendar day of a date or datetime."""

    return value.date() if isinstance(value, datetime) else value


def sort_snapshots(records: Iterable[FinanceRecord]) -> List[FinanceRecord]:
    """Return records ordered by date, then server time (missing times first)."""

    return sorted(records, key=lambda record: record.sort_key)
