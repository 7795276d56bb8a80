"""Mini README: Recurring income and expense statistics.

Structure:
    * delta - per-index change of a group of fields.
    * daily_sponsor - mode of the sponsor increments.
    * average_tickets - mean ticket income on or off Mondays.
    * last_maintenance - most recent maintenance posting.
    * average_others - mean of the "others" postings.
    * LedgerStatistics - bundle of the above used by the forecast projector.

Every function is pure. When a ``reference_date`` is given, records dated
after it are ignored so projected rows never feed back into the estimates.
Statistics over zero qualifying deltas return ``0``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence, Union

import numpy as np

from .records import FinanceRecord, day_of

_Fields = Union[Sequence[str], str]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded towards +inf."""

    return int(math.floor(value + 0.5))


def up_to(records: Sequence[FinanceRecord], reference_date: Optional[date]) -> List[FinanceRecord]:
    """Return the records dated on or before ``reference_date``."""

    if reference_date is None:
        return list(records)
    cutoff = day_of(reference_date)
    return [record for record in records if day_of(record.date) <= cutoff]


def delta(records: Sequence[FinanceRecord], fields: _Fields) -> List[Optional[int]]:
    """Return the summed change of ``fields`` at every index.

    The first entry is ``None`` because the first record has no predecessor.
    """

    names = (fields,) if isinstance(fields, str) else tuple(fields)
    changes: List[Optional[int]] = [None] if records else []
    for previous, record in zip(records, records[1:]):
        changes.append(sum(getattr(record, name) - getattr(previous, name) for name in names))
    return changes


def _mode(values: Sequence[int]) -> int:
    """Most frequent value; ties resolve to the smallest value."""

    if not values:
        return 0
    uniques, counts = np.unique(np.asarray(values, dtype=np.int64), return_counts=True)
    return int(uniques[int(np.argmax(counts))])


def _rounded_mean(values: Sequence[int]) -> int:
    if not values:
        return 0
    return round_half_up(float(np.mean(np.asarray(values, dtype=np.float64))))


def daily_sponsor(records: Sequence[FinanceRecord], reference_date: Optional[date] = None) -> int:
    """Steady daily sponsor income, estimated as the mode of sponsor deltas."""

    window = up_to(records, reference_date)
    changes = [change for change in delta(window, "sponsor") if change is not None]
    return _mode(changes)


def average_tickets(
    records: Sequence[FinanceRecord],
    on_monday: bool,
    reference_date: Optional[date] = None,
) -> int:
    """Mean nonzero ticket income on Mondays (friendlies) or other days (home matches)."""

    window = up_to(records, reference_date)
    changes = [
        change
        for record, change in zip(window, delta(window, "tickets"))
        if change and record.is_monday == on_monday
    ]
    return _rounded_mean(changes)


def last_maintenance(records: Sequence[FinanceRecord], reference_date: Optional[date] = None) -> int:
    """Negative of the most recent nonzero maintenance delta."""

    window = up_to(records, reference_date)
    for change in reversed(delta(window, "maintenance")):
        if change:
            return -change
    return 0


def average_others(records: Sequence[FinanceRecord], reference_date: Optional[date] = None) -> int:
    """Rounded mean of the nonzero "others" deltas."""

    window = up_to(records, reference_date)
    return _rounded_mean([change for change in delta(window, "others") if change])


@dataclass(slots=True, frozen=True)
class LedgerStatistics:
    """Recurring rates extracted from a ledger up to a reference date."""

    daily_sponsor: int
    average_home_tickets: int
    average_friendlies_tickets: int
    last_maintenance: int
    average_others: int

    @classmethod
    def from_records(
        cls, records: Sequence[FinanceRecord], reference_date: Optional[date] = None
    ) -> "LedgerStatistics":
        return cls(
            daily_sponsor=daily_sponsor(records, reference_date),
            average_home_tickets=average_tickets(records, False, reference_date),
            average_friendlies_tickets=average_tickets(records, True, reference_date),
            last_maintenance=last_maintenance(records, reference_date),
            average_others=average_others(records, reference_date),
        )

    def as_dict(self) -> Dict[str, int]:
        return {
            "daily_sponsor": self.daily_sponsor,
            "average_home_tickets": self.average_home_tickets,
            "average_friendlies_tickets": self.average_friendlies_tickets,
            "last_maintenance": self.last_maintenance,
            "average_others": self.average_others,
        }
