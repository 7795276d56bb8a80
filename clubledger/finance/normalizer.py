"""Mini README: Ledger normalization turning raw snapshots into a daily ledger.

Structure:
    * LedgerIntegrityError - raised or collected when two dates are not a
      whole number of days apart.
    * NormalizationResult - normalized records plus collected faults.
    * deduplicate - keep only the latest snapshot of each day.
    * fill_gaps - interpolate skipped days when the sponsor income confirms them.
    * realign_monday_expenses - move weekly cost postings back to Monday.
    * normalize - sort, then run the three passes in order.

Each pass takes an immutable sequence and returns a new list, so the passes
can be exercised independently and the stored raw snapshots are never
modified.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Sequence

import numpy as np

from ..logging_utils import get_logger
from .records import WEEKLY_COST_FIELDS, FinanceRecord, day_of, sort_snapshots
from .statistics import daily_sponsor, round_half_up

LOGGER = get_logger(__name__)


class LedgerIntegrityError(ValueError):
    """Two consecutive snapshots are not a whole number of days apart."""

    def __init__(self, previous: FinanceRecord, following: FinanceRecord, gap_days: float) -> None:
        super().__init__(
            f"Unexpected gap of {gap_days:g} days between {previous.date.isoformat()} "
            f"and {following.date.isoformat()} in season {previous.season_id}"
        )
        self.previous = previous
        self.following = following
        self.gap_days = gap_days


@dataclass(slots=True)
class NormalizationResult:
    """Normalized ledger together with any data-integrity faults met on the way."""

    records: List[FinanceRecord]
    faults: List[LedgerIntegrityError] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.faults


def _as_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time())


def day_gap(previous: FinanceRecord, following: FinanceRecord) -> float:
    """Days elapsed between two snapshots, fractional when timestamps carry a time."""

    elapsed = _as_datetime(following.date) - _as_datetime(previous.date)
    return elapsed.total_seconds() / 86400


def deduplicate(records: Sequence[FinanceRecord]) -> List[FinanceRecord]:
    """Drop every snapshot followed by another one taken on the same day."""

    unique: List[FinanceRecord] = []
    for record in records:
        if unique and day_of(unique[-1].date) == day_of(record.date):
            unique[-1] = record
        else:
            unique.append(record)
    LOGGER.debug("Deduplicated %s snapshots into %s days", len(records), len(unique))
    return unique


def _interpolate(info: FinanceRecord, following: FinanceRecord, days: int) -> List[FinanceRecord]:
    """Build the ``days - 1`` records strictly between ``info`` and ``following``."""

    balances = np.linspace(info.current, following.current, days + 1)[1:-1]
    sponsors = np.linspace(info.sponsor, following.sponsor, days + 1)[1:-1]
    start = day_of(info.date)
    return [
        info.evolve(
            date=start + timedelta(days=offset),
            servertime=None,
            current=round_half_up(balance),
            sponsor=round_half_up(sponsor),
        )
        for offset, (balance, sponsor) in enumerate(zip(balances, sponsors), start=1)
    ]


def fill_gaps(
    records: Sequence[FinanceRecord],
    daily_mode: int,
    *,
    strict: bool = False,
) -> NormalizationResult:
    """Synthesize skipped days whose sponsor income matches ``daily_mode``.

    A gap is filled only when the sponsor change across it equals
    ``daily_mode`` per day; otherwise the skipped days stay absent. A gap
    that is not a non-negative whole number of days is a data-integrity
    fault: collected in the result, or raised when ``strict`` is set.
    """

    filled: List[FinanceRecord] = []
    faults: List[LedgerIntegrityError] = []
    for info, following in zip(records, records[1:]):
        filled.append(info)
        gap = day_gap(info, following)
        if gap < 0 or not float(gap).is_integer():
            fault = LedgerIntegrityError(info, following, gap)
            LOGGER.warning("%s", fault)
            if strict:
                raise fault
            faults.append(fault)
            continue
        days = int(gap)
        if days <= 1:
            continue
        if following.sponsor - info.sponsor != daily_mode * days:
            LOGGER.info(
                "Leaving %s-day gap after %s unfilled: sponsor change %s does not match %s per day",
                days,
                info.date.isoformat(),
                following.sponsor - info.sponsor,
                daily_mode,
            )
            continue
        filled.extend(_interpolate(info, following, days))
    if records:
        filled.append(records[-1])
    LOGGER.debug("Gap fill produced %s records from %s", len(filled), len(records))
    return NormalizationResult(records=filled, faults=faults)


def realign_monday_expenses(records: Sequence[FinanceRecord]) -> List[FinanceRecord]:
    """Move weekly cost jumps observed after a Monday back onto that Monday.

    The balance of every shifted record is adjusted by the change in its
    weekly cost sum so it stays consistent with the corrected totals.
    """

    corrected = list(records)
    for index in range(1, len(corrected) - 1):
        record = corrected[index]
        if not record.is_monday or record.weekly_costs != corrected[index - 1].weekly_costs:
            continue
        target = next(
            (
                position
                for position in range(index + 1, len(corrected))
                if corrected[position].weekly_costs != record.weekly_costs
            ),
            None,
        )
        if target is None:
            continue
        source = corrected[target]
        weekly_values = {name: getattr(source, name) for name in WEEKLY_COST_FIELDS}
        for position in range(index, target):
            original = corrected[position]
            corrected[position] = original.evolve(
                current=original.current + original.weekly_costs - source.weekly_costs,
                **weekly_values,
            )
        LOGGER.debug(
            "Realigned weekly costs from %s back to Monday %s",
            source.date.isoformat(),
            record.date.isoformat(),
        )
    return corrected


def normalize(
    snapshots: Iterable[FinanceRecord],
    *,
    daily_mode: Optional[int] = None,
    strict: bool = False,
) -> NormalizationResult:
    """Turn raw snapshots of one season into one consistent record per day.

    ``daily_mode`` defaults to the daily sponsor mode of the deduplicated
    snapshots.
    """

    unique = deduplicate(sort_snapshots(snapshots))
    mode = daily_sponsor(unique) if daily_mode is None else daily_mode
    gap_filled = fill_gaps(unique, mode, strict=strict)
    result = NormalizationResult(
        records=realign_monday_expenses(gap_filled.records),
        faults=gap_filled.faults,
    )
    LOGGER.info(
        "Normalized %s snapshots into %s records (%s faults)",
        len(unique),
        len(result.records),
        len(result.faults),
    )
    return result
