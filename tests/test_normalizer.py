"""Mini README: Tests for the ledger normalization passes.

Structure:
    * Gap fill - interpolation when the sponsor mode confirms the gap, and
      rejection when it does not.
    * Deduplication - the latest same-day snapshot survives.
    * Monday realignment - weekly costs move back to Monday with a balance fix.
    * Integrity faults - fractional gaps are collected or raised.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from clubledger.finance import (
    LedgerIntegrityError,
    deduplicate,
    fill_gaps,
    normalize,
    realign_monday_expenses,
)


def test_fill_gaps_interpolates_current_and_sponsor(make_record) -> None:
    """A three-day gap whose sponsor change matches the mode gains two records."""

    first = make_record(date(2022, 1, 4), 10000, sponsor=1000, tickets=50, others=-7)
    last = make_record(date(2022, 1, 7), 13300, sponsor=4000, tickets=80, others=-9)

    result = fill_gaps([first, last], daily_mode=1000)

    assert [record.date for record in result.records] == [
        date(2022, 1, 4),
        date(2022, 1, 5),
        date(2022, 1, 6),
        date(2022, 1, 7),
    ]
    middle = result.records[1:3]
    assert [record.sponsor for record in middle] == [2000, 3000]
    assert [record.current for record in middle] == [11100, 12200]
    assert all(record.tickets == 50 and record.others == -7 for record in middle)
    assert result.records[0] is first
    assert result.records[-1] is last
    assert result.is_clean


def test_fill_gaps_rejects_gap_not_matching_daily_mode(make_record) -> None:
    """A sponsor change of 2500 over three days is not three days of income."""

    first = make_record(date(2022, 1, 4), 10000, sponsor=1000)
    last = make_record(date(2022, 1, 7), 12000, sponsor=3500)

    result = fill_gaps([first, last], daily_mode=1000)

    assert result.records == [first, last]
    assert result.is_clean


def test_normalize_derives_daily_mode_from_snapshots(make_record) -> None:
    snapshots = [
        make_record(date(2022, 1, 4), 100, sponsor=0),
        make_record(date(2022, 1, 5), 1100, sponsor=1000),
        make_record(date(2022, 1, 6), 2100, sponsor=2000),
        make_record(date(2022, 1, 9), 5100, sponsor=5000),
    ]

    result = normalize(snapshots)

    assert [record.date.day for record in result.records] == [4, 5, 6, 7, 8, 9]
    assert [record.sponsor for record in result.records] == [0, 1000, 2000, 3000, 4000, 5000]
    assert [record.current for record in result.records][3:5] == [3100, 4100]


def test_deduplicate_keeps_latest_same_day_snapshot(make_record) -> None:
    morning = make_record(date(2022, 1, 4), 100, servertime="09:00")
    evening = make_record(date(2022, 1, 4), 200, servertime="18:30")
    next_day = make_record(date(2022, 1, 5), 300, servertime="08:00")

    assert deduplicate([morning, evening, next_day]) == [evening, next_day]


def test_normalize_sorts_before_deduplicating(make_record) -> None:
    """Snapshots arrive unsorted; the later time of day wins for date D."""

    morning = make_record(date(2022, 1, 4), 100, servertime="09:00")
    evening = make_record(date(2022, 1, 4), 200, servertime="18:30")
    next_day = make_record(date(2022, 1, 5), 300, servertime="08:00")

    result = normalize([next_day, evening, morning])

    assert len(result.records) == 2
    assert result.records[0] == evening


def test_monday_realignment_moves_weekly_costs_back(make_record) -> None:
    """Tuesday's 500 weekly deduction belongs to Monday, whose balance gains 500."""

    sunday = make_record(date(2022, 1, 9), 5000, total_players_salary=-1000, maintenance=-300)
    monday = make_record(date(2022, 1, 10), 5000, total_players_salary=-1000, maintenance=-300)
    tuesday = make_record(date(2022, 1, 11), 4600, total_players_salary=-1400, maintenance=-400)
    wednesday = make_record(date(2022, 1, 12), 4600, total_players_salary=-1400, maintenance=-400)

    corrected = realign_monday_expenses([sunday, monday, tuesday, wednesday])

    assert corrected[0] == sunday
    assert corrected[1].total_players_salary == -1400
    assert corrected[1].maintenance == -400
    assert corrected[1].weekly_costs == tuesday.weekly_costs
    assert corrected[1].current == monday.current + 500
    assert corrected[2:] == [tuesday, wednesday]
    # The input records are left untouched.
    assert monday.total_players_salary == -1000


def test_monday_realignment_spans_several_days(make_record) -> None:
    sunday = make_record(date(2022, 1, 9), 0, others=-10)
    monday = make_record(date(2022, 1, 10), 0, others=-10)
    tuesday = make_record(date(2022, 1, 11), 20, others=-10)
    wednesday = make_record(date(2022, 1, 12), 0, others=-60)
    thursday = make_record(date(2022, 1, 13), 0, others=-60)

    corrected = realign_monday_expenses([sunday, monday, tuesday, wednesday, thursday])

    assert [record.others for record in corrected] == [-10, -60, -60, -60, -60]
    assert [record.current for record in corrected] == [0, 50, 70, 0, 0]


def test_monday_realignment_ignores_already_posted_monday(make_record) -> None:
    sunday = make_record(date(2022, 1, 9), 5000, total_players_salary=-1000)
    monday = make_record(date(2022, 1, 10), 4500, total_players_salary=-1500)
    tuesday = make_record(date(2022, 1, 11), 4500, total_players_salary=-1500)

    records = [sunday, monday, tuesday]
    assert realign_monday_expenses(records) == records


def test_monday_realignment_skips_first_and_last_records(make_record) -> None:
    monday = make_record(date(2022, 1, 10), 5000, total_players_salary=-1000)
    tuesday = make_record(date(2022, 1, 11), 4500, total_players_salary=-1500)

    assert realign_monday_expenses([monday, tuesday]) == [monday, tuesday]


def test_fractional_gap_is_collected_as_fault(make_record) -> None:
    first = make_record(datetime(2022, 1, 4, 12, 0), 100)
    second = make_record(date(2022, 1, 6), 200)
    third = make_record(date(2022, 1, 7), 300)

    result = normalize([first, second, third])

    assert len(result.faults) == 1
    assert result.faults[0].gap_days == pytest.approx(1.5)
    assert result.records == [first, second, third]


def test_fractional_gap_raises_in_strict_mode(make_record) -> None:
    first = make_record(datetime(2022, 1, 4, 12, 0), 100)
    second = make_record(date(2022, 1, 6), 200)

    with pytest.raises(LedgerIntegrityError):
        normalize([first, second], strict=True)


def test_normalize_handles_empty_input() -> None:
    result = normalize([])
    assert result.records == []
    assert result.is_clean
