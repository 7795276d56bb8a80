"""Mini README: Tests for snapshot coercion and the season/date store.

Structure:
    * parse_amount / parse_servertime - displayed text into typed values.
    * snapshot_from_mapping - scraped payloads into records.
    * FinanceStore - natural-key replacement, queries, and JSON persistence.
"""

from __future__ import annotations

from datetime import date

import pytest

from clubledger.finance import FinanceRecord, Season, parse_amount, snapshot_from_mapping
from clubledger.finance.snapshots import parse_servertime
from clubledger.storage import FinanceStore


def test_parse_amount_strips_thousands_separators_and_currency() -> None:
    assert parse_amount("1.234.567 €") == 1234567
    assert parse_amount("-12.500 €") == -12500
    assert parse_amount(42) == 42
    with pytest.raises(ValueError):
        parse_amount("n/a")
    with pytest.raises(ValueError):
        parse_amount("")


def test_parse_servertime_pads_and_validates() -> None:
    assert parse_servertime("9:05") == "09:05"
    assert parse_servertime(None) is None
    with pytest.raises(ValueError):
        parse_servertime("25:00")


def test_snapshot_from_mapping_accepts_displayed_text() -> None:
    record = snapshot_from_mapping(
        {
            "season_id": "41",
            "current": "2.500.000 €",
            "sponsor": "120.000 €",
            "total_players_salary": -45000,
            "servertime": "14:20",
        },
        default_date=date(2022, 1, 12),
    )

    assert record == FinanceRecord(
        season_id=41,
        date=date(2022, 1, 12),
        servertime="14:20",
        current=2500000,
        sponsor=120000,
        total_players_salary=-45000,
    )


def test_snapshot_from_mapping_requires_season_and_balance() -> None:
    with pytest.raises(ValueError):
        snapshot_from_mapping({"current": 1, "date": "2022-01-04"})
    with pytest.raises(ValueError):
        snapshot_from_mapping({"season_id": 41, "date": "2022-01-04"})


def test_store_replaces_same_natural_key_and_sorts(make_record) -> None:
    store = FinanceStore()
    store.record_snapshot(make_record(date(2022, 1, 5), 1, servertime="08:00"), initial_balance=900)
    store.record_snapshot(make_record(date(2022, 1, 4), 2, servertime="20:00"))
    store.record_snapshot(make_record(date(2022, 1, 4), 3, servertime="07:00"))
    store.record_snapshot(make_record(date(2022, 1, 5), 4, servertime="08:00"))

    assert [record.current for record in store.records(41)] == [3, 2, 4]
    assert [record.current for record in store.records(41, since=date(2022, 1, 5))] == [4]
    assert store.get_season(41) == Season(id=41, initial_balance=900)
    with pytest.raises(KeyError):
        store.get_season(40)


def test_store_replace_season_rejects_foreign_records(make_record) -> None:
    store = FinanceStore(records=[make_record(date(2022, 1, 4), 1)])

    with pytest.raises(ValueError):
        store.replace_season(41, [make_record(date(2022, 1, 4), 1, season_id=42)])

    store.replace_season(41, [])
    assert store.records(41) == []


def test_store_adopt_keeps_seasons_missing_from_the_rows(make_record) -> None:
    kept = make_record(date(2022, 4, 26), 7, season_id=42)
    store = FinanceStore(records=[make_record(date(2022, 1, 4), 1), kept])
    incoming = [make_record(date(2022, 1, 5), 2, servertime="00:00")]

    assert store.adopt(incoming) == [41]
    assert store.records(41) == incoming
    assert store.records(42) == [kept]
    assert store.all_records() == incoming + [kept]


def test_store_round_trips_through_json(tmp_path, make_record) -> None:
    path = tmp_path / "ledger.json"
    store = FinanceStore(
        records=[make_record(date(2022, 1, 4), 10, servertime="10:00", others=-5)],
        seasons=[Season(id=41, initial_balance=1000)],
        path=path,
    )
    store.sync_version = 1234
    store.save()

    loaded = FinanceStore.load(path)

    assert loaded.records(41) == store.records(41)
    assert loaded.seasons() == store.seasons()
    assert loaded.sync_version == 1234
    assert FinanceStore.load(tmp_path / "missing.json").season_ids() == []
