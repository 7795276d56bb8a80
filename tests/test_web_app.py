"""Mini README: Tests for the FastAPI ledger service.

The application is built with an in-memory store, calendar, and transport
so requests never touch the configured data directory.
"""

from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from clubledger.configuration import LedgerSettings
from clubledger.forecast import InMemoryCalendarSource
from clubledger.interface import create_application
from clubledger.storage import FinanceStore
from clubledger.sync import InMemoryTransport, parse_document


@pytest.fixture
def transport() -> InMemoryTransport:
    return InMemoryTransport()


@pytest.fixture
def client(tmp_path, transport) -> TestClient:
    settings = LedgerSettings(
        data_directory=tmp_path,
        season_starts={41: date(2022, 1, 4), 42: date(2022, 1, 18)},
    )
    app = create_application(
        store=FinanceStore(),
        calendar_source=InMemoryCalendarSource(),
        transport=transport,
        settings=settings,
    )
    return TestClient(app)


def _post_snapshots(client: TestClient) -> None:
    for day, current, sponsor in [
        ("2022-01-10", "49.000 €", "0 €"),
        ("2022-01-11", "50.000 €", "1.000 €"),
    ]:
        response = client.post(
            "/snapshots",
            json={
                "season_id": 41,
                "date": day,
                "servertime": "12:00",
                "current": current,
                "sponsor": sponsor,
                "initial_balance": 48000,
            },
        )
        assert response.status_code == 201


def test_snapshots_feed_ledger_and_statistics(client: TestClient) -> None:
    _post_snapshots(client)

    seasons = client.get("/seasons").json()["seasons"]
    assert seasons == [{"id": 41, "initial_balance": 48000, "snapshots": 2}]

    ledger = client.get("/seasons/41/ledger").json()
    assert [record["current"] for record in ledger["records"]] == [49000, 50000]
    assert ledger["faults"] == []

    statistics = client.get("/seasons/41/statistics", params={"reference_date": "2022-01-11"}).json()
    assert statistics["daily_sponsor"] == 1000


def test_forecast_uses_calendar_and_overrides(client: TestClient) -> None:
    _post_snapshots(client)
    response = client.post(
        "/seasons/41/events",
        json={"date": "2022-01-13", "type": "match", "home": True, "name": "League"},
    )
    assert response.status_code == 201

    forecast = client.get(
        "/seasons/41/forecast",
        params={"reference_date": "2022-01-11", "average_home_tickets": 700},
    ).json()

    projection = forecast["projection"]
    assert projection[0]["date"] == "2022-01-12"
    assert projection[-1]["date"] == "2022-01-17"
    assert projection[1]["current"] == 52700


def test_forecast_for_unknown_season_is_not_found(client: TestClient) -> None:
    client.post("/snapshots", json={"season_id": 7, "date": "2022-01-04", "current": 1})

    response = client.get("/seasons/7/forecast", params={"reference_date": "2022-01-04"})

    assert response.status_code == 404


def test_invalid_snapshot_is_rejected(client: TestClient) -> None:
    response = client.post("/snapshots", json={"season_id": 41, "current": "n/a"})

    assert response.status_code == 400


def test_sync_pushes_local_ledger(client: TestClient, transport: InMemoryTransport) -> None:
    _post_snapshots(client)

    report = client.post("/sync").json()

    assert report["outcome"] == "pushed"
    assert report["seasons"] == [41]
    assert report["transport"] == "memory"
    encoded = client.get("/seasons/41/encoded").json()["payload"]
    assert parse_document(transport.text, "## finance-tools sync ##").payload == encoded
