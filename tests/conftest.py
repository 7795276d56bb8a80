"""Mini README: Shared fixtures for the ledger test-suite.

Structure:
    * make_record - factory building ``FinanceRecord`` instances with zeroed defaults.
"""

from __future__ import annotations

from datetime import date
from typing import Callable

import pytest

from clubledger.finance import FinanceRecord


def _make_record(day: date, current: int = 0, *, season_id: int = 41, **fields: object) -> FinanceRecord:
    return FinanceRecord(season_id=season_id, date=day, current=current, **fields)


@pytest.fixture
def make_record() -> Callable[..., FinanceRecord]:
    return _make_record
