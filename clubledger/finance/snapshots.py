"""Mini README: Coercion of loosely typed snapshot payloads.

Structure:
    * parse_amount - turn a displayed amount such as ``"1.234.567 €"`` into an int.
    * parse_servertime - validate ``HH:MM`` strings.
    * snapshot_from_mapping - build a ``FinanceRecord`` from scraped values.

Snapshots arrive from an external collaborator as either numbers or the
text shown on the finance page. Amount text uses ``.`` as a thousands
separator and may carry a trailing currency token.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Dict, Mapping, Optional

from .records import AMOUNT_FIELDS, FinanceRecord, parse_date

_SERVERTIME = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_amount(value: object) -> int:
    """Parse a number or displayed amount text into an integer."""

    if isinstance(value, bool):
        raise ValueError(f"Unsupported amount: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Amounts must be whole numbers: {value!r}")
        return int(value)
    if isinstance(value, str):
        tokens = value.split()
        if not tokens:
            raise ValueError("Amount text is empty")
        try:
            return int(tokens[0].replace(".", ""))
        except ValueError as error:
            raise ValueError(f"Unsupported amount: {value!r}") from error
    raise ValueError(f"Unsupported amount: {value!r}")


def parse_servertime(value: Optional[str]) -> Optional[str]:
    """Return ``HH:MM`` zero padded, or ``None`` when no time was captured."""

    if value is None or value == "":
        return None
    match = _SERVERTIME.match(str(value).strip())
    if not match:
        raise ValueError(f"Server time must be HH:MM, got {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Server time out of range: {value!r}")
    return f"{hours:02d}:{minutes:02d}"


def snapshot_from_mapping(
    payload: Mapping[str, object],
    *,
    default_date: Optional[date] = None,
) -> FinanceRecord:
    """Build a record from a scraped payload.

    ``season_id`` and ``current`` are required. ``date`` falls back to
    ``default_date`` (the day the snapshot was taken); missing totals are
    treated as zero.
    """

    if "season_id" not in payload:
        raise ValueError("Snapshot is missing 'season_id'")
    if "current" not in payload:
        raise ValueError("Snapshot is missing 'current'")
    raw_date = payload.get("date") or default_date
    if raw_date is None:
        raise ValueError("Snapshot is missing 'date'")

    amounts: Dict[str, int] = {}
    for name in AMOUNT_FIELDS:
        value = payload.get(name)
        amounts[name] = 0 if value is None else parse_amount(value)
    return FinanceRecord(
        season_id=int(payload["season_id"]),
        date=parse_date(raw_date),
        servertime=parse_servertime(payload.get("servertime")),  # type: ignore[arg-type]
        **amounts,
    )
