"""Mini README: Compact delta encoding of raw ledger snapshots.

Structure:
    * to_base36 / from_base36 - signed integer helpers.
    * encode_records / decode_records - ``|`` separated rows of ``,``
      separated columns, empty when unchanged from the previous row.
    * decode_payload_safely - decode that degrades to ``[]`` on bad input.
    * SyncDocument / parse_document / render_document - the free-text blob
      layout: user notes, marker line, version line, payload line.

Column order is fixed by ``COLUMNS``. Dates and server times keep their
``-`` and ``:`` separators with every component base-36 encoded, so
``2022-01-04`` becomes ``1k6-1-4``. A missing server time is written as
``null`` and reads back as ``00:00``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from ..finance.records import FinanceRecord, day_of, sort_snapshots
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

COLUMNS: Tuple[str, ...] = (
    "date",
    "servertime",
    "season_id",
    "current",
    "total_players_salary",
    "total_coaches_salary",
    "current_players_salary",
    "current_coaches_salary",
    "building",
    "tickets",
    "transfers",
    "sponsor",
    "prizes",
    "maintenance",
    "others",
)
ROW_SEPARATOR = "|"
COLUMN_SEPARATOR = ","
NULL_TIME = "null"
DEFAULT_MARKER = "## finance-tools sync ##"

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_BASE36 = re.compile(r"^-?[0-9a-z]+$")


class CodecError(ValueError):
    """Raised when an encoded payload cannot be decoded."""


def to_base36(value: int) -> str:
    if value < 0:
        return "-" + to_base36(-value)
    digits = []
    while True:
        value, remainder = divmod(value, 36)
        digits.append(_DIGITS[remainder])
        if value == 0:
            break
    return "".join(reversed(digits))


def from_base36(token: str) -> int:
    if not _BASE36.match(token):
        raise CodecError(f"Invalid base-36 token: {token!r}")
    return int(token, 36)


def _encode_parts(text: str, separator: str) -> str:
    return separator.join(to_base36(int(part)) for part in text.split(separator))


def _decode_parts(token: str, separator: str, expected: int) -> List[int]:
    parts = token.split(separator)
    if len(parts) != expected:
        raise CodecError(f"Expected {expected} components in {token!r}")
    return [from_base36(part) for part in parts]


def _column_values(record: FinanceRecord) -> List[str]:
    values = [
        _encode_parts(day_of(record.date).isoformat(), "-"),
        NULL_TIME if record.servertime is None else _encode_parts(record.servertime, ":"),
    ]
    values.extend(to_base36(int(getattr(record, name))) for name in COLUMNS[2:])
    return values


def encode_records(records: Iterable[FinanceRecord]) -> str:
    """Encode snapshots sorted by date and server time.

    Every column but ``date`` is left empty when equal to the previous row.
    """

    rows: List[str] = []
    previous: Optional[List[str]] = None
    for record in sort_snapshots(records):
        values = _column_values(record)
        if previous is None:
            row = values
        else:
            row = [values[0]] + [
                "" if value == before else value for value, before in zip(values[1:], previous[1:])
            ]
        rows.append(COLUMN_SEPARATOR.join(row))
        previous = values
    return ROW_SEPARATOR.join(rows)


def _decode_row(values: List[str]) -> FinanceRecord:
    year, month, day = _decode_parts(values[0], "-", 3)
    if values[1] == NULL_TIME:
        servertime = "00:00"
    else:
        hours, minutes = _decode_parts(values[1], ":", 2)
        servertime = f"{hours:02d}:{minutes:02d}"
    amounts: Dict[str, int] = {name: from_base36(token) for name, token in zip(COLUMNS[2:], values[2:])}
    season_id = amounts.pop("season_id")
    try:
        day_value = date(year, month, day)
    except ValueError as error:
        raise CodecError(f"Invalid date components in {values[0]!r}") from error
    return FinanceRecord(season_id=season_id, date=day_value, servertime=servertime, **amounts)


def decode_records(payload: str) -> List[FinanceRecord]:
    """Decode a payload produced by ``encode_records``.

    Empty columns inherit the previous row's token; the first row must be
    complete. Raises ``CodecError`` on any malformed row.
    """

    payload = payload.strip()
    if not payload:
        return []
    records: List[FinanceRecord] = []
    previous: Optional[List[str]] = None
    for number, row in enumerate(payload.split(ROW_SEPARATOR)):
        tokens = row.split(COLUMN_SEPARATOR)
        if len(tokens) != len(COLUMNS):
            raise CodecError(f"Row {number} has {len(tokens)} columns, expected {len(COLUMNS)}")
        if previous is None:
            missing = [COLUMNS[index] for index, token in enumerate(tokens) if token == ""]
            if missing:
                raise CodecError(f"First row is missing {', '.join(missing)}")
            values = tokens
        else:
            values = [token if token != "" else before for token, before in zip(tokens, previous)]
        records.append(_decode_row(values))
        previous = values
    return records


def decode_payload_safely(payload: Optional[str]) -> List[FinanceRecord]:
    """Decode ``payload``, returning ``[]`` when it is absent or malformed."""

    if not payload:
        return []
    try:
        return decode_records(payload)
    except CodecError as error:
        LOGGER.warning("Ignoring undecodable sync payload: %s", error)
        return []


@dataclass(slots=True, frozen=True)
class SyncDocument:
    """Parsed free-text blob: verbatim notes plus the engine's section."""

    notes: str
    version: Optional[int] = None
    payload: str = ""
    has_section: bool = False


def parse_document(text: Optional[str], marker: str = DEFAULT_MARKER) -> Optional[SyncDocument]:
    """Split a remote blob at ``marker``; ``None`` when the blob is absent."""

    if text is None:
        return None
    lines = text.split("\n")
    if marker not in lines:
        return SyncDocument(notes=text)
    index = lines.index(marker)
    notes = "\n".join(lines[:index])
    section = lines[index + 1 :]
    version_line = section[0].strip() if section else ""
    try:
        version: Optional[int] = int(version_line) if version_line else None
    except ValueError:
        LOGGER.warning("Ignoring unreadable sync version %r", version_line)
        version = None
    payload = "".join(line.strip() for line in section[1:])
    return SyncDocument(notes=notes, version=version, payload=payload, has_section=True)


def render_document(notes: str, version: int, payload: str, marker: str = DEFAULT_MARKER) -> str:
    """Build the blob text, keeping ``notes`` verbatim ahead of the marker."""

    lines = [marker, str(version), payload]
    if notes:
        lines.insert(0, notes)
    return "\n".join(lines)
