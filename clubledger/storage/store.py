"""Mini README: Ledger store indexed by season and date.

Structure:
    * FinanceStore - keeps raw snapshots under their natural key
      ``(season_id, date, servertime)``, the seasons seen so far, and the
      remote version of the last sync round.

The store holds raw snapshots exactly as ingested. Normalization happens on
read, so the persisted data and the corrected view may differ. Persistence
is a single JSON document written with ``save`` and read with ``load``.
"""

from __future__ import annotations

import json
from datetime import date
from itertools import groupby
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from ..finance.records import FinanceRecord, Season, day_of, sort_snapshots
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

_Key = Tuple[date, Optional[str]]


class FinanceStore:
    """In-memory snapshot store with JSON persistence."""

    def __init__(
        self,
        records: Optional[Iterable[FinanceRecord]] = None,
        seasons: Optional[Iterable[Season]] = None,
        *,
        path: Optional[Path] = None,
    ) -> None:
        self.path = path
        self._records: Dict[int, Dict[_Key, FinanceRecord]] = {}
        self._seasons: Dict[int, Season] = {}
        self.sync_version: Optional[int] = None
        for season in seasons or []:
            self.put_season(season)
        for record in records or []:
            self.put(record)
        LOGGER.debug(
            "Finance store initialised with %s seasons and %s records",
            len(self._seasons),
            sum(len(entries) for entries in self._records.values()),
        )

    def put(self, record: FinanceRecord) -> None:
        """Store a snapshot, replacing any snapshot with the same natural key."""

        self._records.setdefault(record.season_id, {})[(record.date, record.servertime)] = record

    def put_season(self, season: Season) -> None:
        self._seasons[season.id] = season

    def record_snapshot(self, record: FinanceRecord, *, initial_balance: Optional[int] = None) -> None:
        """Store a freshly observed snapshot and upsert its season."""

        if initial_balance is not None:
            self.put_season(Season(id=record.season_id, initial_balance=initial_balance))
        self.put(record)
        LOGGER.info(
            "Recorded snapshot for season %s on %s %s",
            record.season_id,
            record.date.isoformat(),
            record.servertime or "",
        )

    def get_season(self, season_id: int) -> Season:
        if season_id not in self._seasons:
            raise KeyError(f"Season {season_id} not found")
        return self._seasons[season_id]

    def seasons(self) -> List[Season]:
        return sorted(self._seasons.values(), key=lambda season: season.id)

    def season_ids(self) -> List[int]:
        return sorted(set(self._seasons) | set(self._records))

    def records(
        self,
        season_id: int,
        *,
        since: Optional[date] = None,
        until: Optional[date] = None,
    ) -> List[FinanceRecord]:
        """Return the season's raw snapshots sorted by date and server time."""

        entries = self._records.get(season_id, {}).values()
        return sort_snapshots(
            record
            for record in entries
            if (since is None or day_of(record.date) >= since)
            and (until is None or day_of(record.date) <= until)
        )

    def all_records(self) -> List[FinanceRecord]:
        """Every stored snapshot, season by season."""

        return [record for season_id in self.season_ids() for record in self.records(season_id)]

    def replace_season(self, season_id: int, records: Iterable[FinanceRecord]) -> None:
        """Replace every snapshot of ``season_id`` with ``records``."""

        replacement: Dict[_Key, FinanceRecord] = {}
        for record in records:
            if record.season_id != season_id:
                raise ValueError(
                    f"Record for season {record.season_id} cannot replace season {season_id}"
                )
            replacement[(record.date, record.servertime)] = record
        self._records[season_id] = replacement
        LOGGER.info("Replaced season %s with %s records", season_id, len(replacement))

    def adopt(self, records: Iterable[FinanceRecord]) -> List[int]:
        """Replace each season present in ``records``; other seasons are kept.

        Returns the identifiers of the replaced seasons.
        """

        by_season = sorted(records, key=lambda record: record.season_id)
        replaced: List[int] = []
        for season_id, group in groupby(by_season, key=lambda record: record.season_id):
            self.replace_season(season_id, group)
            replaced.append(season_id)
        return replaced

    def as_dict(self) -> Dict[str, object]:
        return {
            "seasons": [season.as_dict() for season in self.seasons()],
            "records": [record.as_dict() for record in self.all_records()],
            "sync_version": self.sync_version,
        }

    def save(self, path: Optional[Path] = None) -> Path:
        """Write the store as JSON and return the destination."""

        destination = path or self.path
        if destination is None:
            raise ValueError("No path configured for saving the store")
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(json.dumps(self.as_dict(), indent=2), encoding="utf-8")
        LOGGER.debug("Saved finance store to %s", destination)
        return destination

    @classmethod
    def load(cls, path: Path) -> "FinanceStore":
        """Read a store saved with ``save``; a missing file yields an empty store."""

        if not path.exists():
            LOGGER.info("No store found at %s; starting empty", path)
            return cls(path=path)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as error:
            raise ValueError(f"Store file {path} is not valid JSON") from error
        store = cls(
            records=(FinanceRecord.from_mapping(entry) for entry in payload.get("records", [])),
            seasons=(
                Season(id=int(entry["id"]), initial_balance=int(entry["initial_balance"]))
                for entry in payload.get("seasons", [])
            ),
            path=path,
        )
        version = payload.get("sync_version")
        store.sync_version = None if version is None else int(version)
        return store
