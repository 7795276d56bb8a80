"""Mini README: Last-writer-wins synchronisation of the raw ledger.

Structure:
    * SyncOutcome - what a sync round did.
    * SyncReport - outcome plus the version now recorded locally.
    * synchronise - compare local and remote encodings and pull or push.

The remote text holds a single payload covering every season, stamped with
one version timestamp (epoch milliseconds). A remote version newer than the
one recorded locally wins outright: each season present in the remote rows
replaces its local counterpart, and seasons the remote does not carry are
kept so that a later round pushes them. Otherwise a differing local
encoding is pushed under a new version. Concurrent edits within the same
millisecond, or under clock skew, can be lost.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from ..finance.records import FinanceRecord
from ..logging_utils import get_logger
from ..storage.store import FinanceStore
from .codec import (
    DEFAULT_MARKER,
    decode_payload_safely,
    decode_records,
    encode_records,
    parse_document,
    render_document,
)
from .transport import SyncTransport

LOGGER = get_logger(__name__)


def epoch_millis() -> int:
    return int(time.time() * 1000)


class SyncOutcome(str, Enum):
    """Result of one synchronisation round."""

    PULLED = "pulled"
    PUSHED = "pushed"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


@dataclass(slots=True, frozen=True)
class SyncReport:
    """Summary of a synchronisation round for logs and API responses."""

    outcome: SyncOutcome
    version: Optional[int]
    records: int
    seasons: Tuple[int, ...] = ()

    def as_dict(self) -> Dict[str, object]:
        return {
            "outcome": self.outcome.value,
            "version": self.version,
            "records": self.records,
            "seasons": list(self.seasons),
        }


def _season_ids(records: List[FinanceRecord]) -> Tuple[int, ...]:
    return tuple(sorted({record.season_id for record in records}))


async def synchronise(
    store: FinanceStore,
    transport: SyncTransport,
    *,
    marker: str = DEFAULT_MARKER,
    clock: Callable[[], int] = epoch_millis,
) -> SyncReport:
    """Run one last-writer-wins round over every season in ``store``.

    Raw snapshots are compared, never the normalized view. The comparison
    uses decoded rows, so a missing server time that reads back as
    ``00:00`` does not count as a change.
    """

    local_records = store.all_records()
    local_payload = encode_records(local_records)
    local_version = store.sync_version
    document = parse_document(await transport.read(), marker)

    if document is None or not document.has_section:
        if not local_records:
            LOGGER.info("Nothing to sync: local store and remote section are empty")
            return SyncReport(SyncOutcome.SKIPPED, local_version, 0)
        notes = document.notes if document else ""
        return await _push(store, transport, notes, local_payload, local_records, marker, clock)

    remote_records = decode_payload_safely(document.payload)
    if document.payload and not remote_records:
        LOGGER.warning("Remote sync text is malformed; leaving both sides untouched")
        return SyncReport(SyncOutcome.SKIPPED, local_version, len(local_records), _season_ids(local_records))

    if local_version is None or document.version is None or document.version > local_version:
        replaced = store.adopt(remote_records)
        if document.version is not None:
            store.sync_version = document.version
        LOGGER.info(
            "Pulled %s records for seasons %s at remote version %s",
            len(remote_records),
            replaced,
            document.version,
        )
        return SyncReport(SyncOutcome.PULLED, document.version, len(remote_records), tuple(replaced))

    if decode_records(local_payload) != remote_records:
        return await _push(store, transport, document.notes, local_payload, local_records, marker, clock)

    store.sync_version = document.version
    LOGGER.debug("Ledger already in sync at version %s", document.version)
    return SyncReport(SyncOutcome.UNCHANGED, document.version, len(local_records), _season_ids(local_records))


async def _push(
    store: FinanceStore,
    transport: SyncTransport,
    notes: str,
    payload: str,
    records: List[FinanceRecord],
    marker: str,
    clock: Callable[[], int],
) -> SyncReport:
    version = clock()
    await transport.write(render_document(notes, version, payload, marker))
    store.sync_version = version
    seasons = _season_ids(records)
    LOGGER.info("Pushed %s records for seasons %s at version %s", len(records), list(seasons), version)
    return SyncReport(SyncOutcome.PUSHED, version, len(records), seasons)
