"""Mini README: Finance ledger records, normalization, and statistics.

This package holds the pure part of the engine. ``records`` defines the
snapshot type, ``normalizer`` rebuilds a dense daily ledger from raw
snapshots, ``statistics`` extracts the recurring rates the forecast relies
on, and ``snapshots`` coerces scraped payloads into records.
"""

from .normalizer import (
    LedgerIntegrityError,
    NormalizationResult,
    deduplicate,
    fill_gaps,
    normalize,
    realign_monday_expenses,
)
from .records import FinanceRecord, Season, sort_snapshots
from .snapshots import parse_amount, snapshot_from_mapping
from .statistics import (
    LedgerStatistics,
    average_others,
    average_tickets,
    daily_sponsor,
    delta,
    last_maintenance,
)

__all__ = [
    "FinanceRecord",
    "LedgerIntegrityError",
    "LedgerStatistics",
    "NormalizationResult",
    "Season",
    "average_others",
    "average_tickets",
    "daily_sponsor",
    "deduplicate",
    "delta",
    "fill_gaps",
    "last_maintenance",
    "normalize",
    "parse_amount",
    "realign_monday_expenses",
    "snapshot_from_mapping",
    "sort_snapshots",
]
