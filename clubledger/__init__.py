"""Mini README: Core package initializer for the club ledger tools.

The package reconstructs a per-season finance ledger from sparse daily
snapshots, extracts recurring income and expense rates, projects the
balance until the next season starts, and keeps the raw ledger in sync with
a remote free-text store. Subpackages are grouped by concern:

    * finance - records, normalization passes, and statistics.
    * forecast - season calendar configuration and the day-by-day projector.
    * storage - queryable store indexed by season and date.
    * sync - delta codec, transports, and the last-writer-wins policy.
    * interface - FastAPI application exposing the engine as JSON.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
