"""Mini README: Storage for raw finance snapshots.

Exposes ``FinanceStore``, the season/date indexed store shared by the
forecast service, the sync policy, and the API.
"""

from .store import FinanceStore

__all__ = ["FinanceStore"]
