"""Mini README: HTTP interface for the ledger engine.

Re-exports the FastAPI application factory so launchers can import it from
a stable location.
"""

from .web_app import create_application

__all__ = ["create_application"]
