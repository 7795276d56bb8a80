"""Mini README: Transport registry enabling pluggable sync backends.

Structure:
    * TransportRegistry - maps transport identifiers to ``SyncTransport``
      classes and instantiates them with keyword options.

Built-in transports register themselves when ``clubledger.sync.transport``
is imported; third-party backends can call ``REGISTRY.register`` the same way.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, Type

from ..logging_utils import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from .transport import SyncTransport

LOGGER = get_logger(__name__)


class TransportRegistry:
    """Simple registry for mapping transport identifiers to classes."""

    def __init__(self) -> None:
        self._transports: Dict[str, Type["SyncTransport"]] = {}

    def register(self, transport: Type["SyncTransport"]) -> None:
        """Register a transport class under its ``transport_name``."""

        identifier = transport.transport_name.lower()
        LOGGER.debug("Registering sync transport '%s'", identifier)
        self._transports[identifier] = transport

    def available_transports(self) -> Iterable[str]:
        return sorted(self._transports.keys())

    def create(self, identifier: str, **options: object) -> "SyncTransport":
        """Instantiate the transport matching ``identifier``."""

        transport_cls = self._transports.get(identifier.lower())
        if not transport_cls:
            raise KeyError(f"Unknown sync transport '{identifier}'")
        LOGGER.info("Creating sync transport '%s'", identifier)
        return transport_cls(**options)


REGISTRY = TransportRegistry()
