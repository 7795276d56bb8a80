"""Mini README: Ledger synchronisation through a remote free-text store.

The package is divided into ``codec`` for the delta encoding and the blob
layout, ``transport`` and ``registry`` for pluggable remote stores, and
``policy`` for the last-writer-wins round.
"""

from .codec import (
    COLUMNS,
    CodecError,
    SyncDocument,
    decode_payload_safely,
    decode_records,
    encode_records,
    parse_document,
    render_document,
)
from .registry import REGISTRY, TransportRegistry
from .transport import FileTransport, InMemoryTransport, SyncTransport
from .policy import SyncOutcome, SyncReport, synchronise

__all__ = [
    "COLUMNS",
    "CodecError",
    "FileTransport",
    "InMemoryTransport",
    "REGISTRY",
    "SyncDocument",
    "SyncOutcome",
    "SyncReport",
    "SyncTransport",
    "TransportRegistry",
    "decode_payload_safely",
    "decode_records",
    "encode_records",
    "parse_document",
    "render_document",
    "synchronise",
]
