"""Mini README: Tests for the sync transport registry and file transport.

Ensures built-in transports register on import and that the file transport
reports an absent remote before its first write and carries a full sync
round.
"""

import asyncio
from datetime import date

import pytest

from clubledger.storage import FinanceStore
from clubledger.sync import REGISTRY, FileTransport, SyncOutcome, SyncTransport, synchronise


def test_registry_contains_builtin_transports():
    assert {"file", "memory"} <= set(REGISTRY.available_transports())


def test_registry_instantiates_transport(tmp_path):
    transport = REGISTRY.create("file", path=tmp_path / "remote.txt")
    assert isinstance(transport, SyncTransport)
    assert isinstance(transport, FileTransport)
    assert transport.metadata()["transport"] == "file"


def test_registry_rejects_unknown_transport():
    with pytest.raises(KeyError):
        REGISTRY.create("carrier-pigeon")


def test_file_transport_reads_none_until_written(tmp_path):
    transport = FileTransport(tmp_path / "nested" / "remote.txt")

    assert asyncio.run(transport.read()) is None
    asyncio.run(transport.write("hello"))
    assert asyncio.run(transport.read()) == "hello"


def test_file_transport_carries_a_sync_round(tmp_path, make_record):
    path = tmp_path / "remote.txt"
    path.write_text("shared notes", encoding="utf-8")
    store = FinanceStore(records=[make_record(date(2022, 1, 4), 100, servertime="10:00")])

    async def _round_trip():
        report = await synchronise(store, FileTransport(path), clock=lambda: 1234)
        texts = await asyncio.gather(FileTransport(path).read(), FileTransport(path).read())
        return report, texts

    report, texts = asyncio.run(_round_trip())

    assert report.outcome is SyncOutcome.PUSHED
    assert texts[0] == texts[1]
    assert texts[0].startswith("shared notes\n## finance-tools sync ##\n1234\n")
