from __future__ import annotations

import asyncio
import sqlite3

import pytest

from conftest import FIXED_MS
from monarch.persistence import SqliteStore
from monarch.store import SERVER_TIMESTAMP, DocumentNotFound, MemoryStore, Snapshot, StreamError

PATH = "artifacts/test/public/data/routes"


async def _next(subscription):
    return await asyncio.wait_for(subscription.__anext__(), timeout=1)


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return MemoryStore(clock=lambda: FIXED_MS)
    return SqliteStore(tmp_path / "ledger.db", clock=lambda: FIXED_MS)


def test_first_event_is_current_snapshot(any_store):
    async def scenario():
        await any_store.add_document(PATH, {"name": "A"})
        subscription = any_store.subscribe(PATH)
        snapshot = await _next(subscription)
        subscription.close()
        return snapshot

    snapshot = asyncio.run(scenario())

    assert isinstance(snapshot, Snapshot)
    assert [doc.data["name"] for doc in snapshot.documents] == ["A"]


def test_every_write_publishes_full_snapshot(any_store):
    async def scenario():
        subscription = any_store.subscribe(PATH)
        await _next(subscription)
        first = await any_store.add_document(PATH, {"name": "A"})
        await any_store.add_document(PATH, {"name": "B"})
        await any_store.update_document(PATH, first, {"name": "A2"})
        events = [await _next(subscription) for _ in range(3)]
        subscription.close()
        return events

    events = asyncio.run(scenario())

    assert [[doc.data["name"] for doc in event.documents] for event in events] == [
        ["A"],
        ["A", "B"],
        ["A2", "B"],
    ]


def test_server_timestamp_is_resolved(any_store):
    async def scenario():
        doc_id = await any_store.add_document(PATH, {"name": "A", "timestamp": SERVER_TIMESTAMP})
        return await any_store.get_document(PATH, doc_id)

    assert asyncio.run(scenario()) == {"name": "A", "timestamp": FIXED_MS}


def test_update_merges_and_set_overwrites(any_store):
    async def scenario():
        await any_store.set_document(PATH, "doc", {"name": "A", "extra": 1})
        await any_store.update_document(PATH, "doc", {"name": "B"})
        merged = await any_store.get_document(PATH, "doc")
        await any_store.set_document(PATH, "doc", {"name": "C"})
        return merged, await any_store.get_document(PATH, "doc")

    merged, overwritten = asyncio.run(scenario())

    assert merged == {"name": "B", "extra": 1}
    assert overwritten == {"name": "C"}


def test_update_missing_raises(any_store):
    with pytest.raises(DocumentNotFound):
        asyncio.run(any_store.update_document(PATH, "missing", {"name": "X"}))


def test_delete_missing_is_ignored(any_store):
    asyncio.run(any_store.delete_document(PATH, "missing"))


def test_documents_are_copied_in_and_out():
    store = MemoryStore()
    items = [{"name": "X", "qty": 1}]

    async def scenario():
        doc_id = await store.add_document(PATH, {"items": items})
        items[0]["qty"] = 99
        fetched = await store.get_document(PATH, doc_id)
        fetched["items"][0]["qty"] = 50
        return await store.get_document(PATH, doc_id)

    assert asyncio.run(scenario()) == {"items": [{"name": "X", "qty": 1}]}


def test_report_error_reaches_subscribers():
    store = MemoryStore()

    async def scenario():
        subscription = store.subscribe(PATH)
        await _next(subscription)
        store.report_error(PATH, RuntimeError("boom"))
        event = await _next(subscription)
        subscription.close()
        return event

    event = asyncio.run(scenario())

    assert isinstance(event, StreamError)
    assert str(event.error) == "boom"


def test_closed_subscription_stops_iterating():
    store = MemoryStore()

    async def scenario():
        subscription = store.subscribe(PATH)
        subscription.close()
        return [event async for event in subscription]

    events = asyncio.run(scenario())

    assert len(events) == 1
    assert store.subscriber_count(PATH) == 0


def test_sqlite_documents_survive_reopen(tmp_path):
    db_path = tmp_path / "shared.db"

    async def write():
        return await SqliteStore(db_path).add_document(PATH, {"name": "KEPT"})

    doc_id = asyncio.run(write())
    reopened = SqliteStore(db_path)

    assert asyncio.run(reopened.get_document(PATH, doc_id)) == {"name": "KEPT"}


def test_sqlite_closes_every_connection(tmp_path, monkeypatch):
    store = SqliteStore(tmp_path / "shared.db")
    opened = []
    connect = store._connect

    def tracked_connect():
        conn = connect()
        opened.append(conn)
        return conn

    monkeypatch.setattr(store, "_connect", tracked_connect)

    async def scenario():
        doc_id = await store.add_document(PATH, {"name": "A"})
        await store.update_document(PATH, doc_id, {"name": "B"})
        await store.get_document(PATH, doc_id)
        await store.delete_document(PATH, doc_id)

    asyncio.run(scenario())

    assert opened
    for conn in opened:
        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")
