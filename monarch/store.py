"""
Document store protocol and the in-process store.

A store holds named collections of JSON-like documents. Subscribing to a
collection path yields complete snapshots (never diffs): the first one is the
current contents, and a new one follows every write to that path.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol
from uuid import uuid4

logger = logging.getLogger(__name__)


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"

    def __copy__(self) -> _ServerTimestamp:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _ServerTimestamp:
        return self


# Placeholder resolved by the store to its own clock (epoch milliseconds) on write.
SERVER_TIMESTAMP: Any = _ServerTimestamp()


class DocumentNotFound(LookupError):
    """Raised when updating a document that does not exist."""


@dataclass(frozen=True)
class DocumentSnapshot:
    """One document as delivered in a snapshot."""

    id: str
    data: Mapping[str, Any]


@dataclass(frozen=True)
class Snapshot:
    """The complete, point-in-time contents of one collection path."""

    path: str
    documents: tuple[DocumentSnapshot, ...]

    def get(self, doc_id: str) -> DocumentSnapshot | None:
        for document in self.documents:
            if document.id == doc_id:
                return document
        return None


@dataclass(frozen=True)
class StreamError:
    """A failure reported on a subscription. The subscription stays open."""

    path: str
    error: Exception


_CLOSED = object()


class Subscription:
    """Ordered stream of snapshot and error events for one collection path."""

    def __init__(self, path: str, on_close: Callable[[Subscription], None]) -> None:
        self.path = path
        self._on_close = on_close
        self._events: asyncio.Queue[Any] = asyncio.Queue()
        self.closed = False

    def push(self, event: Snapshot | StreamError) -> None:
        if self.closed:
            return
        self._events.put_nowait(event)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._on_close(self)
        self._events.put_nowait(_CLOSED)

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> Snapshot | StreamError:
        if self.closed and self._events.empty():
            raise StopAsyncIteration
        event = await self._events.get()
        if event is _CLOSED:
            raise StopAsyncIteration
        return event


class CollectionStore(Protocol):
    """Subscribe/read/write primitives the ledger needs from a document store."""

    def subscribe(self, path: str) -> Subscription:
        """Open a snapshot stream for a collection path."""
        ...

    async def add_document(self, path: str, data: Mapping[str, Any]) -> str:
        """Create a document with a generated id and return the id."""
        ...

    async def set_document(self, path: str, doc_id: str, data: Mapping[str, Any]) -> None:
        """Create or fully overwrite a document."""
        ...

    async def update_document(self, path: str, doc_id: str, data: Mapping[str, Any]) -> None:
        """Merge fields into an existing document. Raises DocumentNotFound."""
        ...

    async def delete_document(self, path: str, doc_id: str) -> None:
        """Remove a document. Missing documents are ignored."""
        ...

    async def get_document(self, path: str, doc_id: str) -> dict[str, Any] | None:
        """Read one document."""
        ...


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_document_id() -> str:
    return uuid4().hex[:20]


class MemoryStore:
    """
    In-process document store.

    Documents live in plain dicts keyed by path and id. Subclasses persist
    them elsewhere by overriding the ``_load``/``_save``/``_remove`` hooks;
    snapshot publishing and timestamp resolution stay here.
    """

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock or _now_ms
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._subscriptions: dict[str, list[Subscription]] = {}

    def subscribe(self, path: str) -> Subscription:
        subscription = Subscription(path, self._unsubscribe)
        self._subscriptions.setdefault(path, []).append(subscription)
        subscription.push(self._snapshot(path))
        logger.debug("store_subscribe path=%s", path)
        return subscription

    def report_error(self, path: str, error: Exception) -> None:
        """Deliver a stream error to every subscriber of a path."""
        for subscription in list(self._subscriptions.get(path, [])):
            subscription.push(StreamError(path=path, error=error))

    def subscriber_count(self, path: str) -> int:
        return len(self._subscriptions.get(path, []))

    async def add_document(self, path: str, data: Mapping[str, Any]) -> str:
        doc_id = _new_document_id()
        self._save(path, doc_id, self._resolve(data))
        self._publish(path)
        return doc_id

    async def set_document(self, path: str, doc_id: str, data: Mapping[str, Any]) -> None:
        self._save(path, doc_id, self._resolve(data))
        self._publish(path)

    async def update_document(self, path: str, doc_id: str, data: Mapping[str, Any]) -> None:
        current = self._load(path).get(doc_id)
        if current is None:
            raise DocumentNotFound(f"{path}/{doc_id}")
        merged = {**current, **self._resolve(data)}
        self._save(path, doc_id, merged)
        self._publish(path)

    async def delete_document(self, path: str, doc_id: str) -> None:
        self._remove(path, doc_id)
        self._publish(path)

    async def get_document(self, path: str, doc_id: str) -> dict[str, Any] | None:
        data = self._load(path).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    def _resolve(self, data: Mapping[str, Any]) -> dict[str, Any]:
        resolved = copy.deepcopy(dict(data))
        for key, value in resolved.items():
            if value is SERVER_TIMESTAMP:
                resolved[key] = self._clock()
        return resolved

    def _snapshot(self, path: str) -> Snapshot:
        documents = tuple(
            DocumentSnapshot(id=doc_id, data=copy.deepcopy(data)) for doc_id, data in self._load(path).items()
        )
        return Snapshot(path=path, documents=documents)

    def _publish(self, path: str) -> None:
        subscribers = self._subscriptions.get(path, [])
        if not subscribers:
            return
        snapshot = self._snapshot(path)
        for subscription in list(subscribers):
            subscription.push(snapshot)

    def _unsubscribe(self, subscription: Subscription) -> None:
        subscribers = self._subscriptions.get(subscription.path, [])
        if subscription in subscribers:
            subscribers.remove(subscription)

    def _load(self, path: str) -> dict[str, dict[str, Any]]:
        return self._collections.get(path, {})

    def _save(self, path: str, doc_id: str, data: dict[str, Any]) -> None:
        self._collections.setdefault(path, {})[doc_id] = data

    def _remove(self, path: str, doc_id: str) -> None:
        self._collections.get(path, {}).pop(doc_id, None)


def collection_path(namespace: str, collection: str) -> str:
    """Path of a shared collection under the application namespace."""
    return f"artifacts/{namespace}/public/data/{collection}"
