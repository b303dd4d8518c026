"""
Synchronization of local mirrors with the shared document store.

Every synced collection gets one subscription, pumped by its own background
task into a shared queue. A single applier task drains that queue and is the
only code that writes to the mirrors, replacing a whole collection per
snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Mapping

from monarch.constant import (
    EXPENSES,
    ORDERS,
    PRODUCTS,
    PROFILE_DOC_ID,
    RECORD_COLLECTIONS,
    ROUTES,
    SETTINGS,
    SHOPS,
    SYNCED_COLLECTIONS,
)
from monarch.identity import Identity
from monarch.models import Expense, Order, Product, Profile, Route, Shop
from monarch.store import CollectionStore, Snapshot, StreamError, Subscription, collection_path

logger = logging.getLogger(__name__)

RECORD_FACTORIES: dict[str, Callable[[str, Mapping[str, Any]], Any]] = {
    ROUTES: Route.from_document,
    SHOPS: Shop.from_document,
    ORDERS: Order.from_document,
    EXPENSES: Expense.from_document,
    PRODUCTS: Product.from_document,
}

MirrorListener = Callable[[str], None]


class Mirrors:
    """Local replicas of the synced collections plus the profile singleton."""

    def __init__(self) -> None:
        self._records: dict[str, tuple[Any, ...]] = {name: () for name in RECORD_COLLECTIONS}
        self._profile = Profile()
        self._versions: dict[str, int] = {name: 0 for name in SYNCED_COLLECTIONS}
        self._listeners: list[MirrorListener] = []

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._records[ROUTES]

    @property
    def shops(self) -> tuple[Shop, ...]:
        return self._records[SHOPS]

    @property
    def orders(self) -> tuple[Order, ...]:
        return self._records[ORDERS]

    @property
    def expenses(self) -> tuple[Expense, ...]:
        return self._records[EXPENSES]

    @property
    def products(self) -> tuple[Product, ...]:
        return self._records[PRODUCTS]

    @property
    def profile(self) -> Profile:
        return self._profile

    def records(self, name: str) -> tuple[Any, ...]:
        return self._records[name]

    def version(self, name: str) -> int:
        return self._versions[name]

    def listen(self, listener: MirrorListener) -> Callable[[], None]:
        """Call ``listener(collection)`` after every replacement."""
        self._listeners.append(listener)

        def unlisten() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unlisten

    def replace(self, name: str, records: tuple[Any, ...]) -> None:
        """Swap in a collection's new contents. Only the sync layer calls this."""
        self._records[name] = records
        self._changed(name)

    def replace_profile(self, profile: Profile) -> None:
        self._profile = profile
        self._changed(SETTINGS)

    def _changed(self, name: str) -> None:
        self._versions[name] += 1
        for listener in list(self._listeners):
            listener(name)


class SyncLayer:
    """Opens and tears down the per-collection subscriptions for a session."""

    def __init__(self, store: CollectionStore, mirrors: Mirrors, namespace: str) -> None:
        self.store = store
        self.mirrors = mirrors
        self.namespace = namespace
        self.identity: Identity | None = None
        self._subscriptions: list[Subscription] = []
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def active(self) -> bool:
        return bool(self._tasks)

    def begin(self, identity: Identity) -> None:
        """Subscribe to every synced collection. Requires a running event loop."""
        if self.active:
            if self.identity == identity:
                return
            self.teardown()

        self.identity = identity
        queue: asyncio.Queue[tuple[str, Snapshot | StreamError]] = asyncio.Queue()
        for name in SYNCED_COLLECTIONS:
            subscription = self.store.subscribe(collection_path(self.namespace, name))
            self._subscriptions.append(subscription)
            self._tasks.append(asyncio.create_task(self._pump(name, subscription, queue)))
        self._tasks.append(asyncio.create_task(self._apply(queue)))
        logger.info("sync_begin uid=%s collections=%d", identity.uid, len(SYNCED_COLLECTIONS))

    def teardown(self) -> None:
        """Cancel every subscription task. Mirrors keep their last contents."""
        if not self._tasks and not self._subscriptions:
            return
        for task in self._tasks:
            task.cancel()
        for subscription in self._subscriptions:
            subscription.close()
        self._tasks.clear()
        self._subscriptions.clear()
        logger.info("sync_teardown uid=%s", self.identity.uid if self.identity else None)
        self.identity = None

    def identity_changed(self, identity: Identity | None) -> None:
        if identity is None:
            self.teardown()
            return
        self.begin(identity)

    async def _pump(
        self,
        name: str,
        subscription: Subscription,
        queue: asyncio.Queue[tuple[str, Snapshot | StreamError]],
    ) -> None:
        async for event in subscription:
            await queue.put((name, event))

    async def _apply(self, queue: asyncio.Queue[tuple[str, Snapshot | StreamError]]) -> None:
        while True:
            name, event = await queue.get()
            if isinstance(event, StreamError):
                logger.error("sync_stream_error collection=%s error=%r", name, event.error)
                continue
            try:
                self._apply_snapshot(name, event)
            except Exception:
                # The mirror keeps its last contents.
                logger.exception("sync_apply_failed collection=%s", name)

    def _apply_snapshot(self, name: str, snapshot: Snapshot) -> None:
        """Replace one mirror with the contents of a snapshot."""
        if name == SETTINGS:
            document = snapshot.get(PROFILE_DOC_ID)
            if document is None:
                return
            self.mirrors.replace_profile(Profile.from_document(document.data))
            logger.debug("sync_snapshot collection=%s profile=%s", name, document.data)
            return

        factory = RECORD_FACTORIES[name]
        records = tuple(factory(document.id, document.data) for document in snapshot.documents)
        self.mirrors.replace(name, records)
        logger.debug("sync_snapshot collection=%s docs=%d", name, len(records))
