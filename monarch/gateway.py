"""Identity-guarded writes to the shared store."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Mapping

from monarch.cart import OrderDraft
from monarch.constant import ORDERS, PROFILE_DOC_ID, SETTINGS
from monarch.identity import Identity
from monarch.models import Profile, ledger_date
from monarch.store import SERVER_TIMESTAMP, CollectionStore, collection_path

logger = logging.getLogger(__name__)


class MutationGateway:
    """
    Every create/update/delete goes through here.

    While no identity is set each call is a no-op that never reaches the
    store. Writes are not reflected locally: the mirrors change only when the
    resulting snapshot comes back through the sync layer.
    """

    def __init__(
        self,
        store: CollectionStore,
        namespace: str,
        identity: Identity | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.namespace = namespace
        self.identity = identity
        self._today = today

    @property
    def resolved(self) -> bool:
        return self.identity is not None

    def _guard(self, action: str, collection: str) -> bool:
        if self.identity is None:
            logger.debug("mutation_blocked action=%s collection=%s reason=no_identity", action, collection)
            return False
        return True

    async def create(self, collection: str, data: Mapping[str, Any]) -> str | None:
        """Add a document stamped with server time and today's ledger date."""
        if not self._guard("create", collection):
            return None
        stamped = {**data, "timestamp": SERVER_TIMESTAMP, "date": ledger_date(self._today())}
        doc_id = await self.store.add_document(collection_path(self.namespace, collection), stamped)
        logger.info("mutation_create collection=%s id=%s", collection, doc_id)
        return doc_id

    async def update(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> bool:
        if not self._guard("update", collection):
            return False
        await self.store.update_document(collection_path(self.namespace, collection), doc_id, data)
        logger.info("mutation_update collection=%s id=%s", collection, doc_id)
        return True

    async def put(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> bool:
        """Overwrite a document whole. Last write wins."""
        if not self._guard("put", collection):
            return False
        await self.store.set_document(collection_path(self.namespace, collection), doc_id, data)
        logger.info("mutation_put collection=%s id=%s", collection, doc_id)
        return True

    async def delete(self, collection: str, doc_id: str) -> bool:
        """Delete one document. Dependent records are left alone."""
        if not self._guard("delete", collection):
            return False
        await self.store.delete_document(collection_path(self.namespace, collection), doc_id)
        logger.info("mutation_delete collection=%s id=%s", collection, doc_id)
        return True

    async def submit_order(self, draft: OrderDraft) -> str | None:
        return await self.create(ORDERS, draft.to_document())

    async def save_profile(self, profile: Profile) -> bool:
        return await self.put(SETTINGS, PROFILE_DOC_ID, profile.to_document())
