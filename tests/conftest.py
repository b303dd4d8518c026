from __future__ import annotations

import asyncio
from datetime import date
from typing import Any, Mapping

import pytest

from monarch.identity import Identity
from monarch.models import Product, Shop
from monarch.store import MemoryStore

NAMESPACE = "test-ledger"
FIXED_MS = 1_704_067_200_000


class RecordingStore(MemoryStore):
    """Memory store that counts every write call it receives."""

    def __init__(self) -> None:
        super().__init__(clock=lambda: FIXED_MS)
        self.calls: list[tuple[str, str]] = []

    async def add_document(self, path: str, data: Mapping[str, Any]) -> str:
        self.calls.append(("add", path))
        return await super().add_document(path, data)

    async def set_document(self, path: str, doc_id: str, data: Mapping[str, Any]) -> None:
        self.calls.append(("set", path))
        await super().set_document(path, doc_id, data)

    async def update_document(self, path: str, doc_id: str, data: Mapping[str, Any]) -> None:
        self.calls.append(("update", path))
        await super().update_document(path, doc_id, data)

    async def delete_document(self, path: str, doc_id: str) -> None:
        self.calls.append(("delete", path))
        await super().delete_document(path, doc_id)


async def settle(rounds: int = 25) -> None:
    """Let subscription pumps and the applier run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def identity() -> Identity:
    return Identity(uid="seller-1")


@pytest.fixture
def new_year() -> date:
    return date(2024, 1, 1)


@pytest.fixture
def shop() -> Shop:
    return Shop(id="shop-1", name="LUCKY STORES", area="DEHIWALA", route_id="route-1")


@pytest.fixture
def catalog() -> list[Product]:
    return [
        Product(id="a", name="X", size="500G", price=100),
        Product(id="b", name="SOAP", size="90G", price=45),
    ]
