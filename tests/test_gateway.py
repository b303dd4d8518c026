from __future__ import annotations

import asyncio

import pytest

from conftest import FIXED_MS, NAMESPACE
from monarch.cart import OrderDraft
from monarch.constant import EXPENSES, ORDERS, PROFILE_DOC_ID, ROUTES, SETTINGS, SHOPS
from monarch.gateway import MutationGateway
from monarch.models import OrderItem, Profile
from monarch.store import DocumentNotFound, collection_path


def _gateway(store, identity, new_year):
    return MutationGateway(store, NAMESPACE, identity=identity, today=lambda: new_year)


def test_unresolved_identity_issues_no_store_calls(store, new_year):
    gateway = _gateway(store, None, new_year)
    draft = OrderDraft(shop_id="s", shop_name="S", items=(), total=0)

    async def scenario():
        return [
            await gateway.create(ROUTES, {"name": "R"}),
            await gateway.update(ROUTES, "x", {"name": "R"}),
            await gateway.put(ROUTES, "x", {"name": "R"}),
            await gateway.delete(ROUTES, "x"),
            await gateway.submit_order(draft),
            await gateway.save_profile(Profile()),
        ]

    results = asyncio.run(scenario())

    assert results == [None, False, False, False, None, False]
    assert store.calls == []
    assert not gateway.resolved


def test_create_stamps_timestamp_and_date(store, identity, new_year):
    gateway = _gateway(store, identity, new_year)

    async def scenario():
        doc_id = await gateway.create(EXPENSES, {"reason": "FUEL", "amount": 1200})
        return await store.get_document(collection_path(NAMESPACE, EXPENSES), doc_id)

    stored = asyncio.run(scenario())

    assert stored == {"reason": "FUEL", "amount": 1200, "timestamp": FIXED_MS, "date": "1/1/2024"}


def test_submit_order_persists_snapshotted_items(store, identity, new_year):
    gateway = _gateway(store, identity, new_year)
    item = OrderItem(name="X", size="1L", price=100, qty=3, subtotal=300)
    draft = OrderDraft(shop_id="s1", shop_name="LUCKY", items=(item,), total=300)

    async def scenario():
        doc_id = await gateway.submit_order(draft)
        return await store.get_document(collection_path(NAMESPACE, ORDERS), doc_id)

    stored = asyncio.run(scenario())

    assert stored["items"] == [{"name": "X", "size": "1L", "price": 100, "qty": 3, "subtotal": 300}]
    assert stored["total"] == 300
    assert stored["shopId"] == "s1"
    assert stored["date"] == "1/1/2024"


def test_delete_route_leaves_shops(store, identity, new_year):
    gateway = _gateway(store, identity, new_year)

    async def scenario():
        route_id = await gateway.create(ROUTES, {"name": "COLOMBO"})
        shop_id = await gateway.create(SHOPS, {"name": "A", "area": "B", "routeId": route_id})
        assert await gateway.delete(ROUTES, route_id)
        return (
            route_id,
            await store.get_document(collection_path(NAMESPACE, ROUTES), route_id),
            await store.get_document(collection_path(NAMESPACE, SHOPS), shop_id),
        )

    route_id, route, shop = asyncio.run(scenario())

    assert route is None
    assert shop["routeId"] == route_id


def test_save_profile_overwrites(store, identity, new_year):
    gateway = _gateway(store, identity, new_year)
    path = collection_path(NAMESPACE, SETTINGS)

    async def scenario():
        await gateway.save_profile(Profile(name="A", region="North"))
        await gateway.save_profile(Profile(name="B", region="South"))
        return await store.get_document(path, PROFILE_DOC_ID)

    assert asyncio.run(scenario()) == {"name": "B", "region": "South"}


def test_update_missing_document_propagates(store, identity, new_year):
    gateway = _gateway(store, identity, new_year)

    with pytest.raises(DocumentNotFound):
        asyncio.run(gateway.update(ROUTES, "nope", {"name": "X"}))


def test_identity_can_resolve_later(store, identity, new_year):
    gateway = _gateway(store, None, new_year)
    assert asyncio.run(gateway.create(ROUTES, {"name": "EARLY"})) is None

    gateway.identity = identity
    assert asyncio.run(gateway.create(ROUTES, {"name": "LATE"})) is not None
    assert store.calls == [("add", collection_path(NAMESPACE, ROUTES))]
