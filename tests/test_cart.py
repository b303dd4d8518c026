from __future__ import annotations

import pytest

from monarch.cart import Cart, build_order
from monarch.models import OrderItem, Product


def test_increment_defaults_to_zero():
    cart = Cart()
    assert cart.increment("a") == 1
    assert cart.increment("a") == 2
    assert cart.quantity("a") == 2
    assert cart.quantity("missing") == 0


@pytest.mark.parametrize("presses", [1, 2, 10])
def test_decrement_never_goes_below_zero(presses):
    cart = Cart()
    for _ in range(presses):
        cart.decrement("a")
    assert cart.quantity("a") == 0


def test_decrement_after_increment():
    cart = Cart()
    cart.increment("a")
    cart.increment("a")
    assert cart.decrement("a") == 1


def test_clear_empties_cart():
    cart = Cart()
    cart.increment("a")
    cart.clear()
    assert cart.is_empty
    assert list(cart.items()) == []


def test_build_order_single_product(shop):
    cart = Cart()
    for _ in range(3):
        cart.increment("a")

    draft = build_order(shop, cart, [Product(id="a", name="X", size="", price=100)])

    assert draft is not None
    assert draft.items == (OrderItem(name="X", size="", price=100, qty=3, subtotal=300),)
    assert draft.total == 300
    assert draft.shop_id == "shop-1"
    assert draft.shop_name == "LUCKY STORES"


def test_build_order_total_matches_subtotals(shop, catalog):
    cart = Cart()
    cart.increment("a")
    for _ in range(4):
        cart.increment("b")

    draft = build_order(shop, cart, catalog)

    assert draft is not None
    assert draft.total == sum(item.subtotal for item in draft.items)
    for item in draft.items:
        assert item.subtotal == item.price * item.qty
    assert draft.total == 100 + 4 * 45


def test_build_order_clears_cart_on_success(shop, catalog):
    cart = Cart()
    cart.increment("a")
    assert build_order(shop, cart, catalog) is not None
    assert cart.is_empty


def test_all_zero_cart_builds_nothing(shop, catalog):
    cart = Cart()
    cart.increment("a")
    cart.decrement("a")
    cart.decrement("b")

    assert build_order(shop, cart, catalog) is None


def test_empty_cart_builds_nothing(shop, catalog):
    assert build_order(shop, Cart(), catalog) is None


def test_zero_quantities_are_dropped(shop, catalog):
    cart = Cart()
    cart.increment("a")
    cart.increment("b")
    cart.decrement("b")

    draft = build_order(shop, cart, catalog)

    assert draft is not None
    assert [item.name for item in draft.items] == ["X"]
    assert all(item.qty > 0 for item in draft.items)


def test_missing_product_is_skipped(shop, catalog):
    cart = Cart()
    cart.increment("gone")
    cart.increment("b")

    draft = build_order(shop, cart, catalog)

    assert draft is not None
    assert [item.name for item in draft.items] == ["SOAP"]
    assert draft.total == 45


def test_only_missing_products_is_a_no_op_and_keeps_cart(shop, catalog):
    cart = Cart()
    cart.increment("gone")

    assert build_order(shop, cart, catalog) is None
    assert cart.quantity("gone") == 1


def test_items_keep_submission_price(shop):
    cart = Cart()
    cart.increment("a")
    catalog = [Product(id="a", name="X", size="1L", price=100)]

    draft = build_order(shop, cart, catalog)
    catalog[0] = Product(id="a", name="X NEW", size="2L", price=250)

    assert draft.items[0].price == 100
    assert draft.items[0].name == "X"
    assert draft.items[0].size == "1L"


def test_draft_document_shape(shop, catalog):
    cart = Cart()
    cart.increment("b")
    doc = build_order(shop, cart, catalog).to_document()

    assert doc == {
        "shopId": "shop-1",
        "shopName": "LUCKY STORES",
        "items": [{"name": "SOAP", "size": "90G", "price": 45, "qty": 1, "subtotal": 45}],
        "total": 45,
    }


def test_preview_total_uses_catalog(catalog):
    cart = Cart()
    cart.increment("a")
    cart.increment("b")
    cart.increment("gone")
    assert cart.preview_total(catalog) == 145
