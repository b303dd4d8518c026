"""Cart selection state and the cart-to-order conversion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator

from monarch.models import Number, OrderItem, Product, Shop

logger = logging.getLogger(__name__)


class Cart:
    """Quantities per product id. Never negative, never persisted."""

    def __init__(self) -> None:
        self._quantities: dict[str, int] = {}

    def increment(self, product_id: str) -> int:
        self._quantities[product_id] = self._quantities.get(product_id, 0) + 1
        return self._quantities[product_id]

    def decrement(self, product_id: str) -> int:
        self._quantities[product_id] = max(0, self._quantities.get(product_id, 0) - 1)
        return self._quantities[product_id]

    def clear(self) -> None:
        self._quantities.clear()

    def quantity(self, product_id: str) -> int:
        return self._quantities.get(product_id, 0)

    def items(self) -> Iterator[tuple[str, int]]:
        return iter(list(self._quantities.items()))

    @property
    def is_empty(self) -> bool:
        return not any(self._quantities.values())

    def preview_total(self, catalog: Iterable[Product]) -> Number:
        """Running total at current catalog prices, for display only."""
        prices = {product.id: product.price for product in catalog}
        return sum((prices[pid] * qty for pid, qty in self.items() if pid in prices), 0)


@dataclass(frozen=True)
class OrderDraft:
    """An order ready to be persisted. Item fields are frozen copies."""

    shop_id: str
    shop_name: str
    items: tuple[OrderItem, ...]
    total: Number

    def to_document(self) -> dict[str, Any]:
        return {
            "shopId": self.shop_id,
            "shopName": self.shop_name,
            "items": [item.to_document() for item in self.items],
            "total": self.total,
        }


def build_order(shop: Shop, cart: Cart, catalog: Iterable[Product]) -> OrderDraft | None:
    """
    Turn the cart into an order for ``shop``.

    Zero quantities are dropped and products missing from the catalog are
    skipped. Returns None without touching the cart when nothing is billable;
    otherwise clears the cart.
    """
    products = {product.id: product for product in catalog}
    items: list[OrderItem] = []
    for product_id, qty in cart.items():
        if qty <= 0:
            continue
        product = products.get(product_id)
        if product is None:
            logger.debug("build_order_skip product_id=%s reason=missing", product_id)
            continue
        items.append(
            OrderItem(
                name=product.name,
                size=product.size,
                price=product.price,
                qty=qty,
                subtotal=product.price * qty,
            )
        )

    if not items:
        return None

    draft = OrderDraft(
        shop_id=shop.id,
        shop_name=shop.name,
        items=tuple(items),
        total=sum((item.subtotal for item in items), 0),
    )
    cart.clear()
    return draft
