"""Read-only projections over the mirrors."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

from monarch.constant import RECENT_EXPENSE_LIMIT, SHOPS
from monarch.models import Expense, Number, Order, Shop, ledger_date
from monarch.sync import Mirrors


def filter_shops(shops: Iterable[Shop], route_id: str | None, query: str) -> list[Shop]:
    """Shops on the selected route (any route when None) whose name contains the query."""
    q = (query or "").lower()
    return [shop for shop in shops if (not route_id or shop.route_id == route_id) and q in shop.name.lower()]


class ShopFilter:
    """Memoized shop filter, recomputed only when the shops mirror or the inputs change."""

    def __init__(self, mirrors: Mirrors) -> None:
        self.mirrors = mirrors
        self._key: tuple[int, str | None, str] | None = None
        self._result: list[Shop] = []

    def __call__(self, route_id: str | None, query: str) -> list[Shop]:
        key = (self.mirrors.version(SHOPS), route_id, query)
        if key != self._key:
            self._result = filter_shops(self.mirrors.shops, route_id, query)
            self._key = key
        return self._result


def numeric(value: Any) -> Number:
    """Coerce a stored amount to a number, treating anything non-numeric as zero."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return 0 if math.isnan(value) else value
    if isinstance(value, str):
        try:
            parsed = float(value.strip() or 0)
        except ValueError:
            return 0
        if math.isnan(parsed) or math.isinf(parsed):
            return 0
        return int(parsed) if parsed.is_integer() else parsed
    return 0


@dataclass(frozen=True)
class DailyStats:
    daily_sales: Number
    daily_expenses: Number
    total_orders: int


def daily_stats(orders: Iterable[Order], expenses: Iterable[Expense], today: str | None = None) -> DailyStats:
    """Today's sales and expenses. Today is read on every call unless given."""
    if today is None:
        today = ledger_date(date.today())
    orders = list(orders)
    return DailyStats(
        daily_sales=sum((order.total for order in orders if order.date == today), 0),
        daily_expenses=sum((numeric(expense.amount) for expense in expenses if expense.date == today), 0),
        total_orders=len(orders),
    )


def order_history(orders: Iterable[Order]) -> list[Order]:
    """Orders newest first."""
    return sorted(orders, key=lambda order: order.timestamp, reverse=True)


def recent_expenses(expenses: Iterable[Expense], limit: int = RECENT_EXPENSE_LIMIT) -> list[Expense]:
    """The latest expenses, newest first."""
    return sorted(expenses, key=lambda expense: expense.timestamp, reverse=True)[:limit]
