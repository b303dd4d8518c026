"""Domain models for the field-sales ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping

from monarch.constant import DEFAULT_PROFILE

Number = int | float


def ledger_date(day: date) -> str:
    """Format a calendar date the way stored records carry it (M/D/YYYY)."""
    return f"{day.month}/{day.day}/{day.year}"


def _number(value: Any) -> Number:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return 0


@dataclass(frozen=True)
class Route:
    """A named delivery path grouping shops."""

    id: str
    name: str

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> Route:
        return cls(id=doc_id, name=str(data.get("name", "")))

    def to_document(self) -> dict[str, Any]:
        return {"name": self.name}


@dataclass(frozen=True)
class Shop:
    """A customer outlet assigned to a route."""

    id: str
    name: str
    area: str
    route_id: str | None

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> Shop:
        return cls(
            id=doc_id,
            name=str(data.get("name", "")),
            area=str(data.get("area", "")),
            route_id=data.get("routeId") or None,
        )

    def to_document(self) -> dict[str, Any]:
        return {"name": self.name, "area": self.area, "routeId": self.route_id or ""}


@dataclass(frozen=True)
class Product:
    """A catalog entry with its current unit price."""

    id: str
    name: str
    size: str
    price: Number

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> Product:
        return cls(
            id=doc_id,
            name=str(data.get("name", "")),
            size=str(data.get("size", "")),
            price=_number(data.get("price")),
        )

    def to_document(self) -> dict[str, Any]:
        return {"name": self.name, "size": self.size, "price": self.price}


@dataclass(frozen=True)
class OrderItem:
    """One billed line, with name, size and price copied at sale time."""

    name: str
    size: str
    price: Number
    qty: int
    subtotal: Number

    @classmethod
    def from_document(cls, data: Mapping[str, Any]) -> OrderItem:
        return cls(
            name=str(data.get("name", "")),
            size=str(data.get("size", "")),
            price=_number(data.get("price")),
            qty=int(_number(data.get("qty"))),
            subtotal=_number(data.get("subtotal")),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "size": self.size,
            "price": self.price,
            "qty": self.qty,
            "subtotal": self.subtotal,
        }


@dataclass(frozen=True)
class Order:
    """A completed sale. Never mutated after creation."""

    id: str
    shop_id: str
    shop_name: str
    items: tuple[OrderItem, ...]
    total: Number
    date: str = ""
    timestamp: int = 0

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> Order:
        return cls(
            id=doc_id,
            shop_id=str(data.get("shopId", "")),
            shop_name=str(data.get("shopName", "")),
            items=tuple(OrderItem.from_document(item) for item in data.get("items") or ()),
            total=_number(data.get("total")),
            date=str(data.get("date", "")),
            timestamp=int(_number(data.get("timestamp"))),
        )


@dataclass(frozen=True)
class Expense:
    """A recorded outgoing cost. Amount is kept as stored."""

    id: str
    reason: str
    amount: Any
    date: str = ""
    timestamp: int = 0

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> Expense:
        return cls(
            id=doc_id,
            reason=str(data.get("reason", "")),
            amount=data.get("amount"),
            date=str(data.get("date", "")),
            timestamp=int(_number(data.get("timestamp"))),
        )


@dataclass(frozen=True)
class Profile:
    """The shared seller profile."""

    name: str = field(default=DEFAULT_PROFILE["name"])
    region: str = field(default=DEFAULT_PROFILE["region"])

    @classmethod
    def from_document(cls, data: Mapping[str, Any]) -> Profile:
        return cls(
            name=str(data.get("name", DEFAULT_PROFILE["name"])),
            region=str(data.get("region", DEFAULT_PROFILE["region"])),
        )

    def to_document(self) -> dict[str, Any]:
        return {"name": self.name, "region": self.region}
