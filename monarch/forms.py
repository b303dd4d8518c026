"""Form input parsing. All validation happens here, before any write."""

from __future__ import annotations

from typing import Any, Mapping

from monarch.models import Number, Profile


class FormError(ValueError):
    """Raised for missing or malformed form input."""


def _required(values: Mapping[str, Any], name: str, label: str) -> str:
    value = str(values.get(name) or "").strip()
    if not value:
        raise FormError(f"{label} is required.")
    return value


def _amount(values: Mapping[str, Any], name: str, label: str) -> Number:
    raw = _required(values, name, label)
    try:
        parsed = float(raw)
    except ValueError:
        raise FormError(f"{label} must be a number.") from None
    if parsed != parsed or parsed in (float("inf"), float("-inf")):
        raise FormError(f"{label} must be a number.")
    if parsed < 0:
        raise FormError(f"{label} cannot be negative.")
    return int(parsed) if parsed.is_integer() else parsed


def parse_route(values: Mapping[str, Any]) -> dict[str, Any]:
    return {"name": _required(values, "name", "Route name").upper()}


def parse_shop(values: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "name": _required(values, "name", "Shop name").upper(),
        "area": _required(values, "area", "Town / area").upper(),
        "routeId": _required(values, "routeId", "Route"),
    }


def parse_product(values: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "name": _required(values, "name", "Product name").upper(),
        "size": _required(values, "size", "Size"),
        "price": _amount(values, "price", "Unit price"),
    }


def parse_expense(values: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "reason": _required(values, "reason", "Reason").upper(),
        "amount": _amount(values, "amount", "Amount"),
    }


def parse_profile(values: Mapping[str, Any]) -> Profile:
    return Profile(
        name=_required(values, "name", "Name"),
        region=_required(values, "region", "Region"),
    )
