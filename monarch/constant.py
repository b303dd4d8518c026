"""Editable static ledger configuration."""

from __future__ import annotations

ROUTES = "routes"
SHOPS = "shops"
ORDERS = "orders"
EXPENSES = "expenses"
PRODUCTS = "products"
SETTINGS = "settings"

# Collections mirrored as record lists. Settings is mirrored as the profile singleton.
RECORD_COLLECTIONS: tuple[str, ...] = (ROUTES, SHOPS, ORDERS, EXPENSES, PRODUCTS)
SYNCED_COLLECTIONS: tuple[str, ...] = RECORD_COLLECTIONS + (SETTINGS,)

PROFILE_DOC_ID = "profile"

DEFAULT_PROFILE: dict[str, str] = {
    "name": "Sales King",
    "region": "Sri Lanka",
}

CURRENCY_PREFIX = "Rs."

RECENT_EXPENSE_LIMIT = 5

TAB_LABELS: dict[str, str] = {
    "dashboard": "Dash",
    "shops": "Shops",
    "ledger": "Ledger",
    "settings": "Setup",
}
