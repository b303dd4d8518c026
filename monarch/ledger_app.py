"""Main Textual app class."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from monarch import forms
from monarch.cart import Cart, OrderDraft
from monarch.constant import EXPENSES, ORDERS, PRODUCTS, ROUTES, SHOPS, TAB_LABELS
from monarch.form_modal import FormField, FormModal
from monarch.gateway import MutationGateway
from monarch.identity import Identity, IdentityProvider, resolve_identity
from monarch.invoice_modal import InvoiceModal
from monarch.models import Order, Profile, Shop
from monarch.order_modal import OrderDetailsModal
from monarch.printer import printer_status, print_order_bill
from monarch.rendering import (
    GOLD,
    RED,
    format_amount,
    format_order_summary,
    format_product_label,
    format_stats,
    format_tab_bar,
    money,
    pointer,
)
from monarch.share_modal import ShareModal
from monarch.store import CollectionStore
from monarch.sync import Mirrors, SyncLayer
from monarch.views import ShopFilter, daily_stats, order_history, recent_expenses

logger = logging.getLogger(__name__)

_TAB_KEYS = {str(idx): tab_id for idx, tab_id in enumerate(TAB_LABELS, start=1)}
_DELETABLE = {"route": ROUTES, "expense": EXPENSES, "shop": SHOPS, "order": ORDERS, "product": PRODUCTS}


class MonarchApp(App):
    """Field-sales ledger: routes, shops, billing, expenses and order history."""

    TITLE = "Monarch"
    SUB_TITLE = "Live Production"

    CSS = """
    Screen {
        layout: vertical;
    }

    #tab-bar {
        height: 1;
        margin: 0 1;
    }

    #stats {
        height: 1;
        margin: 1 1 0 1;
    }

    #body-pane {
        height: 1fr;
        border: round #d4af37;
        padding: 0 1;
    }

    #search-bar {
        height: 1;
        margin-bottom: 1;
    }

    #body {
        height: 1fr;
    }

    #status {
        height: 1;
        margin: 0 1;
        color: $text-muted;
    }
    """

    tab = reactive("dashboard")
    input_state = reactive("normal")
    search_query = reactive("")
    cursor_index = reactive(0)
    selected_route_id: reactive[str | None] = reactive(None)

    BINDINGS = [
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "open_selected", "Open"),
        ("backspace", "backspace_query", "Delete query char"),
        ("ctrl+c", "cancel_search", "Exit search"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        store: CollectionStore,
        identity_provider: IdentityProvider,
        namespace: str,
        share_url: str = "",
    ) -> None:
        super().__init__()
        self.store = store
        self.identity_provider = identity_provider
        self.namespace = namespace
        self.share_url = share_url
        self.mirrors = Mirrors()
        self.sync = SyncLayer(store, self.mirrors, namespace)
        self.gateway = MutationGateway(store, namespace)
        self.cart = Cart()
        self.shop_filter = ShopFilter(self.mirrors)
        self.loading = True
        self.system_status = ""
        self._unlisten = self.mirrors.listen(self._on_mirror_changed)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="tab-bar")
        yield Static(id="stats")
        with Vertical(id="body-pane"):
            yield Static(id="search-bar")
            yield Static(id="body")
        yield Static(id="status")

    def on_mount(self) -> None:
        _, msg = printer_status()
        self.system_status = msg
        logger.debug("on_mount printer_status=%r", msg)
        self._refresh_all()
        self.run_worker(self._start_session(), name="session", exclusive=True)

    def on_unmount(self) -> None:
        self._unlisten()
        self.sync.teardown()

    async def _start_session(self) -> None:
        identity = await resolve_identity(self.identity_provider)
        self.identity_changed(identity)

    def identity_changed(self, identity: Identity | None) -> None:
        """Gate writes and subscriptions on the session identity."""
        self.gateway.identity = identity
        self.sync.identity_changed(identity)
        self.loading = False
        if identity is None:
            self.system_status = "Sign-in failed: read-only, no live data"
        self._refresh_all()

    def on_key(self, event: Key) -> None:
        if isinstance(self.screen, ModalScreen):
            return

        if self.input_state == "search":
            if event.key == "escape":
                self.action_cancel_search()
                event.stop()
                return
            if event.is_printable and event.character and len(event.character) == 1:
                self.search_query += event.character
                self.cursor_index = 0
                self._refresh_body()
                event.stop()
            return

        if not event.is_printable or not event.character or len(event.character) != 1:
            return

        key = event.character.lower()
        if key in _TAB_KEYS:
            self._switch_tab(_TAB_KEYS[key])
            event.stop()
            return

        if key == "j":
            self.action_move_cursor(1)
        elif key == "k":
            self.action_move_cursor(-1)
        elif key == "s":
            self.push_screen(ShareModal(self.share_url), self._after_modal)
        elif key == "d":
            self._delete_selected()
        elif key == "a":
            self._open_add_form()
        elif key == "e" and self.tab == "dashboard":
            self._open_expense_form()
        elif key == "/" and self.tab == "shops":
            self.input_state = "search"
            self._refresh_body()
        else:
            return
        event.stop()

    def action_move_cursor(self, delta: int) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        rows = self._rows()
        if not rows:
            self.cursor_index = 0
            return
        self.cursor_index = (self.cursor_index + delta) % len(rows)
        self._refresh_body()

    def action_open_selected(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        row = self._selected_row()
        if row is None:
            return
        kind, record = row
        if kind == "route":
            self.selected_route_id = None if self.selected_route_id == record.id else record.id
            self._refresh_body()
        elif kind == "shop":
            self.cart.clear()
            invoice = InvoiceModal(record, self.cart, self.mirrors, can_submit=lambda: self.gateway.resolved)
            self.push_screen(invoice, self._on_invoice_closed)
        elif kind == "order":
            self.push_screen(OrderDetailsModal(record, on_print=self._print_order), self._after_modal)
        elif kind == "profile":
            self._open_profile_form()

    def action_backspace_query(self) -> None:
        if self.input_state != "search" or not self.search_query:
            return
        self.search_query = self.search_query[:-1]
        self.cursor_index = 0
        self._refresh_body()

    def action_cancel_search(self) -> None:
        if self.input_state != "search":
            return
        self.input_state = "normal"
        self._refresh_body()

    def _switch_tab(self, tab: str) -> None:
        self.tab = tab
        self.cursor_index = 0
        self.input_state = "normal"
        self._refresh_all()

    def _write(self, label: str, operation: Awaitable[Any]) -> None:
        self.run_worker(self._run_write(label, operation), group="writes")

    async def _run_write(self, label: str, operation: Awaitable[Any]) -> None:
        try:
            await operation
        except Exception as exc:
            logger.error("write_failed action=%s error=%r", label, exc)

    def _delete_selected(self) -> None:
        row = self._selected_row()
        if row is None:
            return
        kind, record = row
        collection = _DELETABLE.get(kind)
        if collection is None:
            return
        self._write(f"delete_{kind}", self.gateway.delete(collection, record.id))

    def _open_add_form(self) -> None:
        if self.tab == "dashboard":
            self._open_form("New Route", [FormField("name", "E.G. COLOMBO 07")], forms.parse_route, ROUTES)
        elif self.tab == "shops":
            route_choices = tuple((route.name, route.id) for route in self.mirrors.routes)
            if not route_choices:
                self.system_status = "Create a route first (1 Dash, A)"
                self._refresh_status()
                return
            fields = [
                FormField("routeId", "SELECT ROUTE", value=self.selected_route_id or "", choices=route_choices),
                FormField("name", "SHOP NAME"),
                FormField("area", "TOWN / AREA"),
            ]
            self._open_form("New Outlet", fields, forms.parse_shop, SHOPS)
        elif self.tab == "settings":
            fields = [
                FormField("name", "PRODUCT NAME"),
                FormField("size", "SIZE (EG. 500G)"),
                FormField("price", "UNIT PRICE"),
            ]
            self._open_form("New Product", fields, forms.parse_product, PRODUCTS)

    def _open_expense_form(self) -> None:
        fields = [FormField("reason", "REASON / DESCRIPTION"), FormField("amount", "TOTAL AMOUNT")]
        self._open_form("New Expense", fields, forms.parse_expense, EXPENSES)

    def _open_form(self, title: str, fields: list[FormField], parse: Any, collection: str) -> None:
        def on_result(data: dict[str, Any] | None) -> None:
            self._refresh_all()
            if data is not None:
                self._write(f"create_{collection}", self.gateway.create(collection, data))

        self.push_screen(FormModal(title, fields, parse), on_result)

    def _open_profile_form(self) -> None:
        profile = self.mirrors.profile
        fields = [
            FormField("name", "Enter Name", value=profile.name),
            FormField("region", "Enter Region", value=profile.region),
        ]

        def on_result(updated: Profile | None) -> None:
            self._refresh_all()
            if updated is not None:
                self._write("save_profile", self.gateway.save_profile(updated))

        self.push_screen(FormModal("Edit Profile", fields, forms.parse_profile), on_result)

    def _on_invoice_closed(self, draft: OrderDraft | None) -> None:
        self._refresh_all()
        if draft is None:
            return
        self.system_status = f"Billed {draft.shop_name}: {money(draft.total)}"
        self._refresh_status()
        self._write("submit_order", self.gateway.submit_order(draft))

    def _print_order(self, order: Order) -> None:
        self.run_worker(self._run_print(order), group="printing")

    async def _run_print(self, order: Order) -> None:
        try:
            await asyncio.to_thread(print_order_bill, order, self.mirrors.profile)
        except Exception as exc:
            self.system_status = f"Print failed: {exc}"
            logger.error("bill_print_failed order_id=%s error=%r", order.id, exc)
        else:
            self.system_status = f"Printed bill for {order.shop_name}"
        self._refresh_status()

    def _after_modal(self, _result: object = None) -> None:
        self._refresh_all()

    def _on_mirror_changed(self, _collection: str) -> None:
        self._refresh_all()

    def _rows(self) -> list[tuple[str, Any]]:
        if self.tab == "dashboard":
            rows: list[tuple[str, Any]] = [("route", route) for route in self.mirrors.routes]
            rows.extend(("expense", expense) for expense in recent_expenses(self.mirrors.expenses))
            return rows
        if self.tab == "shops":
            return [("shop", shop) for shop in self._visible_shops()]
        if self.tab == "ledger":
            return [("order", order) for order in order_history(self.mirrors.orders)]
        rows = [("profile", self.mirrors.profile)]
        rows.extend(("product", product) for product in self.mirrors.products)
        return rows

    def _visible_shops(self) -> list[Shop]:
        return self.shop_filter(self.selected_route_id, self.search_query)

    def _selected_row(self) -> tuple[str, Any] | None:
        rows = self._rows()
        if not (0 <= self.cursor_index < len(rows)):
            return None
        return rows[self.cursor_index]

    def _refresh_all(self) -> None:
        try:
            self.query_one("#tab-bar", Static).update(format_tab_bar(self.tab))
            stats = daily_stats(self.mirrors.orders, self.mirrors.expenses)
            self.query_one("#stats", Static).update(format_stats(stats))
        except NoMatches:
            return
        self._refresh_body()
        self._refresh_status()

    def _refresh_status(self) -> None:
        try:
            status = self.query_one("#status", Static)
        except NoMatches:
            return
        hints = "1-4 tabs  J/K move  Enter open  A add  D delete  S share  Ctrl+Q quit"
        status.update(f"{self.system_status or 'Ready'}  |  {hints}")

    def _refresh_body(self) -> None:
        try:
            search_bar = self.query_one("#search-bar", Static)
            body = self.query_one("#body", Static)
        except NoMatches:
            return

        if self.loading:
            search_bar.update("")
            body.update(Text.assemble(("MONARCH", GOLD), "\n", ("Ready for Business", "dim")))
            return

        rows = self._rows()
        if self.cursor_index >= len(rows):
            self.cursor_index = max(0, len(rows) - 1)

        search_bar.update(self._search_bar_text())
        if self.tab == "shops" and not rows:
            body.update(Text("No shops found...", style="dim italic"))
            return

        lines = Text()
        section = None
        for idx, (kind, record) in enumerate(rows):
            if kind != section:
                if section is not None:
                    lines.append("\n")
                lines.append(self._section_title(kind), style="bold dim")
                section = kind
            lines.append("\n")
            lines.append(pointer(idx == self.cursor_index))
            lines.append_text(self._row_label(kind, record))
        body.update(lines)

    def _search_bar_text(self) -> Text:
        if self.tab != "shops":
            return Text()
        text = Text()
        route = next((r for r in self.mirrors.routes if r.id == self.selected_route_id), None)
        text.append(f"[{route.name}] " if route else "[ALL ROUTES] ", style=GOLD)
        if self.input_state == "search":
            text.append(f"Search: {self.search_query}|", style="bold")
        else:
            text.append(f"Search: {self.search_query}" if self.search_query else "Press / to search shop name", style="dim")
        return text

    def _section_title(self, kind: str) -> str:
        return {
            "route": "SELECT ROUTE  (Enter filter, A add)",
            "expense": "RECENT EXPENSES  (E add)",
            "shop": "OUTLETS  (Enter bill, A add)",
            "order": "ORDER HISTORY  (Enter details)",
            "profile": "PROFILE  (Enter edit)",
            "product": "PRODUCT CATALOG  (A add)",
        }[kind]

    def _row_label(self, kind: str, record: Any) -> Text:
        if kind == "route":
            selected = record.id == self.selected_route_id
            return Text(f"{record.name}{'  ✓' if selected else ''}", style=GOLD if selected else "white")
        if kind == "expense":
            return Text.assemble(record.reason, (f"  {record.date}", "dim"), (f"  {format_amount(record.amount)}", RED))
        if kind == "shop":
            return Text.assemble((record.name, "bold"), (f"  {record.area}", "dim"))
        if kind == "order":
            return format_order_summary(record)
        if kind == "profile":
            return Text.assemble((record.name, "bold"), (f"  {record.region}", "dim"))
        return Text.assemble(format_product_label(record), (f"  {money(record.price)}", GOLD))

