"""Invoice (cart) modal screen."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from monarch.cart import Cart, OrderDraft, build_order
from monarch.models import Shop
from monarch.rendering import GOLD, format_product_label, money, pointer
from monarch.sync import Mirrors


class InvoiceModal(ModalScreen[OrderDraft | None]):
    """Pick quantities for a shop's bill and process it."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "process_bill", "Process bill"),
    ]

    CSS = """
    InvoiceModal {
        align: center middle;
        background: $background 60%;
    }

    #invoice-dialog {
        width: 64;
        height: auto;
        border: round #d4af37;
        background: $panel;
        padding: 1 2;
    }

    #invoice-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #invoice-body {
        margin-bottom: 1;
        color: white;
    }

    #invoice-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(
        self,
        shop: Shop,
        cart: Cart,
        mirrors: Mirrors,
        can_submit: Callable[[], bool] = lambda: True,
    ) -> None:
        super().__init__()
        self.shop = shop
        self.cart = cart
        self.mirrors = mirrors
        self.can_submit = can_submit
        self.message = ""
        self._unlisten = mirrors.listen(self._on_mirror_changed)

    def compose(self) -> ComposeResult:
        with Container(id="invoice-dialog"):
            yield Static(id="invoice-title")
            yield Static(id="invoice-body")
            yield Static("J/K move, +/- quantity, Enter process bill, Esc close", id="invoice-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_unmount(self) -> None:
        self._unlisten()

    def on_key(self, event: Key) -> None:
        if event.character in {"+", "=", "l"} or event.key == "right":
            self._adjust(1)
            event.stop()
            return
        if event.character in {"-", "_", "h"} or event.key == "left":
            self._adjust(-1)
            event.stop()

    def action_close(self) -> None:
        self.cart.clear()
        self.dismiss(None)

    def action_move_cursor(self, delta: int) -> None:
        products = self.mirrors.products
        if not products:
            return
        self.cursor_index = (self.cursor_index + delta) % len(products)
        self._refresh_content()

    def action_process_bill(self) -> None:
        if not self.can_submit():
            self.message = "Not signed in yet. Bill not processed."
            self._refresh_content()
            return
        draft = build_order(self.shop, self.cart, self.mirrors.products)
        if draft is None:
            self.message = "Add at least one item."
            self._refresh_content()
            return
        self.dismiss(draft)

    def _adjust(self, delta: int) -> None:
        products = self.mirrors.products
        if not products:
            return
        product = products[min(self.cursor_index, len(products) - 1)]
        if delta > 0:
            self.cart.increment(product.id)
        else:
            self.cart.decrement(product.id)
        self.message = ""
        self._refresh_content()

    def _on_mirror_changed(self, _collection: str) -> None:
        if self.is_mounted:
            self._refresh_content()

    def _refresh_content(self) -> None:
        title = self.query_one("#invoice-title", Static)
        body = self.query_one("#invoice-body", Static)
        title.update(Text.assemble(("Invoice  ", "bold"), (self.shop.name, GOLD), (f"  {self.shop.area}", "dim")))

        products = self.mirrors.products
        if not products:
            body.update(Text("No products in the catalog. Add products first (4 Setup, A).", style="dim"))
            return
        if self.cursor_index >= len(products):
            self.cursor_index = len(products) - 1

        content = Text(style="white")
        for idx, product in enumerate(products):
            if idx > 0:
                content.append("\n")
            qty = self.cart.quantity(product.id)
            content.append(pointer(idx == self.cursor_index))
            content.append(format_product_label(product), style="bold white" if qty else "white")
            content.append(f"  {money(product.price)}", style="dim")
            content.append(f"  x{qty}", style=GOLD if qty else "dim")

        content.append("\n\nTotal ", style="bold")
        content.append(money(self.cart.preview_total(products)), style=GOLD)
        if self.message:
            content.append(f"\n{self.message}", style="#ffb3b3")
        body.update(content)
