"""Order details modal screen."""

from __future__ import annotations

from typing import Callable

from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from monarch.models import Order
from monarch.rendering import format_order_details


class OrderDetailsModal(ModalScreen[None]):
    """Read-only view of one stored order."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("enter", "close", "Close"),
        ("p", "print_bill", "Print bill"),
    ]

    CSS = """
    OrderDetailsModal {
        align: center middle;
        background: $background 60%;
    }

    #order-dialog {
        width: 64;
        height: auto;
        border: round #d4af37;
        background: $panel;
        padding: 1 2;
    }

    #order-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #order-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self, order: Order, on_print: Callable[[Order], None]) -> None:
        super().__init__()
        self.order = order
        self.on_print = on_print

    def compose(self) -> ComposeResult:
        with Container(id="order-dialog"):
            yield Static("Order Details", id="order-title")
            yield Static(format_order_details(self.order), id="order-body")
            yield Static("P print bill. Enter/Esc back to history.", id="order-help")

    def action_close(self) -> None:
        self.dismiss()

    def action_print_bill(self) -> None:
        self.on_print(self.order)
