"""Rich text rendering helpers."""

from __future__ import annotations

from rich.text import Text

from monarch.constant import CURRENCY_PREFIX, TAB_LABELS
from monarch.models import Number, Order, OrderItem, Product
from monarch.views import DailyStats

GOLD = "bold #d4af37"
RED = "bold #e5484d"


def money(amount: Number) -> str:
    if isinstance(amount, float) and not amount.is_integer():
        return f"{CURRENCY_PREFIX}{amount:.2f}"
    return f"{CURRENCY_PREFIX}{int(amount)}"


def pointer(selected: bool) -> str:
    return "➤ " if selected else "  "


def format_tab_bar(active: str) -> Text:
    text = Text()
    for idx, (tab_id, label) in enumerate(TAB_LABELS.items(), start=1):
        if idx > 1:
            text.append("  ")
        style = "bold #000000 on #d4af37" if tab_id == active else "dim"
        text.append(f" {idx} {label} ", style=style)
    return text


def format_stats(stats: DailyStats) -> Text:
    text = Text()
    text.append("Today's Sales ", style="dim")
    text.append(money(stats.daily_sales), style=GOLD)
    text.append("    Today's Exp ", style="dim")
    text.append(money(stats.daily_expenses), style=RED)
    text.append(f"    Orders {stats.total_orders}", style="dim")
    return text


def format_product_label(product: Product) -> str:
    return f"{product.name} {product.size}".strip()


def format_item_line(item: OrderItem) -> Text:
    text = Text()
    text.append(f"{item.name} {item.size}".strip())
    text.append(f"  {item.qty} x {money(item.price)}", style="dim")
    text.append(f"  {money(item.subtotal)}", style=GOLD)
    return text


def format_order_summary(order: Order) -> Text:
    text = Text()
    text.append(order.shop_name, style="bold")
    text.append(f"  {order.date}", style="dim")
    text.append(f"  {money(order.total)}", style=GOLD)
    return text


def format_order_details(order: Order) -> Text:
    text = Text()
    text.append(order.shop_name, style="bold")
    text.append(f"\n{order.date}", style="dim")
    text.append("\n")
    for item in order.items:
        text.append("\n")
        text.append_text(format_item_line(item))
    text.append("\n\nTotal ", style="bold")
    text.append(money(order.total), style=GOLD)
    return text


def format_amount(amount: object) -> str:
    """Money for numeric amounts, the stored value as-is otherwise."""
    if isinstance(amount, (int, float)) and not isinstance(amount, bool):
        return money(amount)
    return str(amount)
