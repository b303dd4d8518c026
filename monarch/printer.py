"""Thermal bill printing for completed orders."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Iterator

from monarch.config import (
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_TAIL_SPACER_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)
from monarch.models import Order, Profile
from monarch.rendering import money

logger = logging.getLogger(__name__)

BILL_FONT_ENV = "MONARCH_PRINTER_FONT_PATH"
_SYSTEM_FONTS = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
)
_ROW_PADDING_PX = 6
_COLUMN_GAP_PX = 8
_RULE_HEIGHT_PX = 12
_RULE_THICKNESS_PX = 2
_ELLIPSIS = "..."


def _font_candidates() -> list[str]:
    override = os.environ.get(BILL_FONT_ENV, "").strip()
    ordered = [override, PRINTER_FONT_PATH, *_SYSTEM_FONTS]
    return list(dict.fromkeys(path for path in ordered if path))


def find_bill_font() -> str:
    """First existing font among the env override, the configured font and common system fonts."""
    candidates = _font_candidates()
    for path in candidates:
        if Path(path).is_file():
            return path
    raise RuntimeError(f"No bill font found, set {BILL_FONT_ENV}. Tried: {', '.join(candidates)}")


def bill_lines(order: Order, profile: Profile) -> list[tuple[str, str]]:
    """Left/right column pairs for a bill. An empty pair prints a rule."""
    lines: list[tuple[str, str]] = [
        (profile.name.upper(), ""),
        (profile.region, ""),
        ("", ""),
        (order.shop_name, order.date),
        ("", ""),
    ]
    for item in order.items:
        lines.append((f"{item.name} {item.size}".strip(), ""))
        lines.append((f"  {item.qty} x {money(item.price)}", money(item.subtotal)))
    lines.append(("", ""))
    lines.append(("TOTAL", money(order.total)))
    return lines


class BillCanvas:
    """
    Draws bill lines as paper-wide 1-bit strips.

    ``font`` is anything with Pillow's ``getlength``/``getmetrics``; real
    printing uses a TrueType font so text can be anchored to either margin.
    """

    def __init__(self, font: Any) -> None:
        self.font = font

    @classmethod
    def load(cls) -> BillCanvas:
        from PIL import ImageFont

        return cls(ImageFont.truetype(find_bill_font(), PRINTER_FONT_SIZE))

    def clip(self, text: str, max_px: float) -> str:
        """Cut ``text`` down with a trailing ellipsis until it fits ``max_px``."""
        if self.font.getlength(text) <= max_px:
            return text
        while text and self.font.getlength(text + _ELLIPSIS) > max_px:
            text = text[:-1]
        return text + _ELLIPSIS

    def blank(self, height_px: int) -> Any:
        from PIL import Image

        return Image.new("1", (PRINTER_WIDTH_PX, max(1, height_px)), color=1)

    def row(self, left: str, right: str) -> Any:
        from PIL import ImageDraw

        ascent, descent = self.font.getmetrics()
        strip = self.blank(ascent + descent + 2 * _ROW_PADDING_PX)
        draw = ImageDraw.Draw(strip)
        right_edge = PRINTER_WIDTH_PX - PRINTER_LEFT_INDENT_PX
        room = right_edge - PRINTER_LEFT_INDENT_PX
        if right:
            draw.text((right_edge, _ROW_PADDING_PX), right, font=self.font, fill=0, anchor="ra")
            room -= self.font.getlength(right) + _COLUMN_GAP_PX
        draw.text((PRINTER_LEFT_INDENT_PX, _ROW_PADDING_PX), self.clip(left, room), font=self.font, fill=0, anchor="la")
        return strip

    def rule(self) -> Any:
        from PIL import ImageDraw

        strip = self.blank(_RULE_HEIGHT_PX)
        top = (_RULE_HEIGHT_PX - _RULE_THICKNESS_PX) // 2
        ImageDraw.Draw(strip).rectangle((0, top, PRINTER_WIDTH_PX - 1, top + _RULE_THICKNESS_PX - 1), fill=0)
        return strip

    def strips(self, order: Order, profile: Profile) -> Iterator[Any]:
        """Every image strip of one bill, top to bottom, including the tail margin."""
        for left, right in bill_lines(order, profile):
            yield self.row(left, right) if left or right else self.rule()
        yield self.blank(PRINTER_TAIL_SPACER_PX)


def printer_status() -> tuple[bool, str]:
    """Whether a bill could be printed right now, with a status message."""
    try:
        from escpos.printer import Usb  # noqa: F401

        BillCanvas.load()
    except Exception as exc:
        return (False, f"Printer unavailable: {exc}")
    return (True, "Printer ready")


def print_order_bill(order: Order, profile: Profile) -> None:
    """Print one bill and cut the ticket."""
    if not order.items:
        return

    try:
        from escpos.printer import Usb
    except ImportError as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    canvas = BillCanvas.load()
    printer = Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)
    for strip in canvas.strips(order, profile):
        printer.image(strip)
    printer.cut()
    logger.info("bill_printed order_id=%s items=%d", order.id, len(order.items))
