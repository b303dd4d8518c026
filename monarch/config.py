"""Runtime configuration defaults for the store, session and printing."""

from __future__ import annotations

import os

DB_PATH = os.environ.get("MONARCH_DB_PATH", "data/monarch.db")
APP_ID = os.environ.get("MONARCH_APP_ID", "sales-monarch-ultimate-v1")
INITIAL_AUTH_TOKEN = os.environ.get("MONARCH_AUTH_TOKEN", "").strip() or None

DEBUG_LOG_PATH = os.environ.get("MONARCH_DEBUG_LOG", "/tmp/monarch-debug.log")
SHARE_URL = os.environ.get("MONARCH_SHARE_URL", f"monarch://{APP_ID}")

PRINTER_USB_VENDOR_ID = 0x28E9
PRINTER_USB_PRODUCT_ID = 0x0289
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 28
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNS.ttf"
PRINTER_LEFT_INDENT_PX = 8
PRINTER_TAIL_SPACER_PX = 70
