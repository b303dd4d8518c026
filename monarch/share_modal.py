"""Share link modal screen."""

from __future__ import annotations

import logging

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from monarch.rendering import GOLD

logger = logging.getLogger(__name__)

_COPY_LABEL = "Copy Link"
_COPIED_LABEL = "Copied!"
_COPIED_RESET_SECONDS = 2.0


class ShareModal(ModalScreen[None]):
    """Show the share link and copy it to the clipboard on request."""

    BINDINGS = [
        ("escape", "close", "Dismiss"),
        ("q", "close", "Dismiss"),
        ("ctrl+c", "close", "Dismiss"),
        ("enter", "copy_link", "Copy link"),
        ("c", "copy_link", "Copy link"),
    ]

    CSS = """
    ShareModal {
        align: center middle;
        background: $background 60%;
    }

    #share-dialog {
        width: 56;
        height: auto;
        border: round #d4af37;
        background: $panel;
        padding: 1 2;
    }

    #share-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #share-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self, url: str) -> None:
        super().__init__()
        self.url = url
        self.copy_status = _COPY_LABEL

    def compose(self) -> ComposeResult:
        with Container(id="share-dialog"):
            yield Static("Share App", id="share-title")
            yield Static(id="share-body")
            yield Static("Enter/C copy. Esc dismiss.", id="share-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def action_close(self) -> None:
        self.dismiss()

    def action_copy_link(self) -> None:
        try:
            self.app.copy_to_clipboard(self.url)
        except Exception as exc:
            # Best effort: the link stays on screen for manual copying.
            logger.warning("share_copy_failed error=%r", exc)
            return
        self.copy_status = _COPIED_LABEL
        self._refresh_content()
        self.set_timer(_COPIED_RESET_SECONDS, self._reset_copy_status)

    def _reset_copy_status(self) -> None:
        self.copy_status = _COPY_LABEL
        if self.is_mounted:
            self._refresh_content()

    def _refresh_content(self) -> None:
        body = self.query_one("#share-body", Static)
        body.update(Text.assemble((self.url, "white"), "\n\n", (self.copy_status, GOLD)))
