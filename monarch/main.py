"""Entry point for the Monarch field-sales ledger."""

from __future__ import annotations

import logging
from pathlib import Path

from monarch.config import APP_ID, DB_PATH, DEBUG_LOG_PATH, INITIAL_AUTH_TOKEN, SHARE_URL
from monarch.identity import provider_from_config
from monarch.ledger_app import MonarchApp
from monarch.persistence import SqliteStore


def configure_logging(log_path: str = DEBUG_LOG_PATH) -> None:
    """Send log records to a file so they never draw over the terminal UI."""
    path = Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=path,
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def build_app() -> MonarchApp:
    return MonarchApp(
        store=SqliteStore(DB_PATH),
        identity_provider=provider_from_config(INITIAL_AUTH_TOKEN),
        namespace=APP_ID,
        share_url=SHARE_URL,
    )


def main() -> None:
    """Run the Textual application."""
    configure_logging()
    logging.getLogger(__name__).debug("app_start namespace=%s db=%s", APP_ID, DB_PATH)
    build_app().run()


if __name__ == "__main__":
    main()
