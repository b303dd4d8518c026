"""SQLite-backed document store for the shared ledger."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Callable

from monarch.config import DB_PATH
from monarch.store import MemoryStore

logger = logging.getLogger(__name__)


class SqliteStore(MemoryStore):
    """Document store whose documents are JSON rows in a SQLite file."""

    def __init__(self, db_path: str | Path = DB_PATH, clock: Callable[[], int] | None = None) -> None:
        super().__init__(clock=clock)
        self.db_path = Path(db_path)
        self.bootstrap_schema()

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def bootstrap_schema(self) -> None:
        """Create persistence schema if it does not already exist."""
        with closing(self._connect()) as conn:
            with conn:
                conn.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS documents (
                        path TEXT NOT NULL,
                        doc_id TEXT NOT NULL,
                        data TEXT NOT NULL,
                        seq INTEGER NOT NULL,
                        PRIMARY KEY (path, doc_id)
                    );

                    CREATE INDEX IF NOT EXISTS idx_documents_path_seq
                        ON documents(path, seq);
                    """
                )
        logger.debug("sqlite_schema_ready path=%s", self.db_path)

    def _load(self, path: str) -> dict[str, dict[str, Any]]:
        with closing(self._connect()) as conn:
            rows = conn.execute(
                "SELECT doc_id, data FROM documents WHERE path = ? ORDER BY seq",
                (path,),
            ).fetchall()
        return {doc_id: json.loads(data) for doc_id, data in rows}

    def _save(self, path: str, doc_id: str, data: dict[str, Any]) -> None:
        with closing(self._connect()) as conn:
            with conn:
                existing = conn.execute(
                    "SELECT seq FROM documents WHERE path = ? AND doc_id = ?",
                    (path, doc_id),
                ).fetchone()
                if existing is not None:
                    conn.execute(
                        "UPDATE documents SET data = ? WHERE path = ? AND doc_id = ?",
                        (json.dumps(data), path, doc_id),
                    )
                    return
                (next_seq,) = conn.execute(
                    "SELECT COALESCE(MAX(seq), 0) + 1 FROM documents WHERE path = ?",
                    (path,),
                ).fetchone()
                conn.execute(
                    "INSERT INTO documents (path, doc_id, data, seq) VALUES (?, ?, ?, ?)",
                    (path, doc_id, json.dumps(data), next_seq),
                )

    def _remove(self, path: str, doc_id: str) -> None:
        with closing(self._connect()) as conn:
            with conn:
                conn.execute("DELETE FROM documents WHERE path = ? AND doc_id = ?", (path, doc_id))
