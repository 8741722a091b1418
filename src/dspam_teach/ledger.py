"""SQLite ledger of the last folder each message was seen in."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Iterator

from dspam_teach.constants import DEFAULT_DB_PATH

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS ledger (
    id TEXT PRIMARY KEY,
    label TEXT NOT NULL
);
"""


class Ledger:
    """Persistent message id -> label store.

    The whole table is loaded into memory on open; ``set`` writes through
    to disk and commits immediately so an interrupted run keeps every
    label recorded so far.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = Path(db_path or DEFAULT_DB_PATH)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_CREATE_TABLES_SQL)
        self._labels: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        rows = self._conn.execute("SELECT id, label FROM ledger").fetchall()
        return {row["id"]: row["label"] for row in rows}

    # --- public API ---

    def get(self, message_id: str) -> str | None:
        """Return the last recorded label, or None when the id is unknown."""
        return self._labels.get(message_id)

    def set(self, message_id: str, label: str) -> None:
        """Record ``label`` for ``message_id``."""
        with self._conn:
            self._conn.execute(
                "INSERT INTO ledger (id, label) VALUES (?, ?) "
                "ON CONFLICT(id) DO UPDATE SET label = excluded.label",
                (message_id, label),
            )
        self._labels[message_id] = label

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(sorted(self._labels.items()))

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._labels

    def __len__(self) -> int:
        return len(self._labels)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # --- context manager ---

    def __enter__(self) -> Ledger:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()
