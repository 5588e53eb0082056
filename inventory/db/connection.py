"""SQLite connection factory.

Usage::

    from inventory.db.connection import scoped_connection

    with scoped_connection() as conn:
        cursor = conn.execute("SELECT 1")
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from inventory.config import settings


def get_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """Open and configure a SQLite connection.

    Args:
        db_path: Override the DB path.  Defaults to ``settings.db_path``.

    Returns:
        A configured :class:`sqlite3.Connection` with ``row_factory`` set to
        :class:`sqlite3.Row` so columns can be accessed by name.
    """
    path = db_path or settings.db_path

    # Create parent directory if needed (no-op for `:memory:`)
    if str(path) != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path), check_same_thread=False)
    conn.row_factory = sqlite3.Row

    # Readers must not block the collector writing into the same file.
    conn.execute("PRAGMA journal_mode = WAL")

    return conn


@contextmanager
def scoped_connection(db_path: Optional[Path] = None) -> Iterator[sqlite3.Connection]:
    """Yield a fresh connection and close it on every exit path."""
    conn = get_connection(db_path)
    try:
        yield conn
    finally:
        conn.close()
