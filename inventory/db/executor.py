"""Query executor: the only code that talks to the storage driver.

:class:`QueryExecutor` is the contract the metadata service depends on.
:class:`SqliteExecutor` implements it over :func:`scoped_connection`, opening a
new connection for every operation so nothing is held between calls.

Every driver failure leaves this module as a :class:`StorageError`; callers
never see ``sqlite3`` exception types.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, ContextManager, Iterator, Mapping, Optional, Protocol, Sequence

from inventory.db.connection import scoped_connection

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


class StorageError(IOError):
    """Query execution or connection failure in the underlying store."""


class QueryExecutor(Protocol):
    def connection(self) -> ContextManager[Any]:
        """Acquire a connection that is released when the block exits."""
        ...

    def query(self, conn: Any, sql: str, params: Sequence[Any]) -> list[Row]:
        """Run *sql* with positional ``?`` parameters and return every row."""
        ...


class SqliteExecutor:
    """:class:`QueryExecutor` backed by a SQLite database file."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = db_path

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        try:
            with scoped_connection(self.db_path) as conn:
                yield conn
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot use database {self.db_path!s}: {exc}") from exc

    def query(
        self, conn: sqlite3.Connection, sql: str, params: Sequence[Any]
    ) -> list[sqlite3.Row]:
        logger.debug("query: %s params=%r", sql, list(params))
        try:
            return conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Query failed: {exc}") from exc
