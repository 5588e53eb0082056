"""Database layer package.

Public re-exports so callers can write::

    from inventory.db import MetadataQueryService, SqliteExecutor, init_db
"""

from inventory.db.connection import get_connection, scoped_connection
from inventory.db.executor import QueryExecutor, SqliteExecutor, StorageError
from inventory.db.metadata import MetadataQueryService, distinct_endpoints
from inventory.db.migrations import init_db

__all__ = [
    "get_connection",
    "scoped_connection",
    "init_db",
    "QueryExecutor",
    "SqliteExecutor",
    "StorageError",
    "MetadataQueryService",
    "distinct_endpoints",
]
