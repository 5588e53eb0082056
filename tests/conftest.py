"""Shared fixtures: an on-disk SQLite inventory under ``tmp_path``.

The executor opens a new connection for every query, so an in-memory
database would be empty on each call; tests use a temporary file instead.
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

import pytest

from inventory.config import QueryConfig
from inventory.db.connection import get_connection
from inventory.db.executor import SqliteExecutor, StorageError
from inventory.db.metadata import MetadataQueryService
from inventory.db.migrations import init_db
from inventory.db.models import DetectPoint, NodeType


# ---------------------------------------------------------------------------
# Seeding helpers
# ---------------------------------------------------------------------------

def insert_service(
    conn: sqlite3.Connection,
    sequence: int,
    name: str,
    node_type: NodeType = NodeType.NORMAL,
    is_address: bool = False,
    register_time: int = 0,
    heartbeat_time: int = 10_000,
    properties: Optional[dict[str, Any] | str] = None,
) -> None:
    if isinstance(properties, dict):
        properties = json.dumps(properties)
    with conn:
        conn.execute(
            """
            INSERT INTO service_inventory
                (sequence, name, node_type, is_address, register_time, heartbeat_time, properties)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (sequence, name, int(node_type), int(is_address), register_time, heartbeat_time, properties),
        )


def insert_instance(
    conn: sqlite3.Connection,
    sequence: int,
    service_id: int,
    name: str,
    register_time: int = 0,
    heartbeat_time: int = 10_000,
    properties: Optional[dict[str, Any] | str] = None,
    instance_uuid: Optional[str] = None,
) -> None:
    if isinstance(properties, dict):
        properties = json.dumps(properties)
    with conn:
        conn.execute(
            """
            INSERT INTO service_instance_inventory
                (sequence, service_id, name, instance_uuid, register_time, heartbeat_time, properties)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                sequence,
                service_id,
                name,
                instance_uuid or f"uuid-{sequence}",
                register_time,
                heartbeat_time,
                properties,
            ),
        )


def insert_endpoint(
    conn: sqlite3.Connection,
    service_id: int,
    name: str,
    detect_point: DetectPoint = DetectPoint.SERVER,
    time_bucket: int = 0,
) -> None:
    with conn:
        conn.execute(
            "INSERT INTO endpoint_traffic (service_id, name, detect_point, time_bucket) VALUES (?, ?, ?, ?)",
            (service_id, name, int(detect_point), time_bucket),
        )


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class RecordingExecutor:
    """Executor returning canned rows and remembering every statement."""

    def __init__(self, rows: Optional[list[dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.rows = rows or []
        self.error = error
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.opened = 0
        self.closed = 0

    @contextmanager
    def connection(self) -> Iterator[object]:
        self.opened += 1
        try:
            yield object()
        finally:
            self.closed += 1

    def query(self, conn: object, sql: str, params: Sequence[Any]) -> list[dict[str, Any]]:
        self.calls.append((sql, tuple(params)))
        if self.error is not None:
            raise self.error
        return list(self.rows)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    """Path to a freshly initialised inventory database."""
    path = tmp_path / "inventory.db"
    conn = get_connection(path)
    init_db(conn)
    conn.close()
    return path


@pytest.fixture()
def conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Writable connection used to seed rows."""
    connection = get_connection(db_path)
    yield connection
    connection.close()


@pytest.fixture()
def service(db_path: Path) -> MetadataQueryService:
    return MetadataQueryService(SqliteExecutor(db_path), QueryConfig(metadata_query_max_size=50))


@pytest.fixture()
def failing_executor() -> RecordingExecutor:
    return RecordingExecutor(error=StorageError("disk I/O error"))


@pytest.fixture()
def recording_executor() -> type[RecordingExecutor]:
    """The :class:`RecordingExecutor` class, for tests that need canned rows."""
    return RecordingExecutor


class Seeder:
    """Inserts inventory rows through one connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def service(self, sequence: int, name: str, **kwargs: Any) -> None:
        insert_service(self.conn, sequence, name, **kwargs)

    def instance(self, sequence: int, service_id: int, name: str, **kwargs: Any) -> None:
        insert_instance(self.conn, sequence, service_id, name, **kwargs)

    def endpoint(self, service_id: int, name: str, **kwargs: Any) -> None:
        insert_endpoint(self.conn, service_id, name, **kwargs)


@pytest.fixture()
def seed(conn: sqlite3.Connection) -> Seeder:
    return Seeder(conn)
