"""Centralised settings for the inventory query layer.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).

The query service itself never reads :data:`settings`; it receives a
:class:`QueryConfig` at construction time (see :meth:`Settings.query_config`).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass(frozen=True)
class QueryConfig:
    """Static configuration handed to :class:`~inventory.db.metadata.MetadataQueryService`."""

    metadata_query_max_size: int

    def __post_init__(self) -> None:
        if self.metadata_query_max_size <= 0:
            raise ValueError(
                f"metadata_query_max_size must be positive, got {self.metadata_query_max_size}"
            )


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("INVENTORY_WORKSPACE", Path.home() / ".inventory_data")
        )
    )
    db_file: str | None = field(
        default_factory=lambda: os.environ.get("INVENTORY_DB_PATH") or None
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        if self.db_file:
            return Path(self.db_file)
        return self.workspace_dir / "inventory.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Metadata queries
    # ------------------------------------------------------------------
    metadata_query_max_size: int = field(
        default_factory=lambda: int(os.environ.get("METADATA_QUERY_MAX_SIZE", "5000"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("INVENTORY_LOG_LEVEL", "WARNING")
    )

    def query_config(self) -> QueryConfig:
        """Freeze the query-related settings into a :class:`QueryConfig`."""
        return QueryConfig(metadata_query_max_size=self.metadata_query_max_size)


# Module-level singleton; import this everywhere:
#   from inventory.config import settings
settings = Settings()
