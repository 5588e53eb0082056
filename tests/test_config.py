"""Tests for settings, the query config value object and window helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from inventory.config import QueryConfig, Settings
from inventory.log import setup_logging
from inventory.timeutil import resolve_window


class TestQueryConfig:
    def test_positive_size(self) -> None:
        assert QueryConfig(metadata_query_max_size=10).metadata_query_max_size == 10

    @pytest.mark.parametrize("size", [0, -1])
    def test_rejects_non_positive(self, size: int) -> None:
        with pytest.raises(ValueError, match="must be positive"):
            QueryConfig(metadata_query_max_size=size)


class TestSettings:
    def test_env_overrides(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("INVENTORY_WORKSPACE", str(tmp_path))
        monkeypatch.setenv("METADATA_QUERY_MAX_SIZE", "123")
        monkeypatch.delenv("INVENTORY_DB_PATH", raising=False)
        s = Settings()
        assert s.db_path == tmp_path / "inventory.db"
        assert s.query_config() == QueryConfig(metadata_query_max_size=123)

    def test_explicit_db_path(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("INVENTORY_DB_PATH", str(tmp_path / "x.db"))
        assert Settings().db_path == tmp_path / "x.db"

    def test_schema_is_bundled(self) -> None:
        assert Settings().schema_path.is_file()


class TestResolveWindow:
    def test_explicit(self) -> None:
        assert resolve_window(1, 2) == (1, 2)

    def test_start_defaults_from_end(self) -> None:
        assert resolve_window(None, 1_000_000, minutes=1) == (940_000, 1_000_000)

    def test_end_defaults_to_now(self, monkeypatch) -> None:
        monkeypatch.setattr("inventory.timeutil.now_millis", lambda: 5_000_000)
        assert resolve_window() == (5_000_000 - 15 * 60 * 1000, 5_000_000)

    def test_inverted(self) -> None:
        with pytest.raises(ValueError, match="is after end"):
            resolve_window(10, 5)


class TestSetupLogging:
    def test_accepts_names_and_garbage(self, monkeypatch) -> None:
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw["level"]))
        setup_logging("debug")
        setup_logging("not-a-level")
        setup_logging(logging.INFO)
        assert calls == [logging.DEBUG, logging.WARNING, logging.INFO]
