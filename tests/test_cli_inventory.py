"""Tests for the 'inventory' and 'db' CLI command groups."""

import pytest
from typer.testing import CliRunner

from cli.commands.inventory import inventory_app
from cli.main import app
from inventory.db import get_connection
from inventory.db.models import NodeType

runner = CliRunner()

WINDOW = ["--start", "1000", "--end", "2000"]


@pytest.fixture
def cli_db(db_path, monkeypatch):
    """Point the CLI settings at the per-test database."""
    monkeypatch.setattr("inventory.config.settings.db_file", str(db_path))
    return db_path


def test_db_init(tmp_path, monkeypatch):
    db_path = tmp_path / "fresh" / "inventory.db"
    monkeypatch.setattr("inventory.config.settings.db_file", str(db_path))
    result = runner.invoke(app, ["db", "init"])
    assert result.exit_code == 0
    assert "Database ready" in result.stdout

    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'service_inventory'"
    ).fetchone()
    assert row is not None
    conn.close()


def test_services(cli_db, seed):
    seed.service(1, "orders")
    seed.service(2, "payments")
    seed.service(3, "10.0.0.1:80", is_address=True)
    result = runner.invoke(inventory_app, ["services", *WINDOW])
    assert result.exit_code == 0
    assert "orders" in result.stdout
    assert "payments" in result.stdout
    assert "10.0.0.1:80" not in result.stdout


def test_services_keyword(cli_db, seed):
    seed.service(1, "orders")
    seed.service(2, "payments")
    result = runner.invoke(inventory_app, ["services", "-k", "pay", *WINDOW])
    assert result.exit_code == 0
    assert "payments" in result.stdout
    assert "orders" not in result.stdout


def test_services_empty(cli_db):
    result = runner.invoke(inventory_app, ["services", *WINDOW])
    assert result.exit_code == 0
    assert "No services found." in result.stdout


def test_browsers(cli_db, seed):
    seed.service(1, "web-ui", node_type=NodeType.BROWSER)
    result = runner.invoke(inventory_app, ["browsers", *WINDOW])
    assert result.exit_code == 0
    assert "web-ui" in result.stdout


def test_find(cli_db, seed):
    seed.service(7, "orders")
    result = runner.invoke(inventory_app, ["find", "orders"])
    assert result.exit_code == 0
    assert "7  orders" in result.stdout


def test_find_missing(cli_db):
    result = runner.invoke(inventory_app, ["find", "ghost"])
    assert result.exit_code == 1
    assert "Service not found" in result.stdout


def test_instances(cli_db, seed):
    seed.instance(4, 1, "orders-1", properties={"language": "go", "host_name": "node-a"})
    result = runner.invoke(inventory_app, ["instances", "1", *WINDOW])
    assert result.exit_code == 0
    assert "orders-1" in result.stdout
    assert "[go]" in result.stdout
    assert "host_name = node-a" in result.stdout


def test_endpoints_deduplicated(cli_db, seed):
    for _ in range(3):
        seed.endpoint(1, "/orders")
    seed.endpoint(1, "/users")
    result = runner.invoke(inventory_app, ["endpoints", "1", "--limit", "5"])
    assert result.exit_code == 0
    assert result.stdout.count("/orders") == 1
    assert "/users" in result.stdout


def test_databases(cli_db, seed):
    seed.service(1, "pg", node_type=NodeType.DATABASE, properties={"database": "postgresql"})
    result = runner.invoke(inventory_app, ["databases"])
    assert result.exit_code == 0
    assert "[postgresql]" in result.stdout


def test_brief(cli_db, seed):
    seed.service(1, "orders")
    seed.service(2, "kafka", node_type=NodeType.MQ)
    result = runner.invoke(inventory_app, ["brief", *WINDOW])
    assert result.exit_code == 0
    assert "Services : 1" in result.stdout
    assert "MQ       : 1" in result.stdout


def test_inverted_window(cli_db):
    result = runner.invoke(inventory_app, ["services", "--start", "5", "--end", "1"])
    assert result.exit_code == 1
    assert "is after end" in result.stdout


def test_storage_error_exits_1(tmp_path, monkeypatch):
    # Database file without schema.
    monkeypatch.setattr("inventory.config.settings.db_file", str(tmp_path / "bare.db"))
    result = runner.invoke(inventory_app, ["databases"])
    assert result.exit_code == 1
    assert "Storage error" in result.stdout
