"""Inventory CLI: entry-point for all query operations.

Usage:
    python cli/main.py --help

Command groups:
    db         → schema bootstrap
    inventory  → service / instance / endpoint / database lookups
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from inventory.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from typing import Optional

import typer

from inventory.config import settings
from inventory.db import init_db, scoped_connection
from inventory.log import setup_logging

from cli.commands.inventory import inventory_app

app = typer.Typer(
    name="inventory",
    help="Inventory metadata query CLI.",
    no_args_is_help=True,
)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Override INVENTORY_LOG_LEVEL (debug, info, …)."
    ),
) -> None:
    setup_logging(log_level or settings.log_level)


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    with scoped_connection() as conn:
        init_db(conn)
    typer.echo(f"[db init] Database ready at {settings.db_path}")


app.add_typer(inventory_app, name="inventory")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
