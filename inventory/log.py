"""Logging setup shared by the CLI and the HTTP app."""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str | int = "WARNING") -> None:
    """Configure the root logger once.

    ``level`` accepts a level name (``"debug"``, ``"INFO"`` …) or a numeric
    level.  Unknown names fall back to ``WARNING``.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format=_FORMAT)
