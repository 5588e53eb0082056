"""Query window helpers (epoch milliseconds)."""

from __future__ import annotations

from time import time
from typing import Optional

DEFAULT_WINDOW_MINUTES = 15


def now_millis() -> int:
    return int(time() * 1000)


def resolve_window(
    start: Optional[int] = None,
    end: Optional[int] = None,
    minutes: int = DEFAULT_WINDOW_MINUTES,
) -> tuple[int, int]:
    """Fill in a missing bound: *end* defaults to now, *start* to ``end - minutes``.

    Raises:
        ValueError: If the resulting window is inverted.
    """
    if end is None:
        end = now_millis()
    if start is None:
        start = end - minutes * 60 * 1000
    if start > end:
        raise ValueError(f"start ({start}) is after end ({end})")
    return start, end
