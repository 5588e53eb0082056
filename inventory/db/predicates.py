"""Composable SQL predicates with bound parameters.

A :class:`Predicate` pairs a SQL fragment with the positional parameters its
``?`` placeholders consume.  Predicates are combined with :func:`and_` /
:func:`or_` (or the ``&`` / ``|`` operators), which parenthesise every child
so precedence never depends on the caller.  Values are *always* bound; column
and table names come from the constants below, never from user input.

Example::

    where = time_range_overlap(start, end) & eq(IS_ADDRESS, 0)
    sql, params = select(SERVICE_INVENTORY, where, limit=100)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

# ---------------------------------------------------------------------------
# Table / column names
# ---------------------------------------------------------------------------

SERVICE_INVENTORY = "service_inventory"
SERVICE_INSTANCE_INVENTORY = "service_instance_inventory"
ENDPOINT_TRAFFIC = "endpoint_traffic"

SEQUENCE = "sequence"
NAME = "name"
NODE_TYPE = "node_type"
IS_ADDRESS = "is_address"
REGISTER_TIME = "register_time"
HEARTBEAT_TIME = "heartbeat_time"
PROPERTIES = "properties"
SERVICE_ID = "service_id"
INSTANCE_UUID = "instance_uuid"
DETECT_POINT = "detect_point"
TIME_BUCKET = "time_bucket"

_LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class Predicate:
    sql: str
    params: tuple[Any, ...] = ()

    def __and__(self, other: "Predicate") -> "Predicate":
        return and_(self, other)

    def __or__(self, other: "Predicate") -> "Predicate":
        return or_(self, other)


def _combine(operator: str, predicates: tuple[Predicate, ...]) -> Predicate:
    if not predicates:
        raise ValueError(f"{operator} needs at least one predicate")
    if len(predicates) == 1:
        return predicates[0]
    sql = f" {operator} ".join(f"({p.sql})" for p in predicates)
    params: tuple[Any, ...] = ()
    for p in predicates:
        params += p.params
    return Predicate(sql, params)


def and_(*predicates: Predicate) -> Predicate:
    return _combine("AND", predicates)


def or_(*predicates: Predicate) -> Predicate:
    return _combine("OR", predicates)


def eq(column: str, value: Any) -> Predicate:
    return Predicate(f"{column} = ?", (value,))


def ge(column: str, value: Any) -> Predicate:
    return Predicate(f"{column} >= ?", (value,))


def le(column: str, value: Any) -> Predicate:
    return Predicate(f"{column} <= ?", (value,))


def contains(column: str, keyword: str) -> Predicate:
    """Substring match; ``%`` and ``_`` in *keyword* match literally."""
    escaped = (
        keyword.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )
    return Predicate(f"{column} LIKE ? ESCAPE '{_LIKE_ESCAPE}'", (f"%{escaped}%",))


def time_range_overlap(start: int, end: int) -> Predicate:
    """Rows whose ``[register_time, heartbeat_time]`` interval meets ``[start, end]``.

    The first disjunct compares both columns against *end*; this loose bound
    is what existing callers rely on, so it is kept as is.  Parameters are
    bound in the order ``(end, end, end, start)``.
    """
    return or_(
        and_(ge(HEARTBEAT_TIME, end), le(REGISTER_TIME, end)),
        and_(le(REGISTER_TIME, end), ge(HEARTBEAT_TIME, start)),
    )


# ---------------------------------------------------------------------------
# Statement assembly
# ---------------------------------------------------------------------------

def select(
    table: str,
    where: Predicate,
    limit: Optional[int] = None,
    columns: str = "*",
) -> tuple[str, tuple[Any, ...]]:
    """Build ``SELECT columns FROM table WHERE … [LIMIT ?]``."""
    sql = f"SELECT {columns} FROM {table} WHERE {where.sql}"  # noqa: S608
    params = where.params
    if limit is not None:
        sql += " LIMIT ?"
        params += (limit,)
    return sql, params


def count(table: str, where: Predicate) -> tuple[str, tuple[Any, ...]]:
    """Build ``SELECT COUNT(*) AS num FROM table WHERE …``."""
    return f"SELECT COUNT(*) AS num FROM {table} WHERE {where.sql}", where.params  # noqa: S608
