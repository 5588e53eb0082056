"""Decoding of the ``properties`` JSON blob stored on inventory rows.

Instance blobs carry a handful of well-known keys reported by agents next to
arbitrary user-supplied ones.  Each well-known key in :class:`KnownKey` has a
handler in :data:`_HANDLERS`:

``language``
    parsed into the typed :attr:`ServiceInstance.language` field.
``os_name`` / ``host_name`` / ``process_no``
    appended as an :class:`Attribute` under the same key.
``ipv4s``
    the value is itself a JSON array of addresses; one attribute is appended
    per address, all named ``ipv4s``.

Any other key is appended verbatim.  Attribute order follows the blob.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Callable, Optional

from inventory.db.models import UNKNOWN_DATABASE_TYPE, Attribute, Language

DATABASE_KEY = "database"


class PropertyDecodeError(ValueError):
    """The properties blob (or one of its values) is not in the expected shape."""


class KnownKey(str, Enum):
    LANGUAGE = "language"
    OS_NAME = "os_name"
    HOST_NAME = "host_name"
    PROCESS_NO = "process_no"
    IPV4S = "ipv4s"


# ---------------------------------------------------------------------------
# Low-level decoding
# ---------------------------------------------------------------------------

def _as_string(key: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise PropertyDecodeError(f"Property {key!r} is not a scalar: {value!r}")


def decode_properties(blob: Optional[str]) -> list[tuple[str, str]]:
    """Decode a JSON object blob into ordered ``(key, value)`` string pairs.

    ``None`` or an empty string yields an empty list.

    Raises:
        PropertyDecodeError: If the blob is not a JSON object or holds a
            nested (non-scalar) value.
    """
    if not blob:
        return []
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as exc:
        raise PropertyDecodeError(f"Malformed properties blob: {exc}") from exc
    if not isinstance(data, dict):
        raise PropertyDecodeError(f"Properties blob is not an object: {blob!r}")
    return [(key, _as_string(key, value)) for key, value in data.items()]


def decode_string_list(value: str) -> list[str]:
    """Decode a serialised JSON array of strings (e.g. the ``ipv4s`` value)."""
    try:
        items = json.loads(value)
    except json.JSONDecodeError as exc:
        raise PropertyDecodeError(f"Malformed string list: {exc}") from exc
    if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
        raise PropertyDecodeError(f"Expected a list of strings: {value!r}")
    return items


# ---------------------------------------------------------------------------
# Instance properties
# ---------------------------------------------------------------------------

class _InstanceBuilder:
    """Accumulates the typed fields and attributes of one instance."""

    def __init__(self) -> None:
        self.language = Language.UNKNOWN
        self.attributes: list[Attribute] = []


def _set_language(builder: _InstanceBuilder, key: str, value: str) -> None:
    builder.language = Language.parse(value)


def _append_scalar(builder: _InstanceBuilder, key: str, value: str) -> None:
    builder.attributes.append(Attribute(key, value))


def _append_each(builder: _InstanceBuilder, key: str, value: str) -> None:
    for item in decode_string_list(value):
        builder.attributes.append(Attribute(key, item))


_Handler = Callable[[_InstanceBuilder, str, str], None]

_HANDLERS: dict[KnownKey, _Handler] = {
    KnownKey.LANGUAGE: _set_language,
    KnownKey.OS_NAME: _append_scalar,
    KnownKey.HOST_NAME: _append_scalar,
    KnownKey.PROCESS_NO: _append_scalar,
    KnownKey.IPV4S: _append_each,
}


def decode_instance_properties(
    blob: Optional[str],
) -> tuple[Language, tuple[Attribute, ...]]:
    """Split an instance blob into its language and ordered attributes.

    Raises:
        PropertyDecodeError: On a malformed blob or ``ipv4s`` value.
    """
    builder = _InstanceBuilder()
    for key, value in decode_properties(blob):
        try:
            handler = _HANDLERS[KnownKey(key)]
        except ValueError:
            handler = _append_scalar
        handler(builder, key, value)
    return builder.language, tuple(builder.attributes)


# ---------------------------------------------------------------------------
# Database properties
# ---------------------------------------------------------------------------

def database_type(blob: Optional[str]) -> str:
    """Return the ``database`` property, ``"UNKNOWN"`` when it is missing.

    Raises:
        PropertyDecodeError: On a malformed blob.
    """
    for key, value in decode_properties(blob):
        if key == DATABASE_KEY:
            return value
    return UNKNOWN_DATABASE_TYPE
