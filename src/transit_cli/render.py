"""Convert decoded Transit values into JSON-friendly builtins for display."""

from __future__ import annotations

import base64
import datetime as dt
import uuid
from collections.abc import Mapping
from decimal import Decimal

import msgspec

from transit_core.values import URI, Char, Keyword, Symbol, TransitList, TypedArray


def to_plain(value: object) -> object:
    """Return a builtin representation of a decoded value.

    Keywords render as ``:name``; sets render as arrays in a stable order;
    non-string map keys render through ``str``.

    Returns
    -------
    object
        JSON-friendly representation.
    """
    match value:
        case Keyword() | Symbol() | Char() | URI():
            return str(value)
        case TransitList() | TypedArray() | list() | tuple():
            return [to_plain(item) for item in value]
        case frozenset() | set():
            return sorted((to_plain(item) for item in value), key=repr)
        case Mapping():
            return {_plain_key(key): to_plain(item) for key, item in value.items()}
        case Decimal() | uuid.UUID():
            return str(value)
        case dt.datetime():
            return value.isoformat()
        case bytes():
            return base64.b64encode(value).decode("ascii")
        case _:
            return value


def _plain_key(key: object) -> str:
    plain = to_plain(key)
    if isinstance(plain, str):
        return plain
    return msgspec.json.encode(plain).decode("utf-8")


def dumps_plain(value: object, *, pretty: bool = False) -> str:
    """Serialize a decoded value for terminal output.

    Returns
    -------
    str
        JSON text.
    """
    raw = msgspec.json.encode(to_plain(value))
    if pretty:
        raw = msgspec.json.format(raw, indent=2)
    return raw.decode("utf-8")


__all__ = ["dumps_plain", "to_plain"]
