"""Symmetric encoder for the built-in Transit kinds.

The writer marshals Python values into a generic tree and feeds every emitted
string through a ``RollingCache`` in the same order the decoder visits them,
so the tokens it emits resolve to the same strings on the reading side.
"""

from __future__ import annotations

import base64
import datetime as dt
import math
import uuid
from collections.abc import Iterable, Mapping
from decimal import Decimal

import msgspec

from transit_core.constants import ESC, QUOTE_TAG, SUB, TAG, WireProtocol, check_protocol
from transit_core.errors import UnsupportedValueError
from transit_core.rolling_cache import RollingCache
from transit_core.values import URI, Char, Keyword, Symbol, TransitList, TypedArray

_JSON_ENCODER = msgspec.json.Encoder()
_MSGPACK_ENCODER = msgspec.msgpack.Encoder()

_COMPOSITE_TYPES = (list, tuple, Mapping, set, frozenset, TransitList, TypedArray)


def _escape(value: str) -> str:
    if value.startswith((ESC, SUB)):
        return f"{ESC}{value}"
    return value


def _float_text(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return repr(value)


def _instant_text(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.UTC)
    return value.astimezone(dt.UTC).isoformat().replace("+00:00", "Z")


class Writer:
    """Write Python values as Transit JSON or MessagePack documents."""

    def __init__(self, protocol: WireProtocol = "json") -> None:
        self._protocol = check_protocol(protocol)

    @property
    def protocol(self) -> WireProtocol:
        """Return the wire protocol this writer emits."""
        return self._protocol

    def write(self, value: object) -> bytes:
        """Encode ``value`` as one document.

        Returns
        -------
        bytes
            Encoded document.
        """
        tree = self.marshal(value)
        if self._protocol == "json":
            return _JSON_ENCODER.encode(tree)
        return _MSGPACK_ENCODER.encode(tree)

    def write_lines(self, values: Iterable[object]) -> bytes:
        """Encode values as JSON Lines, one document and one cache per line.

        Returns
        -------
        bytes
            JSON Lines payload.

        Raises
        ------
        ValueError
            Raised when the writer is not configured for JSON.
        """
        if self._protocol != "json":
            msg = "write_lines requires the json protocol."
            raise ValueError(msg)
        return _JSON_ENCODER.encode_lines([self.marshal(value) for value in values])

    def marshal(self, value: object, cache: RollingCache | None = None) -> object:
        """Convert ``value`` into the generic tree sent on the wire.

        Scalars at the document root are wrapped in the quote tag.

        Parameters
        ----------
        value
            Value to marshal.
        cache
            Cache to encode strings against; a fresh one when omitted.

        Returns
        -------
        object
            Generic tree of strings, lists, dicts and scalars.
        """
        if cache is None:
            cache = RollingCache()
        if isinstance(value, _COMPOSITE_TYPES):
            return self._marshal(value, cache, False)
        key = cache.encode(QUOTE_TAG, True)
        return {key: self._marshal(value, cache, False)}

    def _marshal(self, value: object, cache: RollingCache, as_map_key: bool) -> object:
        text = self._scalar_text(value)
        if text is not None:
            return cache.encode(text, as_map_key)
        if value is None or isinstance(value, (bool, int)):
            return value
        if isinstance(value, float):
            if as_map_key or not math.isfinite(value):
                return cache.encode(f"{ESC}d{_float_text(value)}", as_map_key)
            return value
        if isinstance(value, (list, tuple)):
            return [self._marshal(item, cache, as_map_key) for item in value]
        if isinstance(value, Mapping):
            return self._marshal_map(value, cache)
        if isinstance(value, (set, frozenset)):
            return self._tagged(f"{TAG}set", value, cache, as_map_key)
        if isinstance(value, TransitList):
            return self._tagged(f"{TAG}list", value.items, cache, as_map_key)
        if isinstance(value, TypedArray):
            return self._tagged(f"{TAG}{value.kind}", value.items, cache, as_map_key)
        msg = f"No Transit representation for {type(value).__name__}."
        raise UnsupportedValueError(msg)

    @staticmethod
    def _scalar_text(value: object) -> str | None:
        match value:
            case str():
                return _escape(value)
            case Keyword(name=name):
                return f"{ESC}:{name}"
            case Symbol(name=name):
                return f"{ESC}${name}"
            case Char(value=char):
                return f"{ESC}c{char}"
            case URI(value=text):
                return f"{ESC}r{text}"
            case Decimal():
                return f"{ESC}f{value}"
            case uuid.UUID():
                return f"{ESC}u{value}"
            case dt.datetime():
                return f"{ESC}t{_instant_text(value)}"
            case bytes() | bytearray() | memoryview():
                return f"{ESC}b{base64.b64encode(bytes(value)).decode('ascii')}"
            case _:
                return None

    def _marshal_map(self, value: Mapping[object, object], cache: RollingCache) -> object:
        result: dict[object, object] = {}
        for key, item in value.items():
            if key is None or isinstance(key, (bool, int)):
                msg = f"Map keys of type {type(key).__name__} are not supported."
                raise UnsupportedValueError(msg)
            wire_key = self._marshal(key, cache, True)
            if isinstance(wire_key, list) and self._protocol == "msgpack":
                wire_key = _freeze(wire_key)
            elif not isinstance(wire_key, str):
                msg = f"Map key {key!r} has no {self._protocol} key representation."
                raise UnsupportedValueError(msg)
            result[wire_key] = self._marshal(item, cache, False)
        return result

    def _tagged(
        self,
        tag: str,
        items: Iterable[object],
        cache: RollingCache,
        as_map_key: bool,
    ) -> object:
        if as_map_key:
            msg = f"Tagged values ({tag!r}) cannot be used as map keys."
            raise UnsupportedValueError(msg)
        key = cache.encode(tag, True)
        return {key: [self._marshal(item, cache, as_map_key) for item in items]}


def _freeze(value: object) -> object:
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


__all__ = ["Writer"]
