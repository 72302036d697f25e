"""Recursive Transit decoder and its tag table.

The decoder turns a generic tree (strings, sequences, mappings and primitive
scalars) into Transit values. Strings pass through the rolling cache before
they are parsed, and single-entry mappings whose key names a known tag are
replaced by the value the tag's decode function builds from the payload.
"""

from __future__ import annotations

import base64
import binascii
import datetime as dt
import inspect
import logging
import re
import uuid
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from decimal import Decimal, InvalidOperation
from functools import partial
from types import MappingProxyType
from typing import Any, Final, TypeAlias, cast

from transit_core.config import DecoderSettings
from transit_core.constants import ESC, QUOTE_TAG, SUB, TAG
from transit_core.errors import DecodeDepthError, ExtensionArityError, FormatError
from transit_core.rolling_cache import RollingCache
from transit_core.values import URI, Char, TransitList, TypedArray, TypedArrayKind, keyword, symbol

_LOGGER = logging.getLogger(__name__)

DecodeFn: TypeAlias = Callable[[Any, RollingCache, bool], object]
ExtensionFn: TypeAlias = Callable[[Any], object]

DECODER_ARITY_MESSAGE: Final[str] = "Decoder functions require arity 1 - the payload to decode"

_IS_ESCAPED: Final[re.Pattern[str]] = re.compile(
    f"^{re.escape(ESC)}({re.escape(SUB)}|{re.escape(ESC)})"
)
_DEPTH: ContextVar[int] = ContextVar("transit_core.decode_depth", default=0)


def _accepts_single_payload(fn: object) -> bool:
    if not callable(fn):
        return False
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return False
    try:
        signature.bind(None)
    except TypeError:
        return False
    try:
        signature.bind(None, None)
    except TypeError:
        return True
    return False


def _hashable(value: object) -> object:
    """Freeze a decoded value so it can serve as a map key or set element.

    Returns
    -------
    object
        The value, with lists converted to tuples at any depth.

    Raises
    ------
    FormatError
        Raised when the value cannot be made hashable.
    """
    if isinstance(value, list):
        return tuple(_hashable(item) for item in value)
    if isinstance(value, TransitList):
        return TransitList(tuple(_hashable(item) for item in value.items))
    if isinstance(value, TypedArray):
        return TypedArray(value.kind, tuple(_hashable(item) for item in value.items))
    if isinstance(value, Mapping):
        msg = "Maps cannot be used as map keys or set elements."
        raise FormatError(msg)
    try:
        hash(value)
    except TypeError as exc:
        msg = f"Unhashable value {type(value).__name__} used as a map key or set element."
        raise FormatError(msg) from exc
    return value


class Decoder:
    """Decode generic nodes into Transit values."""

    def __init__(
        self,
        *,
        decoders: Mapping[str, DecodeFn] | None = None,
        settings: DecoderSettings | None = None,
    ) -> None:
        self._settings = settings or DecoderSettings.from_env()
        self._decoders: dict[str, DecodeFn] = (
            dict(decoders) if decoders is not None else self.default_decoders()
        )

    @property
    def settings(self) -> DecoderSettings:
        """Return the limits this decoder enforces."""
        return self._settings

    @property
    def decoders(self) -> Mapping[str, DecodeFn]:
        """Return a read-only view of the tag table."""
        return MappingProxyType(self._decoders)

    def default_decoders(self) -> dict[str, DecodeFn]:
        """Return the built-in tag table bound to this decoder.

        Returns
        -------
        dict[str, DecodeFn]
            Mapping from directive prefix or tag key to decode function.
        """
        return {
            f"{ESC}:": self.decode_keyword,
            f"{ESC}b": self.decode_byte_array,
            f"{ESC}d": self.decode_float,
            f"{ESC}f": self.decode_big_decimal,
            f"{ESC}c": self.decode_char,
            f"{ESC}$": self.decode_symbol,
            f"{ESC}t": self.decode_instant,
            f"{ESC}u": self.decode_uuid,
            f"{ESC}r": self.decode_uri,
            QUOTE_TAG: self.decode,
            f"{TAG}t": self.decode_instant,
            f"{TAG}set": self.decode_set,
            f"{TAG}list": self.decode_list,
            f"{TAG}ints": partial(self.decode_typed_array, TypedArrayKind.INTS),
            f"{TAG}longs": partial(self.decode_typed_array, TypedArrayKind.LONGS),
            f"{TAG}floats": partial(self.decode_typed_array, TypedArrayKind.FLOATS),
            f"{TAG}doubles": partial(self.decode_typed_array, TypedArrayKind.DOUBLES),
            f"{TAG}bools": partial(self.decode_typed_array, TypedArrayKind.BOOLS),
        }

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def decode(self, node: object, cache: RollingCache, as_map_key: bool = False) -> object:
        """Decode a generic node into a Transit value.

        Parameters
        ----------
        node
            String, sequence, mapping or primitive scalar.
        cache
            Rolling cache of the document being decoded.
        as_map_key
            Whether the node sits in map-key position.

        Returns
        -------
        object
            Fully decoded value.

        Raises
        ------
        DecodeDepthError
            Raised when nesting exceeds ``max_depth`` or the interpreter stack.
        """
        if _DEPTH.get():
            return self._decode_node(node, cache, as_map_key)
        try:
            return self._decode_node(node, cache, as_map_key)
        except DecodeDepthError:
            raise
        except RecursionError as exc:
            msg = "Document nesting exhausted the interpreter stack."
            raise DecodeDepthError(msg) from exc

    def _decode_node(self, node: object, cache: RollingCache, as_map_key: bool) -> object:
        if isinstance(node, (list, tuple)):
            with self._nested():
                return [self.decode(item, cache, as_map_key) for item in node]
        if isinstance(node, Mapping):
            with self._nested():
                return self._decode_mapping(node, cache, as_map_key)
        if isinstance(node, str):
            return self.decode_string(node, cache, as_map_key)
        return node

    @contextmanager
    def _nested(self) -> Iterator[None]:
        depth = _DEPTH.get() + 1
        if depth > self._settings.max_depth:
            msg = f"Document nesting exceeds max_depth={self._settings.max_depth}."
            raise DecodeDepthError(msg)
        token = _DEPTH.set(depth)
        try:
            yield
        finally:
            _DEPTH.reset(token)

    def _decode_mapping(
        self,
        node: Mapping[Any, Any],
        cache: RollingCache,
        as_map_key: bool,
    ) -> object:
        if len(node) == 1:
            ((raw_key, raw_value),) = node.items()
            key, decoder = self._encoded_hash_decoder(raw_key, cache)
            if decoder is not None:
                return decoder(raw_value, cache, as_map_key)
            if isinstance(key, str) and key.startswith(TAG):
                _LOGGER.debug("Unrecognized tag %r; decoding as a generic map.", key)
            return {_hashable(key): self.decode(raw_value, cache)}
        result: dict[object, object] = {}
        for raw_key, raw_value in node.items():
            key = self.decode(raw_key, cache, True)
            result[_hashable(key)] = self.decode(raw_value, cache)
        return result

    def _encoded_hash_decoder(
        self,
        raw_key: object,
        cache: RollingCache,
    ) -> tuple[object, DecodeFn | None]:
        if not isinstance(raw_key, str):
            return self.decode(raw_key, cache, True), None
        text = self._cached_text(raw_key, cache, True)
        key = self.parse_string(text, cache, True)
        # Escaped keys never name a tag; Writer escapes literal "~#..." keys this way.
        if isinstance(key, str) and key == text:
            return key, self._decoders.get(key)
        return key, None

    # -------------------------------------------------------------------------
    # Strings
    # -------------------------------------------------------------------------

    def decode_string(self, value: str, cache: RollingCache, as_map_key: bool) -> object:
        """Run a string through the rolling cache, then parse it.

        Returns
        -------
        object
            Parsed value of the literal or cached text.
        """
        return self.parse_string(self._cached_text(value, cache, as_map_key), cache, as_map_key)

    @staticmethod
    def _cached_text(value: str, cache: RollingCache, as_map_key: bool) -> str:
        # Eligibility first: an eligible string is never read as a token.
        if cache.eligible(value, as_map_key):
            cache.register(value, as_map_key)
            return value
        if cache.is_token(value):
            return cache.resolve(value, as_map_key)
        return value

    def parse_string(self, text: str, cache: RollingCache, as_map_key: bool) -> object:
        """Apply the escaping grammar to literal text.

        Returns
        -------
        object
            Unescaped string, directive result, or the text unchanged.
        """
        if _IS_ESCAPED.match(text):
            return text[1:]
        if len(text) >= 2:
            decoder = self._decoders.get(text[:2])
            if decoder is not None:
                return decoder(text[2:], cache, as_map_key)
        return text

    # -------------------------------------------------------------------------
    # Scalar directives
    # -------------------------------------------------------------------------

    def decode_keyword(self, payload: str, cache: RollingCache, as_map_key: bool) -> object:
        """Return the interned keyword named by the payload."""
        return keyword(payload)

    def decode_symbol(self, payload: str, cache: RollingCache, as_map_key: bool) -> object:
        """Return the interned symbol named by the payload."""
        return symbol(payload)

    def decode_byte_array(self, payload: str, cache: RollingCache, as_map_key: bool) -> object:
        """Decode base64 text, ignoring embedded line breaks.

        Raises
        ------
        FormatError
            Raised when the payload is not valid base64.
        """
        try:
            return base64.b64decode("".join(payload.split()), validate=True)
        except binascii.Error as exc:
            msg = f"Invalid base64 payload: {payload!r}."
            raise FormatError(msg) from exc

    def decode_float(self, payload: str, cache: RollingCache, as_map_key: bool) -> object:
        """Parse a float payload, including NaN and the infinities."""
        try:
            return float(payload)
        except ValueError as exc:
            msg = f"Invalid float payload: {payload!r}."
            raise FormatError(msg) from exc

    def decode_big_decimal(self, payload: str, cache: RollingCache, as_map_key: bool) -> object:
        """Parse an arbitrary-precision decimal payload."""
        try:
            return Decimal(payload)
        except InvalidOperation as exc:
            msg = f"Invalid decimal payload: {payload!r}."
            raise FormatError(msg) from exc

    def decode_char(self, payload: str, cache: RollingCache, as_map_key: bool) -> object:
        """Return the single character carried by the payload."""
        if len(payload) != 1:
            msg = f"Char payload must be exactly one character, got {payload!r}."
            raise FormatError(msg)
        return Char(payload)

    def decode_instant(self, payload: object, cache: RollingCache, as_map_key: bool) -> object:
        """Parse an ISO-8601 timestamp and normalize it to UTC.

        Naive timestamps are taken to be UTC already.

        Raises
        ------
        FormatError
            Raised when the payload is not an ISO-8601 string.
        """
        if not isinstance(payload, str):
            msg = f"Instant payload must be a string, got {type(payload).__name__}."
            raise FormatError(msg)
        try:
            parsed = dt.datetime.fromisoformat(payload)
        except ValueError as exc:
            msg = f"Invalid instant payload: {payload!r}."
            raise FormatError(msg) from exc
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=dt.UTC)
        return parsed.astimezone(dt.UTC)

    def decode_uuid(self, payload: str, cache: RollingCache, as_map_key: bool) -> object:
        """Parse a canonical UUID payload."""
        try:
            return uuid.UUID(payload)
        except ValueError as exc:
            msg = f"Invalid UUID payload: {payload!r}."
            raise FormatError(msg) from exc

    def decode_uri(self, payload: str, cache: RollingCache, as_map_key: bool) -> object:
        """Validate and wrap a URI payload."""
        return URI.parse(payload)

    # -------------------------------------------------------------------------
    # Structural tags
    # -------------------------------------------------------------------------

    def _decode_array_payload(
        self,
        tag: str,
        payload: object,
        cache: RollingCache,
        as_map_key: bool,
    ) -> list[object]:
        if not isinstance(payload, (list, tuple)):
            msg = f"Payload of {tag!r} must be an array, got {type(payload).__name__}."
            raise FormatError(msg)
        return cast("list[object]", self.decode(payload, cache, as_map_key))

    def decode_set(self, payload: object, cache: RollingCache, as_map_key: bool) -> object:
        """Decode an array payload into a frozenset of hashable elements."""
        items = self._decode_array_payload(f"{TAG}set", payload, cache, as_map_key)
        return frozenset(_hashable(item) for item in items)

    def decode_list(self, payload: object, cache: RollingCache, as_map_key: bool) -> object:
        """Decode an array payload into an explicit list."""
        items = self._decode_array_payload(f"{TAG}list", payload, cache, as_map_key)
        return TransitList(tuple(items))

    def decode_typed_array(
        self,
        kind: TypedArrayKind,
        payload: object,
        cache: RollingCache,
        as_map_key: bool,
    ) -> object:
        """Decode an array payload into a typed array of ``kind``."""
        items = self._decode_array_payload(f"{TAG}{kind}", payload, cache, as_map_key)
        return TypedArray(kind, tuple(items))

    # -------------------------------------------------------------------------
    # Extensions
    # -------------------------------------------------------------------------

    def register(self, tag: str, fn: ExtensionFn) -> None:
        """Register a decode function for an application-specific tag.

        Two-character keys such as ``"~x"`` are scalar directives and receive
        the text after the prefix. Any other key is a structural tag; a bare
        name like ``"point"`` is stored as ``"~#point"``. Structural
        functions receive their payload already decoded.

        Parameters
        ----------
        tag
            Directive prefix, tag key, or bare tag name.
        fn
            Function taking exactly one argument, the payload.

        Raises
        ------
        ExtensionArityError
            Raised when ``fn`` does not take exactly one argument.
        """
        if not _accepts_single_payload(fn):
            raise ExtensionArityError(DECODER_ARITY_MESSAGE)
        key = tag if tag.startswith(ESC) else f"{TAG}{tag}"
        if len(key) == 2:
            self._decoders[key] = partial(_call_scalar_extension, fn)
        else:
            self._decoders[key] = partial(self._call_structural_extension, fn)
        _LOGGER.debug("Registered Transit decoder for %r.", key)

    def _call_structural_extension(
        self,
        fn: ExtensionFn,
        payload: object,
        cache: RollingCache,
        as_map_key: bool,
    ) -> object:
        return fn(self.decode(payload, cache, as_map_key))


def _call_scalar_extension(
    fn: ExtensionFn,
    payload: object,
    cache: RollingCache,
    as_map_key: bool,
) -> object:
    _ = (cache, as_map_key)
    return fn(payload)


__all__ = ["DECODER_ARITY_MESSAGE", "DecodeFn", "Decoder", "ExtensionFn"]
