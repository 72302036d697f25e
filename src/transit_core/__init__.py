"""Transit decoding with a rolling string cache and extensible tag table."""

from __future__ import annotations

from transit_core.config import DecoderSettings
from transit_core.constants import WireProtocol
from transit_core.decoder import DECODER_ARITY_MESSAGE, Decoder
from transit_core.errors import (
    CacheProtocolError,
    DecodeDepthError,
    ErrorKind,
    ExtensionArityError,
    FormatError,
    TransitError,
    UnsupportedValueError,
    WireFormatError,
)
from transit_core.reader import Reader
from transit_core.rolling_cache import RollingCache
from transit_core.values import (
    URI,
    Char,
    Keyword,
    Symbol,
    TransitList,
    TypedArray,
    TypedArrayKind,
    keyword,
    symbol,
)
from transit_core.writer import Writer


def loads(data: bytes | str, *, protocol: WireProtocol = "json") -> object:
    """Decode a single Transit document.

    Parameters
    ----------
    data
        Encoded document.
    protocol
        Wire protocol of ``data``.

    Returns
    -------
    object
        Decoded value.
    """
    return Reader(protocol).read(data)


def dumps(value: object, *, protocol: WireProtocol = "json") -> bytes:
    """Encode a value as a single Transit document.

    Parameters
    ----------
    value
        Value to encode.
    protocol
        Wire protocol to emit.

    Returns
    -------
    bytes
        Encoded document.
    """
    return Writer(protocol).write(value)


__all__ = [
    "DECODER_ARITY_MESSAGE",
    "URI",
    "CacheProtocolError",
    "Char",
    "DecodeDepthError",
    "Decoder",
    "DecoderSettings",
    "ErrorKind",
    "ExtensionArityError",
    "FormatError",
    "Keyword",
    "Reader",
    "RollingCache",
    "Symbol",
    "TransitError",
    "TransitList",
    "TypedArray",
    "TypedArrayKind",
    "UnsupportedValueError",
    "WireFormatError",
    "WireProtocol",
    "Writer",
    "dumps",
    "keyword",
    "loads",
    "symbol",
]
