"""Error types raised while reading and writing Transit documents."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Categorize Transit errors by failure surface."""

    GENERIC = "generic"
    FORMAT = "format"
    CACHE = "cache"
    EXTENSION = "extension"
    DEPTH = "depth"
    WIRE = "wire"
    UNSUPPORTED = "unsupported"


class TransitError(Exception):
    """Base exception for Transit failures."""

    default_kind: ErrorKind = ErrorKind.GENERIC

    def __init__(self, message: str, *, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.kind = kind or self.default_kind


class FormatError(TransitError, ValueError):
    """Raised when a payload does not parse as its declared kind."""

    default_kind = ErrorKind.FORMAT


class CacheProtocolError(TransitError, LookupError):
    """Raised when a cache token has no registered entry."""

    default_kind = ErrorKind.CACHE


class ExtensionArityError(TransitError, TypeError):
    """Raised at registration time for decode functions of the wrong shape."""

    default_kind = ErrorKind.EXTENSION


class DecodeDepthError(TransitError, RecursionError):
    """Raised when document nesting exceeds the configured depth limit."""

    default_kind = ErrorKind.DEPTH


class WireFormatError(TransitError, ValueError):
    """Raised when raw bytes are not valid JSON or MessagePack."""

    default_kind = ErrorKind.WIRE


class UnsupportedValueError(TransitError, TypeError):
    """Raised when the writer has no representation for a value."""

    default_kind = ErrorKind.UNSUPPORTED


__all__ = [
    "CacheProtocolError",
    "DecodeDepthError",
    "ErrorKind",
    "ExtensionArityError",
    "FormatError",
    "TransitError",
    "UnsupportedValueError",
    "WireFormatError",
]
