"""Immutable value objects for Transit kinds without a builtin Python type."""

from __future__ import annotations

import re
from collections.abc import Iterator
from enum import StrEnum
from functools import lru_cache
from typing import Final
from urllib.parse import SplitResult, urlsplit

import msgspec

from transit_core.errors import FormatError

_URI_CHARS_RE = re.compile(r"^[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]*$")
_BAD_PERCENT_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")

INTERN_MAXSIZE: Final[int] = 4096


class ValueBase(
    msgspec.Struct,
    frozen=True,
    repr_omit_defaults=True,
):
    """Base struct for immutable Transit values."""


class Keyword(ValueBase):
    """Symbolic keyword identity (``~:name`` on the wire)."""

    name: str

    def __str__(self) -> str:
        return f":{self.name}"


class Symbol(ValueBase):
    """Symbol identity, distinct from keywords (``~$name`` on the wire)."""

    name: str

    def __str__(self) -> str:
        return self.name


class Char(ValueBase):
    """Single character value."""

    value: str

    def __str__(self) -> str:
        return self.value


class URI(ValueBase):
    """Syntactically validated URI reference."""

    value: str

    @classmethod
    def parse(cls, text: str) -> URI:
        """Validate a URI reference and wrap it.

        Parameters
        ----------
        text
            URI text from the wire.

        Returns
        -------
        URI
            Wrapped URI reference.

        Raises
        ------
        FormatError
            Raised when the text is not a valid RFC 3986 reference.
        """
        if not _URI_CHARS_RE.match(text) or _BAD_PERCENT_RE.search(text):
            msg = f"Invalid URI: {text!r}."
            raise FormatError(msg)
        try:
            parts = urlsplit(text)
        except ValueError as exc:
            msg = f"Invalid URI: {text!r}."
            raise FormatError(msg) from exc
        if parts.scheme and not _SCHEME_RE.match(parts.scheme):
            msg = f"Invalid URI scheme: {parts.scheme!r}."
            raise FormatError(msg)
        return cls(text)

    @property
    def parts(self) -> SplitResult:
        """Return the split URI components."""
        return urlsplit(self.value)

    def __str__(self) -> str:
        return self.value


class TransitList(ValueBase):
    """Explicit ordered list, distinct from a plain array."""

    items: tuple[object, ...] = ()

    def __iter__(self) -> Iterator[object]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> object:
        return self.items[index]


class TypedArrayKind(StrEnum):
    """Element kinds carried by typed numeric arrays."""

    INTS = "ints"
    LONGS = "longs"
    FLOATS = "floats"
    DOUBLES = "doubles"
    BOOLS = "bools"


class TypedArray(ValueBase):
    """Homogeneous array tagged with its element kind."""

    kind: TypedArrayKind
    items: tuple[object, ...] = ()

    def __iter__(self) -> Iterator[object]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> object:
        return self.items[index]


@lru_cache(maxsize=INTERN_MAXSIZE)
def keyword(name: str) -> Keyword:
    """Return the interned keyword for ``name``.

    Returns
    -------
    Keyword
        The same instance for recent calls with an equal name.
    """
    return Keyword(name)


@lru_cache(maxsize=INTERN_MAXSIZE)
def symbol(name: str) -> Symbol:
    """Return the interned symbol for ``name``.

    Returns
    -------
    Symbol
        The same instance for recent calls with an equal name.
    """
    return Symbol(name)


__all__ = [
    "INTERN_MAXSIZE",
    "URI",
    "Char",
    "Keyword",
    "Symbol",
    "TransitList",
    "TypedArray",
    "TypedArrayKind",
    "ValueBase",
    "keyword",
    "symbol",
]
