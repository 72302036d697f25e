"""Per-document rolling cache shared by the decoder and the writer.

The cache never travels on the wire. Both sides rebuild it by registering
eligible strings in the order they are visited, so token ``^0`` always names
the first eligible string of the document, ``^1`` the second, and so on.
"""

from __future__ import annotations

import logging
from typing import Final

from transit_core.constants import ESC, MAP_AS_ARRAY, SUB
from transit_core.errors import CacheProtocolError

_LOGGER = logging.getLogger(__name__)

CACHE_CODE_DIGITS: Final[int] = 44
BASE_CHAR_INDEX: Final[int] = 48
CACHE_SIZE: Final[int] = CACHE_CODE_DIGITS * CACHE_CODE_DIGITS
MIN_SIZE_CACHEABLE: Final[int] = 4

_CACHEABLE_PREFIXES: Final[tuple[str, ...]] = (f"{ESC}#", f"{ESC}$", f"{ESC}:")


def index_to_token(index: int) -> str:
    """Return the cache token assigned to the ``index``-th registration.

    Parameters
    ----------
    index
        Zero-based registration index, below ``CACHE_SIZE``.

    Returns
    -------
    str
        One or two digit token prefixed with ``^``.
    """
    hi, lo = divmod(index, CACHE_CODE_DIGITS)
    if hi == 0:
        return f"{SUB}{chr(lo + BASE_CHAR_INDEX)}"
    return f"{SUB}{chr(hi + BASE_CHAR_INDEX)}{chr(lo + BASE_CHAR_INDEX)}"


class RollingCache:
    """Order-dependent token table for a single document."""

    def __init__(self) -> None:
        self._token_to_value: dict[str, str] = {}
        self._value_to_token: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._token_to_value)

    def __contains__(self, value: object) -> bool:
        return value in self._value_to_token

    @staticmethod
    def eligible(value: str, as_map_key: bool = False) -> bool:
        """Return True when ``value`` takes part in caching.

        Map keys of four or more characters are always eligible; other
        strings only when they carry a tag, symbol or keyword prefix.
        """
        if len(value) < MIN_SIZE_CACHEABLE:
            return False
        return as_map_key or value.startswith(_CACHEABLE_PREFIXES)

    @staticmethod
    def is_token(value: str) -> bool:
        """Return True when ``value`` has the shape of a cache token."""
        return value[:1] == SUB and value != MAP_AS_ARRAY

    def register(self, value: str, as_map_key: bool = False) -> str:
        """Assign the next token to ``value`` unless it already has one.

        Parameters
        ----------
        value
            Eligible string seen for the first time.
        as_map_key
            Whether the string was visited as a map key.

        Returns
        -------
        str
            Token naming ``value``.
        """
        _ = as_map_key
        existing = self._value_to_token.get(value)
        if existing is not None:
            return existing
        if len(self._token_to_value) >= CACHE_SIZE:
            _LOGGER.debug("Rolling cache reached %d entries; resetting.", CACHE_SIZE)
            self.clear()
        token = index_to_token(len(self._token_to_value))
        self._token_to_value[token] = value
        self._value_to_token[value] = token
        return token

    def resolve(self, token: str, as_map_key: bool = False) -> str:
        """Return the string registered under ``token``.

        Raises
        ------
        CacheProtocolError
            Raised when no string was registered under ``token``.
        """
        _ = as_map_key
        value = self._token_to_value.get(token)
        if value is None:
            msg = (
                f"Cache token {token!r} was never registered "
                f"({len(self._token_to_value)} entries known)."
            )
            raise CacheProtocolError(msg)
        return value

    def encode(self, value: str, as_map_key: bool = False) -> str:
        """Return the wire form of ``value`` from the writer's side.

        Known eligible strings are replaced by their token. An eligible
        string seen for the first time is registered and emitted verbatim.

        Returns
        -------
        str
            Token or the original string.
        """
        if not self.eligible(value, as_map_key):
            return value
        existing = self._value_to_token.get(value)
        if existing is not None:
            return existing
        self.register(value, as_map_key)
        return value

    def clear(self) -> None:
        """Drop every registered entry."""
        self._token_to_value.clear()
        self._value_to_token.clear()

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the token table in registration order."""
        return dict(self._token_to_value)


__all__ = [
    "CACHE_CODE_DIGITS",
    "CACHE_SIZE",
    "MIN_SIZE_CACHEABLE",
    "RollingCache",
    "index_to_token",
]
