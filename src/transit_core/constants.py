"""Wire-level marker strings shared by the decoder, cache and writer."""

from __future__ import annotations

from typing import Final, Literal, TypeAlias

ESC: Final[str] = "~"
SUB: Final[str] = "^"
RES: Final[str] = "`"
TAG: Final[str] = "~#"
MAP_AS_ARRAY: Final[str] = "^ "

QUOTE_TAG: Final[str] = f"{TAG}'"

WireProtocol: TypeAlias = Literal["json", "msgpack"]

WIRE_PROTOCOLS: Final[tuple[WireProtocol, ...]] = ("json", "msgpack")


def check_protocol(protocol: str) -> WireProtocol:
    """Validate a wire protocol name.

    Returns
    -------
    WireProtocol
        The validated protocol.

    Raises
    ------
    ValueError
        Raised when the protocol is not supported.
    """
    if protocol == "json":
        return "json"
    if protocol == "msgpack":
        return "msgpack"
    msg = f"Unsupported wire protocol {protocol!r}; expected one of {WIRE_PROTOCOLS}."
    raise ValueError(msg)


__all__ = [
    "ESC",
    "MAP_AS_ARRAY",
    "QUOTE_TAG",
    "RES",
    "SUB",
    "TAG",
    "WIRE_PROTOCOLS",
    "WireProtocol",
    "check_protocol",
]
