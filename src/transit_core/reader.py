"""Document driver: parse raw bytes with msgspec and decode each document."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import ParamSpec, TypeAlias, TypeVar

import msgspec

from transit_core.config import DecoderSettings
from transit_core.constants import WireProtocol, check_protocol
from transit_core.decoder import Decoder
from transit_core.errors import DecodeDepthError, WireFormatError
from transit_core.rolling_cache import RollingCache

_LOGGER = logging.getLogger(__name__)

PathLike: TypeAlias = str | Path

P = ParamSpec("P")
R = TypeVar("R")

_JSON_DECODER = msgspec.json.Decoder()
_MSGPACK_DECODER = msgspec.msgpack.Decoder()


class Reader:
    """Read Transit documents encoded as JSON or MessagePack.

    Every document is decoded with its own ``RollingCache``; caches are never
    shared between documents.
    """

    def __init__(
        self,
        protocol: WireProtocol = "json",
        *,
        decoder: Decoder | None = None,
        settings: DecoderSettings | None = None,
    ) -> None:
        self._protocol = check_protocol(protocol)
        self._decoder = decoder or Decoder(settings=settings)

    @property
    def protocol(self) -> WireProtocol:
        """Return the wire protocol this reader parses."""
        return self._protocol

    @property
    def decoder(self) -> Decoder:
        """Return the decoder used for every document."""
        return self._decoder

    def parse(self, data: bytes | str) -> object:
        """Parse raw bytes into a generic tree without Transit decoding.

        Parameters
        ----------
        data
            Encoded document.

        Returns
        -------
        object
            Generic tree of strings, lists, dicts and scalars.

        Raises
        ------
        WireFormatError
            Raised when the bytes are not valid for the wire protocol.
        """
        try:
            if self._protocol == "json":
                return _JSON_DECODER.decode(data)
            if isinstance(data, str):
                msg = "MessagePack input must be bytes."
                raise WireFormatError(msg)
            return _MSGPACK_DECODER.decode(data)
        except msgspec.DecodeError as exc:
            msg = f"Malformed {self._protocol} document: {exc}"
            raise WireFormatError(msg) from exc

    def read(self, data: bytes | str) -> object:
        """Parse and decode a single document.

        Parameters
        ----------
        data
            Encoded document.

        Returns
        -------
        object
            Decoded Transit value.
        """
        return self.decode_document(self._guarded(self.parse, data))

    def read_file(self, path: PathLike) -> object:
        """Read and decode a single document from ``path``.

        Returns
        -------
        object
            Decoded Transit value.
        """
        return self.read(Path(path).read_bytes())

    def read_lines(self, data: bytes | str) -> Iterator[object]:
        """Decode newline-delimited JSON documents one at a time.

        Parameters
        ----------
        data
            JSON Lines payload.

        Yields
        ------
        object
            Decoded value of each line.

        Raises
        ------
        ValueError
            Raised when the reader is not configured for JSON.
        WireFormatError
            Raised when a line is not valid JSON.
        """
        if self._protocol != "json":
            msg = "read_lines requires the json protocol."
            raise ValueError(msg)
        try:
            roots = self._guarded(_JSON_DECODER.decode_lines, data)
        except msgspec.DecodeError as exc:
            msg = f"Malformed json document: {exc}"
            raise WireFormatError(msg) from exc
        _LOGGER.debug("Decoding %d JSON Lines documents.", len(roots))
        for root in roots:
            yield self.decode_document(root)

    def decode_document(self, root: object) -> object:
        """Decode an already parsed document root with a fresh cache.

        Returns
        -------
        object
            Decoded Transit value.
        """
        cache = RollingCache()
        return self._guarded(self._decoder.decode, root, cache)

    @staticmethod
    def _guarded(fn: Callable[P, R], *args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return fn(*args, **kwargs)
        except DecodeDepthError:
            raise
        except RecursionError as exc:
            msg = "Document nesting exhausted the interpreter stack."
            raise DecodeDepthError(msg) from exc


__all__ = ["Reader"]
