"""Exit code taxonomy for the Transit CLI."""

from __future__ import annotations

from enum import IntEnum

from transit_core.errors import ErrorKind, TransitError


class ExitCode(IntEnum):
    """Standard exit codes for CLI commands.

    - 0: Success
    - 1-2: General and command line errors
    - 3-7: Document errors by failure surface
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    PARSE_ERROR = 2
    FORMAT_ERROR = 3
    CACHE_ERROR = 4
    DEPTH_ERROR = 5
    WIRE_ERROR = 6
    IO_ERROR = 7

    @classmethod
    def from_exception(cls, exc: BaseException) -> ExitCode:
        """Map an exception to an appropriate exit code.

        Parameters
        ----------
        exc
            Exception to classify.

        Returns
        -------
        ExitCode
            Exit code appropriate for the exception type.
        """
        if isinstance(exc, TransitError):
            return _KIND_CODES.get(exc.kind, cls.GENERAL_ERROR)
        if exc.__class__.__module__.startswith("cyclopts"):
            return cls.PARSE_ERROR
        if isinstance(exc, OSError):
            return cls.IO_ERROR
        return cls.GENERAL_ERROR


_KIND_CODES: dict[ErrorKind, ExitCode] = {
    ErrorKind.FORMAT: ExitCode.FORMAT_ERROR,
    ErrorKind.CACHE: ExitCode.CACHE_ERROR,
    ErrorKind.DEPTH: ExitCode.DEPTH_ERROR,
    ErrorKind.WIRE: ExitCode.WIRE_ERROR,
}


__all__ = ["ExitCode"]
