"""Main application setup for the Transit CLI."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from pathlib import Path
from typing import Annotated, Literal

from cyclopts import App, Parameter
from cyclopts.exceptions import CycloptsError

from transit_cli.exit_codes import ExitCode
from transit_cli.render import dumps_plain
from transit_core.config import DecoderSettings
from transit_core.decoder import Decoder
from transit_core.errors import TransitError
from transit_core.reader import Reader

_LOGGER = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_HELP_EPILOGUE = """
Examples:
  transit decode doc.json                 Decode a Transit JSON document
  transit decode doc.mp --protocol msgpack
  transit decode docs.jsonl --lines       Decode one document per line

Environment Variables:
  TRANSIT_LOG_LEVEL   Default log level (DEBUG, INFO, WARNING, ERROR)
  TRANSIT_MAX_DEPTH   Maximum document nesting depth
"""


def get_version() -> str:
    """Get the package version string.

    Returns
    -------
    str
        Version string, or "0.0.0-dev" if not installed.
    """
    try:
        return pkg_version("transit-core")
    except PackageNotFoundError:
        return "0.0.0-dev"


app = App(
    name="transit",
    help="Decode Transit JSON and MessagePack documents.",
    help_epilogue=_HELP_EPILOGUE,
    version=get_version(),
    version_flags=["--version", "-V"],
    default_parameter=Parameter(show_default=True, show_env_var=True),
)


@app.command(name="decode")
def decode_command(
    path: Annotated[Path, Parameter(help="Document to decode.")],
    *,
    protocol: Annotated[
        Literal["json", "msgpack"],
        Parameter(name="--protocol", help="Wire protocol of the document."),
    ] = "json",
    lines: Annotated[
        bool,
        Parameter(name="--lines", help="Treat the input as JSON Lines, one document per line."),
    ] = False,
    pretty: Annotated[
        bool,
        Parameter(name="--pretty", help="Indent the printed output."),
    ] = False,
    max_depth: Annotated[
        int | None,
        Parameter(name="--max-depth", help="Nesting limit; defaults to TRANSIT_MAX_DEPTH."),
    ] = None,
) -> int:
    """Decode a document and print the value tree as JSON.

    Returns
    -------
    int
        Exit status code.
    """
    settings = DecoderSettings.from_env() if max_depth is None else DecoderSettings(max_depth)
    reader = Reader(protocol, decoder=Decoder(settings=settings))
    data = path.read_bytes()
    if lines:
        for value in reader.read_lines(data):
            sys.stdout.write(dumps_plain(value) + "\n")
        return ExitCode.SUCCESS
    sys.stdout.write(dumps_plain(reader.read(data), pretty=pretty) + "\n")
    return ExitCode.SUCCESS


@app.command(name="version")
def version_command() -> int:
    """Print the package version.

    Returns
    -------
    int
        Exit status code.
    """
    sys.stdout.write(get_version() + "\n")
    return ExitCode.SUCCESS


def run(tokens: Sequence[str]) -> int:
    """Parse and execute a command, mapping failures to exit codes.

    Parameters
    ----------
    tokens
        Command line tokens without the program name.

    Returns
    -------
    int
        Exit status code.
    """
    try:
        command, bound, *_ = app.parse_args(list(tokens), exit_on_error=False)
    except CycloptsError as exc:
        return ExitCode.from_exception(exc)
    try:
        result = command(*bound.args, **bound.kwargs)
    except (TransitError, OSError, ValueError) as exc:
        _LOGGER.error("transit: %s", exc)
        return ExitCode.from_exception(exc)
    return ExitCode.SUCCESS if result is None else int(result)


@app.meta.default
def meta_launcher(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR"],
        Parameter(name="--log-level", env_var="TRANSIT_LOG_LEVEL", help="Logging verbosity."),
    ] = "WARNING",
) -> int:
    """Configure logging, then run the selected command.

    Returns
    -------
    int
        Exit status code from command execution.

    Raises
    ------
    ValueError
        Raised when the log level is invalid.
    """
    if log_level not in LOG_LEVELS:
        msg = f"Unsupported log level {log_level!r}."
        raise ValueError(msg)
    logging.basicConfig(level=log_level)
    return run(tokens)


def main() -> None:
    """Run the Transit CLI."""
    raise SystemExit(app.meta())


__all__ = ["app", "get_version", "main", "meta_launcher", "run"]
