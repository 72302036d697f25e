"""Decoder settings resolved from the environment."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

_LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH: Final[int] = 200
MAX_DEPTH_ENV: Final[str] = "TRANSIT_MAX_DEPTH"


def env_positive_int(name: str, *, default: int) -> int:
    """Parse an environment variable as a positive integer.

    Parameters
    ----------
    name
        Environment variable name.
    default
        Value used when the variable is unset, empty or invalid.

    Returns
    -------
    int
        Parsed value or the default.
    """
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        _LOGGER.warning("Invalid integer for %s: %r", name, raw)
        return default
    if value <= 0:
        _LOGGER.warning("Non-positive value for %s: %r", name, raw)
        return default
    return value


@dataclass(frozen=True)
class DecoderSettings:
    """Resolved decoder limits."""

    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if self.max_depth <= 0:
            msg = f"max_depth must be positive, got {self.max_depth!r}."
            raise ValueError(msg)

    @classmethod
    def from_env(cls) -> DecoderSettings:
        """Build settings from ``TRANSIT_*`` environment variables.

        Returns
        -------
        DecoderSettings
            Settings with environment overrides applied.
        """
        return cls(max_depth=env_positive_int(MAX_DEPTH_ENV, default=DEFAULT_MAX_DEPTH))

    def fingerprint_payload(self) -> Mapping[str, object]:
        """Return canonical payload for fingerprinting.

        Returns
        -------
        Mapping[str, object]
            Payload describing these settings.
        """
        return {"version": 1, "max_depth": self.max_depth}


__all__ = ["DEFAULT_MAX_DEPTH", "MAX_DEPTH_ENV", "DecoderSettings", "env_positive_int"]
