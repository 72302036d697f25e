"""Shared fixtures for Transit tests."""

from __future__ import annotations

import pytest

from transit_core.config import DecoderSettings
from transit_core.decoder import Decoder
from transit_core.rolling_cache import RollingCache


@pytest.fixture
def decoder() -> Decoder:
    """Return a decoder with default limits, independent of the environment.

    Returns
    -------
    Decoder
        Decoder with the built-in tag table.
    """
    return Decoder(settings=DecoderSettings())


@pytest.fixture
def cache() -> RollingCache:
    """Return an empty per-document cache.

    Returns
    -------
    RollingCache
        Fresh cache.
    """
    return RollingCache()
