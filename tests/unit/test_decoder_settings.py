"""Tests for environment-driven decoder settings."""

from __future__ import annotations

import logging

import pytest

from transit_core.config import (
    DEFAULT_MAX_DEPTH,
    MAX_DEPTH_ENV,
    DecoderSettings,
    env_positive_int,
)
from transit_core.decoder import Decoder


def test_defaults_without_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure defaults apply when no override is set."""
    monkeypatch.delenv(MAX_DEPTH_ENV, raising=False)
    assert DecoderSettings.from_env().max_depth == DEFAULT_MAX_DEPTH


def test_environment_override(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure the environment variable overrides the default depth."""
    monkeypatch.setenv(MAX_DEPTH_ENV, " 64 ")
    assert DecoderSettings.from_env().max_depth == 64
    assert Decoder().settings.max_depth == 64


@pytest.mark.parametrize("raw", ["deep", "0", "-3"])
def test_invalid_environment_falls_back(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
    raw: str,
) -> None:
    """Ensure invalid overrides are logged and ignored."""
    monkeypatch.setenv(MAX_DEPTH_ENV, raw)
    with caplog.at_level(logging.WARNING, logger="transit_core.config"):
        value = env_positive_int(MAX_DEPTH_ENV, default=11)
    assert value == 11
    assert MAX_DEPTH_ENV in caplog.text


def test_empty_environment_uses_default(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure a blank override counts as unset."""
    monkeypatch.setenv(MAX_DEPTH_ENV, "  ")
    assert env_positive_int(MAX_DEPTH_ENV, default=5) == 5


def test_non_positive_depth_is_rejected() -> None:
    """Ensure explicit settings validate their limits."""
    with pytest.raises(ValueError, match="max_depth"):
        DecoderSettings(max_depth=0)


def test_fingerprint_payload() -> None:
    """Ensure the fingerprint payload is stable and versioned."""
    assert DecoderSettings(max_depth=12).fingerprint_payload() == {"version": 1, "max_depth": 12}
