"""Command line interface for decoding Transit documents."""

from __future__ import annotations
