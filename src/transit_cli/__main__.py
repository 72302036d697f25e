"""Module entrypoint for the Transit CLI."""

from __future__ import annotations

from transit_cli.app import main

if __name__ == "__main__":
    main()
