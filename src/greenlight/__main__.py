"""Module entrypoint for ``python -m greenlight``."""

from __future__ import annotations

from greenlight.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
