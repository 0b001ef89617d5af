"""Executable entrypoint for the ``gl`` console script and ``python -m greenlight``."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class ExitCode(IntEnum):
    """``gl`` exits 0 on success and 1 on every failure."""

    SUCCESS = 0
    FAILURE = 1


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run the CLI router and collapse every outcome onto :class:`ExitCode`.

    Known failures are reported by the router itself. What reaches this
    function is either an interrupt, an OS-level failure outside any handler,
    or a bug; only the last one gets a traceback.
    """

    from greenlight.ui.cli import run_cli

    try:
        code = run_cli(argv)
    except KeyboardInterrupt:
        sys.stderr.write("interrupted\n")
        return int(ExitCode.FAILURE)
    except OSError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return int(ExitCode.FAILURE)
    except Exception:  # noqa: BLE001 - CLI boundary
        traceback.print_exc(file=sys.stderr)
        return int(ExitCode.FAILURE)
    return int(ExitCode.SUCCESS if code == 0 else ExitCode.FAILURE)


__all__ = ["ExitCode", "cli_entrypoint"]
