"""Injectable seams for PATH lookup and subprocess execution."""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

Lookup = Callable[[str], str | None]
"""PATH lookup with the signature of :func:`shutil.which`."""


@dataclass(frozen=True, slots=True)
class CommandResult:
    command: tuple[str, ...]
    returncode: int
    stderr: str = ""


class CommandRunner(Protocol):
    """Injectable command runner used for deterministic/offline testing."""

    def run(self, command: Sequence[str], *, capture: bool = True) -> CommandResult: ...


class SubprocessCommandRunner:
    """Default command runner backed by ``subprocess.run``.

    With ``capture=False`` the child inherits the terminal, which is what
    ``tmux attach-session`` needs.
    """

    def run(self, command: Sequence[str], *, capture: bool = True) -> CommandResult:
        completed = subprocess.run(
            list(command),
            check=False,
            capture_output=capture,
            text=True,
        )
        stderr = completed.stderr if capture and completed.stderr else ""
        return CommandResult(
            command=tuple(command),
            returncode=completed.returncode,
            stderr=stderr,
        )


class ProcessHandle(Protocol):
    """Subset of :class:`subprocess.Popen` used by the launcher and watch loop."""

    def poll(self) -> int | None: ...

    def wait(self) -> int: ...


ProcessFactory = Callable[..., ProcessHandle]
"""Callable with the keyword signature of :class:`subprocess.Popen`."""


__all__ = [
    "CommandResult",
    "CommandRunner",
    "Lookup",
    "ProcessFactory",
    "ProcessHandle",
    "SubprocessCommandRunner",
]
