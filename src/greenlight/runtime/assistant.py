"""
greenlight: external assistant adapter.

File: src/greenlight/runtime/assistant.py

Purpose
- Build and start ``claude`` processes in headless (``-p prompt``) and
  interactive modes.

Security
- The interactive path always strips ``--dangerously-skip-permissions`` from
  the outgoing argument vector, whatever the caller passes.
- Flags reach this adapter only from project config; the CLI never forwards
  its own arguments here.
"""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Final

import structlog

from greenlight.constants import ASSISTANT_BINARY
from greenlight.errors import GreenlightError
from greenlight.runtime.process import Lookup, ProcessFactory, ProcessHandle

DANGEROUS_FLAG: Final[str] = "--dangerously-skip-permissions"
INSTALL_HINT: Final[str] = "https://claude.ai/download"

_LOGGER = structlog.get_logger(__name__)

Stream = IO[Any] | int | None


class AdapterError(GreenlightError):
    """Base error for assistant and multiplexer failures."""


class AssistantNotFoundError(AdapterError):
    def __init__(self, binary: str = ASSISTANT_BINARY) -> None:
        self.binary = binary
        super().__init__(
            f"{binary} binary not found in PATH. Install {binary} to use this command: "
            f"{INSTALL_HINT}"
        )


class EmptyPromptError(AdapterError):
    def __init__(self) -> None:
        super().__init__("prompt must not be empty")


class StartFailureError(AdapterError):
    """Raised when the OS refuses to start the assistant process."""

    def __init__(self, command: Sequence[str], cause: BaseException) -> None:
        self.command = tuple(command)
        super().__init__(f"failed to start {command[0] if command else 'process'}: {cause}")


@dataclass(frozen=True, slots=True)
class Command:
    """A fully built process invocation; nothing has been started yet."""

    argv: tuple[str, ...]
    cwd: Path | None = None
    stdout: Stream = None
    stderr: Stream = None


def filter_dangerous_flags(flags: Sequence[str]) -> tuple[str, ...]:
    """Return ``flags`` without any occurrence of the dangerous permission flag."""

    return tuple(flag for flag in flags if flag != DANGEROUS_FLAG)


class AssistantAdapter:
    """Wraps the assistant binary behind injectable lookup and process factory."""

    def __init__(
        self,
        *,
        binary: str = ASSISTANT_BINARY,
        lookup: Lookup = shutil.which,
        process_factory: ProcessFactory | None = None,
    ) -> None:
        self.binary = binary
        self.lookup = lookup
        self._process_factory: ProcessFactory = (
            process_factory if process_factory is not None else subprocess.Popen
        )

    def is_available(self) -> bool:
        return self.lookup(self.binary) is not None

    def require_available(self) -> None:
        if not self.is_available():
            raise AssistantNotFoundError(self.binary)

    # -- headless ---------------------------------------------------------

    def build_headless_command(
        self,
        prompt: str,
        flags: Sequence[str] = (),
        *,
        cwd: str | Path | None = None,
        stdout: Stream = None,
        stderr: Stream = None,
    ) -> Command:
        """Build ``[binary, "-p", prompt, *flags]`` for an unattended session."""

        self.require_available()
        if not prompt.strip():
            raise EmptyPromptError()
        return Command(
            argv=(self.binary, "-p", prompt, *flags),
            cwd=Path(cwd) if cwd is not None else None,
            stdout=stdout,
            stderr=stderr,
        )

    def spawn_headless(
        self,
        prompt: str,
        flags: Sequence[str] = (),
        *,
        cwd: str | Path | None = None,
        stdout: Stream = None,
        stderr: Stream = None,
    ) -> ProcessHandle:
        """Start a headless session and return its handle; the caller waits."""

        command = self.build_headless_command(
            prompt, flags, cwd=cwd, stdout=stdout, stderr=stderr
        )
        handle = self._start(command)
        _LOGGER.info("assistant_spawned", mode="headless", argv=list(command.argv))
        return handle

    # -- interactive ------------------------------------------------------

    def build_interactive_command(
        self,
        prompt: str = "",
        flags: Sequence[str] = (),
        *,
        cwd: str | Path | None = None,
    ) -> Command:
        """Build an interactive invocation; ``-p prompt`` only when a prompt is given."""

        self.require_available()
        argv: list[str] = [self.binary]
        if prompt:
            argv.extend(["-p", prompt])
        argv.extend(filter_dangerous_flags(flags))
        return Command(argv=tuple(argv), cwd=Path(cwd) if cwd is not None else None)

    def run_interactive(
        self,
        prompt: str = "",
        flags: Sequence[str] = (),
        *,
        cwd: str | Path | None = None,
    ) -> int:
        """Run an interactive session attached to the terminal and wait for it."""

        command = self.build_interactive_command(prompt, flags, cwd=cwd)
        handle = self._start(command)
        _LOGGER.info("assistant_spawned", mode="interactive", argv=list(command.argv))
        return handle.wait()

    def _start(self, command: Command) -> ProcessHandle:
        try:
            return self._process_factory(
                list(command.argv),
                cwd=command.cwd,
                stdout=command.stdout,
                stderr=command.stderr,
            )
        except OSError as exc:
            raise StartFailureError(command.argv, exc) from exc


__all__ = [
    "DANGEROUS_FLAG",
    "INSTALL_HINT",
    "AdapterError",
    "AssistantAdapter",
    "AssistantNotFoundError",
    "Command",
    "EmptyPromptError",
    "StartFailureError",
    "filter_dangerous_flags",
]
