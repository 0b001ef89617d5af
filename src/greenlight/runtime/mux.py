"""tmux adapter: pure argument-vector builders plus thin run wrappers."""

from __future__ import annotations

import shutil
from collections.abc import Sequence

import structlog

from greenlight.constants import MUX_BINARY
from greenlight.runtime.assistant import AdapterError
from greenlight.runtime.process import CommandResult, CommandRunner, Lookup, SubprocessCommandRunner

_LOGGER = structlog.get_logger(__name__)


class MuxNotFoundError(AdapterError):
    def __init__(self, binary: str = MUX_BINARY) -> None:
        self.binary = binary
        super().__init__(f"{binary} not available: binary not found in PATH")


class MuxCommandError(AdapterError):
    """Base for tmux invocations that failed to start or exited non-zero."""

    action = "run tmux command"

    def __init__(self, command: Sequence[str], detail: str) -> None:
        self.command = tuple(command)
        self.detail = detail
        super().__init__(f"failed to {self.action}: {detail}")


class MuxCreateFailedError(MuxCommandError):
    action = "create tmux session"


class MuxAddWindowFailedError(MuxCommandError):
    action = "add tmux window"


class MuxAttachFailedError(MuxCommandError):
    action = "attach to tmux session"


class Mux:
    """tmux wrapper with an injectable PATH lookup and command runner."""

    def __init__(
        self,
        *,
        binary: str = MUX_BINARY,
        lookup: Lookup = shutil.which,
        runner: CommandRunner | None = None,
    ) -> None:
        self.binary = binary
        self.lookup = lookup
        self._runner: CommandRunner = runner if runner is not None else SubprocessCommandRunner()

    def is_available(self) -> bool:
        return self.lookup(self.binary) is not None

    # -- builders -----------------------------------------------------------

    def build_new_session(
        self, name: str, window: str, directory: str, command: str
    ) -> tuple[str, ...]:
        """Detached session whose first window runs ``command`` inside ``directory``."""

        self._require_available()
        return (
            self.binary,
            "new-session",
            "-d",
            "-s",
            name,
            "-n",
            window,
            "-c",
            directory,
            command,
        )

    def build_add_window(self, session: str, name: str, command: str) -> tuple[str, ...]:
        self._require_available()
        return (self.binary, "new-window", "-t", session, "-n", name, command)

    def build_attach(self, session: str) -> tuple[str, ...]:
        self._require_available()
        return (self.binary, "attach-session", "-t", session)

    # -- run surfaces -------------------------------------------------------

    def new_session(self, name: str, window: str, directory: str, command: str) -> None:
        argv = self.build_new_session(name, window, directory, command)
        self._run(argv, MuxCreateFailedError)
        _LOGGER.info("mux_session_created", session=name, window=window)

    def add_window(self, session: str, name: str, command: str) -> None:
        argv = self.build_add_window(session, name, command)
        self._run(argv, MuxAddWindowFailedError)
        _LOGGER.info("mux_window_added", session=session, window=name)

    def attach(self, session: str) -> None:
        """Attach the current terminal; blocks until the user detaches."""

        argv = self.build_attach(session)
        self._run(argv, MuxAttachFailedError, capture=False)

    def _require_available(self) -> None:
        if not self.is_available():
            raise MuxNotFoundError(self.binary)

    def _run(
        self,
        argv: tuple[str, ...],
        error_type: type[MuxCommandError],
        *,
        capture: bool = True,
    ) -> CommandResult:
        try:
            result = self._runner.run(argv, capture=capture)
        except OSError as exc:
            raise error_type(argv, str(exc)) from exc
        if result.returncode != 0:
            detail = result.stderr.strip() or f"exit status {result.returncode}"
            raise error_type(argv, detail)
        return result


__all__ = [
    "Mux",
    "MuxAddWindowFailedError",
    "MuxAttachFailedError",
    "MuxCommandError",
    "MuxCreateFailedError",
    "MuxNotFoundError",
]
