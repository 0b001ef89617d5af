"""Execute a live :class:`Plan` through the assistant and tmux adapters."""

from __future__ import annotations

import shlex
from collections.abc import Callable
from pathlib import Path

import structlog

from greenlight.planning.plan import LaunchTarget, Plan, PlanMode
from greenlight.runtime.assistant import AssistantAdapter
from greenlight.runtime.mux import Mux, MuxCommandError, MuxNotFoundError

Emit = Callable[[str], None]

_LOGGER = structlog.get_logger(__name__)


class Launcher:
    """Runs single, sequential and parallel plans; other modes never reach here."""

    def __init__(
        self,
        *,
        assistant: AssistantAdapter,
        mux: Mux,
        project_root: Path,
        emit: Emit,
    ) -> None:
        self._assistant = assistant
        self._mux = mux
        self._project_root = project_root
        self._emit = emit

    def execute(self, plan: Plan) -> int:
        if plan.mode in (PlanMode.SINGLE_HEADLESS, PlanMode.SEQUENTIAL):
            self._assistant.require_available()
            return self._run_headless(plan.targets[0])
        if plan.mode is PlanMode.PARALLEL_MUX:
            self._assistant.require_available()
            return self._run_parallel(plan)
        raise ValueError(f"plan mode {plan.mode.value} is not executable")

    def _run_headless(self, target: LaunchTarget) -> int:
        self._emit(f"Starting {target.slice_id}: {shlex.join(target.argv)}")
        handle = self._assistant.spawn_headless(
            target.prompt, target.flags, cwd=self._project_root
        )
        returncode = handle.wait()
        _LOGGER.info("slice_finished", slice_id=target.slice_id, returncode=returncode)
        if returncode != 0:
            self._emit(f"error: claude exited with status {returncode} for {target.slice_id}")
            return 1
        return 0

    def _run_parallel(self, plan: Plan) -> int:
        session = plan.session_name
        assert session is not None
        first, *rest = plan.targets

        try:
            self._mux.new_session(
                session,
                first.slice_id,
                str(self._project_root),
                shlex.join(first.argv),
            )
        except (MuxCommandError, MuxNotFoundError) as exc:
            _LOGGER.warning("mux_session_failed", session=session, error=str(exc))
            self._emit(f"warning: {exc}")
            self._emit(f"warning: falling back to a single headless run of {first.slice_id}")
            return self._run_headless(first)

        self._emit(f"Created tmux session {session} with window {first.slice_id}")
        opened = 1
        for target in rest:
            try:
                self._mux.add_window(session, target.slice_id, shlex.join(target.argv))
            except MuxCommandError as exc:
                _LOGGER.warning("mux_window_failed", session=session, slice_id=target.slice_id)
                self._emit(f"warning: {exc}")
                continue
            opened += 1
            self._emit(f"Added window {target.slice_id}")

        self._emit(f"Attaching to tmux session {session} ({opened} window(s))")
        self._mux.attach(session)
        return 0


__all__ = ["Emit", "Launcher"]
