"""
greenlight: watch loop.

File: src/greenlight/planning/watch.py

Purpose
- Re-read slice state on an interval and keep up to ``cap`` slices in flight.

Protocol
- Each tick partitions the latest snapshot. A slice counts against the cap
  while it is ``in_progress`` or while this loop scheduled it and it is not
  yet ``complete``/``failed`` (a headless child that already exited no
  longer counts). Scheduled ids are never launched twice.
- The loop ends with exit 0 when nothing is launchable and nothing is busy.
- Launches are fire-and-forget; progress shows up as slice file changes.
- A read failure after the first tick is reported and retried next tick.
- A launch failure ends the loop with the error. A tmux session that vanished
  between launches is created again.
- ``KeyboardInterrupt`` during the sleep ends the loop; children keep running.
"""

from __future__ import annotations

import shlex
import time
from collections.abc import Callable
from pathlib import Path

import structlog

from greenlight.constants import STATUS_COMPLETE, STATUS_FAILED
from greenlight.planning.launcher import Emit
from greenlight.planning.plan import WatchPlan
from greenlight.planning.planner import build_target
from greenlight.runtime.assistant import AssistantAdapter
from greenlight.runtime.mux import Mux, MuxAddWindowFailedError, MuxCreateFailedError
from greenlight.runtime.process import ProcessHandle
from greenlight.state.models import Slice, Snapshot
from greenlight.state.reader import StateReadError
from greenlight.state.readiness import ReadyReport, partition

SnapshotLoader = Callable[[], Snapshot]
Sleep = Callable[[float], None]

_LOGGER = structlog.get_logger(__name__)


class WatchLoop:
    """Cooperative single-threaded poll loop driven by a :class:`WatchPlan`."""

    def __init__(
        self,
        plan: WatchPlan,
        *,
        assistant: AssistantAdapter,
        mux: Mux,
        load_snapshot: SnapshotLoader,
        project_root: Path,
        emit: Emit,
        sleep: Sleep = time.sleep,
    ) -> None:
        self._plan = plan
        self._assistant = assistant
        self._mux = mux
        self._load_snapshot = load_snapshot
        self._project_root = project_root
        self._emit = emit
        self._sleep = sleep
        self._scheduled: dict[str, ProcessHandle | None] = {}
        self._session_started = False
        self.ticks = 0

    @property
    def scheduled_ids(self) -> tuple[str, ...]:
        return tuple(self._scheduled)

    def run(self, initial: Snapshot) -> int:
        """Drive the loop from an already-read snapshot and return the exit code."""

        snapshot: Snapshot | None = initial
        while True:
            if snapshot is not None:
                finished = self._tick(snapshot)
                if finished:
                    return 0
            try:
                self._sleep(self._plan.interval_seconds)
            except KeyboardInterrupt:
                self._emit("watch: interrupted; slices already started keep running")
                return 0
            snapshot = self._reload()

    # -- tick ---------------------------------------------------------------

    def _tick(self, snapshot: Snapshot) -> bool:
        self.ticks += 1
        report = partition(snapshot.slices, snapshot.graph)
        busy = set(report.running_ids) | self._in_flight(snapshot)
        launchable = [item for item in report.ready if item.id not in self._scheduled]

        if not launchable and not busy:
            self._emit(_termination_summary(report))
            return True

        slots_free = self._plan.cap - len(busy)
        if slots_free > 0 and launchable:
            self._assistant.require_available()
            for item in launchable[:slots_free]:
                self._launch(item, snapshot)
                busy.add(item.id)

        _LOGGER.info(
            "watch_tick",
            tick=self.ticks,
            busy=sorted(busy),
            ready=list(report.ready_ids),
            slots_free=max(0, self._plan.cap - len(busy)),
        )
        self._emit(
            f"watch: {len(report.complete)}/{report.total} complete, {len(busy)} in flight, "
            f"{len(report.blocked)} blocked; next check in {self._plan.interval_seconds}s"
        )
        return False

    def _in_flight(self, snapshot: Snapshot) -> set[str]:
        in_flight: set[str] = set()
        for slice_id, handle in self._scheduled.items():
            current = snapshot.slice_by_id(slice_id)
            if current is not None and current.status in (STATUS_COMPLETE, STATUS_FAILED):
                continue
            if handle is not None and handle.poll() is not None:
                continue
            in_flight.add(slice_id)
        return in_flight

    def _reload(self) -> Snapshot | None:
        try:
            return self._load_snapshot()
        except StateReadError as exc:
            _LOGGER.warning("watch_read_failed", error=str(exc))
            self._emit(f"warning: could not read slice state ({exc}); retrying next tick")
            return None

    # -- launch -------------------------------------------------------------

    def _launch(self, item: Slice, snapshot: Snapshot) -> None:
        graph = snapshot.graph
        target = build_target(
            item.id,
            self._plan.flags,
            name=graph.name(item.id) if graph is not None else "",
            binary=self._assistant.binary,
        )
        if self._plan.use_mux:
            self._open_window(item.id, shlex.join(target.argv))
            handle: ProcessHandle | None = None
        else:
            handle = self._assistant.spawn_headless(
                target.prompt, target.flags, cwd=self._project_root
            )

        self._scheduled[item.id] = handle
        self._emit(f"watch: started {item.id}")

    def _open_window(self, slice_id: str, command: str) -> None:
        session = self._plan.session_name
        assert session is not None
        if self._session_started:
            try:
                self._mux.add_window(session, slice_id, command)
                return
            except MuxAddWindowFailedError:
                # Killed, or its last window exited since the previous launch.
                _LOGGER.info("mux_session_gone", session=session)
                self._session_started = False

        try:
            self._mux.new_session(session, slice_id, str(self._project_root), command)
        except MuxCreateFailedError:
            # The session may survive from an earlier run; reuse it.
            self._mux.add_window(session, slice_id, command)
        self._session_started = True
        self._emit(
            f"watch: tmux session {session} is running; attach with: tmux attach -t {session}"
        )


def _termination_summary(report: ReadyReport) -> str:
    if report.total and len(report.complete) == report.total:
        return f"watch: all {report.total} slice(s) complete; nothing to do"
    return (
        f"watch: no ready slices; nothing to do "
        f"({len(report.complete)} complete, {len(report.blocked)} blocked)"
    )


__all__ = ["Sleep", "SnapshotLoader", "WatchLoop"]
