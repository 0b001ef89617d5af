"""
greenlight: execution planner.

File: src/greenlight/planning/planner.py

Purpose
- Turn a ``gl slice`` request plus a state snapshot into exactly one plan.

Decision order
1. Project directory absent -> ``ProjectAbsentError``.
2. Explicit id missing from the graph -> ``UnknownSliceIdError``.
3. ``--dry-run`` -> dry-run projection (never spawns; beats ``--watch``).
4. Inside the assistant -> in-band instruction plan (never spawns or watches).
5. ``--watch`` without an explicit id -> watch plan.
6. No explicit id and nothing ready -> idle summary.
7. Mode selection: explicit id -> single; ``--sequential`` or tmux missing
   with two or more ready -> sequential; cap of one -> single; else parallel.

Functional requirements
- Target order is always the solver's ready order.
- Assistant flags come from config only and never include the dangerous
  permission flag.
- No I/O other than the project-directory check.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import structlog

from greenlight.config.schema import GreenlightConfig
from greenlight.constants import (
    ASSISTANT_BINARY,
    DEFAULT_MAX_PARALLEL,
    GRAPH_FILE,
    HOST_CONTEXT_ENV,
    PROJECT_DIR,
    SLICE_SKILL,
)
from greenlight.errors import GreenlightError
from greenlight.planning.plan import LaunchTarget, Plan, PlanMode, WatchPlan
from greenlight.runtime.assistant import filter_dangerous_flags
from greenlight.state.models import Slice, Snapshot
from greenlight.state.readiness import ReadyReport, partition

REASON_SEQUENTIAL_REQUESTED: Final[str] = "sequential mode requested"
REASON_MUX_UNAVAILABLE: Final[str] = "tmux not available, using sequential mode"
GRAPH_MISSING_NOTE: Final[str] = (
    f"{GRAPH_FILE.name} missing; dependency info unavailable, treating every pending slice as ready"
)
INSIDE_HOST_WATCH_NOTE: Final[str] = (
    "watch mode is not available inside Claude; handling one slice instead"
)

_LOGGER = structlog.get_logger(__name__)


class PlanningError(GreenlightError):
    """Base error for requests the planner refuses."""


class ProjectAbsentError(PlanningError):
    def __init__(self, project_root: Path) -> None:
        self.project_root = project_root
        super().__init__("not a greenlight project. Run 'gl init' to set up this project.")


class UnknownSliceIdError(PlanningError):
    def __init__(self, slice_id: str) -> None:
        self.slice_id = slice_id
        super().__init__(
            f'unknown slice ID "{slice_id}". Run \'gl status\' to see available slices.'
        )


@dataclass(frozen=True, slots=True)
class HostContext:
    inside_host: bool = False


@dataclass(frozen=True, slots=True)
class SliceRequest:
    """Parsed ``gl slice`` flags."""

    slice_id: str | None = None
    dry_run: bool = False
    watch: bool = False
    sequential: bool = False
    max_parallel: int = DEFAULT_MAX_PARALLEL

    @property
    def cap(self) -> int:
        return max(1, self.max_parallel)


def detect_context(environ: Mapping[str, str] | None = None) -> HostContext:
    """Inside the assistant iff ``CLAUDE_CODE`` is set to a non-empty value."""

    env_map = os.environ if environ is None else environ
    return HostContext(inside_host=bool(env_map.get(HOST_CONTEXT_ENV, "")))


def require_project(project_root: str | Path) -> Path:
    root = Path(project_root)
    if not (root / PROJECT_DIR).is_dir():
        raise ProjectAbsentError(root)
    return root


def session_name(prefix: str, project_name: str) -> str:
    """tmux session name for a project; tmux rejects ``.`` and ``:`` in names."""

    safe_project = project_name.replace(".", "-").replace(":", "-") or "project"
    return f"{prefix}-{safe_project}"


def build_target(
    slice_id: str,
    flags: Sequence[str],
    *,
    name: str = "",
    binary: str = ASSISTANT_BINARY,
) -> LaunchTarget:
    prompt = f"{SLICE_SKILL} {slice_id}"
    safe_flags = filter_dangerous_flags(flags)
    return LaunchTarget(
        slice_id=slice_id,
        prompt=prompt,
        flags=safe_flags,
        argv=(binary, "-p", prompt, *safe_flags),
        name=name,
    )


class Planner:
    """Pure decision engine; one instance per invocation."""

    def __init__(
        self,
        config: GreenlightConfig,
        *,
        context: HostContext,
        mux_available: bool,
        project_name: str,
        assistant_binary: str = ASSISTANT_BINARY,
    ) -> None:
        self._config = config
        self._context = context
        self._mux_available = mux_available
        self._project_name = project_name
        self._binary = assistant_binary

    def plan(self, request: SliceRequest, snapshot: Snapshot) -> Plan | WatchPlan:
        report = partition(snapshot.slices, snapshot.graph)
        notes = (GRAPH_MISSING_NOTE,) if snapshot.graph_missing else ()

        if request.slice_id is not None:
            graph = snapshot.graph
            if graph is None or request.slice_id not in graph:
                raise UnknownSliceIdError(request.slice_id)

        if request.dry_run:
            result: Plan | WatchPlan = self._dry_run(request, snapshot, report, notes)
        elif self._context.inside_host:
            result = self._inside_host(request, snapshot, report, notes)
        elif request.watch and request.slice_id is None:
            result = self._watch(request, notes)
        else:
            result = self._select(request, snapshot, report, notes)

        _LOGGER.info(
            "plan_selected",
            mode=result.mode.value if isinstance(result, Plan) else "watch",
            targets=list(result.target_ids) if isinstance(result, Plan) else [],
            ready=list(report.ready_ids),
            cap=request.cap,
        )
        return result

    # -- modes --------------------------------------------------------------

    def _select(
        self,
        request: SliceRequest,
        snapshot: Snapshot,
        report: ReadyReport,
        notes: tuple[str, ...],
    ) -> Plan:
        cap = request.cap
        if request.slice_id is not None:
            return Plan(
                mode=PlanMode.SINGLE_HEADLESS,
                targets=(self._target(request.slice_id, snapshot),),
                cap=cap,
                notes=notes,
                report=report,
            )

        ready = report.ready
        if not ready:
            return Plan(
                mode=PlanMode.IDLE,
                cap=cap,
                reason=(
                    f"0 ready, {len(report.running)} running, {len(report.blocked)} blocked"
                ),
                notes=notes,
                report=report,
            )

        first = (self._target(ready[0].id, snapshot),)
        effective_cap = min(cap, len(ready))
        if request.sequential:
            mode, reason = PlanMode.SEQUENTIAL, REASON_SEQUENTIAL_REQUESTED
        elif len(ready) >= 2 and not self._mux_available:
            mode, reason = PlanMode.SEQUENTIAL, REASON_MUX_UNAVAILABLE
        elif effective_cap == 1:
            mode, reason = PlanMode.SINGLE_HEADLESS, ""
        else:
            targets = tuple(self._target(item.id, snapshot) for item in ready[:effective_cap])
            return Plan(
                mode=PlanMode.PARALLEL_MUX,
                targets=targets,
                cap=cap,
                session_name=session_name(self._config.mux_session_prefix, self._project_name),
                hint=_remaining_hint(len(ready) - len(targets), parallel=True),
                notes=notes,
                report=report,
            )

        return Plan(
            mode=mode,
            targets=first,
            cap=cap,
            reason=reason,
            hint=_remaining_hint(len(ready) - 1, parallel=False),
            notes=notes,
            report=report,
        )

    def _dry_run(
        self,
        request: SliceRequest,
        snapshot: Snapshot,
        report: ReadyReport,
        notes: tuple[str, ...],
    ) -> Plan:
        live_request = SliceRequest(
            slice_id=request.slice_id,
            sequential=request.sequential,
            max_parallel=request.max_parallel,
        )
        projection = self._select(live_request, snapshot, report, notes)
        if request.slice_id is not None:
            would_launch = projection.targets
        else:
            count = min(len(report.ready), request.cap)
            would_launch = tuple(self._target(item.id, snapshot) for item in report.ready[:count])
        return Plan(
            mode=PlanMode.DRY_RUN_SUMMARY,
            targets=would_launch,
            cap=request.cap,
            reason=projection.reason,
            notes=notes,
            report=report,
            projection=projection,
        )

    def _inside_host(
        self,
        request: SliceRequest,
        snapshot: Snapshot,
        report: ReadyReport,
        notes: tuple[str, ...],
    ) -> Plan:
        if request.watch:
            notes = (*notes, INSIDE_HOST_WATCH_NOTE)
        if request.slice_id is not None:
            target_id: str | None = request.slice_id
        else:
            target_id = report.ready[0].id if report.ready else None

        if target_id is None:
            return Plan(
                mode=PlanMode.IDLE,
                cap=request.cap,
                reason=f"0 ready, {len(report.running)} running, {len(report.blocked)} blocked",
                notes=notes,
                report=report,
            )
        remaining = len(report.ready) - 1 if request.slice_id is None else 0
        return Plan(
            mode=PlanMode.INSIDE_HOST,
            targets=(self._target(target_id, snapshot),),
            cap=request.cap,
            hint=_remaining_hint(remaining, parallel=False),
            notes=notes,
            report=report,
        )

    def _watch(self, request: SliceRequest, notes: tuple[str, ...]) -> WatchPlan:
        cap = request.cap
        if request.sequential:
            use_mux, reason = False, REASON_SEQUENTIAL_REQUESTED
        elif not self._mux_available:
            use_mux, reason = False, REASON_MUX_UNAVAILABLE
        else:
            use_mux, reason = cap > 1, ""
        return WatchPlan(
            cap=cap if use_mux else 1,
            interval_seconds=self._config.watch_interval_seconds,
            flags=filter_dangerous_flags(self._config.assistant_flags),
            use_mux=use_mux,
            session_name=(
                session_name(self._config.mux_session_prefix, self._project_name)
                if use_mux
                else None
            ),
            reason=reason,
            notes=notes,
        )

    def _target(self, slice_id: str, snapshot: Snapshot) -> LaunchTarget:
        return build_target(
            slice_id,
            self._config.assistant_flags,
            name=_display_name(slice_id, snapshot),
            binary=self._binary,
        )


def _display_name(slice_id: str, snapshot: Snapshot) -> str:
    if snapshot.graph is not None:
        name = snapshot.graph.name(slice_id)
        if name:
            return name
    found: Slice | None = snapshot.slice_by_id(slice_id)
    return found.milestone if found is not None else ""


def _remaining_hint(remaining: int, *, parallel: bool) -> str:
    if remaining <= 0:
        return ""
    if parallel:
        return f"{remaining} more ready slice(s) will wait for a free slot."
    return (
        f"{remaining} more ready slice(s) available; run 'gl slice' again to take the next one."
    )


__all__ = [
    "GRAPH_MISSING_NOTE",
    "INSIDE_HOST_WATCH_NOTE",
    "REASON_MUX_UNAVAILABLE",
    "REASON_SEQUENTIAL_REQUESTED",
    "HostContext",
    "Planner",
    "PlanningError",
    "ProjectAbsentError",
    "SliceRequest",
    "UnknownSliceIdError",
    "build_target",
    "detect_context",
    "require_project",
    "session_name",
]
