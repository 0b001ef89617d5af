"""Text views for plans, status and help."""

from __future__ import annotations

import shlex
from typing import Final

from greenlight import __version__
from greenlight.constants import SLICE_SKILL
from greenlight.planning.plan import LaunchTarget, Plan, PlanMode, WatchPlan
from greenlight.state.models import Snapshot
from greenlight.state.readiness import ReadyReport, partition
from greenlight.ui.render import CLIRenderer

PROGRESS_BAR_WIDTH: Final[int] = 20
COMPACT_DEGRADED_LINE: Final[str] = "? slices | ? running"
_STATUS_LABEL_WIDTH: Final[int] = 8

HELP_TEXT: Final[str] = """\
Usage: gl <command> [flags]

Project lifecycle:
  init        Initialise a new greenlight project
  design      Run the design phase for a feature
  roadmap     Show the project roadmap

Building:
  slice       Run ready slices (--dry-run, --watch, --sequential, --max N)

State & progress:
  status      Show current project status (--compact for one line)
  changelog   Show summaries of completed slices

Admin:
  install     Install greenlight files (--global | --local)
  uninstall   Remove greenlight files (--global | --local)
  check       Verify installation (--global | --local, --verify)
  version     Show version information
  help        Show this help
"""


# ---------------------------------------------------------------------------
# slice
# ---------------------------------------------------------------------------


def render_notes(renderer: CLIRenderer, notes: tuple[str, ...]) -> None:
    for note in notes:
        renderer.warning(note)


def render_dry_run(renderer: CLIRenderer, plan: Plan) -> None:
    """Render the dry-run projection: mode, categorisation and would-launch list."""

    projection = plan.projection
    assert projection is not None and plan.report is not None

    renderer.text(f"Dry run: {_mode_description(projection)}")
    render_notes(renderer, plan.notes)
    _render_categorisation(renderer, plan.report)

    renderer.text(f"Would launch ({len(plan.targets)}):")
    if not plan.targets:
        renderer.text("  none")
        return
    for target in plan.targets:
        renderer.text(f"  {target.slice_id}: {_command_line(target)}")


def render_inside_host(renderer: CLIRenderer, plan: Plan) -> None:
    target = plan.targets[0]
    label = f"{target.slice_id} ({target.name})" if target.name else target.slice_id
    renderer.text(f"slice: {label}")
    renderer.text(f"run: {SLICE_SKILL} {target.slice_id}")
    for note in plan.notes:
        renderer.note(note)
    if plan.hint:
        renderer.hint(plan.hint)


def render_idle(renderer: CLIRenderer, plan: Plan) -> None:
    render_notes(renderer, plan.notes)
    renderer.text(f"No ready slices: {plan.reason}.")
    if plan.report is not None and plan.report.blocked:
        renderer.text(f"Blocked: {_blocked_list(plan.report)}")


def render_launch_header(renderer: CLIRenderer, plan: Plan) -> None:
    render_notes(renderer, plan.notes)
    if plan.mode is PlanMode.SEQUENTIAL:
        renderer.text(f"Sequential mode: {plan.reason}")
    if plan.hint:
        renderer.hint(plan.hint)


def render_watch_start(renderer: CLIRenderer, plan: WatchPlan) -> None:
    render_notes(renderer, plan.notes)
    if plan.use_mux:
        renderer.text(
            f"Watching slices: up to {plan.cap} at a time in tmux session {plan.session_name}, "
            f"polling every {plan.interval_seconds}s (Ctrl-C to stop)"
        )
    else:
        reason = f" ({plan.reason})" if plan.reason else ""
        renderer.text(
            f"Watching slices: one at a time{reason}, "
            f"polling every {plan.interval_seconds}s (Ctrl-C to stop)"
        )


def _mode_description(plan: Plan) -> str:
    if plan.mode is PlanMode.PARALLEL_MUX:
        return (
            f"parallel mode, tmux session {plan.session_name} with one window per slice "
            f"(max {plan.cap})"
        )
    if plan.mode is PlanMode.SEQUENTIAL:
        return f"sequential mode, one slice per run ({plan.reason})"
    if plan.mode is PlanMode.SINGLE_HEADLESS:
        return f"single slice {plan.targets[0].slice_id}, headless claude session"
    return f"nothing to start ({plan.reason})"


def _render_categorisation(renderer: CLIRenderer, report: ReadyReport) -> None:
    renderer.text(f"Ready ({len(report.ready)}): {', '.join(report.ready_ids) or 'none'}")
    running = ", ".join(
        f"{item.id} [{item.step or 'no step'}]" for item in report.running
    )
    renderer.text(f"Running ({len(report.running)}): {running or 'none'}")
    renderer.text(f"Blocked ({len(report.blocked)}): {_blocked_list(report) or 'none'}")


def _blocked_list(report: ReadyReport) -> str:
    return ", ".join(
        f"{item.id} (waits on {', '.join(item.unmet)})" for item in report.blocked
    )


def _command_line(target: LaunchTarget) -> str:
    return shlex.join(target.argv)


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


def progress_bar(complete: int, total: int, *, width: int = PROGRESS_BAR_WIDTH) -> str:
    if total <= 0:
        return "[" + "." * width + "]"
    filled = min(width, (complete * width) // total)
    return "[" + "#" * filled + "." * (width - filled) + "]"


def compact_status_line(snapshot: Snapshot) -> str:
    report = partition(snapshot.slices, snapshot.graph)
    return f"{len(report.complete)}/{report.total} done | {len(report.running)} running"


def render_status(renderer: CLIRenderer, snapshot: Snapshot) -> None:
    report = partition(snapshot.slices, snapshot.graph)
    width = _STATUS_LABEL_WIDTH

    renderer.kv(
        "Progress",
        f"{progress_bar(len(report.complete), report.total)} "
        f"{len(report.complete)}/{report.total}",
        width=width,
    )
    running = ", ".join(f"{item.id} ({item.step})" for item in report.running)
    renderer.kv("Running", running or "none", width=width)

    if snapshot.graph is None:
        renderer.kv("Ready", "(dependency info unavailable)", width=width)
        renderer.kv("Blocked", "(dependency info unavailable)", width=width)
    else:
        renderer.kv("Ready", ", ".join(report.ready_ids) or "none", width=width)
        blocked = ", ".join(
            f"{item.id} (needs {', '.join(item.unmet)})" for item in report.blocked
        )
        renderer.kv("Blocked", blocked or "none", width=width)

    tests = sum(item.tests for item in snapshot.slices)
    security = sum(item.security_tests for item in snapshot.slices)
    renderer.kv("Tests", f"{tests} total ({security} security)", width=width)

    if snapshot.graph is None:
        renderer.warning(
            "GRAPH.json missing; dependency info unavailable. Run 'gl design' to generate it."
        )


# ---------------------------------------------------------------------------
# help / version
# ---------------------------------------------------------------------------


def version_line() -> str:
    return f"greenlight {__version__}"


def render_help(renderer: CLIRenderer, snapshot: Snapshot | None, *, project_found: bool) -> None:
    renderer.text(f"gl {__version__}")
    renderer.blank()
    renderer.raw(HELP_TEXT)
    renderer.blank()
    if not project_found:
        renderer.text("Run 'gl init' to start a new project.")
        return
    if snapshot is None:
        renderer.text("Current project: 0 slices, 0 complete, 0 ready")
        return
    report = partition(snapshot.slices, snapshot.graph)
    ready = len(report.ready) if snapshot.graph is not None else 0
    renderer.text(
        f"Current project: {report.total} slices, {len(report.complete)} complete, {ready} ready"
    )


__all__ = [
    "COMPACT_DEGRADED_LINE",
    "HELP_TEXT",
    "PROGRESS_BAR_WIDTH",
    "compact_status_line",
    "progress_bar",
    "render_dry_run",
    "render_help",
    "render_idle",
    "render_inside_host",
    "render_launch_header",
    "render_notes",
    "render_status",
    "render_watch_start",
    "version_line",
]
