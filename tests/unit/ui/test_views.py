"""Unit tests for text views."""

from __future__ import annotations

import io

from greenlight import __version__
from greenlight.config import GreenlightConfig
from greenlight.planning.plan import WatchPlan
from greenlight.planning.planner import HostContext, Planner, SliceRequest
from greenlight.state.models import Graph, GraphNode, Slice, Snapshot
from greenlight.ui.render import CLIRenderer
from greenlight.ui.views import (
    compact_status_line,
    progress_bar,
    render_dry_run,
    render_help,
    render_idle,
    render_inside_host,
    render_status,
    render_watch_start,
    version_line,
)


def _render(view, *args, **kwargs) -> str:
    stream = io.StringIO()
    view(CLIRenderer(stream), *args, **kwargs)
    return stream.getvalue()


def _snapshot(graph: bool = True) -> Snapshot:
    slices = (
        Slice(id="S-01", status="complete", tests=4, security_tests=1),
        Slice(id="S-02", status="in_progress", step="implementing", tests=2),
        Slice(id="S-03", status="pending"),
        Slice(id="S-04", status="pending"),
        Slice(id="S-05", status="pending"),
    )
    nodes = {
        "S-01": GraphNode(id="S-01", name="Login"),
        "S-02": GraphNode(id="S-02"),
        "S-03": GraphNode(id="S-03", name="Search"),
        "S-04": GraphNode(id="S-04"),
        "S-05": GraphNode(id="S-05", depends_on=("S-02", "S-03")),
    }
    return Snapshot(slices=slices, graph=Graph(nodes=nodes) if graph else None)


def _planner(*, mux: bool = True, inside: bool = False) -> Planner:
    return Planner(
        GreenlightConfig(assistant_flags=("--model", "opus")),
        context=HostContext(inside_host=inside),
        mux_available=mux,
        project_name="demo",
    )


def test_dry_run_lists_categories_and_commands() -> None:
    plan = _planner().plan(SliceRequest(dry_run=True, max_parallel=2), _snapshot())

    output = _render(render_dry_run, plan)

    assert output.splitlines() == [
        "Dry run: parallel mode, tmux session gl-demo with one window per slice (max 2)",
        "Ready (2): S-03, S-04",
        "Running (1): S-02 [implementing]",
        "Blocked (1): S-05 (waits on S-02, S-03)",
        "Would launch (2):",
        "  S-03: claude -p '/gl:slice S-03' --model opus",
        "  S-04: claude -p '/gl:slice S-04' --model opus",
    ]


def test_dry_run_sequential_fallback_names_reason() -> None:
    plan = _planner(mux=False).plan(SliceRequest(dry_run=True), _snapshot())

    output = _render(render_dry_run, plan)

    assert output.startswith(
        "Dry run: sequential mode, one slice per run (tmux not available, using sequential mode)"
    )
    assert "tmux session" not in output


def test_dry_run_with_nothing_ready() -> None:
    snapshot = Snapshot(slices=(Slice(id="S-01", status="complete"),), graph=Graph())
    plan = _planner().plan(SliceRequest(dry_run=True), snapshot)

    output = _render(render_dry_run, plan)

    assert "Would launch (0):\n  none\n" in output
    assert "Dry run: nothing to start (0 ready, 0 running, 0 blocked)" in output


def test_inside_host_view_names_skill_invocation() -> None:
    plan = _planner(inside=True).plan(SliceRequest(), _snapshot())

    output = _render(render_inside_host, plan)

    assert output.splitlines() == [
        "slice: S-03 (Search)",
        "run: /gl:slice S-03",
        "hint: 1 more ready slice(s) available; run 'gl slice' again to take the next one.",
    ]


def test_idle_view_lists_blocked_slices() -> None:
    snapshot = Snapshot(
        slices=(Slice(id="S-01", status="in_progress"), Slice(id="S-02", status="pending")),
        graph=Graph(nodes={"S-02": GraphNode(id="S-02", depends_on=("S-01",))}),
    )
    plan = _planner().plan(SliceRequest(), snapshot)

    output = _render(render_idle, plan)

    assert output.splitlines() == [
        "No ready slices: 0 ready, 1 running, 1 blocked.",
        "Blocked: S-02 (waits on S-01)",
    ]


def test_watch_start_mentions_interval() -> None:
    muxed = WatchPlan(cap=3, interval_seconds=10, flags=(), use_mux=True, session_name="gl-x")
    single = WatchPlan(cap=1, interval_seconds=4, flags=(), use_mux=False, reason="sequential")

    assert "up to 3 at a time in tmux session gl-x, polling every 10s" in _render(
        render_watch_start, muxed
    )
    assert "one at a time (sequential), polling every 4s" in _render(render_watch_start, single)


def test_progress_bar_bounds() -> None:
    assert progress_bar(0, 0) == "[" + "." * 20 + "]"
    assert progress_bar(1, 4) == "[" + "#" * 5 + "." * 15 + "]"
    assert progress_bar(4, 4) == "[" + "#" * 20 + "]"


def test_status_view() -> None:
    output = _render(render_status, _snapshot())

    assert output.splitlines() == [
        f"Progress: {progress_bar(1, 5)} 1/5",
        "Running:  S-02 (implementing)",
        "Ready:    S-03, S-04",
        "Blocked:  S-05 (needs S-02, S-03)",
        "Tests:    6 total (1 security)",
    ]


def test_status_view_without_graph_degrades() -> None:
    output = _render(render_status, _snapshot(graph=False))

    assert "Ready:    (dependency info unavailable)" in output
    assert output.rstrip().splitlines()[-1].startswith("warning: GRAPH.json missing")


def test_compact_status_line() -> None:
    assert compact_status_line(_snapshot()) == "1/5 done | 1 running"


def test_help_without_project() -> None:
    output = _render(render_help, None, project_found=False)

    assert output.startswith(f"gl {__version__}\n")
    assert "slice       Run ready slices" in output
    assert output.rstrip().endswith("Run 'gl init' to start a new project.")


def test_help_with_project_summarises_counts() -> None:
    output = _render(render_help, _snapshot(), project_found=True)

    assert output.rstrip().endswith("Current project: 5 slices, 1 complete, 2 ready")


def test_version_line() -> None:
    assert version_line() == f"greenlight {__version__}"
