"""Command-line interface router for greenlight."""

from __future__ import annotations

import argparse
import functools
import os
import sys
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, NoReturn, TextIO

import structlog

from greenlight.config import load_config
from greenlight.constants import (
    DEFAULT_MAX_PARALLEL,
    DESIGN_SKILL,
    INIT_SKILL,
    PROJECT_DIR,
    ROADMAP_FILE,
    SUMMARIES_DIR,
)
from greenlight.errors import GreenlightError, InvalidFlagError
from greenlight.installer import (
    Installer,
    parse_conflict_strategy,
    parse_scope,
    resolve_target_dir,
)
from greenlight.observability import configure_logging
from greenlight.planning import (
    Launcher,
    Plan,
    Planner,
    PlanMode,
    SliceRequest,
    WatchLoop,
    WatchPlan,
    detect_context,
    require_project,
)
from greenlight.runtime import AssistantAdapter, Mux
from greenlight.state import StateReadError, load_snapshot
from greenlight.ui.render import CLIRenderer, create_renderer
from greenlight.ui.views import (
    COMPACT_DEGRADED_LINE,
    compact_status_line,
    render_dry_run,
    render_help,
    render_idle,
    render_inside_host,
    render_launch_header,
    render_status,
    render_watch_start,
    version_line,
)

_LOGGER = structlog.get_logger(__name__)


@dataclass(slots=True)
class CLIServices:
    """Everything a command handler touches outside its arguments.

    The defaults wire the real terminal, environment and binaries; tests
    substitute fakes.
    """

    stream: TextIO = field(default_factory=lambda: sys.stdout)
    environ: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    assistant: AssistantAdapter = field(default_factory=AssistantAdapter)
    mux: Mux = field(default_factory=Mux)
    sleep: Callable[[float], None] = time.sleep
    home: Path | None = None

    def home_dir(self) -> Path:
        if self.home is not None:
            return self.home
        raw = self.environ.get("HOME", "")
        return Path(raw) if raw else Path.home()


class CLIError(GreenlightError):
    """Command failure whose message is printed as ``error: <message>``."""


class _ArgumentParser(argparse.ArgumentParser):
    """argparse parser that reports usage errors as ``InvalidFlagError``.

    Help text is written to ``stream`` when one is given, so ``--help`` lands
    on the same writer as every other line of output.
    """

    def __init__(self, *args: Any, stream: TextIO | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._stream = stream

    def error(self, message: str) -> NoReturn:
        raise InvalidFlagError(message)

    def _print_message(self, message: str, file: IO[str] | None = None) -> None:
        if message:
            (self._stream or file or sys.stdout).write(message)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser(stream: TextIO | None = None) -> argparse.ArgumentParser:
    """Build the argparse command router for every ``gl`` subcommand."""

    parser = _ArgumentParser(
        prog="gl",
        stream=stream,
        description=(
            "greenlight: slice planner and launcher for test-first AI development.\n\n"
            "Common workflows:\n"
            "  gl init                  Set up .greenlight/ in this directory\n"
            "  gl slice --dry-run       Show what would run next\n"
            "  gl slice --watch         Keep ready slices running until done\n"
            "  gl status                Show progress\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = _ArgumentParser(add_help=False)
    common.add_argument(
        "--project-root",
        default=".",
        help="Project root containing .greenlight/ (default: current working directory).",
    )

    subparsers = parser.add_subparsers(
        dest="command", parser_class=functools.partial(_ArgumentParser, stream=stream)
    )

    # slice ---------------------------------------------------------------
    slice_parser = subparsers.add_parser(
        "slice",
        parents=[common],
        help="Run ready slices",
        description=(
            "Pick ready slices from .greenlight/ and run them through claude.\n\n"
            "Examples:\n"
            "  gl slice                 Run the next ready slice(s)\n"
            "  gl slice S-03            Run one specific slice\n"
            "  gl slice --dry-run       Print the plan without starting anything\n"
            "  gl slice --max 2         Run at most two slices in parallel (tmux)\n"
            "  gl slice --watch         Refill slots as slices complete\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    slice_parser.add_argument("slice_id", nargs="?", default=None, help="Explicit slice id.")
    slice_parser.add_argument("--dry-run", action="store_true", help="Print the plan only.")
    slice_parser.add_argument("--watch", action="store_true", help="Keep launch slots filled.")
    slice_parser.add_argument(
        "--sequential", action="store_true", help="Run one slice at a time without tmux."
    )
    slice_parser.add_argument(
        "--max",
        dest="max_parallel",
        type=int,
        default=DEFAULT_MAX_PARALLEL,
        help=f"Maximum concurrent slices (default: {DEFAULT_MAX_PARALLEL}).",
    )
    slice_parser.set_defaults(handler=_cmd_slice)

    # status --------------------------------------------------------------
    status_parser = subparsers.add_parser("status", parents=[common], help="Show progress")
    status_parser.add_argument(
        "--compact", action="store_true", help="One line, never fails (for status panels)."
    )
    status_parser.set_defaults(handler=_cmd_status)

    # init / design ---------------------------------------------------------
    init_parser = subparsers.add_parser(
        "init", parents=[common], help="Initialise a new greenlight project"
    )
    init_parser.set_defaults(handler=_cmd_init)
    design_parser = subparsers.add_parser(
        "design", parents=[common], help="Run the design phase for a feature"
    )
    design_parser.set_defaults(handler=_cmd_design)

    # renderers -------------------------------------------------------------
    roadmap_parser = subparsers.add_parser("roadmap", parents=[common], help="Show the roadmap")
    roadmap_parser.set_defaults(handler=_cmd_roadmap)
    changelog_parser = subparsers.add_parser(
        "changelog", parents=[common], help="Show completed slice summaries"
    )
    changelog_parser.set_defaults(handler=_cmd_changelog)
    help_parser = subparsers.add_parser("help", parents=[common], help="Show command help")
    help_parser.set_defaults(handler=_cmd_help)
    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.set_defaults(handler=_cmd_version)

    # install / uninstall / check -------------------------------------------
    scope = _ArgumentParser(add_help=False)
    scope.add_argument("--global", dest="global_scope", action="store_true")
    scope.add_argument("--local", dest="local_scope", action="store_true")

    install_parser = subparsers.add_parser(
        "install", parents=[common, scope], help="Install greenlight files"
    )
    install_parser.add_argument(
        "--on-conflict",
        default=None,
        help="What to do with an existing CLAUDE.md: keep (default), replace, or append.",
    )
    install_parser.set_defaults(handler=_cmd_install)

    uninstall_parser = subparsers.add_parser(
        "uninstall", parents=[common, scope], help="Remove greenlight files"
    )
    uninstall_parser.set_defaults(handler=_cmd_uninstall)

    check_parser = subparsers.add_parser(
        "check", parents=[common, scope], help="Verify installed greenlight files"
    )
    check_parser.add_argument(
        "--verify", action="store_true", help="Also compare file contents."
    )
    check_parser.set_defaults(handler=_cmd_check)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None, *, services: CLIServices | None = None) -> int:
    """Parse argv, route to a command handler, and return the process exit code."""

    svc = services if services is not None else CLIServices()
    configure_logging(environ=svc.environ)
    renderer = create_renderer(svc.stream)

    parser = build_parser(svc.stream)
    try:
        namespace = parser.parse_args(list(argv) if argv is not None else None)
    except InvalidFlagError as exc:
        renderer.error(str(exc))
        return 1
    except SystemExit as exc:
        return 0 if exc.code in (0, None) else 1

    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        return _cmd_help(namespace, svc, renderer)

    try:
        return int(handler(namespace, svc, renderer))
    except GreenlightError as exc:
        _LOGGER.info("command_failed", command=namespace.command, error=type(exc).__name__)
        renderer.error(str(exc))
        return 1


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_slice(args: argparse.Namespace, svc: CLIServices, renderer: CLIRenderer) -> int:
    root = require_project(_project_root(args))
    config = load_config(root, environ=svc.environ)
    snapshot = load_snapshot(root)

    request = SliceRequest(
        slice_id=args.slice_id,
        dry_run=args.dry_run,
        watch=args.watch,
        sequential=args.sequential,
        max_parallel=args.max_parallel,
    )
    context = detect_context(svc.environ)
    check_mux = request.dry_run or not context.inside_host
    planner = Planner(
        config,
        context=context,
        mux_available=check_mux and svc.mux.is_available(),
        project_name=root.name,
        assistant_binary=svc.assistant.binary,
    )
    plan = planner.plan(request, snapshot)

    if isinstance(plan, WatchPlan):
        render_watch_start(renderer, plan)
        loop = WatchLoop(
            plan,
            assistant=svc.assistant,
            mux=svc.mux,
            load_snapshot=lambda: load_snapshot(root),
            project_root=root,
            emit=renderer.text,
            sleep=svc.sleep,
        )
        return loop.run(snapshot)

    return _dispatch_plan(plan, svc, renderer, root)


def _dispatch_plan(plan: Plan, svc: CLIServices, renderer: CLIRenderer, root: Path) -> int:
    if plan.mode is PlanMode.DRY_RUN_SUMMARY:
        render_dry_run(renderer, plan)
        return 0
    if plan.mode is PlanMode.INSIDE_HOST:
        render_inside_host(renderer, plan)
        return 0
    if plan.mode is PlanMode.IDLE:
        render_idle(renderer, plan)
        return 0

    render_launch_header(renderer, plan)
    launcher = Launcher(
        assistant=svc.assistant,
        mux=svc.mux,
        project_root=root,
        emit=renderer.text,
    )
    return launcher.execute(plan)


def _cmd_status(args: argparse.Namespace, svc: CLIServices, renderer: CLIRenderer) -> int:
    root = _project_root(args)
    if args.compact:
        try:
            snapshot = load_snapshot(require_project(root))
        except GreenlightError:
            renderer.text(COMPACT_DEGRADED_LINE)
            return 0
        renderer.text(compact_status_line(snapshot))
        return 0

    render_status(renderer, load_snapshot(require_project(root)))
    return 0


def _cmd_init(args: argparse.Namespace, svc: CLIServices, renderer: CLIRenderer) -> int:
    root = _project_root(args)
    return _run_skill(INIT_SKILL, "init", root, svc, renderer)


def _cmd_design(args: argparse.Namespace, svc: CLIServices, renderer: CLIRenderer) -> int:
    root = require_project(_project_root(args))
    return _run_skill(DESIGN_SKILL, "design", root, svc, renderer)


def _run_skill(
    skill: str, label: str, root: Path, svc: CLIServices, renderer: CLIRenderer
) -> int:
    if detect_context(svc.environ).inside_host:
        renderer.text(f"Run the {skill} skill to {_SKILL_PURPOSE[label]}.")
        return 0

    config = load_config(root, environ=svc.environ)
    renderer.text(f"Launching Greenlight {label}...")
    returncode = svc.assistant.run_interactive(skill, config.assistant_flags, cwd=root)
    return 0 if returncode == 0 else 1


_SKILL_PURPOSE: Mapping[str, str] = {
    "init": "initialise this project",
    "design": "design the next feature",
}


def _cmd_roadmap(args: argparse.Namespace, svc: CLIServices, renderer: CLIRenderer) -> int:
    root = require_project(_project_root(args))
    roadmap = root / ROADMAP_FILE
    try:
        content = roadmap.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise CLIError(
            f"no roadmap found at {ROADMAP_FILE}. Run 'gl design' to create one."
        ) from None
    except OSError as exc:
        raise CLIError(f"cannot read {ROADMAP_FILE}: {exc}") from exc
    renderer.raw(content)
    return 0


def _cmd_changelog(args: argparse.Namespace, svc: CLIServices, renderer: CLIRenderer) -> int:
    root = require_project(_project_root(args))
    summaries_dir = root / SUMMARIES_DIR
    entries = (
        sorted(path for path in summaries_dir.glob("*.md") if path.is_file())
        if summaries_dir.is_dir()
        else []
    )
    if not entries:
        renderer.text("No changelog entries yet.")
        return 0

    for index, path in enumerate(entries):
        if index:
            renderer.text("---")
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CLIError(f"cannot read {path.name}: {exc}") from exc
        renderer.raw(content if content.endswith("\n") else f"{content}\n")
    return 0


def _cmd_help(args: argparse.Namespace, svc: CLIServices, renderer: CLIRenderer) -> int:
    root = _project_root(args)
    project_found = (root / PROJECT_DIR).is_dir()
    snapshot = None
    if project_found:
        try:
            snapshot = load_snapshot(root)
        except StateReadError:
            snapshot = None
    render_help(renderer, snapshot, project_found=project_found)
    return 0


def _cmd_version(args: argparse.Namespace, svc: CLIServices, renderer: CLIRenderer) -> int:
    renderer.text(version_line())
    return 0


def _cmd_install(args: argparse.Namespace, svc: CLIServices, renderer: CLIRenderer) -> int:
    strategy = parse_conflict_strategy(args.on_conflict)
    installer = _installer(args, svc, renderer)
    installer.install(strategy)
    return 0


def _cmd_uninstall(args: argparse.Namespace, svc: CLIServices, renderer: CLIRenderer) -> int:
    _installer(args, svc, renderer).uninstall()
    return 0


def _cmd_check(args: argparse.Namespace, svc: CLIServices, renderer: CLIRenderer) -> int:
    report = _installer(args, svc, renderer).check(verify=args.verify)
    return 0 if report.ok else 1


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _project_root(args: argparse.Namespace) -> Path:
    raw = getattr(args, "project_root", None) or "."
    return Path(raw).expanduser().resolve()


def _installer(args: argparse.Namespace, svc: CLIServices, renderer: CLIRenderer) -> Installer:
    scope = parse_scope(global_flag=args.global_scope, local_flag=args.local_scope)
    target = resolve_target_dir(scope, project_root=_project_root(args), home=svc.home_dir())
    return Installer(target, scope, emit=renderer.text)


__all__ = ["CLIError", "CLIServices", "build_parser", "run_cli"]

if __name__ == "__main__":
    raise SystemExit(run_cli())
