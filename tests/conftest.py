"""Shared fixtures: on-disk project builder and fake process seams."""

from __future__ import annotations

import io
import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from greenlight.observability import LoggingConfig, configure_logging
from greenlight.runtime import AssistantAdapter, CommandResult, Mux
from greenlight.ui.cli import CLIServices, run_cli


def found(name: str) -> str | None:
    return f"/usr/bin/{name}"


def missing(name: str) -> str | None:
    return None


class ProjectBuilder:
    """Writes a ``.greenlight/`` tree under ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.gl_dir = root / ".greenlight"
        (self.gl_dir / "slices").mkdir(parents=True, exist_ok=True)

    def slice(
        self,
        slice_id: str,
        status: str = "pending",
        *,
        deps: str = "",
        step: str = "",
        tests: str = "0",
        security_tests: str = "0",
    ) -> ProjectBuilder:
        content = (
            "---\n"
            f"id: {slice_id}\n"
            f"status: {status}\n"
            f"step: {step}\n"
            f"deps: {deps}\n"
            f"tests: {tests}\n"
            f"security_tests: {security_tests}\n"
            "---\n"
            f"# {slice_id}\n"
        )
        (self.gl_dir / "slices" / f"{slice_id}.md").write_text(content, encoding="utf-8")
        return self

    def graph(self, nodes: dict[str, dict[str, object]]) -> ProjectBuilder:
        payload = {
            "slices": {
                slice_id: {"id": slice_id, "name": f"slice {slice_id}", **node}
                for slice_id, node in nodes.items()
            },
            "edges": [],
        }
        (self.gl_dir / "GRAPH.json").write_text(json.dumps(payload), encoding="utf-8")
        return self

    def config(self, parallel: dict[str, object]) -> ProjectBuilder:
        (self.gl_dir / "config.json").write_text(
            json.dumps({"parallel": parallel}), encoding="utf-8"
        )
        return self


@dataclass
class FakeProcess:
    returncode: int = 0
    exited: bool = False

    def poll(self) -> int | None:
        return self.returncode if self.exited else None

    def wait(self) -> int:
        self.exited = True
        return self.returncode


@dataclass
class FakePopen:
    """Records every process start instead of running anything."""

    returncode: int = 0
    error: OSError | None = None
    calls: list[list[str]] = field(default_factory=list)
    kwargs: list[dict[str, object]] = field(default_factory=list)
    processes: list[FakeProcess] = field(default_factory=list)

    def __call__(self, argv: Sequence[str], **kwargs: object) -> FakeProcess:
        if self.error is not None:
            raise self.error
        self.calls.append(list(argv))
        self.kwargs.append(kwargs)
        process = FakeProcess(returncode=self.returncode)
        self.processes.append(process)
        return process


@dataclass
class FakeRunner:
    """tmux command runner that fails for the configured subcommands."""

    fail: set[str] = field(default_factory=set)
    commands: list[tuple[str, ...]] = field(default_factory=list)

    def run(self, command: Sequence[str], *, capture: bool = True) -> CommandResult:
        argv = tuple(command)
        self.commands.append(argv)
        if len(argv) > 1 and argv[1] in self.fail:
            return CommandResult(command=argv, returncode=1, stderr=f"{argv[1]} refused")
        return CommandResult(command=argv, returncode=0)


@dataclass
class CLIHarness:
    services: CLIServices
    popen: FakePopen
    runner: FakeRunner
    sleeps: list[float]

    @property
    def output(self) -> str:
        stream = self.services.stream
        assert isinstance(stream, io.StringIO)
        return stream.getvalue()

    def run(self, *argv: str) -> int:
        return run_cli(list(argv), services=self.services)


@pytest.fixture(autouse=True)
def _quiet_logging() -> None:
    configure_logging(LoggingConfig(level="CRITICAL"), environ={})


@pytest.fixture
def project(tmp_path: Path) -> ProjectBuilder:
    return ProjectBuilder(tmp_path / "demo")


@pytest.fixture
def make_cli(tmp_path: Path) -> Callable[..., CLIHarness]:
    def _make(
        *,
        assistant_lookup: Callable[[str], str | None] = found,
        mux_lookup: Callable[[str], str | None] = found,
        environ: dict[str, str] | None = None,
        sleep: Callable[[float], None] | None = None,
        fail: set[str] | None = None,
        returncode: int = 0,
    ) -> CLIHarness:
        popen = FakePopen(returncode=returncode)
        runner = FakeRunner(fail=set(fail or ()))
        sleeps: list[float] = []

        def _record_sleep(seconds: float) -> None:
            sleeps.append(seconds)
            if sleep is not None:
                sleep(seconds)
            else:
                raise KeyboardInterrupt

        services = CLIServices(
            stream=io.StringIO(),
            environ=dict(environ or {}),
            assistant=AssistantAdapter(lookup=assistant_lookup, process_factory=popen),
            mux=Mux(lookup=mux_lookup, runner=runner),
            sleep=_record_sleep,
            home=tmp_path / "home",
        )
        return CLIHarness(services=services, popen=popen, runner=runner, sleeps=sleeps)

    return _make
