"""Plan value objects produced by the planner and consumed by the launcher."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from greenlight.constants import DEFAULT_MAX_PARALLEL
from greenlight.state.readiness import ReadyReport


class PlanMode(StrEnum):
    INSIDE_HOST = "inside-host"
    SINGLE_HEADLESS = "single-headless"
    PARALLEL_MUX = "parallel-mux"
    SEQUENTIAL = "sequential"
    DRY_RUN_SUMMARY = "dry-run-summary"
    IDLE = "idle"


@dataclass(frozen=True, slots=True)
class LaunchTarget:
    """One slice to hand to the assistant, with its prebuilt argument vector."""

    slice_id: str
    prompt: str
    flags: tuple[str, ...]
    argv: tuple[str, ...]
    name: str = ""


@dataclass(frozen=True, slots=True)
class Plan:
    """Exactly one decision for one ``gl slice`` invocation.

    ``projection`` is set only on dry-run plans and holds the plan a live run
    would have executed. ``report`` carries the ready/running/blocked
    categorisation used for rendering.
    """

    mode: PlanMode
    targets: tuple[LaunchTarget, ...] = ()
    cap: int = DEFAULT_MAX_PARALLEL
    session_name: str | None = None
    reason: str = ""
    hint: str = ""
    notes: tuple[str, ...] = ()
    report: ReadyReport | None = None
    projection: Plan | None = None

    def __post_init__(self) -> None:
        if self.cap < 1:
            raise ValueError("cap must be >= 1")
        if len(self.targets) > self.cap:
            raise ValueError(f"plan has {len(self.targets)} targets for cap {self.cap}")
        if (self.session_name is not None) != (self.mode is PlanMode.PARALLEL_MUX):
            raise ValueError("session_name is set exactly for parallel-mux plans")

    @property
    def target_ids(self) -> tuple[str, ...]:
        return tuple(target.slice_id for target in self.targets)


@dataclass(frozen=True, slots=True)
class WatchPlan:
    """Parameters for the poll loop that keeps launch slots filled."""

    cap: int
    interval_seconds: int
    flags: tuple[str, ...]
    use_mux: bool
    session_name: str | None = None
    reason: str = ""
    notes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.cap < 1:
            raise ValueError("cap must be >= 1")
        if self.interval_seconds < 1:
            raise ValueError("interval_seconds must be >= 1")
        if self.use_mux and not self.session_name:
            raise ValueError("mux watch plans need a session name")


__all__ = ["LaunchTarget", "Plan", "PlanMode", "WatchPlan"]
