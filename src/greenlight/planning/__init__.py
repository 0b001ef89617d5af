"""Slice execution planning: plan model, planner, launcher, and watch loop."""

from greenlight.planning.launcher import Launcher
from greenlight.planning.plan import LaunchTarget, Plan, PlanMode, WatchPlan
from greenlight.planning.planner import (
    HostContext,
    Planner,
    PlanningError,
    ProjectAbsentError,
    SliceRequest,
    UnknownSliceIdError,
    build_target,
    detect_context,
    require_project,
    session_name,
)
from greenlight.planning.watch import WatchLoop

__all__ = [
    "HostContext",
    "LaunchTarget",
    "Launcher",
    "Plan",
    "PlanMode",
    "Planner",
    "PlanningError",
    "ProjectAbsentError",
    "SliceRequest",
    "UnknownSliceIdError",
    "WatchLoop",
    "WatchPlan",
    "build_target",
    "detect_context",
    "require_project",
    "session_name",
]
