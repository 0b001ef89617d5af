"""Deterministic readiness partition over a slice/graph snapshot."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from greenlight.state.models import Graph, Slice


@dataclass(frozen=True, slots=True)
class BlockedSlice:
    """A pending slice together with the dependency ids it still waits on."""

    slice: Slice
    unmet: tuple[str, ...]

    @property
    def id(self) -> str:
        return self.slice.id


@dataclass(frozen=True, slots=True)
class ReadyReport:
    """Solver output.

    ``ready`` is ordered by ``(wave, id)``; every other list is ordered by id.
    ``other`` holds slices whose status is neither pending, in progress nor
    complete (``failed`` included); the planner ignores them.
    """

    complete: tuple[Slice, ...]
    running: tuple[Slice, ...]
    ready: tuple[Slice, ...]
    blocked: tuple[BlockedSlice, ...]
    other: tuple[Slice, ...] = ()

    @property
    def total(self) -> int:
        return (
            len(self.complete)
            + len(self.running)
            + len(self.ready)
            + len(self.blocked)
            + len(self.other)
        )

    @property
    def ready_ids(self) -> tuple[str, ...]:
        return tuple(item.id for item in self.ready)

    @property
    def running_ids(self) -> tuple[str, ...]:
        return tuple(item.id for item in self.running)

    @property
    def blocked_ids(self) -> tuple[str, ...]:
        return tuple(item.id for item in self.blocked)


def partition(slices: Iterable[Slice], graph: Graph | None) -> ReadyReport:
    """Partition ``slices`` into complete, running, ready and blocked.

    A slice is ready when it is pending and every ``depends_on`` id in the
    graph names a slice whose status is ``complete``. Ids missing from the
    graph have no dependencies and wave 0. Pure: no I/O, same input gives the
    same output.
    """

    effective = graph if graph is not None else Graph()
    ordered = sorted(slices, key=lambda item: item.id)
    complete_ids = frozenset(item.id for item in ordered if item.is_complete)

    complete: list[Slice] = []
    running: list[Slice] = []
    ready: list[Slice] = []
    blocked: list[BlockedSlice] = []
    other: list[Slice] = []

    for item in ordered:
        if item.is_complete:
            complete.append(item)
        elif item.is_running:
            running.append(item)
        elif item.is_pending:
            unmet = tuple(dep for dep in effective.depends_on(item.id) if dep not in complete_ids)
            if unmet:
                blocked.append(BlockedSlice(slice=item, unmet=unmet))
            else:
                ready.append(item)
        else:
            other.append(item)

    ready.sort(key=lambda item: (effective.wave(item.id), item.id))
    return ReadyReport(
        complete=tuple(complete),
        running=tuple(running),
        ready=tuple(ready),
        blocked=tuple(blocked),
        other=tuple(other),
    )


__all__ = ["BlockedSlice", "ReadyReport", "partition"]
