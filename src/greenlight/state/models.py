"""Typed, immutable snapshot of a project's slices and dependency graph."""

from __future__ import annotations

from dataclasses import dataclass, field

from greenlight.constants import STATUS_COMPLETE, STATUS_IN_PROGRESS, STATUS_PENDING


@dataclass(frozen=True, slots=True)
class Slice:
    """One unit of work as recorded in a slice file's frontmatter.

    ``status`` is an open string; values other than the recognised ones are
    kept verbatim and ignored by the readiness solver.
    """

    id: str
    status: str = ""
    step: str = ""
    milestone: str = ""
    started: str = ""
    updated: str = ""
    session: str = ""
    tests: int = 0
    security_tests: int = 0
    deps: tuple[str, ...] = ()

    @property
    def is_pending(self) -> bool:
        return self.status == STATUS_PENDING

    @property
    def is_complete(self) -> bool:
        return self.status == STATUS_COMPLETE

    @property
    def is_running(self) -> bool:
        return self.status == STATUS_IN_PROGRESS


@dataclass(frozen=True, slots=True)
class GraphNode:
    id: str
    name: str = ""
    depends_on: tuple[str, ...] = ()
    wave: int = 0
    contracts: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Edge:
    """Informational edge; the solver reads ``GraphNode.depends_on`` instead."""

    source: str
    target: str
    reason: str = ""


@dataclass(frozen=True, slots=True)
class Graph:
    nodes: dict[str, GraphNode] = field(default_factory=dict)
    edges: tuple[Edge, ...] = ()

    def __contains__(self, slice_id: object) -> bool:
        return slice_id in self.nodes

    def wave(self, slice_id: str) -> int:
        node = self.nodes.get(slice_id)
        return node.wave if node is not None else 0

    def depends_on(self, slice_id: str) -> tuple[str, ...]:
        node = self.nodes.get(slice_id)
        return node.depends_on if node is not None else ()

    def name(self, slice_id: str) -> str:
        node = self.nodes.get(slice_id)
        return node.name if node is not None else ""


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Slices plus the graph read in one pass.

    ``graph`` is ``None`` when ``GRAPH.json`` does not exist; consumers degrade
    to "no dependency information".
    """

    slices: tuple[Slice, ...]
    graph: Graph | None = None

    @property
    def graph_missing(self) -> bool:
        return self.graph is None

    def slice_by_id(self, slice_id: str) -> Slice | None:
        for item in self.slices:
            if item.id == slice_id:
                return item
        return None


__all__ = ["Edge", "Graph", "GraphNode", "Slice", "Snapshot"]
