"""
greenlight: state reader.

File: src/greenlight/state/reader.py

Purpose
- Materialise an immutable snapshot of ``.greenlight/slices/*.md`` and
  ``.greenlight/GRAPH.json``.

Functional requirements
- Slice files are listed non-recursively, filtered to ``.md`` regular files,
  parsed through the frontmatter contract and returned sorted by id.
- Numeric count fields that are not integers degrade to 0.
- The graph requires a ``slices`` mapping; ``edges`` defaults to empty and
  unknown keys are ignored.
- Read errors are raised, never retried. A missing graph file is reported as
  ``graph=None`` by :func:`load_snapshot` so callers can degrade.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

import structlog

from greenlight.constants import GRAPH_FILE, SLICES_DIR
from greenlight.errors import GreenlightError
from greenlight.state.frontmatter import FrontmatterError, parse_frontmatter
from greenlight.state.models import Edge, Graph, GraphNode, Slice, Snapshot

_LOGGER = structlog.get_logger(__name__)

# Optional sign and ASCII digits only; rejects "1_000" and non-ASCII digits.
_COUNT_PATTERN: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")


class StateReadError(GreenlightError):
    """Base error for failures reading slice files or the graph."""


class DirNotFoundError(StateReadError):
    def __init__(self, directory: Path) -> None:
        self.directory = directory
        super().__init__(f"slices directory not found: {directory}")


class NoSliceFilesError(StateReadError):
    def __init__(self, directory: Path) -> None:
        self.directory = directory
        super().__init__(f"no slice files found in {directory}")


class SliceParseError(StateReadError):
    def __init__(self, filename: str, detail: str) -> None:
        self.filename = filename
        super().__init__(f"failed to parse slice file {filename}: {detail}")


class GraphFileNotFoundError(StateReadError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"graph file not found: {path}")


class InvalidGraphJSONError(StateReadError):
    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        super().__init__(f"invalid JSON in {path}: {detail}")


class MissingSlicesError(StateReadError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"graph file {path} has no 'slices' object")


# ---------------------------------------------------------------------------
# Slices
# ---------------------------------------------------------------------------


def read_slices(directory: str | Path) -> tuple[Slice, ...]:
    """Read every ``*.md`` slice file in ``directory``, sorted by slice id."""

    slices_dir = Path(directory)
    try:
        entries = list(slices_dir.iterdir())
    except OSError as exc:
        raise DirNotFoundError(slices_dir) from exc

    candidates = sorted(
        (entry for entry in entries if entry.name.endswith(".md") and not entry.is_dir()),
        key=lambda entry: entry.name,
    )
    if not candidates:
        raise NoSliceFilesError(slices_dir)

    slices = [_read_slice_file(path) for path in candidates]
    slices.sort(key=lambda item: item.id)
    return tuple(slices)


def _read_slice_file(path: Path) -> Slice:
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SliceParseError(path.name, str(exc)) from exc

    try:
        fields, _body = parse_frontmatter(content)
    except FrontmatterError as exc:
        raise SliceParseError(path.name, str(exc)) from exc

    return slice_from_fields(fields, fallback_id=path.stem)


def slice_from_fields(fields: Mapping[str, str], *, fallback_id: str = "") -> Slice:
    """Build a :class:`Slice` from a frontmatter field map."""

    return Slice(
        id=fields.get("id", "") or fallback_id,
        status=fields.get("status", ""),
        step=fields.get("step", ""),
        milestone=fields.get("milestone", ""),
        started=fields.get("started", ""),
        updated=fields.get("updated", ""),
        session=fields.get("session", ""),
        tests=_parse_count(fields.get("tests", "")),
        security_tests=_parse_count(fields.get("security_tests", "")),
        deps=parse_deps(fields.get("deps", "")),
    )


def parse_deps(raw: str) -> tuple[str, ...]:
    """Split a comma-separated dependency list, dropping blank entries."""

    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _parse_count(raw: str) -> int:
    if _COUNT_PATTERN.fullmatch(raw) is None:
        return 0
    return max(0, int(raw))


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------


def read_graph(path: str | Path) -> Graph:
    """Read and validate a ``GRAPH.json`` document."""

    graph_path = Path(path)
    try:
        raw_text = graph_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise GraphFileNotFoundError(graph_path) from exc
    except OSError as exc:
        raise StateReadError(f"cannot read graph file {graph_path}: {exc}") from exc

    try:
        payload = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise InvalidGraphJSONError(graph_path, str(exc)) from exc
    if not isinstance(payload, dict):
        raise InvalidGraphJSONError(graph_path, "top-level value must be an object")

    raw_slices = payload.get("slices")
    if not isinstance(raw_slices, dict):
        raise MissingSlicesError(graph_path)

    nodes = {key: _graph_node(key, value) for key, value in sorted(raw_slices.items())}
    edges = tuple(
        _edge(item) for item in _list_or_empty(payload.get("edges")) if isinstance(item, dict)
    )
    return Graph(nodes=nodes, edges=edges)


def _graph_node(key: str, raw: object) -> GraphNode:
    if not isinstance(raw, dict):
        return GraphNode(id=key)

    wave = raw.get("wave", 0)
    if isinstance(wave, bool) or not isinstance(wave, int) or wave < 0:
        wave = 0
    name = raw.get("name", "")
    return GraphNode(
        id=key,
        name=name if isinstance(name, str) else "",
        depends_on=tuple(
            item for item in _list_or_empty(raw.get("depends_on")) if isinstance(item, str)
        ),
        wave=wave,
        contracts=tuple(str(item) for item in _list_or_empty(raw.get("contracts"))),
    )


def _edge(raw: Mapping[str, Any]) -> Edge:
    return Edge(
        source=str(raw.get("from", "")),
        target=str(raw.get("to", "")),
        reason=str(raw.get("reason", "")),
    )


def _list_or_empty(value: object) -> list[Any]:
    return value if isinstance(value, list) else []


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


def load_snapshot(project_root: str | Path) -> Snapshot:
    """Read slices and graph for the project rooted at ``project_root``.

    A missing graph file yields ``Snapshot.graph is None``; every other read
    failure propagates.
    """

    root = Path(project_root)
    slices = read_slices(root / SLICES_DIR)
    try:
        graph: Graph | None = read_graph(root / GRAPH_FILE)
    except GraphFileNotFoundError:
        _LOGGER.info("graph_missing", path=str(root / GRAPH_FILE))
        graph = None
    return Snapshot(slices=slices, graph=graph)


__all__ = [
    "DirNotFoundError",
    "GraphFileNotFoundError",
    "InvalidGraphJSONError",
    "MissingSlicesError",
    "NoSliceFilesError",
    "SliceParseError",
    "StateReadError",
    "load_snapshot",
    "parse_deps",
    "read_graph",
    "read_slices",
    "slice_from_fields",
]
