"""Slice state: frontmatter, on-disk reader, and readiness solver."""

from greenlight.state.frontmatter import FrontmatterError, parse_frontmatter, write_frontmatter
from greenlight.state.models import Edge, Graph, GraphNode, Slice, Snapshot
from greenlight.state.readiness import BlockedSlice, ReadyReport, partition
from greenlight.state.reader import (
    DirNotFoundError,
    GraphFileNotFoundError,
    InvalidGraphJSONError,
    MissingSlicesError,
    NoSliceFilesError,
    SliceParseError,
    StateReadError,
    load_snapshot,
    read_graph,
    read_slices,
)

__all__ = [
    "BlockedSlice",
    "DirNotFoundError",
    "Edge",
    "FrontmatterError",
    "Graph",
    "GraphFileNotFoundError",
    "GraphNode",
    "InvalidGraphJSONError",
    "MissingSlicesError",
    "NoSliceFilesError",
    "ReadyReport",
    "Slice",
    "SliceParseError",
    "Snapshot",
    "StateReadError",
    "load_snapshot",
    "parse_frontmatter",
    "partition",
    "read_graph",
    "read_slices",
    "write_frontmatter",
]
