"""Unit tests for state.reader."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from greenlight.state.reader import (
    DirNotFoundError,
    GraphFileNotFoundError,
    InvalidGraphJSONError,
    MissingSlicesError,
    NoSliceFilesError,
    SliceParseError,
    StateReadError,
    load_snapshot,
    parse_deps,
    read_graph,
    read_slices,
)


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_read_slices_parses_fields_and_sorts_by_id(tmp_path: Path) -> None:
    _write(
        tmp_path / "b.md",
        "---\nid: S-02\nstatus: in_progress\nstep: implementing\ntests: 7\n"
        "security_tests: 2\ndeps: S-01, , S-00 \nmilestone: M1\nsession: abc\n---\nbody",
    )
    _write(tmp_path / "a.md", "---\nid: S-01\nstatus: complete\n---\n")

    slices = read_slices(tmp_path)

    assert [item.id for item in slices] == ["S-01", "S-02"]
    second = slices[1]
    assert second.status == "in_progress"
    assert second.step == "implementing"
    assert second.tests == 7
    assert second.security_tests == 2
    assert second.deps == ("S-01", "S-00")
    assert second.milestone == "M1"
    assert second.session == "abc"


def test_non_numeric_and_negative_counts_degrade_to_zero(tmp_path: Path) -> None:
    _write(
        tmp_path / "a.md",
        "---\nid: S-01\nstatus: pending\ntests: many\nsecurity_tests: -4\n---\n",
    )

    (item,) = read_slices(tmp_path)

    assert item.tests == 0
    assert item.security_tests == 0


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("12", 12), ("+7", 7), ("1_000", 0), ("\u0663", 0), ("3.0", 0), ("", 0)],
)
def test_counts_accept_only_ascii_integers(tmp_path: Path, raw: str, expected: int) -> None:
    _write(tmp_path / "a.md", f"---\nid: S-01\ntests: {raw}\n---\n")

    (item,) = read_slices(tmp_path)

    assert item.tests == expected


def test_unknown_status_and_keys_are_preserved_or_ignored(tmp_path: Path) -> None:
    _write(tmp_path / "a.md", "---\nid: S-01\nstatus: paused\nowner: someone\n---\n")

    (item,) = read_slices(tmp_path)

    assert item.status == "paused"


def test_read_slices_ignores_non_markdown_and_directories(tmp_path: Path) -> None:
    _write(tmp_path / "a.md", "---\nid: S-01\nstatus: pending\n---\n")
    _write(tmp_path / "notes.txt", "not a slice")
    (tmp_path / "nested.md").mkdir()

    assert [item.id for item in read_slices(tmp_path)] == ["S-01"]


def test_read_slices_keeps_file_named_only_md(tmp_path: Path) -> None:
    _write(tmp_path / ".md", "---\nid: S-07\nstatus: pending\n---\n")

    assert [item.id for item in read_slices(tmp_path)] == ["S-07"]


def test_read_slices_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(DirNotFoundError):
        read_slices(tmp_path / "absent")


def test_read_slices_without_markdown_files(tmp_path: Path) -> None:
    _write(tmp_path / "readme.txt", "nothing here")

    with pytest.raises(NoSliceFilesError):
        read_slices(tmp_path)


def test_read_slices_reports_the_malformed_file(tmp_path: Path) -> None:
    _write(tmp_path / "good.md", "---\nid: S-01\n---\n")
    _write(tmp_path / "bad.md", "---\nid: S-02\n")

    with pytest.raises(SliceParseError) as error:
        read_slices(tmp_path)

    assert error.value.filename == "bad.md"
    assert isinstance(error.value, StateReadError)


def test_parse_deps_drops_blank_entries() -> None:
    assert parse_deps("") == ()
    assert parse_deps(" S-01 ,S-02,, ") == ("S-01", "S-02")


def test_read_graph_parses_nodes_and_edges(tmp_path: Path) -> None:
    path = tmp_path / "GRAPH.json"
    _write(
        path,
        json.dumps(
            {
                "slices": {
                    "S-02": {"name": "Login", "depends_on": ["S-01"], "wave": 1},
                    "S-01": {"name": "Signup", "contracts": ["UserStore"]},
                },
                "edges": [{"from": "S-01", "to": "S-02", "reason": "needs users"}],
                "version": 3,
            }
        ),
    )

    graph = read_graph(path)

    assert list(graph.nodes) == ["S-01", "S-02"]
    assert graph.depends_on("S-02") == ("S-01",)
    assert graph.wave("S-02") == 1
    assert graph.wave("S-01") == 0
    assert graph.wave("S-99") == 0
    assert graph.nodes["S-01"].contracts == ("UserStore",)
    assert graph.edges[0].source == "S-01"
    assert graph.edges[0].reason == "needs users"


def test_read_graph_defaults_edges_to_empty(tmp_path: Path) -> None:
    path = tmp_path / "GRAPH.json"
    _write(path, json.dumps({"slices": {"S-01": {}}}))

    assert read_graph(path).edges == ()


def test_read_graph_errors(tmp_path: Path) -> None:
    with pytest.raises(GraphFileNotFoundError):
        read_graph(tmp_path / "missing.json")

    bad_json = tmp_path / "bad.json"
    _write(bad_json, "{not json")
    with pytest.raises(InvalidGraphJSONError):
        read_graph(bad_json)

    no_slices = tmp_path / "no_slices.json"
    _write(no_slices, json.dumps({"edges": []}))
    with pytest.raises(MissingSlicesError):
        read_graph(no_slices)


def test_load_snapshot_tolerates_missing_graph(tmp_path: Path) -> None:
    _write(tmp_path / ".greenlight" / "slices" / "a.md", "---\nid: S-01\nstatus: pending\n---\n")

    snapshot = load_snapshot(tmp_path)

    assert snapshot.graph is None
    assert snapshot.graph_missing
    assert [item.id for item in snapshot.slices] == ["S-01"]


def test_load_snapshot_propagates_invalid_graph(tmp_path: Path) -> None:
    _write(tmp_path / ".greenlight" / "slices" / "a.md", "---\nid: S-01\nstatus: pending\n---\n")
    _write(tmp_path / ".greenlight" / "GRAPH.json", "[]")

    with pytest.raises(InvalidGraphJSONError):
        load_snapshot(tmp_path)
