"""Unit tests for config loading and env overrides."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from greenlight.config import (
    ENV_SESSION_PREFIX,
    ENV_WATCH_INTERVAL,
    GreenlightConfig,
    config_from_mapping,
    load_config,
)


def _write_config(root: Path, payload: object) -> None:
    gl_dir = root / ".greenlight"
    gl_dir.mkdir(parents=True, exist_ok=True)
    text = payload if isinstance(payload, str) else json.dumps(payload)
    (gl_dir / "config.json").write_text(text, encoding="utf-8")


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})

    assert config == GreenlightConfig()
    assert config.mux_session_prefix == "gl"
    assert config.watch_interval_seconds == 10
    assert config.assistant_flags == ()


@pytest.mark.parametrize("raw", ["{not json", "[1, 2]", '"text"'])
def test_malformed_file_falls_back_to_defaults(tmp_path: Path, raw: str) -> None:
    _write_config(tmp_path, raw)

    assert load_config(tmp_path, environ={}) == GreenlightConfig()


def test_file_values_are_read(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        {
            "parallel": {
                "assistant_flags": ["--model", "opus"],
                "mux_session_prefix": "work",
                "watch_interval_seconds": 30,
            }
        },
    )

    config = load_config(tmp_path, environ={})

    assert config.assistant_flags == ("--model", "opus")
    assert config.mux_session_prefix == "work"
    assert config.watch_interval_seconds == 30


def test_legacy_key_names_are_accepted() -> None:
    config = config_from_mapping(
        {"parallel": {"claude_flags": ["--verbose"], "tmux_session_prefix": "old"}}
    )

    assert config.assistant_flags == ("--verbose",)
    assert config.mux_session_prefix == "old"


def test_current_key_wins_over_legacy_key() -> None:
    config = config_from_mapping(
        {"parallel": {"assistant_flags": ["--a"], "claude_flags": ["--b"]}}
    )

    assert config.assistant_flags == ("--a",)


@pytest.mark.parametrize(
    "parallel",
    [
        {"assistant_flags": "--model opus"},
        {"assistant_flags": ["--ok", 3]},
        {"mux_session_prefix": "   "},
        {"watch_interval_seconds": 0},
        {"watch_interval_seconds": -5},
        {"watch_interval_seconds": True},
        {"watch_interval_seconds": "soon"},
    ],
)
def test_invalid_fields_fall_back_individually(parallel: dict[str, object]) -> None:
    assert config_from_mapping({"parallel": parallel}) == GreenlightConfig()


def test_non_mapping_parallel_section_is_ignored() -> None:
    assert config_from_mapping({"parallel": ["x"]}) == GreenlightConfig()


def test_env_overrides_file(tmp_path: Path) -> None:
    _write_config(tmp_path, {"parallel": {"mux_session_prefix": "file"}})

    config = load_config(
        tmp_path,
        environ={ENV_SESSION_PREFIX: "env", ENV_WATCH_INTERVAL: "3"},
    )

    assert config.mux_session_prefix == "env"
    assert config.watch_interval_seconds == 3


def test_blank_env_values_are_ignored(tmp_path: Path) -> None:
    _write_config(tmp_path, {"parallel": {"watch_interval_seconds": 20}})

    config = load_config(tmp_path, environ={ENV_WATCH_INTERVAL: "  "})

    assert config.watch_interval_seconds == 20


def test_flags_never_come_from_environment(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={"GREENLIGHT_ASSISTANT_FLAGS": "--x"})

    assert config.assistant_flags == ()


def test_config_rejects_invalid_direct_construction() -> None:
    with pytest.raises(ValueError, match="watch_interval_seconds"):
        GreenlightConfig(watch_interval_seconds=0)
    with pytest.raises(ValueError, match="mux_session_prefix"):
        GreenlightConfig(mux_session_prefix="")
