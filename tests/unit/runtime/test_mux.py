"""Unit tests for the tmux adapter."""

from __future__ import annotations

import pytest

from greenlight.runtime.mux import (
    Mux,
    MuxAddWindowFailedError,
    MuxAttachFailedError,
    MuxCreateFailedError,
    MuxNotFoundError,
)
from tests.conftest import FakeRunner, found, missing


def test_builders_produce_expected_argument_vectors() -> None:
    mux = Mux(lookup=found, runner=FakeRunner())

    assert mux.build_new_session("gl-demo", "S-01", "/work/demo", "claude -p x") == (
        "tmux",
        "new-session",
        "-d",
        "-s",
        "gl-demo",
        "-n",
        "S-01",
        "-c",
        "/work/demo",
        "claude -p x",
    )
    assert mux.build_add_window("gl-demo", "S-02", "claude -p y") == (
        "tmux",
        "new-window",
        "-t",
        "gl-demo",
        "-n",
        "S-02",
        "claude -p y",
    )
    assert mux.build_attach("gl-demo") == ("tmux", "attach-session", "-t", "gl-demo")


def test_builders_require_binary() -> None:
    mux = Mux(lookup=missing, runner=FakeRunner())

    assert not mux.is_available()
    with pytest.raises(MuxNotFoundError, match="tmux not available"):
        mux.build_attach("gl-demo")


def test_run_surfaces_send_built_commands() -> None:
    runner = FakeRunner()
    mux = Mux(lookup=found, runner=runner)

    mux.new_session("gl-demo", "S-01", "/work/demo", "cmd")
    mux.add_window("gl-demo", "S-02", "cmd")
    mux.attach("gl-demo")

    assert [command[1] for command in runner.commands] == [
        "new-session",
        "new-window",
        "attach-session",
    ]


@pytest.mark.parametrize(
    ("subcommand", "call", "error_type"),
    [
        ("new-session", lambda mux: mux.new_session("s", "w", "/d", "c"), MuxCreateFailedError),
        ("new-window", lambda mux: mux.add_window("s", "w", "c"), MuxAddWindowFailedError),
        ("attach-session", lambda mux: mux.attach("s"), MuxAttachFailedError),
    ],
)
def test_non_zero_exit_maps_to_specific_error(subcommand, call, error_type) -> None:
    mux = Mux(lookup=found, runner=FakeRunner(fail={subcommand}))

    with pytest.raises(error_type) as excinfo:
        call(mux)
    assert f"{subcommand} refused" in str(excinfo.value)


class _ExplodingRunner:
    def run(self, command, *, capture=True):
        raise FileNotFoundError("tmux vanished")


def test_os_error_from_runner_is_wrapped() -> None:
    mux = Mux(lookup=found, runner=_ExplodingRunner())

    with pytest.raises(MuxCreateFailedError, match="tmux vanished"):
        mux.new_session("s", "w", "/d", "c")
