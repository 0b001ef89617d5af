"""Typed project configuration and per-field validation helpers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

DEFAULT_MUX_SESSION_PREFIX: Final[str] = "gl"
DEFAULT_WATCH_INTERVAL_SECONDS: Final[int] = 10

# Keys accepted under the ``parallel`` section; the second spelling of each
# pair is the older name still written by existing projects.
ASSISTANT_FLAGS_KEYS: Final[tuple[str, ...]] = ("assistant_flags", "claude_flags")
SESSION_PREFIX_KEYS: Final[tuple[str, ...]] = ("mux_session_prefix", "tmux_session_prefix")
WATCH_INTERVAL_KEY: Final[str] = "watch_interval_seconds"


@dataclass(frozen=True, slots=True)
class GreenlightConfig:
    """Effective ``parallel`` settings for one command invocation."""

    assistant_flags: tuple[str, ...] = ()
    mux_session_prefix: str = DEFAULT_MUX_SESSION_PREFIX
    watch_interval_seconds: int = DEFAULT_WATCH_INTERVAL_SECONDS

    def __post_init__(self) -> None:
        if self.watch_interval_seconds < 1:
            raise ValueError("watch_interval_seconds must be >= 1")
        if not self.mux_session_prefix.strip():
            raise ValueError("mux_session_prefix must be non-empty")


def default_config() -> GreenlightConfig:
    return GreenlightConfig()


def config_from_mapping(payload: Mapping[str, object]) -> GreenlightConfig:
    """Build a config from a decoded ``config.json`` document.

    Each field falls back to its default independently when absent or invalid.
    """

    parallel = payload.get("parallel")
    if not isinstance(parallel, Mapping):
        return default_config()

    return GreenlightConfig(
        assistant_flags=coerce_flags(_first_present(parallel, ASSISTANT_FLAGS_KEYS)),
        mux_session_prefix=coerce_prefix(_first_present(parallel, SESSION_PREFIX_KEYS)),
        watch_interval_seconds=coerce_interval(parallel.get(WATCH_INTERVAL_KEY)),
    )


def coerce_flags(value: object) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        return ()
    return tuple(value)


def coerce_prefix(value: object) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return DEFAULT_MUX_SESSION_PREFIX


def coerce_interval(value: object) -> int:
    if isinstance(value, bool):
        return DEFAULT_WATCH_INTERVAL_SECONDS
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return DEFAULT_WATCH_INTERVAL_SECONDS
    if isinstance(value, int) and value >= 1:
        return value
    return DEFAULT_WATCH_INTERVAL_SECONDS


def _first_present(section: Mapping[str, object], keys: tuple[str, ...]) -> object:
    for key in keys:
        if key in section:
            return section[key]
    return None


__all__ = [
    "DEFAULT_MUX_SESSION_PREFIX",
    "DEFAULT_WATCH_INTERVAL_SECONDS",
    "GreenlightConfig",
    "coerce_flags",
    "coerce_interval",
    "coerce_prefix",
    "config_from_mapping",
    "default_config",
]
