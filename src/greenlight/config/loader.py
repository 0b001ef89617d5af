"""
greenlight: project config loader.

File: src/greenlight/config/loader.py

Purpose
- Load effective ``parallel`` settings from ``.greenlight/config.json`` and
  ``GREENLIGHT_`` environment overrides.

Functional requirements
- Precedence: env > file > defaults.
- A missing, unreadable or malformed file never fails the command; defaults
  apply and the failure is only logged.
- Assistant flags come from the file only, never from env or argv.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any, Final

import structlog

from greenlight.config.schema import (
    GreenlightConfig,
    coerce_interval,
    coerce_prefix,
    config_from_mapping,
    default_config,
)
from greenlight.constants import CONFIG_FILE

ENV_PREFIX: Final[str] = "GREENLIGHT_"
ENV_SESSION_PREFIX: Final[str] = f"{ENV_PREFIX}MUX_SESSION_PREFIX"
ENV_WATCH_INTERVAL: Final[str] = f"{ENV_PREFIX}WATCH_INTERVAL_SECONDS"

_LOGGER = structlog.get_logger(__name__)


class ConfigLoadError(ValueError):
    """Raised internally when the config file cannot be read or decoded."""


def load_config(
    project_root: str | Path,
    *,
    environ: Mapping[str, str] | None = None,
) -> GreenlightConfig:
    """Return the effective config for the project at ``project_root``."""

    env_map = os.environ if environ is None else environ
    config_path = Path(project_root) / CONFIG_FILE

    try:
        config = config_from_mapping(_load_json_file(config_path))
    except ConfigLoadError as exc:
        _LOGGER.info("config_defaults_applied", path=str(config_path), reason=str(exc))
        config = default_config()

    return _apply_env_overrides(config, env_map)


def _load_json_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigLoadError(f"config file not found: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigLoadError(f"invalid JSON in {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigLoadError(f"config root must be an object: {path}")
    return payload


def _apply_env_overrides(config: GreenlightConfig, env_map: Mapping[str, str]) -> GreenlightConfig:
    updates: dict[str, object] = {}
    if env_map.get(ENV_SESSION_PREFIX, "").strip():
        updates["mux_session_prefix"] = coerce_prefix(env_map[ENV_SESSION_PREFIX])
    if env_map.get(ENV_WATCH_INTERVAL, "").strip():
        updates["watch_interval_seconds"] = coerce_interval(env_map[ENV_WATCH_INTERVAL])
    if not updates:
        return config
    return replace(config, **updates)


__all__ = [
    "ENV_PREFIX",
    "ENV_SESSION_PREFIX",
    "ENV_WATCH_INTERVAL",
    "ConfigLoadError",
    "load_config",
]
