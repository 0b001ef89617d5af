"""Structured decision logging with JSON-lines output on stderr.

Logging is configured explicitly by the CLI router; importing this module has
no side effects. Modules obtain loggers with ``structlog.get_logger(__name__)``
and emit short event names with keyword fields.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any, Final, TextIO

import structlog

LOG_LEVEL_ENV: Final[str] = "GREENLIGHT_LOG_LEVEL"
DEFAULT_LOG_LEVEL: Final[str] = "WARNING"

_REDACTED_VALUE: Final[str] = "***REDACTED***"
_SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = (
    "secret",
    "token",
    "password",
    "api_key",
)


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Settings for the structlog pipeline."""

    level: int | str = DEFAULT_LOG_LEVEL
    stream: TextIO | None = None
    json: bool = True


def configure_logging(
    config: LoggingConfig | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> None:
    """Configure structlog for the current process.

    ``GREENLIGHT_LOG_LEVEL`` in ``environ`` overrides the configured level.
    Calling this again replaces the previous configuration, which keeps test
    runs isolated from each other.
    """

    cfg = config or LoggingConfig()
    env_map = os.environ if environ is None else environ
    raw_level: int | str = env_map.get(LOG_LEVEL_ENV, "").strip() or cfg.level
    level = _parse_log_level(raw_level)

    renderer: Any = (
        structlog.processors.JSONRenderer(sort_keys=True)
        if cfg.json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _redact_sensitive_fields,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=cfg.stream or sys.stderr),
        cache_logger_on_first_use=False,
    )


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value

    parsed = logging.getLevelName(value.strip().upper())
    if isinstance(parsed, int):
        return parsed
    return logging.WARNING


def _redact_sensitive_fields(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    for key in list(event_dict):
        lowered = key.lower()
        if any(term in lowered for term in _SENSITIVE_KEY_TERMS):
            event_dict[key] = _REDACTED_VALUE
    return event_dict


__all__ = ["DEFAULT_LOG_LEVEL", "LOG_LEVEL_ENV", "LoggingConfig", "configure_logging"]
