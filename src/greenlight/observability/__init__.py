"""Public observability primitives: structured decision logging."""

from greenlight.observability.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_LEVEL_ENV,
    LoggingConfig,
    configure_logging,
)

__all__ = ["DEFAULT_LOG_LEVEL", "LOG_LEVEL_ENV", "LoggingConfig", "configure_logging"]
