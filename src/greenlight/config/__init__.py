"""Public configuration API."""

from greenlight.config.loader import (
    ENV_PREFIX,
    ENV_SESSION_PREFIX,
    ENV_WATCH_INTERVAL,
    ConfigLoadError,
    load_config,
)
from greenlight.config.schema import (
    DEFAULT_MUX_SESSION_PREFIX,
    DEFAULT_WATCH_INTERVAL_SECONDS,
    GreenlightConfig,
    config_from_mapping,
    default_config,
)

__all__ = [
    "DEFAULT_MUX_SESSION_PREFIX",
    "DEFAULT_WATCH_INTERVAL_SECONDS",
    "ENV_PREFIX",
    "ENV_SESSION_PREFIX",
    "ENV_WATCH_INTERVAL",
    "ConfigLoadError",
    "GreenlightConfig",
    "config_from_mapping",
    "default_config",
    "load_config",
]
