"""Install the packaged Markdown manifest into a ``.claude`` scope directory."""

from greenlight.installer.installer import (
    ALTERNATE_CLAUDE_FILE,
    VERSION_FILE,
    CheckReport,
    InstallError,
    Installer,
)
from greenlight.installer.manifest import CLAUDE_FILE, MANIFEST, read_content
from greenlight.installer.scope import (
    ConflictStrategy,
    ConflictStrategyError,
    Scope,
    ScopeError,
    parse_conflict_strategy,
    parse_scope,
    resolve_target_dir,
)

__all__ = [
    "ALTERNATE_CLAUDE_FILE",
    "CLAUDE_FILE",
    "MANIFEST",
    "VERSION_FILE",
    "CheckReport",
    "ConflictStrategy",
    "ConflictStrategyError",
    "InstallError",
    "Installer",
    "Scope",
    "ScopeError",
    "parse_conflict_strategy",
    "parse_scope",
    "resolve_target_dir",
]
