"""Install scope and conflict-strategy flag parsing."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Final

from greenlight.errors import InvalidFlagError

SCOPE_DIR_NAME: Final[str] = ".claude"


class Scope(StrEnum):
    GLOBAL = "global"
    LOCAL = "local"


class ConflictStrategy(StrEnum):
    KEEP = "keep"
    REPLACE = "replace"
    APPEND = "append"


class ScopeError(InvalidFlagError):
    """Raised when neither or both of ``--global``/``--local`` are given."""


class ConflictStrategyError(InvalidFlagError):
    """Raised for an ``--on-conflict`` value outside keep/replace/append."""


def parse_scope(*, global_flag: bool, local_flag: bool) -> Scope:
    if global_flag and local_flag:
        raise ScopeError("cannot specify both --global and --local")
    if global_flag:
        return Scope.GLOBAL
    if local_flag:
        return Scope.LOCAL
    raise ScopeError("must specify --global or --local")


def parse_conflict_strategy(raw: str | None) -> ConflictStrategy:
    if raw is None:
        return ConflictStrategy.KEEP
    try:
        return ConflictStrategy(raw)
    except ValueError:
        raise ConflictStrategyError(
            f"invalid --on-conflict value {raw!r} (use keep, replace, or append)"
        ) from None


def resolve_target_dir(scope: Scope, *, project_root: Path, home: Path) -> Path:
    """``<project>/.claude`` for local scope, ``$HOME/.claude`` for global scope."""

    base = home if scope is Scope.GLOBAL else project_root
    return base / SCOPE_DIR_NAME


__all__ = [
    "SCOPE_DIR_NAME",
    "ConflictStrategy",
    "ConflictStrategyError",
    "Scope",
    "ScopeError",
    "parse_conflict_strategy",
    "parse_scope",
    "resolve_target_dir",
]
