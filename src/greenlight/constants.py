"""Stable names and paths shared across greenlight packages."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Final

# Project layout (relative to the project root).
PROJECT_DIR: Final[PurePosixPath] = PurePosixPath(".greenlight")
SLICES_DIR: Final[PurePosixPath] = PROJECT_DIR / "slices"
GRAPH_FILE: Final[PurePosixPath] = PROJECT_DIR / "GRAPH.json"
CONFIG_FILE: Final[PurePosixPath] = PROJECT_DIR / "config.json"
ROADMAP_FILE: Final[PurePosixPath] = PROJECT_DIR / "ROADMAP.md"
SUMMARIES_DIR: Final[PurePosixPath] = PROJECT_DIR / "summaries"

# Host context: non-empty value means gl runs inside the assistant.
HOST_CONTEXT_ENV: Final[str] = "CLAUDE_CODE"

# External binaries.
ASSISTANT_BINARY: Final[str] = "claude"
MUX_BINARY: Final[str] = "tmux"

# Host skill prompts.
SKILL_PREFIX: Final[str] = "/gl"
SLICE_SKILL: Final[str] = f"{SKILL_PREFIX}:slice"
INIT_SKILL: Final[str] = f"{SKILL_PREFIX}:init"
DESIGN_SKILL: Final[str] = f"{SKILL_PREFIX}:design"

# Slice statuses understood by the solver. Other values are preserved verbatim.
STATUS_PENDING: Final[str] = "pending"
STATUS_IN_PROGRESS: Final[str] = "in_progress"
STATUS_COMPLETE: Final[str] = "complete"
STATUS_FAILED: Final[str] = "failed"

DEFAULT_MAX_PARALLEL: Final[int] = 4

__all__ = [
    "ASSISTANT_BINARY",
    "CONFIG_FILE",
    "DEFAULT_MAX_PARALLEL",
    "DESIGN_SKILL",
    "GRAPH_FILE",
    "HOST_CONTEXT_ENV",
    "INIT_SKILL",
    "MUX_BINARY",
    "PROJECT_DIR",
    "ROADMAP_FILE",
    "SKILL_PREFIX",
    "SLICES_DIR",
    "SLICE_SKILL",
    "STATUS_COMPLETE",
    "STATUS_FAILED",
    "STATUS_IN_PROGRESS",
    "STATUS_PENDING",
    "SUMMARIES_DIR",
]
