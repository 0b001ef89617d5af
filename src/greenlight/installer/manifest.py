"""Fixed list of Markdown files shipped in ``greenlight.content``."""

from __future__ import annotations

from importlib import resources
from typing import Final

CLAUDE_FILE: Final[str] = "CLAUDE.md"

MANIFEST: Final[tuple[str, ...]] = (
    "agents/gl-architect.md",
    "agents/gl-assessor.md",
    "agents/gl-codebase-mapper.md",
    "agents/gl-debugger.md",
    "agents/gl-designer.md",
    "agents/gl-implementer.md",
    "agents/gl-security.md",
    "agents/gl-test-writer.md",
    "agents/gl-verifier.md",
    "agents/gl-wrapper.md",
    "commands/gl/add-slice.md",
    "commands/gl/assess.md",
    "commands/gl/changelog.md",
    "commands/gl/design.md",
    "commands/gl/help.md",
    "commands/gl/init.md",
    "commands/gl/map.md",
    "commands/gl/pause.md",
    "commands/gl/quick.md",
    "commands/gl/resume.md",
    "commands/gl/roadmap.md",
    "commands/gl/settings.md",
    "commands/gl/ship.md",
    "commands/gl/slice.md",
    "commands/gl/status.md",
    "commands/gl/wrap.md",
    "references/checkpoint-protocol.md",
    "references/deviation-rules.md",
    "references/verification-patterns.md",
    "templates/config.md",
    "templates/state.md",
    CLAUDE_FILE,
)

# Directories that uninstall removes when they end up empty, deepest first.
MANIFEST_DIRS: Final[tuple[str, ...]] = (
    "commands/gl",
    "commands",
    "agents",
    "references",
    "templates",
)


def read_content(relative_path: str) -> bytes:
    """Return the packaged bytes for one manifest entry."""

    if relative_path not in MANIFEST:
        raise KeyError(f"not a manifest entry: {relative_path}")
    resource = resources.files("greenlight.content").joinpath(*relative_path.split("/"))
    return resource.read_bytes()


__all__ = ["CLAUDE_FILE", "MANIFEST", "MANIFEST_DIRS", "read_content"]
