"""Output rendering abstraction for the ``gl`` CLI.

File: src/greenlight/ui/render.py

Purpose
- Provide a thin, plain-text rendering layer over one writable stream.

Functional requirements
- Normal output, warnings and errors all go to the same stream; callers
  decide where that stream points.
- Output is deterministic and never contains ANSI escapes.
"""

from __future__ import annotations

import sys
from typing import TextIO


class CLIRenderer:
    """Thin CLI output renderer bound to a single text stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout

    def text(self, line: str = "") -> None:
        """Write one line."""

        self.stream.write(f"{line}\n")

    def raw(self, content: str) -> None:
        """Write ``content`` exactly as given."""

        self.stream.write(content)

    def blank(self) -> None:
        self.stream.write("\n")

    def kv(self, key: str, value: object, *, width: int = 0) -> None:
        """Write a ``key: value`` pair, padding the key column to ``width``."""

        label = f"{key}:"
        self.text(f"{label.ljust(width + 1)} {value}" if width else f"{label} {value}")

    def warning(self, text: str) -> None:
        self.text(f"warning: {text}")

    def error(self, text: str) -> None:
        self.text(f"error: {text}")

    def hint(self, text: str) -> None:
        self.text(f"hint: {text}")

    def note(self, text: str) -> None:
        self.text(f"note: {text}")


def create_renderer(stream: TextIO | None = None) -> CLIRenderer:
    """Create a CLI renderer writing to ``stream`` (stdout by default)."""

    return CLIRenderer(stream)


__all__ = ["CLIRenderer", "create_renderer"]
