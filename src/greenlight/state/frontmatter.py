"""Minimal ``key: value`` frontmatter parsing and writing.

A document starts with a ``---`` line (leading blank lines allowed), carries
zero or more ``key: value`` lines, closes with another ``---`` line and is
followed by a free-form body. Values are plain strings; no YAML semantics.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

DELIMITER: Final[str] = "---"


class FrontmatterError(ValueError):
    """Raised when a document does not carry a well-formed frontmatter block."""


def parse_frontmatter(content: str) -> tuple[dict[str, str], str]:
    """Split ``content`` into its field map and body.

    Raises :class:`FrontmatterError` when the opening or closing delimiter is
    missing, or when a non-blank field line has no colon.
    """

    lines = content.split("\n")

    start = _find_opening_delimiter(lines)
    if start < 0:
        raise FrontmatterError("missing opening --- delimiter")

    end = -1
    for index in range(start + 1, len(lines)):
        if lines[index] == DELIMITER:
            end = index
            break
    if end < 0:
        raise FrontmatterError("missing closing --- delimiter")

    fields: dict[str, str] = {}
    for line_number, line in enumerate(lines[start + 1 : end], start=start + 2):
        if not line.strip():
            continue
        key, sep, value = line.partition(":")
        if not sep:
            raise FrontmatterError(f"line {line_number}: expected 'key: value', got {line!r}")
        fields[key.strip()] = value.strip()

    body = "\n".join(lines[end + 1 :])
    return fields, body


def write_frontmatter(fields: Mapping[str, str], body: str) -> str:
    """Render ``fields`` and ``body`` back to text with keys in sorted order."""

    parts = [DELIMITER, "\n"]
    for key in sorted(fields):
        parts.append(f"{key}: {fields[key]}\n")
    parts.append(DELIMITER)
    parts.append("\n")
    parts.append(body)
    return "".join(parts)


def _find_opening_delimiter(lines: list[str]) -> int:
    for index, line in enumerate(lines):
        if not line.strip():
            continue
        return index if line == DELIMITER else -1
    return -1


__all__ = ["DELIMITER", "FrontmatterError", "parse_frontmatter", "write_frontmatter"]
