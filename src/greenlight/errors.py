"""Root of the greenlight exception hierarchy.

Each package defines its own subclasses next to the code that raises them;
the CLI router only needs to know about :class:`GreenlightError`.
"""

from __future__ import annotations


class GreenlightError(RuntimeError):
    """Base error for every failure the CLI reports as ``error: <message>``."""


class InvalidFlagError(GreenlightError, ValueError):
    """Raised when command-line flags are missing, conflicting, or malformed."""


__all__ = ["GreenlightError", "InvalidFlagError"]
