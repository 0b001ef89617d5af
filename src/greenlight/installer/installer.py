"""
greenlight: manifest installer.

File: src/greenlight/installer/installer.py

Purpose
- Copy the packaged Markdown manifest into a scope directory, remove it
  again, and report on what is present.

Functional requirements
- ``CLAUDE.md`` lands in the project root for local scope and in the scope
  directory for global scope; the conflict strategy applies to it alone.
- ``.greenlight-version`` records the installed version.
- Uninstall leaves ``CLAUDE.md`` in place but removes the conflict
  artifacts and any manifest directories left empty.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import structlog

from greenlight import __version__
from greenlight.errors import GreenlightError
from greenlight.installer.manifest import CLAUDE_FILE, MANIFEST, MANIFEST_DIRS, read_content
from greenlight.installer.scope import ConflictStrategy, Scope

VERSION_FILE: Final[str] = ".greenlight-version"
ALTERNATE_CLAUDE_FILE: Final[str] = "CLAUDE_GREENLIGHT.md"
BACKUP_SUFFIX: Final[str] = ".backup"

Emit = Callable[[str], None]

_LOGGER = structlog.get_logger(__name__)


class InstallError(GreenlightError):
    """Raised when the filesystem rejects an install or uninstall step."""


@dataclass(frozen=True, slots=True)
class CheckReport:
    total: int
    missing: tuple[str, ...] = ()
    empty: tuple[str, ...] = ()
    modified: tuple[str, ...] = ()
    version_missing: bool = False
    verified: bool = False

    @property
    def ok(self) -> bool:
        if self.missing or self.empty or self.modified:
            return False
        return self.verified or not self.version_missing


class Installer:
    """Install, uninstall and check the manifest for one scope."""

    def __init__(self, target_dir: Path, scope: Scope, *, emit: Emit) -> None:
        self.target_dir = target_dir
        self.scope = scope
        self._emit = emit

    @property
    def claude_path(self) -> Path:
        """Where ``CLAUDE.md`` lives for this scope."""

        if self.scope is Scope.LOCAL:
            return self.target_dir.parent / CLAUDE_FILE
        return self.target_dir / CLAUDE_FILE

    def destination(self, relative_path: str) -> Path:
        if relative_path == CLAUDE_FILE:
            return self.claude_path
        return self.target_dir.joinpath(*relative_path.split("/"))

    # -- install ------------------------------------------------------------

    def install(self, strategy: ConflictStrategy) -> None:
        try:
            for relative_path in MANIFEST:
                if relative_path == CLAUDE_FILE:
                    self._install_claude(strategy)
                    continue
                destination = self.destination(relative_path)
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_bytes(read_content(relative_path))
                self._emit(f"  installed {relative_path}")
            (self.target_dir / VERSION_FILE).write_text(f"{__version__}\n", encoding="utf-8")
        except OSError as exc:
            raise InstallError(f"install into {self.target_dir} failed: {exc}") from exc

        _LOGGER.info("manifest_installed", target=str(self.target_dir), scope=self.scope.value)
        self._emit(f"greenlight installed to {self.target_dir}")

    def _install_claude(self, strategy: ConflictStrategy) -> None:
        destination = self.claude_path
        content = read_content(CLAUDE_FILE)
        destination.parent.mkdir(parents=True, exist_ok=True)
        self._resolve_conflict(destination, content, strategy)
        self._emit(f"  installed {CLAUDE_FILE} -> {destination}")

    def _resolve_conflict(
        self, destination: Path, content: bytes, strategy: ConflictStrategy
    ) -> None:
        if not destination.exists():
            destination.write_bytes(content)
            return

        existing = destination.read_bytes()
        if strategy is ConflictStrategy.KEEP:
            (destination.parent / ALTERNATE_CLAUDE_FILE).write_bytes(content)
            self._emit(
                f"  existing {CLAUDE_FILE} kept; greenlight version saved as "
                f"{ALTERNATE_CLAUDE_FILE}"
            )
        elif strategy is ConflictStrategy.REPLACE:
            backup = destination.with_name(destination.name + BACKUP_SUFFIX)
            backup.write_bytes(existing)
            destination.write_bytes(content)
            self._emit(f"  existing {CLAUDE_FILE} backed up to {backup}")
        else:
            separator = b"" if not existing or existing.endswith(b"\n") else b"\n"
            destination.write_bytes(existing + separator + content)
            self._emit(f"  greenlight content appended to existing {CLAUDE_FILE}")

    # -- uninstall ----------------------------------------------------------

    def uninstall(self) -> None:
        try:
            for relative_path in MANIFEST:
                if relative_path == CLAUDE_FILE:
                    continue
                self.destination(relative_path).unlink(missing_ok=True)
                self._emit(f"  removed {relative_path}")
            (self.target_dir / VERSION_FILE).unlink(missing_ok=True)

            artifact_dir = self.claude_path.parent
            for name in (ALTERNATE_CLAUDE_FILE, CLAUDE_FILE + BACKUP_SUFFIX):
                artifact = artifact_dir / name
                if artifact.exists():
                    artifact.unlink()
                    self._emit(f"  removed {name}")

            for relative_dir in MANIFEST_DIRS:
                directory = self.target_dir.joinpath(*relative_dir.split("/"))
                if directory.is_dir() and not any(directory.iterdir()):
                    directory.rmdir()
        except OSError as exc:
            raise InstallError(f"uninstall from {self.target_dir} failed: {exc}") from exc

        _LOGGER.info("manifest_uninstalled", target=str(self.target_dir), scope=self.scope.value)
        self._emit(f"greenlight uninstalled from {self.target_dir}")

    # -- check --------------------------------------------------------------

    def check(self, *, verify: bool = False) -> CheckReport:
        missing: list[str] = []
        empty: list[str] = []
        modified: list[str] = []

        for relative_path in MANIFEST:
            destination = self.destination(relative_path)
            if not destination.is_file():
                self._emit(f"  MISSING  {relative_path}")
                missing.append(relative_path)
                continue
            data = destination.read_bytes()
            if not data:
                self._emit(f"  EMPTY    {relative_path}")
                empty.append(relative_path)
                continue
            if verify and _sha256(data) != _sha256(read_content(relative_path)):
                self._emit(f"  MODIFIED {relative_path}")
                modified.append(relative_path)

        version_path = self.target_dir / VERSION_FILE
        version_missing = not version_path.is_file()
        if version_missing:
            self._emit(f"  MISSING  {VERSION_FILE}")
        else:
            lines = version_path.read_text(encoding="utf-8").splitlines()
            self._emit(f"  version: {lines[0].strip() if lines else ''}")

        report = CheckReport(
            total=len(MANIFEST),
            missing=tuple(missing),
            empty=tuple(empty),
            modified=tuple(modified),
            version_missing=version_missing,
            verified=verify,
        )
        self._emit(_check_summary(report))
        return report


def _check_summary(report: CheckReport) -> str:
    total = report.total
    if report.verified:
        if report.ok:
            return f"all {total} files verified"
        good = total - len(report.missing) - len(report.empty) - len(report.modified)
        return (
            f"{good}/{total} files verified ({len(report.missing)} missing, "
            f"{len(report.empty)} empty, {len(report.modified)} modified)"
        )
    if report.ok:
        return f"all {total} files present"
    present = total - len(report.missing)
    return (
        f"{present}/{total} files present "
        f"({len(report.missing)} missing, {len(report.empty)} empty)"
    )


def _sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


__all__ = [
    "ALTERNATE_CLAUDE_FILE",
    "BACKUP_SUFFIX",
    "VERSION_FILE",
    "CheckReport",
    "InstallError",
    "Installer",
]
