"""Project root discovery and the tool's on-disk layout inside a project."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

VCS_MARKER = ".git"
SDK_DIRNAME = ".claude-sdk"
ATLAS_FILENAME = "ATLAS.md"
ATLAS_DIRNAME = "atlas"
MEMORY_DIRNAME = "memory"
ATLAS_CONFIG_FILENAME = "atlas.config"
PROJECT_MANIFEST_NAME = ".manifest.json"
PROJECT_BACKUP_DIRNAME = ".backups"
INSTRUCTIONS_FILENAME = "CLAUDE.md"
SKILLFILE_NAME = ".claude-skills.json"


def find_project_root(start: Path | None = None) -> Path:
    """Return the nearest ancestor of ``start`` holding a ``.git`` entry.

    Falls back to ``start`` itself (default: cwd) when no ancestor qualifies,
    so callers must accept an arbitrary directory as the "root".
    """
    origin = (start or Path.cwd()).resolve()
    current = origin
    while True:
        if (current / VCS_MARKER).exists():
            return current
        parent = current.parent
        if parent == current:
            return origin
        current = parent


@dataclass(frozen=True)
class ProjectPaths:
    """Absolute paths of every artifact the tool manages under ``root``."""

    root: Path

    @classmethod
    def locate(cls, start: Path | None = None) -> "ProjectPaths":
        return cls(find_project_root(start))

    @property
    def sdk_dir(self) -> Path:
        return self.root / SDK_DIRNAME

    @property
    def atlas_file(self) -> Path:
        return self.sdk_dir / ATLAS_FILENAME

    @property
    def atlas_dir(self) -> Path:
        return self.sdk_dir / ATLAS_DIRNAME

    @property
    def atlas_config(self) -> Path:
        return self.sdk_dir / ATLAS_CONFIG_FILENAME

    @property
    def memory_dir(self) -> Path:
        return self.sdk_dir / MEMORY_DIRNAME

    @property
    def contract_file(self) -> Path:
        return self.sdk_dir / "CONTRACT.md"

    @property
    def instructions_file(self) -> Path:
        return self.root / INSTRUCTIONS_FILENAME

    @property
    def manifest_path(self) -> Path:
        return self.sdk_dir / PROJECT_MANIFEST_NAME

    @property
    def backup_dir(self) -> Path:
        return self.sdk_dir / PROJECT_BACKUP_DIRNAME

    @property
    def skillfile(self) -> Path:
        return self.root / SKILLFILE_NAME

    @property
    def skills_dir(self) -> Path:
        return self.root / ".claude" / "skills"

    def relative(self, path: Path) -> str:
        """Render ``path`` relative to the root with ``/`` separators."""
        try:
            return path.resolve().relative_to(self.root).as_posix()
        except ValueError:
            return str(path)
