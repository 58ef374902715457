"""Install manifest persisted as JSON.

The manifest is the only record of what ``install`` created, so ``uninstall``
removes exactly ``files_installed`` and nothing else.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from .errors import MalformedInputError
from .project import ProjectPaths
from .settings import Settings

INSTALL_GLOBAL = "global"
INSTALL_PROJECT = "project"

FILE_TYPE_SKILL = "skill"
FILE_TYPE_SUBAGENT = "subagent"
FILE_TYPE_TEMPLATE = "template"
FILE_TYPE_CONFIG = "config"
FILE_TYPE_MEMORY = "memory"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstalledFile:
    path: str
    type: str


@dataclass(frozen=True)
class Backup:
    original: str
    backup: str


@dataclass
class Manifest:
    version: str
    install_type: str
    install_path: str
    install_date: str = ""
    files_installed: list[InstalledFile] = field(default_factory=list)
    backups_created: list[Backup] = field(default_factory=list)
    settings_modified: list[str] = field(default_factory=list)

    @classmethod
    def create(cls, version: str, install_type: str, install_path: Path, now: datetime | None = None) -> "Manifest":
        moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
        return cls(
            version=version,
            install_type=install_type,
            install_path=str(install_path),
            install_date=moment.strftime("%Y-%m-%dT%H:%M:%SZ"),
        )

    def add_file(self, path: Path, file_type: str) -> None:
        self.files_installed.append(InstalledFile(str(path), file_type))

    def add_backup(self, original: Path, backup: Path) -> None:
        self.backups_created.append(Backup(str(original), str(backup)))

    def to_dict(self) -> dict[str, object]:
        return {
            "version": self.version,
            "install_type": self.install_type,
            "install_path": self.install_path,
            "install_date": self.install_date,
            "files_installed": [{"path": item.path, "type": item.type} for item in self.files_installed],
            "backups_created": [{"original": item.original, "backup": item.backup} for item in self.backups_created],
            "settings_modified": list(self.settings_modified),
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Manifest":
        files: list[InstalledFile] = []
        for entry in data.get("files_installed") or []:
            if isinstance(entry, dict) and isinstance(entry.get("path"), str):
                files.append(InstalledFile(entry["path"], str(entry.get("type", ""))))
            else:
                logger.warning("ignoring malformed manifest entry: %r", entry)
        backups: list[Backup] = []
        for entry in data.get("backups_created") or []:
            if isinstance(entry, dict) and isinstance(entry.get("original"), str) and isinstance(entry.get("backup"), str):
                backups.append(Backup(entry["original"], entry["backup"]))
            else:
                logger.warning("ignoring malformed manifest backup: %r", entry)
        settings = data.get("settings_modified")
        return cls(
            version=str(data.get("version", "unknown")),
            install_type=str(data.get("install_type", "")),
            install_path=str(data.get("install_path", "")),
            install_date=str(data.get("install_date", "")),
            files_installed=files,
            backups_created=backups,
            settings_modified=[str(item) for item in settings] if isinstance(settings, list) else [],
        )


@dataclass(frozen=True)
class InstallTarget:
    """Where an install of one kind lives and keeps its bookkeeping."""

    kind: str
    root: Path
    manifest_path: Path
    backup_dir: Path


def install_target(kind: str, settings: Settings, paths: ProjectPaths) -> InstallTarget:
    if kind == INSTALL_GLOBAL:
        return InstallTarget(kind, settings.claude_home, settings.global_manifest_path, settings.global_backup_dir)
    return InstallTarget(kind, paths.sdk_dir, paths.manifest_path, paths.backup_dir)


def load_manifest(path: Path) -> Manifest | None:
    """Return the manifest at ``path``, or ``None`` when no install exists."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as exc:
        raise MalformedInputError(f"cannot read manifest {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedInputError(f"manifest {path} must contain a JSON object")
    return Manifest.from_dict(data)


def save_manifest(path: Path, manifest: Manifest) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(manifest.to_dict(), indent=4) + "\n", encoding="utf-8")


__all__ = [
    "Backup",
    "FILE_TYPE_CONFIG",
    "FILE_TYPE_MEMORY",
    "FILE_TYPE_SKILL",
    "FILE_TYPE_SUBAGENT",
    "FILE_TYPE_TEMPLATE",
    "INSTALL_GLOBAL",
    "INSTALL_PROJECT",
    "InstallTarget",
    "InstalledFile",
    "Manifest",
    "install_target",
    "load_manifest",
    "save_manifest",
]
