"""Domain datatypes for atlas scanning, rendering, and drift reporting."""

from __future__ import annotations

from dataclasses import dataclass, field

PROJECT_TYPE_UNKNOWN = "unknown"

DRIFT_FRESH = "fresh"
DRIFT_STALE = "stale"
DRIFT_UNKNOWN = "unknown"
DRIFT_MISSING = "missing"

FINDING_REMOVED = "removed"
FINDING_UNINDEXED = "unindexed"
FINDING_FILE_COUNT = "file-count"


@dataclass(frozen=True)
class ProjectProfile:
    """Classifier output: ecosystem type plus existing entry-point paths."""

    project_type: str = PROJECT_TYPE_UNKNOWN
    entry_points: tuple[str, ...] = ()
    name: str = ""


@dataclass(frozen=True)
class FolderScan:
    """Heuristic summary of one directory."""

    folder: str
    file_count: int = 0
    key_files: tuple[str, ...] = ()
    exports: tuple[str, ...] = ()

    @property
    def depth(self) -> int:
        return self.folder.count("/")


@dataclass(frozen=True)
class DriftFinding:
    kind: str
    folder: str
    detail: str = ""


@dataclass(frozen=True)
class DriftReport:
    """Ephemeral comparison of the root atlas against the live repository."""

    state: str
    stored_revision: str | None = None
    live_revision: str | None = None
    built_at: str | None = None
    changed_in_window: int | None = None
    window: int = 0
    folder_documents: int = 0
    findings: tuple[DriftFinding, ...] = ()

    @property
    def is_fresh(self) -> bool:
        return self.state == DRIFT_FRESH


@dataclass
class BuildResult:
    """Outcome counters for a full build or refresh."""

    written: list[str] = field(default_factory=list)
    pruned: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    changed_folders: list[str] = field(default_factory=list)
    root_text: str = ""
    root_written: bool = False
    full_build: bool = True


__all__ = [
    "PROJECT_TYPE_UNKNOWN",
    "DRIFT_FRESH",
    "DRIFT_STALE",
    "DRIFT_UNKNOWN",
    "DRIFT_MISSING",
    "FINDING_REMOVED",
    "FINDING_UNINDEXED",
    "FINDING_FILE_COUNT",
    "ProjectProfile",
    "FolderScan",
    "DriftFinding",
    "DriftReport",
    "BuildResult",
]
