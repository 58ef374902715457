"""Drift detection between the recorded atlas and the live repository.

Freshness compares the stored ``COMMIT:`` with the live short revision. The
changed-file count uses a fixed window of recent history, not the range since
the stored revision. Structural findings (removed, unindexed, file-count)
are derived from the folder atlases.
"""

from __future__ import annotations

import logging

from ..git import NOT_A_REPO, UNKNOWN_REVISION, GitRepo
from ..project import ProjectPaths
from .document import AtlasDocument
from .options import AtlasOptions
from .scan import list_child_files, list_domains
from .store import folder_of, list_folder_documents, read_document
from .types import (
    DRIFT_FRESH,
    DRIFT_MISSING,
    DRIFT_STALE,
    DRIFT_UNKNOWN,
    FINDING_FILE_COUNT,
    FINDING_REMOVED,
    FINDING_UNINDEXED,
    DriftFinding,
    DriftReport,
)

MAP_PREFIX = "atlas/"

logger = logging.getLogger(__name__)


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def file_count_drifted(recorded: int, current: int, threshold: float) -> bool:
    """Return whether ``current`` moved more than ``threshold`` relative to ``recorded``."""
    return abs(current - recorded) / max(recorded, 1) > threshold


def indexed_folders(paths: ProjectPaths, root_document: AtlasDocument) -> dict[str, AtlasDocument]:
    """Return folder atlases linked from the root atlas, keyed by folder path."""
    folders: dict[str, AtlasDocument] = {}
    for link in root_document.values("MAP"):
        filename = link[len(MAP_PREFIX) :] if link.startswith(MAP_PREFIX) else link
        document = read_document(paths.atlas_dir / filename)
        if document is None:
            logger.debug("MAP link without document: %s", link)
            continue
        folder = folder_of(document)
        if folder:
            folders[folder] = document
    return folders


def structural_findings(
    paths: ProjectPaths,
    options: AtlasOptions,
    root_document: AtlasDocument,
) -> list[DriftFinding]:
    findings: list[DriftFinding] = []
    folders = indexed_folders(paths, root_document)

    for folder in sorted(folders):
        directory = paths.root / folder
        if not directory.is_dir():
            findings.append(DriftFinding(FINDING_REMOVED, folder, "folder no longer exists"))
            continue
        recorded = _parse_int(folders[folder].get("FILES"))
        if recorded is None:
            continue
        current = len(list_child_files(directory))
        if file_count_drifted(recorded, current, options.file_count_threshold):
            findings.append(DriftFinding(FINDING_FILE_COUNT, folder, f"{recorded} -> {current} files"))

    for domain in list_domains(paths.root, options):
        if domain not in folders:
            findings.append(DriftFinding(FINDING_UNINDEXED, domain, "top-level folder is not indexed"))
    return findings


def detect_drift(paths: ProjectPaths, options: AtlasOptions, repo: GitRepo | None) -> DriftReport:
    root_document = read_document(paths.atlas_file)
    if root_document is None:
        return DriftReport(state=DRIFT_MISSING)

    stored = root_document.get("COMMIT")
    built = root_document.get("BUILT")
    findings = tuple(structural_findings(paths, options, root_document))
    folder_documents = len(list_folder_documents(paths.atlas_dir))

    if repo is None:
        return DriftReport(
            state=DRIFT_UNKNOWN,
            stored_revision=stored,
            built_at=built,
            folder_documents=folder_documents,
            findings=findings,
        )

    live = repo.short_head()
    changed = len(repo.changed_files(options.status_window))
    if not stored or stored in {NOT_A_REPO, UNKNOWN_REVISION} or live == UNKNOWN_REVISION:
        state = DRIFT_UNKNOWN
    elif stored == live:
        state = DRIFT_FRESH
    else:
        state = DRIFT_STALE
    return DriftReport(
        state=state,
        stored_revision=stored,
        live_revision=live,
        built_at=built,
        changed_in_window=changed,
        window=options.status_window,
        folder_documents=folder_documents,
        findings=findings,
    )


__all__ = [
    "MAP_PREFIX",
    "detect_drift",
    "file_count_drifted",
    "indexed_folders",
    "structural_findings",
]
