"""Incremental atlas refresh driven by recently changed files.

Only folders containing files changed in the refresh window are re-scanned.
The root atlas keeps its body; just ``BUILT:`` and ``COMMIT:`` are patched.
Without a prior build the refresh falls back to a full build.
"""

from __future__ import annotations

import logging
import posixpath
from datetime import datetime

from ..git import GitRepo, current_revision
from ..project import ProjectPaths
from .build import build_atlas, write_folder_atlas
from .options import AtlasOptions
from .render import UNBUILT_MARKER, format_timestamp
from .scan import is_indexable_folder
from .store import read_document, write_text_exact
from .types import BuildResult

logger = logging.getLogger(__name__)


def changed_folders(paths: ProjectPaths, options: AtlasOptions, changed: list[str]) -> list[str]:
    """Map changed paths to their distinct, still-indexable parent folders."""
    folders: list[str] = []
    seen: set[str] = set()
    for path in changed:
        folder = posixpath.dirname(path)
        if not folder or folder in seen:
            continue
        seen.add(folder)
        if not is_indexable_folder(folder, options):
            logger.debug("refresh skipping ignored folder %s", folder)
            continue
        if not (paths.root / folder).is_dir():
            logger.debug("refresh skipping vanished folder %s", folder)
            continue
        folders.append(folder)
    return folders


def has_previous_build(paths: ProjectPaths) -> bool:
    """Return whether the root atlas records a completed build."""
    root_document = read_document(paths.atlas_file)
    if root_document is None:
        return False
    built = root_document.get("BUILT")
    return bool(built) and built != UNBUILT_MARKER


def refresh_atlas(
    paths: ProjectPaths,
    options: AtlasOptions,
    repo: GitRepo | None,
    now: datetime | None = None,
) -> BuildResult:
    if not has_previous_build(paths):
        logger.info("no previous atlas build, running a full build")
        return build_atlas(paths, options, repo, now=now)

    root_document = read_document(paths.atlas_file)
    result = BuildResult(full_build=False)
    if repo is None:
        return result

    changed = repo.changed_files(
        options.refresh_window,
        limit=options.max_changed_files,
        diff_filter="ACMR",
    )
    result.changed_folders = changed_folders(paths, options, changed)
    if not result.changed_folders:
        return result

    for folder in result.changed_folders:
        try:
            result.written.append(write_folder_atlas(paths, folder, options))
        except OSError as exc:
            logger.warning("failed to refresh folder atlas for %s: %s", folder, exc)
            result.failed.append(folder)

    root_document.set("BUILT", format_timestamp(now))
    root_document.set("COMMIT", current_revision(repo))
    result.root_text = root_document.render()
    write_text_exact(paths.atlas_file, result.root_text)
    result.root_written = True
    return result


__all__ = ["changed_folders", "has_previous_build", "refresh_atlas"]
