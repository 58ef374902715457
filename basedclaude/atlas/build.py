"""Full atlas build: scan folders, write folder atlases, write the root atlas.

A full build overwrites generated facts unconditionally but re-splices the
user-owned parts of every previous document (root ``## NOTES`` body, any
user ``PURPOSE:`` line, folder notes). One folder failing is logged and
counted; it never stops the rest of the build.
"""

from __future__ import annotations

import logging
from datetime import datetime

from ..git import GitRepo, current_revision
from ..project import ProjectPaths
from .classify import classify_project
from .options import AtlasOptions
from .render import (
    carried_purpose,
    folder_atlas_filename,
    format_timestamp,
    map_link,
    render_folder_atlas,
    render_root_atlas,
)
from .scan import enumerate_folders, list_domains, normalize_folder, scan_folder
from .store import list_folder_documents, read_document, write_text_exact
from .types import BuildResult

logger = logging.getLogger(__name__)


def write_folder_atlas(
    paths: ProjectPaths,
    folder: str,
    options: AtlasOptions,
    keep_user_text: bool = True,
    dry_run: bool = False,
) -> str:
    """Scan ``folder`` and (unless ``dry_run``) rewrite its atlas; return the filename."""
    filename = folder_atlas_filename(folder)
    target = paths.atlas_dir / filename
    previous = read_document(target) if keep_user_text else None
    scan = scan_folder(paths.root, folder, options)
    text = render_folder_atlas(
        scan,
        purpose=carried_purpose(previous),
        notes=previous.notes if previous is not None else None,
    )
    if not dry_run:
        write_text_exact(target, text)
    logger.debug("folder atlas %s: %d files, %d exports", folder, scan.file_count, len(scan.exports))
    return filename


def render_root_document(
    paths: ProjectPaths,
    options: AtlasOptions,
    repo: GitRepo | None,
    maps: list[str],
    now: datetime | None = None,
) -> str:
    """Render the root atlas, carrying notes and purpose from the one on disk."""
    previous = read_document(paths.atlas_file)
    return render_root_atlas(
        classify_project(paths.root),
        built_at=format_timestamp(now),
        revision=current_revision(repo),
        domains=list_domains(paths.root, options),
        maps=[map_link(name) for name in maps],
        purpose=carried_purpose(previous),
        notes=previous.notes if previous is not None else None,
    )


def _stale_documents(existing: dict[str, str | None], written: set[str], failed: set[str]) -> list[str]:
    """Return folder atlases a full build did not produce.

    Atlases of folders that are gone, newly ignored, or no longer enumerated
    are stale. An atlas whose folder failed to scan this run is kept on disk.
    """
    return [
        filename
        for filename, folder in existing.items()
        if filename not in written and (folder is None or folder not in failed)
    ]


def build_atlas(
    paths: ProjectPaths,
    options: AtlasOptions,
    repo: GitRepo | None,
    folder: str | None = None,
    full: bool = False,
    dry_run: bool = False,
    now: datetime | None = None,
) -> BuildResult:
    """Run a full build, or a single-folder build when ``folder`` is given.

    ``full`` discards previous folder atlases instead of splicing their user
    text. Building every folder removes atlases of folders it did not
    enumerate and links only the atlases it wrote; a single-folder build keeps
    every existing atlas linked.
    """
    result = BuildResult(full_build=folder is None)
    if folder is not None:
        relative = normalize_folder(paths.root, folder)
        if relative is None or not (paths.root / relative).is_dir():
            logger.warning("folder %s is not a directory under %s", folder, paths.root)
            result.failed.append(folder)
            targets: list[str] = []
        else:
            targets = [relative]
    else:
        targets = enumerate_folders(paths.root, options)

    existing = list_folder_documents(paths.atlas_dir)
    for target in targets:
        filename = folder_atlas_filename(target)
        if filename in result.written:
            logger.warning("folder %s maps to %s, already written for another folder", target, filename)
            result.failed.append(target)
            continue
        try:
            filename = write_folder_atlas(paths, target, options, keep_user_text=not full, dry_run=dry_run)
        except OSError as exc:
            logger.warning("failed to write folder atlas for %s: %s", target, exc)
            result.failed.append(target)
            continue
        result.written.append(filename)

    written = set(result.written)
    if folder is None:
        for filename in _stale_documents(existing, written, set(result.failed)):
            if not dry_run:
                try:
                    (paths.atlas_dir / filename).unlink()
                except OSError as exc:
                    logger.warning("failed to remove stale atlas %s: %s", filename, exc)
                    continue
            result.pruned.append(filename)

    if folder is None:
        maps = sorted(written)
    else:
        maps = sorted((set(existing) | written) - set(result.pruned))
    result.root_text = render_root_document(paths, options, repo, maps, now=now)
    if not dry_run:
        write_text_exact(paths.atlas_file, result.root_text)
        result.root_written = True
    return result


__all__ = [
    "build_atlas",
    "render_root_document",
    "write_folder_atlas",
]
