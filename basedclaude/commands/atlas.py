"""``atlas build|refresh|status|clean`` command handlers."""

from __future__ import annotations

import argparse
import logging
import shutil
from pathlib import Path

from ..atlas.build import build_atlas
from ..atlas.drift import detect_drift
from ..atlas.options import AtlasOptions, load_atlas_options
from ..atlas.refresh import has_previous_build, refresh_atlas
from ..atlas.types import DRIFT_FRESH, DRIFT_MISSING, DRIFT_STALE, DriftReport
from ..console import Console
from ..errors import MissingPrerequisiteError
from ..git import open_repo
from ..project import ProjectPaths
from ..settings import Settings

logger = logging.getLogger(__name__)


def _options(args: argparse.Namespace, settings: Settings, paths: ProjectPaths) -> AtlasOptions:
    explicit = getattr(args, "config", None)
    explicit_path = None
    if explicit:
        explicit_path = Path(explicit)
        if not explicit_path.is_absolute():
            explicit_path = settings.cwd / explicit_path
    options = load_atlas_options(
        user_overrides=settings.atlas_overrides,
        project_config=paths.atlas_config,
        explicit_config=explicit_path,
    )
    logger.debug("atlas options: %s", options)
    return options


def print_drift(console: Console, report: DriftReport) -> None:
    """Print the freshness verdict and structural findings of ``report``."""
    if report.state == DRIFT_MISSING:
        console.warn("No atlas found")
        console.line("Run 'based-claude atlas build' to create one")
        return
    if report.state == DRIFT_FRESH:
        console.success("Atlas is current")
    elif report.state == DRIFT_STALE:
        console.warn(
            f"Atlas may be stale (built at {report.stored_revision}, now at {report.live_revision})"
        )
        console.line("Run 'based-claude atlas refresh' to update")
    else:
        console.info("Freshness unknown (no git history or no recorded commit)")
    if report.changed_in_window is not None:
        console.line(f"Files changed in the last {report.window} commits: {report.changed_in_window}")
    for finding in report.findings:
        console.warn(f"{finding.kind}: {finding.folder} ({finding.detail})")


def run_build(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    paths = ProjectPaths.locate(settings.cwd)
    options = _options(args, settings, paths)
    repo = open_repo(paths.root, settings.git_executable)

    console.header("Building Repo Atlas")
    console.line()
    console.line(f"Project: {paths.root}")
    console.line()
    if args.dry_run:
        console.notice("DRY-RUN MODE")
        console.line()

    console.step(1, "Preparing atlas directory...")
    if not args.dry_run:
        paths.atlas_dir.mkdir(parents=True, exist_ok=True)

    console.step(2, "Analyzing codebase...")
    result = build_atlas(paths, options, repo, folder=args.folder, full=args.full, dry_run=args.dry_run)
    console.line(f"  {len(result.written)} folder atlases")
    if result.pruned:
        console.line(f"  {len(result.pruned)} stale folder atlases removed")
    if result.failed:
        console.warn(f"{len(result.failed)} folders failed: {', '.join(result.failed)}")

    console.step(3, "Generating root index...")
    if args.dry_run:
        console.line()
        console.preview(result.root_text, paths.atlas_file.name)
        console.line()
        console.dry_run(f"Write {paths.atlas_file}")
        for name in result.written:
            console.dry_run(f"Write {paths.atlas_dir / name}")
        for name in result.pruned:
            console.dry_run(f"Remove {paths.atlas_dir / name}")
        console.line()
        console.notice("DRY-RUN complete")
        return 0

    console.step(4, "Checking for drift...")
    print_drift(console, detect_drift(paths, options, repo))

    console.line()
    if result.failed and not result.written:
        console.error("No folder atlases were written")
        return 1
    console.success("Atlas built successfully")
    console.line()
    console.line("Files created:")
    console.line(f"  {paths.atlas_file}")
    for name in result.written:
        console.line(f"  {paths.atlas_dir / name}")
    return 0


def run_refresh(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    paths = ProjectPaths.locate(settings.cwd)
    options = _options(args, settings, paths)

    console.header("Refreshing Repo Atlas")
    console.line()
    if has_previous_build(paths):
        if not settings.git_available:
            raise MissingPrerequisiteError("git", "atlas refresh")
        repo = open_repo(paths.root, settings.git_executable)
        if repo is None:
            console.warn("Not a git repository; run 'based-claude atlas build' instead")
            return 1
    else:
        console.warn("No atlas found. Running full build...")
        repo = open_repo(paths.root, settings.git_executable)

    console.step(1, "Finding changed files...")
    result = refresh_atlas(paths, options, repo)
    if result.full_build:
        console.success(f"Atlas built ({len(result.written)} folder atlases)")
        return 0
    if not result.changed_folders:
        console.success("No changes detected. Atlas is up to date.")
        return 0

    console.line(f"  {len(result.changed_folders)} folders have changes")
    console.step(2, "Updating changed folders...")
    for folder in result.changed_folders:
        if folder in result.failed:
            console.warn(f"  Failed: {folder}")
        else:
            console.info(f"  Refreshing: {folder}")
    console.step(3, "Updating root index...")
    console.success("Atlas refreshed")
    return 0


def run_status(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    paths = ProjectPaths.locate(settings.cwd)
    options = _options(args, settings, paths)
    repo = open_repo(paths.root, settings.git_executable)
    report = detect_drift(paths, options, repo)

    console.header("Repo Atlas Status")
    console.line()
    if report.state == DRIFT_MISSING:
        print_drift(console, report)
        return 1

    console.line(f"Atlas file: {paths.atlas_file}")
    console.line()
    console.line(f"Last build: {report.built_at or 'unknown'}")
    console.line(f"At commit:  {report.stored_revision or 'unknown'}")
    console.line()
    console.heading("Freshness Check")
    print_drift(console, report)
    console.line()
    console.line(f"Folder atlases: {report.folder_documents}")
    return 0


def run_clean(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    paths = ProjectPaths.locate(settings.cwd)
    console.header("Cleaning Repo Atlas")
    console.line()

    removed = 0
    if paths.atlas_file.is_file():
        paths.atlas_file.unlink()
        console.info(f"Removed: {paths.atlas_file}")
        removed += 1
    if paths.atlas_dir.is_dir():
        shutil.rmtree(paths.atlas_dir)
        console.info(f"Removed: {paths.atlas_dir}/")
        removed += 1

    if removed:
        console.success(f"Cleaned {removed} items")
    else:
        console.line("Nothing to clean")
    return 0


def register(subparsers) -> None:
    parser = subparsers.add_parser("atlas", help="Build and check the repository atlas")
    atlas_commands = parser.add_subparsers(dest="atlas_command", metavar="COMMAND", required=True)

    build = atlas_commands.add_parser("build", help="Scan the repository and write every atlas")
    build.add_argument("--full", action="store_true", help="Discard folder atlases and regenerate from scratch")
    build.add_argument("--folder", metavar="PATH", help="Only rebuild the atlas for PATH")
    build.add_argument("--config", metavar="FILE", help="JSON atlas options file")
    build.add_argument("--dry-run", action="store_true", help="Preview without writing")
    build.set_defaults(handler=run_build)

    refresh = atlas_commands.add_parser("refresh", help="Rewrite atlases for recently changed folders")
    refresh.add_argument("--config", metavar="FILE", help="JSON atlas options file")
    refresh.set_defaults(handler=run_refresh)

    status = atlas_commands.add_parser("status", help="Report whether the atlas matches the repository")
    status.add_argument("--config", metavar="FILE", help="JSON atlas options file")
    status.set_defaults(handler=run_status)

    clean = atlas_commands.add_parser("clean", help="Remove the root atlas and all folder atlases")
    clean.set_defaults(handler=run_clean)


__all__ = [
    "print_drift",
    "register",
    "run_build",
    "run_clean",
    "run_refresh",
    "run_status",
]
