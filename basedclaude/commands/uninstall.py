"""``uninstall``: remove exactly what the manifest says ``install`` created."""

from __future__ import annotations

import argparse
import logging
import shutil
from pathlib import Path

from ..console import Console
from ..manifest import FILE_TYPE_MEMORY, INSTALL_GLOBAL, INSTALL_PROJECT, Manifest, install_target, load_manifest
from ..project import ProjectPaths
from ..settings import Settings

logger = logging.getLogger(__name__)


def remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def restore_path(backup: Path, original: Path) -> None:
    if backup.is_dir():
        shutil.copytree(backup, original, symlinks=True, dirs_exist_ok=True)
    else:
        original.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(backup, original)


def has_visible_files(directory: Path) -> bool:
    """Return whether any non-hidden file remains anywhere under ``directory``."""
    for path in directory.rglob("*"):
        relative = path.relative_to(directory)
        if any(part.startswith(".") for part in relative.parts):
            continue
        if not path.is_dir():
            return True
    return False


def remove_installed(manifest: Manifest, console: Console, keep_memory: bool, dry_run: bool) -> int:
    removed = 0
    for entry in manifest.files_installed:
        if keep_memory and entry.type == FILE_TYPE_MEMORY:
            logger.debug("keeping memory file %s", entry.path)
            continue
        path = Path(entry.path)
        if not path.exists() and not path.is_symlink():
            continue
        if dry_run:
            console.dry_run(f"rm -rf {path}")
            removed += 1
            continue
        try:
            remove_path(path)
        except OSError as exc:
            logger.warning("failed to remove %s: %s", path, exc)
            console.warn(f"  Could not remove {path}: {exc}")
            continue
        console.info(f"  Removed: {path}")
        removed += 1
    return removed


def restore_backups(manifest: Manifest, console: Console, dry_run: bool) -> int:
    restored = 0
    for entry in manifest.backups_created:
        backup, original = Path(entry.backup), Path(entry.original)
        if not backup.exists():
            continue
        if dry_run:
            console.dry_run(f"cp -r {backup} -> {original}")
            restored += 1
            continue
        try:
            restore_path(backup, original)
        except OSError as exc:
            logger.warning("failed to restore %s: %s", original, exc)
            console.warn(f"  Could not restore {original}: {exc}")
            continue
        console.info(f"  Restored: {original}")
        restored += 1
    return restored


def run(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    paths = ProjectPaths.locate(settings.cwd)
    target = install_target(args.target, settings, paths)

    console.header("based-claude uninstaller")
    console.line()
    console.line(f"Uninstall type: {target.kind}")
    console.line(f"Target path:    {target.root}")
    console.line()
    if args.dry_run:
        console.notice("DRY-RUN MODE - No changes will be made")
        console.line()

    manifest = load_manifest(target.manifest_path)
    if manifest is None:
        console.error(f"No installation found at {target.root}")
        console.line(f"Manifest not found: {target.manifest_path}")
        return 1

    console.step(1, "Removing installed files...")
    removed = remove_installed(manifest, console, args.keep_memory, args.dry_run)
    console.line(f"  {removed} items removed")

    if args.restore:
        console.step(2, "Restoring backups...")
        restore_backups(manifest, console, args.dry_run)

    console.step(3, "Cleaning up...")
    if args.dry_run:
        console.dry_run(f"rm {target.manifest_path}")
        if target.backup_dir.is_dir():
            console.dry_run(f"rm -rf {target.backup_dir}")
    else:
        target.manifest_path.unlink()
        if target.backup_dir.is_dir():
            shutil.rmtree(target.backup_dir)

    if target.kind == INSTALL_PROJECT and not args.keep_memory and target.root.is_dir():
        if not has_visible_files(target.root):
            if args.dry_run:
                console.dry_run(f"rm -rf {target.root}")
            else:
                shutil.rmtree(target.root)
                console.info("  Removed empty SDK directory")

    console.line()
    if args.dry_run:
        console.notice("DRY-RUN complete. Run without --dry-run to apply changes.")
        return 0
    console.success("Uninstall complete")
    if args.restore:
        console.line("Original files have been restored from backups.")
    return 0


def register(subparsers) -> None:
    parser = subparsers.add_parser("uninstall", help="Remove files recorded in the install manifest")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--global", dest="target", action="store_const", const=INSTALL_GLOBAL, help="Uninstall from the Claude home directory")
    target.add_argument("--project", dest="target", action="store_const", const=INSTALL_PROJECT, help="Uninstall from this project's .claude-sdk")
    parser.add_argument("--restore", action="store_true", help="Copy recorded backups back into place")
    parser.add_argument("--keep-memory", action="store_true", help="Keep memory files created by install")
    parser.add_argument("--dry-run", action="store_true", help="Preview changes without removing anything")
    parser.set_defaults(handler=run)


__all__ = [
    "has_visible_files",
    "register",
    "remove_installed",
    "restore_backups",
    "run",
]
