"""``install``: write bundled skills, subagents, and templates, with a manifest.

Every path written is recorded in the manifest; anything overwritten is first
copied into the backup directory and recorded as a backup.
"""

from __future__ import annotations

import argparse
import logging
import shutil
from datetime import datetime
from pathlib import Path

from .. import bundle, templates
from ..console import Console
from ..manifest import (
    FILE_TYPE_CONFIG,
    FILE_TYPE_MEMORY,
    FILE_TYPE_SKILL,
    FILE_TYPE_SUBAGENT,
    FILE_TYPE_TEMPLATE,
    INSTALL_GLOBAL,
    INSTALL_PROJECT,
    InstallTarget,
    Manifest,
    install_target,
    save_manifest,
)
from ..project import ProjectPaths
from ..settings import SDK_VERSION, Settings

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "settings.json"


def backup_existing(path: Path, target: InstallTarget, manifest: Manifest, stamp: str) -> Path | None:
    """Copy an existing ``path`` into the backup directory and record it."""
    if not path.exists():
        return None
    target.backup_dir.mkdir(parents=True, exist_ok=True)
    suffix = ".bak" if path.is_file() else ""
    backup = target.backup_dir / f"{path.name}.{stamp}{suffix}"
    if path.is_dir():
        shutil.copytree(path, backup, symlinks=True)
    else:
        shutil.copy2(path, backup)
    manifest.add_backup(path, backup)
    logger.debug("backed up %s to %s", path, backup)
    return backup


def _replace_dir(path: Path, files: list[tuple[str, str]]) -> None:
    if path.is_dir():
        shutil.rmtree(path)
    path.mkdir(parents=True)
    for name, text in files:
        (path / name).write_text(text, encoding="utf-8")


class Installer:
    """Applies one install run, collecting manifest entries as it goes."""

    def __init__(self, target: InstallTarget, console: Console, dry_run: bool, stamp: str) -> None:
        self.target = target
        self.console = console
        self.dry_run = dry_run
        self.stamp = stamp
        self.manifest = Manifest.create(SDK_VERSION, target.kind, target.root)
        self.failed = 0

    def install_dir(self, path: Path, files: list[tuple[str, str]], file_type: str) -> bool:
        if self.dry_run:
            self.console.dry_run(f"Write {path}")
            return True
        try:
            backup_existing(path, self.target, self.manifest, self.stamp)
            _replace_dir(path, files)
        except OSError as exc:
            logger.warning("failed to install %s: %s", path, exc)
            self.console.warn(f"  Could not install {path}: {exc}")
            self.failed += 1
            return False
        self.manifest.add_file(path, file_type)
        return True

    def install_file(self, path: Path, text: str, file_type: str, force: bool) -> bool:
        if path.exists() and not force:
            self.console.info(f"  {path.name} exists")
            return False
        if self.dry_run:
            self.console.dry_run(f"Create {path}")
            return True
        try:
            backup_existing(path, self.target, self.manifest, self.stamp)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            logger.warning("failed to write %s: %s", path, exc)
            self.console.warn(f"  Could not create {path}: {exc}")
            self.failed += 1
            return False
        self.manifest.add_file(path, file_type)
        self.console.info(f"  Created: {path.name}")
        return True


def _update_claude_settings(installer: Installer, settings: Settings) -> None:
    path = settings.claude_home / SETTINGS_FILENAME
    if installer.dry_run:
        installer.console.dry_run(f"{'Backup' if path.exists() else 'Create'} {path}")
        return
    if path.exists():
        backup_existing(path, installer.target, installer.manifest, installer.stamp)
        installer.console.info(f"  Backed up {SETTINGS_FILENAME}")
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(templates.SETTINGS_TEMPLATE, encoding="utf-8")
    installer.manifest.add_file(path, FILE_TYPE_CONFIG)
    installer.manifest.settings_modified.append(str(path))
    installer.console.info(f"  Created: {SETTINGS_FILENAME}")


def _seed_project(installer: Installer, paths: ProjectPaths, force: bool) -> None:
    installer.install_file(paths.instructions_file, templates.INSTRUCTIONS_TEMPLATE, FILE_TYPE_CONFIG, force)
    seeds = [
        (paths.atlas_file, templates.ATLAS_TEMPLATE),
        (paths.contract_file, templates.CONTRACT_TEMPLATE),
        *((paths.memory_dir / name, text) for name, text in templates.MEMORY_TEMPLATES),
    ]
    for path, text in seeds:
        installer.install_file(path, text, FILE_TYPE_MEMORY, force)
    if installer.dry_run:
        installer.console.dry_run(f"mkdir -p {paths.atlas_dir}")
    else:
        paths.atlas_dir.mkdir(parents=True, exist_ok=True)


def _print_summary(console: Console, kind: str, root: Path, skills: int, subagents: int) -> None:
    console.header("Installation Summary")
    console.line()
    console.line(f"  Type:       {kind}")
    console.line(f"  Location:   {root}")
    console.line(f"  Skills:     {skills} installed")
    console.line(f"  Subagents:  {subagents} installed")
    console.line()
    console.success("Installation complete!")
    console.line()
    console.line("Next steps:")
    if kind == INSTALL_GLOBAL:
        console.line("  1. Navigate to your project: cd your-project")
        console.line("  2. Initialize the memory layer: based-claude init")
        console.line("  3. Build the repo atlas: based-claude atlas build")
    else:
        console.line("  1. Run 'based-claude atlas build' to generate the Repo Atlas")
        console.line("  2. Edit CONTRACT.md to customize agent permissions")
        console.line("  3. Start a Claude session; it reads CLAUDE.md automatically")


def run(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    paths = ProjectPaths.locate(settings.cwd)
    target = install_target(args.target, settings, paths)

    console.header("based-claude installer")
    console.line()
    console.line(f"Install type: {target.kind}")
    console.line(f"Target path:  {target.root}")
    console.line()
    if args.dry_run:
        console.notice("DRY-RUN MODE - No changes will be made")
        console.line()

    if target.manifest_path.exists() and not args.force:
        console.warn(f"based-claude already installed at {target.root}")
        console.line("Use --force to reinstall (backups will be created)")
        return 1

    installer = Installer(target, console, args.dry_run, datetime.now().strftime("%Y%m%d_%H%M%S"))

    console.step(1, "Creating directories...")
    for directory in (target.root, target.root / "skills", target.root / "subagents"):
        if args.dry_run:
            console.dry_run(f"mkdir -p {directory}")
        else:
            directory.mkdir(parents=True, exist_ok=True)

    console.step(2, "Installing skills...")
    skills = 0
    for item in bundle.SKILLS:
        if installer.install_dir(target.root / "skills" / item.name, [(bundle.SKILL_MARKER, item.render())], FILE_TYPE_SKILL):
            console.info(f"  {item.name}")
            skills += 1

    console.step(3, "Installing subagents...")
    subagents = 0
    for item in bundle.SUBAGENTS:
        if installer.install_dir(target.root / "subagents" / item.name, [(bundle.AGENT_MARKER, item.render())], FILE_TYPE_SUBAGENT):
            console.info(f"  {item.name}")
            subagents += 1

    console.step(4, "Installing templates...")
    installer.install_dir(target.root / "templates", list(bundle.TEMPLATE_FILES), FILE_TYPE_TEMPLATE)

    if target.kind == INSTALL_GLOBAL:
        console.step(5, "Updating Claude settings...")
        _update_claude_settings(installer, settings)
    else:
        console.step(5, "Initializing memory layer...")
        _seed_project(installer, paths, args.force)

    if args.dry_run:
        console.line()
        console.notice("DRY-RUN complete. Run without --dry-run to apply changes.")
        return 0

    save_manifest(target.manifest_path, installer.manifest)
    if installer.failed:
        console.warn(f"{installer.failed} items could not be installed")
    _print_summary(console, target.kind, target.root, skills, subagents)
    return 0


def register(subparsers) -> None:
    parser = subparsers.add_parser("install", help="Install bundled skills, subagents, and templates")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--global", dest="target", action="store_const", const=INSTALL_GLOBAL, help="Install into the Claude home directory")
    target.add_argument("--project", dest="target", action="store_const", const=INSTALL_PROJECT, help="Install into this project's .claude-sdk")
    parser.add_argument("--force", action="store_true", help="Reinstall over an existing installation")
    parser.add_argument("--dry-run", action="store_true", help="Preview changes without writing")
    parser.set_defaults(handler=run)


__all__ = ["Installer", "backup_existing", "register", "run"]
