"""``sync``: install team skills listed in the project skillfile.

Each entry names a skill and a source, either a local ``path`` or a git
``url`` with an optional ``#subdirectory``. A bad entry fails on its own and
the remaining entries are still processed.
"""

from __future__ import annotations

import argparse
import json
import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from .. import templates
from ..bundle import SKILL_MARKER
from ..console import Console
from ..errors import BasedClaudeError, MalformedInputError, MissingPrerequisiteError
from ..git import clone_shallow
from ..project import SKILLFILE_NAME, ProjectPaths
from ..settings import Settings

logger = logging.getLogger(__name__)

SYNC_INSTALLED = "installed"
SYNC_SKIPPED = "skipped"


@dataclass(frozen=True)
class SkillEntry:
    name: str
    path: str | None = None
    url: str | None = None


@dataclass
class SyncSummary:
    installed: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def exit_code(self) -> int:
        if self.failed and not (self.installed or self.skipped):
            return 1
        return 0


def load_skillfile(path: Path) -> list[object]:
    """Return the raw ``skills`` list; entries are validated one at a time."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise MalformedInputError(f"{path.name} is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise MalformedInputError(f"cannot read {path.name}: {exc}") from exc
    skills = data.get("skills") if isinstance(data, dict) else None
    if skills is None:
        return []
    if not isinstance(skills, list):
        raise MalformedInputError(f'"skills" in {path.name} must be a list')
    return skills


def parse_entry(index: int, raw: object) -> SkillEntry:
    if not isinstance(raw, dict):
        raise MalformedInputError(f"skill at index {index} is not an object")
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise MalformedInputError(f"skill at index {index} has no name")
    name = name.strip()
    if "/" in name or "\\" in name or name in {".", ".."}:
        raise MalformedInputError(f"skill name {name!r} is not a plain directory name")
    path = raw.get("path")
    url = raw.get("url")
    path = path if isinstance(path, str) and path else None
    url = url if isinstance(url, str) and url else None
    if path is None and url is None:
        raise MalformedInputError(f"skill '{name}' has no path or url")
    return SkillEntry(name=name, path=path, url=url)


def split_url(url: str) -> tuple[str, str]:
    """Split ``repo#subdir`` into the clone URL and the subdirectory."""
    repo_url, _sep, subdir = url.partition("#")
    return repo_url, subdir.strip("/")


def _copy_skill(source: Path, destination: Path) -> None:
    destination.mkdir(parents=True, exist_ok=True)
    shutil.copytree(source, destination, dirs_exist_ok=True, ignore=shutil.ignore_patterns(".git"))


def install_from_path(entry: SkillEntry, root: Path, destination: Path, dry_run: bool) -> None:
    source = Path(entry.path)
    if not source.is_absolute():
        source = root / source
    if not source.is_dir():
        raise BasedClaudeError(f"{entry.name}: source not found at {source}")
    if not (source / SKILL_MARKER).is_file():
        raise BasedClaudeError(f"{entry.name}: no {SKILL_MARKER} in {source}")
    if dry_run:
        return
    _copy_skill(source, destination)


def install_from_url(entry: SkillEntry, destination: Path, git_executable: str | None, dry_run: bool) -> None:
    repo_url, subdir = split_url(entry.url)
    if dry_run:
        return
    if git_executable is None:
        raise MissingPrerequisiteError("git", f"URL source of skill '{entry.name}'")
    with tempfile.TemporaryDirectory(prefix="based-claude-sync-") as tmp:
        checkout = Path(tmp) / "repo"
        if not clone_shallow(git_executable, repo_url, checkout):
            raise BasedClaudeError(f"{entry.name}: failed to clone {repo_url}")
        source = checkout / subdir if subdir else checkout
        if not (source / SKILL_MARKER).is_file():
            where = f" at {subdir}" if subdir else ""
            raise BasedClaudeError(f"{entry.name}: no {SKILL_MARKER} found in cloned repo{where}")
        _copy_skill(source, destination)


def sync_entry(entry: SkillEntry, paths: ProjectPaths, settings: Settings, dry_run: bool) -> str:
    destination = paths.skills_dir / entry.name
    if (destination / SKILL_MARKER).is_file():
        return SYNC_SKIPPED
    if entry.path is not None:
        install_from_path(entry, paths.root, destination, dry_run)
    else:
        install_from_url(entry, destination, settings.git_executable, dry_run)
    return SYNC_INSTALLED


def sync_skills(paths: ProjectPaths, settings: Settings, console: Console, dry_run: bool) -> SyncSummary:
    summary = SyncSummary()
    for index, raw in enumerate(load_skillfile(paths.skillfile)):
        try:
            entry = parse_entry(index, raw)
            outcome = sync_entry(entry, paths, settings, dry_run)
        except (BasedClaudeError, OSError) as exc:
            logger.debug("skill %d failed: %s", index, exc)
            console.warn(f"  {exc}")
            summary.failed += 1
            continue
        if outcome == SYNC_SKIPPED:
            if dry_run:
                console.dry_run(f"Skip {entry.name} (already installed)")
            summary.skipped += 1
            continue
        source = entry.path or entry.url
        if dry_run:
            console.dry_run(f"Install {entry.name} from {source}")
        else:
            console.success(f"  Installed {entry.name} (from {source})")
        summary.installed += 1
    return summary


def run_init(paths: ProjectPaths, console: Console, dry_run: bool) -> int:
    if paths.skillfile.exists():
        console.warn(f"{SKILLFILE_NAME} already exists")
        return 1
    if dry_run:
        console.dry_run(f"Would create {paths.skillfile}")
        return 0
    paths.skillfile.write_text(templates.SKILLFILE_TEMPLATE, encoding="utf-8")
    console.success(f"Created {SKILLFILE_NAME}")
    console.line()
    console.line("Add skills to the list, then run 'based-claude sync' to install them.")
    console.line(f"Commit {SKILLFILE_NAME} to your repo so teammates can sync too.")
    return 0


def run(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    paths = ProjectPaths.locate(settings.cwd)
    if args.action == "init":
        return run_init(paths, console, args.dry_run)

    if not paths.skillfile.is_file():
        console.warn(f"{SKILLFILE_NAME} not found in {paths.root}")
        console.line()
        console.line("Create one with: based-claude sync init")
        return 1

    console.header("Syncing Team Skills")
    console.line()
    if not load_skillfile(paths.skillfile):
        console.info(f"No skills listed in {SKILLFILE_NAME}")
        console.line('Add entries to the "skills" array and run sync again.')
        return 0

    summary = sync_skills(paths, settings, console, args.dry_run)
    console.line()
    console.line("─" * 37)
    if args.dry_run:
        console.line(f"Dry run: would install {summary.installed}, skip {summary.skipped}, fail {summary.failed}")
    else:
        console.success(f"Installed: {summary.installed}  Skipped: {summary.skipped}  Failed: {summary.failed}")
    return summary.exit_code


def register(subparsers) -> None:
    parser = subparsers.add_parser("sync", help="Install team skills listed in .claude-skills.json")
    parser.add_argument("action", nargs="?", choices=["init"], help="'init' creates an empty skillfile")
    parser.add_argument("--dry-run", action="store_true", help="Preview without installing")
    parser.set_defaults(handler=run)


__all__ = [
    "SkillEntry",
    "SyncSummary",
    "load_skillfile",
    "parse_entry",
    "register",
    "run",
    "split_url",
    "sync_skills",
]
