"""``init``: seed the memory layer inside the current project."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .. import templates
from ..console import Console
from ..errors import ConflictError
from ..project import ProjectPaths
from ..settings import Settings

logger = logging.getLogger(__name__)


def write_seed(path: Path, text: str, force: bool) -> None:
    """Write ``text`` to ``path``; an existing file is a conflict unless ``force``."""
    if path.exists() and not force:
        raise ConflictError(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _seed(console: Console, paths: ProjectPaths, path: Path, text: str, args: argparse.Namespace) -> int:
    label = paths.relative(path)
    if args.dry_run:
        if path.exists() and not args.force:
            console.info(f"  {label} exists (use --force to overwrite)")
            return 0
        console.dry_run(f"Create {path}")
        return 0
    try:
        write_seed(path, text, args.force)
    except ConflictError:
        console.info(f"  {label} exists (use --force to overwrite)")
        return 0
    except OSError as exc:
        logger.warning("failed to write %s: %s", path, exc)
        console.warn(f"  Could not create {label}: {exc}")
        return 0
    console.info(f"  Created: {label}")
    return 1


def run(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    paths = ProjectPaths.locate(settings.cwd)
    selected = args.atlas or args.memory or args.contract
    init_atlas = args.all or not selected or args.atlas
    init_memory = args.all or not selected or args.memory
    init_contract = args.all or not selected or args.contract

    console.header("Initializing Project Memory")
    console.line()
    console.line(f"Project: {paths.root}")
    console.line()
    if args.dry_run:
        console.notice("DRY-RUN MODE")
        console.line()
    else:
        for directory in (paths.sdk_dir, paths.memory_dir, paths.atlas_dir):
            directory.mkdir(parents=True, exist_ok=True)

    created = 0
    if init_atlas:
        console.step(1, "Initializing atlas...")
        created += _seed(console, paths, paths.atlas_file, templates.ATLAS_TEMPLATE, args)
    if init_memory:
        console.step(2, "Initializing memory files...")
        for name, text in templates.MEMORY_TEMPLATES:
            created += _seed(console, paths, paths.memory_dir / name, text, args)
    if init_contract:
        console.step(3, "Initializing Claude contract...")
        created += _seed(console, paths, paths.contract_file, templates.CONTRACT_TEMPLATE, args)

    console.step(4, "Initializing agent instructions...")
    created += _seed(console, paths, paths.instructions_file, templates.INSTRUCTIONS_TEMPLATE, args)

    gitignore = paths.sdk_dir / ".gitignore"
    if not args.dry_run and not gitignore.exists():
        gitignore.write_text(templates.SDK_GITIGNORE, encoding="utf-8")

    console.line()
    if args.dry_run:
        console.notice("DRY-RUN complete")
        return 0
    if created:
        console.success(f"Created {created} files")
        console.line()
        console.line("Next steps:")
        console.line("  1. Edit CONTRACT.md to set agent permissions")
        console.line("  2. Run 'based-claude atlas build' to generate the atlas")
        console.line("  3. Start recording decisions in DECISIONS.md")
    else:
        console.line("No new files created (all exist)")
    return 0


def register(subparsers) -> None:
    parser = subparsers.add_parser("init", help="Initialize memory files in the current project")
    parser.add_argument("--all", action="store_true", help="Initialize all memory files (default)")
    parser.add_argument("--atlas", action="store_true", help="Initialize the atlas template only")
    parser.add_argument("--memory", action="store_true", help="Initialize memory files only")
    parser.add_argument("--contract", action="store_true", help="Initialize the agent contract only")
    parser.add_argument("--force", action="store_true", help="Overwrite existing files")
    parser.add_argument("--dry-run", action="store_true", help="Preview changes without writing")
    parser.set_defaults(handler=run)


__all__ = ["register", "run", "write_seed"]
