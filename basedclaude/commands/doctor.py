"""``doctor``: health checks for installs, dependencies, memory files, atlas."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass

from .. import bundle
from ..atlas.drift import detect_drift
from ..atlas.options import load_atlas_options
from ..atlas.types import DRIFT_FRESH, DRIFT_MISSING
from ..console import Console
from ..errors import MalformedInputError
from ..git import git_version, open_repo
from ..manifest import INSTALL_GLOBAL, INSTALL_PROJECT, InstallTarget, install_target, load_manifest
from ..project import ProjectPaths
from ..settings import Settings

logger = logging.getLogger(__name__)

CHECK_PASSED = 0
CHECK_FAILED = 1
CHECK_WARNING = 2


@dataclass
class DoctorReport:
    passed: int = 0
    warnings: int = 0
    failed: int = 0

    def record(self, outcome: int) -> None:
        if outcome == CHECK_PASSED:
            self.passed += 1
        elif outcome == CHECK_WARNING:
            self.warnings += 1
        else:
            self.failed += 1

    @property
    def exit_code(self) -> int:
        if self.failed == 0 and self.warnings == 0:
            return 0
        if self.passed == 0:
            return 1
        return 2


def _check_marked_dirs(console: Console, label: str, directory, marker: str, verbose: bool) -> int:
    if not directory.is_dir():
        console.warn(f"{label}: directory missing")
        return CHECK_WARNING
    entries = sorted(child for child in directory.iterdir() if child.is_dir())
    incomplete = [child.name for child in entries if not (child / marker).is_file()]
    console.success(f"{label}: {len(entries)} installed")
    if verbose:
        for child in entries:
            state = f"missing {marker}" if child.name in incomplete else "OK"
            console.line(f"    {child.name}: {state}")
    if incomplete:
        console.warn(f"{label}: missing {marker} in {', '.join(incomplete)}")
        return CHECK_WARNING
    return CHECK_PASSED


def check_installation(console: Console, target: InstallTarget, verbose: bool) -> int:
    try:
        manifest = load_manifest(target.manifest_path)
    except MalformedInputError as exc:
        console.error(f"Manifest: {exc}")
        return CHECK_FAILED
    if manifest is None:
        console.dim("  Not installed")
        return CHECK_FAILED

    console.success("Manifest: found")
    if verbose:
        console.line(f"    Version: {manifest.version}")
        console.line(f"    Installed: {manifest.install_date or 'unknown'}")

    outcome = CHECK_PASSED
    for label, name, marker in (
        ("Skills", "skills", bundle.SKILL_MARKER),
        ("Subagents", "subagents", bundle.AGENT_MARKER),
    ):
        if _check_marked_dirs(console, label, target.root / name, marker, verbose) != CHECK_PASSED:
            outcome = CHECK_WARNING

    if (target.root / "templates").is_dir():
        console.success("Templates: found")
    else:
        console.warn("Templates: missing")
        outcome = CHECK_WARNING
    return outcome


def check_dependencies(console: Console, settings: Settings, report: DoctorReport) -> None:
    version = git_version(settings.git_executable)
    if version:
        console.success(f"git: {version}")
        report.record(CHECK_PASSED)
    else:
        console.warn("git: not installed")
        report.record(CHECK_WARNING)

    if settings.claude_home.is_dir():
        console.success(f"Claude home: {settings.claude_home}")
        report.record(CHECK_PASSED)
    else:
        console.warn(f"Claude home: {settings.claude_home} not found")
        report.record(CHECK_WARNING)


def memory_files(paths: ProjectPaths):
    return (
        paths.atlas_file,
        paths.memory_dir / "DECISIONS.md",
        paths.memory_dir / "INVARIANTS.md",
        paths.memory_dir / "TASKS.md",
        paths.contract_file,
    )


def check_memory_files(console: Console, paths: ProjectPaths) -> int:
    files = memory_files(paths)
    found = 0
    for path in files:
        if path.is_file():
            console.success(f"{path.name}: found")
            found += 1
        else:
            console.dim(f"  {path.name}: not initialized")
    console.line(f"  {found}/{len(files)} memory files initialized")
    if found < len(files):
        console.line("  Run 'based-claude init' to create missing files")
        return CHECK_WARNING
    return CHECK_PASSED


def check_atlas(console: Console, settings: Settings, paths: ProjectPaths) -> int:
    try:
        options = load_atlas_options(settings.atlas_overrides, project_config=paths.atlas_config)
    except MalformedInputError as exc:
        console.warn(f"Atlas config: {exc}")
        return CHECK_WARNING
    report = detect_drift(paths, options, open_repo(paths.root, settings.git_executable))
    if report.state == DRIFT_MISSING:
        console.warn("Atlas: not built (run 'based-claude atlas build')")
        return CHECK_WARNING
    outcome = CHECK_PASSED
    if report.state == DRIFT_FRESH:
        console.success(f"Atlas: current at {report.stored_revision}")
    else:
        console.warn(f"Atlas: {report.state} (built at {report.stored_revision or 'unknown'})")
        outcome = CHECK_WARNING
    if report.findings:
        console.warn(f"Atlas: {len(report.findings)} structural drift findings")
        outcome = CHECK_WARNING
    return outcome


def run(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    paths = ProjectPaths.locate(settings.cwd)
    kinds = [args.target] if args.target else [INSTALL_GLOBAL, INSTALL_PROJECT]
    report = DoctorReport()

    console.header("based-claude health check")
    console.line()
    for kind in kinds:
        console.heading(f"{kind.capitalize()} Installation")
        report.record(check_installation(console, install_target(kind, settings, paths), args.verbose))
        console.line()

    console.heading("System Dependencies")
    check_dependencies(console, settings, report)

    if INSTALL_PROJECT in kinds:
        console.line()
        console.heading("Memory Files")
        report.record(check_memory_files(console, paths))
        console.line()
        console.heading("Repo Atlas")
        report.record(check_atlas(console, settings, paths))

    console.header("Summary")
    console.line()
    if report.warnings:
        console.notice(f"{report.warnings} warnings found")
    code = report.exit_code
    if code == 0:
        console.success("All checks passed!")
    elif code == 2:
        console.notice("Some checks passed with warnings")
    else:
        console.error("Some checks failed")
    logger.debug("doctor: %s", report)
    return code


def register(subparsers) -> None:
    parser = subparsers.add_parser("doctor", help="Check installation and project health")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--global", dest="target", action="store_const", const=INSTALL_GLOBAL, help="Only check the global install")
    target.add_argument("--project", dest="target", action="store_const", const=INSTALL_PROJECT, help="Only check the project install")
    parser.add_argument("--verbose", action="store_true", help="Show per-item details")
    parser.set_defaults(handler=run, target=None)


__all__ = ["DoctorReport", "check_installation", "register", "run"]
