"""Thin ``git`` subprocess queries used for revision and change tracking.

``open_repo`` returns ``None`` when git is not installed or the directory is
not inside a work tree; callers treat that as "version control unavailable".
Individual queries return ``None``/empty results on failure instead of raising.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

GIT_TIMEOUT_SECONDS = 10.0
CLONE_TIMEOUT_SECONDS = 300.0
NOT_A_REPO = "not-a-repo"
UNKNOWN_REVISION = "unknown"

logger = logging.getLogger(__name__)


def _run_git(
    executable: str,
    cwd: Path,
    args: list[str],
    timeout_seconds: float = GIT_TIMEOUT_SECONDS,
) -> subprocess.CompletedProcess[str] | None:
    try:
        return subprocess.run(
            [executable, "-C", str(cwd), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("git %s failed: %s", " ".join(args), exc)
        return None


@dataclass(frozen=True)
class GitRepo:
    """A work tree that ``git`` answered for."""

    root: Path
    executable: str = "git"

    def _output(self, args: list[str]) -> str | None:
        proc = _run_git(self.executable, self.root, args)
        if proc is None or proc.returncode != 0:
            return None
        return proc.stdout

    def short_head(self) -> str:
        """Return the abbreviated HEAD revision, ``unknown`` for unborn HEAD."""
        out = self._output(["rev-parse", "--short", "HEAD"])
        revision = out.strip() if out else ""
        return revision or UNKNOWN_REVISION

    def commit_count(self) -> int:
        out = self._output(["rev-list", "--count", "HEAD"])
        try:
            return int(out.strip()) if out else 0
        except ValueError:
            return 0

    def _window_base(self, window: int) -> str | None:
        """Return ``HEAD~k`` for the largest ``k <= window`` that exists."""
        count = self.commit_count()
        if count <= 0:
            return None
        depth = max(0, min(window, count - 1))
        return f"HEAD~{depth}" if depth else "HEAD"

    def changed_files(
        self,
        window: int,
        limit: int | None = None,
        diff_filter: str | None = None,
    ) -> list[str]:
        """List paths differing between the work tree and ``window`` commits ago.

        Paths are repository-relative with ``/`` separators, in git's order.
        The window is clamped to the available history; with no commits the
        result is empty.
        """
        base = self._window_base(window)
        if base is None:
            return []
        args = ["diff", "--name-only", "--no-color", "-z"]
        if diff_filter:
            args.append(f"--diff-filter={diff_filter}")
        args.append(base)
        out = self._output(args)
        if not out:
            return []
        paths = [item for item in out.split("\0") if item]
        if limit is not None:
            paths = paths[: max(0, limit)]
        return paths


def open_repo(root: Path, executable: str | None) -> GitRepo | None:
    """Return a ``GitRepo`` for ``root`` or ``None`` when git cannot serve it."""
    if executable is None:
        return None
    proc = _run_git(executable, root, ["rev-parse", "--is-inside-work-tree"])
    if proc is None or proc.returncode != 0 or proc.stdout.strip() != "true":
        return None
    return GitRepo(root=root, executable=executable)


def current_revision(repo: GitRepo | None) -> str:
    """Revision string recorded in ``COMMIT:`` lines."""
    if repo is None:
        return NOT_A_REPO
    return repo.short_head()


def git_version(executable: str | None) -> str | None:
    if executable is None:
        return None
    proc = _run_git(executable, Path.cwd(), ["--version"])
    if proc is None or proc.returncode != 0:
        return None
    return proc.stdout.strip() or None


def clone_shallow(executable: str, url: str, destination: Path, timeout_seconds: float = CLONE_TIMEOUT_SECONDS) -> bool:
    """Shallow-clone ``url`` into ``destination``; return whether it succeeded."""
    try:
        proc = subprocess.run(
            [executable, "clone", "--quiet", "--depth", "1", url, str(destination)],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("git clone %s failed: %s", url, exc)
        return False
    return proc.returncode == 0


__all__ = [
    "GitRepo",
    "NOT_A_REPO",
    "UNKNOWN_REVISION",
    "clone_shallow",
    "current_revision",
    "git_version",
    "open_repo",
]
