"""Filesystem scanning for folder atlases.

Counts direct files, picks key source files by extension, and greps
export-like lines by prefix as a plain text heuristic: comments,
strings, and multi-line declarations are not understood. Unreadable or
missing folders produce empty scans rather than errors.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from ..project import SDK_DIRNAME
from .options import AtlasOptions
from .types import FolderScan

EXPORT_SCAN_READ_BYTES = 256 * 1024
BINARY_SNIFF_BYTES = 4_096

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_NAME_CONTROL_RE = re.compile(r"[\x00-\x08\x0a-\x1f\x7f-\x9f]")

logger = logging.getLogger(__name__)


def sanitize_line(text: str) -> str:
    """Escape control bytes so scanned text cannot corrupt documents or terminals."""
    if _CONTROL_RE.search(text) is None:
        return text
    out: list[str] = []
    for ch in text:
        code = ord(ch)
        if ch == "\t":
            out.append(ch)
            continue
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def sanitize_name(text: str) -> str:
    """Escape control bytes and line breaks in a folder or file name."""
    if _NAME_CONTROL_RE.search(text) is None:
        return text
    return _NAME_CONTROL_RE.sub(lambda match: f"\\x{ord(match.group()):02x}", text)


def is_skipped_dir_name(name: str, options: AtlasOptions) -> bool:
    """Return whether a directory basename is never indexed."""
    return name in options.ignore_dirs or name == SDK_DIRNAME or name.startswith(".")


def is_indexable_folder(folder: str, options: AtlasOptions) -> bool:
    """Return whether every component of a relative folder path is indexable."""
    parts = [part for part in folder.split("/") if part]
    if not parts or any(part in {".", ".."} for part in parts):
        return False
    return not any(is_skipped_dir_name(part, options) for part in parts)


def list_child_files(directory: Path) -> list[str]:
    """Return sorted names of regular files directly inside ``directory``."""
    names: list[str] = []
    try:
        with os.scandir(directory) as entries:
            for child in entries:
                try:
                    if child.is_file(follow_symlinks=False):
                        names.append(child.name)
                except OSError:
                    continue
    except OSError:
        return []
    names.sort()
    return names


def _list_child_dirs(directory: Path, options: AtlasOptions) -> list[str]:
    names: list[str] = []
    try:
        with os.scandir(directory) as entries:
            for child in entries:
                if is_skipped_dir_name(child.name, options):
                    continue
                try:
                    if child.is_dir(follow_symlinks=False):
                        names.append(child.name)
                except OSError:
                    continue
    except OSError:
        return []
    names.sort()
    return names


def _iter_files_recursive(directory: Path, options: AtlasOptions):
    """Yield files under ``directory`` in sorted, depth-first order."""
    for dirpath, dirnames, filenames in os.walk(directory, onerror=None, followlinks=False):
        dirnames[:] = sorted(name for name in dirnames if not is_skipped_dir_name(name, options))
        for name in sorted(filenames):
            yield Path(dirpath) / name


def _read_text_sample(path: Path) -> str | None:
    """Read up to ``EXPORT_SCAN_READ_BYTES`` of a text file; ``None`` for binary."""
    try:
        with path.open("rb") as handle:
            sample = handle.read(EXPORT_SCAN_READ_BYTES)
    except OSError:
        return None
    if b"\x00" in sample[:BINARY_SNIFF_BYTES]:
        return None
    return sample.decode("utf-8", errors="replace")


def truncate_line(line: str, width: int) -> str:
    return line[:width]


def collect_exports(directory: Path, options: AtlasOptions) -> tuple[str, ...]:
    """Collect lines starting with an export prefix, bounded and truncated."""
    found: list[str] = []
    if options.max_exports <= 0:
        return ()
    for path in _iter_files_recursive(directory, options):
        text = _read_text_sample(path)
        if text is None:
            continue
        for raw_line in text.splitlines():
            if not raw_line.startswith(options.export_prefixes):
                continue
            line = sanitize_line(raw_line.rstrip())
            found.append(truncate_line(line, options.export_line_width))
            if len(found) >= options.max_exports:
                return tuple(found)
    return tuple(found)


def scan_folder(root: Path, folder: str, options: AtlasOptions) -> FolderScan:
    """Scan ``root/folder``; a missing or unreadable folder yields an empty scan."""
    directory = root / folder
    if not directory.is_dir():
        logger.debug("scan skipped, not a directory: %s", directory)
        return FolderScan(folder=folder)

    files = list_child_files(directory)
    extensions = tuple(ext.lower() for ext in options.source_extensions)
    key_files = [name for name in files if os.path.splitext(name)[1].lower() in extensions]
    return FolderScan(
        folder=folder,
        file_count=len(files),
        key_files=tuple(key_files[: options.max_key_files]),
        exports=collect_exports(directory, options),
    )


def enumerate_folders(root: Path, options: AtlasOptions) -> list[str]:
    """Return indexable folders down to ``max_depth``, sorted and capped.

    Paths are relative to ``root`` with ``/`` separators. The root itself is
    never listed.
    """
    folders: list[str] = []
    frontier: list[tuple[Path, str]] = [(root, "")]
    for _level in range(options.max_depth):
        next_frontier: list[tuple[Path, str]] = []
        for directory, prefix in frontier:
            for name in _list_child_dirs(directory, options):
                relative = f"{prefix}/{name}" if prefix else name
                folders.append(relative)
                next_frontier.append((directory / name, relative))
        frontier = next_frontier
    folders.sort()
    return folders[: options.max_folders]


def list_domains(root: Path, options: AtlasOptions) -> list[str]:
    """Return sorted top-level indexable directory names."""
    return _list_child_dirs(root, options)


def normalize_folder(root: Path, folder: str) -> str | None:
    """Normalize a user-supplied folder to a root-relative ``/`` path.

    Returns ``None`` for paths outside ``root`` or the root itself.
    """
    candidate = Path(folder)
    absolute = candidate if candidate.is_absolute() else root / candidate
    try:
        relative = absolute.resolve().relative_to(root.resolve())
    except (OSError, ValueError):
        return None
    text = relative.as_posix()
    if text in {"", "."}:
        return None
    return text


__all__ = [
    "sanitize_line",
    "sanitize_name",
    "is_skipped_dir_name",
    "is_indexable_folder",
    "list_child_files",
    "collect_exports",
    "scan_folder",
    "enumerate_folders",
    "list_domains",
    "normalize_folder",
    "truncate_line",
]
