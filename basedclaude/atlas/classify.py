"""Project-type detection from root-level manifest files.

Markers are checked in a fixed order and the first match wins; there is no
scoring when a directory carries manifests for several ecosystems.
"""

from __future__ import annotations

from pathlib import Path

from .types import PROJECT_TYPE_UNKNOWN, ProjectProfile

# (type, marker files, entry-point candidates) in tie-break order.
PROJECT_MARKERS: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    ("node", ("package.json",), ("package.json", "src/index.ts", "src/index.js", "index.js")),
    ("python", ("pyproject.toml", "setup.py"), ("pyproject.toml", "setup.py", "main.py", "app.py")),
    ("go", ("go.mod",), ("go.mod", "main.go")),
    ("rust", ("Cargo.toml",), ("Cargo.toml", "src/main.rs", "src/lib.rs")),
)


def detect_project_type(root: Path) -> str:
    for project_type, markers, _candidates in PROJECT_MARKERS:
        if any((root / marker).is_file() for marker in markers):
            return project_type
    return PROJECT_TYPE_UNKNOWN


def entry_points_for(root: Path, project_type: str) -> tuple[str, ...]:
    """Return the conventional entry files for ``project_type`` that exist."""
    for candidate_type, _markers, candidates in PROJECT_MARKERS:
        if candidate_type == project_type:
            return tuple(path for path in candidates if (root / path).is_file())
    return ()


def classify_project(root: Path) -> ProjectProfile:
    project_type = detect_project_type(root)
    return ProjectProfile(
        project_type=project_type,
        entry_points=entry_points_for(root, project_type),
        name=root.name or str(root),
    )


__all__ = [
    "PROJECT_MARKERS",
    "classify_project",
    "detect_project_type",
    "entry_points_for",
]
