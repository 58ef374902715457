"""Atlas generation and drift detection.

This package contains the repository map engine:
- project classification and folder scanning heuristics
- the line-record document model and renderers
- full builds, incremental refreshes, and drift reports
"""

from __future__ import annotations

from .types import BuildResult, DriftFinding, DriftReport, FolderScan, ProjectProfile
from .options import AtlasOptions, load_atlas_options
from .classify import classify_project
from .scan import enumerate_folders, list_domains, scan_folder
from .document import AtlasDocument
from .build import build_atlas
from .drift import detect_drift
from .refresh import refresh_atlas

__all__ = [
    "AtlasDocument",
    "AtlasOptions",
    "BuildResult",
    "DriftFinding",
    "DriftReport",
    "FolderScan",
    "ProjectProfile",
    "build_atlas",
    "classify_project",
    "detect_drift",
    "enumerate_folders",
    "list_domains",
    "load_atlas_options",
    "refresh_atlas",
    "scan_folder",
]
