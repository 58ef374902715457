"""Text renderers for root and folder atlas documents.

Output is line-oriented, one ``TAG: value`` fact per line, so agents can find
facts with plain substring search. User-owned parts (``PURPOSE:`` text and the
``## NOTES`` body) are passed in from the previous document and re-spliced.
"""

from __future__ import annotations

from datetime import datetime, timezone

from .document import AtlasDocument
from .scan import sanitize_name
from .types import FolderScan, ProjectProfile

FOLDER_ATLAS_SUFFIX = ".atlas.md"
ROOT_PURPOSE_PLACEHOLDER = "[One-line description]"
FOLDER_PURPOSE_PLACEHOLDER = "[Auto-detected folder]"
UNBUILT_MARKER = "not-yet-built"
PURPOSE_PLACEHOLDERS = frozenset({ROOT_PURPOSE_PLACEHOLDER, FOLDER_PURPOSE_PLACEHOLDER, ""})

DEFAULT_NOTES = (
    "\n"
    "\n"
    "Add your own notes about the codebase architecture here.\n"
    "This section is preserved across atlas rebuilds.\n"
)

ROOT_HEADER = (
    "# REPO ATLAS",
    "# Auto-generated by based-claude",
    "# Human-editable - the NOTES section is preserved on rebuild",
)

ROOT_SEARCH_ANCHORS = (
    ("TODO", "Find todos"),
    ("FIXME", "Find fixmes"),
    ("export (function|const|class)", "Find exports"),
    (r"@route|@api|router\.", "Find API routes"),
    (r"describe\(|it\(|test\(", "Find tests"),
)

FOLDER_SEARCH_PATTERNS = ("function.*(", "class ", "interface ", "export ")


def format_timestamp(moment: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp with second precision."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def folder_atlas_filename(folder: str) -> str:
    return folder.replace("/", "_") + FOLDER_ATLAS_SUFFIX


def map_link(filename: str) -> str:
    return f"atlas/{filename}"


def carried_purpose(previous: AtlasDocument | None) -> str | None:
    """Return a user-written ``PURPOSE:`` from ``previous``, ignoring placeholders."""
    if previous is None:
        return None
    value = previous.get("PURPOSE")
    if value is None or value in PURPOSE_PLACEHOLDERS:
        return None
    return value


def render_root_atlas(
    profile: ProjectProfile,
    built_at: str,
    revision: str,
    domains: list[str],
    maps: list[str],
    purpose: str | None = None,
    notes: str | None = None,
) -> str:
    """Render the root atlas; ``notes`` of ``None`` seeds the placeholder."""
    lines = [
        *ROOT_HEADER,
        "",
        f"BUILT: {built_at}",
        f"COMMIT: {revision}",
        f"TYPE: {profile.project_type}",
        "",
        "## OVERVIEW",
        "",
        f"PROJECT: {profile.name}",
        f"PURPOSE: {purpose or ROOT_PURPOSE_PLACEHOLDER}",
        "",
        "## ENTRY POINTS",
        "",
    ]
    lines.extend(f"ENTRY: {entry}" for entry in profile.entry_points)
    lines.extend(["", "## MAJOR DOMAINS", ""])
    lines.extend(f"DOMAIN: {sanitize_name(domain)}/" for domain in domains)
    lines.extend(["", "## FOLDER MAPS", ""])
    lines.extend(f"MAP: {link}" for link in maps)
    lines.extend(["", "## SEARCH ANCHORS", "", "# Common grep patterns for this codebase:"])
    lines.extend(f'GREP: "{pattern}" - {description}' for pattern, description in ROOT_SEARCH_ANCHORS)
    lines.append("")
    document = AtlasDocument.from_lines(lines, notes=DEFAULT_NOTES if notes is None else notes)
    return document.render()


def render_folder_atlas(scan: FolderScan, purpose: str | None = None, notes: str | None = None) -> str:
    """Render one folder atlas; a ``notes`` body is only emitted when given."""
    folder = sanitize_name(scan.folder)
    lines = [
        f"# FOLDER: {folder}",
        "",
        f"PURPOSE: {purpose or FOLDER_PURPOSE_PLACEHOLDER}",
        f"DEPTH: {scan.depth}",
        f"FILES: {scan.file_count}",
        "",
        "## KEY FILES",
    ]
    lines.extend(f"FILE: {sanitize_name(name)}" for name in scan.key_files)
    lines.extend(["", "## EXPORTS"])
    lines.extend(f"EXPORT: {line}" for line in scan.exports)
    lines.extend(["", "## SEARCH ANCHORS"])
    lines.extend(f'GREP: "{pattern}" in {folder}' for pattern in FOLDER_SEARCH_PATTERNS)
    if notes is not None:
        lines.append("")
    return AtlasDocument.from_lines(lines, notes=notes).render()


__all__ = [
    "FOLDER_ATLAS_SUFFIX",
    "DEFAULT_NOTES",
    "ROOT_PURPOSE_PLACEHOLDER",
    "FOLDER_PURPOSE_PLACEHOLDER",
    "UNBUILT_MARKER",
    "carried_purpose",
    "folder_atlas_filename",
    "format_timestamp",
    "map_link",
    "render_folder_atlas",
    "render_root_atlas",
]
