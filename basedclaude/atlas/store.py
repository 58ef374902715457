"""Byte-exact reads and writes of atlas documents on disk.

Documents are decoded with ``surrogateescape`` and written back the same way,
with no newline translation, so user text survives a round trip unchanged.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .document import AtlasDocument
from .render import FOLDER_ATLAS_SUFFIX

FOLDER_PREFIX = "# FOLDER:"

logger = logging.getLogger(__name__)


def read_text_exact(path: Path) -> str | None:
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as exc:
        logger.warning("cannot read %s: %s", path, exc)
        return None
    return data.decode("utf-8", errors="surrogateescape")


def write_text_exact(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(text.encode("utf-8", errors="surrogateescape"))


def read_document(path: Path) -> AtlasDocument | None:
    text = read_text_exact(path)
    return AtlasDocument.parse(text) if text is not None else None


def folder_of(document: AtlasDocument) -> str | None:
    """Return the relative folder a folder atlas describes."""
    return document.first_text_with_prefix(FOLDER_PREFIX)


def list_folder_documents(atlas_dir: Path) -> dict[str, str | None]:
    """Map each ``*.atlas.md`` filename in ``atlas_dir`` to its ``# FOLDER:`` path."""
    documents: dict[str, str | None] = {}
    try:
        candidates = sorted(atlas_dir.glob(f"*{FOLDER_ATLAS_SUFFIX}"))
    except OSError:
        return documents
    for path in candidates:
        if not path.is_file():
            continue
        document = read_document(path)
        documents[path.name] = folder_of(document) if document is not None else None
    return documents


__all__ = [
    "read_text_exact",
    "write_text_exact",
    "read_document",
    "folder_of",
    "list_folder_documents",
]
