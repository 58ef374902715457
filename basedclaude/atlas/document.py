"""Line-record model for atlas markdown documents.

A document is parsed into an ordered list of records (tagged facts such as
``BUILT: ...``, ``## `` section headings, and opaque text) followed by an
optional notes body. Everything after the ``## NOTES`` heading is kept as one
opaque string, so re-serializing a parsed document reproduces the notes byte
for byte no matter what the user wrote there.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

NOTES_HEADING = "## NOTES"

_TAG_RE = re.compile(r"^([A-Z][A-Z0-9_]*):[ \t]?(.*)$")
_NOTES_RE = re.compile(r"^## NOTES[ \t]*\r?$", re.MULTILINE)


@dataclass(frozen=True)
class TagLine:
    """``TAG: value`` fact line. ``raw`` is the exact source text."""

    tag: str
    value: str
    raw: str

    @classmethod
    def make(cls, tag: str, value: str) -> "TagLine":
        return cls(tag=tag, value=value, raw=f"{tag}: {value}")


@dataclass(frozen=True)
class Heading:
    title: str
    raw: str


@dataclass(frozen=True)
class TextLine:
    raw: str


Record = TagLine | Heading | TextLine


def parse_line(line: str) -> Record:
    stripped = line.rstrip("\r")
    if stripped.startswith("## "):
        return Heading(title=stripped[3:].strip(), raw=line)
    match = _TAG_RE.match(stripped)
    if match:
        return TagLine(tag=match.group(1), value=match.group(2).strip(), raw=line)
    return TextLine(raw=line)


@dataclass
class AtlasDocument:
    """Parsed document: head records plus the verbatim notes body.

    ``notes`` is the text following the ``## NOTES`` heading line (starting
    with its line break), or ``None`` when the document has no notes section.
    """

    records: list[Record] = field(default_factory=list)
    notes: str | None = None
    notes_heading: str = NOTES_HEADING

    @classmethod
    def parse(cls, text: str) -> "AtlasDocument":
        match = _NOTES_RE.search(text)
        if match is None:
            return cls(records=[parse_line(line) for line in text.split("\n")])
        head = text[: match.start()]
        return cls(
            records=[parse_line(line) for line in head.split("\n")],
            notes=text[match.end() :],
            notes_heading=match.group(0),
        )

    @classmethod
    def from_lines(cls, lines: list[str], notes: str | None = None) -> "AtlasDocument":
        """Build a document from rendered head lines (no trailing newline)."""
        return cls(records=[parse_line(line) for line in [*lines, ""]], notes=notes)

    def render(self) -> str:
        head = "\n".join(record.raw for record in self.records)
        if self.notes is None:
            return head
        return head + self.notes_heading + self.notes

    def get(self, tag: str) -> str | None:
        """Return the value of the first ``tag`` line, or ``None``."""
        for record in self.records:
            if isinstance(record, TagLine) and record.tag == tag:
                return record.value
        return None

    def values(self, tag: str) -> list[str]:
        return [record.value for record in self.records if isinstance(record, TagLine) and record.tag == tag]

    def set(self, tag: str, value: str) -> bool:
        """Replace the first ``tag`` line in place; return whether one existed."""
        for index, record in enumerate(self.records):
            if isinstance(record, TagLine) and record.tag == tag:
                self.records[index] = TagLine.make(tag, value)
                return True
        return False

    def first_text_with_prefix(self, prefix: str) -> str | None:
        for record in self.records:
            raw = record.raw.rstrip("\r")
            if isinstance(record, TextLine) and raw.startswith(prefix):
                return raw[len(prefix) :].strip()
        return None


__all__ = [
    "NOTES_HEADING",
    "TagLine",
    "Heading",
    "TextLine",
    "Record",
    "AtlasDocument",
    "parse_line",
]
