"""User-facing console output.

``Console`` prints tagged status lines (INFO/OK/WARN/ERROR), numbered steps,
headers, and dry-run notices using a semantic ANSI palette. When color is
disabled every palette entry is empty so output stays plain text.
Markdown previews are highlighted with Pygments.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.util import ClassNotFound


@dataclass(frozen=True)
class Palette:
    """Semantic ANSI palette used by console output."""

    red: str
    green: str
    yellow: str
    blue: str
    cyan: str
    bold: str
    dim: str
    reset: str


COLOR_PALETTE = Palette(
    red="\033[0;31m",
    green="\033[0;32m",
    yellow="\033[0;33m",
    blue="\033[0;34m",
    cyan="\033[0;36m",
    bold="\033[1m",
    dim="\033[2m",
    reset="\033[0m",
)

PLAIN_PALETTE = Palette(red="", green="", yellow="", blue="", cyan="", bold="", dim="", reset="")


def highlight_document(text: str, filename: str) -> str:
    """Return ``text`` colorized for a terminal, picking a lexer from ``filename``."""
    try:
        lexer = get_lexer_for_filename(filename, stripnl=False, ensurenl=False)
    except ClassNotFound:
        lexer = TextLexer(stripnl=False, ensurenl=False)
    return highlight(text, lexer, TerminalFormatter(bg="dark"))


class Console:
    def __init__(self, color: bool = False, stdout=None, stderr=None) -> None:
        self.color = color
        self.palette = COLOR_PALETTE if color else PLAIN_PALETTE
        self._stdout = stdout
        self._stderr = stderr

    @property
    def stdout(self):
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stderr(self):
        return self._stderr if self._stderr is not None else sys.stderr

    def line(self, text: str = "") -> None:
        print(text, file=self.stdout)

    def info(self, text: str) -> None:
        p = self.palette
        print(f"{p.blue}INFO{p.reset} {text}", file=self.stdout)

    def success(self, text: str) -> None:
        p = self.palette
        print(f"{p.green}OK{p.reset} {text}", file=self.stdout)

    def warn(self, text: str) -> None:
        p = self.palette
        print(f"{p.yellow}WARN{p.reset} {text}", file=self.stderr)

    def error(self, text: str) -> None:
        p = self.palette
        print(f"{p.red}ERROR{p.reset} {text}", file=self.stderr)

    def step(self, number: int, text: str) -> None:
        p = self.palette
        print(f"{p.cyan}[{number}]{p.reset} {text}", file=self.stdout)

    def header(self, title: str) -> None:
        p = self.palette
        print("", file=self.stdout)
        print(f"{p.bold}{title}{p.reset}", file=self.stdout)
        print(f"{p.dim}{'─' * len(title)}{p.reset}", file=self.stdout)

    def heading(self, title: str) -> None:
        p = self.palette
        print(f"{p.bold}{title}{p.reset}", file=self.stdout)

    def dim(self, text: str) -> None:
        p = self.palette
        print(f"{p.dim}{text}{p.reset}", file=self.stdout)

    def notice(self, text: str) -> None:
        p = self.palette
        print(f"{p.yellow}{text}{p.reset}", file=self.stdout)

    def dry_run(self, text: str) -> None:
        p = self.palette
        print(f"{p.yellow}[DRY-RUN]{p.reset} {text}", file=self.stdout)

    def preview(self, text: str, filename: str) -> None:
        """Print a document preview, highlighted when color is enabled."""
        rendered = highlight_document(text, filename) if self.color else text
        self.stdout.write(rendered)
        if not rendered.endswith("\n"):
            self.stdout.write("\n")


__all__ = [
    "Palette",
    "COLOR_PALETTE",
    "PLAIN_PALETTE",
    "Console",
    "highlight_document",
]
