"""Exception types shared by commands and the atlas engine.

Whole-command failures derive from ``BasedClaudeError`` and are turned into an
``ERROR`` line plus exit status 1 by ``basedclaude.cli``. Per-item failures are
caught where the batch loop lives and only counted.
"""

from __future__ import annotations


class BasedClaudeError(Exception):
    """Base class for errors that abort the current command."""


class MissingPrerequisiteError(BasedClaudeError):
    """A required external tool (for example ``git``) is not installed."""

    def __init__(self, tool: str, purpose: str) -> None:
        super().__init__(f"{tool} is required for {purpose}")
        self.tool = tool
        self.purpose = purpose


class MalformedInputError(BasedClaudeError):
    """A config file, skillfile, or manifest could not be understood."""


class ConflictError(BasedClaudeError):
    """A target file exists and overwriting it was not requested."""

    def __init__(self, path) -> None:
        super().__init__(f"{path} already exists")
        self.path = path


__all__ = [
    "BasedClaudeError",
    "MissingPrerequisiteError",
    "MalformedInputError",
    "ConflictError",
]
