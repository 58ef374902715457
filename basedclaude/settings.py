"""Process-wide settings resolved once at startup.

Combines environment variables, the persisted JSON user config, and defaults
into one immutable ``Settings`` value that commands receive explicitly.
Malformed or missing user config data falls back to defaults.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "based-claude"
SDK_VERSION = "1.0.0"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

GLOBAL_MANIFEST_NAME = ".sdk-manifest.json"
GLOBAL_BACKUP_DIRNAME = ".sdk-backups"

logger = logging.getLogger(__name__)


def load_config() -> dict[str, object]:
    """Load the persisted JSON user config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _env_flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_color(environ: dict[str, str], config: dict[str, object], no_color: bool, stream) -> bool:
    """Pick ANSI color support: flag, then ``NO_COLOR``, then config, then tty."""
    if no_color or "NO_COLOR" in environ:
        return False
    value = config.get("color")
    if isinstance(value, bool):
        return value
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty()) if isatty is not None else False
    except (OSError, ValueError):
        return False


@dataclass(frozen=True)
class Settings:
    """Explicit configuration handed to every command and component."""

    claude_home: Path
    cwd: Path
    debug: bool = False
    color: bool = False
    git_executable: str | None = None
    atlas_overrides: dict[str, object] = field(default_factory=dict)

    @property
    def git_available(self) -> bool:
        return self.git_executable is not None

    @property
    def global_manifest_path(self) -> Path:
        return self.claude_home / GLOBAL_MANIFEST_NAME

    @property
    def global_backup_dir(self) -> Path:
        return self.claude_home / GLOBAL_BACKUP_DIRNAME


def load_settings(
    environ: dict[str, str] | None = None,
    no_color: bool = False,
    cwd: Path | None = None,
    stream=None,
) -> Settings:
    """Build ``Settings`` with priority flags > environment > user config > defaults."""
    env = dict(os.environ if environ is None else environ)
    config = load_config()

    home_value = env.get("CLAUDE_HOME") or config.get("claude_home")
    if isinstance(home_value, str) and home_value.strip():
        claude_home = Path(home_value).expanduser()
    else:
        claude_home = Path.home() / ".claude"

    atlas_overrides = config.get("atlas")
    if not isinstance(atlas_overrides, dict):
        atlas_overrides = {}

    return Settings(
        claude_home=claude_home,
        cwd=(cwd or Path.cwd()).resolve(),
        debug=_env_flag(env.get("DEBUG")),
        color=_resolve_color(env, config, no_color, stream if stream is not None else sys.stdout),
        git_executable=shutil.which("git"),
        atlas_overrides=dict(atlas_overrides),
    )


__all__ = [
    "APP_NAME",
    "SDK_VERSION",
    "CONFIG_PATH",
    "Settings",
    "load_config",
    "load_settings",
]
