"""Tunable limits for atlas scanning and drift windows.

Options come from built-in defaults, then the user config's ``atlas`` object,
then a project ``atlas.config`` JSON file (or ``--config FILE``). Ill-typed
values are dropped with a warning.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path

from ..errors import MalformedInputError

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_DIRS = (
    ".git",
    "node_modules",
    "vendor",
    "__pycache__",
    ".next",
    "dist",
    "build",
    "target",
    "coverage",
)
DEFAULT_SOURCE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".py", ".go", ".rs", ".java")
DEFAULT_EXPORT_PREFIXES = ("export ",)


@dataclass(frozen=True)
class AtlasOptions:
    max_depth: int = 2
    max_folders: int = 50
    max_key_files: int = 20
    max_exports: int = 10
    export_line_width: int = 80
    export_prefixes: tuple[str, ...] = DEFAULT_EXPORT_PREFIXES
    source_extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS
    ignore_dirs: tuple[str, ...] = DEFAULT_IGNORE_DIRS
    status_window: int = 5
    refresh_window: int = 10
    max_changed_files: int = 50
    file_count_threshold: float = 0.5


def _coerce_positive_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value > 0 else None


def _coerce_ratio(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if value > 0 else None


def _coerce_string_tuple(value: object) -> tuple[str, ...] | None:
    if not isinstance(value, list):
        return None
    items = tuple(item for item in value if isinstance(item, str) and item)
    return items if items else None


_COERCERS = {
    "max_depth": _coerce_positive_int,
    "max_folders": _coerce_positive_int,
    "max_key_files": _coerce_positive_int,
    "max_exports": _coerce_positive_int,
    "export_line_width": _coerce_positive_int,
    "export_prefixes": _coerce_string_tuple,
    "source_extensions": _coerce_string_tuple,
    "ignore_dirs": _coerce_string_tuple,
    "status_window": _coerce_positive_int,
    "refresh_window": _coerce_positive_int,
    "max_changed_files": _coerce_positive_int,
    "file_count_threshold": _coerce_ratio,
}


def apply_overrides(options: AtlasOptions, data: dict[str, object], source: str) -> AtlasOptions:
    """Return ``options`` updated with every valid key in ``data``."""
    known = {item.name for item in fields(AtlasOptions)}
    updates: dict[str, object] = {}
    for key, raw in data.items():
        if key not in known:
            continue
        coerced = _COERCERS[key](raw)
        if coerced is None:
            logger.warning("%s: ignoring invalid value for %s: %r", source, key, raw)
            continue
        updates[key] = coerced
    return replace(options, **updates) if updates else options


def _read_options_file(path: Path) -> dict[str, object]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise MalformedInputError(f"atlas config {path} is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise MalformedInputError(f"cannot read atlas config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedInputError(f"atlas config {path} must contain a JSON object")
    return data


def load_atlas_options(
    user_overrides: dict[str, object] | None = None,
    project_config: Path | None = None,
    explicit_config: Path | None = None,
) -> AtlasOptions:
    """Layer defaults, user overrides, and one project config file.

    ``explicit_config`` (from ``--config``) must exist; the implicit
    ``project_config`` is only read when present.
    """
    options = AtlasOptions()
    if user_overrides:
        options = apply_overrides(options, user_overrides, "user config")

    if explicit_config is not None:
        if not explicit_config.is_file():
            raise MalformedInputError(f"atlas config not found: {explicit_config}")
        options = apply_overrides(options, _read_options_file(explicit_config), str(explicit_config))
    elif project_config is not None and project_config.is_file():
        options = apply_overrides(options, _read_options_file(project_config), str(project_config))
    return options


__all__ = [
    "AtlasOptions",
    "DEFAULT_IGNORE_DIRS",
    "DEFAULT_SOURCE_EXTENSIONS",
    "DEFAULT_EXPORT_PREFIXES",
    "apply_overrides",
    "load_atlas_options",
]
