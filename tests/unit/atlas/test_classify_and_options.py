"""Project classification and atlas option layering tests."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from basedclaude.atlas.classify import classify_project
from basedclaude.atlas.options import AtlasOptions, apply_overrides, load_atlas_options
from basedclaude.errors import MalformedInputError


def _touch(root: Path, *relative: str) -> None:
    for item in relative:
        path = root / item
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")


class ClassifyProjectTests(unittest.TestCase):
    def test_go_project_lists_existing_entry_points(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp) / "service"
            root.mkdir()
            _touch(root, "go.mod", "main.go")
            profile = classify_project(root)
        self.assertEqual(profile.project_type, "go")
        self.assertEqual(profile.entry_points, ("go.mod", "main.go"))
        self.assertEqual(profile.name, "service")

    def test_first_matching_marker_wins(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _touch(root, "package.json", "pyproject.toml", "src/index.ts")
            profile = classify_project(root)
        self.assertEqual(profile.project_type, "node")
        self.assertEqual(profile.entry_points, ("package.json", "src/index.ts"))

    def test_python_and_rust_markers(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _touch(root, "setup.py", "app.py")
            self.assertEqual(classify_project(root).entry_points, ("setup.py", "app.py"))
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _touch(root, "Cargo.toml", "src/lib.rs")
            profile = classify_project(root)
            self.assertEqual((profile.project_type, profile.entry_points), ("rust", ("Cargo.toml", "src/lib.rs")))

    def test_unknown_project_has_no_entry_points(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _touch(root, "main.go")
            profile = classify_project(root)
        self.assertEqual(profile.project_type, "unknown")
        self.assertEqual(profile.entry_points, ())


class AtlasOptionsTests(unittest.TestCase):
    def test_invalid_values_fall_back_with_warning(self) -> None:
        with self.assertLogs("basedclaude.atlas.options", level="WARNING") as logs:
            options = apply_overrides(
                AtlasOptions(),
                {"max_key_files": "many", "max_exports": 3, "unknown": 1, "max_depth": True},
                "test",
            )
        self.assertEqual(options.max_key_files, 20)
        self.assertEqual(options.max_exports, 3)
        self.assertEqual(options.max_depth, 2)
        self.assertEqual(len(logs.records), 2)

    def test_project_config_layers_over_user_overrides(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config = Path(tmp) / "atlas.config"
            config.write_text(json.dumps({"max_folders": 7, "ignore_dirs": ["out"]}), encoding="utf-8")
            options = load_atlas_options({"max_folders": 3, "status_window": 9}, project_config=config)
        self.assertEqual(options.max_folders, 7)
        self.assertEqual(options.status_window, 9)
        self.assertEqual(options.ignore_dirs, ("out",))

    def test_missing_project_config_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            options = load_atlas_options(project_config=Path(tmp) / "atlas.config")
        self.assertEqual(options, AtlasOptions())

    def test_missing_explicit_config_is_malformed_input(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(MalformedInputError):
                load_atlas_options(explicit_config=Path(tmp) / "nope.json")

    def test_invalid_json_config_is_malformed_input(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config = Path(tmp) / "atlas.config"
            config.write_text("{not json", encoding="utf-8")
            with self.assertRaises(MalformedInputError):
                load_atlas_options(explicit_config=config)


if __name__ == "__main__":
    unittest.main()
