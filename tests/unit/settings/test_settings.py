"""Settings resolution from flags, environment, and the user config file."""

from __future__ import annotations

import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from basedclaude import settings as settings_module
from basedclaude.settings import load_config, load_settings


class _TtyStream(io.StringIO):
    def isatty(self) -> bool:
        return True


class LoadConfigTests(unittest.TestCase):
    def test_missing_or_malformed_config_is_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            with mock.patch.object(settings_module, "CONFIG_PATH", path):
                self.assertEqual(load_config(), {})
                path.write_text("[1, 2]", encoding="utf-8")
                self.assertEqual(load_config(), {})
                path.write_text("{oops", encoding="utf-8")
                with self.assertLogs("basedclaude.settings", level="WARNING"):
                    self.assertEqual(load_config(), {})
                path.write_text(json.dumps({"color": False}), encoding="utf-8")
                self.assertEqual(load_config(), {"color": False})


class LoadSettingsTests(unittest.TestCase):
    def _load(self, environ: dict[str, str], config: dict[str, object] | None = None, **kwargs):
        with mock.patch("basedclaude.settings.load_config", return_value=config or {}):
            return load_settings(environ=environ, **kwargs)

    def test_claude_home_from_environment_then_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            settings = self._load({"CLAUDE_HOME": tmp}, {"claude_home": "/ignored"})
            self.assertEqual(settings.claude_home, Path(tmp))
            self.assertEqual(settings.global_manifest_path, Path(tmp) / ".sdk-manifest.json")
        settings = self._load({}, {"claude_home": "/opt/claude"})
        self.assertEqual(settings.claude_home, Path("/opt/claude"))
        self.assertEqual(self._load({}).claude_home, Path.home() / ".claude")

    def test_debug_flag(self) -> None:
        self.assertTrue(self._load({"DEBUG": "1"}).debug)
        self.assertTrue(self._load({"DEBUG": "true"}).debug)
        self.assertFalse(self._load({"DEBUG": "0"}).debug)
        self.assertFalse(self._load({}).debug)

    def test_color_priority(self) -> None:
        tty = _TtyStream()
        self.assertTrue(self._load({}, stream=tty).color)
        self.assertFalse(self._load({}, stream=io.StringIO()).color)
        self.assertFalse(self._load({"NO_COLOR": ""}, stream=tty).color)
        self.assertFalse(self._load({}, {"color": False}, stream=tty).color)
        self.assertTrue(self._load({}, {"color": True}, stream=io.StringIO()).color)
        self.assertFalse(self._load({}, {"color": True}, no_color=True, stream=tty).color)

    def test_atlas_overrides_and_git_lookup(self) -> None:
        with mock.patch("basedclaude.settings.shutil.which", return_value=None):
            settings = self._load({}, {"atlas": {"max_depth": 3}})
        self.assertEqual(settings.atlas_overrides, {"max_depth": 3})
        self.assertFalse(settings.git_available)
        self.assertEqual(self._load({}, {"atlas": "nope"}).atlas_overrides, {})


if __name__ == "__main__":
    unittest.main()
