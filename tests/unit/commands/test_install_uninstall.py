"""Install/uninstall behavior driven through the command line entry point."""

from __future__ import annotations

import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from basedclaude import cli
from basedclaude.bundle import SKILL_MARKER, SKILLS, SUBAGENTS


def _run(argv: list[str], root: Path, home: Path) -> tuple[int, str, str]:
    stdout, stderr = io.StringIO(), io.StringIO()
    with mock.patch("basedclaude.settings.load_config", return_value={}):
        code = cli.main(
            argv,
            environ={"CLAUDE_HOME": str(home)},
            cwd=root,
            stdout=stdout,
            stderr=stderr,
        )
    return code, stdout.getvalue(), stderr.getvalue()


def _manifest_paths(manifest_path: Path) -> list[Path]:
    data = json.loads(manifest_path.read_text(encoding="utf-8"))
    return [Path(entry["path"]) for entry in data["files_installed"]]


class GlobalInstallTests(unittest.TestCase):
    def test_install_records_manifest_and_uninstall_removes_only_recorded_paths(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp) / "project"
            home = Path(tmp) / "home"
            root.mkdir()
            home.mkdir()
            unrelated = home / "notes.txt"
            unrelated.write_text("mine\n", encoding="utf-8")

            code, out, _err = _run(["install", "--global"], root, home)
            self.assertEqual(code, 0)
            self.assertIn("Installation complete!", out)

            manifest_path = home / ".sdk-manifest.json"
            installed = _manifest_paths(manifest_path)
            self.assertIn(home / "skills" / "code-review", installed)
            self.assertIn(home / "settings.json", installed)
            self.assertTrue((home / "skills" / SKILLS[0].name / SKILL_MARKER).is_file())
            self.assertTrue((home / "subagents" / SUBAGENTS[0].name / "AGENT.md").is_file())
            self.assertEqual(len(installed), len(SKILLS) + len(SUBAGENTS) + 2)

            code, out, _err = _run(["uninstall", "--global"], root, home)
            self.assertEqual(code, 0)
            self.assertIn("Uninstall complete", out)
            for path in installed:
                self.assertFalse(path.exists(), path)
            self.assertFalse(manifest_path.exists())
            self.assertEqual(unrelated.read_text(encoding="utf-8"), "mine\n")

    def test_reinstall_requires_force(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            home = root / "home"
            self.assertEqual(_run(["install", "--global"], root, home)[0], 0)

            code, _out, err = _run(["install", "--global"], root, home)
            self.assertEqual(code, 1)
            self.assertIn("already installed", err)

            code, _out, _err = _run(["install", "--global", "--force"], root, home)
            self.assertEqual(code, 0)
            data = json.loads((home / ".sdk-manifest.json").read_text(encoding="utf-8"))
            self.assertTrue(data["backups_created"])

    def test_restore_puts_overwritten_skill_back(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            home = root / "home"
            custom = home / "skills" / "code-review" / SKILL_MARKER
            custom.parent.mkdir(parents=True)
            custom.write_text("my own review skill\n", encoding="utf-8")
            (home / "settings.json").write_text('{"theme": "dark"}\n', encoding="utf-8")

            self.assertEqual(_run(["install", "--global"], root, home)[0], 0)
            self.assertNotEqual(custom.read_text(encoding="utf-8"), "my own review skill\n")
            installed = _manifest_paths(home / ".sdk-manifest.json")
            self.assertNotIn(home / "settings.json", installed)

            code, out, _err = _run(["uninstall", "--global", "--restore"], root, home)
            self.assertEqual(code, 0)
            self.assertIn("restored from backups", out)
            self.assertEqual(custom.read_text(encoding="utf-8"), "my own review skill\n")
            self.assertEqual((home / "settings.json").read_text(encoding="utf-8"), '{"theme": "dark"}\n')
            self.assertFalse((home / ".sdk-backups").exists())

    def test_dry_run_writes_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            home = root / "home"
            code, out, _err = _run(["install", "--global", "--dry-run"], root, home)
            self.assertEqual(code, 0)
            self.assertIn("[DRY-RUN]", out)
            self.assertFalse(home.exists())

    def test_uninstall_without_manifest_fails(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            code, _out, err = _run(["uninstall", "--global"], root, root / "home")
        self.assertEqual(code, 1)
        self.assertIn("No installation found", err)


class ProjectInstallTests(unittest.TestCase):
    def test_project_install_seeds_memory_and_uninstall_removes_sdk_dir(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            home = root / "home"
            code, _out, _err = _run(["install", "--project"], root, home)
            self.assertEqual(code, 0)
            sdk = root / ".claude-sdk"
            self.assertTrue((sdk / "ATLAS.md").is_file())
            self.assertTrue((sdk / "memory" / "DECISIONS.md").is_file())
            self.assertTrue((root / "CLAUDE.md").is_file())
            self.assertTrue((sdk / "atlas").is_dir())

            code, _out, _err = _run(["uninstall", "--project"], root, home)
            self.assertEqual(code, 0)
            self.assertFalse(sdk.exists())
            self.assertFalse((root / "CLAUDE.md").exists())

    def test_keep_memory_preserves_memory_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            home = root / "home"
            self.assertEqual(_run(["install", "--project"], root, home)[0], 0)

            code, _out, _err = _run(["uninstall", "--project", "--keep-memory"], root, home)
            self.assertEqual(code, 0)
            sdk = root / ".claude-sdk"
            self.assertTrue((sdk / "ATLAS.md").is_file())
            self.assertTrue((sdk / "CONTRACT.md").is_file())
            self.assertTrue((sdk / "memory" / "TASKS.md").is_file())
            self.assertFalse((sdk / "skills" / "code-review").exists())
            self.assertFalse((root / "CLAUDE.md").exists())
            self.assertFalse((sdk / ".manifest.json").exists())

    def test_existing_instructions_are_kept_without_force(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "CLAUDE.md").write_text("house rules\n", encoding="utf-8")
            code, out, _err = _run(["install", "--project"], root, root / "home")
            self.assertEqual(code, 0)
            self.assertIn("CLAUDE.md exists", out)
            self.assertEqual((root / "CLAUDE.md").read_text(encoding="utf-8"), "house rules\n")


if __name__ == "__main__":
    unittest.main()
