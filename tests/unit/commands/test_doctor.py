"""Health check outcomes and exit codes."""

from __future__ import annotations

import io
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from basedclaude import cli
from basedclaude.commands.doctor import CHECK_FAILED, CHECK_PASSED, CHECK_WARNING, DoctorReport


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


class DoctorReportTests(unittest.TestCase):
    def test_exit_codes(self) -> None:
        report = DoctorReport()
        report.record(CHECK_PASSED)
        self.assertEqual(report.exit_code, 0)
        report.record(CHECK_WARNING)
        self.assertEqual(report.exit_code, 2)
        report.record(CHECK_FAILED)
        self.assertEqual(report.exit_code, 2)

        nothing_passed = DoctorReport()
        nothing_passed.record(CHECK_WARNING)
        self.assertEqual(nothing_passed.exit_code, 1)


class DoctorCommandTests(unittest.TestCase):
    def test_nothing_installed_and_no_dependencies_fails(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            with mock.patch("basedclaude.commands.doctor.git_version", return_value=None):
                code, out, err = _run(["doctor", "--global"], root, root / "missing-home")
        self.assertEqual(code, 1)
        self.assertIn("Not installed", out)
        self.assertIn("git: not installed", err)
        self.assertIn("Some checks failed", err)

    def test_global_install_is_healthy(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            home = root / "home"
            self.assertEqual(_run(["install", "--global"], root, home)[0], 0)
            with mock.patch("basedclaude.commands.doctor.git_version", return_value="git version 2.45.0"):
                code, out, _err = _run(["doctor", "--global", "--verbose"], root, home)
        self.assertEqual(code, 0)
        self.assertIn("Manifest: found", out)
        self.assertIn("Skills: 5 installed", out)
        self.assertIn("code-review: OK", out)
        self.assertIn("All checks passed!", out)

    def test_project_checks_report_warnings(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            home = root / "home"
            home.mkdir()
            self.assertEqual(_run(["init"], root, home)[0], 0)
            with mock.patch("basedclaude.commands.doctor.git_version", return_value="git version 2.45.0"):
                code, out, err = _run(["doctor", "--project"], root, home)
        self.assertEqual(code, 2)
        self.assertIn("5/5 memory files initialized", out)
        self.assertIn("Atlas: unknown", err)


if __name__ == "__main__":
    unittest.main()
