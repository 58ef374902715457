"""Full atlas build tests without version control.

Verifies document layout, idempotence up to ``BUILT:``, preservation of user
notes and purpose lines, pruning, and dry-run behavior.
"""

from __future__ import annotations

import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from basedclaude.atlas.build import build_atlas, write_folder_atlas
from basedclaude.atlas.document import AtlasDocument
from basedclaude.atlas.options import DEFAULT_IGNORE_DIRS, AtlasOptions
from basedclaude.atlas.render import DEFAULT_NOTES, render_folder_atlas
from basedclaude.atlas.types import FolderScan
from basedclaude.project import ProjectPaths

FIRST = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
SECOND = datetime(2024, 5, 2, 8, 30, 0, tzinfo=timezone.utc)


def _make_project(root: Path) -> ProjectPaths:
    (root / "src" / "api").mkdir(parents=True)
    (root / "lib").mkdir()
    (root / "package.json").write_text("{}\n", encoding="utf-8")
    (root / "src" / "index.ts").write_text("export function main() {}\n", encoding="utf-8")
    (root / "src" / "api" / "routes.ts").write_text("export const routes = [];\n", encoding="utf-8")
    (root / "lib" / "util.js").write_text("module.exports = {};\n", encoding="utf-8")
    return ProjectPaths(root)


def _without_built(text: str) -> str:
    return "\n".join(line for line in text.split("\n") if not line.startswith("BUILT:"))


class BuildAtlasTests(unittest.TestCase):
    def test_first_build_writes_root_and_folder_documents(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = _make_project(Path(tmp))
            result = build_atlas(paths, AtlasOptions(), None, now=FIRST)

            root_text = paths.atlas_file.read_text(encoding="utf-8")
            api_text = (paths.atlas_dir / "src_api.atlas.md").read_text(encoding="utf-8")

        self.assertEqual(sorted(result.written), ["lib.atlas.md", "src.atlas.md", "src_api.atlas.md"])
        self.assertTrue(root_text.startswith("# REPO ATLAS\n"))
        self.assertIn("BUILT: 2024-05-01T12:00:00Z\n", root_text)
        self.assertIn("COMMIT: not-a-repo\n", root_text)
        self.assertIn("TYPE: node\n", root_text)
        self.assertIn("ENTRY: package.json\n", root_text)
        self.assertIn("DOMAIN: lib/\nDOMAIN: src/\n", root_text)
        self.assertIn(
            "MAP: atlas/lib.atlas.md\nMAP: atlas/src.atlas.md\nMAP: atlas/src_api.atlas.md\n",
            root_text,
        )
        self.assertTrue(root_text.endswith("## NOTES" + DEFAULT_NOTES))

        self.assertTrue(api_text.startswith("# FOLDER: src/api\n"))
        self.assertIn("DEPTH: 1\nFILES: 1\n", api_text)
        self.assertIn("FILE: routes.ts\n", api_text)
        self.assertIn("EXPORT: export const routes = [];\n", api_text)
        self.assertIn('GREP: "class " in src/api\n', api_text)

    def test_rebuild_differs_only_in_built_line(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = _make_project(Path(tmp))
            build_atlas(paths, AtlasOptions(), None, now=FIRST)
            first_root = paths.atlas_file.read_text(encoding="utf-8")
            first_src = (paths.atlas_dir / "src.atlas.md").read_bytes()

            build_atlas(paths, AtlasOptions(), None, now=SECOND)
            second_root = paths.atlas_file.read_text(encoding="utf-8")
            second_src = (paths.atlas_dir / "src.atlas.md").read_bytes()

        self.assertNotEqual(first_root, second_root)
        self.assertEqual(_without_built(first_root), _without_built(second_root))
        self.assertEqual(first_src, second_src)

    def test_user_notes_and_purpose_survive_rebuild(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = _make_project(Path(tmp))
            build_atlas(paths, AtlasOptions(), None, now=FIRST)

            notes = "\n\nAuth lives in src/api.\r\n  keep   spacing\n\xff\n"
            doc = AtlasDocument.parse(paths.atlas_file.read_text(encoding="utf-8"))
            doc.set("PURPOSE", "Routes HTTP traffic")
            doc.notes = notes
            paths.atlas_file.write_bytes(doc.render().encode("utf-8"))

            folder_doc = paths.atlas_dir / "lib.atlas.md"
            folder_text = folder_doc.read_text(encoding="utf-8").replace(
                "PURPOSE: [Auto-detected folder]", "PURPOSE: Shared helpers"
            )
            folder_doc.write_text(folder_text + "\n## NOTES\nfolder note\n", encoding="utf-8")

            (paths.root / "lib" / "extra.js").write_text("export const x = 1;\n", encoding="utf-8")
            build_atlas(paths, AtlasOptions(), None, now=SECOND)

            root_text = paths.atlas_file.read_bytes().decode("utf-8")
            lib_text = folder_doc.read_text(encoding="utf-8")

        self.assertTrue(root_text.endswith("## NOTES" + notes))
        self.assertIn("PURPOSE: Routes HTTP traffic\n", root_text)
        self.assertIn("PURPOSE: Shared helpers\n", lib_text)
        self.assertIn("FILES: 2\n", lib_text)
        self.assertTrue(lib_text.endswith("## NOTES\nfolder note\n"))

    def test_full_build_discards_folder_documents(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = _make_project(Path(tmp))
            build_atlas(paths, AtlasOptions(), None, now=FIRST)
            folder_doc = paths.atlas_dir / "lib.atlas.md"
            folder_doc.write_text(folder_doc.read_text(encoding="utf-8") + "\n## NOTES\nscratch\n", encoding="utf-8")
            (paths.atlas_dir / "orphan.atlas.md").write_text("# FOLDER: lib\n", encoding="utf-8")

            result = build_atlas(paths, AtlasOptions(), None, full=True, now=SECOND)
            lib_text = folder_doc.read_text(encoding="utf-8")
            orphan_exists = (paths.atlas_dir / "orphan.atlas.md").exists()

        self.assertNotIn("scratch", lib_text)
        self.assertFalse(orphan_exists)
        self.assertEqual(result.pruned, ["orphan.atlas.md"])

    def test_documents_for_vanished_folders_are_pruned(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = _make_project(Path(tmp))
            build_atlas(paths, AtlasOptions(), None, now=FIRST)
            (paths.root / "lib" / "util.js").unlink()
            (paths.root / "lib").rmdir()

            result = build_atlas(paths, AtlasOptions(), None, now=SECOND)
            root_text = paths.atlas_file.read_text(encoding="utf-8")
            lib_exists = (paths.atlas_dir / "lib.atlas.md").exists()

        self.assertEqual(result.pruned, ["lib.atlas.md"])
        self.assertFalse(lib_exists)
        self.assertNotIn("lib.atlas.md", root_text)
        self.assertNotIn("DOMAIN: lib/", root_text)

    def test_newly_ignored_folder_is_pruned_and_unlinked(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = _make_project(Path(tmp))
            (paths.root / "docs").mkdir()
            (paths.root / "docs" / "guide.md").write_text("# Guide\n", encoding="utf-8")
            build_atlas(paths, AtlasOptions(), None, now=FIRST)
            (paths.root / "docs" / "b.py").write_text("def b():\n    pass\n", encoding="utf-8")

            options = AtlasOptions(ignore_dirs=DEFAULT_IGNORE_DIRS + ("docs",))
            result = build_atlas(paths, options, None, now=SECOND)
            root_text = paths.atlas_file.read_text(encoding="utf-8")
            docs_exists = (paths.atlas_dir / "docs.atlas.md").exists()

        self.assertIn("docs.atlas.md", result.pruned)
        self.assertFalse(docs_exists)
        self.assertNotIn("MAP: atlas/docs.atlas.md", root_text)
        self.assertNotIn("DOMAIN: docs/", root_text)

    def test_deep_folder_document_is_pruned_by_full_build(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = _make_project(Path(tmp))
            deep = paths.root / "src" / "a" / "b"
            deep.mkdir(parents=True)
            (deep / "one.ts").write_text("export const one = 1;\n", encoding="utf-8")
            build_atlas(paths, AtlasOptions(), None, now=FIRST)
            write_folder_atlas(paths, "src/a/b", AtlasOptions())
            (deep / "two.ts").write_text("export const two = 2;\n", encoding="utf-8")
            (deep / "three.ts").write_text("export const three = 3;\n", encoding="utf-8")

            result = build_atlas(paths, AtlasOptions(), None, now=SECOND)
            root_text = paths.atlas_file.read_text(encoding="utf-8")
            deep_exists = (paths.atlas_dir / "src_a_b.atlas.md").exists()

        self.assertEqual(result.pruned, ["src_a_b.atlas.md"])
        self.assertFalse(deep_exists)
        self.assertNotIn("src_a_b.atlas.md", root_text)
        self.assertIn("MAP: atlas/src_a.atlas.md\n", root_text)

    def test_folders_sharing_a_filename_report_the_later_as_failed(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a" / "b").mkdir(parents=True)
            (root / "a_b").mkdir()
            (root / "a" / "b" / "inner.py").write_text("x = 1\n", encoding="utf-8")
            (root / "a_b" / "flat.py").write_text("y = 2\n", encoding="utf-8")
            paths = ProjectPaths(root)

            with self.assertLogs("basedclaude.atlas.build", level="WARNING") as logs:
                result = build_atlas(paths, AtlasOptions(), None, now=FIRST)
            clash_text = (paths.atlas_dir / "a_b.atlas.md").read_text(encoding="utf-8")

        self.assertEqual(sorted(result.written), ["a.atlas.md", "a_b.atlas.md"])
        self.assertEqual(result.failed, ["a_b"])
        self.assertTrue(clash_text.startswith("# FOLDER: a/b\n"))
        self.assertIn("FILE: inner.py\n", clash_text)
        self.assertTrue(any("a_b.atlas.md" in line for line in logs.output))

    def test_single_folder_build_keeps_other_documents_linked(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = _make_project(Path(tmp))
            build_atlas(paths, AtlasOptions(), None, now=FIRST)
            src_before = (paths.atlas_dir / "src.atlas.md").read_bytes()

            result = build_atlas(paths, AtlasOptions(), None, folder="lib", now=SECOND)
            root_text = paths.atlas_file.read_text(encoding="utf-8")
            src_after = (paths.atlas_dir / "src.atlas.md").read_bytes()

        self.assertEqual(result.written, ["lib.atlas.md"])
        self.assertEqual(src_before, src_after)
        self.assertIn("MAP: atlas/src_api.atlas.md\n", root_text)

    def test_folder_outside_root_is_reported_as_failed(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = _make_project(Path(tmp))
            with self.assertLogs("basedclaude.atlas.build", level="WARNING"):
                result = build_atlas(paths, AtlasOptions(), None, folder="../elsewhere", now=FIRST)
        self.assertEqual(result.written, [])
        self.assertEqual(result.failed, ["../elsewhere"])

    def test_dry_run_writes_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = _make_project(Path(tmp))
            result = build_atlas(paths, AtlasOptions(), None, dry_run=True, now=FIRST)
            sdk_exists = paths.sdk_dir.exists()

        self.assertFalse(sdk_exists)
        self.assertFalse(result.root_written)
        self.assertIn("TYPE: node", result.root_text)
        self.assertEqual(len(result.written), 3)


class FolderNameEscapingTests(unittest.TestCase):
    def test_line_breaks_in_names_cannot_open_a_notes_section(self) -> None:
        scan = FolderScan(folder="a\nb", file_count=1, key_files=("evil\n## NOTES\nx.py",))
        text = render_folder_atlas(scan)

        self.assertIsNone(AtlasDocument.parse(text).notes)
        self.assertTrue(text.startswith("# FOLDER: a\\x0ab\n"))
        self.assertIn("FILE: evil\\x0a## NOTES\\x0ax.py\n", text)
        self.assertIn(' in a\\x0ab\n', text)


if __name__ == "__main__":
    unittest.main()
