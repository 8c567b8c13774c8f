from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from trypick.project_index import (
    has_project_index,
    project_index_path,
    rename_project_index,
    validate_session_file,
)


def session_line(cwd: str) -> str:
    return json.dumps({"type": "user", "uuid": "u1", "cwd": cwd}, separators=(",", ":"))


class ProjectIndexTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.home = Path(self._tmp.name)
        self.old_dir = "/home/me/src/tries/2025-01-01-app"
        self.new_dir = "/home/me/src/app"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _make_folder(self, dir_path: str) -> Path:
        folder = project_index_path(dir_path, self.home)
        folder.mkdir(parents=True)
        return folder

    def test_folder_name_replaces_slashes(self) -> None:
        path = project_index_path(self.old_dir, self.home)

        self.assertEqual(path, self.home / ".claude" / "projects" / "-home-me-src-tries-2025-01-01-app")
        self.assertFalse(has_project_index(self.old_dir, self.home))
        path.mkdir(parents=True)
        self.assertTrue(has_project_index(self.old_dir, self.home))

    def test_missing_folder_is_a_successful_noop(self) -> None:
        result = rename_project_index(self.old_dir, self.new_dir, self.home)

        self.assertTrue(result.success)
        self.assertFalse(result.folder_renamed)

    def test_rename_rewrites_cwd_and_moves_folder(self) -> None:
        folder = self._make_folder(self.old_dir)
        (folder / "a.jsonl").write_text(session_line(self.old_dir) + "\n", encoding="utf-8")
        (folder / "b.jsonl").write_text(session_line("/elsewhere") + "\n", encoding="utf-8")

        result = rename_project_index(self.old_dir, self.new_dir, self.home)

        self.assertTrue(result.success)
        self.assertTrue(result.folder_renamed)
        self.assertEqual(result.files_modified, 1)
        self.assertFalse(folder.exists())
        moved = project_index_path(self.new_dir, self.home)
        self.assertEqual(json.loads((moved / "a.jsonl").read_text(encoding="utf-8"))["cwd"], self.new_dir)
        self.assertEqual(json.loads((moved / "b.jsonl").read_text(encoding="utf-8"))["cwd"], "/elsewhere")

    def test_existing_target_folder_blocks_rename(self) -> None:
        folder = self._make_folder(self.old_dir)
        self._make_folder(self.new_dir)

        result = rename_project_index(self.old_dir, self.new_dir, self.home)

        self.assertFalse(result.success)
        self.assertIn("already exists", result.error)
        self.assertTrue(folder.exists())

    def test_unexpected_file_aborts_before_any_change(self) -> None:
        folder = self._make_folder(self.old_dir)
        good = folder / "a.jsonl"
        good.write_text(session_line(self.old_dir) + "\n", encoding="utf-8")
        (folder / "b.jsonl").write_text("not json\n", encoding="utf-8")

        result = rename_project_index(self.old_dir, self.new_dir, self.home)

        self.assertFalse(result.success)
        self.assertIn("b.jsonl", result.error)
        self.assertIn(self.old_dir, good.read_text(encoding="utf-8"))
        self.assertTrue(folder.exists())

    def test_validate_session_file(self) -> None:
        folder = self._make_folder(self.old_dir)
        cases = {
            "ok.jsonl": (session_line("/x") + "\n\n" + '{"message": "hi"}\n', None),
            "array.jsonl": ("[1, 2]\n", "Line 1: Expected object, got list"),
            "fields.jsonl": ('{"other": 1}\n', "Line 1: Missing expected session fields"),
            "cwd.jsonl": ('{"type": "user", "cwd": 3}\n', "Line 1: cwd field is not a string"),
            "late.jsonl": ("\n".join([session_line("/x")] * 5 + ["garbage"]), None),
        }
        for name, (content, expected) in cases.items():
            path = folder / name
            path.write_text(content, encoding="utf-8")
            error = validate_session_file(path)
            if expected is None:
                self.assertIsNone(error, name)
            else:
                self.assertTrue(error.startswith(expected), (name, error))

        self.assertTrue(validate_session_file(folder / "absent.jsonl").startswith("Failed to read file"))


if __name__ == "__main__":
    unittest.main()
