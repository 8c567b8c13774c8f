from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from trypick.entries import (
    EntryExistsError,
    EntryMissingError,
    InvalidEntryNameError,
    create_entry_dir,
    delete_entry_dir,
    list_entries,
    move_entry,
    parse_date_prefix,
    touch_entry,
    validate_entry_name,
)


class ParseDatePrefixTests(unittest.TestCase):
    def test_splits_dated_names(self) -> None:
        self.assertEqual(parse_date_prefix("2025-01-02-my-app"), ("2025-01-02", "my-app"))
        self.assertEqual(parse_date_prefix("2025-01-02myapp"), ("2025-01-02", "myapp"))

    def test_undated_and_bare_dates(self) -> None:
        self.assertEqual(parse_date_prefix("scratch"), (None, "scratch"))
        self.assertEqual(parse_date_prefix("25-01-02-x"), (None, "25-01-02-x"))
        self.assertEqual(parse_date_prefix("2025-01-02"), ("2025-01-02", "2025-01-02"))


class ListEntriesTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_root_is_empty(self) -> None:
        self.assertEqual(list_entries(self.root / "absent"), [])

    def test_lists_visible_directories_only(self) -> None:
        (self.root / "2025-01-01-alpha").mkdir()
        (self.root / "beta").mkdir()
        (self.root / ".archive").mkdir()
        (self.root / "notes.txt").write_text("x", encoding="utf-8")
        (self.root / "beta" / "nested").mkdir()

        entries = list_entries(self.root)

        self.assertEqual([entry.name for entry in entries], ["2025-01-01-alpha", "beta"])
        alpha = entries[0]
        self.assertEqual(alpha.date_prefix, "2025-01-01")
        self.assertEqual(alpha.base_name, "alpha")
        self.assertTrue(alpha.path.is_absolute())
        self.assertEqual(alpha.path, (self.root / "2025-01-01-alpha").absolute())
        self.assertIsNone(entries[1].date_prefix)

    def test_reports_modification_time(self) -> None:
        target = self.root / "aged"
        target.mkdir()
        os.utime(target, (1_600_000_000, 1_600_000_500))

        (entry,) = list_entries(self.root)

        self.assertEqual(entry.accessed_at, 1_600_000_000.0)
        self.assertEqual(entry.modified_at, 1_600_000_500.0)

    def test_relisting_sees_fresh_state(self) -> None:
        self.assertEqual(list_entries(self.root), [])
        (self.root / "new").mkdir()
        self.assertEqual([entry.name for entry in list_entries(self.root)], ["new"])


class MutationTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_validate_entry_name(self) -> None:
        self.assertEqual(validate_entry_name("  ok-name "), "ok-name")
        for bad in ("", "   ", "a/b", ".hidden"):
            with self.assertRaises(InvalidEntryNameError):
                validate_entry_name(bad)

    def test_create_makes_root_and_rejects_duplicates(self) -> None:
        root = self.root / "tries"

        created = create_entry_dir(root, "2025-01-01-demo")

        self.assertTrue(created.is_dir())
        with self.assertRaises(EntryExistsError):
            create_entry_dir(root, "2025-01-01-demo")

    def test_delete_removes_tree(self) -> None:
        target = self.root / "doomed"
        (target / "deep").mkdir(parents=True)
        (target / "deep" / "file").write_text("x", encoding="utf-8")

        delete_entry_dir(target)

        self.assertFalse(target.exists())
        with self.assertRaises(EntryMissingError):
            delete_entry_dir(target)

    def test_move_creates_parent_and_refuses_overwrite(self) -> None:
        source = self.root / "src"
        source.mkdir()
        (source / "keep").write_text("1", encoding="utf-8")
        target = self.root / "archive" / "src"

        moved = move_entry(source, target)

        self.assertEqual(moved, target)
        self.assertEqual((target / "keep").read_text(encoding="utf-8"), "1")
        self.assertFalse(source.exists())

        other = self.root / "other"
        other.mkdir()
        with self.assertRaises(EntryExistsError):
            move_entry(other, target)
        with self.assertRaises(EntryMissingError):
            move_entry(source, self.root / "elsewhere")

    def test_touch_bumps_mtime_and_ignores_missing(self) -> None:
        target = self.root / "old"
        target.mkdir()
        os.utime(target, (1_000_000_000, 1_000_000_000))

        touch_entry(target)
        touch_entry(self.root / "missing")

        self.assertGreater(target.stat().st_mtime, 1_000_000_000)


if __name__ == "__main__":
    unittest.main()
