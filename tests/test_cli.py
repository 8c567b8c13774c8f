"""CLI dispatch tests.

Verifies how ``trypick.cli.main`` routes arguments and what lands on stdout,
which the shell wrapper evaluates.
"""

from __future__ import annotations

import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from trypick import cli
from trypick.actions import ActionOutcome
from trypick.entries import DirectoryEntry
from trypick.hooks import HookAbortedError
from trypick.selector import CancelAction, CreateAction, DeleteAction
from trypick.shell import cd_command


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tries = Path(self._tmp.name).resolve() / "tries"
        self.config_path = Path(self._tmp.name) / "absent" / "config.json"
        patcher = mock.patch("trypick.config.CONFIG_PATH", self.config_path)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _main(self, *argv: str) -> tuple[str, str]:
        stdout, stderr = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            cli.main(["--path", str(self.tries), *argv])
        return stdout.getvalue(), stderr.getvalue()

    def test_words_become_initial_query(self) -> None:
        with mock.patch("trypick.cli.run_selector", return_value=CancelAction()) as run_selector:
            out, _err = self._main("my", "query")

        config, query = run_selector.call_args.args
        self.assertEqual(query, "my query")
        self.assertEqual(config.path, self.tries)
        self.assertTrue(self.tries.is_dir())
        self.assertEqual(out, "")

    def test_created_directory_prints_cd_line(self) -> None:
        with mock.patch("trypick.cli.run_selector", return_value=CreateAction("2025-01-01-demo")):
            out, err = self._main()

        self.assertEqual(out, cd_command(self.tries / "2025-01-01-demo") + "\n")
        self.assertIn("Created: 2025-01-01-demo", err)

    def test_aborted_action_exits_with_message(self) -> None:
        with mock.patch("trypick.cli.run_selector", return_value=CancelAction()), mock.patch(
            "trypick.cli.apply_action", side_effect=HookAbortedError("Delete aborted: dirty")
        ):
            with self.assertRaises(SystemExit) as raised:
                self._main()

        self.assertEqual(raised.exception.code, "Delete aborted: dirty")

    def test_filesystem_error_during_action_exits_with_message(self) -> None:
        entry = DirectoryEntry(self.tries / "x", "x", 0.0, 0.0, 0.0, None, "x")
        denied = PermissionError(13, "Permission denied", str(entry.path))
        with mock.patch("trypick.cli.run_selector", return_value=DeleteAction(entry)), mock.patch(
            "trypick.actions.delete_entry_dir", side_effect=denied
        ):
            with self.assertRaises(SystemExit) as raised:
                self._main()

        self.assertEqual(raised.exception.code, f"Permission denied: {entry.path}")

    def test_missing_terminal_exits_cleanly(self) -> None:
        with mock.patch("trypick.cli.run_selector", side_effect=OSError("no tty")):
            with self.assertRaises(SystemExit) as raised:
                self._main()

        self.assertIn("interactive terminal", str(raised.exception.code))

    def test_init_prints_shell_function(self) -> None:
        out, _err = self._main("init", "fish")

        self.assertIn("function try", out)

    def test_usage_errors_exit_with_status_two(self) -> None:
        for argv in (("init", "tcsh"), ("clone",), ("worktree",), ("config", "path")):
            with self.assertRaises(SystemExit) as raised:
                self._main(*argv)
            self.assertEqual(raised.exception.code, 2, argv)

    def test_config_shows_effective_values(self) -> None:
        out, _err = self._main("config")

        self.assertIn(f"Path: {self.tries}", out)
        self.assertIn(f"Archive: {self.tries / '.archive'}", out)
        self.assertIn("(none)", out)

    def test_config_lists_init_actions(self) -> None:
        self.config_path.parent.mkdir(parents=True)
        init_actions = {
            "git": {"label": "git init", "command": "git init", "default": True},
            "venv": {"label": "Python venv", "command": "python3 -m venv .venv"},
        }
        self.config_path.write_text(json.dumps({"init_actions": init_actions}), encoding="utf-8")

        out, _err = self._main("config")

        self.assertIn("  Init actions:\n    git: git init (default)\n    venv: Python venv\n", out)

    def test_config_path_persists_directory(self) -> None:
        with mock.patch("trypick.cli.save_tries_path") as save:
            self._main("config", "path", str(self.tries / "new"))

        save.assert_called_once_with(self.tries / "new")

    def test_git_url_argument_clones(self) -> None:
        target = self.tries / "2025-01-01-repo"
        with mock.patch("trypick.cli.clone_repo", return_value=target) as clone:
            out, _err = self._main("--shallow", "https://github.com/user/repo.git")

        clone.assert_called_once_with(self.tries, "https://github.com/user/repo.git", name=None, shallow=True)
        self.assertEqual(out, cd_command(target) + "\n")

    def test_worktree_uses_current_repo(self) -> None:
        target = self.tries / "2025-01-01-feature"
        with mock.patch("trypick.cli.create_worktree", return_value=target) as worktree:
            out, _err = self._main("-b", "worktree", "feature")

        _tries, branch = worktree.call_args.args
        self.assertEqual(branch, "feature")
        self.assertTrue(worktree.call_args.kwargs["create_branch"])
        self.assertEqual(worktree.call_args.kwargs["repo"], Path.cwd())
        self.assertEqual(out, cd_command(target) + "\n")

    def test_emit_writes_message_to_stderr(self) -> None:
        stdout, stderr = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            cli._emit(ActionOutcome(message="Deleted: x"))

        self.assertEqual(stdout.getvalue(), "")
        self.assertEqual(stderr.getvalue(), "Deleted: x\n")


if __name__ == "__main__":
    unittest.main()
