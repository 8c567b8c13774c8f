from __future__ import annotations

import os
import unittest
from unittest import mock

from trypick.shell import cd_command, detect_shell, shell_init


class ShellTests(unittest.TestCase):
    def test_cd_command_quotes_paths(self) -> None:
        self.assertEqual(cd_command("/tmp/tries/2025-01-01-x"), "cd '/tmp/tries/2025-01-01-x'")
        self.assertEqual(cd_command("/tmp/it's here"), "cd '/tmp/it'\\''s here'")

    def test_detect_shell_from_environment(self) -> None:
        for shell_path, expected in (("/bin/zsh", "zsh"), ("/usr/bin/fish", "fish"), ("/bin/bash", "bash"), ("", "bash")):
            with mock.patch.dict(os.environ, {"SHELL": shell_path}):
                self.assertEqual(detect_shell(), expected)

    def test_init_scripts_wrap_the_binary(self) -> None:
        self.assertIn("try() {", shell_init("bash"))
        self.assertEqual(shell_init("zsh"), shell_init("bash"))
        self.assertIn("function try", shell_init("fish"))
        for shell in ("bash", "fish"):
            self.assertIn("command trypick", shell_init(shell))
        with self.assertRaises(ValueError):
            shell_init("tcsh")


if __name__ == "__main__":
    unittest.main()
