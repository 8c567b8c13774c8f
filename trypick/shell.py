"""Shell integration: the wrapper function and the ``cd`` line it evaluates.

A child process cannot change its parent's working directory, so ``trypick``
prints a ``cd`` command on stdout and a shell function evals it.
"""

from __future__ import annotations

import os
from pathlib import Path

SHELLS = ("bash", "zsh", "fish")

_BASH_ZSH_INIT = """\
# trypick shell integration
# Add to ~/.bashrc or ~/.zshrc: eval "$(trypick init)"

try() {
  case "$1" in
    -h|--help|--version|config|init)
      command trypick "$@"
      return $?
      ;;
  esac

  local output
  output=$(command trypick "$@" 2>/dev/tty)
  local exit_code=$?

  if [ $exit_code -eq 0 ] && [ -n "$output" ]; then
    eval "$output"
  fi

  return $exit_code
}
"""

_FISH_INIT = """\
# trypick shell integration
# Add to ~/.config/fish/config.fish: trypick init fish | source

function try
  switch $argv[1]
    case -h --help --version config init
      command trypick $argv
      return $status
  end

  set -l output (command trypick $argv 2>/dev/tty)
  set -l exit_code $status

  if test $exit_code -eq 0 -a -n "$output"
    eval $output
  end

  return $exit_code
end
"""


def cd_command(path: Path | str) -> str:
    """Return a ``cd`` line with ``path`` single-quoted for POSIX shells and fish."""
    escaped = str(path).replace("'", "'\\''")
    return f"cd '{escaped}'"


def detect_shell() -> str:
    shell = os.environ.get("SHELL", "")
    if "zsh" in shell:
        return "zsh"
    if "fish" in shell:
        return "fish"
    return "bash"


def shell_init(shell: str) -> str:
    if shell in {"bash", "zsh"}:
        return _BASH_ZSH_INIT
    if shell == "fish":
        return _FISH_INIT
    raise ValueError(f"Unsupported shell: {shell}")
