"""Lifecycle hook execution.

A hook is either a path to an executable (``/``, ``~`` or ``./`` prefix) run
with the target directory as its only argument, or an inline script run through
``bash -c`` with the directory as ``$1``. Output is captured, never streamed.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

HOOK_NAMES: tuple[str, ...] = (
    "after_create",
    "after_clone",
    "after_worktree",
    "after_select",
    "before_delete",
)
NOT_FOUND_EXIT_CODE = 127
_PATH_PREFIXES = ("/", "~", "./")


class HookAbortedError(Exception):
    """A gating hook refused the pending operation."""


@dataclass(frozen=True)
class HookInvocation:
    hook: str
    target_dir: Path
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class HookGate:
    proceed: bool
    message: str | None = None


@dataclass(frozen=True)
class InitAction:
    """A named setup command offered after a directory is created."""

    key: str
    label: str
    command: str
    default: bool = False


def is_script_path(command: str) -> bool:
    return command.startswith(_PATH_PREFIXES)


def _shell_executable() -> str:
    return shutil.which("bash") or "/bin/sh"


def _hook_command(command: str, target_dir: Path) -> list[str] | str:
    """Return argv for ``command`` or an error message when the script is missing."""
    if is_script_path(command):
        script = Path(command).expanduser()
        if not script.exists():
            return f"Hook script not found: {script}"
        return [str(script), str(target_dir)]
    return [_shell_executable(), "-c", command, "--", str(target_dir)]


def run_hook(hooks: Mapping[str, str], hook: str, target_dir: Path) -> HookInvocation:
    """Run the command configured for ``hook`` inside ``target_dir``.

    An unconfigured hook succeeds immediately with empty output. There is no
    timeout: hooks are trusted local scripts and may block.
    """
    command = hooks.get(hook)
    if not command:
        return HookInvocation(hook, target_dir)

    argv = _hook_command(command, target_dir)
    if isinstance(argv, str):
        return HookInvocation(hook, target_dir, exit_code=NOT_FOUND_EXIT_CODE, stderr=argv)

    env = {**os.environ, "TRY_DIR": str(target_dir), "TRY_HOOK": hook}
    logger.debug("running %s hook in %s", hook, target_dir)
    return _run_captured(argv, hook, target_dir, env)


def run_init_action(action: InitAction, target_dir: Path) -> HookInvocation:
    """Run an init action's inline script in ``target_dir`` with the directory as ``$1``."""
    argv = [_shell_executable(), "-c", action.command, "--", str(target_dir)]
    env = {**os.environ, "TRY_DIR": str(target_dir)}
    logger.debug("running init action %s in %s", action.key, target_dir)
    return _run_captured(argv, f"init:{action.key}", target_dir, env)


def _run_captured(argv: list[str], hook: str, target_dir: Path, env: Mapping[str, str]) -> HookInvocation:
    try:
        proc = subprocess.run(
            argv,
            cwd=target_dir,
            env=env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
        )
    except OSError as exc:
        return HookInvocation(hook, target_dir, exit_code=1, stderr=str(exc))
    return HookInvocation(hook, target_dir, proc.returncode, proc.stdout, proc.stderr)


def run_before_delete(hooks: Mapping[str, str], target_dir: Path) -> HookGate:
    """Run ``before_delete`` and decide whether deletion may proceed."""
    result = run_hook(hooks, "before_delete", target_dir)
    if result.success:
        return HookGate(proceed=True)
    message = result.stderr.strip() or f"before_delete hook exited with code {result.exit_code}"
    return HookGate(proceed=False, message=message)


def notify(hooks: Mapping[str, str], hook: str, target_dir: Path) -> HookInvocation:
    """Run a non-gating hook; failures are logged and otherwise ignored."""
    result = run_hook(hooks, hook, target_dir)
    if not result.success:
        detail = result.stderr.strip() or "no output"
        logger.warning("%s hook failed with exit code %d: %s", hook, result.exit_code, detail)
    return result
