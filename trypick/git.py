"""Thin ``git`` subprocess wrappers for cloning and worktrees into the tries root."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from .scoring import today_prefix

logger = logging.getLogger(__name__)

_GIT_HOSTS = ("github.com", "gitlab.com")


class GitError(Exception):
    pass


def is_git_url(value: str) -> bool:
    return (
        value.startswith(("https://", "http://", "git@", "ssh://"))
        or any(host in value for host in _GIT_HOSTS)
        or value.endswith(".git")
    )


def extract_repo_name(url: str) -> str:
    """Derive a directory name from a clone URL.

    Handles ``https://host/user/repo(.git)`` and ``git@host:user/repo(.git)``.
    """
    name = url.rstrip("/")
    if name.endswith(".git"):
        name = name[:-4]
    name = name.rsplit("/", 1)[-1]
    return name.rsplit(":", 1)[-1]


def _run_git(args: list[str], cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    logger.debug("git %s", " ".join(args))
    try:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise GitError(f"Failed to run git: {exc}") from exc


def clone_repo(tries_path: Path, url: str, name: str | None = None, shallow: bool = False) -> Path:
    """Clone ``url`` into ``tries_path/<today>-<name>`` and return the new path."""
    target = tries_path / f"{today_prefix()}-{name or extract_repo_name(url)}"
    if target.exists():
        raise GitError(f"Directory already exists: {target}")
    args = ["clone"]
    if shallow:
        args.extend(["--depth", "1"])
    args.extend([url, str(target)])
    proc = _run_git(args)
    if proc.returncode != 0:
        raise GitError(proc.stderr.strip() or "Clone failed")
    return target


def create_worktree(
    tries_path: Path,
    branch: str,
    name: str | None = None,
    create_branch: bool = False,
    repo: Path | None = None,
) -> Path:
    """Add a worktree for ``branch`` under the tries root and return its path."""
    worktree_name = name or branch.replace("/", "-")
    target = tries_path / f"{today_prefix()}-{worktree_name}"
    if target.exists():
        raise GitError(f"Directory already exists: {target}")
    args = ["worktree", "add"]
    if create_branch:
        args.extend(["-b", branch, str(target)])
    else:
        args.extend([str(target), branch])
    proc = _run_git(args, cwd=repo)
    if proc.returncode != 0:
        raise GitError(proc.stderr.strip() or "Worktree creation failed")
    return target
