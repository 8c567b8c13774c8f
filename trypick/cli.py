"""Command-line front door for trypick.

Parses arguments, loads configuration, and dispatches to the interactive
selector or one of the helper commands. Only ``cd`` lines are written to
stdout; status and errors go to stderr.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__, hooks
from .actions import ActionOutcome, apply_action
from .app import run_selector
from .config import TryConfig, load_try_config, save_tries_path
from .entries import EntryError
from .git import GitError, clone_repo, create_worktree, is_git_url
from .shell import SHELLS, cd_command, detect_shell, shell_init

COMMANDS = ("init", "config", "clone", "worktree")
HOOK_PREVIEW_CHARS = 50


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="trypick: %(message)s",
        stream=sys.stderr,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trypick",
        description="Pick, create, and manage dated scratch directories.",
        epilog=(
            "commands:\n"
            "  trypick [query]               interactive selector\n"
            "  trypick <git-url>             clone into the tries directory\n"
            "  trypick clone <url> [name]    clone with an explicit name\n"
            "  trypick worktree <branch> [name]\n"
            "  trypick init [bash|zsh|fish]  print shell integration\n"
            "  trypick config [path <dir>]   show or set configuration"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("words", nargs="*", help="Search query, or a command and its arguments.")
    parser.add_argument("--path", default=None, help="Tries directory (overrides config and $TRY_PATH).")
    parser.add_argument("--shallow", action="store_true", help="Shallow clone (depth 1).")
    parser.add_argument("-b", "--create-branch", action="store_true", help="Create the worktree branch.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _emit(outcome: ActionOutcome) -> None:
    if outcome.message:
        print(outcome.message, file=sys.stderr)
    if outcome.cd_command:
        print(outcome.cd_command)


def show_config(config: TryConfig) -> None:
    print("Configuration:")
    print(f"  Path: {config.path}")
    print(f"  Archive: {config.archive_path}")
    print("  Hooks:")
    if not config.hooks:
        print("    (none)")
    for hook, command in config.hooks.items():
        preview = command if len(command) <= HOOK_PREVIEW_CHARS else command[:HOOK_PREVIEW_CHARS] + "..."
        escaped = preview.replace("\n", "\\n")
        print(f"    {hook}: {escaped}")
    print("  Init actions:")
    if not config.init_actions:
        print("    (none)")
    for action in config.init_actions:
        marker = " (default)" if action.default else ""
        print(f"    {action.key}: {action.label}{marker}")


def _clone(config: TryConfig, url: str, name: str | None, shallow: bool) -> None:
    config.path.mkdir(parents=True, exist_ok=True)
    target = clone_repo(config.path, url, name=name, shallow=shallow)
    hooks.notify(config.hooks, "after_clone", target)
    print(cd_command(target))


def _worktree(config: TryConfig, branch: str, name: str | None, create_branch: bool) -> None:
    config.path.mkdir(parents=True, exist_ok=True)
    target = create_worktree(config.path, branch, name=name, create_branch=create_branch, repo=Path.cwd())
    hooks.notify(config.hooks, "after_worktree", target)
    print(cd_command(target))


def _run_interactive(config: TryConfig, query: str) -> None:
    config.path.mkdir(parents=True, exist_ok=True)
    try:
        action = run_selector(config, query)
    except OSError as exc:
        raise SystemExit(f"trypick needs an interactive terminal: {exc}") from exc
    _emit(apply_action(config, action))


def _dispatch(parser: argparse.ArgumentParser, args: argparse.Namespace, config: TryConfig) -> None:
    words: list[str] = args.words
    command = words[0] if words else ""
    rest = words[1:]

    if command == "init":
        shell = rest[0] if rest else detect_shell()
        if shell not in SHELLS:
            parser.error(f"unsupported shell {shell!r} (choose from {', '.join(SHELLS)})")
        sys.stdout.write(shell_init(shell))
        return
    if command == "config":
        if rest[:1] == ["path"]:
            if len(rest) != 2:
                parser.error("config path requires exactly one directory")
            save_tries_path(Path(rest[1]).expanduser().absolute())
            return
        show_config(config)
        return
    if command == "clone":
        if not rest:
            parser.error("clone requires a repository URL")
        _clone(config, rest[0], rest[1] if len(rest) > 1 else None, args.shallow)
        return
    if command == "worktree":
        if not rest:
            parser.error("worktree requires a branch name")
        _worktree(config, rest[0], rest[1] if len(rest) > 1 else None, args.create_branch)
        return
    if len(words) == 1 and is_git_url(command):
        _clone(config, command, None, args.shallow)
        return
    _run_interactive(config, " ".join(words))


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run the requested command.

    Filesystem (including raw ``OSError``), git, and aborted-hook failures exit
    with status 1 and a message on stderr; usage errors exit with status 2.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    config = load_try_config(args.path)
    try:
        _dispatch(parser, args, config)
    except (EntryError, GitError, hooks.HookAbortedError) as exc:
        raise SystemExit(str(exc)) from exc
    except OSError as exc:
        target = f": {exc.filename}" if exc.filename else ""
        raise SystemExit(f"{exc.strerror or exc}{target}") from exc


if __name__ == "__main__":
    main()
