"""Turns a selector action into filesystem effects and a ``cd`` line.

Runs strictly after the interactive session has ended. Precondition failures
raise ``EntryError``; a refusing ``before_delete`` hook raises
``HookAbortedError``. Non-gating hooks and init actions never block the action.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from . import hooks
from .config import TryConfig, expand_path
from .entries import (
    create_entry_dir,
    delete_entry_dir,
    move_entry,
    touch_entry,
    validate_entry_name,
)
from .project_index import rename_project_index
from .selector import (
    ArchiveAction,
    CancelAction,
    CreateAction,
    DeleteAction,
    PromoteAction,
    RenameAction,
    SelectAction,
    SelectorAction,
)
from .shell import cd_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionOutcome:
    """``cd_command`` goes to stdout for ``eval``; ``message`` is for the user on stderr."""

    cd_command: str | None = None
    message: str | None = None


def _move_project_index(old: Path, new: Path, enabled: bool) -> str | None:
    if not enabled:
        return None
    result = rename_project_index(old, new)
    if not result.success:
        logger.warning("project folder not renamed: %s", result.error)
        return f"Project folder not renamed: {result.error}"
    if result.folder_renamed:
        return f"Project folder renamed ({result.files_modified} session files updated)"
    return None


def _run_default_init_actions(config: TryConfig, target: Path) -> list[str]:
    notes: list[str] = []
    for action in config.init_actions:
        if not action.default:
            continue
        notes.append(f"Running: {action.label}")
        result = hooks.run_init_action(action, target)
        if not result.success:
            detail = result.stderr.strip() or f"exited with code {result.exit_code}"
            logger.warning("init action %s failed: %s", action.key, detail)
            notes.append(f"  Failed: {detail}")
    return notes


def _join_messages(*parts: str | None) -> str | None:
    kept = [part for part in parts if part]
    return "\n".join(kept) if kept else None


def apply_action(config: TryConfig, action: SelectorAction) -> ActionOutcome:
    if isinstance(action, SelectAction):
        touch_entry(action.entry.path)
        hooks.notify(config.hooks, "after_select", action.entry.path)
        return ActionOutcome(cd_command(action.entry.path))

    if isinstance(action, CreateAction):
        full_path = create_entry_dir(config.path, action.name)
        notes = _run_default_init_actions(config, full_path)
        hooks.notify(config.hooks, "after_create", full_path)
        return ActionOutcome(cd_command(full_path), _join_messages(*notes, f"Created: {full_path.name}"))

    if isinstance(action, DeleteAction):
        gate = hooks.run_before_delete(config.hooks, action.entry.path)
        if not gate.proceed:
            raise hooks.HookAbortedError(f"Delete aborted: {gate.message}")
        delete_entry_dir(action.entry.path)
        return ActionOutcome(message=f"Deleted: {action.entry.name}")

    if isinstance(action, ArchiveAction):
        target = move_entry(action.entry.path, expand_path(action.target_path))
        return ActionOutcome(message=f"Archived: {action.entry.name} -> {target}")

    if isinstance(action, PromoteAction):
        target = move_entry(action.entry.path, expand_path(action.target_path).absolute())
        note = _move_project_index(action.entry.path, target, action.update_project_index)
        return ActionOutcome(cd_command(target), _join_messages(f"Promoted: {action.entry.name} -> {target}", note))

    if isinstance(action, RenameAction):
        new_name = validate_entry_name(action.new_name)
        target = move_entry(action.entry.path, action.entry.path.parent / new_name)
        note = _move_project_index(action.entry.path, target, action.update_project_index)
        return ActionOutcome(cd_command(target), _join_messages(f"Renamed: {action.entry.name} -> {new_name}", note))

    if isinstance(action, CancelAction):
        return ActionOutcome()

    raise TypeError(f"unsupported selector action: {action!r}")
