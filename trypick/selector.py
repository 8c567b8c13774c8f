"""Interactive selection state machine.

The selector is a synchronous reducer: ``handle_key(session, key)`` returns the
next immutable session plus, at most once per run, a terminal action. Modes are
a tagged union of frozen dataclasses, each carrying only its own data.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from pathlib import Path

from .entries import DirectoryEntry
from .scoring import RankedEntry, create_dir_name, score_entries

EXIT_KEYWORDS = frozenset({"exit", "q"})

CONFIRM_KEYS = frozenset({"ENTER"})
CANCEL_KEYS = frozenset({"ESC", "CTRL_C"})
NEXT_KEYS = frozenset({"DOWN", "CTRL_N", "TAB"})
PREV_KEYS = frozenset({"UP", "CTRL_P"})


def _no_project_index(_path: Path) -> bool:
    return False


@dataclass(frozen=True)
class SelectorContext:
    """Values the selector needs from configuration and the environment."""

    tries_path: Path
    archive_path: Path
    has_project_index: Callable[[Path], bool] = _no_project_index
    clock: Callable[[], float] = time.time
    exit_keywords: frozenset[str] = EXIT_KEYWORDS


@dataclass(frozen=True)
class LineEditor:
    """Single-line text buffer with a cursor and readline-style edits."""

    text: str = ""
    cursor: int = 0

    @classmethod
    def prefilled(cls, text: str) -> LineEditor:
        return cls(text, len(text))

    def insert(self, chars: str) -> LineEditor:
        text = self.text[: self.cursor] + chars + self.text[self.cursor :]
        return LineEditor(text, self.cursor + len(chars))

    def delete_backward(self) -> LineEditor:
        if self.cursor <= 0:
            return self
        return LineEditor(self.text[: self.cursor - 1] + self.text[self.cursor :], self.cursor - 1)

    def move(self, delta: int) -> LineEditor:
        return replace(self, cursor=max(0, min(len(self.text), self.cursor + delta)))

    def home(self) -> LineEditor:
        return replace(self, cursor=0)

    def end(self) -> LineEditor:
        return replace(self, cursor=len(self.text))

    def kill_to_end(self) -> LineEditor:
        return LineEditor(self.text[: self.cursor], self.cursor)

    def kill_to_start(self) -> LineEditor:
        return LineEditor(self.text[self.cursor :], 0)

    def delete_word_backward(self) -> LineEditor:
        before = self.text[: self.cursor].rstrip()
        cut = len(before)
        while cut > 0 and not before[cut - 1].isspace():
            cut -= 1
        return LineEditor(self.text[:cut] + self.text[self.cursor :], cut)

    def handle_key(self, key: str) -> LineEditor | None:
        """Apply an editing key, or return ``None`` when ``key`` is not an edit."""
        if key == "BACKSPACE":
            return self.delete_backward()
        if key in {"LEFT", "CTRL_B"}:
            return self.move(-1)
        if key in {"RIGHT", "CTRL_F"}:
            return self.move(1)
        if key in {"CTRL_A", "HOME"}:
            return self.home()
        if key in {"CTRL_E", "END"}:
            return self.end()
        if key == "CTRL_K":
            return self.kill_to_end()
        if key == "CTRL_U":
            return self.kill_to_start()
        if key == "CTRL_W":
            return self.delete_word_backward()
        if is_printable_key(key):
            return self.insert(key)
        return None


@dataclass(frozen=True)
class SearchMode:
    pass


@dataclass(frozen=True)
class DeleteConfirmMode:
    target: DirectoryEntry
    typed: str = ""

    @property
    def armed(self) -> bool:
        return self.typed == self.target.name


@dataclass(frozen=True)
class ArchiveConfirmMode:
    target: DirectoryEntry
    editor: LineEditor


@dataclass(frozen=True)
class PromoteConfirmMode:
    target: DirectoryEntry
    editor: LineEditor
    pending_target: str | None = None


@dataclass(frozen=True)
class RenameConfirmMode:
    target: DirectoryEntry
    editor: LineEditor
    pending_name: str | None = None


SelectorMode = SearchMode | DeleteConfirmMode | ArchiveConfirmMode | PromoteConfirmMode | RenameConfirmMode


@dataclass(frozen=True)
class SelectAction:
    entry: DirectoryEntry


@dataclass(frozen=True)
class CreateAction:
    name: str


@dataclass(frozen=True)
class DeleteAction:
    entry: DirectoryEntry


@dataclass(frozen=True)
class ArchiveAction:
    entry: DirectoryEntry
    target_path: str


@dataclass(frozen=True)
class PromoteAction:
    entry: DirectoryEntry
    target_path: str
    update_project_index: bool = False


@dataclass(frozen=True)
class RenameAction:
    entry: DirectoryEntry
    new_name: str
    update_project_index: bool = False


@dataclass(frozen=True)
class CancelAction:
    pass


SelectorAction = SelectAction | CreateAction | DeleteAction | ArchiveAction | PromoteAction | RenameAction | CancelAction


@dataclass(frozen=True)
class SelectorSession:
    context: SelectorContext
    entries: tuple[DirectoryEntry, ...]
    editor: LineEditor = field(default_factory=LineEditor)
    cursor: int = 0
    mode: SelectorMode = field(default_factory=SearchMode)
    ranked: tuple[RankedEntry, ...] = ()

    @property
    def query(self) -> str:
        return self.editor.text

    @property
    def has_create_slot(self) -> bool:
        return bool(self.query.strip())

    @property
    def slot_count(self) -> int:
        return len(self.ranked) + (1 if self.has_create_slot else 0)

    @property
    def on_create_slot(self) -> bool:
        return self.has_create_slot and self.cursor == len(self.ranked)

    @property
    def current(self) -> RankedEntry | None:
        if 0 <= self.cursor < len(self.ranked):
            return self.ranked[self.cursor]
        return None

    def create_name(self) -> str:
        return create_dir_name(self.query)


ActionResult = tuple[SelectorSession, SelectorAction | None]


def is_printable_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


def start_session(
    context: SelectorContext,
    entries: Iterable[DirectoryEntry],
    query: str = "",
) -> SelectorSession:
    snapshot = tuple(entries)
    ranked = tuple(score_entries(snapshot, query, context.clock()))
    return SelectorSession(context=context, entries=snapshot, editor=LineEditor.prefilled(query), ranked=ranked)


def _edit_query(session: SelectorSession, editor: LineEditor) -> SelectorSession:
    if editor == session.editor:
        return session
    if editor.text == session.query:
        return replace(session, editor=editor)
    ranked = tuple(score_entries(session.entries, editor.text, session.context.clock()))
    return replace(session, editor=editor, cursor=0, ranked=ranked)


def _move_cursor(session: SelectorSession, direction: int) -> SelectorSession:
    count = session.slot_count
    if count == 0:
        return session
    return replace(session, cursor=(session.cursor + direction) % count)


def _to_search(session: SelectorSession) -> ActionResult:
    return replace(session, mode=SearchMode()), None


def _is_exit_query(session: SelectorSession) -> bool:
    return session.query.strip().lower() in session.context.exit_keywords


def _open_confirm(session: SelectorSession, key: str) -> SelectorSession:
    current = session.current
    if current is None:
        return session
    entry = current.entry
    context = session.context
    if key == "CTRL_D":
        return replace(session, mode=DeleteConfirmMode(entry))
    if key == "CTRL_A":
        default = str(context.archive_path / entry.name)
        return replace(session, mode=ArchiveConfirmMode(entry, LineEditor.prefilled(default)))
    if key == "CTRL_O":
        default = str(context.tries_path.parent / entry.base_name)
        return replace(session, mode=PromoteConfirmMode(entry, LineEditor.prefilled(default)))
    return replace(session, mode=RenameConfirmMode(entry, LineEditor.prefilled(entry.name)))


def _handle_search_key(session: SelectorSession, key: str) -> ActionResult:
    if key in CANCEL_KEYS:
        return session, CancelAction()
    if key in CONFIRM_KEYS:
        if session.on_create_slot:
            return session, CreateAction(session.create_name())
        if _is_exit_query(session):
            return session, CancelAction()
        current = session.current
        if current is None:
            return session, None
        return session, SelectAction(current.entry)
    if key in NEXT_KEYS:
        return _move_cursor(session, 1), None
    if key in PREV_KEYS:
        return _move_cursor(session, -1), None
    if key in {"CTRL_D", "CTRL_A", "CTRL_O", "CTRL_R"}:
        return _open_confirm(session, key), None
    edited = session.editor.handle_key(key)
    if edited is None:
        return session, None
    return _edit_query(session, edited), None


def _handle_delete_key(session: SelectorSession, mode: DeleteConfirmMode, key: str) -> ActionResult:
    if key in CANCEL_KEYS:
        return _to_search(session)
    if key in CONFIRM_KEYS:
        if mode.armed:
            return session, DeleteAction(mode.target)
        return session, None
    if key == "BACKSPACE":
        return replace(session, mode=replace(mode, typed=mode.typed[:-1])), None
    if key == "CTRL_U":
        return replace(session, mode=replace(mode, typed="")), None
    if is_printable_key(key):
        return replace(session, mode=replace(mode, typed=mode.typed + key)), None
    return session, None


def _answer_project_index(key: str) -> bool | None:
    if key in {"y", "Y"} or key in CONFIRM_KEYS:
        return True
    if key in {"n", "N"} or key in CANCEL_KEYS:
        return False
    return None


def _edit_or_ignore(session: SelectorSession, mode: ArchiveConfirmMode | PromoteConfirmMode | RenameConfirmMode, key: str) -> ActionResult:
    edited = mode.editor.handle_key(key)
    if edited is None:
        return session, None
    return replace(session, mode=replace(mode, editor=edited)), None


def _handle_archive_key(session: SelectorSession, mode: ArchiveConfirmMode, key: str) -> ActionResult:
    if key in CANCEL_KEYS:
        return _to_search(session)
    if key in CONFIRM_KEYS:
        target_path = mode.editor.text.strip()
        if not target_path:
            return session, None
        return session, ArchiveAction(mode.target, target_path)
    return _edit_or_ignore(session, mode, key)


def _handle_promote_key(session: SelectorSession, mode: PromoteConfirmMode, key: str) -> ActionResult:
    if mode.pending_target is not None:
        answer = _answer_project_index(key)
        if answer is None:
            return session, None
        return session, PromoteAction(mode.target, mode.pending_target, answer)
    if key in CANCEL_KEYS:
        return _to_search(session)
    if key in CONFIRM_KEYS:
        target_path = mode.editor.text.strip()
        if not target_path:
            return session, None
        if session.context.has_project_index(mode.target.path):
            return replace(session, mode=replace(mode, pending_target=target_path)), None
        return session, PromoteAction(mode.target, target_path)
    return _edit_or_ignore(session, mode, key)


def _handle_rename_key(session: SelectorSession, mode: RenameConfirmMode, key: str) -> ActionResult:
    if mode.pending_name is not None:
        answer = _answer_project_index(key)
        if answer is None:
            return session, None
        return session, RenameAction(mode.target, mode.pending_name, answer)
    if key in CANCEL_KEYS:
        return _to_search(session)
    if key in CONFIRM_KEYS:
        new_name = mode.editor.text.strip()
        if not new_name or new_name == mode.target.name:
            return session, None
        if session.context.has_project_index(mode.target.path):
            return replace(session, mode=replace(mode, pending_name=new_name)), None
        return session, RenameAction(mode.target, new_name)
    return _edit_or_ignore(session, mode, key)


def handle_key(session: SelectorSession, key: str) -> ActionResult:
    """Apply one key token to ``session``.

    Returns ``(next_session, action)``; ``action`` is ``None`` until the user
    commits to an outcome. Unknown keys leave the session unchanged.
    """
    mode = session.mode
    if isinstance(mode, DeleteConfirmMode):
        return _handle_delete_key(session, mode, key)
    if isinstance(mode, ArchiveConfirmMode):
        return _handle_archive_key(session, mode, key)
    if isinstance(mode, PromoteConfirmMode):
        return _handle_promote_key(session, mode, key)
    if isinstance(mode, RenameConfirmMode):
        return _handle_rename_key(session, mode, key)
    return _handle_search_key(session, key)
