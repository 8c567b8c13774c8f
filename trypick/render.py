"""ANSI rendering of a selector session.

Everything here is presentation-only and side-effect free: ``render_session``
maps a session snapshot to screen lines for ``TerminalController.draw``.
"""

from __future__ import annotations

import time
import unicodedata
from dataclasses import dataclass

from .scoring import RankedEntry
from .selector import (
    ArchiveConfirmMode,
    DeleteConfirmMode,
    LineEditor,
    PromoteConfirmMode,
    RenameConfirmMode,
    SelectorSession,
)


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    reset: str = "\033[0m"
    reverse: str = "\033[7m"
    dim: str = "\033[2m"
    query: str = "\033[1;38;5;81m"
    match: str = "\033[1;38;5;214m"
    selected: str = "\033[1;38;5;81m"
    date: str = "\033[38;5;109m"
    age: str = "\033[2;38;5;250m"
    create: str = "\033[38;5;42m"
    danger: str = "\033[1;38;5;203m"
    warning: str = "\033[38;5;221m"
    ok: str = "\033[38;5;42m"
    title: str = "\033[1;38;5;221m"
    hint_key: str = "\033[38;5;229m"


DEFAULT_THEME = UITheme()

SEARCH_HINTS: tuple[tuple[str, str], ...] = (
    ("↑↓", "navigate"),
    ("enter", "select"),
    ("ctrl+r", "rename"),
    ("ctrl+a", "archive"),
    ("ctrl+d", "delete"),
    ("ctrl+o", "promote"),
    ("esc", "cancel"),
)
EDIT_HINTS: tuple[tuple[str, str], ...] = (("enter", "confirm"), ("esc", "cancel"))
QUESTION_HINTS: tuple[tuple[str, str], ...] = (("y/enter", "yes"), ("n/esc", "no"))


def display_width(text: str) -> int:
    return sum(2 if unicodedata.east_asian_width(ch) in {"W", "F"} else 1 for ch in text)


def clip_text(text: str, max_cols: int) -> str:
    """Trim plain ``text`` to ``max_cols`` display columns, marking the cut with ``…``."""
    if max_cols <= 0:
        return ""
    if display_width(text) <= max_cols:
        return text
    out: list[str] = []
    col = 0
    for ch in text:
        w = display_width(ch)
        if col + w > max_cols - 1:
            break
        out.append(ch)
        col += w
    return "".join(out) + "…"


def format_age(modified_at: float, now: float) -> str:
    seconds = max(0.0, now - modified_at)
    if seconds < 60:
        return "just now"
    minutes = seconds / 60
    if minutes < 60:
        return f"{int(minutes)}m ago"
    hours = minutes / 60
    if hours < 24:
        return f"{int(hours)}h ago"
    days = hours / 24
    if days < 14:
        return f"{int(days)}d ago"
    if days < 60:
        return f"{int(days // 7)}w ago"
    return f"{int(days // 30)}mo ago"


def highlight_name(
    name: str,
    positions: tuple[int, ...],
    date_length: int = 0,
    theme: UITheme = DEFAULT_THEME,
) -> str:
    """Color matched characters, then the leading date prefix of ``date_length`` chars."""
    marked = set(positions)
    out: list[str] = []
    for idx, ch in enumerate(name):
        if idx in marked:
            out.append(f"{theme.match}{ch}{theme.reset}")
        elif idx < date_length:
            out.append(f"{theme.date}{ch}{theme.reset}")
        else:
            out.append(ch)
    return "".join(out)


def _hint_line(hints: tuple[tuple[str, str], ...], theme: UITheme) -> str:
    return "  ".join(f"{theme.hint_key}{key}{theme.reset} {theme.dim}{label}{theme.reset}" for key, label in hints)


def _editor_line(label: str, editor: LineEditor, theme: UITheme, color: str = "") -> str:
    before = editor.text[: editor.cursor]
    after = editor.text[editor.cursor :]
    cursor_char = after[:1] or " "
    reset = theme.reset if color else ""
    return (
        f"{theme.dim}{label}{theme.reset}{color}{before}{reset}"
        f"{theme.reverse}{cursor_char}{theme.reset}{color}{after[1:]}{reset}"
    )


def _entry_row(item: RankedEntry, selected: bool, width: int, now: float, theme: UITheme) -> str:
    age = format_age(item.entry.modified_at, now)
    marker = "→ " if selected else "  "
    name_cols = max(1, width - len(marker) - len(age) - 2)
    name = clip_text(item.name, name_cols)
    padding = " " * max(1, name_cols - display_width(name) + 1)
    visible = tuple(pos for pos in item.matched_positions if pos < len(name))
    date_length = len(item.entry.date_prefix or "")
    styled = highlight_name(name, visible, date_length, theme)
    if selected:
        marker = f"{theme.selected}{marker}{theme.reset}"
    return f"{marker}{styled}{padding}{theme.age}{age}{theme.reset}"


def _search_lines(session: SelectorSession, width: int, height: int, now: float, theme: UITheme) -> list[str]:
    lines = [
        _editor_line("Search: ", session.editor, theme, theme.query),
        f"{theme.dim}{'─' * max(1, width)}{theme.reset}",
    ]
    list_rows = max(1, height - 4)
    start = max(0, session.cursor - list_rows + 1)
    rows: list[str] = []
    for idx in range(start, min(session.slot_count, start + list_rows)):
        selected = idx == session.cursor
        if idx < len(session.ranked):
            rows.append(_entry_row(session.ranked[idx], selected, width, now, theme))
            continue
        marker = f"{theme.selected}→ {theme.reset}" if selected else "  "
        label = clip_text(f"+ Create new: {session.create_name()}", max(1, width - 2))
        rows.append(f"{marker}{theme.create}{label}{theme.reset}")
    if not rows:
        rows.append(f"  {theme.dim}No directories yet. Type a name to create one.{theme.reset}")
    lines.extend(rows)
    lines.append("")
    lines.append(_hint_line(SEARCH_HINTS, theme))
    return lines


def _delete_lines(mode: DeleteConfirmMode, theme: UITheme) -> list[str]:
    typed_color = theme.ok if mode.armed else theme.warning
    hint = "Press enter to delete" if mode.armed else "esc to cancel"
    return [
        f"{theme.danger}Delete directory?{theme.reset}",
        "",
        f"  {mode.target.name}",
        f"  {theme.dim}{mode.target.path}{theme.reset}",
        "",
        "Type directory name to confirm:",
        f"  {typed_color}{mode.typed}{theme.reset}{theme.reverse} {theme.reset}",
        "",
        f"{theme.dim}{hint}{theme.reset}",
    ]


def _move_lines(
    title: str,
    mode: ArchiveConfirmMode | PromoteConfirmMode | RenameConfirmMode,
    pending: str | None,
    theme: UITheme,
) -> list[str]:
    lines = [f"{theme.title}{title}{theme.reset}", "", f"{theme.dim}From: {theme.reset}{mode.target.path}"]
    if pending is not None:
        lines.append(f"{theme.dim}To:   {theme.reset}{theme.ok}{pending}{theme.reset}")
        lines.append("")
        lines.append(f"Also rename the project session folder? {theme.hint_key}(Y/n){theme.reset}")
        lines.append("")
        lines.append(_hint_line(QUESTION_HINTS, theme))
        return lines
    label = "New name: " if isinstance(mode, RenameConfirmMode) else "To:   "
    lines.append(_editor_line(label, mode.editor, theme))
    if isinstance(mode, RenameConfirmMode) and mode.editor.text.strip() == mode.target.name:
        lines.append(f"{theme.dim}(name unchanged){theme.reset}")
    lines.append("")
    lines.append(_hint_line(EDIT_HINTS, theme))
    return lines


def render_session(
    session: SelectorSession,
    width: int,
    height: int,
    theme: UITheme = DEFAULT_THEME,
    now: float | None = None,
) -> list[str]:
    if now is None:
        now = time.time()
    mode = session.mode
    if isinstance(mode, DeleteConfirmMode):
        lines = _delete_lines(mode, theme)
    elif isinstance(mode, ArchiveConfirmMode):
        lines = _move_lines("Archive directory", mode, None, theme)
    elif isinstance(mode, PromoteConfirmMode):
        lines = _move_lines("Promote directory", mode, mode.pending_target, theme)
    elif isinstance(mode, RenameConfirmMode):
        lines = _move_lines("Rename directory", mode, mode.pending_name, theme)
    else:
        lines = _search_lines(session, width, height, now, theme)
    return lines[: max(1, height)]
