"""Interactive selector runtime.

Wires the terminal, key decoding, rendering and the selector reducer into a
single-threaded loop: read one key, reduce, redraw, until an action appears.
"""

from __future__ import annotations

from collections.abc import Callable

from .config import TryConfig
from .entries import list_entries
from .input import read_key
from .project_index import has_project_index
from .render import render_session
from .selector import (
    CancelAction,
    SelectorAction,
    SelectorContext,
    SelectorSession,
    handle_key,
    start_session,
)
from .terminal import TerminalController, open_tty


def selector_context(config: TryConfig) -> SelectorContext:
    return SelectorContext(
        tries_path=config.path,
        archive_path=config.archive_path,
        has_project_index=has_project_index,
    )


def drive_session(
    session: SelectorSession,
    next_key: Callable[[], str],
    redraw: Callable[[SelectorSession], None],
) -> SelectorAction:
    """Feed keys into ``session`` until the reducer yields an action.

    An empty key means input ended (EOF on the terminal) and is treated as a
    cancellation.
    """
    redraw(session)
    while True:
        key = next_key()
        if not key:
            return CancelAction()
        session, action = handle_key(session, key)
        if action is not None:
            return action
        redraw(session)


def run_selector(config: TryConfig, initial_query: str = "") -> SelectorAction:
    """Run the full-screen selector on ``/dev/tty`` and return the chosen action."""
    session = start_session(selector_context(config), list_entries(config.path), initial_query)
    with open_tty() as fd:
        terminal = TerminalController(fd)

        def redraw(current: SelectorSession) -> None:
            width, height = terminal.size()
            terminal.draw(render_session(current, width, height))

        with terminal.raw_mode():
            return drive_session(session, lambda: read_key(fd), redraw)
