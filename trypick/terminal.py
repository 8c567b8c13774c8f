"""Terminal control helpers for the selector session.

Owns raw-mode lifecycle and alternate-screen switching on the controlling
terminal, leaving stdout free for the ``cd`` line.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty
from collections.abc import Iterator

TTY_PATH = "/dev/tty"


class TerminalController:
    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._saved_tty_state = termios.tcgetattr(fd)

    def enable_tui_mode(self) -> None:
        tty.setraw(self.fd, termios.TCSAFLUSH)
        # Enter alternate screen and hide cursor.
        os.write(self.fd, b"\x1b[?1049h\x1b[?25l")

    def disable_tui_mode(self) -> None:
        # Show cursor and restore the main screen buffer.
        os.write(self.fd, b"\x1b[?25h\x1b[?1049l")
        termios.tcsetattr(self.fd, termios.TCSAFLUSH, self._saved_tty_state)

    def size(self) -> tuple[int, int]:
        try:
            size = os.get_terminal_size(self.fd)
        except OSError:
            size = shutil.get_terminal_size((80, 24))
        return size.columns, size.lines

    def draw(self, lines: list[str]) -> None:
        payload = "\x1b[H\x1b[2J" + "\r\n".join(lines)
        os.write(self.fd, payload.encode("utf-8", errors="replace"))

    @contextlib.contextmanager
    def raw_mode(self) -> Iterator[None]:
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()


@contextlib.contextmanager
def open_tty() -> Iterator[int]:
    """Open the controlling terminal for reading and writing."""
    fd = os.open(TTY_PATH, os.O_RDWR | os.O_NOCTTY)
    try:
        yield fd
    finally:
        os.close(fd)
