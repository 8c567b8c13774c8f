"""Low-level terminal input decoding.

Reads raw bytes from the terminal and translates them into normalized key
tokens (``"a"``, ``"ENTER"``, ``"CTRL_D"``, ``"UP"`` ...). Handles ESC-sequence
timing and multi-byte UTF-8 characters.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_CONTROL_KEYS: dict[bytes, str] = {
    b"\x01": "CTRL_A",
    b"\x02": "CTRL_B",
    b"\x03": "CTRL_C",
    b"\x04": "CTRL_D",
    b"\x05": "CTRL_E",
    b"\x06": "CTRL_F",
    b"\x0b": "CTRL_K",
    b"\x0e": "CTRL_N",
    b"\x0f": "CTRL_O",
    b"\x10": "CTRL_P",
    b"\x12": "CTRL_R",
    b"\x15": "CTRL_U",
    b"\x17": "CTRL_W",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
}

_CSI_FINAL_KEYS: dict[bytes, str] = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
}

_CSI_TILDE_KEYS: dict[bytes, str] = {
    b"1": "HOME",
    b"7": "HOME",
    b"4": "END",
    b"8": "END",
    b"3": "DELETE",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _decode_utf8(fd: int, lead: bytes) -> str:
    data = bytearray(lead)
    for _ in range(_utf8_length(lead[0]) - 1):
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            break
        data.extend(nxt)
    return data.decode("utf-8", errors="replace")


def _read_escape(fd: int) -> str:
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq == b"O":
        # SS3 form used by some terminals for Home/End and arrows.
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return "ESC"
        return _CSI_FINAL_KEYS.get(final, "ESC")
    if seq != b"[":
        _PENDING_BYTES.append(seq)
        return "ESC"

    params = bytearray()
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return "ESC"
        if part in _CSI_FINAL_KEYS:
            # Modifier-qualified forms (ESC[1;5A) map to the plain key.
            return _CSI_FINAL_KEYS[part]
        if part == b"~":
            return _CSI_TILDE_KEYS.get(bytes(params).split(b";")[0], "UNKNOWN")
        if not (part.isdigit() or part == b";"):
            return "UNKNOWN"
        params.extend(part)
        if len(params) > 16:
            return "UNKNOWN"


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token from ``fd``; returns ``""`` on timeout or EOF."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    if ch in _CONTROL_KEYS:
        return _CONTROL_KEYS[ch]
    if ch == b"\x1b":
        return _read_escape(fd)
    if ch[0] < 0x20:
        return "UNKNOWN"
    return _decode_utf8(fd, ch)
