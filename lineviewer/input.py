"""Low-level terminal input decoding.

Reads raw bytes from the terminal and translates them into key tokens.
Escape sequences are decoded by a small state machine; partial or unknown
sequences degrade to a bare ``ESC`` instead of blocking.
"""

from __future__ import annotations

import enum
import errno
import os
import select
from collections import deque
from collections.abc import Iterator

from .errors import TerminalError

ESC_SEQUENCE_TIMEOUT_MS = 25
IDLE_READ_TIMEOUT_MS = 100

ESC = "ESC"
UP = "UP"
DOWN = "DOWN"
LEFT = "LEFT"
RIGHT = "RIGHT"
HOME = "HOME"
END = "END"
PAGE_UP = "PAGE_UP"
PAGE_DOWN = "PAGE_DOWN"
DELETE = "DELETE"

_ESC_BYTE = b"\x1b"

_CSI_FINAL_KEYS = {
    b"A": UP,
    b"B": DOWN,
    b"C": RIGHT,
    b"D": LEFT,
    b"H": HOME,
    b"F": END,
}

_CSI_PARAM_KEYS = {
    b"1": HOME,
    b"7": HOME,
    b"4": END,
    b"8": END,
    b"5": PAGE_UP,
    b"6": PAGE_DOWN,
    b"3": DELETE,
}

_SS3_KEYS = {
    b"H": HOME,
    b"F": END,
}


def ctrl_key(ch: str) -> str:
    """Return the control character produced by Ctrl+``ch``."""
    return chr(ord(ch) & 0x1F)


class DecoderState(enum.Enum):
    START = "start"
    ESCAPE1 = "escape1"
    CSI = "csi"
    CSI_PARAM = "csi_param"
    SS3 = "ss3"


class KeyDecoder:
    """Decode key tokens from a terminal file descriptor.

    ``read_key`` blocks until a complete key is available. Bytes after an
    ``ESC`` that do not start a known sequence are queued and decoded as the
    next key, so a quick ``Esc`` followed by a letter loses nothing.
    """

    def __init__(
        self,
        fd: int,
        escape_timeout_ms: int = ESC_SEQUENCE_TIMEOUT_MS,
        idle_timeout_ms: int = IDLE_READ_TIMEOUT_MS,
    ) -> None:
        self.fd = fd
        self.escape_timeout_ms = escape_timeout_ms
        self.idle_timeout_ms = idle_timeout_ms
        self._pending: deque[bytes] = deque()

    def __iter__(self) -> Iterator[str]:
        while True:
            yield self.read_key()

    def read_key(self) -> str:
        """Block until one key is decoded and return its token."""
        state = DecoderState.START
        param = b""
        while True:
            if state is DecoderState.START:
                ch = self._read_blocking()
                if ch != _ESC_BYTE:
                    return ch.decode("latin-1")
                state = DecoderState.ESCAPE1
            elif state is DecoderState.ESCAPE1:
                ch = self._read_follow_up()
                if ch == b"[":
                    state = DecoderState.CSI
                elif ch == b"O":
                    state = DecoderState.SS3
                else:
                    if ch is not None:
                        self._pending.append(ch)
                    return ESC
            elif state is DecoderState.CSI:
                ch = self._read_follow_up()
                if ch is None:
                    return ESC
                if ch in _CSI_FINAL_KEYS:
                    return _CSI_FINAL_KEYS[ch]
                if ch.isdigit():
                    param = ch
                    state = DecoderState.CSI_PARAM
                else:
                    return ESC
            elif state is DecoderState.CSI_PARAM:
                ch = self._read_follow_up()
                if ch != b"~":
                    return ESC
                return _CSI_PARAM_KEYS.get(param, ESC)
            elif state is DecoderState.SS3:
                ch = self._read_follow_up()
                return _SS3_KEYS.get(ch, ESC)

    def _read_blocking(self) -> bytes:
        """Read one byte, retrying idle timeouts until input arrives."""
        if self._pending:
            return self._pending.popleft()
        while True:
            ch = self._read_byte(self.idle_timeout_ms)
            if ch is not None:
                return ch

    def _read_follow_up(self) -> bytes | None:
        if self._pending:
            return self._pending.popleft()
        return self._read_byte(self.escape_timeout_ms)

    def _read_byte(self, timeout_ms: int) -> bytes | None:
        """Return one byte, or ``None`` when nothing arrived in time."""
        try:
            ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return None
            ch = os.read(self.fd, 1)
        except OSError as exc:
            if exc.errno in (errno.EAGAIN, errno.EINTR):
                return None
            raise TerminalError("read input", exc.strerror or str(exc)) from exc
        if not ch:
            # select reported readable, so an empty read means hangup or EOF.
            raise TerminalError("read input", "end of input")
        return ch
