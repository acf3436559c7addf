"""Terminal control helpers for the viewer session.

Owns the raw-mode lifecycle, window-size discovery, and frame output.
Restoration of the saved tty attributes is tied to a context manager so it
runs on every exit path once raw mode has been entered.
"""

from __future__ import annotations

import contextlib
import errno
import logging
import os
import re
import select
import termios

from .errors import TerminalError

CLEAR_SCREEN = b"\x1b[2J\x1b[H"
CURSOR_TO_BOTTOM_RIGHT = b"\x1b[999C\x1b[999B"
CURSOR_POSITION_QUERY = b"\x1b[6n"
CURSOR_REPLY_TIMEOUT_MS = 1000
_CURSOR_REPLY_RE = re.compile(rb"^\x1b\[(\d+);(\d+)$")

# Indices into the list returned by termios.tcgetattr.
_IFLAG, _OFLAG, _CFLAG, _LFLAG, _ISPEED, _OSPEED, _CC = range(7)

logger = logging.getLogger(__name__)


def raw_attributes(saved: list) -> list:
    """Derive raw-mode attributes from a saved ``tcgetattr`` snapshot.

    Disables line buffering, echo, signal keys, and input/output
    translation; reads return after at most 100 ms without input.
    """
    attrs = list(saved)
    attrs[_IFLAG] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
    attrs[_OFLAG] &= ~termios.OPOST
    attrs[_CFLAG] |= termios.CS8
    attrs[_LFLAG] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
    cc = list(saved[_CC])
    cc[termios.VMIN] = 0
    cc[termios.VTIME] = 1
    attrs[_CC] = cc
    return attrs


class TerminalController:
    """Manage raw-mode transitions and byte-level output for one tty."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state: list | None = None

    @property
    def raw_enabled(self) -> bool:
        return self._saved_tty_state is not None

    def enable_raw_mode(self) -> None:
        """Capture the current tty attributes and switch to raw mode."""
        try:
            saved = termios.tcgetattr(self.stdin_fd)
        except termios.error as exc:
            raise TerminalError("get terminal attribute when enabling raw mode", _termios_detail(exc)) from exc
        try:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, raw_attributes(saved))
        except termios.error as exc:
            raise TerminalError("set terminal attribute when enabling raw mode", _termios_detail(exc)) from exc
        self._saved_tty_state = saved
        logger.debug("raw mode enabled on fd %d", self.stdin_fd)

    def disable_raw_mode(self) -> None:
        """Restore exactly the attributes captured by ``enable_raw_mode``."""
        saved = self._saved_tty_state
        if saved is None:
            return
        self._saved_tty_state = None
        try:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, saved)
        except termios.error as exc:
            raise TerminalError("set terminal attribute when disabling raw mode", _termios_detail(exc)) from exc
        logger.debug("raw mode disabled on fd %d", self.stdin_fd)

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that keeps the terminal raw for its body.

        Restoration is registered only after raw mode was entered, and runs
        whether the body returns, raises, or exits.
        """
        self.enable_raw_mode()
        try:
            yield self
        finally:
            self.disable_raw_mode()

    def write(self, data: bytes) -> None:
        """Write ``data`` to the output descriptor, finishing short writes."""
        view = memoryview(data)
        while view:
            try:
                written = os.write(self.stdout_fd, view)
            except InterruptedError:
                continue
            except OSError as exc:
                raise TerminalError("write output", exc.strerror or str(exc)) from exc
            view = view[written:]

    def clear_screen(self) -> None:
        self.write(CLEAR_SCREEN)

    def reported_window_size(self) -> tuple[int, int] | None:
        """Return ``(rows, cols)`` reported by the tty driver, if any."""
        try:
            size = os.get_terminal_size(self.stdout_fd)
        except OSError:
            return None
        if size.columns == 0 or size.lines == 0:
            return None
        return size.lines, size.columns

    def window_size(self) -> tuple[int, int]:
        """Return ``(rows, cols)``, probing the cursor when size is unreported."""
        size = self.reported_window_size()
        if size is not None:
            return size
        logger.info("window size unavailable; probing cursor position")
        self.write(CURSOR_TO_BOTTOM_RIGHT)
        return self.cursor_position()

    def cursor_position(self) -> tuple[int, int]:
        """Ask the terminal for the cursor position and parse its reply."""
        self.write(CURSOR_POSITION_QUERY)
        reply = bytearray()
        while len(reply) < 31:
            ch = self._read_reply_byte()
            if ch is None or ch == b"R":
                break
            reply += ch
        match = _CURSOR_REPLY_RE.match(bytes(reply))
        if match is None:
            raise TerminalError("get window size", f"unexpected cursor position reply {bytes(reply)!r}")
        return int(match.group(1)), int(match.group(2))

    def _read_reply_byte(self) -> bytes | None:
        try:
            ready, _, _ = select.select([self.stdin_fd], [], [], CURSOR_REPLY_TIMEOUT_MS / 1000.0)
            if not ready:
                return None
            ch = os.read(self.stdin_fd, 1)
        except OSError as exc:
            if exc.errno in (errno.EAGAIN, errno.EINTR):
                return None
            raise TerminalError("get window size", exc.strerror or str(exc)) from exc
        return ch or None


def _termios_detail(exc: termios.error) -> str:
    args = exc.args
    if len(args) >= 2:
        return str(args[1])
    return str(exc)
