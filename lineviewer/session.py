"""Interactive read-decode-move-render loop.

The session owns the document, the viewport, and the status message. It
expects the terminal to already be in raw mode for the duration of ``run``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from .document import Document
from .input import DOWN, END, HOME, LEFT, PAGE_DOWN, PAGE_UP, RIGHT, UP, KeyDecoder, ctrl_key
from .render import render_frame
from .status import STATUS_MESSAGE_SECONDS, StatusMessage
from .terminal import TerminalController
from .viewport import Viewport

QUIT_KEY = ctrl_key("q")
HELP_MESSAGE = "HELP: Ctrl-Q = quit"
# Status bar and message bar.
RESERVED_ROWS = 2

ARROW_KEYS = frozenset({UP, DOWN, LEFT, RIGHT})
PAGE_KEYS = frozenset({PAGE_UP, PAGE_DOWN})

logger = logging.getLogger(__name__)


class Session:
    def __init__(
        self,
        document: Document,
        terminal: TerminalController,
        decoder: KeyDecoder,
        *,
        status_message_seconds: float = STATUS_MESSAGE_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.document = document
        self.terminal = terminal
        self.decoder = decoder
        self.viewport = Viewport(document)
        self.status_message_seconds = status_message_seconds
        self.clock = clock
        self.status = StatusMessage()
        self.screen_rows = 0
        self.screen_cols = 0
        self.running = False

    def set_status_message(self, fmt: str, *args: object) -> None:
        self.status = StatusMessage.create(fmt, *args, now=self.clock())

    def _apply_window_size(self, rows: int, cols: int) -> None:
        self.screen_rows = max(1, rows - RESERVED_ROWS)
        self.screen_cols = max(1, cols)

    def initialize_screen_size(self) -> None:
        """Query the full window size, probing the cursor if needed."""
        rows, cols = self.terminal.window_size()
        self._apply_window_size(rows, cols)
        logger.debug("screen %dx%d (text rows %d)", rows, cols, self.screen_rows)

    def refresh_screen_size(self) -> None:
        """Pick up a resize; keep the last size when none is reported."""
        size = self.terminal.reported_window_size()
        if size is not None:
            self._apply_window_size(*size)

    def refresh_screen(self) -> None:
        self.viewport.reconcile_scroll(self.screen_rows, self.screen_cols)
        message = self.status.visible_text(self.clock(), self.status_message_seconds)
        render_frame(
            self.terminal,
            self.document,
            self.viewport,
            self.screen_rows,
            self.screen_cols,
            message,
        )

    def process_key(self, key: str) -> bool:
        """Apply one key; return ``False`` when the session should end."""
        if key == QUIT_KEY:
            self.terminal.clear_screen()
            return False
        if key in ARROW_KEYS:
            self.viewport.move_cursor(key)
        elif key == HOME:
            self.viewport.home()
        elif key == END:
            self.viewport.end()
        elif key in PAGE_KEYS:
            self.viewport.page(key, self.screen_rows)
        return True

    def run(self) -> None:
        """Draw and dispatch keys until the quit key is pressed."""
        if self.screen_rows == 0:
            self.initialize_screen_size()
        self.running = True
        while self.running:
            self.refresh_screen_size()
            self.refresh_screen()
            key = self.decoder.read_key()
            self.running = self.process_key(key)
        logger.debug("session ended at line %d of %d", self.viewport.cy + 1, self.document.num_rows)
