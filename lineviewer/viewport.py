"""Cursor and scroll-offset model for the document view.

``cx``/``cy`` address the raw text; ``rx`` is the matching on-screen column
after tab expansion, counted in terminal cells. ``cy`` may equal
``num_rows``: the position just after the last line, which has no row
behind it.
"""

from __future__ import annotations

from dataclasses import dataclass

from .document import TAB_STOP, Document, Row, char_display_width
from .input import DOWN, LEFT, PAGE_DOWN, PAGE_UP, RIGHT, UP


def cx_to_rx(row: Row, cx: int, tab_stop: int = TAB_STOP) -> int:
    """Map a raw column to its rendered column on ``row``, in terminal cells."""
    rx = 0
    for ch in row.raw[:cx]:
        rx += char_display_width(ch, rx, tab_stop)
    return rx


@dataclass
class Viewport:
    document: Document
    cx: int = 0
    cy: int = 0
    rx: int = 0
    row_offset: int = 0
    col_offset: int = 0

    def current_row(self) -> Row | None:
        return self.document.row_at(self.cy)

    def move_cursor(self, key: str) -> None:
        """Move one cell for an arrow key, wrapping across line ends."""
        num_rows = self.document.num_rows
        row = self.current_row()

        if key == LEFT:
            if self.cx != 0:
                self.cx -= 1
            elif self.cy > 0:
                self.cy -= 1
                self.cx = len(self.document.rows[self.cy])
        elif key == RIGHT:
            if row is not None and self.cx < len(row):
                self.cx += 1
            elif row is not None and self.cx == len(row):
                self.cy += 1
                self.cx = 0
        elif key == UP:
            if self.cy != 0:
                self.cy -= 1
        elif key == DOWN:
            if self.cy < num_rows:
                self.cy += 1

        row = self.current_row()
        row_length = len(row) if row is not None else 0
        if self.cx > row_length:
            self.cx = row_length

    def home(self) -> None:
        self.cx = 0

    def end(self) -> None:
        row = self.current_row()
        if row is not None:
            self.cx = len(row)

    def page(self, key: str, screen_rows: int) -> None:
        """Move a screenful up or down as repeated single-line moves.

        The cursor first snaps to the top or bottom edge of the viewport so
        the page lands one full screen beyond it.
        """
        if key == PAGE_UP:
            self.cy = self.row_offset
            step = UP
        elif key == PAGE_DOWN:
            self.cy = min(self.row_offset + screen_rows - 1, self.document.num_rows)
            step = DOWN
        else:
            raise ValueError(f"not a paging key: {key!r}")
        for _ in range(screen_rows):
            self.move_cursor(step)

    def reconcile_scroll(self, screen_rows: int, screen_cols: int) -> None:
        """Recompute ``rx`` and scroll offsets so the cursor is visible."""
        row = self.current_row()
        self.rx = cx_to_rx(row, self.cx) if row is not None else 0

        if self.cy < self.row_offset:
            self.row_offset = self.cy
        if self.cy >= self.row_offset + screen_rows:
            self.row_offset = self.cy - screen_rows + 1
        if self.rx < self.col_offset:
            self.col_offset = self.rx
        if self.rx >= self.col_offset + screen_cols:
            self.col_offset = self.rx - screen_cols + 1
