"""Frame composition for the document view.

A frame is collected as string fragments and written to the terminal in a
single call, so the terminal never shows a half-drawn screen.
"""

from __future__ import annotations

import re

from . import __version__
from .document import Document, char_display_width
from .terminal import TerminalController
from .viewport import Viewport

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CURSOR_HOME = "\x1b[H"
CLEAR_LINE = "\x1b[K"
INVERSE = "\x1b[7m"
RESET_STYLE = "\x1b[m"

EMPTY_ROW_MARKER = "~"
WELCOME_MESSAGE = f"Lineviewer -- version {__version__}"
FILENAME_STATUS_CHARS = 20

_CONTROL_RE = re.compile(r"[\x00-\x08\x0a-\x1f\x7f-\x9f]")


def sanitize_row_text(text: str) -> str:
    """Draw control characters as one inverse ``?`` cell each."""
    if _CONTROL_RE.search(text) is None:
        return text
    return _CONTROL_RE.sub(f"{INVERSE}?{RESET_STYLE}", text)


def slice_cells(text: str, start: int, width: int) -> str:
    """Return the part of ``text`` visible in cells ``[start, start + width)``.

    Wide characters cut by either edge are drawn as spaces for their visible
    cells; combining marks stay with the character they follow.
    """
    end = start + width
    out: list[str] = []
    col = 0
    kept_previous = False
    for ch in text:
        w = char_display_width(ch, col)
        if w == 0:
            if kept_previous:
                out.append(ch)
            continue
        if col >= end:
            break
        kept_previous = col >= start and col + w <= end
        if kept_previous:
            out.append(ch)
        else:
            visible = min(col + w, end) - max(col, start)
            if visible > 0:
                out.append(" " * visible)
        col += w
    return "".join(out)


def welcome_line(screen_cols: int) -> str:
    """Return the banner centered in ``screen_cols``, led by the row marker."""
    welcome = WELCOME_MESSAGE[:screen_cols]
    padding = (screen_cols - len(welcome)) // 2
    out: list[str] = []
    if padding:
        out.append(EMPTY_ROW_MARKER)
        padding -= 1
    out.append(" " * padding)
    out.append(welcome)
    return "".join(out)


def draw_rows(out: list[str], document: Document, viewport: Viewport, screen_rows: int, screen_cols: int) -> None:
    for y in range(screen_rows):
        file_row = y + viewport.row_offset
        if file_row >= document.num_rows:
            if document.num_rows == 0 and y == screen_rows // 3:
                out.append(welcome_line(screen_cols))
            else:
                out.append(EMPTY_ROW_MARKER)
        else:
            render = document.rows[file_row].render
            visible = slice_cells(render, viewport.col_offset, screen_cols)
            out.append(sanitize_row_text(visible))
        out.append(CLEAR_LINE)
        out.append("\r\n")


def status_bar_text(document: Document, viewport: Viewport, screen_cols: int) -> str:
    """Left-aligned name and line count, right-aligned cursor line."""
    status = f"{document.display_name[:FILENAME_STATUS_CHARS]} - {document.num_rows} lines"
    rstatus = f"{viewport.cy + 1}/{document.num_rows}"
    status = status[:screen_cols]
    gap = screen_cols - len(status)
    if gap >= len(rstatus):
        return status + " " * (gap - len(rstatus)) + rstatus
    return status + " " * gap


def draw_status_bar(out: list[str], document: Document, viewport: Viewport, screen_cols: int) -> None:
    out.append(INVERSE)
    out.append(status_bar_text(document, viewport, screen_cols))
    out.append(RESET_STYLE)
    out.append("\r\n")


def draw_message_bar(out: list[str], message: str, screen_cols: int) -> None:
    out.append(CLEAR_LINE)
    if message:
        out.append(sanitize_row_text(slice_cells(message, 0, screen_cols)))


def build_frame(
    document: Document,
    viewport: Viewport,
    screen_rows: int,
    screen_cols: int,
    message: str = "",
) -> str:
    """Compose one full screen update.

    ``viewport`` must already be reconciled for the current screen size;
    ``message`` is the status text to show, already filtered for expiry.
    """
    out: list[str] = [HIDE_CURSOR, CURSOR_HOME]
    draw_rows(out, document, viewport, screen_rows, screen_cols)
    draw_status_bar(out, document, viewport, screen_cols)
    draw_message_bar(out, message, screen_cols)
    cursor_row = viewport.cy - viewport.row_offset + 1
    cursor_col = viewport.rx - viewport.col_offset + 1
    out.append(f"\x1b[{cursor_row};{cursor_col}H")
    out.append(SHOW_CURSOR)
    return "".join(out)


def render_frame(
    terminal: TerminalController,
    document: Document,
    viewport: Viewport,
    screen_rows: int,
    screen_cols: int,
    message: str = "",
) -> None:
    frame = build_frame(document, viewport, screen_rows, screen_cols, message)
    terminal.write(frame.encode("utf-8", errors="replace"))
