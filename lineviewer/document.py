"""Row store for the viewed document.

Each row keeps the raw line text and a tab-expanded render form derived
from it once at construction. Rows are never edited after loading.
"""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path

from .errors import DocumentLoadError

TAB_STOP = 8
NO_NAME = "[No Name]"

logger = logging.getLogger(__name__)


def char_display_width(ch: str, col: int, tab_stop: int = TAB_STOP) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next tab stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return tab_stop - (col % tab_stop)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def expand_tabs(raw: str, tab_stop: int = TAB_STOP) -> str:
    """Expand each tab to spaces up to the next multiple of ``tab_stop``.

    Columns are counted in terminal cells, so tabs after wide characters
    still land on a tab stop.
    """
    if "\t" not in raw:
        return raw
    out: list[str] = []
    col = 0
    for ch in raw:
        width = char_display_width(ch, col, tab_stop)
        out.append(" " * width if ch == "\t" else ch)
        col += width
    return "".join(out)


@dataclass(frozen=True)
class Row:
    raw: str
    render: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "render", expand_tabs(self.raw))

    def __len__(self) -> int:
        return len(self.raw)


@dataclass
class Document:
    """Ordered rows plus the name shown in the status bar."""

    rows: list[Row] = field(default_factory=list)
    filename: str | None = None

    @property
    def num_rows(self) -> int:
        return len(self.rows)

    @property
    def display_name(self) -> str:
        return self.filename if self.filename else NO_NAME

    def append_row(self, raw: str) -> Row:
        row = Row(raw)
        self.rows.append(row)
        return row

    def row_at(self, index: int) -> Row | None:
        """Return the row at ``index``, or ``None`` past the last row."""
        if 0 <= index < len(self.rows):
            return self.rows[index]
        return None


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order.

    Attempts UTF-8 (dropping a leading BOM), then latin-1. Newlines are read
    untranslated so ``\\r`` handling stays with ``split_lines``.
    """
    data = path.read_bytes()
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        # latin-1 maps every byte, so this cannot fail.
        return data.decode("latin-1")


def split_lines(text: str) -> list[str]:
    """Split file text into lines with trailing ``\\r``/``\\n`` removed.

    A final line without a newline is kept; an empty text has no lines.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.rstrip("\r") for line in lines]


def load_document(path: Path) -> Document:
    """Load ``path`` into a new document, one row per line in file order."""
    try:
        text = read_text(path)
    except OSError as exc:
        raise DocumentLoadError("open file", f"{path}: {exc.strerror or exc}") from exc

    document = Document(filename=str(path))
    for line in split_lines(text):
        document.append_row(line)
    logger.debug("loaded %s (%d rows)", path, document.num_rows)
    return document
