"""Exception types for fatal viewer failures.

Every error carries the operation that failed so the CLI can report it
uniformly once the terminal has been restored.
"""

from __future__ import annotations


class ViewerError(Exception):
    """Base class for errors that end the viewer session."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation}: {detail}" if detail else operation)


class TerminalError(ViewerError):
    """Terminal attributes could not be read/applied, or terminal I/O failed."""


class DocumentLoadError(ViewerError):
    """The document file could not be opened or read."""
