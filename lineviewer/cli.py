"""Command-line front door for lineviewer.

Parses CLI options, loads the document, and runs the interactive viewer
inside raw mode. Fatal errors are reported here after the terminal has
been restored.
"""

from __future__ import annotations

import argparse
import contextlib
import dataclasses
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn

from . import __version__
from .config import MAX_ESCAPE_TIMEOUT_MS, ViewerSettings, load_settings
from .document import Document, load_document
from .errors import ViewerError
from .input import KeyDecoder
from .logs import configure_logging
from .session import HELP_MESSAGE, Session
from .terminal import CLEAR_SCREEN, TerminalController

logger = logging.getLogger(__name__)


def _escape_timeout(value: str) -> int:
    """argparse type for the escape-sequence wait in milliseconds."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 1 or parsed > MAX_ESCAPE_TIMEOUT_MS:
        raise argparse.ArgumentTypeError(f"value must be between 1 and {MAX_ESCAPE_TIMEOUT_MS}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lineviewer",
        description="View a text file in the terminal.",
    )
    parser.add_argument("path", nargs="?", default=None, help="File to view. Omit for an empty document.")
    parser.add_argument("--nopager", action="store_true", help="Print the file directly without interactive viewing.")
    parser.add_argument(
        "--escape-timeout-ms",
        type=_escape_timeout,
        default=None,
        help="How long to wait for the rest of an escape sequence (default: from config, else 25).",
    )
    parser.add_argument("--log-file", default=None, help="Write log records to this file.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def report_fatal(exc: ViewerError) -> NoReturn:
    """Reset the screen, print a diagnostic, and exit with status 1."""
    stdout_fd = sys.stdout.fileno()
    if os.isatty(stdout_fd):
        with contextlib.suppress(OSError):
            os.write(stdout_fd, CLEAR_SCREEN)
    logger.error("fatal: %s", exc, exc_info=exc)
    sys.stderr.write(f"lineviewer: {exc}\n")
    sys.stderr.flush()
    raise SystemExit(1)


def print_document(document: Document) -> None:
    for row in document.rows:
        sys.stdout.write(row.raw)
        sys.stdout.write("\n")
    sys.stdout.flush()


def run_viewer(document: Document, settings: ViewerSettings) -> None:
    """Run the interactive session with the terminal held in raw mode."""
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    terminal = TerminalController(stdin_fd, stdout_fd)
    decoder = KeyDecoder(stdin_fd, escape_timeout_ms=settings.escape_timeout_ms)
    session = Session(
        document,
        terminal,
        decoder,
        status_message_seconds=settings.status_message_seconds,
    )
    with terminal.raw_mode():
        session.initialize_screen_size()
        session.set_status_message(HELP_MESSAGE)
        session.run()


def main() -> None:
    """Parse CLI arguments and view the requested file.

    Without a path the viewer starts on an empty document. When stdin or
    stdout is not a terminal, or ``--nopager`` is given, the document is
    printed instead.
    """
    args = build_parser().parse_args()
    settings = load_settings()
    if args.escape_timeout_ms is not None:
        settings = dataclasses.replace(settings, escape_timeout_ms=args.escape_timeout_ms)
    configure_logging(settings.log_level, Path(args.log_file) if args.log_file else None)

    try:
        document = load_document(Path(args.path)) if args.path else Document()
        interactive = os.isatty(sys.stdin.fileno()) and os.isatty(sys.stdout.fileno())
        if args.nopager or not interactive:
            print_document(document)
            return
        run_viewer(document, settings)
    except ViewerError as exc:
        report_fatal(exc)


if __name__ == "__main__":
    main()
