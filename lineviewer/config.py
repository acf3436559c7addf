"""Persistent JSON config helpers.

Stores input timing, status-message lifetime, and log verbosity.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .input import ESC_SEQUENCE_TIMEOUT_MS
from .status import STATUS_MESSAGE_SECONDS

APP_NAME = "lineviewer"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_LOG_LEVEL = "WARNING"
MAX_ESCAPE_TIMEOUT_MS = 1000


@dataclass(frozen=True)
class ViewerSettings:
    escape_timeout_ms: int = ESC_SEQUENCE_TIMEOUT_MS
    status_message_seconds: float = STATUS_MESSAGE_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def load_escape_timeout_ms(config: dict[str, object] | None = None) -> int:
    """Return the escape follow-up wait, accepting integers in ``[1, 1000]``."""
    value = (load_config() if config is None else config).get("escape_timeout_ms")
    if isinstance(value, bool) or not isinstance(value, int):
        return ESC_SEQUENCE_TIMEOUT_MS
    if value < 1 or value > MAX_ESCAPE_TIMEOUT_MS:
        return ESC_SEQUENCE_TIMEOUT_MS
    return value


def load_status_message_seconds(config: dict[str, object] | None = None) -> float:
    value = (load_config() if config is None else config).get("status_message_seconds")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return STATUS_MESSAGE_SECONDS
    if value <= 0:
        return STATUS_MESSAGE_SECONDS
    return float(value)


def load_log_level(config: dict[str, object] | None = None) -> str:
    """Return a normalized log level name, ``WARNING`` when unset/invalid."""
    value = (load_config() if config is None else config).get("log_level")
    if not isinstance(value, str):
        return DEFAULT_LOG_LEVEL
    normalized = value.strip().upper()
    return normalized if normalized in LOG_LEVELS else DEFAULT_LOG_LEVEL


def load_settings() -> ViewerSettings:
    """Read the config file once and build validated settings from it."""
    config = load_config()
    return ViewerSettings(
        escape_timeout_ms=load_escape_timeout_ms(config),
        status_message_seconds=load_status_message_seconds(config),
        log_level=load_log_level(config),
    )
