"""Status-bar message buffer with read-time expiry."""

from __future__ import annotations

import time
from dataclasses import dataclass

STATUS_MESSAGE_MAX_CHARS = 80
STATUS_MESSAGE_SECONDS = 5.0


@dataclass(frozen=True)
class StatusMessage:
    """A message and the wall-clock time it was written.

    Expiry only hides the message from rendering; the text stays available.
    """

    text: str = ""
    written_at: float = 0.0

    @classmethod
    def create(cls, fmt: str, *args: object, now: float | None = None) -> StatusMessage:
        text = fmt % args if args else fmt
        return cls(
            text=text[: STATUS_MESSAGE_MAX_CHARS - 1],
            written_at=time.time() if now is None else now,
        )

    def visible_text(self, now: float | None = None, ttl: float = STATUS_MESSAGE_SECONDS) -> str:
        """Return the text if it has not expired, else an empty string."""
        if not self.text:
            return ""
        current = time.time() if now is None else now
        if current - self.written_at >= ttl:
            return ""
        return self.text
