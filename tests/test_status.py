from __future__ import annotations

import unittest
from unittest import mock

from lineviewer.status import STATUS_MESSAGE_MAX_CHARS, StatusMessage


class StatusMessageTests(unittest.TestCase):
    def test_message_visible_until_expiry(self) -> None:
        message = StatusMessage.create("HELP: %s", "Ctrl-Q = quit", now=100.0)
        self.assertEqual(message.visible_text(now=104.9), "HELP: Ctrl-Q = quit")
        self.assertEqual(message.visible_text(now=105.0), "")

    def test_expired_message_is_kept_in_memory(self) -> None:
        message = StatusMessage.create("saved", now=0.0)
        self.assertEqual(message.visible_text(now=60.0), "")
        self.assertEqual(message.text, "saved")

    def test_custom_ttl(self) -> None:
        message = StatusMessage.create("hi", now=10.0)
        self.assertEqual(message.visible_text(now=11.5, ttl=1.0), "")
        self.assertEqual(message.visible_text(now=10.5, ttl=1.0), "hi")

    def test_text_is_bounded(self) -> None:
        message = StatusMessage.create("x" * 200, now=0.0)
        self.assertEqual(len(message.text), STATUS_MESSAGE_MAX_CHARS - 1)

    def test_plain_text_with_percent_is_not_formatted(self) -> None:
        self.assertEqual(StatusMessage.create("100% done", now=0.0).text, "100% done")

    def test_default_timestamp_uses_wall_clock(self) -> None:
        with mock.patch("lineviewer.status.time.time", return_value=42.0):
            message = StatusMessage.create("now")
            self.assertEqual(message.written_at, 42.0)
            self.assertEqual(message.visible_text(), "now")

    def test_empty_message_is_never_visible(self) -> None:
        self.assertEqual(StatusMessage().visible_text(now=0.0), "")


if __name__ == "__main__":
    unittest.main()
