from __future__ import annotations

import unittest
from unittest import mock

from lineviewer import render
from lineviewer.document import Document, char_display_width
from lineviewer.terminal import TerminalController
from lineviewer.viewport import Viewport


def _document(*lines: str, filename: str | None = "notes.txt") -> Document:
    document = Document(filename=filename)
    for line in lines:
        document.append_row(line)
    return document


def _frame_rows(frame: str) -> list[str]:
    body = frame[len(render.HIDE_CURSOR + render.CURSOR_HOME) :]
    return body.split("\r\n")


class FrameCompositionTests(unittest.TestCase):
    def test_empty_document_shows_markers_and_centered_banner(self) -> None:
        document = Document()
        viewport = Viewport(document)
        viewport.reconcile_scroll(24, 80)
        rows = _frame_rows(render.build_frame(document, viewport, 24, 80))

        text_rows = rows[:24]
        for y, row in enumerate(text_rows):
            self.assertTrue(row.endswith(render.CLEAR_LINE))
            if y == 8:
                continue
            self.assertEqual(row, "~" + render.CLEAR_LINE)

        banner_row = text_rows[8][: -len(render.CLEAR_LINE)]
        banner = render.WELCOME_MESSAGE
        padding = (80 - len(banner)) // 2
        self.assertEqual(banner_row, "~" + " " * (padding - 1) + banner)
        self.assertIn("[No Name] - 0 lines", rows[24])

    def test_frame_starts_with_hidden_cursor_and_ends_with_cursor_placement(self) -> None:
        document = _document("alpha", "beta")
        viewport = Viewport(document, cx=3, cy=1)
        viewport.reconcile_scroll(5, 40)
        frame = render.build_frame(document, viewport, 5, 40)

        self.assertTrue(frame.startswith("\x1b[?25l\x1b[H"))
        self.assertTrue(frame.endswith("\x1b[2;4H\x1b[?25h"))

    def test_rows_are_sliced_by_column_offset_and_width(self) -> None:
        document = _document("0123456789abcdef", "xy")
        viewport = Viewport(document, col_offset=4)
        rows = _frame_rows(render.build_frame(document, viewport, 3, 6))

        self.assertEqual(rows[0], "456789" + render.CLEAR_LINE)
        self.assertEqual(rows[1], render.CLEAR_LINE)
        self.assertEqual(rows[2], "~" + render.CLEAR_LINE)

    def test_tabs_are_drawn_from_rendered_form(self) -> None:
        document = _document("a\tb")
        viewport = Viewport(document)
        rows = _frame_rows(render.build_frame(document, viewport, 1, 20))
        self.assertEqual(rows[0], "a" + " " * 7 + "b" + render.CLEAR_LINE)

    def test_rows_start_at_row_offset(self) -> None:
        document = _document(*(f"line {i}" for i in range(10)))
        viewport = Viewport(document, cy=9)
        viewport.reconcile_scroll(3, 20)
        rows = _frame_rows(render.build_frame(document, viewport, 3, 20))
        self.assertEqual([row[: -len(render.CLEAR_LINE)] for row in rows[:3]], ["line 7", "line 8", "line 9"])

    def test_banner_is_not_drawn_for_non_empty_document(self) -> None:
        document = _document("only")
        frame = render.build_frame(document, Viewport(document), 24, 80)
        self.assertNotIn(render.WELCOME_MESSAGE, frame)

    def test_control_characters_are_drawn_as_inverse_placeholders(self) -> None:
        document = _document("a\x07b")
        rows = _frame_rows(render.build_frame(document, Viewport(document), 1, 20))
        self.assertEqual(rows[0], "a\x1b[7m?\x1b[mb" + render.CLEAR_LINE)

    def test_message_bar_shows_given_message_clipped_to_width(self) -> None:
        document = _document("x")
        frame = render.build_frame(document, Viewport(document), 1, 10, message="HELP: Ctrl-Q = quit")
        rows = _frame_rows(frame)
        self.assertTrue(rows[-1].startswith(render.CLEAR_LINE + "HELP: Ctrl"))
        self.assertNotIn("quit", frame)

    def test_wide_characters_are_clipped_by_cell_width(self) -> None:
        document = _document("你" * 50)
        viewport = Viewport(document, cx=50)
        viewport.reconcile_scroll(5, 80)
        frame = render.build_frame(document, viewport, 5, 80)
        row = _frame_rows(frame)[0]

        self.assertTrue(row.endswith(render.CLEAR_LINE))
        visible = row[: -len(render.CLEAR_LINE)]
        self.assertLessEqual(sum(char_display_width(ch, 0) for ch in visible), 80)
        self.assertEqual((viewport.rx, viewport.col_offset), (100, 21))
        self.assertIn("\x1b[1;80H", frame)


class SliceCellsTests(unittest.TestCase):
    def test_ascii_slices_by_column(self) -> None:
        self.assertEqual(render.slice_cells("hello world", 6, 3), "wor")
        self.assertEqual(render.slice_cells("hi", 5, 10), "")

    def test_wide_character_cut_at_left_edge_becomes_space(self) -> None:
        self.assertEqual(render.slice_cells("你好", 1, 3), " 好")

    def test_wide_character_cut_at_right_edge_becomes_space(self) -> None:
        self.assertEqual(render.slice_cells("ab你", 0, 3), "ab ")

    def test_combining_mark_stays_with_its_base(self) -> None:
        self.assertEqual(render.slice_cells("e\u0301x", 0, 1), "e\u0301")


class StatusBarTests(unittest.TestCase):
    def test_status_bar_right_justifies_line_position(self) -> None:
        document = _document(*("x" for _ in range(12)), filename="notes.txt")
        viewport = Viewport(document, cy=4)
        text = render.status_bar_text(document, viewport, 40)

        self.assertEqual(len(text), 40)
        self.assertTrue(text.startswith("notes.txt - 12 lines"))
        self.assertTrue(text.endswith("5/12"))

    def test_status_bar_truncates_long_filenames(self) -> None:
        document = _document("x", filename="a_really_long_filename_for_testing.txt")
        text = render.status_bar_text(document, Viewport(document), 80)
        self.assertTrue(text.startswith("a_really_long_filena - 1 lines"))

    def test_status_bar_omits_position_when_it_does_not_fit(self) -> None:
        document = _document("x")
        text = render.status_bar_text(document, Viewport(document), 12)
        self.assertEqual(text, "notes.txt - ")

    def test_status_bar_is_inverse_video(self) -> None:
        document = _document("x")
        frame = render.build_frame(document, Viewport(document), 1, 30)
        self.assertIn("\x1b[7mnotes.txt - 1 lines", frame)
        self.assertIn("1/1\x1b[m\r\n", frame)

    def test_sentinel_row_reports_one_past_last_line(self) -> None:
        document = _document("a", "b")
        text = render.status_bar_text(document, Viewport(document, cy=2), 30)
        self.assertTrue(text.endswith("3/2"))


class WelcomeLineTests(unittest.TestCase):
    def test_narrow_screen_truncates_banner_without_marker(self) -> None:
        self.assertEqual(render.welcome_line(10), render.WELCOME_MESSAGE[:10])


class RenderFrameTests(unittest.TestCase):
    def test_render_frame_writes_once(self) -> None:
        document = _document("hello")
        terminal = TerminalController(stdin_fd=0, stdout_fd=1)
        writes: list[bytes] = []

        def capture(_fd: int, data) -> int:
            writes.append(bytes(data))
            return len(data)

        with mock.patch("lineviewer.terminal.os.write", side_effect=capture):
            render.render_frame(terminal, document, Viewport(document), 3, 20, "hi")

        self.assertEqual(len(writes), 1)
        self.assertIn(b"hello\x1b[K\r\n", writes[0])


if __name__ == "__main__":
    unittest.main()
