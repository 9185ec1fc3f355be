"""Tests for terminal event decoding."""

from itertools import islice

import pytest
from blessed.keyboard import Keystroke

from spotterm.event.terminal import (
    ErrorEvent,
    KeyEvent,
    MouseEvent,
    OtherEvent,
    ResizeEvent,
    _read_event,
    parse_sgr_mouse,
    read_terminal_events,
)
from spotterm.key import Key


class FakeTerm:
    """Replays queued keystrokes like blessed's inkey/ungetch."""

    def __init__(self, inputs: list[str], width: int = 80, height: int = 24) -> None:
        self.buffer = list(inputs)
        self.width = width
        self.height = height

    def inkey(self, timeout=None) -> Keystroke:
        if not self.buffer:
            return Keystroke("")
        return Keystroke(self.buffer.pop(0))

    def ungetch(self, text: str) -> None:
        self.buffer[:0] = list(text)


class TestParseSgrMouse:
    """Tests for parse_sgr_mouse."""

    def test_left_press(self) -> None:
        """Coordinates are converted to 0-based."""
        assert parse_sgr_mouse("\x1b[<0;10;2M") == MouseEvent("down", "left", column=9, row=1)

    def test_release(self) -> None:
        assert parse_sgr_mouse("\x1b[<2;5;5m") == MouseEvent("up", "right", column=4, row=4)

    def test_drag(self) -> None:
        assert parse_sgr_mouse("\x1b[<32;3;4M") == MouseEvent("drag", "left", column=2, row=3)

    @pytest.mark.parametrize(
        "report,kind", [("\x1b[<64;1;1M", "scroll_up"), ("\x1b[<65;1;1M", "scroll_down")]
    )
    def test_scroll(self, report: str, kind: str) -> None:
        event = parse_sgr_mouse(report)
        assert event.kind == kind
        assert event.button is None

    @pytest.mark.parametrize(
        "report", ["\x1b[<0;10M", "\x1b[<a;1;1M", "\x1b[<0;1;1", "\x1b[A", ""]
    )
    def test_malformed(self, report: str) -> None:
        assert parse_sgr_mouse(report) is None


class TestReadEvent:
    """Tests for turning keystrokes into events."""

    def test_key(self) -> None:
        assert _read_event(FakeTerm(["n"]), 0) == KeyEvent(key=Key(code="n"))

    def test_timeout(self) -> None:
        assert _read_event(FakeTerm([]), 0) is None

    def test_split_mouse_report(self) -> None:
        """blessed may hand a mouse report over one character at a time."""
        term = FakeTerm(["\x1b", "[", "<", "0", ";", "1", "0", ";", "2", "M", "q"])
        assert _read_event(term, 0) == MouseEvent("down", "left", column=9, row=1)
        # the following keystroke is left untouched
        assert term.buffer == ["q"]

    def test_lone_escape(self) -> None:
        assert _read_event(FakeTerm(["\x1b"]), 0) == KeyEvent(key=Key(code="esc"))

    def test_escape_lookahead_is_put_back(self) -> None:
        term = FakeTerm(["\x1b", "x", "y"])
        assert _read_event(term, 0) == KeyEvent(key=Key(code="esc"))
        assert term.buffer == ["x", "y"]

    def test_truncated_mouse_report(self) -> None:
        assert _read_event(FakeTerm(["\x1b[<0;1"]), 0) == OtherEvent(raw="\x1b[<0;1")


class TestReadTerminalEvents:
    """Tests for the event stream."""

    def test_resize_reported(self) -> None:
        term = FakeTerm(["a"])
        events = read_terminal_events(term, timeout=0)
        assert next(events) == KeyEvent(key=Key(code="a"))

        term.width = 100
        assert next(events) == ResizeEvent(width=100, height=24)

    def test_read_errors_become_events(self) -> None:
        term = FakeTerm([])

        def broken(timeout=None):
            raise OSError("bad fd")

        term.inkey = broken
        events = list(islice(read_terminal_events(term, timeout=0), 2))
        assert all(isinstance(e, ErrorEvent) for e in events)
