"""Terminal input as a stream of discrete events.

Keys come from blessed; mouse reports use the SGR extended encoding
(``ESC [ < button ; column ; row M``), which blessed does not decode itself.
"""

import sys
from contextlib import contextmanager
from typing import Iterator, NamedTuple, Optional, Union

from blessed import Terminal
from loguru import logger

from spotterm.key import Key

SGR_PREFIX = "\x1b[<"
ENABLE_MOUSE = "\x1b[?1000h\x1b[?1006h"
DISABLE_MOUSE = "\x1b[?1000l\x1b[?1006l"
MAX_REPORT_LENGTH = 32


class KeyEvent(NamedTuple):
    key: Key


class MouseEvent(NamedTuple):
    kind: str  # down, up, drag, scroll_up, scroll_down
    button: Optional[str]  # left, middle, right
    column: int  # 0-based
    row: int  # 0-based


class ResizeEvent(NamedTuple):
    width: int
    height: int


class OtherEvent(NamedTuple):
    raw: str


class ErrorEvent(NamedTuple):
    """The event source failed to produce an event."""

    error: Exception


TerminalEvent = Union[KeyEvent, MouseEvent, ResizeEvent, OtherEvent, ErrorEvent]

_BUTTONS = {0: "left", 1: "middle", 2: "right"}


def parse_sgr_mouse(report: str) -> Optional[MouseEvent]:
    """Decode one SGR mouse report, or None if malformed."""
    if not report.startswith(SGR_PREFIX) or report[-1:] not in ("M", "m"):
        return None

    try:
        code, column, row = (int(part) for part in report[len(SGR_PREFIX) : -1].split(";"))
    except ValueError:
        return None

    if code & 64:
        kind = "scroll_down" if code & 1 else "scroll_up"
        return MouseEvent(kind=kind, button=None, column=column - 1, row=row - 1)

    button = _BUTTONS.get(code & 3)
    if code & 32:
        kind = "drag"
    elif report.endswith("M"):
        kind = "down"
    else:
        kind = "up"
    return MouseEvent(kind=kind, button=button, column=column - 1, row=row - 1)


def _complete_report(term: Terminal, text: str) -> str:
    while text[-1:] not in ("M", "m") and len(text) < MAX_REPORT_LENGTH:
        keystroke = term.inkey(timeout=0)
        if not keystroke:
            break
        text += str(keystroke)
    return text


def _read_event(term: Terminal, timeout: float) -> Optional[TerminalEvent]:
    keystroke = term.inkey(timeout=timeout)
    if not keystroke:
        return None

    text = str(keystroke)
    if text == "\x1b":
        # A lone escape may be the start of a mouse report split by blessed
        lookahead = ""
        while len(lookahead) < 2:
            follow = term.inkey(timeout=0)
            if not follow:
                break
            lookahead += str(follow)
        if lookahead == "[<":
            text = _complete_report(term, SGR_PREFIX)
        elif lookahead:
            term.ungetch(lookahead)
    elif text.startswith(SGR_PREFIX):
        text = _complete_report(term, text)

    if text.startswith(SGR_PREFIX):
        return parse_sgr_mouse(text) or OtherEvent(raw=text)

    key = Key.from_keystroke(keystroke)
    if key is None:
        return OtherEvent(raw=text)
    return KeyEvent(key=key)


def read_terminal_events(term: Terminal, timeout: float = 0.1) -> Iterator[TerminalEvent]:
    """Yield terminal events forever.

    Failures reading input are yielded as ErrorEvent so the consumer keeps
    going.
    """
    size = (term.width, term.height)
    while True:
        try:
            event = _read_event(term, timeout)
        except Exception as e:
            yield ErrorEvent(error=e)
            continue

        new_size = (term.width, term.height)
        if new_size != size:
            size = new_size
            yield ResizeEvent(width=size[0], height=size[1])

        if event is not None:
            yield event


@contextmanager
def mouse_tracking(term: Terminal) -> Iterator[None]:
    """Enable SGR mouse reports for the duration of the block."""
    if not term.does_styling:
        logger.debug("Terminal does not support styling, mouse tracking disabled")
        yield
        return

    sys.stdout.write(ENABLE_MOUSE)
    sys.stdout.flush()
    try:
        yield
    finally:
        sys.stdout.write(DISABLE_MOUSE)
        sys.stdout.flush()
