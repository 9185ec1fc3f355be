"""Abstract key presses and key sequences.

Keys are written in config files as ``q``, ``C-r`` (ctrl), ``M-x`` (alt) or a
named key such as ``enter``; a key sequence is whitespace-separated keys
(``g g``).
"""

from dataclasses import dataclass, field
from typing import Optional

from blessed.keyboard import Keystroke

CTRL = "C"
ALT = "M"

# blessed key names -> config key names
_NAMED_KEYS = {
    "KEY_ENTER": "enter",
    "KEY_ESCAPE": "esc",
    "KEY_BACKSPACE": "backspace",
    "KEY_DELETE": "delete",
    "KEY_TAB": "tab",
    "KEY_BTAB": "backtab",
    "KEY_UP": "up",
    "KEY_DOWN": "down",
    "KEY_LEFT": "left",
    "KEY_RIGHT": "right",
    "KEY_HOME": "home",
    "KEY_END": "end",
    "KEY_PGUP": "pageup",
    "KEY_PGDOWN": "pagedown",
    "KEY_INSERT": "insert",
    **{f"KEY_F{i}": f"f{i}" for i in range(1, 13)},
}

# Raw control characters that have a name of their own
_CONTROL_CHARS = {
    " ": "space",
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\x1b": "esc",
}

KEY_NAMES = frozenset(_NAMED_KEYS.values()) | frozenset(_CONTROL_CHARS.values())


@dataclass(frozen=True)
class Key:
    """A single key press, optionally with a ctrl or alt modifier."""

    code: str
    modifier: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "Key":
        """Parse a key from its config form.

        Raises:
            ValueError: If the text is not a valid key
        """
        modifier = None
        if len(text) > 2 and text[1] == "-" and text[0] in (CTRL, ALT):
            modifier, text = text[0], text[2:]

        if len(text) == 1 and text.isprintable() and text != " ":
            return cls(code=text, modifier=modifier)
        if text in KEY_NAMES:
            return cls(code=text, modifier=modifier)
        raise ValueError(f"invalid key: {text!r}")

    @classmethod
    def from_keystroke(cls, keystroke: Keystroke) -> Optional["Key"]:
        """Convert a blessed keystroke, or None if it has no key form."""
        if keystroke.is_sequence and keystroke.name in _NAMED_KEYS:
            return cls(code=_NAMED_KEYS[keystroke.name])

        text = str(keystroke)
        if not text:
            return None
        if text in _CONTROL_CHARS:
            return cls(code=_CONTROL_CHARS[text])
        if len(text) == 1 and ord(text) < 32:
            # \x01 is C-a, \x1a is C-z
            return cls(code=chr(ord(text) + 96), modifier=CTRL)
        if len(text) == 2 and text[0] == "\x1b" and text[1].isprintable():
            return cls(code=text[1], modifier=ALT)
        if len(text) == 1 and text.isprintable():
            return cls(code=text)
        return None

    @property
    def char(self) -> Optional[str]:
        """The printable character of an unmodified key, for text input."""
        if self.modifier is None:
            if len(self.code) == 1:
                return self.code
            if self.code == "space":
                return " "
        return None

    def __str__(self) -> str:
        if self.modifier:
            return f"{self.modifier}-{self.code}"
        return self.code


@dataclass(frozen=True)
class KeySequence:
    """An ordered run of key presses not yet resolved to a command."""

    keys: tuple[Key, ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, text: str) -> "KeySequence":
        """Parse a whitespace-separated key sequence such as ``"g g"``.

        Raises:
            ValueError: If the text is empty or contains an invalid key
        """
        parts = text.split()
        if not parts:
            raise ValueError("empty key sequence")
        return cls(keys=tuple(Key.parse(part) for part in parts))

    def push(self, key: Key) -> "KeySequence":
        return KeySequence(keys=self.keys + (key,))

    def is_prefix_of(self, other: "KeySequence") -> bool:
        return other.keys[: len(self.keys)] == self.keys

    def __len__(self) -> int:
        return len(self.keys)

    def __str__(self) -> str:
        return " ".join(str(key) for key in self.keys)
