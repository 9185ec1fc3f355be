"""Keymap: immutable table from key sequences to commands.

Entries are prefix-unique: no complete key sequence is a prefix of another,
so a fully matching sequence resolves to exactly one command.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from spotterm.command import Command
from spotterm.core.config import get_config_dir, read_toml
from spotterm.key import KeySequence

KEYMAP_CONFIG_FILE = "keymap.toml"

# Command name that removes a binding in keymap.toml
UNBIND_COMMAND = "None"


@dataclass(frozen=True)
class Keymap:
    """A single binding."""

    key_sequence: KeySequence
    command: Command


DEFAULT_BINDINGS = [
    ("n", Command.NEXT_TRACK),
    ("p", Command.PREVIOUS_TRACK),
    ("space", Command.RESUME_PAUSE),
    (".", Command.PLAY_RANDOM),
    ("C-r", Command.REPEAT),
    ("C-s", Command.SHUFFLE),
    ("+", Command.VOLUME_UP),
    ("-", Command.VOLUME_DOWN),
    ("q", Command.QUIT),
    ("C-c", Command.QUIT),
    ("?", Command.OPEN_COMMAND_HELP),
    ("esc", Command.CLOSE_POPUP),
    ("j", Command.SELECT_NEXT_OR_SCROLL_DOWN),
    ("down", Command.SELECT_NEXT_OR_SCROLL_DOWN),
    ("k", Command.SELECT_PREVIOUS_OR_SCROLL_UP),
    ("up", Command.SELECT_PREVIOUS_OR_SCROLL_UP),
    ("C-k", Command.SELECT_PREVIOUS_OR_SCROLL_UP),
    ("g g", Command.SELECT_FIRST_OR_SCROLL_TO_TOP),
    ("home", Command.SELECT_FIRST_OR_SCROLL_TO_TOP),
    ("G", Command.SELECT_LAST_OR_SCROLL_TO_BOTTOM),
    ("end", Command.SELECT_LAST_OR_SCROLL_TO_BOTTOM),
    ("enter", Command.CHOOSE_SELECTED),
    ("r", Command.REFRESH_PLAYBACK),
    ("a", Command.SHOW_ACTIONS_ON_SELECTED_ITEM),
    ("g a", Command.SHOW_ACTIONS_ON_CURRENT_TRACK),
    ("g space", Command.BROWSE_PLAYING_CONTEXT),
    ("u p", Command.BROWSE_USER_PLAYLISTS),
    ("u a", Command.BROWSE_USER_FOLLOWED_ARTISTS),
    ("u A", Command.BROWSE_USER_SAVED_ALBUMS),
    ("/", Command.SEARCH_CONTEXT),
    ("s t", Command.SORT_TRACK_BY_TITLE),
    ("s a", Command.SORT_TRACK_BY_ARTISTS),
    ("s A", Command.SORT_TRACK_BY_ALBUM),
    ("s d", Command.SORT_TRACK_BY_DURATION),
    ("s r", Command.REVERSE_TRACK_ORDER),
    ("tab", Command.FOCUS_NEXT_WINDOW),
    ("backtab", Command.FOCUS_PREVIOUS_WINDOW),
    ("D", Command.SWITCH_DEVICE),
    ("T", Command.SWITCH_THEME),
    ("g s", Command.SEARCH_PAGE),
    ("C-f", Command.SEARCH_PAGE),
    ("backspace", Command.PREVIOUS_PAGE),
    ("C-q", Command.PREVIOUS_PAGE),
]


def _conflicts(a: KeySequence, b: KeySequence) -> bool:
    return a.is_prefix_of(b) or b.is_prefix_of(a)


@dataclass(frozen=True)
class KeymapConfig:
    """Immutable keymap table."""

    keymaps: tuple[Keymap, ...] = field(default_factory=tuple)

    @classmethod
    def default(cls) -> "KeymapConfig":
        return cls(
            keymaps=tuple(
                Keymap(KeySequence.parse(text), command)
                for text, command in DEFAULT_BINDINGS
            )
        )

    def find_matched_prefix_keymaps(self, key_sequence: KeySequence) -> list[Keymap]:
        """All keymaps whose key sequence starts with ``key_sequence``."""
        return [
            keymap
            for keymap in self.keymaps
            if key_sequence.is_prefix_of(keymap.key_sequence)
        ]

    def find_command_from_key_sequence(
        self, key_sequence: KeySequence
    ) -> Optional[Command]:
        """The command bound to exactly ``key_sequence``, if any."""
        for keymap in self.keymaps:
            if keymap.key_sequence == key_sequence:
                return keymap.command
        return None

    def find_key_sequences(self, command: Command) -> list[KeySequence]:
        """Key sequences bound to a command, in table order."""
        return [k.key_sequence for k in self.keymaps if k.command == command]

    def with_binding(
        self, key_sequence: KeySequence, command: Optional[Command]
    ) -> "KeymapConfig":
        """Return a new table with one binding added or removed.

        Adding drops every existing entry that conflicts as a prefix with the
        new sequence; ``command=None`` only removes the exact sequence.
        """
        if command is None:
            keymaps = [k for k in self.keymaps if k.key_sequence != key_sequence]
            return KeymapConfig(keymaps=tuple(keymaps))

        keymaps = []
        for keymap in self.keymaps:
            if _conflicts(keymap.key_sequence, key_sequence):
                if keymap.key_sequence != key_sequence:
                    logger.info(
                        f"Keymap '{key_sequence}' -> {command.value} replaces "
                        f"conflicting '{keymap.key_sequence}' -> {keymap.command.value}"
                    )
                continue
            keymaps.append(keymap)
        keymaps.append(Keymap(key_sequence, command))
        return KeymapConfig(keymaps=tuple(keymaps))

    def with_overrides(self, entries: Iterable[dict]) -> "KeymapConfig":
        """Apply ``[[keymaps]]`` entries from keymap.toml.

        Invalid entries are logged and skipped.
        """
        config = self
        for entry in entries:
            command_name = entry.get("command", "")
            key_text = entry.get("key_sequence", "")
            if not isinstance(command_name, str) or not isinstance(key_text, str):
                logger.warning(f"Skipping keymap entry {entry}: command and key_sequence must be strings")
                continue
            try:
                key_sequence = KeySequence.parse(key_text)
            except ValueError as e:
                logger.warning(f"Skipping keymap entry {entry}: {e}")
                continue

            if command_name == UNBIND_COMMAND:
                config = config.with_binding(key_sequence, None)
                continue

            command = Command.from_name(command_name)
            if command is None:
                logger.warning(f"Skipping keymap entry with unknown command: {entry}")
                continue
            config = config.with_binding(key_sequence, command)
        return config


def load_keymap_config(config_dir: Optional[Path] = None) -> KeymapConfig:
    """Load the default keymap with user overrides from keymap.toml applied."""
    config_dir = config_dir or get_config_dir()
    toml_data = read_toml(config_dir / KEYMAP_CONFIG_FILE)

    config = KeymapConfig.default()
    if toml_data:
        config = config.with_overrides(toml_data.get("keymaps", []))
    return config
