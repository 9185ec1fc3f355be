"""Process-wide application state shared by every component."""

from dataclasses import dataclass, field

from loguru import logger

from spotterm.core.config import AppConfig, ThemeConfig
from spotterm.keymap import KeymapConfig

from .data import DataState
from .lock import Locked
from .player import PlayerState
from .ui import UIState


@dataclass
class SharedState:
    """Explicitly constructed once at startup and handed to each component.

    The three sub-states are locked independently; holding one never blocks
    access to another. Configs are read-only.
    """

    app_config: AppConfig
    keymap_config: KeymapConfig
    theme_config: ThemeConfig
    player: Locked[PlayerState] = field(default_factory=lambda: Locked(PlayerState()))
    ui: Locked[UIState] = field(init=False)
    data: Locked[DataState] = field(default_factory=lambda: Locked(DataState()))

    def __post_init__(self) -> None:
        theme = self.theme_config.find_theme(self.app_config.theme)
        if theme is None:
            logger.warning(
                f"Theme '{self.app_config.theme}' not found, using '{self.theme_config.themes[0].name}'"
            )
            theme = self.theme_config.themes[0]
        self.ui = Locked(UIState(theme=theme))
