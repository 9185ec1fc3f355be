"""
Configuration management for spotterm
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

APP_CONFIG_FILE = "app.toml"
THEME_CONFIG_FILE = "theme.toml"


class ConfigError(Exception):
    """Raised when a configuration file exists but cannot be parsed."""


@dataclass(frozen=True)
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # Default: <data dir>/spotterm.log


@dataclass(frozen=True)
class AppConfig:
    """Application-wide settings, read once at startup."""

    client_id: str = ""
    client_secret: str = ""
    theme: str = "default"
    # 0 disables the periodic playback refresh timer
    playback_refresh_duration_in_ms: int = 0
    # Wait before re-fetching playback after a player request
    player_event_delay_in_ms: int = 200
    # Render tick of the terminal UI
    app_refresh_duration_in_ms: int = 100
    logging: LoggingConfig = field(default_factory=LoggingConfig)


@dataclass(frozen=True)
class Theme:
    """A named color palette (blessed color names)."""

    name: str
    palette: Dict[str, str] = field(default_factory=dict)

    def color(self, key: str, default: str = "white") -> str:
        return self.palette.get(key, default)


DEFAULT_THEMES = [
    Theme(
        name="default",
        palette={
            "foreground": "white",
            "accent": "cyan",
            "selected": "black_on_cyan",
            "progress": "green",
            "muted": "bright_black",
            "popup": "yellow",
        },
    ),
    Theme(
        name="dracula",
        palette={
            "foreground": "bright_white",
            "accent": "magenta",
            "selected": "black_on_magenta",
            "progress": "bright_green",
            "muted": "bright_black",
            "popup": "bright_yellow",
        },
    ),
]


@dataclass(frozen=True)
class ThemeConfig:
    """Immutable list of available themes."""

    themes: List[Theme] = field(default_factory=lambda: list(DEFAULT_THEMES))

    def find_theme(self, name: str) -> Optional[Theme]:
        for theme in self.themes:
            if theme.name == name:
                return theme
        return None


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    override = os.environ.get("SPOTTERM_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "spotterm"
    return Path.home() / ".config" / "spotterm"


def get_data_dir() -> Path:
    """Get the data directory path (logs, tokens)."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "spotterm"
    return Path.home() / ".local" / "share" / "spotterm"


def read_toml(path: Path) -> Optional[Dict[str, Any]]:
    """Read a TOML file.

    Args:
        path: File to read

    Returns:
        Parsed document, or None if the file does not exist

    Raises:
        ConfigError: If the file exists but is not valid TOML
    """
    if not path.exists():
        logger.debug(f"No config file at {path}, using defaults")
        return None

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e


def _int_setting(data: Dict[str, Any], key: str, default: int, minimum: int) -> int:
    """Read an integer setting, keeping the default when the value is invalid."""
    if key not in data:
        return default
    try:
        return max(minimum, int(data[key]))
    except (TypeError, ValueError):
        logger.warning(f"Invalid value for {key}: {data[key]!r}, using {default}")
        return default


def load_app_config(config_dir: Optional[Path] = None) -> AppConfig:
    """Load app configuration from file, falling back to defaults.

    Environment variables override TOML values:
    - SPOTIFY_CLIENT_ID
    - SPOTIFY_CLIENT_SECRET

    Args:
        config_dir: Directory holding app.toml (default: get_config_dir())

    Returns:
        Parsed AppConfig
    """
    from dotenv import load_dotenv

    config_dir = config_dir or get_config_dir()

    env_path = config_dir / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    defaults = AppConfig()
    toml_data = read_toml(config_dir / APP_CONFIG_FILE) or {}

    logging_config = defaults.logging
    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        logging_config = LoggingConfig(
            level=str(logging_data.get("level", logging_config.level)).upper(),
            log_file=log_file,
        )

    # Spotify credentials from the environment win over the file
    return AppConfig(
        client_id=os.environ.get("SPOTIFY_CLIENT_ID")
        or toml_data.get("client_id", defaults.client_id),
        client_secret=os.environ.get("SPOTIFY_CLIENT_SECRET")
        or toml_data.get("client_secret", defaults.client_secret),
        theme=toml_data.get("theme", defaults.theme),
        playback_refresh_duration_in_ms=_int_setting(
            toml_data,
            "playback_refresh_duration_in_ms",
            defaults.playback_refresh_duration_in_ms,
            0,
        ),
        player_event_delay_in_ms=_int_setting(
            toml_data, "player_event_delay_in_ms", defaults.player_event_delay_in_ms, 0
        ),
        app_refresh_duration_in_ms=_int_setting(
            toml_data,
            "app_refresh_duration_in_ms",
            defaults.app_refresh_duration_in_ms,
            10,
        ),
        logging=logging_config,
    )


def load_theme_config(config_dir: Optional[Path] = None) -> ThemeConfig:
    """Load user themes; they are appended after the built-in ones.

    A user theme with the same name as a built-in theme replaces it.
    """
    config_dir = config_dir or get_config_dir()
    toml_data = read_toml(config_dir / THEME_CONFIG_FILE)
    if not toml_data:
        return ThemeConfig()

    themes = list(DEFAULT_THEMES)
    for entry in toml_data.get("themes", []):
        name = entry.get("name")
        if not name:
            logger.warning(f"Skipping theme without a name: {entry}")
            continue
        theme = Theme(name=name, palette=dict(entry.get("palette", {})))
        themes = [t for t in themes if t.name != name]
        themes.append(theme)

    return ThemeConfig(themes=themes)
