"""Core infrastructure layer - no dependencies on the event or client layers.

This module provides foundation-level services:
- Configuration management (TOML)
- Logging (Loguru)
- Console management (Rich)
"""

from .config import (
    AppConfig,
    ConfigError,
    LoggingConfig,
    Theme,
    ThemeConfig,
    get_config_dir,
    get_data_dir,
    load_app_config,
    load_theme_config,
    read_toml,
)
from .console import get_console, print_error, safe_print
from .output import setup_loguru

__all__ = [
    # Config
    "AppConfig",
    "ConfigError",
    "LoggingConfig",
    "Theme",
    "ThemeConfig",
    "get_config_dir",
    "get_data_dir",
    "load_app_config",
    "load_theme_config",
    "read_toml",
    # Console
    "get_console",
    "print_error",
    "safe_print",
    # Logging
    "setup_loguru",
]
