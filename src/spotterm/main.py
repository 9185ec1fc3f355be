"""
Application wiring: load configs, start the background loops and run the
render loop on the main thread.
"""

import threading
import time
from pathlib import Path
from typing import Optional

from blessed import Terminal
from loguru import logger

from spotterm.client import Client, SpotifyAPI, start_client_handler, start_player_event_watchers
from spotterm.client import auth
from spotterm.core import (
    get_data_dir,
    load_app_config,
    load_theme_config,
    print_error,
    setup_loguru,
)
from spotterm.event import RequestChannel, mouse_tracking, read_terminal_events, start_event_handler
from spotterm.event.requests import GetCurrentPlayback, GetCurrentUser, GetDevices, GetUserPlaylists
from spotterm.keymap import load_keymap_config
from spotterm.state import SharedState
from spotterm.ui import render

LOG_FILE = "spotterm.log"


def _start_thread(name: str, target, *args) -> threading.Thread:
    thread = threading.Thread(target=target, args=args, daemon=True, name=name)
    thread.start()
    return thread


def init_state(config_dir: Optional[Path] = None) -> SharedState:
    """Load every config and build the shared state.

    Raises:
        ConfigError: If a config file is malformed
    """
    app_config = load_app_config(config_dir)
    keymap_config = load_keymap_config(config_dir)
    theme_config = load_theme_config(config_dir)
    return SharedState(
        app_config=app_config,
        keymap_config=keymap_config,
        theme_config=theme_config,
    )


def run(config_dir: Optional[Path] = None) -> int:
    """Run the terminal UI until the user quits.

    Returns:
        Process exit code
    """
    state = init_state(config_dir)
    app_config = state.app_config

    data_dir = get_data_dir()
    log_file = Path(app_config.logging.log_file) if app_config.logging.log_file else data_dir / LOG_FILE
    setup_loguru(log_file, app_config.logging.level)

    if auth.load_user_tokens(data_dir) is None:
        print_error(
            "No Spotify tokens found",
            hint=f"Save your OAuth tokens to {data_dir / auth.TOKENS_FILE} or set {auth.ACCESS_TOKEN_ENV}.",
        )
        return 1

    client = Client(SpotifyAPI(app_config, data_dir))
    channel = RequestChannel()

    # initial data
    for request in (GetCurrentUser(), GetDevices(), GetUserPlaylists(), GetCurrentPlayback()):
        channel.submit(request)

    _start_thread("ClientHandlerThread", start_client_handler, state, client, channel)
    _start_thread("PlayerEventWatcherThread", start_player_event_watchers, state, channel)

    term = Terminal()
    refresh_interval = app_config.app_refresh_duration_in_ms / 1000
    logger.info("Starting terminal UI")

    with term.fullscreen(), term.cbreak(), term.hidden_cursor(), mouse_tracking(term):
        _start_thread(
            "TerminalEventThread", start_event_handler, state, channel, read_terminal_events(term)
        )
        try:
            while True:
                with state.ui.read() as ui:
                    if not ui.is_running:
                        break
                render(term, state)
                time.sleep(refresh_interval)
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            channel.close()

    logger.info("Terminal UI stopped")
    return 0
