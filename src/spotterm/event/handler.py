"""Terminal event pipeline and global command handler.

Converts terminal events into key sequences and mouse clicks, routes key
sequences to the popup or page handler in charge, and falls back to the
global command handler.

Lock order: ui -> data -> player. A handler that reads UI state to pick a
sub-handler releases the UI lock before calling it.
"""

from typing import Iterable

from loguru import logger

from spotterm.command import Command
from spotterm.key import Key, KeySequence
from spotterm.state import SharedState
from spotterm.state.ui import (
    ActionListPopup,
    BrowsingPage,
    CommandHelpPopup,
    CurrentPlayingPage,
    DeviceListPopup,
    RecommendationsPage,
    SearchingPage,
    ThemeListPopup,
    UserFollowedArtistListPopup,
    UserPlaylistListPopup,
    UserSavedAlbumListPopup,
)

from . import popup, window
from .channel import ChannelClosedError, RequestChannel
from .requests import (
    GetCurrentPlayback,
    GetDevices,
    GetUserFollowedArtists,
    GetUserPlaylists,
    GetUserSavedAlbums,
    NextTrack,
    Player,
    PreviousTrack,
    Repeat,
    ResumePause,
    SeekTrack,
    Shuffle,
    Volume,
)
from .terminal import ErrorEvent, KeyEvent, MouseEvent, TerminalEvent

VOLUME_STEP = 5


def start_event_handler(
    state: SharedState, channel: RequestChannel, events: Iterable[TerminalEvent]
) -> None:
    """Handle terminal events until the app stops or the channel closes.

    Args:
        state: Shared application state
        channel: Request submission endpoint
        events: Terminal event stream (see read_terminal_events)
    """
    for event in events:
        if isinstance(event, ErrorEvent):
            logger.warning(f"Failed to get terminal event: {event.error}")
            continue

        logger.debug(f"Got a terminal event: {event}")

        try:
            if isinstance(event, MouseEvent):
                handle_mouse_event(event, channel, state)
            elif isinstance(event, KeyEvent):
                handle_key_event(event.key, channel, state)
        except ChannelClosedError:
            logger.info("Request channel closed, stopping terminal event handler")
            return
        except Exception:
            logger.exception(f"Failed to handle terminal event: {event}")

        with state.ui.read() as ui:
            if not ui.is_running:
                logger.info("Application stopped, leaving terminal event handler")
                return


def handle_mouse_event(
    event: MouseEvent, channel: RequestChannel, state: SharedState
) -> None:
    """Seek when the progress bar is clicked with the left button."""
    if event.kind != "down" or event.button != "left":
        return

    with state.ui.read() as ui:
        rect = ui.progress_bar_rect
    if rect.width <= 0 or event.row != rect.y:
        return

    with state.player.read() as player:
        track = player.current_playing_track()
    if track is None:
        return

    # seek position (in ms) from the clicked column, the bar width and the track duration
    position_ms = track.duration_ms * event.column // rect.width
    channel.submit(Player(SeekTrack(position_ms)))


def handle_key_event(key: Key, channel: RequestChannel, state: SharedState) -> None:
    """Extend the pending key sequence and try to handle it.

    A handled sequence is cleared; an unhandled one is kept as the prefix of a
    multi-key shortcut.
    """
    with state.ui.read() as ui:
        key_sequence = ui.input_key_sequence.push(key)

    # restart from the new key once the sequence no longer prefixes any shortcut
    if not state.keymap_config.find_matched_prefix_keymaps(key_sequence):
        key_sequence = KeySequence(keys=(key,))

    with state.ui.read() as ui:
        has_popup = ui.popup is not None
        page = ui.current_page()

    if has_popup:
        handled = popup.handle_key_sequence_for_popup(key_sequence, channel, state)
    else:
        match page:
            case RecommendationsPage():
                handled = window.handle_key_sequence_for_recommendation_window(
                    key_sequence, channel, state
                )
            case BrowsingPage() | CurrentPlayingPage():
                handled = window.handle_key_sequence_for_context_window(
                    key_sequence, channel, state
                )
            case SearchingPage():
                handled = window.handle_key_sequence_for_search_window(
                    key_sequence, channel, state
                )
            case _:
                handled = False

    if not handled:
        command = state.keymap_config.find_command_from_key_sequence(key_sequence)
        if command is not None:
            handled = handle_global_command(command, channel, state)

    with state.ui.write() as ui:
        ui.input_key_sequence = KeySequence() if handled else key_sequence


def handle_global_command(
    command: Command, channel: RequestChannel, state: SharedState
) -> bool:
    """Apply a command that does not depend on the current page or popup.

    Returns:
        True if the command is a global one, False otherwise
    """
    with state.ui.write() as ui:
        match command:
            case Command.QUIT:
                ui.is_running = False
            case Command.NEXT_TRACK:
                channel.submit(Player(NextTrack()))
            case Command.PREVIOUS_TRACK:
                channel.submit(Player(PreviousTrack()))
            case Command.RESUME_PAUSE:
                channel.submit(Player(ResumePause()))
            case Command.REPEAT:
                channel.submit(Player(Repeat()))
            case Command.SHUFFLE:
                channel.submit(Player(Shuffle()))
            case Command.VOLUME_UP | Command.VOLUME_DOWN:
                with state.player.read() as player:
                    playback = player.playback
                if playback is not None and playback.device.volume_percent is not None:
                    percent = playback.device.volume_percent
                    if command == Command.VOLUME_UP:
                        volume = min(percent + VOLUME_STEP, 100)
                    else:
                        volume = max(percent - VOLUME_STEP, 0)
                    channel.submit(Player(Volume(volume)))
            case Command.OPEN_COMMAND_HELP:
                ui.popup = CommandHelpPopup(offset=0)
            case Command.REFRESH_PLAYBACK:
                channel.submit(GetCurrentPlayback())
            case Command.SHOW_ACTIONS_ON_CURRENT_TRACK:
                with state.player.read() as player:
                    track = player.current_playing_track()
                if track is not None:
                    ui.popup = ActionListPopup(item=track)
            case Command.BROWSE_PLAYING_CONTEXT:
                ui.create_new_page(CurrentPlayingPage())
            case Command.BROWSE_USER_PLAYLISTS:
                channel.submit(GetUserPlaylists())
                ui.popup = UserPlaylistListPopup()
            case Command.BROWSE_USER_FOLLOWED_ARTISTS:
                channel.submit(GetUserFollowedArtists())
                ui.popup = UserFollowedArtistListPopup()
            case Command.BROWSE_USER_SAVED_ALBUMS:
                channel.submit(GetUserSavedAlbums())
                ui.popup = UserSavedAlbumListPopup()
            case Command.SEARCH_PAGE:
                ui.create_new_page(SearchingPage())
            case Command.PREVIOUS_PAGE:
                ui.pop_page()
            case Command.SWITCH_DEVICE:
                ui.popup = DeviceListPopup()
                channel.submit(GetDevices())
            case Command.SWITCH_THEME:
                # available themes with the current theme moved to the front
                themes = list(state.theme_config.themes)
                for i, theme in enumerate(themes):
                    if theme.name == ui.theme.name:
                        themes.insert(0, themes.pop(i))
                        break
                ui.popup = ThemeListPopup(themes=themes)
            case _:
                return False
    return True
