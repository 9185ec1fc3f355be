"""Tests for the terminal event pipeline and the global command handler."""

from unittest.mock import patch

import pytest

from spotterm.command import Command
from spotterm.event.handler import (
    handle_global_command,
    handle_key_event,
    handle_mouse_event,
    start_event_handler,
)
from spotterm.event.requests import (
    GetContext,
    GetCurrentPlayback,
    GetDevices,
    GetUserPlaylists,
    NextTrack,
    Player,
    SeekTrack,
    Volume,
)
from spotterm.event.terminal import ErrorEvent, KeyEvent, MouseEvent, ResizeEvent
from spotterm.key import Key, KeySequence
from spotterm.models import ContextId
from spotterm.state.ui import (
    ActionListPopup,
    BrowsingPage,
    CommandHelpPopup,
    DeviceListPopup,
    ListState,
    Rect,
    SearchingPage,
    ThemeListPopup,
    TrackTableWindow,
    UserPlaylistListPopup,
)


def press(keys: str, channel, state) -> None:
    for text in keys.split():
        handle_key_event(Key.parse(text), channel, state)


def pending(state) -> KeySequence:
    with state.ui.read() as ui:
        return ui.input_key_sequence


class TestKeyEvents:
    """Tests for key sequence accumulation and dispatch."""

    def test_single_key_command(self, state, channel, drain) -> None:
        """A bound key is handled and the sequence is cleared."""
        press("n", channel, state)
        assert drain(channel) == [Player(NextTrack())]
        assert pending(state) == KeySequence()

    def test_prefix_is_retained(self, state, channel, drain) -> None:
        """The first key of a multi-key shortcut is kept, nothing happens."""
        press("g", channel, state)
        assert pending(state) == KeySequence.parse("g")
        assert drain(channel) == []

    def test_multi_key_shortcut(self, state, channel) -> None:
        """'g s' opens the search page."""
        press("g s", channel, state)
        with state.ui.read() as ui:
            assert isinstance(ui.current_page(), SearchingPage)
        assert pending(state) == KeySequence()

    def test_restart_when_prefix_breaks(self, state, channel, drain) -> None:
        """'g n' is no shortcut prefix, so the sequence restarts at 'n'."""
        press("g n", channel, state)
        assert drain(channel) == [Player(NextTrack())]
        assert pending(state) == KeySequence()

    def test_unbound_key_retained_until_replaced(self, state, channel, drain) -> None:
        """An unhandled key stays pending and is dropped by the next key."""
        press("x", channel, state)
        assert pending(state) == KeySequence.parse("x")

        press("n", channel, state)
        assert drain(channel) == [Player(NextTrack())]
        assert pending(state) == KeySequence()

    def test_g_g_selects_first_track(self, state, channel, playlist_context) -> None:
        """A two-key shortcut resolves to a page-level command."""
        context_id = ContextId(kind="playlist", id=playlist_context.playlist.id)
        with state.data.write() as data:
            data.caches.contexts[context_id.uri] = playlist_context
        with state.ui.write() as ui:
            ui.history.append(BrowsingPage(context_id=context_id))
            ui.window = TrackTableWindow(track_table=ListState(selected=2))

        press("g g", channel, state)

        with state.ui.read() as ui:
            assert ui.window.track_table.selected == 0
        assert pending(state) == KeySequence()

    def test_popup_takes_precedence(self, state, channel, drain) -> None:
        """With a popup open, navigation keys go to the popup."""
        with state.ui.write() as ui:
            ui.popup = CommandHelpPopup()

        press("j", channel, state)

        with state.ui.read() as ui:
            assert ui.popup.offset == 1
        assert drain(channel) == []

    def test_popup_falls_back_to_global(self, state, channel, drain) -> None:
        """Commands the popup does not handle still reach the global handler."""
        with state.ui.write() as ui:
            ui.popup = CommandHelpPopup()

        press("n", channel, state)

        assert drain(channel) == [Player(NextTrack())]
        with state.ui.read() as ui:
            assert isinstance(ui.popup, CommandHelpPopup)

    def test_list_popup_filled_after_navigation(self, state, channel, drain, playlist) -> None:
        """Moving through a popup before its data arrives still selects the first item."""
        press("u p j", channel, state)

        with state.data.write() as data:
            data.user_data.playlists = [playlist]
        press("enter", channel, state)

        assert drain(channel) == [GetUserPlaylists(), GetContext(ContextId("playlist", "p1"))]
        with state.ui.read() as ui:
            assert ui.popup is None
            assert ui.current_page() == BrowsingPage(context_id=ContextId("playlist", "p1"))


class TestMouseEvents:
    """Tests for seeking by clicking the progress bar."""

    @pytest.fixture
    def bar_state(self, playing_state):
        with playing_state.ui.write() as ui:
            ui.progress_bar_rect = Rect(x=0, y=1, width=100, height=1)
        return playing_state

    def test_click_seeks(self, bar_state, channel, drain, tracks) -> None:
        """Seek position scales the column by the track duration."""
        handle_mouse_event(MouseEvent("down", "left", column=25, row=1), channel, bar_state)
        assert drain(channel) == [Player(SeekTrack(tracks[0].duration_ms * 25 // 100))]

    def test_seek_position_floors(self, playing_state, channel, drain) -> None:
        with playing_state.ui.write() as ui:
            ui.progress_bar_rect = Rect(x=0, y=1, width=30, height=1)
        handle_mouse_event(MouseEvent("down", "left", column=1, row=1), channel, playing_state)
        # 200000 * 1 / 30 = 6666.67
        assert drain(channel) == [Player(SeekTrack(6666))]

    @pytest.mark.parametrize(
        "event",
        [
            MouseEvent("down", "left", column=10, row=2),
            MouseEvent("down", "right", column=10, row=1),
            MouseEvent("up", "left", column=10, row=1),
            MouseEvent("scroll_up", None, column=10, row=1),
        ],
    )
    def test_ignored(self, bar_state, channel, drain, event) -> None:
        """Only a left-button press on the bar row seeks."""
        handle_mouse_event(event, channel, bar_state)
        assert drain(channel) == []

    def test_no_track(self, state, channel, drain) -> None:
        with state.ui.write() as ui:
            ui.progress_bar_rect = Rect(x=0, y=1, width=100, height=1)
        handle_mouse_event(MouseEvent("down", "left", column=10, row=1), channel, state)
        assert drain(channel) == []


class TestGlobalCommands:
    """Tests for handle_global_command."""

    def test_quit(self, state, channel) -> None:
        assert handle_global_command(Command.QUIT, channel, state)
        with state.ui.read() as ui:
            assert not ui.is_running

    @pytest.mark.parametrize(
        "command,volume,expected",
        [
            (Command.VOLUME_UP, 50, 55),
            (Command.VOLUME_UP, 98, 100),
            (Command.VOLUME_DOWN, 50, 45),
            (Command.VOLUME_DOWN, 3, 0),
        ],
    )
    def test_volume(self, playing_state, channel, drain, playback, command, volume, expected) -> None:
        """Volume moves by 5 within [0, 100]."""
        with playing_state.player.write() as player:
            player.playback = playback._replace(device=playback.device._replace(volume_percent=volume))

        assert handle_global_command(command, channel, playing_state)
        assert drain(channel) == [Player(Volume(expected))]

    def test_volume_unknown(self, playing_state, channel, drain, playback) -> None:
        """No request when the device does not report its volume."""
        with playing_state.player.write() as player:
            player.playback = playback._replace(device=playback.device._replace(volume_percent=None))

        assert handle_global_command(Command.VOLUME_UP, channel, playing_state)
        assert drain(channel) == []

    def test_refresh_playback(self, state, channel, drain) -> None:
        assert handle_global_command(Command.REFRESH_PLAYBACK, channel, state)
        assert drain(channel) == [GetCurrentPlayback()]

    def test_previous_page_keeps_base_page(self, state, channel) -> None:
        assert handle_global_command(Command.PREVIOUS_PAGE, channel, state)
        with state.ui.read() as ui:
            assert len(ui.history) == 1

    def test_previous_page(self, state, channel) -> None:
        """Going back clears the popup."""
        with state.ui.write() as ui:
            ui.create_new_page(SearchingPage())
            ui.popup = CommandHelpPopup()

        handle_global_command(Command.PREVIOUS_PAGE, channel, state)

        with state.ui.read() as ui:
            assert len(ui.history) == 1
            assert ui.popup is None

    def test_switch_theme_puts_current_first(self, state, channel) -> None:
        with state.ui.write() as ui:
            ui.theme = state.theme_config.find_theme("dracula")

        handle_global_command(Command.SWITCH_THEME, channel, state)

        with state.ui.read() as ui:
            assert isinstance(ui.popup, ThemeListPopup)
            assert [t.name for t in ui.popup.themes] == ["dracula", "default"]

    def test_switch_device(self, state, channel, drain) -> None:
        handle_global_command(Command.SWITCH_DEVICE, channel, state)
        with state.ui.read() as ui:
            assert isinstance(ui.popup, DeviceListPopup)
        assert drain(channel) == [GetDevices()]

    def test_browse_user_playlists(self, state, channel, drain) -> None:
        handle_global_command(Command.BROWSE_USER_PLAYLISTS, channel, state)
        with state.ui.read() as ui:
            assert isinstance(ui.popup, UserPlaylistListPopup)
            assert ui.popup.add_track is None
        assert drain(channel) == [GetUserPlaylists()]

    def test_actions_on_current_track(self, playing_state, channel, tracks) -> None:
        handle_global_command(Command.SHOW_ACTIONS_ON_CURRENT_TRACK, channel, playing_state)
        with playing_state.ui.read() as ui:
            assert ui.popup == ActionListPopup(item=tracks[0])

    def test_actions_without_playback(self, state, channel) -> None:
        handle_global_command(Command.SHOW_ACTIONS_ON_CURRENT_TRACK, channel, state)
        with state.ui.read() as ui:
            assert ui.popup is None

    def test_open_command_help(self, state, channel) -> None:
        handle_global_command(Command.OPEN_COMMAND_HELP, channel, state)
        with state.ui.read() as ui:
            assert ui.popup == CommandHelpPopup(offset=0)

    @pytest.mark.parametrize(
        "command", [Command.CHOOSE_SELECTED, Command.PLAY_RANDOM, Command.SORT_TRACK_BY_TITLE]
    )
    def test_not_global(self, state, channel, drain, command) -> None:
        """Page-level commands are not handled here."""
        assert not handle_global_command(command, channel, state)
        assert drain(channel) == []


class TestStartEventHandler:
    """Tests for the terminal event loop."""

    def test_stops_after_quit(self, state, channel, drain) -> None:
        """Source errors are skipped; the loop ends once the app stops."""
        events = [
            ErrorEvent(error=OSError("read failed")),
            ResizeEvent(width=80, height=24),
            KeyEvent(key=Key.parse("n")),
            KeyEvent(key=Key.parse("q")),
            KeyEvent(key=Key.parse("p")),
        ]
        start_event_handler(state, channel, iter(events))
        assert drain(channel) == [Player(NextTrack())]

    def test_stops_when_channel_closed(self, state, channel) -> None:
        channel.close()
        start_event_handler(state, channel, iter([KeyEvent(key=Key.parse("n"))]))
        with state.ui.read() as ui:
            assert ui.is_running

    def test_handler_error_does_not_stop_loop(self, state, channel, drain) -> None:
        events = [
            MouseEvent("down", "left", column=0, row=0),
            KeyEvent(key=Key.parse("n")),
        ]
        with patch("spotterm.event.handler.handle_mouse_event", side_effect=RuntimeError("boom")):
            start_event_handler(state, channel, iter(events))
        assert drain(channel) == [Player(NextTrack())]
