"""Page-level key handlers: context, search and recommendation windows.

Each handler returns True when the key sequence was consumed, so the
pipeline knows not to fall back to the global commands.
"""

import random
from typing import Callable

from loguru import logger

from spotterm.command import Command
from spotterm.key import Key, KeySequence
from spotterm.models import (
    ArtistContext,
    Context,
    ContextId,
    ContextPlayback,
    StartPlaybackTarget,
    Track,
    URIsPlayback,
    context_id_of,
)
from spotterm.state import SharedState, UIState
from spotterm.state.ui import (
    ARTIST_FOCUS_ORDER,
    SEARCH_FOCUS_ORDER,
    ActionListPopup,
    ArtistWindow,
    BrowsingPage,
    ContextSearchPopup,
    CurrentPlayingPage,
    ListState,
    RecommendationsPage,
    SearchingPage,
    SearchWindow,
    TrackTableWindow,
    cycle_focus,
    filter_tracks,
    window_for_context,
)

from .channel import RequestChannel
from .requests import GetContext, Player, Search, StartPlayback

SORT_KEYS: dict[Command, Callable[[Track], object]] = {
    Command.SORT_TRACK_BY_TITLE: lambda t: t.name.lower(),
    Command.SORT_TRACK_BY_ARTISTS: lambda t: t.artists_info.lower(),
    Command.SORT_TRACK_BY_ALBUM: lambda t: t.album_info.lower(),
    Command.SORT_TRACK_BY_DURATION: lambda t: t.duration_ms,
}


def browse_context(ui: UIState, channel: RequestChannel, context_id: ContextId) -> None:
    """Open a browsing page for a context and fetch its data."""
    ui.create_new_page(BrowsingPage(context_id=context_id))
    channel.submit(GetContext(context_id))


def handle_list_navigation(command: Command, list_state: ListState, length: int) -> bool:
    """Move a list selection; False if the command is not a navigation one."""
    match command:
        case Command.SELECT_NEXT_OR_SCROLL_DOWN:
            list_state.select_next(length)
        case Command.SELECT_PREVIOUS_OR_SCROLL_UP:
            list_state.select_previous(length)
        case Command.SELECT_FIRST_OR_SCROLL_TO_TOP:
            list_state.select_first(length)
        case Command.SELECT_LAST_OR_SCROLL_TO_BOTTOM:
            list_state.select_last(length)
        case _:
            return False
    return True


def _handle_command_for_track_list(
    command: Command,
    channel: RequestChannel,
    ui: UIState,
    all_tracks: list[Track],
    list_state: ListState,
    play_target: Callable[[Track], StartPlaybackTarget],
) -> bool:
    """Commands shared by every track table.

    ``all_tracks`` is sorted in place; selection indexes the tracks left after
    the context search filter.
    """
    tracks = filter_tracks(all_tracks, ui.context_search_query())
    if handle_list_navigation(command, list_state, len(tracks)):
        return True

    match command:
        case Command.CHOOSE_SELECTED:
            index = list_state.clamp(len(tracks))
            if index is not None:
                channel.submit(Player(StartPlayback(play_target(tracks[index]))))
        case Command.PLAY_RANDOM:
            if tracks:
                channel.submit(Player(StartPlayback(play_target(random.choice(tracks)))))
        case Command.SHOW_ACTIONS_ON_SELECTED_ITEM:
            index = list_state.clamp(len(tracks))
            if index is not None:
                ui.popup = ActionListPopup(item=tracks[index])
        case Command.SEARCH_CONTEXT:
            ui.popup = ContextSearchPopup()
        case Command.REVERSE_TRACK_ORDER:
            all_tracks.reverse()
        case _ if command in SORT_KEYS:
            all_tracks.sort(key=SORT_KEYS[command])
        case _:
            return False
    return True


def _uris_playback(tracks: list[Track]) -> Callable[[Track], StartPlaybackTarget]:
    uris = tuple(t.uri for t in tracks)
    return lambda track: URIsPlayback(uris=uris, offset_uri=track.uri)


def _handle_command_for_artist(
    command: Command,
    channel: RequestChannel,
    ui: UIState,
    context: ArtistContext,
) -> bool:
    window = ui.window
    if not isinstance(window, ArtistWindow):
        return False

    match command:
        case Command.FOCUS_NEXT_WINDOW:
            window.focus = cycle_focus(ARTIST_FOCUS_ORDER, window.focus, 1)
            return True
        case Command.FOCUS_PREVIOUS_WINDOW:
            window.focus = cycle_focus(ARTIST_FOCUS_ORDER, window.focus, -1)
            return True

    if window.focus == "top_tracks":
        # an artist context cannot start at a given track, so play the top tracks as a list
        return _handle_command_for_track_list(
            command, channel, ui, context.tracks, window.top_tracks, _uris_playback(context.tracks)
        )

    items = context.albums if window.focus == "albums" else context.related_artists
    list_state = window.focused_list()
    if handle_list_navigation(command, list_state, len(items)):
        return True

    index = list_state.clamp(len(items))
    match command:
        case Command.CHOOSE_SELECTED:
            if index is not None:
                browse_context(ui, channel, context_id_of(items[index]))
        case Command.SHOW_ACTIONS_ON_SELECTED_ITEM:
            if index is not None:
                ui.popup = ActionListPopup(item=items[index])
        case _:
            return False
    return True


def _handle_command_for_context(
    command: Command,
    channel: RequestChannel,
    ui: UIState,
    context: Context,
    context_uri: str,
) -> bool:
    # stale when the context was not loaded yet or the playing context changed kind
    expected = ArtistWindow if isinstance(context, ArtistContext) else TrackTableWindow
    if not isinstance(ui.window, expected):
        ui.window = window_for_context(context)

    if isinstance(context, ArtistContext):
        return _handle_command_for_artist(command, channel, ui, context)

    return _handle_command_for_track_list(
        command,
        channel,
        ui,
        context.tracks,
        ui.window.track_table,
        lambda track: ContextPlayback(context_uri=context_uri, offset_uri=track.uri),
    )


def handle_key_sequence_for_context_window(
    key_sequence: KeySequence, channel: RequestChannel, state: SharedState
) -> bool:
    """Handle a key sequence on the current playing or a browsing page.

    Returns:
        True if consumed; False when the sequence is not a command, the page's
        context is not loaded yet or the command does not apply here
    """
    command = state.keymap_config.find_command_from_key_sequence(key_sequence)
    if command is None:
        return False

    with state.player.read() as player:
        playing_context_uri = player.playback.context_uri if player.playback else None

    with state.ui.write() as ui:
        page = ui.current_page()
        if isinstance(page, BrowsingPage):
            uri = page.context_id.uri
        elif isinstance(page, CurrentPlayingPage):
            # contexts are cached under their canonical uri
            playing_id = ContextId.from_uri(playing_context_uri) if playing_context_uri else None
            uri = playing_id.uri if playing_id else None
        else:
            return False
        if uri is None:
            return False

        with state.data.write() as data:
            context = data.caches.contexts.get(uri)
            if context is None:
                logger.debug(f"Context {uri} not loaded yet, ignoring {command.value}")
                return False
            return _handle_command_for_context(command, channel, ui, context, uri)


def _handle_search_input(key: Key, page: SearchingPage, ui: UIState, channel: RequestChannel) -> bool:
    char = key.char
    if char is not None:
        page.input += char
        return True
    if key.modifier is not None:
        return False

    if key.code == "backspace":
        page.input = page.input[:-1]
        return True
    if key.code == "enter":
        query = page.input.strip()
        if query:
            page.current_query = query
            ui.window = SearchWindow()
            channel.submit(Search(query))
        return True
    return False


def handle_key_sequence_for_search_window(
    key_sequence: KeySequence, channel: RequestChannel, state: SharedState
) -> bool:
    """Handle a key sequence on the search page.

    While the input box is focused, single printable keys edit the query and
    enter submits it.
    """
    with state.ui.write() as ui:
        page = ui.current_page()
        if not isinstance(page, SearchingPage):
            return False
        if not isinstance(ui.window, SearchWindow):
            ui.window = SearchWindow()
        window = ui.window

        if window.focus == "input" and len(key_sequence) == 1:
            if _handle_search_input(key_sequence.keys[0], page, ui, channel):
                return True

        command = state.keymap_config.find_command_from_key_sequence(key_sequence)
        if command is None:
            return False

        match command:
            case Command.FOCUS_NEXT_WINDOW:
                window.focus = cycle_focus(SEARCH_FOCUS_ORDER, window.focus, 1)
                return True
            case Command.FOCUS_PREVIOUS_WINDOW:
                window.focus = cycle_focus(SEARCH_FOCUS_ORDER, window.focus, -1)
                return True

        list_state = window.focused_list()
        if list_state is None:
            return False

        with state.data.read() as data:
            results = data.caches.search.get(page.current_query)
        if results is None:
            return False

        items = getattr(results, window.focus)
        if handle_list_navigation(command, list_state, len(items)):
            return True

        index = list_state.clamp(len(items))
        match command:
            case Command.CHOOSE_SELECTED:
                if index is not None:
                    item = items[index]
                    if isinstance(item, Track):
                        channel.submit(Player(StartPlayback(URIsPlayback(uris=(item.uri,)))))
                    else:
                        browse_context(ui, channel, context_id_of(item))
            case Command.SHOW_ACTIONS_ON_SELECTED_ITEM:
                if index is not None:
                    ui.popup = ActionListPopup(item=items[index])
            case _:
                return False
        return True


def handle_key_sequence_for_recommendation_window(
    key_sequence: KeySequence, channel: RequestChannel, state: SharedState
) -> bool:
    """Handle a key sequence on a recommendations page."""
    command = state.keymap_config.find_command_from_key_sequence(key_sequence)
    if command is None:
        return False

    with state.ui.write() as ui:
        page = ui.current_page()
        if not isinstance(page, RecommendationsPage):
            return False
        if not isinstance(ui.window, TrackTableWindow):
            ui.window = TrackTableWindow()

        with state.data.write() as data:
            tracks = data.caches.recommendations.get(page.seed.uri)
            if tracks is None:
                return False
            return _handle_command_for_track_list(
                command, channel, ui, tracks, ui.window.track_table, _uris_playback(tracks)
            )
