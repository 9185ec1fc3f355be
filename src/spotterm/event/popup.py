"""Key handler for the active popup."""

from typing import Sequence

from spotterm.command import Command
from spotterm.key import KeySequence
from spotterm.models import Album, Artist, Item, Track, context_id_of
from spotterm.state import SharedState, UIState
from spotterm.state.ui import (
    ACTION_ADD_TO_PLAYLIST,
    ACTION_BROWSE_ALBUM,
    ACTION_BROWSE_ARTIST,
    ACTION_BROWSE_RECOMMENDATIONS,
    ACTION_SAVE_TO_LIBRARY,
    ActionListPopup,
    ArtistListPopup,
    BrowsingPage,
    CommandHelpPopup,
    ContextSearchPopup,
    CurrentPlayingPage,
    DeviceListPopup,
    ListState,
    PageState,
    RecommendationsPage,
    ThemeListPopup,
    UserFollowedArtistListPopup,
    UserPlaylistListPopup,
    UserSavedAlbumListPopup,
    item_actions,
)

from . import window
from .channel import RequestChannel
from .requests import (
    AddTrackToPlaylist,
    GetRecommendations,
    GetUserPlaylists,
    Player,
    SaveToLibrary,
    TransferPlayback,
)


def handle_key_sequence_for_popup(
    key_sequence: KeySequence, channel: RequestChannel, state: SharedState
) -> bool:
    """Handle a key sequence while a popup is open.

    Returns:
        True if the popup consumed the sequence
    """
    with state.ui.read() as ui:
        popup = ui.popup
        page = ui.current_page()
    if popup is None:
        return False

    if isinstance(popup, ContextSearchPopup):
        return _handle_key_sequence_for_context_search(key_sequence, channel, state, page)

    command = state.keymap_config.find_command_from_key_sequence(key_sequence)
    if command is None:
        return False

    with state.ui.write() as ui:
        popup = ui.popup
        if popup is None:
            return False

        if command == Command.CLOSE_POPUP:
            if isinstance(popup, ThemeListPopup):
                # the theme active when the popup was opened
                ui.theme = popup.themes[0]
            ui.popup = None
            return True

        match popup:
            case CommandHelpPopup():
                return _handle_command_for_command_help(command, popup)
            case ActionListPopup():
                return _handle_command_for_action_list(command, channel, ui, popup)
            case UserPlaylistListPopup():
                with state.data.read() as data:
                    playlists = list(data.user_data.playlists)
                if window.handle_list_navigation(command, popup.list_state, len(playlists)):
                    return True
                if command != Command.CHOOSE_SELECTED:
                    return False
                index = popup.list_state.clamp(len(playlists))
                if index is not None:
                    playlist = playlists[index]
                    if popup.add_track is not None:
                        channel.submit(AddTrackToPlaylist(playlist.id, popup.add_track.id))
                        ui.popup = None
                    else:
                        window.browse_context(ui, channel, context_id_of(playlist))
                return True
            case UserFollowedArtistListPopup():
                with state.data.read() as data:
                    artists = list(data.user_data.followed_artists)
                return _handle_command_for_browse_list(command, channel, ui, popup.list_state, artists)
            case UserSavedAlbumListPopup():
                with state.data.read() as data:
                    albums = list(data.user_data.saved_albums)
                return _handle_command_for_browse_list(command, channel, ui, popup.list_state, albums)
            case ArtistListPopup():
                return _handle_command_for_browse_list(
                    command, channel, ui, popup.list_state, popup.artists
                )
            case DeviceListPopup():
                with state.player.read() as player:
                    devices = list(player.devices)
                if window.handle_list_navigation(command, popup.list_state, len(devices)):
                    return True
                if command != Command.CHOOSE_SELECTED:
                    return False
                index = popup.list_state.clamp(len(devices))
                if index is not None:
                    channel.submit(Player(TransferPlayback(devices[index].id, force_play=True)))
                    ui.popup = None
                return True
            case ThemeListPopup():
                themes = popup.themes
                if window.handle_list_navigation(command, popup.list_state, len(themes)):
                    # preview the selected theme
                    index = popup.list_state.clamp(len(themes))
                    if index is not None:
                        ui.theme = themes[index]
                    return True
                if command != Command.CHOOSE_SELECTED:
                    return False
                index = popup.list_state.clamp(len(themes))
                if index is not None:
                    ui.theme = themes[index]
                ui.popup = None
                return True
    return False


def _handle_command_for_command_help(command: Command, popup: CommandHelpPopup) -> bool:
    match command:
        case Command.SELECT_NEXT_OR_SCROLL_DOWN:
            popup.offset += 1
        case Command.SELECT_PREVIOUS_OR_SCROLL_UP:
            popup.offset = max(popup.offset - 1, 0)
        case Command.SELECT_FIRST_OR_SCROLL_TO_TOP:
            popup.offset = 0
        case _:
            return False
    return True


def _handle_command_for_browse_list(
    command: Command,
    channel: RequestChannel,
    ui: UIState,
    list_state: ListState,
    items: Sequence[Album | Artist],
) -> bool:
    if window.handle_list_navigation(command, list_state, len(items)):
        return True
    if command != Command.CHOOSE_SELECTED:
        return False
    index = list_state.clamp(len(items))
    if index is not None:
        window.browse_context(ui, channel, context_id_of(items[index]))
    return True


def _handle_command_for_action_list(
    command: Command,
    channel: RequestChannel,
    ui: UIState,
    popup: ActionListPopup,
) -> bool:
    actions = item_actions(popup.item)
    if window.handle_list_navigation(command, popup.list_state, len(actions)):
        return True
    if command != Command.CHOOSE_SELECTED:
        return False

    index = popup.list_state.clamp(len(actions))
    if index is not None:
        _apply_action(actions[index], popup.item, channel, ui)
    return True


def _apply_action(action: str, item: Item, channel: RequestChannel, ui: UIState) -> None:
    if action == ACTION_BROWSE_ARTIST and isinstance(item, (Track, Album)):
        artists = list(item.artists)
        if len(artists) == 1:
            window.browse_context(ui, channel, context_id_of(artists[0]))
        elif artists:
            ui.popup = ArtistListPopup(artists=artists)
        else:
            ui.popup = None
    elif action == ACTION_BROWSE_ALBUM and isinstance(item, Track):
        if item.album is not None:
            window.browse_context(ui, channel, context_id_of(item.album))
        else:
            ui.popup = None
    elif action == ACTION_BROWSE_RECOMMENDATIONS and isinstance(item, (Track, Artist)):
        ui.create_new_page(RecommendationsPage(seed=item))
        channel.submit(GetRecommendations(item))
    elif action == ACTION_ADD_TO_PLAYLIST and isinstance(item, Track):
        channel.submit(GetUserPlaylists())
        ui.popup = UserPlaylistListPopup(add_track=item)
    elif action == ACTION_SAVE_TO_LIBRARY:
        channel.submit(SaveToLibrary(item))
        ui.popup = None


def _handle_key_sequence_for_context_search(
    key_sequence: KeySequence,
    channel: RequestChannel,
    state: SharedState,
    page: PageState,
) -> bool:
    if len(key_sequence) == 1:
        key = key_sequence.keys[0]
        with state.ui.write() as ui:
            popup = ui.popup
            if isinstance(popup, ContextSearchPopup):
                if key.char is not None:
                    popup.query += key.char
                    return True
                if key.modifier is None and key.code == "backspace":
                    popup.query = popup.query[:-1]
                    return True

    command = state.keymap_config.find_command_from_key_sequence(key_sequence)
    if command == Command.CLOSE_POPUP:
        with state.ui.write() as ui:
            ui.popup = None
        return True

    # everything else acts on the filtered list of the page below
    match page:
        case RecommendationsPage():
            return window.handle_key_sequence_for_recommendation_window(key_sequence, channel, state)
        case BrowsingPage() | CurrentPlayingPage():
            return window.handle_key_sequence_for_context_window(key_sequence, channel, state)
    return False
