"""User-invokable commands."""

from enum import Enum
from typing import Optional


class Command(Enum):
    """Closed set of actions a key sequence can resolve to.

    The value is the name used in keymap.toml.
    """

    NEXT_TRACK = "NextTrack"
    PREVIOUS_TRACK = "PreviousTrack"
    RESUME_PAUSE = "ResumePause"
    PLAY_RANDOM = "PlayRandom"
    REPEAT = "Repeat"
    SHUFFLE = "Shuffle"
    VOLUME_UP = "VolumeUp"
    VOLUME_DOWN = "VolumeDown"

    QUIT = "Quit"
    OPEN_COMMAND_HELP = "OpenCommandHelp"
    CLOSE_POPUP = "ClosePopup"

    SELECT_NEXT_OR_SCROLL_DOWN = "SelectNextOrScrollDown"
    SELECT_PREVIOUS_OR_SCROLL_UP = "SelectPreviousOrScrollUp"
    SELECT_FIRST_OR_SCROLL_TO_TOP = "SelectFirstOrScrollToTop"
    SELECT_LAST_OR_SCROLL_TO_BOTTOM = "SelectLastOrScrollToBottom"
    CHOOSE_SELECTED = "ChooseSelected"

    REFRESH_PLAYBACK = "RefreshPlayback"

    SHOW_ACTIONS_ON_SELECTED_ITEM = "ShowActionsOnSelectedItem"
    SHOW_ACTIONS_ON_CURRENT_TRACK = "ShowActionsOnCurrentTrack"

    BROWSE_PLAYING_CONTEXT = "BrowsePlayingContext"
    BROWSE_USER_PLAYLISTS = "BrowseUserPlaylists"
    BROWSE_USER_FOLLOWED_ARTISTS = "BrowseUserFollowedArtists"
    BROWSE_USER_SAVED_ALBUMS = "BrowseUserSavedAlbums"

    SEARCH_CONTEXT = "SearchContext"
    SORT_TRACK_BY_TITLE = "SortTrackByTitle"
    SORT_TRACK_BY_ARTISTS = "SortTrackByArtists"
    SORT_TRACK_BY_ALBUM = "SortTrackByAlbum"
    SORT_TRACK_BY_DURATION = "SortTrackByDuration"
    REVERSE_TRACK_ORDER = "ReverseTrackOrder"

    FOCUS_NEXT_WINDOW = "FocusNextWindow"
    FOCUS_PREVIOUS_WINDOW = "FocusPreviousWindow"

    SWITCH_DEVICE = "SwitchDevice"
    SWITCH_THEME = "SwitchTheme"

    SEARCH_PAGE = "SearchPage"
    PREVIOUS_PAGE = "PreviousPage"

    @classmethod
    def from_name(cls, name: str) -> Optional["Command"]:
        """Look up a command by its keymap name, or None if unknown."""
        try:
            return cls(name)
        except ValueError:
            return None

    @property
    def description(self) -> str:
        return COMMAND_DESCRIPTIONS[self]


COMMAND_DESCRIPTIONS = {
    Command.NEXT_TRACK: "next track",
    Command.PREVIOUS_TRACK: "previous track",
    Command.RESUME_PAUSE: "resume/pause based on the current playback",
    Command.PLAY_RANDOM: "play a random track in the current context",
    Command.REPEAT: "cycle the repeat mode",
    Command.SHUFFLE: "toggle the shuffle mode",
    Command.VOLUME_UP: "increase playback volume by 5%",
    Command.VOLUME_DOWN: "decrease playback volume by 5%",
    Command.QUIT: "quit the application",
    Command.OPEN_COMMAND_HELP: "open a command help popup",
    Command.CLOSE_POPUP: "close a popup",
    Command.SELECT_NEXT_OR_SCROLL_DOWN: "select the next item in a list/table or scroll down",
    Command.SELECT_PREVIOUS_OR_SCROLL_UP: "select the previous item in a list/table or scroll up",
    Command.SELECT_FIRST_OR_SCROLL_TO_TOP: "select the first item in a list/table or scroll to the top",
    Command.SELECT_LAST_OR_SCROLL_TO_BOTTOM: "select the last item in a list/table or scroll to the bottom",
    Command.CHOOSE_SELECTED: "choose the selected item and act on it",
    Command.REFRESH_PLAYBACK: "manually refresh the current playback",
    Command.SHOW_ACTIONS_ON_SELECTED_ITEM: "open a popup showing actions on a selected item",
    Command.SHOW_ACTIONS_ON_CURRENT_TRACK: "open a popup showing actions on the current track",
    Command.BROWSE_PLAYING_CONTEXT: "browse the current playing context",
    Command.BROWSE_USER_PLAYLISTS: "browse the user's playlists",
    Command.BROWSE_USER_FOLLOWED_ARTISTS: "browse the user's followed artists",
    Command.BROWSE_USER_SAVED_ALBUMS: "browse the user's saved albums",
    Command.SEARCH_CONTEXT: "search the current context",
    Command.SORT_TRACK_BY_TITLE: "sort the track table (if any) by track's title",
    Command.SORT_TRACK_BY_ARTISTS: "sort the track table (if any) by track's artists",
    Command.SORT_TRACK_BY_ALBUM: "sort the track table (if any) by track's album",
    Command.SORT_TRACK_BY_DURATION: "sort the track table (if any) by track's duration",
    Command.REVERSE_TRACK_ORDER: "reverse the order of the track table (if any)",
    Command.FOCUS_NEXT_WINDOW: "focus the next focusable window (if any)",
    Command.FOCUS_PREVIOUS_WINDOW: "focus the previous focusable window (if any)",
    Command.SWITCH_DEVICE: "switch to a different device",
    Command.SWITCH_THEME: "switch to a different theme",
    Command.SEARCH_PAGE: "go to the search page",
    Command.PREVIOUS_PAGE: "go to the previous page",
}
