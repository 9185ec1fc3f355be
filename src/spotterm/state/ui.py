"""UI sub-state: page history, popup, window selections and key input."""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Union

from spotterm.core.config import Theme
from spotterm.key import KeySequence
from spotterm.models import (
    Album,
    Artist,
    ArtistContext,
    Context,
    ContextId,
    Item,
    SeedItem,
    Track,
)


class Rect(NamedTuple):
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0


@dataclass
class ListState:
    """Selection within a list.

    None means nothing is selected yet, as when the list was empty; once the
    list has items it behaves like a selection just before the first one.
    """

    selected: Optional[int] = 0

    def select_next(self, length: int) -> None:
        if length <= 0:
            self.selected = None
        elif self.selected is None:
            self.selected = 0
        else:
            self.selected = min(self.selected + 1, length - 1)

    def select_previous(self, length: int) -> None:
        if length <= 0:
            self.selected = None
        else:
            self.selected = max((self.selected or 0) - 1, 0)

    def select_first(self, length: int) -> None:
        self.selected = 0 if length > 0 else None

    def select_last(self, length: int) -> None:
        self.selected = length - 1 if length > 0 else None

    def clamp(self, length: int) -> Optional[int]:
        """The selection bounded to a list of ``length`` items."""
        if length <= 0:
            return None
        return min(self.selected or 0, length - 1)


def new_list_state() -> ListState:
    return ListState(selected=0)


# ============================================================================
# PAGES
# ============================================================================


@dataclass
class CurrentPlayingPage:
    """The context of the current playback; the base page."""


@dataclass
class BrowsingPage:
    context_id: ContextId


@dataclass
class RecommendationsPage:
    seed: SeedItem


@dataclass
class SearchingPage:
    input: str = ""
    current_query: str = ""


PageState = Union[CurrentPlayingPage, BrowsingPage, RecommendationsPage, SearchingPage]


# ============================================================================
# POPUPS
# ============================================================================


@dataclass
class CommandHelpPopup:
    offset: int = 0


@dataclass
class ActionListPopup:
    item: Item
    list_state: ListState = field(default_factory=new_list_state)


@dataclass
class UserPlaylistListPopup:
    """Lists the user's cached playlists.

    ``add_track`` is None when browsing; otherwise choosing a playlist adds
    that track to it.
    """

    add_track: Optional[Track] = None
    list_state: ListState = field(default_factory=new_list_state)


@dataclass
class UserFollowedArtistListPopup:
    list_state: ListState = field(default_factory=new_list_state)


@dataclass
class UserSavedAlbumListPopup:
    list_state: ListState = field(default_factory=new_list_state)


@dataclass
class DeviceListPopup:
    list_state: ListState = field(default_factory=new_list_state)


@dataclass
class ThemeListPopup:
    """Themes with the theme active when opened first."""

    themes: list[Theme]
    list_state: ListState = field(default_factory=new_list_state)


@dataclass
class ArtistListPopup:
    artists: list[Artist]
    list_state: ListState = field(default_factory=new_list_state)


@dataclass
class ContextSearchPopup:
    query: str = ""


PopupState = Union[
    CommandHelpPopup,
    ActionListPopup,
    UserPlaylistListPopup,
    UserFollowedArtistListPopup,
    UserSavedAlbumListPopup,
    DeviceListPopup,
    ThemeListPopup,
    ArtistListPopup,
    ContextSearchPopup,
]


# ============================================================================
# WINDOWS
# ============================================================================

ARTIST_FOCUS_ORDER = ("top_tracks", "albums", "related_artists")
SEARCH_FOCUS_ORDER = ("input", "tracks", "albums", "artists", "playlists")


@dataclass
class UnknownWindow:
    """The page's data has not been loaded yet."""


@dataclass
class TrackTableWindow:
    track_table: ListState = field(default_factory=new_list_state)


@dataclass
class ArtistWindow:
    top_tracks: ListState = field(default_factory=new_list_state)
    albums: ListState = field(default_factory=new_list_state)
    related_artists: ListState = field(default_factory=new_list_state)
    focus: str = "top_tracks"

    def focused_list(self) -> ListState:
        return getattr(self, self.focus)


@dataclass
class SearchWindow:
    tracks: ListState = field(default_factory=new_list_state)
    albums: ListState = field(default_factory=new_list_state)
    artists: ListState = field(default_factory=new_list_state)
    playlists: ListState = field(default_factory=new_list_state)
    focus: str = "input"

    def focused_list(self) -> Optional[ListState]:
        if self.focus == "input":
            return None
        return getattr(self, self.focus)


WindowState = Union[UnknownWindow, TrackTableWindow, ArtistWindow, SearchWindow]


def cycle_focus(order: tuple[str, ...], current: str, step: int) -> str:
    return order[(order.index(current) + step) % len(order)]


def window_for_context(context: Context) -> WindowState:
    if isinstance(context, ArtistContext):
        return ArtistWindow()
    return TrackTableWindow()


def window_for_page(page: PageState) -> WindowState:
    if isinstance(page, SearchingPage):
        return SearchWindow()
    if isinstance(page, RecommendationsPage):
        return TrackTableWindow()
    return UnknownWindow()


@dataclass
class UIState:
    """Mutated by the terminal event pipeline and the command handlers."""

    theme: Theme
    is_running: bool = True
    input_key_sequence: KeySequence = field(default_factory=KeySequence)
    history: list[PageState] = field(default_factory=lambda: [CurrentPlayingPage()])
    popup: Optional[PopupState] = None
    window: WindowState = field(default_factory=UnknownWindow)
    # Published by the renderer for mouse hit-testing
    progress_bar_rect: Rect = field(default_factory=Rect)

    def current_page(self) -> PageState:
        return self.history[-1]

    def create_new_page(self, page: PageState) -> None:
        self.history.append(page)
        self.popup = None
        self.window = window_for_page(page)

    def pop_page(self) -> bool:
        """Go back one page; the base page is never popped."""
        if len(self.history) <= 1:
            return False
        self.history.pop()
        self.popup = None
        self.window = window_for_page(self.current_page())
        return True

    def context_search_query(self) -> Optional[str]:
        if isinstance(self.popup, ContextSearchPopup) and self.popup.query:
            return self.popup.query
        return None


def filter_tracks(tracks: list[Track], query: Optional[str]) -> list[Track]:
    """Tracks whose name, artists or album contain the query (case-insensitive)."""
    if not query:
        return tracks
    query = query.lower()
    return [
        t
        for t in tracks
        if query in t.name.lower()
        or query in t.artists_info.lower()
        or query in t.album_info.lower()
    ]


ACTION_BROWSE_ARTIST = "Browse artist"
ACTION_BROWSE_ALBUM = "Browse album"
ACTION_BROWSE_RECOMMENDATIONS = "Browse recommendations"
ACTION_ADD_TO_PLAYLIST = "Add to playlist"
ACTION_SAVE_TO_LIBRARY = "Save to library"


def item_actions(item: Item) -> list[str]:
    """Actions offered by the action list popup for an item."""
    if isinstance(item, Track):
        return [
            ACTION_BROWSE_ARTIST,
            ACTION_BROWSE_ALBUM,
            ACTION_BROWSE_RECOMMENDATIONS,
            ACTION_ADD_TO_PLAYLIST,
            ACTION_SAVE_TO_LIBRARY,
        ]
    if isinstance(item, Album):
        return [ACTION_BROWSE_ARTIST, ACTION_SAVE_TO_LIBRARY]
    if isinstance(item, Artist):
        return [ACTION_BROWSE_RECOMMENDATIONS, ACTION_SAVE_TO_LIBRARY]
    return [ACTION_SAVE_TO_LIBRARY]


def page_title(page: PageState) -> str:
    if isinstance(page, CurrentPlayingPage):
        return "Current Playing"
    if isinstance(page, BrowsingPage):
        return f"Browsing {page.context_id.kind}"
    if isinstance(page, RecommendationsPage):
        return f"Recommendations for {page.seed.name}"
    return "Search"

