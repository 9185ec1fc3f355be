"""Terminal rendering of the shared state.

Layout (top to bottom): playback line, progress bar, page title, page list,
popup overlay in the lower part of the screen, status line.
"""

import sys
from typing import Optional

from blessed import Terminal

from spotterm.command import Command
from spotterm.core.config import Theme
from spotterm.keymap import KeymapConfig
from spotterm.models import Album, Artist, ArtistContext, ContextId, Playlist, Track, context_title
from spotterm.state import DataState, PlayerState, SharedState, UIState
from spotterm.state.ui import (
    ActionListPopup,
    ArtistListPopup,
    ArtistWindow,
    BrowsingPage,
    CommandHelpPopup,
    ContextSearchPopup,
    CurrentPlayingPage,
    DeviceListPopup,
    ListState,
    RecommendationsPage,
    Rect,
    SearchingPage,
    SearchWindow,
    ThemeListPopup,
    TrackTableWindow,
    UserFollowedArtistListPopup,
    UserPlaylistListPopup,
    UserSavedAlbumListPopup,
    filter_tracks,
    item_actions,
    page_title,
)

PROGRESS_BAR_Y = 1
PAGE_Y = 3
POPUP_HEIGHT = 12


def format_time(ms: Optional[int]) -> str:
    """Format milliseconds to M:SS display."""
    if ms is None or ms < 0:
        return "--:--"
    seconds = ms // 1000
    return f"{seconds // 60}:{seconds % 60:02d}"


def _style(term: Terminal, theme: Theme, key: str):
    return term.formatter(theme.color(key))


def _fit(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(text) <= width:
        return text.ljust(width)
    return text[: max(width - 1, 0)] + "…"


def _format_track(track: Track, width: int) -> str:
    duration = format_time(track.duration_ms)
    column = max((width - len(duration) - 3) // 3, 1)
    return (
        f"{_fit(track.name, column)} {_fit(track.artists_info, column)} "
        f"{_fit(track.album_info, column)} {duration}"
    )


def _format_item(item, width: int) -> str:
    if isinstance(item, Track):
        return _format_track(item, width)
    if isinstance(item, Album):
        artists = ", ".join(a.name for a in item.artists)
        return _fit(f"{item.name}  {artists}", width)
    if isinstance(item, Playlist):
        return _fit(f"{item.name}  ({item.owner})" if item.owner else item.name, width)
    if isinstance(item, Artist):
        return _fit(item.name, width)
    return _fit(str(item), width)


def _render_list(
    term: Terminal,
    theme: Theme,
    lines: list[str],
    list_state: Optional[ListState],
    y: int,
    height: int,
    x: int = 0,
) -> None:
    """Draw a list, scrolled so that the selected line is visible."""
    if height <= 0:
        return

    selected = list_state.clamp(len(lines)) if list_state is not None else None
    start = max(0, (selected or 0) - height + 1)
    normal = _style(term, theme, "foreground")
    highlight = _style(term, theme, "selected")

    for row in range(height):
        index = start + row
        line = lines[index] if index < len(lines) else ""
        style = highlight if index == selected else normal
        print(term.move_xy(x, y + row) + term.clear_eol + style(line), end="")


def _playback_line(term: Terminal, theme: Theme, player: PlayerState) -> str:
    playback = player.playback
    if playback is None:
        return _style(term, theme, "muted")("No playback found. Press D to choose a device.")

    icon = "▶" if playback.is_playing else "⏸"
    track = playback.track
    title = f"{track.name} by {track.artists_info}" if track else "Unknown"
    volume = f"{playback.device.volume_percent}%" if playback.device.volume_percent is not None else "--"
    details = (
        f"[{playback.device.name} | volume {volume} | shuffle {'on' if playback.shuffle_state else 'off'}"
        f" | repeat {playback.repeat_state}]"
    )
    return _style(term, theme, "accent")(f"{icon} {title}") + " " + _style(term, theme, "muted")(details)


def _render_progress_bar(term: Terminal, theme: Theme, player: PlayerState) -> Rect:
    """Draw the progress bar and return the rectangle it occupies."""
    track = player.current_playing_track()
    progress_ms = player.playback_progress()

    duration_ms = track.duration_ms if track else 0
    times = f" {format_time(progress_ms)}/{format_time(duration_ms if track else None)}"
    width = max(term.width - len(times), 0)

    filled = 0
    if duration_ms > 0 and progress_ms is not None:
        filled = min(width * progress_ms // duration_ms, width)

    done = _style(term, theme, "progress")("█" * filled)
    bar = done + _style(term, theme, "muted")("░" * (width - filled))
    print(term.move_xy(0, PROGRESS_BAR_Y) + term.clear_eol + bar + times, end="")
    return Rect(x=0, y=PROGRESS_BAR_Y, width=width, height=1)


def _context_uri_for_page(ui: UIState, player: PlayerState) -> Optional[str]:
    page = ui.current_page()
    if isinstance(page, BrowsingPage):
        return page.context_id.uri
    if isinstance(page, CurrentPlayingPage) and player.playback and player.playback.context_uri:
        context_id = ContextId.from_uri(player.playback.context_uri)
        return context_id.uri if context_id else None
    return None


def _render_page(
    term: Terminal, theme: Theme, ui: UIState, data: DataState, player: PlayerState, height: int
) -> None:
    page = ui.current_page()
    width = term.width
    title_style = _style(term, theme, "accent")
    list_y = PAGE_Y + 1
    list_height = height - 1

    def title(text: str) -> None:
        print(term.move_xy(0, PAGE_Y) + term.clear_eol + title_style(_fit(text, width)), end="")

    def loading() -> None:
        title(page_title(page))
        _render_list(term, theme, ["Loading..."], None, list_y, list_height)

    if isinstance(page, SearchingPage):
        window = ui.window if isinstance(ui.window, SearchWindow) else SearchWindow()
        focus = "input" if window.focus == "input" else window.focus.capitalize()
        title(f"Search: {page.input}{'_' if window.focus == 'input' else ''}  [{focus}]")
        results = data.caches.search.get(page.current_query)
        if results is None or window.focus == "input":
            hint = "Type a query and press enter" if results is None else (
                f"{len(results.tracks)} tracks, {len(results.albums)} albums, "
                f"{len(results.artists)} artists, {len(results.playlists)} playlists (tab to browse)"
            )
            _render_list(term, theme, [hint], None, list_y, list_height)
            return
        items = getattr(results, window.focus)
        lines = [_format_item(item, width) for item in items]
        _render_list(term, theme, lines, window.focused_list(), list_y, list_height)
        return

    if isinstance(page, RecommendationsPage):
        tracks = data.caches.recommendations.get(page.seed.uri)
        if tracks is None:
            loading()
            return
        title(page_title(page))
        window = ui.window if isinstance(ui.window, TrackTableWindow) else TrackTableWindow()
        tracks = filter_tracks(tracks, ui.context_search_query())
        lines = [_format_track(t, width) for t in tracks]
        _render_list(term, theme, lines, window.track_table, list_y, list_height)
        return

    uri = _context_uri_for_page(ui, player)
    context = data.caches.contexts.get(uri) if uri else None
    if context is None:
        if isinstance(page, CurrentPlayingPage) and uri is None:
            title(page_title(page))
            hint = "Nothing is playing from a playlist, album or artist"
            _render_list(term, theme, [hint], None, list_y, list_height)
        else:
            loading()
        return

    title(f"{page_title(page)} | {context_title(context)}")
    query = ui.context_search_query()

    if isinstance(context, ArtistContext):
        window = ui.window if isinstance(ui.window, ArtistWindow) else ArtistWindow()
        tabs = {"top_tracks": "Top Tracks", "albums": "Albums", "related_artists": "Related Artists"}
        header = "  ".join(f"[{name}]" if key == window.focus else name for key, name in tabs.items())
        print(term.move_xy(0, list_y) + term.clear_eol + _style(term, theme, "muted")(header), end="")
        if window.focus == "top_tracks":
            lines = [_format_track(t, width) for t in filter_tracks(context.tracks, query)]
        elif window.focus == "albums":
            lines = [_format_item(a, width) for a in context.albums]
        else:
            lines = [_format_item(a, width) for a in context.related_artists]
        _render_list(term, theme, lines, window.focused_list(), list_y + 1, list_height - 1)
        return

    window = ui.window if isinstance(ui.window, TrackTableWindow) else TrackTableWindow()
    tracks = filter_tracks(context.tracks, query)
    lines = [_format_track(t, width) for t in tracks]
    _render_list(term, theme, lines, window.track_table, list_y, list_height)


def _command_help_lines(keymap_config: KeymapConfig) -> list[str]:
    lines = []
    for command in Command:
        key_sequences = keymap_config.find_key_sequences(command)
        if key_sequences:
            keys = ", ".join(f'"{k}"' for k in key_sequences)
            lines.append(f"{command.value:<28} {keys:<24} {command.description}")
    return lines


def _render_popup(
    term: Terminal,
    theme: Theme,
    ui: UIState,
    data: DataState,
    player: PlayerState,
    keymap_config: KeymapConfig,
    y: int,
    height: int,
) -> None:
    popup = ui.popup
    width = term.width
    border = _style(term, theme, "popup")

    if isinstance(popup, ContextSearchPopup):
        print(term.move_xy(0, y + height - 1) + term.clear_eol + border(f"/{popup.query}_"), end="")
        return

    list_state: Optional[ListState] = getattr(popup, "list_state", None)
    if isinstance(popup, CommandHelpPopup):
        name = "Commands"
        lines = _command_help_lines(keymap_config)[popup.offset :]
    elif isinstance(popup, ActionListPopup):
        name = f"Actions on {popup.item.name}"
        lines = item_actions(popup.item)
    elif isinstance(popup, UserPlaylistListPopup):
        name = "Add to playlist" if popup.add_track else "User playlists"
        lines = [_format_item(p, width) for p in data.user_data.playlists]
    elif isinstance(popup, UserFollowedArtistListPopup):
        name = "Followed artists"
        lines = [_format_item(a, width) for a in data.user_data.followed_artists]
    elif isinstance(popup, UserSavedAlbumListPopup):
        name = "Saved albums"
        lines = [_format_item(a, width) for a in data.user_data.saved_albums]
    elif isinstance(popup, DeviceListPopup):
        name = "Devices"
        lines = [f"{'* ' if d.is_active else '  '}{d.name}" for d in player.devices]
    elif isinstance(popup, ThemeListPopup):
        name = "Themes"
        lines = [t.name for t in popup.themes]
    elif isinstance(popup, ArtistListPopup):
        name = "Artists"
        lines = [_format_item(a, width) for a in popup.artists]
    else:
        return

    print(term.move_xy(0, y) + term.clear_eol + border(_fit(f"[ {name} ]", width)), end="")
    _render_list(term, theme, lines, list_state, y + 1, height - 1)


def render(term: Terminal, state: SharedState) -> None:
    """Draw one frame and publish the progress bar position for mouse input."""
    height = term.height

    # lock order: ui -> data -> player
    with state.ui.read() as ui, state.data.read() as data, state.player.read() as player:
        theme = ui.theme

        print(term.home + term.move_xy(0, 0) + term.clear_eol + _playback_line(term, theme, player), end="")
        progress_bar_rect = _render_progress_bar(term, theme, player)
        print(term.move_xy(0, PROGRESS_BAR_Y + 1) + term.clear_eol, end="")

        popup_height = 0
        if ui.popup is not None:
            if isinstance(ui.popup, ContextSearchPopup):
                popup_height = 1
            else:
                popup_height = min(POPUP_HEIGHT, max(height - PAGE_Y - 3, 0))

        page_height = max(height - PAGE_Y - 1 - popup_height, 0)
        _render_page(term, theme, ui, data, player, page_height)

        if ui.popup is not None and popup_height > 0:
            _render_popup(
                term, theme, ui, data, player, state.keymap_config, PAGE_Y + page_height, popup_height
            )

        pending = str(ui.input_key_sequence)
        status = f"{len(ui.history)} page(s) | ? for help"
        if pending:
            status = f"keys: {pending} | {status}"
        status_line = _style(term, theme, "muted")(_fit(status, term.width))
        print(term.move_xy(0, height - 1) + term.clear_eol + status_line, end="")

    sys.stdout.flush()

    with state.ui.write() as ui:
        ui.progress_bar_rect = progress_bar_rect
