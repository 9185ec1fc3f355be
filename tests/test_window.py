"""Tests for the page-level key handlers."""

from unittest.mock import patch

import pytest

from spotterm.event.requests import GetContext, Player, Search, StartPlayback
from spotterm.event.window import (
    handle_key_sequence_for_context_window,
    handle_key_sequence_for_recommendation_window,
    handle_key_sequence_for_search_window,
)
from spotterm.key import KeySequence
from spotterm.models import ContextId, ContextPlayback, SearchResults, URIsPlayback
from spotterm.state.ui import (
    ActionListPopup,
    ArtistWindow,
    BrowsingPage,
    ContextSearchPopup,
    RecommendationsPage,
    SearchingPage,
    SearchWindow,
    TrackTableWindow,
    UnknownWindow,
)


def seq(text: str) -> KeySequence:
    return KeySequence.parse(text)


def browse(state, context, kind: str, id_: str) -> ContextId:
    context_id = ContextId(kind=kind, id=id_)
    with state.data.write() as data:
        data.caches.contexts[context_id.uri] = context
    with state.ui.write() as ui:
        ui.create_new_page(BrowsingPage(context_id=context_id))
    return context_id


def track_names(state, uri: str) -> list[str]:
    with state.data.read() as data:
        return [t.name for t in data.caches.contexts[uri].tracks]


class TestContextWindow:
    """Tests for playlist and album track tables."""

    @pytest.fixture
    def playlist_uri(self, state, playlist_context) -> str:
        return browse(state, playlist_context, "playlist", "p1").uri

    def test_not_loaded(self, state, channel, drain) -> None:
        """Nothing is handled until the context arrives."""
        with state.ui.write() as ui:
            ui.create_new_page(BrowsingPage(context_id=ContextId("album", "missing")))
        assert not handle_key_sequence_for_context_window(seq("enter"), channel, state)
        assert drain(channel) == []

    def test_window_created_lazily(self, state, channel, playlist_uri) -> None:
        with state.ui.read() as ui:
            assert isinstance(ui.window, UnknownWindow)

        assert handle_key_sequence_for_context_window(seq("j"), channel, state)

        with state.ui.read() as ui:
            assert isinstance(ui.window, TrackTableWindow)
            assert ui.window.track_table.selected == 1

    def test_choose_plays_from_context(self, state, channel, drain, playlist_uri, tracks) -> None:
        handle_key_sequence_for_context_window(seq("j"), channel, state)
        assert handle_key_sequence_for_context_window(seq("enter"), channel, state)
        assert drain(channel) == [
            Player(StartPlayback(ContextPlayback(context_uri=playlist_uri, offset_uri=tracks[1].uri)))
        ]

    def test_sort_and_reverse(self, state, channel, playlist_uri) -> None:
        """Sorting reorders the cached tracks in place."""
        handle_key_sequence_for_context_window(seq("s t"), channel, state)
        assert track_names(state, playlist_uri) == ["alpha song", "Bravo", "Charlie"]

        handle_key_sequence_for_context_window(seq("s d"), channel, state)
        assert track_names(state, playlist_uri) == ["alpha song", "Charlie", "Bravo"]

        handle_key_sequence_for_context_window(seq("s r"), channel, state)
        assert track_names(state, playlist_uri) == ["Bravo", "Charlie", "alpha song"]

    def test_sort_by_artists(self, state, channel, playlist_uri) -> None:
        handle_key_sequence_for_context_window(seq("s a"), channel, state)
        assert track_names(state, playlist_uri) == ["Charlie", "Bravo", "alpha song"]

    def test_play_random(self, state, channel, drain, playlist_uri, tracks) -> None:
        with patch("spotterm.event.window.random.choice", side_effect=lambda items: items[-1]):
            assert handle_key_sequence_for_context_window(seq("."), channel, state)
        assert drain(channel) == [
            Player(StartPlayback(ContextPlayback(context_uri=playlist_uri, offset_uri=tracks[2].uri)))
        ]

    def test_context_search_filters_selection(self, state, channel, drain, playlist_uri, tracks) -> None:
        """With a query, the selection indexes the filtered tracks."""
        with state.ui.write() as ui:
            ui.popup = ContextSearchPopup(query="bra")

        handle_key_sequence_for_context_window(seq("enter"), channel, state)

        assert drain(channel) == [
            Player(StartPlayback(ContextPlayback(context_uri=playlist_uri, offset_uri=tracks[2].uri)))
        ]

    def test_show_actions(self, state, channel, playlist_uri, tracks) -> None:
        handle_key_sequence_for_context_window(seq("a"), channel, state)
        with state.ui.read() as ui:
            assert ui.popup == ActionListPopup(item=tracks[0])

    def test_open_context_search(self, state, channel, playlist_uri) -> None:
        handle_key_sequence_for_context_window(seq("/"), channel, state)
        with state.ui.read() as ui:
            assert ui.popup == ContextSearchPopup()

    def test_global_command_not_handled(self, state, channel, playlist_uri) -> None:
        assert not handle_key_sequence_for_context_window(seq("n"), channel, state)

    def test_current_playing_context(self, playing_state, channel, drain, playlist_context, tracks) -> None:
        """The current playing page shows the context of the playback."""
        with playing_state.data.write() as data:
            data.caches.contexts[playlist_context.playlist.uri] = playlist_context

        assert handle_key_sequence_for_context_window(seq("enter"), channel, playing_state)
        assert drain(channel) == [
            Player(
                StartPlayback(
                    ContextPlayback(context_uri=playlist_context.playlist.uri, offset_uri=tracks[0].uri)
                )
            )
        ]

    def test_current_playing_user_playlist_uri(self, playing_state, channel, playback, playlist_context) -> None:
        """Legacy user playlist uris resolve to the canonical cache key."""
        with playing_state.player.write() as player:
            player.playback = playback._replace(context_uri="spotify:user:me:playlist:p1")
        with playing_state.data.write() as data:
            data.caches.contexts["spotify:playlist:p1"] = playlist_context

        assert handle_key_sequence_for_context_window(seq("j"), channel, playing_state)


class TestArtistWindow:
    """Tests for the artist page and its three lists."""

    @pytest.fixture
    def artist_state(self, state, artist_context):
        browse(state, artist_context, "artist", "a1")
        return state

    def test_focus_cycles(self, artist_state, channel) -> None:
        handle_key_sequence_for_context_window(seq("tab"), channel, artist_state)
        with artist_state.ui.read() as ui:
            assert isinstance(ui.window, ArtistWindow)
            assert ui.window.focus == "albums"

        handle_key_sequence_for_context_window(seq("backtab"), channel, artist_state)
        handle_key_sequence_for_context_window(seq("backtab"), channel, artist_state)
        with artist_state.ui.read() as ui:
            assert ui.window.focus == "related_artists"

    def test_top_tracks_play_as_uris(self, artist_state, channel, drain, tracks) -> None:
        handle_key_sequence_for_context_window(seq("enter"), channel, artist_state)
        uris = tuple(t.uri for t in tracks)
        assert drain(channel) == [
            Player(StartPlayback(URIsPlayback(uris=uris, offset_uri=tracks[0].uri)))
        ]

    def test_choose_album_browses(self, artist_state, channel, drain) -> None:
        handle_key_sequence_for_context_window(seq("tab"), channel, artist_state)
        handle_key_sequence_for_context_window(seq("G"), channel, artist_state)
        handle_key_sequence_for_context_window(seq("enter"), channel, artist_state)

        album_id = ContextId(kind="album", id="al2")
        with artist_state.ui.read() as ui:
            assert ui.current_page() == BrowsingPage(context_id=album_id)
            assert isinstance(ui.window, UnknownWindow)
        assert drain(channel) == [GetContext(album_id)]

    def test_related_artist_actions(self, artist_state, channel, artists) -> None:
        handle_key_sequence_for_context_window(seq("backtab"), channel, artist_state)
        handle_key_sequence_for_context_window(seq("a"), channel, artist_state)
        with artist_state.ui.read() as ui:
            assert ui.popup == ActionListPopup(item=artists[1])


class TestSearchWindow:
    """Tests for the search page."""

    @pytest.fixture
    def search_state(self, state):
        with state.ui.write() as ui:
            ui.create_new_page(SearchingPage())
        return state

    def type_text(self, text: str, channel, state) -> None:
        for char in text:
            key = "space" if char == " " else char
            assert handle_key_sequence_for_search_window(seq(key), channel, state)

    def test_typing_and_submit(self, search_state, channel, drain) -> None:
        self.type_text("abba x", channel, search_state)
        handle_key_sequence_for_search_window(seq("backspace"), channel, search_state)
        handle_key_sequence_for_search_window(seq("backspace"), channel, search_state)
        assert handle_key_sequence_for_search_window(seq("enter"), channel, search_state)

        with search_state.ui.read() as ui:
            page = ui.current_page()
            assert page.input == "abba"
            assert page.current_query == "abba"
        assert drain(channel) == [Search("abba")]

    def test_blank_query_not_submitted(self, search_state, channel, drain) -> None:
        self.type_text("  ", channel, search_state)
        assert handle_key_sequence_for_search_window(seq("enter"), channel, search_state)
        assert drain(channel) == []

    def test_input_swallows_bound_keys(self, search_state, channel) -> None:
        """'q' is text while the input box has focus."""
        self.type_text("q", channel, search_state)
        with search_state.ui.read() as ui:
            assert ui.current_page().input == "q"
            assert ui.is_running

    def test_results(self, search_state, channel, drain, tracks, album) -> None:
        with search_state.ui.write() as ui:
            ui.current_page().current_query = "abba"
        with search_state.data.write() as data:
            data.caches.search["abba"] = SearchResults(tracks=list(tracks), albums=[album])

        handle_key_sequence_for_search_window(seq("tab"), channel, search_state)
        handle_key_sequence_for_search_window(seq("j"), channel, search_state)
        handle_key_sequence_for_search_window(seq("enter"), channel, search_state)
        assert drain(channel) == [Player(StartPlayback(URIsPlayback(uris=(tracks[1].uri,))))]

    def test_choose_album_result(self, search_state, channel, drain, album) -> None:
        with search_state.ui.write() as ui:
            ui.current_page().current_query = "abba"
            ui.window = SearchWindow(focus="albums")
        with search_state.data.write() as data:
            data.caches.search["abba"] = SearchResults(albums=[album])

        handle_key_sequence_for_search_window(seq("enter"), channel, search_state)
        assert drain(channel) == [GetContext(ContextId(kind="album", id=album.id))]

    def test_no_results_yet(self, search_state, channel) -> None:
        with search_state.ui.write() as ui:
            ui.window = SearchWindow(focus="tracks")
        assert not handle_key_sequence_for_search_window(seq("j"), channel, search_state)


class TestRecommendationWindow:
    """Tests for the recommendations page."""

    def test_choose(self, state, channel, drain, tracks, artists) -> None:
        with state.ui.write() as ui:
            ui.create_new_page(RecommendationsPage(seed=artists[0]))
        with state.data.write() as data:
            data.caches.recommendations[artists[0].uri] = list(tracks)

        handle_key_sequence_for_recommendation_window(seq("G"), channel, state)
        handle_key_sequence_for_recommendation_window(seq("enter"), channel, state)

        uris = tuple(t.uri for t in tracks)
        assert drain(channel) == [
            Player(StartPlayback(URIsPlayback(uris=uris, offset_uri=tracks[2].uri)))
        ]

    def test_not_loaded(self, state, channel, artists) -> None:
        with state.ui.write() as ui:
            ui.create_new_page(RecommendationsPage(seed=artists[0]))
        assert not handle_key_sequence_for_recommendation_window(seq("enter"), channel, state)
