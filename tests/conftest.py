"""Shared fixtures: sample Spotify data and a fresh application state."""

import time

import pytest

from spotterm.core.config import AppConfig, ThemeConfig
from spotterm.event.channel import RequestChannel
from spotterm.keymap import KeymapConfig
from spotterm.models import (
    Album,
    AlbumContext,
    Artist,
    ArtistContext,
    Device,
    Playback,
    Playlist,
    PlaylistContext,
    Track,
)
from spotterm.state import SharedState


@pytest.fixture
def artists() -> list[Artist]:
    return [Artist(id="a1", name="Alpha"), Artist(id="b1", name="Beta")]


@pytest.fixture
def album(artists: list[Artist]) -> Album:
    return Album(id="al1", name="First Album", artists=(artists[0],), release_date="2020-01-01")


@pytest.fixture
def tracks(artists: list[Artist], album: Album) -> list[Track]:
    """Three tracks whose title, artist and duration orders all differ."""
    return [
        Track(id="t1", name="Charlie", artists=(artists[0],), album=album, duration_ms=200_000),
        Track(id="t2", name="alpha song", artists=(artists[1],), album=album, duration_ms=100_000),
        Track(id="t3", name="Bravo", artists=tuple(artists), album=album, duration_ms=300_000),
    ]


@pytest.fixture
def playlist() -> Playlist:
    return Playlist(id="p1", name="Mix", owner="me")


@pytest.fixture
def playlist_context(playlist: Playlist, tracks: list[Track]) -> PlaylistContext:
    return PlaylistContext(playlist=playlist, tracks=list(tracks))


@pytest.fixture
def album_context(album: Album, tracks: list[Track]) -> AlbumContext:
    return AlbumContext(album=album, tracks=list(tracks))


@pytest.fixture
def artist_context(artists: list[Artist], album: Album, tracks: list[Track]) -> ArtistContext:
    return ArtistContext(
        artist=artists[0],
        tracks=list(tracks),
        albums=[album, Album(id="al2", name="Second Album")],
        related_artists=[artists[1]],
    )


@pytest.fixture
def device() -> Device:
    return Device(id="d1", name="Laptop", is_active=True, volume_percent=50)


@pytest.fixture
def playback(device: Device, tracks: list[Track], playlist: Playlist) -> Playback:
    return Playback(
        device=device,
        track=tracks[0],
        progress_ms=1_000,
        is_playing=True,
        context_uri=playlist.uri,
    )


@pytest.fixture
def state() -> SharedState:
    """Application state with the default keymap and themes."""
    return SharedState(
        app_config=AppConfig(player_event_delay_in_ms=0),
        keymap_config=KeymapConfig.default(),
        theme_config=ThemeConfig(),
    )


@pytest.fixture
def playing_state(state: SharedState, playback: Playback) -> SharedState:
    """State with a playback fetched just now."""
    with state.player.write() as player:
        player.playback = playback
        player.playback_last_updated = time.monotonic()
    return state


@pytest.fixture
def channel() -> RequestChannel:
    return RequestChannel()


@pytest.fixture
def drain():
    """Close a channel and return everything submitted to it, in order."""

    def _drain(channel: RequestChannel) -> list:
        channel.close()
        return list(channel)

    return _drain
