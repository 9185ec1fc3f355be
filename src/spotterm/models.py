"""Immutable value objects describing remote-service data."""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Union

PLAYLIST = "playlist"
ALBUM = "album"
ARTIST = "artist"
TRACK = "track"


class User(NamedTuple):
    id: str
    display_name: str = ""


class Device(NamedTuple):
    id: str
    name: str
    is_active: bool = False
    volume_percent: Optional[int] = None


class Artist(NamedTuple):
    id: str
    name: str

    @property
    def uri(self) -> str:
        return f"spotify:{ARTIST}:{self.id}"


class Album(NamedTuple):
    id: str
    name: str
    artists: tuple[Artist, ...] = ()
    release_date: str = ""

    @property
    def uri(self) -> str:
        return f"spotify:{ALBUM}:{self.id}"


class Track(NamedTuple):
    id: str
    name: str
    artists: tuple[Artist, ...] = ()
    album: Optional[Album] = None
    duration_ms: int = 0

    @property
    def uri(self) -> str:
        return f"spotify:{TRACK}:{self.id}"

    @property
    def artists_info(self) -> str:
        return ", ".join(a.name for a in self.artists)

    @property
    def album_info(self) -> str:
        return self.album.name if self.album else ""


class Playlist(NamedTuple):
    id: str
    name: str
    owner: str = ""

    @property
    def uri(self) -> str:
        return f"spotify:{PLAYLIST}:{self.id}"


# Anything an action popup can act on
Item = Union[Track, Album, Artist, Playlist]

# Anything recommendations can be seeded from
SeedItem = Union[Track, Artist]


class ContextId(NamedTuple):
    """Identifies a browsable context: a playlist, an album or an artist."""

    kind: str  # playlist, album or artist
    id: str

    @property
    def uri(self) -> str:
        return f"spotify:{self.kind}:{self.id}"

    @classmethod
    def from_uri(cls, uri: str) -> Optional["ContextId"]:
        """Parse ``spotify:<kind>:<id>``; user playlists use the last two parts."""
        parts = uri.split(":")
        if len(parts) < 3:
            return None
        kind, id_ = parts[-2], parts[-1]
        if kind not in (PLAYLIST, ALBUM, ARTIST):
            return None
        return cls(kind=kind, id=id_)


def context_id_of(item: Union[Playlist, Album, Artist]) -> ContextId:
    if isinstance(item, Playlist):
        return ContextId(kind=PLAYLIST, id=item.id)
    if isinstance(item, Album):
        return ContextId(kind=ALBUM, id=item.id)
    return ContextId(kind=ARTIST, id=item.id)


@dataclass
class PlaylistContext:
    playlist: Playlist
    tracks: list[Track] = field(default_factory=list)


@dataclass
class AlbumContext:
    album: Album
    tracks: list[Track] = field(default_factory=list)


@dataclass
class ArtistContext:
    artist: Artist
    tracks: list[Track] = field(default_factory=list)  # top tracks
    albums: list[Album] = field(default_factory=list)
    related_artists: list[Artist] = field(default_factory=list)


Context = Union[PlaylistContext, AlbumContext, ArtistContext]


def context_title(context: Context) -> str:
    if isinstance(context, PlaylistContext):
        return f"Playlist: {context.playlist.name}"
    if isinstance(context, AlbumContext):
        return f"Album: {context.album.name}"
    return f"Artist: {context.artist.name}"


def context_uri(context: Context) -> str:
    if isinstance(context, PlaylistContext):
        return context.playlist.uri
    if isinstance(context, AlbumContext):
        return context.album.uri
    return context.artist.uri


class Playback(NamedTuple):
    """Last-known playback snapshot from the remote service."""

    device: Device
    track: Optional[Track] = None
    progress_ms: Optional[int] = None
    is_playing: bool = False
    shuffle_state: bool = False
    repeat_state: str = "off"  # off, track or context
    context_uri: Optional[str] = None


class ContextPlayback(NamedTuple):
    """Start playing a context, optionally at a given track."""

    context_uri: str
    offset_uri: Optional[str] = None


class URIsPlayback(NamedTuple):
    """Start playing an explicit list of tracks."""

    uris: tuple[str, ...]
    offset_uri: Optional[str] = None


StartPlaybackTarget = Union[ContextPlayback, URIsPlayback]


@dataclass
class SearchResults:
    tracks: list[Track] = field(default_factory=list)
    albums: list[Album] = field(default_factory=list)
    artists: list[Artist] = field(default_factory=list)
    playlists: list[Playlist] = field(default_factory=list)
