"""Requests sent to the remote-service client.

Plain value objects: a request has no identity beyond its content and is
handed from a producer to the request channel, then to one execution unit.
"""

from dataclasses import dataclass
from typing import Union

from spotterm.models import ContextId, Item, SeedItem, StartPlaybackTarget

# ============================================================================
# PLAYER REQUESTS - modify the playback
# ============================================================================


@dataclass(frozen=True)
class NextTrack:
    pass


@dataclass(frozen=True)
class PreviousTrack:
    pass


@dataclass(frozen=True)
class ResumePause:
    pass


@dataclass(frozen=True)
class SeekTrack:
    position_ms: int


@dataclass(frozen=True)
class Repeat:
    pass


@dataclass(frozen=True)
class Shuffle:
    pass


@dataclass(frozen=True)
class Volume:
    percent: int


@dataclass(frozen=True)
class TransferPlayback:
    device_id: str
    # False only connects the device without starting playback
    force_play: bool


@dataclass(frozen=True)
class StartPlayback:
    target: StartPlaybackTarget


PlayerRequest = Union[
    NextTrack,
    PreviousTrack,
    ResumePause,
    SeekTrack,
    Repeat,
    Shuffle,
    Volume,
    TransferPlayback,
    StartPlayback,
]


# ============================================================================
# CLIENT REQUESTS
# ============================================================================


@dataclass(frozen=True)
class GetCurrentUser:
    pass


@dataclass(frozen=True)
class GetDevices:
    pass


@dataclass(frozen=True)
class GetUserPlaylists:
    pass


@dataclass(frozen=True)
class GetUserSavedAlbums:
    pass


@dataclass(frozen=True)
class GetUserFollowedArtists:
    pass


@dataclass(frozen=True)
class GetContext:
    context_id: ContextId


@dataclass(frozen=True)
class GetCurrentPlayback:
    pass


@dataclass(frozen=True)
class GetRecommendations:
    seed: SeedItem


@dataclass(frozen=True)
class Search:
    query: str


@dataclass(frozen=True)
class AddTrackToPlaylist:
    playlist_id: str
    track_id: str


@dataclass(frozen=True)
class SaveToLibrary:
    item: Item


@dataclass(frozen=True)
class Player:
    request: PlayerRequest


ClientRequest = Union[
    GetCurrentUser,
    GetDevices,
    GetUserPlaylists,
    GetUserSavedAlbums,
    GetUserFollowedArtists,
    GetContext,
    GetCurrentPlayback,
    GetRecommendations,
    Search,
    AddTrackToPlaylist,
    SaveToLibrary,
    Player,
]
