"""Executes client requests and writes their results into the shared state."""

import time
from typing import Optional

from loguru import logger

from spotterm.event.requests import (
    AddTrackToPlaylist,
    ClientRequest,
    GetContext,
    GetCurrentPlayback,
    GetCurrentUser,
    GetDevices,
    GetRecommendations,
    GetUserFollowedArtists,
    GetUserPlaylists,
    GetUserSavedAlbums,
    NextTrack,
    Player,
    PlayerRequest,
    PreviousTrack,
    Repeat,
    ResumePause,
    SaveToLibrary,
    Search,
    SeekTrack,
    Shuffle,
    StartPlayback,
    TransferPlayback,
    Volume,
)
from spotterm.models import ContextId
from spotterm.state import SharedState

from .api import ClientError, SpotifyAPI

# repeat mode -> next repeat mode
NEXT_REPEAT_STATE = {"off": "track", "track": "context", "context": "off"}


class Client:
    """Handles one request at a time; many may run concurrently.

    No lock is held across a remote call: state is read into locals, the call
    is made, then results are written under the relevant write lock.
    """

    def __init__(self, api: SpotifyAPI):
        self.api = api

    def handle_request(self, state: SharedState, request: ClientRequest) -> None:
        """Execute a request.

        Raises:
            ClientError: If a remote call fails
        """
        logger.debug(f"Handling client request: {request}")

        match request:
            case Player(player_request):
                self.handle_player_request(state, player_request)
                # give the service time to apply the change before reading it back
                time.sleep(state.app_config.player_event_delay_in_ms / 1000)
                self.update_current_playback(state)
            case GetCurrentPlayback():
                self.update_current_playback(state)
            case GetCurrentUser():
                user = self.api.current_user()
                with state.data.write() as data:
                    data.user_data.user = user
            case GetDevices():
                devices = self.api.devices()
                with state.player.write() as player:
                    player.devices = devices
            case GetUserPlaylists():
                playlists = self.api.user_playlists()
                with state.data.write() as data:
                    data.user_data.playlists = playlists
            case GetUserSavedAlbums():
                albums = self.api.user_saved_albums()
                with state.data.write() as data:
                    data.user_data.saved_albums = albums
            case GetUserFollowedArtists():
                artists = self.api.user_followed_artists()
                with state.data.write() as data:
                    data.user_data.followed_artists = artists
            case GetContext(context_id):
                self.update_context(state, context_id)
            case GetRecommendations(seed):
                tracks = self.api.recommendations(seed)
                with state.data.write() as data:
                    data.caches.recommendations[seed.uri] = tracks
            case Search(query):
                results = self.api.search(query)
                with state.data.write() as data:
                    data.caches.search[query] = results
            case AddTrackToPlaylist(playlist_id, track_id):
                self.api.add_track_to_playlist(playlist_id, track_id)
                # the cached copy of the playlist is now stale
                with state.data.write() as data:
                    data.caches.contexts.pop(ContextId(kind="playlist", id=playlist_id).uri, None)
            case SaveToLibrary(item):
                self.api.save_to_library(item)
            case _:
                raise ClientError(f"Unsupported request: {request}")

    def handle_player_request(self, state: SharedState, request: PlayerRequest) -> None:
        with state.player.read() as player:
            playback = player.playback
        device_id: Optional[str] = playback.device.id if playback else None

        match request:
            case NextTrack():
                self.api.next_track(device_id)
            case PreviousTrack():
                self.api.previous_track(device_id)
            case ResumePause():
                if playback is not None and playback.is_playing:
                    self.api.pause(device_id)
                else:
                    self.api.resume(device_id)
            case SeekTrack(position_ms):
                self.api.seek(position_ms, device_id)
            case Repeat():
                current = playback.repeat_state if playback else "off"
                self.api.repeat(NEXT_REPEAT_STATE.get(current, "off"), device_id)
            case Shuffle():
                current = playback.shuffle_state if playback else False
                self.api.shuffle(not current, device_id)
            case Volume(percent):
                self.api.volume(percent, device_id)
            case TransferPlayback(target_device_id, force_play):
                self.api.transfer_playback(target_device_id, force_play)
            case StartPlayback(target):
                self.api.start_playback(target, device_id)
            case _:
                raise ClientError(f"Unsupported player request: {request}")

    def update_current_playback(self, state: SharedState) -> None:
        """Fetch the playback, then its context when not cached yet."""
        playback = self.api.current_playback()
        with state.player.write() as player:
            player.update_playback(playback)

        if playback is None or playback.context_uri is None:
            return

        context_id = ContextId.from_uri(playback.context_uri)
        if context_id is None:
            logger.debug(f"Playback context {playback.context_uri} is not browsable")
            return

        with state.data.read() as data:
            cached = context_id.uri in data.caches.contexts
        if not cached:
            self.update_context(state, context_id)

    def update_context(self, state: SharedState, context_id: ContextId) -> None:
        context = self.api.context(context_id)
        with state.data.write() as data:
            data.caches.contexts[context_id.uri] = context
        logger.debug(f"Cached context {context_id.uri}")
