"""
Spotify Web API operations.

Thin wrapper over ``requests.Session`` that returns the application's value
objects. Every call refreshes the access token first when it has expired.
"""

import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from spotterm.core.config import AppConfig
from spotterm.models import (
    ALBUM,
    ARTIST,
    PLAYLIST,
    TRACK,
    Album,
    AlbumContext,
    Artist,
    ArtistContext,
    Context,
    ContextId,
    ContextPlayback,
    Device,
    Item,
    Playback,
    Playlist,
    PlaylistContext,
    SearchResults,
    SeedItem,
    StartPlaybackTarget,
    Track,
    User,
)

from . import auth

API_BASE = "https://api.spotify.com/v1"
PAGE_LIMIT = 50
SEARCH_LIMIT = 20
RECOMMENDATIONS_LIMIT = 50


class ClientError(Exception):
    """A remote call failed or the client is not authenticated."""


# ============================================================================
# RESPONSE NORMALIZATION
# ============================================================================


def _normalize_artist(data: Dict[str, Any]) -> Artist:
    return Artist(id=data.get("id") or "", name=data.get("name", ""))


def _normalize_album(data: Dict[str, Any]) -> Album:
    return Album(
        id=data.get("id") or "",
        name=data.get("name", ""),
        artists=tuple(_normalize_artist(a) for a in data.get("artists", [])),
        release_date=data.get("release_date", ""),
    )


def _normalize_track(data: Dict[str, Any], album: Optional[Album] = None) -> Track:
    """Convert a track object; simplified tracks take the album they belong to."""
    if album is None and data.get("album"):
        album = _normalize_album(data["album"])
    return Track(
        id=data.get("id") or "",
        name=data.get("name", ""),
        artists=tuple(_normalize_artist(a) for a in data.get("artists", [])),
        album=album,
        duration_ms=data.get("duration_ms", 0),
    )


def _normalize_playlist(data: Dict[str, Any]) -> Playlist:
    owner = data.get("owner") or {}
    return Playlist(
        id=data.get("id") or "",
        name=data.get("name", ""),
        owner=owner.get("display_name") or owner.get("id", ""),
    )


def _normalize_device(data: Dict[str, Any]) -> Device:
    return Device(
        id=data.get("id") or "",
        name=data.get("name", ""),
        is_active=data.get("is_active", False),
        volume_percent=data.get("volume_percent"),
    )


def _is_playable_track(data: Optional[Dict[str, Any]]) -> bool:
    # skips episodes, local files and removed tracks
    return bool(data) and data.get("type", TRACK) == TRACK and bool(data.get("id"))


def _normalize_playback(data: Dict[str, Any]) -> Optional[Playback]:
    if not data.get("device"):
        return None

    item = data.get("item")
    context = data.get("context") or {}
    return Playback(
        device=_normalize_device(data["device"]),
        track=_normalize_track(item) if _is_playable_track(item) else None,
        progress_ms=data.get("progress_ms"),
        is_playing=data.get("is_playing", False),
        shuffle_state=data.get("shuffle_state", False),
        repeat_state=data.get("repeat_state", "off"),
        context_uri=context.get("uri"),
    )


# ============================================================================
# API
# ============================================================================


class SpotifyAPI:
    """Authenticated Spotify Web API calls.

    Safe to share between threads; token refresh is serialized.
    """

    def __init__(
        self,
        app_config: AppConfig,
        data_dir: Path,
        session: Optional[requests.Session] = None,
    ):
        self.app_config = app_config
        self.data_dir = data_dir
        self.session = session or requests.Session()
        self._token_lock = threading.Lock()
        self._token_data: Optional[Dict[str, Any]] = None

    def _access_token(self) -> str:
        with self._token_lock:
            if self._token_data is None:
                self._token_data = auth.load_user_tokens(self.data_dir)
            if self._token_data is None:
                raise ClientError(
                    f"Not authenticated: no Spotify tokens in {self.data_dir / auth.TOKENS_FILE}"
                )

            # tokens without a refresh token (e.g. from the environment) are used as is
            if self._token_data.get("refresh_token") and auth.is_token_expired(self._token_data):
                logger.info("Spotify token expired, attempting refresh")
                self._token_data = self._refresh_tokens(self._token_data["refresh_token"])

            return self._token_data["access_token"]

    def _refresh_tokens(self, refresh_token: str) -> Dict[str, Any]:
        """Exchange the refresh token for a new access token and save it.

        Raises:
            ClientError: If the client credentials are missing or the grant is rejected
        """
        client_id = self.app_config.client_id
        client_secret = self.app_config.client_secret
        if not client_id or not client_secret:
            raise ClientError(
                "Spotify token refresh failed: SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET are required"
            )

        try:
            response = self.session.post(
                auth.TOKEN_URL,
                data={"grant_type": "refresh_token", "refresh_token": refresh_token},
                auth=(client_id, client_secret),
                timeout=30,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise ClientError(f"Spotify token refresh failed: {e}") from e

        token_data = auth.with_expiry(response.json(), refresh_token)
        auth.save_user_tokens(self.data_dir, token_data)
        logger.info(f"Spotify token refreshed, expires at {token_data['expires_at']}")
        return token_data

    def _request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Send one request; returns the JSON body, or None when there is none.

        Raises:
            ClientError: On network failure or a non-2xx response
        """
        if not url.startswith("http"):
            url = f"{API_BASE}{url}"
        headers = {"Authorization": f"Bearer {self._access_token()}"}

        try:
            response = self.session.request(
                method, url, params=params, json=json, headers=headers, timeout=30
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise ClientError(f"{method} {url} failed with HTTP {status}") from e
        except requests.RequestException as e:
            raise ClientError(f"{method} {url} failed: {e}") from e

        # No content = nothing to parse (e.g. nothing playing)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._request("GET", url, params=params) or {}

    def _get_all(
        self, url: str, params: Optional[Dict[str, Any]] = None, key: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Collect every item of a paginated endpoint by following ``next``.

        Args:
            url: First page URL or path
            params: Query parameters of the first page
            key: Name of the paging object inside the response, if nested
        """
        items: List[Dict[str, Any]] = []
        next_url: Optional[str] = url
        while next_url:
            data = self._get(next_url, params)
            page = data.get(key, {}) if key else data
            items.extend(page.get("items", []))
            next_url = page.get("next")
            # the next URL already carries the query
            params = None
        return items

    # --- user data ---

    def current_user(self) -> User:
        data = self._get("/me")
        return User(id=data.get("id", ""), display_name=data.get("display_name") or "")

    def devices(self) -> List[Device]:
        data = self._get("/me/player/devices")
        return [_normalize_device(d) for d in data.get("devices", []) if d.get("id")]

    def current_playback(self) -> Optional[Playback]:
        data = self._request("GET", "/me/player")
        if data is None:
            return None
        return _normalize_playback(data)

    def user_playlists(self) -> List[Playlist]:
        items = self._get_all("/me/playlists", {"limit": PAGE_LIMIT})
        return [_normalize_playlist(p) for p in items if p]

    def user_saved_albums(self) -> List[Album]:
        items = self._get_all("/me/albums", {"limit": PAGE_LIMIT})
        return [_normalize_album(i["album"]) for i in items if i.get("album")]

    def user_followed_artists(self) -> List[Artist]:
        items = self._get_all("/me/following", {"type": ARTIST, "limit": PAGE_LIMIT}, key="artists")
        return [_normalize_artist(a) for a in items]

    # --- contexts ---

    def context(self, context_id: ContextId) -> Context:
        if context_id.kind == PLAYLIST:
            return self.playlist_context(context_id.id)
        if context_id.kind == ALBUM:
            return self.album_context(context_id.id)
        if context_id.kind == ARTIST:
            return self.artist_context(context_id.id)
        raise ClientError(f"Unknown context kind: {context_id.kind}")

    def playlist_context(self, playlist_id: str) -> PlaylistContext:
        playlist = _normalize_playlist(self._get(f"/playlists/{playlist_id}", {"fields": "id,name,owner"}))
        items = self._get_all(f"/playlists/{playlist_id}/tracks", {"limit": 100})
        tracks = [_normalize_track(i["track"]) for i in items if _is_playable_track(i.get("track"))]
        return PlaylistContext(playlist=playlist, tracks=tracks)

    def album_context(self, album_id: str) -> AlbumContext:
        album = _normalize_album(self._get(f"/albums/{album_id}"))
        items = self._get_all(f"/albums/{album_id}/tracks", {"limit": PAGE_LIMIT})
        tracks = [_normalize_track(t, album=album) for t in items if _is_playable_track(t)]
        return AlbumContext(album=album, tracks=tracks)

    def artist_context(self, artist_id: str) -> ArtistContext:
        artist = _normalize_artist(self._get(f"/artists/{artist_id}"))
        top_tracks = self._get(f"/artists/{artist_id}/top-tracks", {"market": "from_token"})
        albums = self._get_all(
            f"/artists/{artist_id}/albums", {"include_groups": "album,single", "limit": PAGE_LIMIT}
        )
        related = self._get(f"/artists/{artist_id}/related-artists")
        return ArtistContext(
            artist=artist,
            tracks=[_normalize_track(t) for t in top_tracks.get("tracks", []) if _is_playable_track(t)],
            albums=[_normalize_album(a) for a in albums],
            related_artists=[_normalize_artist(a) for a in related.get("artists", [])],
        )

    def recommendations(self, seed: SeedItem) -> List[Track]:
        if isinstance(seed, Track):
            params = {"seed_tracks": seed.id}
            if seed.artists:
                params["seed_artists"] = seed.artists[0].id
        else:
            params = {"seed_artists": seed.id}
        params["limit"] = RECOMMENDATIONS_LIMIT

        data = self._get("/recommendations", params)
        return [_normalize_track(t) for t in data.get("tracks", []) if _is_playable_track(t)]

    def search(self, query: str) -> SearchResults:
        data = self._get(
            "/search",
            {"q": query, "type": "track,album,artist,playlist", "limit": SEARCH_LIMIT},
        )

        def items(kind: str) -> List[Dict[str, Any]]:
            # playlists may contain null entries
            return [i for i in data.get(kind, {}).get("items", []) if i]

        return SearchResults(
            tracks=[_normalize_track(t) for t in items("tracks") if _is_playable_track(t)],
            albums=[_normalize_album(a) for a in items("albums")],
            artists=[_normalize_artist(a) for a in items("artists")],
            playlists=[_normalize_playlist(p) for p in items("playlists")],
        )

    # --- library ---

    def add_track_to_playlist(self, playlist_id: str, track_id: str) -> None:
        self._request(
            "POST", f"/playlists/{playlist_id}/tracks", json={"uris": [f"spotify:{TRACK}:{track_id}"]}
        )
        logger.info(f"Added track {track_id} to playlist {playlist_id}")

    def save_to_library(self, item: Item) -> None:
        """Save a track or album, follow an artist or a playlist."""
        if isinstance(item, Track):
            self._request("PUT", "/me/tracks", params={"ids": item.id})
        elif isinstance(item, Album):
            self._request("PUT", "/me/albums", params={"ids": item.id})
        elif isinstance(item, Artist):
            self._request("PUT", "/me/following", params={"type": ARTIST, "ids": item.id})
        else:
            self._request("PUT", f"/playlists/{item.id}/followers")
        logger.info(f"Saved {item.uri} to library")

    # --- player ---

    def _player(self, method: str, action: str, device_id: Optional[str], **params: Any) -> None:
        if device_id:
            params["device_id"] = device_id
        self._request(method, f"/me/player/{action}", params=params or None)

    def next_track(self, device_id: Optional[str] = None) -> None:
        self._player("POST", "next", device_id)

    def previous_track(self, device_id: Optional[str] = None) -> None:
        self._player("POST", "previous", device_id)

    def pause(self, device_id: Optional[str] = None) -> None:
        self._player("PUT", "pause", device_id)

    def resume(self, device_id: Optional[str] = None) -> None:
        self._player("PUT", "play", device_id)

    def seek(self, position_ms: int, device_id: Optional[str] = None) -> None:
        self._player("PUT", "seek", device_id, position_ms=position_ms)

    def repeat(self, repeat_state: str, device_id: Optional[str] = None) -> None:
        self._player("PUT", "repeat", device_id, state=repeat_state)

    def shuffle(self, shuffle_state: bool, device_id: Optional[str] = None) -> None:
        self._player("PUT", "shuffle", device_id, state=str(shuffle_state).lower())

    def volume(self, percent: int, device_id: Optional[str] = None) -> None:
        self._player("PUT", "volume", device_id, volume_percent=percent)

    def transfer_playback(self, device_id: str, force_play: bool) -> None:
        self._request("PUT", "/me/player", json={"device_ids": [device_id], "play": force_play})

    def start_playback(self, target: StartPlaybackTarget, device_id: Optional[str] = None) -> None:
        if isinstance(target, ContextPlayback):
            body: Dict[str, Any] = {"context_uri": target.context_uri}
        else:
            body = {"uris": list(target.uris)}
        if target.offset_uri:
            body["offset"] = {"uri": target.offset_uri}

        params = {"device_id": device_id} if device_id else None
        self._request("PUT", "/me/player/play", params=params, json=body)
