"""Spotify client: remote calls, request execution and background loops."""

from .api import ClientError, SpotifyAPI
from .client import Client
from .handlers import start_client_handler, start_player_event_watchers, watch_player_events

__all__ = [
    "Client",
    "ClientError",
    "SpotifyAPI",
    "start_client_handler",
    "start_player_event_watchers",
    "watch_player_events",
]
