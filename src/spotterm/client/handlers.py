"""Request dispatcher and player event watchers."""

import threading
import time

from loguru import logger

from spotterm.event.channel import ChannelClosedError, RequestChannel
from spotterm.event.requests import ClientRequest, GetCurrentPlayback, Player, TransferPlayback
from spotterm.state import SharedState

from .client import Client

# Main watcher tick
WATCH_INTERVAL_MS = 1000


def _execute_request(client: Client, state: SharedState, request: ClientRequest) -> None:
    try:
        client.handle_request(state, request)
    except Exception as e:
        logger.warning(f"Failed to handle client request {request}: {e}")


def start_client_handler(state: SharedState, client: Client, channel: RequestChannel) -> None:
    """Consume requests in submission order, one thread per request.

    Never waits for a request to finish; failures are logged and dropped.
    Returns once the channel is closed and drained.
    """
    for request in channel:
        thread = threading.Thread(
            target=_execute_request,
            args=(client, state, request),
            daemon=True,
            name=f"Request-{type(request).__name__}",
        )
        thread.start()
    logger.info("Request channel closed, client handler stopped")


def _refresh_playback_periodically(channel: RequestChannel, interval_ms: int) -> None:
    try:
        while True:
            channel.submit(GetCurrentPlayback())
            time.sleep(interval_ms / 1000)
    except ChannelClosedError:
        logger.info("Request channel closed, playback refresh timer stopped")


def start_player_event_watchers(
    state: SharedState, channel: RequestChannel, interval_ms: int = WATCH_INTERVAL_MS
) -> None:
    """Watch the player state and request updates when needed.

    Starts the periodic playback refresh (when configured) on its own thread,
    then runs the main watcher loop on the calling thread until the channel
    is closed.
    """
    refresh_ms = state.app_config.playback_refresh_duration_in_ms
    if refresh_ms > 0:
        threading.Thread(
            target=_refresh_playback_periodically,
            args=(channel, refresh_ms),
            daemon=True,
            name="PlaybackRefreshThread",
        ).start()

    while True:
        try:
            watch_player_events(state, channel)
        except ChannelClosedError:
            logger.info("Request channel closed, player event watcher stopped")
            return
        except Exception as e:
            logger.warning(f"Encountered an error when watching for player events: {e}")

        time.sleep(interval_ms / 1000)


def watch_player_events(state: SharedState, channel: RequestChannel) -> None:
    """One watcher tick: submits at most one request per rule."""
    with state.player.read() as player:
        # no playback: connect the first available device without starting playback
        if player.playback is None and player.devices:
            device = player.devices[0]
            logger.info(f"No playback found, try to connect the first available device {device.name}")
            channel.submit(Player(TransferPlayback(device.id, force_play=False)))

        # update the playback when the current track ends
        progress_ms = player.playback_progress()
        track = player.current_playing_track()
        is_playing = player.playback is not None and player.playback.is_playing
        if progress_ms is not None and track is not None and is_playing:
            if progress_ms >= track.duration_ms:
                channel.submit(GetCurrentPlayback())
