"""Player sub-state: last-known playback snapshot and devices."""

import time
from dataclasses import dataclass, field
from typing import Optional

from spotterm.models import Device, Playback, Track


@dataclass
class PlayerState:
    """Written only by request results; read by the watchers and UI handlers."""

    playback: Optional[Playback] = None
    # time.monotonic() when playback was fetched
    playback_last_updated: Optional[float] = None
    devices: list[Device] = field(default_factory=list)

    def current_playing_track(self) -> Optional[Track]:
        if self.playback is None:
            return None
        return self.playback.track

    def playback_progress(self, now: Optional[float] = None) -> Optional[int]:
        """Progress in ms, extrapolated from the last fetch while playing."""
        if self.playback is None or self.playback.progress_ms is None:
            return None

        progress_ms = self.playback.progress_ms
        if self.playback.is_playing and self.playback_last_updated is not None:
            now = time.monotonic() if now is None else now
            elapsed_ms = int((now - self.playback_last_updated) * 1000)
            progress_ms += max(0, elapsed_ms)
        return progress_ms

    def update_playback(self, playback: Optional[Playback]) -> None:
        self.playback = playback
        self.playback_last_updated = time.monotonic()
