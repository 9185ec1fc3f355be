"""Shared application state: player, UI and data sub-states."""

from .data import Caches, DataState, UserData
from .lock import Locked, ReadWriteLock
from .player import PlayerState
from .shared import SharedState
from .ui import UIState

__all__ = [
    "Caches",
    "DataState",
    "Locked",
    "PlayerState",
    "ReadWriteLock",
    "SharedState",
    "UIState",
    "UserData",
]
