"""Data sub-state: user collections and response caches."""

from dataclasses import dataclass, field
from typing import Optional

from spotterm.models import (
    Album,
    Artist,
    Context,
    Playlist,
    SearchResults,
    Track,
    User,
)


@dataclass
class UserData:
    user: Optional[User] = None
    playlists: list[Playlist] = field(default_factory=list)
    saved_albums: list[Album] = field(default_factory=list)
    followed_artists: list[Artist] = field(default_factory=list)


@dataclass
class Caches:
    contexts: dict[str, Context] = field(default_factory=dict)  # by context uri
    search: dict[str, SearchResults] = field(default_factory=dict)  # by query
    recommendations: dict[str, list[Track]] = field(default_factory=dict)  # by seed uri


@dataclass
class DataState:
    """Populated asynchronously by request results."""

    user_data: UserData = field(default_factory=UserData)
    caches: Caches = field(default_factory=Caches)
