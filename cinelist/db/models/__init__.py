# cinelist/db/models/__init__.py
"""
Cinelist — ORM models

Import all models here so relationship strings resolve at import time.
"""

from cinelist.db.base_class import Base

from .user import User, MagicLink
from .list import List, ListMember, ListItem
from .watchlist import WatchlistEntry, WatchedMovie, WatchedEpisode
from .series_cache import SeriesCache

__all__ = [
    "Base",
    "User",
    "MagicLink",
    "List",
    "ListMember",
    "ListItem",
    "WatchlistEntry",
    "WatchedMovie",
    "WatchedEpisode",
    "SeriesCache",
]
