# cinelist/db/base.py
"""
Cinelist — SQLAlchemy Base registry
===================================

Import all ORM models so their tables are registered on `Base.metadata`
(Alembic autogeneration, test schema creation).

Tip: Keep this file import-only; no runtime logic.
"""

from cinelist.db.base_class import Base

# ───────────────────────────────────────────────────────────────
# Identity
# ───────────────────────────────────────────────────────────────
from cinelist.db.models.user import User, MagicLink

# ───────────────────────────────────────────────────────────────
# Shared lists
# ───────────────────────────────────────────────────────────────
from cinelist.db.models.list import List, ListMember, ListItem

# ───────────────────────────────────────────────────────────────
# Personal watchlist / watched state
# ───────────────────────────────────────────────────────────────
from cinelist.db.models.watchlist import WatchlistEntry, WatchedMovie, WatchedEpisode
from cinelist.db.models.series_cache import SeriesCache
