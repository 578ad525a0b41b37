from __future__ import annotations

"""
📺 Cinelist — SeriesCache
========================
Per-show episode counts shared by all users; upserted whenever a client has
fresh details from the content provider. Used for watch-progress percentages.
"""

from sqlalchemy import Column, DateTime, Integer, func

from cinelist.db.base_class import Base, utcnow


class SeriesCache(Base):
    __tablename__ = "series_cache"

    tmdb_id = Column(Integer, primary_key=True, autoincrement=False)
    total_episodes = Column(Integer, nullable=False)
    number_of_seasons = Column(Integer, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)


__all__ = ["SeriesCache"]
