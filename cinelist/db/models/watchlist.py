from __future__ import annotations

"""
🎬 Cinelist — personal watchlist & watched state
================================================

Presence-only rows keyed by the content provider's ids; no display metadata is
stored (it is re-fetched at read time).

• `WatchlistEntry`  (user_id, tmdb_id, media_type)  saved for later
• `WatchedMovie`    (user_id, tmdb_id)              fully watched movie
• `WatchedEpisode`  (user_id, tmdb_episode_id)      one watched episode; season
  and series completion are aggregates against `SeriesCache`
"""

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Uuid,
    func,
)

from cinelist.db.base_class import Base, utcnow
from cinelist.schemas.enums import MediaType, enum_values


class WatchlistEntry(Base):
    __tablename__ = "watchlists"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    tmdb_id = Column(Integer, primary_key=True)
    media_type = Column(
        Enum(MediaType, name="media_type", native_enum=False, length=8, values_callable=enum_values),
        primary_key=True,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)


class WatchedMovie(Base):
    __tablename__ = "watched_movies"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    tmdb_id = Column(Integer, primary_key=True)
    media_type = Column(
        Enum(MediaType, name="media_type", native_enum=False, length=8, values_callable=enum_values),
        nullable=False,
        default=MediaType.MOVIE,
        server_default=MediaType.MOVIE.value,
        doc="Kind recorded at mark time; `movie` when the client did not know it.",
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)


class WatchedEpisode(Base):
    __tablename__ = "watched_episodes"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    tmdb_episode_id = Column(Integer, primary_key=True)
    tmdb_show_id = Column(Integer, nullable=False)
    season_number = Column(Integer, nullable=False)
    episode_number = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_watched_episodes_user_show", "user_id", "tmdb_show_id"),
    )


__all__ = ["WatchlistEntry", "WatchedMovie", "WatchedEpisode"]
