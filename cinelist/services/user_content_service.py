# cinelist/services/user_content_service.py
from __future__ import annotations

"""
Personal watchlist / watched store
==================================

Presence rows per user: the implicit watchlist, watched movies, watched
episodes, plus the shared per-series episode-count cache.

All inserts are idempotent (an existing row is left untouched) and deletes of
missing rows are no-ops, so clients can fire-and-forget and retry freely.
`sync_local_state` only ever inserts: it never overwrites or deletes.
"""

import logging
from typing import Dict, Iterable, List as TList, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cinelist.core.exceptions import NotFoundError, RemoteWriteError
from cinelist.db.models.series_cache import SeriesCache
from cinelist.db.models.watchlist import WatchedEpisode, WatchedMovie, WatchlistEntry
from cinelist.schemas.content import (
    ContentRef,
    EpisodeRef,
    SeasonProgress,
    SeriesProgress,
    SyncResult,
    UserContentOut,
)
from cinelist.schemas.enums import MediaType

logger = logging.getLogger("cinelist.user_content")


async def _commit(db: AsyncSession, what: str) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("User content write failed (%s)", what)
        raise RemoteWriteError(f"Could not {what}") from e


async def _insert_if_absent(db: AsyncSession, model, key: Tuple, row) -> bool:
    """Insert `row` unless a row with primary key `key` exists. Returns True when inserted."""
    if await db.get(model, key) is not None:
        return False
    db.add(row)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()  # raced with an identical insert
        return False
    except SQLAlchemyError as e:
        await db.rollback()
        raise RemoteWriteError("Could not save") from e
    return True


# ─────────────────────────────────────────────────────────────
# 📥 Read / sync
# ─────────────────────────────────────────────────────────────

async def get_user_content(db: AsyncSession, user_id: UUID) -> UserContentOut:
    watchlist = (
        await db.execute(
            select(WatchlistEntry.tmdb_id, WatchlistEntry.media_type)
            .where(WatchlistEntry.user_id == user_id)
            .order_by(WatchlistEntry.created_at, WatchlistEntry.tmdb_id)
        )
    ).all()
    watched = (
        await db.execute(
            select(WatchedMovie.tmdb_id)
            .where(WatchedMovie.user_id == user_id)
            .order_by(WatchedMovie.created_at, WatchedMovie.tmdb_id)
        )
    ).scalars().all()
    return UserContentOut(
        watchlist=[ContentRef(id=tmdb_id, media_type=media_type) for tmdb_id, media_type in watchlist],
        watched_ids=list(watched),
    )


async def sync_local_state(
    db: AsyncSession,
    user_id: UUID,
    watchlist: Iterable[ContentRef],
    watched: Iterable[ContentRef],
) -> SyncResult:
    """Dedup-on-insert push: rows already present remotely are skipped, nothing is removed."""
    have_watchlist: Set[Tuple[int, MediaType]] = {
        (tmdb_id, MediaType(media_type))
        for tmdb_id, media_type in (
            await db.execute(
                select(WatchlistEntry.tmdb_id, WatchlistEntry.media_type).where(WatchlistEntry.user_id == user_id)
            )
        ).all()
    }
    have_watched: Set[int] = set(
        (await db.execute(select(WatchedMovie.tmdb_id).where(WatchedMovie.user_id == user_id))).scalars().all()
    )

    result = SyncResult()
    for ref in watchlist:
        key = (ref.id, ref.media_type)
        if key in have_watchlist:
            continue
        have_watchlist.add(key)
        db.add(WatchlistEntry(user_id=user_id, tmdb_id=ref.id, media_type=ref.media_type))
        result.inserted_watchlist += 1
    for ref in watched:
        if ref.id in have_watched:
            continue
        have_watched.add(ref.id)
        db.add(WatchedMovie(user_id=user_id, tmdb_id=ref.id, media_type=ref.media_type))
        result.inserted_watched += 1

    await _commit(db, "sync local state")
    logger.info(
        "Sync user=%s inserted watchlist=%s watched=%s",
        user_id, result.inserted_watchlist, result.inserted_watched,
    )
    return result


# ─────────────────────────────────────────────────────────────
# 🔖 Watchlist / watched toggles
# ─────────────────────────────────────────────────────────────

async def add_to_watchlist(db: AsyncSession, user_id: UUID, tmdb_id: int, media_type: MediaType) -> bool:
    return await _insert_if_absent(
        db,
        WatchlistEntry,
        (user_id, tmdb_id, media_type),
        WatchlistEntry(user_id=user_id, tmdb_id=tmdb_id, media_type=media_type),
    )


async def remove_from_watchlist(db: AsyncSession, user_id: UUID, tmdb_id: int, media_type: Optional[MediaType] = None) -> int:
    stmt = delete(WatchlistEntry).where(WatchlistEntry.user_id == user_id, WatchlistEntry.tmdb_id == tmdb_id)
    if media_type is not None:
        stmt = stmt.where(WatchlistEntry.media_type == media_type)
    result = await db.execute(stmt)
    await _commit(db, "remove from watchlist")
    return int(result.rowcount or 0)


async def mark_watched(db: AsyncSession, user_id: UUID, tmdb_id: int, media_type: MediaType = MediaType.MOVIE) -> bool:
    return await _insert_if_absent(
        db,
        WatchedMovie,
        (user_id, tmdb_id),
        WatchedMovie(user_id=user_id, tmdb_id=tmdb_id, media_type=media_type),
    )


async def mark_unwatched(db: AsyncSession, user_id: UUID, tmdb_id: int) -> int:
    result = await db.execute(
        delete(WatchedMovie).where(WatchedMovie.user_id == user_id, WatchedMovie.tmdb_id == tmdb_id)
    )
    await _commit(db, "mark unwatched")
    return int(result.rowcount or 0)


# ─────────────────────────────────────────────────────────────
# 📺 Episodes & seasons
# ─────────────────────────────────────────────────────────────

def _episode_row(user_id: UUID, ep: EpisodeRef) -> WatchedEpisode:
    return WatchedEpisode(
        user_id=user_id,
        tmdb_episode_id=ep.tmdb_episode_id,
        tmdb_show_id=ep.tmdb_show_id,
        season_number=ep.season_number,
        episode_number=ep.episode_number,
    )


async def mark_episode_watched(db: AsyncSession, user_id: UUID, ep: EpisodeRef) -> bool:
    return await _insert_if_absent(db, WatchedEpisode, (user_id, ep.tmdb_episode_id), _episode_row(user_id, ep))


async def mark_episode_unwatched(db: AsyncSession, user_id: UUID, tmdb_episode_id: int) -> int:
    result = await db.execute(
        delete(WatchedEpisode).where(
            WatchedEpisode.user_id == user_id, WatchedEpisode.tmdb_episode_id == tmdb_episode_id
        )
    )
    await _commit(db, "mark episode unwatched")
    return int(result.rowcount or 0)


async def get_watched_episodes(db: AsyncSession, user_id: UUID, show_id: int) -> TList[WatchedEpisode]:
    return list(
        (
            await db.execute(
                select(WatchedEpisode)
                .where(WatchedEpisode.user_id == user_id, WatchedEpisode.tmdb_show_id == show_id)
                .order_by(WatchedEpisode.season_number, WatchedEpisode.episode_number)
            )
        ).scalars().all()
    )


async def mark_season_watched(
    db: AsyncSession, user_id: UUID, show_id: int, season_number: int, episodes: Iterable[EpisodeRef]
) -> int:
    """Insert every episode of the season not yet watched; episodes of other seasons are ignored."""
    have = {
        e.tmdb_episode_id
        for e in await get_watched_episodes(db, user_id, show_id)
    }
    inserted = 0
    for ep in episodes:
        if ep.tmdb_show_id != show_id or ep.season_number != season_number or ep.tmdb_episode_id in have:
            continue
        have.add(ep.tmdb_episode_id)
        db.add(_episode_row(user_id, ep))
        inserted += 1
    await _commit(db, "mark season watched")
    return inserted


async def mark_season_unwatched(db: AsyncSession, user_id: UUID, show_id: int, season_number: int) -> int:
    result = await db.execute(
        delete(WatchedEpisode).where(
            WatchedEpisode.user_id == user_id,
            WatchedEpisode.tmdb_show_id == show_id,
            WatchedEpisode.season_number == season_number,
        )
    )
    await _commit(db, "mark season unwatched")
    return int(result.rowcount or 0)


# ─────────────────────────────────────────────────────────────
# 📊 Series cache & progress
# ─────────────────────────────────────────────────────────────

async def upsert_series_cache(db: AsyncSession, tmdb_id: int, total_episodes: int, number_of_seasons: int) -> SeriesCache:
    row = await db.get(SeriesCache, tmdb_id)
    if row is None:
        row = SeriesCache(tmdb_id=tmdb_id, total_episodes=total_episodes, number_of_seasons=number_of_seasons)
        db.add(row)
    else:
        row.total_episodes = total_episodes
        row.number_of_seasons = number_of_seasons
    await _commit(db, "update series cache")
    await db.refresh(row)
    return row


async def get_series_cache(db: AsyncSession, tmdb_id: int) -> SeriesCache:
    row = await db.get(SeriesCache, tmdb_id)
    if row is None:
        raise NotFoundError("Series not cached")
    return row


async def get_series_progress(db: AsyncSession, user_id: UUID, show_id: int) -> SeriesProgress:
    """Watched-episode count vs. the cached total; percentage is None without a cache row."""
    per_season: Dict[int, int] = {
        season: count
        for season, count in (
            await db.execute(
                select(WatchedEpisode.season_number, func.count())
                .where(WatchedEpisode.user_id == user_id, WatchedEpisode.tmdb_show_id == show_id)
                .group_by(WatchedEpisode.season_number)
                .order_by(WatchedEpisode.season_number)
            )
        ).all()
    }
    watched = sum(per_season.values())
    cache = await db.get(SeriesCache, show_id)

    progress = SeriesProgress(
        tmdb_show_id=show_id,
        watched_episodes=watched,
        seasons=[SeasonProgress(season_number=s, watched=c) for s, c in per_season.items()],
    )
    if cache is not None:
        progress.total_episodes = cache.total_episodes
        progress.number_of_seasons = cache.number_of_seasons
        if cache.total_episodes > 0:
            progress.percentage = round(min(100.0, watched * 100.0 / cache.total_episodes), 1)
            progress.fully_watched = watched >= cache.total_episodes
    return progress


__all__ = [
    "get_user_content",
    "sync_local_state",
    "add_to_watchlist",
    "remove_from_watchlist",
    "mark_watched",
    "mark_unwatched",
    "mark_episode_watched",
    "mark_episode_unwatched",
    "get_watched_episodes",
    "mark_season_watched",
    "mark_season_unwatched",
    "upsert_series_cache",
    "get_series_cache",
    "get_series_progress",
]
