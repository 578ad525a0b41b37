# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ Cinelist · Personal watchlist / watched API                               ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║ Endpoints (session required):                                             ║
# ║  - GET    /me/content                          → watchlist + watched ids  ║
# ║  - POST   /me/sync                             → dedup-on-insert push     ║
# ║  - POST   /me/watchlist/{media_type}/{id}      → Save for later           ║
# ║  - DELETE /me/watchlist/{media_type}/{id}      → Unsave                   ║
# ║  - POST   /me/watched/{id}                     → Mark watched             ║
# ║  - DELETE /me/watched/{id}                     → Mark unwatched           ║
# ║  - POST   /me/episodes                         → Mark one episode         ║
# ║  - DELETE /me/episodes/{episode_id}            → Unmark one episode       ║
# ║  - GET    /me/episodes/{show_id}               → Watched episode rows     ║
# ║  - POST   /me/seasons/{show_id}/{season}       → Mark a whole season      ║
# ║  - DELETE /me/seasons/{show_id}/{season}       → Unmark a whole season    ║
# ║  - GET    /me/progress/{show_id}               → Watched vs. total        ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║ Idempotent semantics for every add/remove; responses are no-store.        ║
# ╚══════════════════════════════════════════════════════════════════════════╝
"""Per-user presence rows; clients write here fire-and-forget."""

import logging
from typing import List as TList, Optional, Union

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from cinelist.api.http_utils import json_no_store
from cinelist.core.security import get_current_user
from cinelist.db.models.user import User
from cinelist.db.session import get_async_db
from cinelist.schemas.content import (
    EpisodeOut,
    EpisodeRef,
    SeasonMarkRequest,
    SeriesProgress,
    SyncRequest,
    SyncResult,
    UserContentOut,
    WatchedIn,
)
from cinelist.schemas.enums import MediaType
from cinelist.services import user_content_service as svc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/me", tags=["Me"])


def _changed(changed: Union[bool, int]) -> dict:
    return {"ok": True, "changed": bool(changed)}


# ─────────────────────────────────────────────────────────────
# 📥 Snapshot & sync
# ─────────────────────────────────────────────────────────────

@router.get("/content", response_model=UserContentOut)
async def get_content(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_async_db)):
    return json_no_store(await svc.get_user_content(db, user.id))


@router.post("/sync", response_model=SyncResult)
async def sync(payload: SyncRequest, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_async_db)):
    return json_no_store(await svc.sync_local_state(db, user.id, payload.watchlist, payload.watched))


# ─────────────────────────────────────────────────────────────
# 🔖 Watchlist & watched
# ─────────────────────────────────────────────────────────────

@router.post("/watchlist/{media_type}/{tmdb_id}", status_code=status.HTTP_200_OK)
async def add_watchlist(
    media_type: MediaType,
    tmdb_id: int = Path(..., gt=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return json_no_store(_changed(await svc.add_to_watchlist(db, user.id, tmdb_id, media_type)))


@router.delete("/watchlist/{media_type}/{tmdb_id}")
async def remove_watchlist(
    media_type: MediaType,
    tmdb_id: int = Path(..., gt=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return json_no_store(_changed(await svc.remove_from_watchlist(db, user.id, tmdb_id, media_type)))


@router.post("/watched/{tmdb_id}")
async def mark_watched(
    tmdb_id: int = Path(..., gt=0),
    payload: Optional[WatchedIn] = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return json_no_store(_changed(await svc.mark_watched(db, user.id, tmdb_id, (payload or WatchedIn()).media_type)))


@router.delete("/watched/{tmdb_id}")
async def mark_unwatched(
    tmdb_id: int = Path(..., gt=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return json_no_store(_changed(await svc.mark_unwatched(db, user.id, tmdb_id)))


# ─────────────────────────────────────────────────────────────
# 📺 Episodes, seasons, progress
# ─────────────────────────────────────────────────────────────

@router.post("/episodes")
async def mark_episode(payload: EpisodeRef, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_async_db)):
    return json_no_store(_changed(await svc.mark_episode_watched(db, user.id, payload)))


@router.delete("/episodes/{episode_id}")
async def unmark_episode(
    episode_id: int = Path(..., gt=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return json_no_store(_changed(await svc.mark_episode_unwatched(db, user.id, episode_id)))


@router.get("/episodes/{show_id}", response_model=TList[EpisodeOut])
async def watched_episodes(
    show_id: int = Path(..., gt=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    rows = await svc.get_watched_episodes(db, user.id, show_id)
    return json_no_store([EpisodeOut.model_validate(r).model_dump(mode="json") for r in rows])


@router.post("/seasons/{show_id}/{season_number}")
async def mark_season(
    payload: SeasonMarkRequest,
    show_id: int = Path(..., gt=0),
    season_number: int = Path(..., ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    inserted = await svc.mark_season_watched(db, user.id, show_id, season_number, payload.episodes)
    return json_no_store({"ok": True, "inserted": inserted})


@router.delete("/seasons/{show_id}/{season_number}")
async def unmark_season(
    show_id: int = Path(..., gt=0),
    season_number: int = Path(..., ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    removed = await svc.mark_season_unwatched(db, user.id, show_id, season_number)
    return json_no_store({"ok": True, "removed": removed})


@router.get("/progress/{show_id}", response_model=SeriesProgress)
async def progress(
    show_id: int = Path(..., gt=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return json_no_store(await svc.get_series_progress(db, user.id, show_id))
