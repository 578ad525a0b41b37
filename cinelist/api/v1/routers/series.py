# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ Cinelist · Series episode-count cache                                     ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║  - PUT /series-cache/{tmdb_id}   → Upsert counts (any session)            ║
# ║  - GET /series-cache/{tmdb_id}   → Cached counts or 404                   ║
# ╚══════════════════════════════════════════════════════════════════════════╝
"""Shared cache rows, independent of any one user."""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from cinelist.api.http_utils import json_no_store
from cinelist.core.security import get_current_user
from cinelist.db.models.user import User
from cinelist.db.session import get_async_db
from cinelist.schemas.content import SeriesCacheIn, SeriesCacheOut
from cinelist.services import user_content_service as svc

router = APIRouter(prefix="/series-cache", tags=["Series"])


@router.put("/{tmdb_id}", response_model=SeriesCacheOut)
async def upsert(
    payload: SeriesCacheIn,
    tmdb_id: int = Path(..., gt=0),
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    row = await svc.upsert_series_cache(db, tmdb_id, payload.total_episodes, payload.number_of_seasons)
    return json_no_store(SeriesCacheOut.model_validate(row))


@router.get("/{tmdb_id}", response_model=SeriesCacheOut)
async def read(
    tmdb_id: int = Path(..., gt=0),
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return json_no_store(SeriesCacheOut.model_validate(await svc.get_series_cache(db, tmdb_id)))
