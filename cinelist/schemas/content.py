from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from cinelist.schemas.enums import MediaType


# ──────────────────────────────────────────────────────────────
# Content items (provider-shaped)
# ──────────────────────────────────────────────────────────────
class ContentItem(BaseModel):
    """Display item as returned by the content provider; only `id`/`media_type` are persisted."""

    model_config = ConfigDict(extra="allow")

    id: int
    media_type: MediaType = MediaType.MOVIE
    title: Optional[str] = None
    name: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    overview: Optional[str] = None
    vote_average: Optional[float] = None
    release_date: Optional[str] = None
    first_air_date: Optional[str] = None

    @property
    def display_title(self) -> str:
        return self.title or self.name or str(self.id)


class ContentRef(BaseModel):
    id: int = Field(..., gt=0)
    media_type: MediaType = MediaType.MOVIE


# ──────────────────────────────────────────────────────────────
# Personal watchlist / watched
# ──────────────────────────────────────────────────────────────
class UserContentOut(BaseModel):
    watchlist: List[ContentRef] = Field(default_factory=list)
    watched_ids: List[int] = Field(default_factory=list)


class SyncRequest(BaseModel):
    """Local snapshot pushed before a pull; rows already present remotely are skipped."""
    watchlist: List[ContentRef] = Field(default_factory=list)
    watched: List[ContentRef] = Field(default_factory=list)


class SyncResult(BaseModel):
    inserted_watchlist: int = 0
    inserted_watched: int = 0


class WatchedIn(BaseModel):
    media_type: MediaType = MediaType.MOVIE


# ──────────────────────────────────────────────────────────────
# Episodes / progress
# ──────────────────────────────────────────────────────────────
class EpisodeRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tmdb_episode_id: int = Field(..., gt=0)
    tmdb_show_id: int = Field(..., gt=0)
    season_number: int = Field(..., ge=0)
    episode_number: int = Field(..., ge=0)


class EpisodeOut(EpisodeRef):
    created_at: Optional[datetime] = None


class SeasonMarkRequest(BaseModel):
    episodes: List[EpisodeRef] = Field(default_factory=list)


class SeasonProgress(BaseModel):
    season_number: int
    watched: int


class SeriesProgress(BaseModel):
    tmdb_show_id: int
    watched_episodes: int
    total_episodes: Optional[int] = None
    number_of_seasons: Optional[int] = None
    percentage: Optional[float] = None
    fully_watched: bool = False
    seasons: List[SeasonProgress] = Field(default_factory=list)


class SeriesCacheIn(BaseModel):
    total_episodes: int = Field(..., ge=0)
    number_of_seasons: int = Field(..., ge=0)


class SeriesCacheOut(SeriesCacheIn):
    model_config = ConfigDict(from_attributes=True)

    tmdb_id: int
    updated_at: Optional[datetime] = None


# ──────────────────────────────────────────────────────────────
# Provider details (client side)
# ──────────────────────────────────────────────────────────────
class ContentDetails(ContentItem):
    genres: List[Dict[str, Any]] = Field(default_factory=list)
    status: Optional[str] = None
    runtime: Optional[int] = None
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None
    seasons: List[Dict[str, Any]] = Field(default_factory=list)


__all__ = [
    "ContentItem",
    "ContentRef",
    "UserContentOut",
    "SyncRequest",
    "SyncResult",
    "WatchedIn",
    "EpisodeRef",
    "EpisodeOut",
    "SeasonMarkRequest",
    "SeasonProgress",
    "SeriesProgress",
    "SeriesCacheIn",
    "SeriesCacheOut",
    "ContentDetails",
]
