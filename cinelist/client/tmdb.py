# cinelist/client/tmdb.py
from __future__ import annotations

"""
Content provider client (TMDB v3, bearer token).

Read-only lookups keyed by `(id, media_type)`. Results are not cached here; a
view holds them for its own lifetime.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from cinelist.core.config import settings
from cinelist.core.exceptions import AppException, NotFoundError
from cinelist.schemas.content import ContentDetails, ContentItem
from cinelist.schemas.enums import MediaType

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "https://via.placeholder.com/500x750?text=No+Image"
_MEDIA_TYPES = {m.value for m in MediaType}

__all__ = ["TMDBClient", "PLACEHOLDER_IMAGE"]


class TMDBClient:
    """TMDB API integration"""

    def __init__(
        self,
        access_token: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        language: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if access_token is None and settings.TMDB_ACCESS_TOKEN is not None:
            access_token = settings.TMDB_ACCESS_TOKEN.get_secret_value()
        headers = {"Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self.language = language or settings.TMDB_LANGUAGE
        self.client = httpx.AsyncClient(
            base_url=base_url or settings.TMDB_BASE_URL,
            headers=headers,
            timeout=settings.TMDB_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Make request to TMDB API"""
        query = {"language": self.language}
        query.update(params or {})
        try:
            response = await self.client.get(f"/{endpoint.lstrip('/')}", params=query)
        except httpx.HTTPError as e:
            logger.error("TMDB API error on %s: %s", endpoint, e)
            raise AppException("Content provider unavailable", status_code=502) from e
        if response.status_code == 404:
            raise NotFoundError(f"Content not found: {endpoint}")
        if response.status_code >= 400:
            logger.error("TMDB API %s returned %s", endpoint, response.status_code)
            raise AppException("Content provider error", status_code=502, details={"status": response.status_code})
        return response.json()

    @staticmethod
    def _stamp(results: List[Dict[str, Any]], media_type: MediaType) -> List[ContentItem]:
        return [ContentItem.model_validate({**row, "media_type": media_type.value}) for row in results]

    async def get_details(self, content_id: int, media_type: MediaType | str) -> ContentDetails:
        media_type = MediaType(media_type)
        data = await self._request(
            f"{media_type.value}/{content_id}",
            {"append_to_response": "credits,videos,watch/providers"},
        )
        return ContentDetails.model_validate({**data, "media_type": media_type.value})

    async def search(self, query: str) -> List[ContentItem]:
        """Multi-search restricted to movies and shows (people are dropped)."""
        data = await self._request("search/multi", {"query": query})
        return [
            ContentItem.model_validate(row)
            for row in data.get("results", [])
            if row.get("media_type") in _MEDIA_TYPES
        ]

    async def get_trending(self, window: str = "week") -> List[ContentItem]:
        if window not in ("day", "week"):
            raise ValueError(f"window must be 'day' or 'week', got {window!r}")
        data = await self._request(f"trending/all/{window}")
        return [
            ContentItem.model_validate(row)
            for row in data.get("results", [])
            if row.get("media_type") in _MEDIA_TYPES
        ]

    async def discover(self, media_type: MediaType | str = MediaType.MOVIE, filters: Optional[Mapping[str, Any]] = None) -> List[ContentItem]:
        """`/discover/{movie|tv}` with TMDB filter params (`with_genres`, `with_cast`, ...); `None` values are dropped."""
        media_type = MediaType(media_type)
        params = {k: v for k, v in (filters or {}).items() if v is not None}
        data = await self._request(f"discover/{media_type.value}", params)
        return self._stamp(data.get("results", []), media_type)

    async def search_person(self, name: str) -> Optional[int]:
        """Id of the best-matching person, or None."""
        data = await self._request("search/person", {"query": name})
        results = data.get("results") or []
        return int(results[0]["id"]) if results else None

    async def get_season_details(self, show_id: int, season_number: int) -> Dict[str, Any]:
        """Get season details with episodes"""
        return await self._request(f"tv/{show_id}/season/{season_number}")

    def image_url(self, path: Optional[str], size: str = "w500") -> str:
        if not path:
            return PLACEHOLDER_IMAGE
        return f"{settings.TMDB_IMAGE_BASE_URL}/{size}{path}"
