# cinelist/client/api.py
from __future__ import annotations

"""
# Cinelist — API client (httpx)

Thin async wrapper over the `/api/v1` surface. Every method returns the same
pydantic schemas the server renders, and every non-2xx response is rebuilt into
the matching `cinelist.core.exceptions` class from its problem+json body, so
client code branches on one error taxonomy.

Transport failures (DNS, refused connections, timeouts) surface as
`RemoteWriteError` with status 503.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

import httpx

from cinelist.core.config import settings
from cinelist.core.exceptions import AppException, RemoteWriteError, exception_for_status
from cinelist.schemas.auth import Profile, SessionOut
from cinelist.schemas.content import (
    ContentRef,
    EpisodeOut,
    EpisodeRef,
    SeriesCacheOut,
    SeriesProgress,
    SyncResult,
    UserContentOut,
)
from cinelist.schemas.enums import InviteRole, MediaType
from cinelist.schemas.lists import (
    ContainingLists,
    ItemOut,
    JoinResult,
    ListDetails,
    ListOut,
    ListWithRole,
    MigrationResult,
    ShareUrl,
)

logger = logging.getLogger(__name__)

__all__ = ["ApiClient"]


def _error_from_response(response: httpx.Response) -> AppException:
    """Rebuild an application exception from a problem+json (or plain) error body."""
    title: Optional[str] = None
    details: Any = None
    message = response.reason_phrase or "Request failed"
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        title = body.get("title")
        message = str(body.get("detail") or body.get("message") or message)
        details = body.get("details", body.get("errors"))
    return exception_for_status(response.status_code, message, title=title, details=details)


class ApiClient:
    """Bearer-token client for the Cinelist API.

    Args:
        base_url: API root including the version prefix (defaults to `settings.API_BASE_URL`).
        token: Session token; may be swapped later via `token`.
        transport: Optional httpx transport (tests mount the ASGI app here).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=(base_url or settings.API_BASE_URL).rstrip("/"),
            transport=transport,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )
        self.token = token

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ─────────────────────────────────────────────────────────────
    # Plumbing
    # ─────────────────────────────────────────────────────────────
    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else None
        try:
            response = await self._http.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("API %s %s failed: %s", method, path, exc)
            raise RemoteWriteError("Remote store unreachable", status_code=503) from exc
        if response.status_code >= 400:
            raise _error_from_response(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ─────────────────────────────────────────────────────────────
    # 🔑 Auth
    # ─────────────────────────────────────────────────────────────
    async def create_anonymous_session(self) -> SessionOut:
        return SessionOut.model_validate(await self._request("POST", "/auth/anonymous"))

    async def get_session(self) -> Profile:
        return Profile.model_validate(await self._request("GET", "/auth/session"))

    async def request_magic_link(self, email: str) -> None:
        await self._request("POST", "/auth/magic-link", json={"email": email})

    async def verify_magic_link(self, token: str) -> SessionOut:
        return SessionOut.model_validate(await self._request("POST", "/auth/verify", json={"token": token}))

    async def update_profile(self, display_name: str) -> Profile:
        return Profile.model_validate(await self._request("PATCH", "/auth/me", json={"display_name": display_name}))

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout")

    # ─────────────────────────────────────────────────────────────
    # 📋 Lists, items, membership
    # ─────────────────────────────────────────────────────────────
    async def create_list(self, name: str) -> ListOut:
        return ListOut.model_validate(await self._request("POST", "/lists", json={"name": name}))

    async def list_lists(self) -> List[ListWithRole]:
        return [ListWithRole.model_validate(row) for row in await self._request("GET", "/lists")]

    async def get_list_details(self, list_id: UUID) -> ListDetails:
        return ListDetails.model_validate(await self._request("GET", f"/lists/{list_id}"))

    async def rename_list(self, list_id: UUID, name: str) -> ListOut:
        return ListOut.model_validate(await self._request("PATCH", f"/lists/{list_id}", json={"name": name}))

    async def delete_list(self, list_id: UUID) -> None:
        await self._request("DELETE", f"/lists/{list_id}")

    async def add_item(self, list_id: UUID, content_id: int, content_type: MediaType | str) -> ItemOut:
        body = {"content_id": content_id, "content_type": MediaType(content_type).value}
        return ItemOut.model_validate(await self._request("POST", f"/lists/{list_id}/items", json=body))

    async def remove_item(self, item_id: UUID) -> None:
        await self._request("DELETE", f"/lists/items/{item_id}")

    async def join_list(self, list_id: UUID, member_name: str, role: InviteRole | str) -> JoinResult:
        body = {"member_name": member_name, "role": InviteRole.parse(role).value}
        return JoinResult.model_validate(await self._request("POST", f"/lists/{list_id}/join", json=body))

    async def get_share_url(self, list_id: UUID, role: InviteRole | str) -> ShareUrl:
        data = await self._request("GET", f"/lists/{list_id}/share", params={"role": InviteRole.parse(role).value})
        return ShareUrl.model_validate(data)

    async def get_lists_containing_content(self, content_id: int, content_type: MediaType | str) -> Dict[UUID, UUID]:
        params = {"content_id": content_id, "content_type": MediaType(content_type).value}
        return ContainingLists.model_validate(await self._request("GET", "/lists/containing", params=params)).lists

    async def remove_member(self, list_id: UUID, user_id: UUID) -> None:
        await self._request("DELETE", f"/lists/{list_id}/members/{user_id}")

    # ─────────────────────────────────────────────────────────────
    # ⚙️ RPC
    # ─────────────────────────────────────────────────────────────
    async def get_list_name(self, list_id: UUID) -> str:
        data = await self._request("POST", "/rpc/get_list_name", json={"list_id": str(list_id)})
        return str(data["name"])

    async def migrate_user_data(self, old_user_id: UUID, new_user_id: UUID) -> MigrationResult:
        body = {"old_user_id": str(old_user_id), "new_user_id": str(new_user_id)}
        return MigrationResult.model_validate(await self._request("POST", "/rpc/migrate_user_data", json=body))

    # ─────────────────────────────────────────────────────────────
    # 🔖 Personal watchlist / watched
    # ─────────────────────────────────────────────────────────────
    async def get_user_content(self) -> UserContentOut:
        return UserContentOut.model_validate(await self._request("GET", "/me/content"))

    async def sync_user_content(self, watchlist: Iterable[ContentRef], watched: Iterable[ContentRef]) -> SyncResult:
        body = {
            "watchlist": [ref.model_dump(mode="json") for ref in watchlist],
            "watched": [ref.model_dump(mode="json") for ref in watched],
        }
        return SyncResult.model_validate(await self._request("POST", "/me/sync", json=body))

    async def add_to_watchlist(self, tmdb_id: int, media_type: MediaType | str) -> bool:
        data = await self._request("POST", f"/me/watchlist/{MediaType(media_type).value}/{tmdb_id}")
        return bool(data.get("changed"))

    async def remove_from_watchlist(self, tmdb_id: int, media_type: MediaType | str) -> bool:
        data = await self._request("DELETE", f"/me/watchlist/{MediaType(media_type).value}/{tmdb_id}")
        return bool(data.get("changed"))

    async def mark_watched(self, tmdb_id: int, media_type: MediaType | str = MediaType.MOVIE) -> bool:
        data = await self._request("POST", f"/me/watched/{tmdb_id}", json={"media_type": MediaType(media_type).value})
        return bool(data.get("changed"))

    async def mark_unwatched(self, tmdb_id: int) -> bool:
        return bool((await self._request("DELETE", f"/me/watched/{tmdb_id}")).get("changed"))

    # ─────────────────────────────────────────────────────────────
    # 📺 Episodes / seasons / series cache
    # ─────────────────────────────────────────────────────────────
    async def mark_episode_watched(self, episode: EpisodeRef) -> bool:
        return bool((await self._request("POST", "/me/episodes", json=episode.model_dump())).get("changed"))

    async def mark_episode_unwatched(self, episode_id: int) -> bool:
        return bool((await self._request("DELETE", f"/me/episodes/{episode_id}")).get("changed"))

    async def get_watched_episodes(self, show_id: int) -> List[EpisodeOut]:
        return [EpisodeOut.model_validate(row) for row in await self._request("GET", f"/me/episodes/{show_id}")]

    async def mark_season_watched(self, show_id: int, season_number: int, episodes: Iterable[EpisodeRef]) -> int:
        body = {"episodes": [e.model_dump() for e in episodes]}
        data = await self._request("POST", f"/me/seasons/{show_id}/{season_number}", json=body)
        return int(data.get("inserted", 0))

    async def mark_season_unwatched(self, show_id: int, season_number: int) -> int:
        data = await self._request("DELETE", f"/me/seasons/{show_id}/{season_number}")
        return int(data.get("removed", 0))

    async def get_series_progress(self, show_id: int) -> SeriesProgress:
        return SeriesProgress.model_validate(await self._request("GET", f"/me/progress/{show_id}"))

    async def put_series_cache(self, tmdb_id: int, total_episodes: int, number_of_seasons: int) -> SeriesCacheOut:
        body = {"total_episodes": total_episodes, "number_of_seasons": number_of_seasons}
        return SeriesCacheOut.model_validate(await self._request("PUT", f"/series-cache/{tmdb_id}", json=body))

    async def get_series_cache(self, tmdb_id: int) -> SeriesCacheOut:
        return SeriesCacheOut.model_validate(await self._request("GET", f"/series-cache/{tmdb_id}"))
