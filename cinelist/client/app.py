# cinelist/client/app.py
from __future__ import annotations

"""
Client bootstrap: Identity → Migration → remote stores → Local cache.

`start()` is the per-launch (and per-identity-change) entry point:
establish a session, scope the cache to it, then push-and-pull once.
"""

import logging
from typing import Any, Optional
from uuid import UUID

from cinelist.client.api import ApiClient
from cinelist.client.identity import IdentityService, Notifier
from cinelist.client.join_flow import JoinFlow
from cinelist.client.list_detail import ListDetailView
from cinelist.client.storage import LocalStorage
from cinelist.client.store.cache import LocalReconcilingCache
from cinelist.client.tmdb import TMDBClient

logger = logging.getLogger(__name__)

__all__ = ["CinelistClient"]


class CinelistClient:
    def __init__(
        self,
        *,
        api: Optional[ApiClient] = None,
        storage: Optional[LocalStorage] = None,
        content: Any = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.api = api or ApiClient()
        self.storage = storage or LocalStorage()
        self.content = content or TMDBClient()
        self.identity = IdentityService(self.api, self.storage, notifier=notifier)
        self.cache = LocalReconcilingCache(self.api, self.storage)

    async def start(self) -> UUID:
        user_id = await self.identity.establish_session()
        old_id = self.identity.migrated_from
        carry_over = old_id is not None and self.cache.owner_id == old_id
        self.cache.bind(user_id, carry_over=carry_over)
        await self.cache.sync_with_remote()
        logger.info("Session ready for %s (carried over: %s)", user_id, carry_over)
        return user_id

    async def finish_email_sign_in(self, token: str) -> UUID:
        await self.identity.complete_email_sign_in(token)
        return await self.start()

    async def sign_out(self) -> UUID:
        await self.cache.drain()
        await self.identity.sign_out()
        return await self.start()

    def list_view(self, list_id: UUID) -> ListDetailView:
        return ListDetailView(self.api, self.content, list_id)

    def join_flow(self, invite_url: str, **kwargs: Any) -> JoinFlow:
        return JoinFlow.from_url(self.api, self.identity, invite_url, **kwargs)

    async def aclose(self) -> None:
        await self.cache.drain()
        await self.api.aclose()
        aclose = getattr(self.content, "aclose", None)
        if aclose is not None:
            await aclose()
