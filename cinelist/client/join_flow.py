# cinelist/client/join_flow.py
from __future__ import annotations

"""
# Cinelist — Join-by-link flow

Drives the invite page for `/lists/{id}/join?role=...`:

1. `load()` previews the list name (no membership needed). An authenticated
   user with a display name gets it proposed (`CONFIRM_NAME`); everyone else
   types one (`ENTER_NAME`).
2. `confirm(name)` joins with the role from the link. On success the outcome
   redirects to the list after `JOIN_REDIRECT_DELAY_SECONDS`; on failure it
   carries a generic message and an escape hatch to `/lists`.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional
from uuid import UUID

from cinelist.client.api import ApiClient
from cinelist.client.identity import IdentityService
from cinelist.core.config import settings
from cinelist.core.exceptions import AppException
from cinelist.schemas.enums import InviteRole
from cinelist.schemas.lists import JoinResult
from cinelist.services.sharing import parse_invite_role, parse_invite_url

logger = logging.getLogger(__name__)

MY_LISTS_PATH = "/lists"

__all__ = ["JoinState", "JoinOutcome", "JoinFlow"]


class JoinState(str, Enum):
    LOADING = "loading"
    CONFIRM_NAME = "confirm_name"
    ENTER_NAME = "enter_name"
    JOINING = "joining"
    JOINED = "joined"
    ERROR = "error"


@dataclass(frozen=True)
class JoinOutcome:
    ok: bool
    redirect_to: str
    delay_seconds: float = 0.0
    result: Optional[JoinResult] = None
    message: Optional[str] = None


class JoinFlow:
    def __init__(
        self,
        api: ApiClient,
        identity: IdentityService,
        list_id: UUID,
        role: Any = None,
        *,
        redirect_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.api = api
        self.identity = identity
        self.list_id = list_id
        self.role: InviteRole = parse_invite_role(role)
        self.redirect_delay = settings.JOIN_REDIRECT_DELAY_SECONDS if redirect_delay is None else redirect_delay
        self._sleep = sleep
        self.state = JoinState.LOADING
        self.list_name: Optional[str] = None
        self.proposed_name: Optional[str] = None
        self.error: Optional[str] = None

    @classmethod
    def from_url(cls, api: ApiClient, identity: IdentityService, url: str, **kwargs: Any) -> "JoinFlow":
        list_id, role = parse_invite_url(url)
        return cls(api, identity, list_id, role, **kwargs)

    async def load(self) -> JoinState:
        try:
            self.list_name = await self.api.get_list_name(self.list_id)
        except AppException as exc:
            logger.warning("List %s preview failed: %s", self.list_id, exc.message)
            self.error = "This invite link is invalid or the list no longer exists."
            self.state = JoinState.ERROR
            return self.state

        profile = self.identity.current_profile()
        if profile is not None and not profile.is_anonymous and profile.display_name:
            self.proposed_name = profile.display_name
            self.state = JoinState.CONFIRM_NAME
        else:
            self.state = JoinState.ENTER_NAME
        return self.state

    async def confirm(self, name: Optional[str] = None) -> JoinOutcome:
        member_name = (name or self.proposed_name or "").strip()
        if not member_name:
            raise ValueError("a display name is required to join")

        self.state = JoinState.JOINING
        try:
            result = await self.api.join_list(self.list_id, member_name, self.role)
        except AppException as exc:
            logger.warning("Join %s failed: %s", self.list_id, exc.message)
            self.error = "Could not join the list. Please try again."
            self.state = JoinState.ERROR
            return JoinOutcome(ok=False, redirect_to=MY_LISTS_PATH, message=self.error)

        self.state = JoinState.JOINED
        await self._sleep(self.redirect_delay)
        return JoinOutcome(
            ok=True,
            redirect_to=f"{MY_LISTS_PATH}/{self.list_id}",
            delay_seconds=self.redirect_delay,
            result=result,
        )
