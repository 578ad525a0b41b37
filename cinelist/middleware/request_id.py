# cinelist/middleware/request_id.py
from __future__ import annotations

"""
Cinelist — Request ID Middleware (ASGI)

Every HTTP request gets a correlation id: the caller's `X-Request-ID` when it
is a well-formed UUID and `TRUST_CLIENT_REQUEST_IDS` is on, a fresh UUIDv4
otherwise. The id lands on `request.state.request_id`, is echoed in the
response header, and is bound as `request_id` on every log record emitted
while the request runs.
"""

import uuid
from typing import Optional

from loguru import logger
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from cinelist.core.config import settings


def _accept(candidate: Optional[str]) -> Optional[str]:
    if not candidate or len(candidate) > 64:
        return None
    try:
        return str(uuid.UUID(candidate.strip()))
    except ValueError:
        return None


class RequestIDMiddleware:
    def __init__(self, app: ASGIApp, header_name: Optional[str] = None, trust_client: Optional[bool] = None) -> None:
        self.app = app
        self.header_name = header_name or settings.REQUEST_ID_HEADER
        self.trust_client = settings.TRUST_CLIENT_REQUEST_IDS if trust_client is None else trust_client

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming = Headers(scope=scope).get(self.header_name) if self.trust_client else None
        request_id = _accept(incoming) or str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                MutableHeaders(scope=message)[self.header_name] = request_id
            await send(message)

        with logger.contextualize(request_id=request_id):
            await self.app(scope, receive, send_with_id)


def get_request_id(request) -> str:
    """Current request id ("" outside the middleware)."""
    state = getattr(request, "state", None)
    return getattr(state, "request_id", "") or ""


__all__ = ["RequestIDMiddleware", "get_request_id"]
