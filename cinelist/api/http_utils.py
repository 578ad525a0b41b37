from __future__ import annotations

"""
Cinelist · HTTP Utilities
=========================

Shared helpers for API routers:

- No-store JSON responses (session tokens and per-user data must not be cached)
- Best-effort structured action logging
"""

import logging
from typing import Any, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from cinelist.middleware.request_id import get_request_id

logger = logging.getLogger("cinelist.api")

__all__ = ["json_no_store", "log_user_action"]


def json_no_store(payload: Any, status_code: int = 200) -> JSONResponse:
    """Return a JSON response with strict `no-store` caching."""
    if hasattr(payload, "model_dump"):
        payload = payload.model_dump(mode="json")
    resp = JSONResponse(content=jsonable_encoder(payload), status_code=status_code)
    resp.headers["Cache-Control"] = "no-store"
    resp.headers["Pragma"] = "no-cache"
    resp.headers["Expires"] = "0"
    return resp


def log_user_action(request: Optional[Request], user_id: Any, action: str, **fields: Any) -> None:
    """Non-blocking info log for a user-initiated mutation."""
    extra = " ".join(f"{k}={v}" for k, v in fields.items())
    logger.info(
        "[%s] user=%s action=%s %s",
        get_request_id(request) if request is not None else "-",
        user_id,
        action,
        extra,
    )
