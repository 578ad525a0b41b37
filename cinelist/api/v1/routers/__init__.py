"""
🧭 Cinelist • API v1 Router Aggregator
=====================================

Exports the **combined `router`** and each sub-router.

Quick usage
-----------
    from cinelist.api.v1.routers import router as v1_router
    app.include_router(v1_router, prefix="/api/v1")

Auth lives in the child routers (`get_current_user` per route).
"""

from fastapi import APIRouter

from .auth import router as auth_router
from .lists import router as lists_router
from .me import router as me_router
from .rpc import router as rpc_router
from .series import router as series_router


def build_v1_router() -> APIRouter:
    """Compose the API v1 surface into a single `APIRouter`."""
    api = APIRouter()
    api.include_router(auth_router)
    api.include_router(lists_router)
    api.include_router(me_router)
    api.include_router(rpc_router)
    api.include_router(series_router)
    return api


router = build_v1_router()

__all__ = [
    "router",
    "build_v1_router",
    "auth_router",
    "lists_router",
    "me_router",
    "rpc_router",
    "series_router",
]
