# cinelist/main.py
from __future__ import annotations

"""
# Cinelist API — Application Entrypoint (FastAPI)

ASGI application factory and lifecycle for the Cinelist backend (identity,
shared lists, personal watchlist/watched store).

## Middleware order
1) request id → 2) CORS → 3) gzip

## Probes
- `/healthz` — liveness (process up).
- `/readyz` — readiness (quick DB/Redis checks).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator
import logging

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware
from starlette.responses import JSONResponse

from cinelist.api.v1.routers import router as v1_router
from cinelist.core.config import settings
from cinelist.core.exception_handlers import (
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from cinelist.core.logger import configure_logging
from cinelist.core.redis_client import redis_wrapper
from cinelist.db.session import async_engine, db_healthcheck
from cinelist.middleware.request_id import RequestIDMiddleware

logger = logging.getLogger("cinelist")


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan: startup & shutdown
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup:
        - Best-effort connect to Redis (rate limits fail open without it).

    Shutdown:
        - Dispose the DB engine and close Redis, logging any failure.
    """
    logger.info("✅ Cinelist API starting up")
    if not await redis_wrapper.connect():
        logger.warning("Starting without Redis (magic-link rate limits fail open)")

    try:
        yield
    finally:
        try:
            await async_engine.dispose()
            logger.info("🛑 Database engine disposed")
        except Exception:
            logger.exception("Error disposing DB engine")
        await redis_wrapper.close()
        logger.info("🛑 Cinelist API shutting down")


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app() -> FastAPI:
    """Build and configure the FastAPI app instance."""
    configure_logging("api")
    docs_enabled = settings.ENABLE_DOCS and not settings.is_production
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url=f"{settings.API_V1_STR}/openapi.json" if docs_enabled else None,
    )

    # ── Middlewares (outermost last) ────────────────────────────────────────
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    origins = [str(o).rstrip("/") for o in settings.BACKEND_CORS_ORIGINS]
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
            expose_headers=["X-Request-ID", "Retry-After"],
        )
    app.add_middleware(RequestIDMiddleware)

    # ── Exception handlers (problem+json) ──────────────────────────────────
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # ── Routers ─────────────────────────────────────────────────────────────
    app.include_router(v1_router, prefix=settings.API_V1_STR)

    # ── Meta endpoints ──────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    async def healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/readyz", tags=["meta"])
    async def readyz() -> dict[str, object]:
        """Readiness probe. Redis is optional, so only the DB gates `ready`."""
        db_ok = await db_healthcheck()
        try:
            redis_ok = await redis_wrapper.is_connected()
        except Exception:
            redis_ok = False
        return {"ready": db_ok, "checks": {"db": db_ok, "redis": redis_ok}}

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        return JSONResponse(
            {"name": settings.PROJECT_NAME, "docs": app.docs_url or "", "version": settings.VERSION}
        )

    return app


# ─────────────────────────────────────────────────────────────────────────────
# 🚀 Module-level ASGI app for Uvicorn
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()
