from __future__ import annotations

"""
Problem+JSON exception handlers (RFC 7807).

`cinelist.main.create_app` installs these. All HTTP errors are rendered as
application/problem+json with a stable schema; `title` carries the exception
class name so the client core can rebuild the same exception type.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cinelist.core.exceptions import AppException

logger = logging.getLogger(__name__)


def _problem(
    title: str,
    detail: str,
    status_code: int,
    request: Request,
    *,
    extra: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {
        "type": "about:blank",
        "title": title,
        "detail": detail,
        "status": status_code,
        "instance": str(request.url),
    }
    if extra:
        content.update(extra)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        media_type="application/problem+json",
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # type: ignore
    if isinstance(exc, AppException):
        extra = {"details": exc.details} if exc.details is not None else None
        return _problem(type(exc).__name__, exc.message, exc.status_code, request, extra=extra, headers=exc.headers)
    title = exc.__class__.__name__.replace("Exception", "").strip() or "Error"
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _problem(title, detail, exc.status_code, request, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # type: ignore
    return _problem(
        "Validation error",
        "Validation error",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        request,
        extra={"errors": exc.errors()},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # type: ignore
    # Hide internals; the stack trace goes to the log only.
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _problem(
        "Internal Server Error",
        "An unexpected error occurred.",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        request,
    )


__all__ = [
    "http_exception_handler",
    "validation_exception_handler",
    "global_exception_handler",
]
