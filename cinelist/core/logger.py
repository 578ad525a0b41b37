# cinelist/core/logger.py
from __future__ import annotations

"""
Cinelist — Logging (Loguru)
---------------------------
`configure_logging(component)` installs one console sink (pretty, or JSON when
`LOG_JSON` is set) plus an optional rotating file sink at `LOG_FILE`, then routes
stdlib logging into Loguru. Calling it again replaces the sinks.

Every record carries `component` ("api" or "client") and `request_id`
(bound by `RequestIDMiddleware`; "-" outside a request).
"""

import json
import logging
import sys
from typing import Any, Dict, Optional

from loguru import logger

from cinelist.core.config import settings

_STD_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "sqlalchemy.engine", "httpx")


def _safe(value: str) -> str:
    return value.replace("<", "[").replace(">", "]")


def _fmt_pretty(record) -> str:
    extra = record["extra"]
    extra.setdefault("request_id", "-")
    extra.setdefault("component", "-")
    return (
        "<green>{time:HH:mm:ss.SSS}</green> <level>{level:<7}</level> "
        f"<magenta>{{extra[component]}}</magenta> <cyan>{_safe(record['name'])}:{record['line']}</cyan> "
        "{message} <dim>rid={extra[request_id]}</dim>\n{exception}"
    )


def _fmt_json(record) -> str:
    payload: Dict[str, Any] = {
        "time": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": record["name"],
        "line": record["line"],
        "message": record["message"],
    }
    payload.update({k: v for k, v in record["extra"].items() if not k.startswith("_")})
    if record["exception"] is not None:
        payload["exception"] = repr(record["exception"].value)
    record["extra"]["_json"] = json.dumps(payload, ensure_ascii=False, default=str)
    return "{extra[_json]}\n"


class InterceptHandler(logging.Handler):
    """Route standard logging records into Loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(component: str = "api", *, level: Optional[str] = None) -> None:
    level = (level or settings.LOG_LEVEL).upper()
    fmt = _fmt_json if settings.LOG_JSON else _fmt_pretty

    logger.remove()
    logger.configure(extra={"component": component, "request_id": "-"})
    logger.add(sys.stderr, level=level, format=fmt, backtrace=False, diagnose=False)
    if settings.LOG_FILE:
        settings.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(settings.LOG_FILE),
            level=level,
            format=_fmt_json,
            rotation=settings.LOG_ROTATION,
            retention=settings.LOG_RETENTION,
            enqueue=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=level, force=True)
    for name in _STD_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
    # SQL echo and per-request httpx lines only at DEBUG.
    quiet = logging.DEBUG if level == "DEBUG" else logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(quiet)
    logging.getLogger("httpx").setLevel(quiet)


__all__ = ["configure_logging", "InterceptHandler"]
