# cinelist/utils/redis_utils.py
from __future__ import annotations

"""
Cinelist — Redis utilities
==========================
Fixed-window rate limiting keyed by an arbitrary suffix (e.g. a normalized
email). If Redis is unavailable we **fail open**.
"""

import logging
from typing import Optional

from cinelist.core.exceptions import RateLimitedError
from cinelist.core.redis_client import redis_wrapper

logger = logging.getLogger(__name__)

RATE_LIMIT_PREFIX = "rate-limit"


async def enforce_rate_limit(
    *,
    key_suffix: str,
    seconds: int,
    max_calls: int = 1,
    error_message: Optional[str] = None,
) -> None:
    """
    Increment a counter and set TTL on first hit; raise `RateLimitedError`
    once the counter passes `max_calls` inside the window.
    """
    if seconds <= 0:
        return
    rc = redis_wrapper.optional_client()
    if rc is None:
        return  # no redis → do not block

    key = f"{RATE_LIMIT_PREFIX}:{key_suffix}"
    try:
        count = await rc.incr(key)
        if int(count) == 1:
            try:
                await rc.expire(key, int(seconds))
            except Exception:
                logger.debug("enforce_rate_limit: expire failed for %s", key, exc_info=True)
        if int(count) > int(max_calls):
            raise RateLimitedError(error_message, headers={"Retry-After": str(int(seconds))})
    except RateLimitedError:
        raise
    except Exception:
        logger.debug("enforce_rate_limit: redis error (fail-open).", exc_info=True)


__all__ = ["enforce_rate_limit", "RATE_LIMIT_PREFIX"]
