# cinelist/core/redis_client.py
from __future__ import annotations

"""
Cinelist — Redis Client (Async)
===============================
Redis backs the magic-link rate limiter and nothing else, so it is optional:
without `REDIS_URL`, or when every connect attempt fails, the API still starts
and `redis_wrapper.optional_client()` returns None (callers fail open).

    await redis_wrapper.connect()        # lifespan startup, best effort
    rc = redis_wrapper.optional_client()  # None when unavailable
    await redis_wrapper.close()
"""

import asyncio
import logging
import random
from typing import Any, Optional, Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from cinelist.core.config import settings

logger = logging.getLogger("cinelist.redis")


class _RedisProto(Protocol):
    async def ping(self) -> Any: ...
    async def incr(self, name: str) -> Any: ...
    async def expire(self, name: str, time: int) -> Any: ...
    async def close(self) -> Any: ...


class RedisClient:
    def __init__(self, redis_url: Optional[str], *, retries: int = 3, base_delay: float = 0.3) -> None:
        self.redis_url = redis_url
        self.retries = retries
        self.base_delay = base_delay
        self._client: Optional[_RedisProto] = None

    async def connect(self) -> bool:
        """Connect with jittered exponential backoff; False when Redis stays unavailable."""
        if not self.redis_url:
            logger.info("REDIS_URL not set; magic-link rate limiting is off")
            return False
        if await self.is_connected():
            return True

        for attempt in range(1, self.retries + 1):
            client = redis.Redis.from_url(
                self.redis_url,
                decode_responses=True,
                socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
                socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
                client_name="cinelist-api",
            )
            try:
                await client.ping()
            except (RedisError, OSError) as e:
                await client.close()
                delay = min(3.0, self.base_delay * 2 ** (attempt - 1)) + random.uniform(0, 0.25)
                logger.warning("Redis connect %s/%s failed: %r (retry in %.2fs)", attempt, self.retries, e, delay)
                await asyncio.sleep(delay)
                continue
            self._client = client
            logger.info("Connected to Redis")
            return True

        logger.error("Redis unavailable after %s attempts; rate limits fail open", self.retries)
        return False

    async def close(self) -> None:
        client, self._client = self._client, None
        if client is None:
            return
        try:
            await client.close()
        except RedisError as e:
            logger.warning("Error closing Redis connection: %s", e)

    async def is_connected(self) -> bool:
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError):
            return False

    def optional_client(self) -> Optional[_RedisProto]:
        return self._client


redis_wrapper = RedisClient(settings.REDIS_URL)

__all__ = ["RedisClient", "redis_wrapper"]
