from __future__ import annotations

"""
In-memory stand-ins for the Redis commands the magic-link limiter issues
(`incr` + `expire`), plus the housekeeping calls the wrapper makes.
Mounted on `cinelist.core.redis_client.redis_wrapper._client` by conftest.
"""

import time
from typing import Dict, Optional


class MockRedisClient:
    def __init__(self) -> None:
        self.counters: Dict[str, int] = {}
        self.deadlines: Dict[str, float] = {}
        self.closed = False

    def _live(self, key: str) -> bool:
        deadline = self.deadlines.get(key)
        if deadline is not None and deadline <= time.monotonic():
            self.counters.pop(key, None)
            self.deadlines.pop(key, None)
        return key in self.counters

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self.closed = True

    async def flushall(self) -> None:
        self.counters.clear()
        self.deadlines.clear()

    async def incr(self, key: str, amount: int = 1) -> int:
        self._live(key)
        self.counters[key] = self.counters.get(key, 0) + amount
        return self.counters[key]

    async def expire(self, key: str, seconds: int) -> bool:
        if not self._live(key):
            return False
        self.deadlines[key] = time.monotonic() + seconds
        return True

    async def ttl(self, key: str) -> int:
        if not self._live(key):
            return -2
        deadline: Optional[float] = self.deadlines.get(key)
        return -1 if deadline is None else max(0, round(deadline - time.monotonic()))


class FailingRedisClient(MockRedisClient):
    """Counter commands raise, as if the server went away mid-request."""

    async def incr(self, key: str, amount: int = 1) -> int:
        raise ConnectionError("redis down")
