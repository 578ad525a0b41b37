# tests/conftest.py
"""
Global test bootstrap
- Test settings go into the environment BEFORE any cinelist import
- Mounts a fresh mock Redis client on `redis_wrapper` for every test
- Pulls in the fixture modules (db, app, users, mocks)
"""

from __future__ import annotations

import os

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env (read by cinelist.core.config at import time)
# ──────────────────────────────────────────────────────────────────────────────
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-cinelist-0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "")
os.environ.setdefault("ENV", "development")
os.environ.setdefault("PUBLIC_BASE_URL", "https://cinelist.app")
os.environ.setdefault("TMDB_ACCESS_TOKEN", "test-tmdb-token")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest

from cinelist.core.redis_client import redis_wrapper
from tests.fixtures.mocks.redis import MockRedisClient

# ──────────────────────────────────────────────────────────────────────────────
# 📦 Fixture modules
# ──────────────────────────────────────────────────────────────────────────────
from tests.fixtures.db import *           # noqa: F401,F403
from tests.fixtures.app import *          # noqa: F401,F403
from tests.fixtures.users import *        # noqa: F401,F403
from tests.fixtures.content import *      # noqa: F401,F403
from tests.fixtures.mocks.email import *  # noqa: F401,F403


# ──────────────────────────────────────────────────────────────────────────────
# 🔌 Redis fixture (function-scoped, autouse)
# ──────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def redis_client():
    """Fresh mock per test; inspect it directly when asserting rate-limit keys."""
    client = MockRedisClient()
    redis_wrapper._client = client
    yield client
    redis_wrapper._client = None
