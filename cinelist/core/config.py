# cinelist/core/config.py
from __future__ import annotations

"""
# Cinelist — Centralized Configuration (Pydantic v2)

Single `settings` object with strongly-typed, environment-driven config.

## Goals
- Safe defaults for local/dev; explicit where prod needs secrets.
- One place for both the API server and the client core (invite links,
  content provider, local cache location).
- Optional external systems (Redis, SMTP, TMDB) so imports never crash in dev.

## Usage
    from cinelist.core.config import settings
"""

import logging
from pathlib import Path
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)
load_dotenv()  # harmless in prod; convenient in dev


# ─────────────────────────────────────────────────────────────
# Small helpers
# ─────────────────────────────────────────────────────────────
def _split_csv(v: str | None) -> list[str]:
    """Split a comma-separated string into a trimmed list (empty-safe)."""
    if not v:
        return []
    return [s.strip() for s in str(v).split(",") if s and s.strip()]


def _normalize_url_like(v: str | None, *, require_scheme: bool = True) -> str:
    """Normalize to a string URL without trailing slash."""
    s = (v or "").strip()
    if not s:
        return ""
    if require_scheme and not (s.startswith("http://") or s.startswith("https://")):
        s = "https://" + s
    return s.rstrip("/")


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Global application settings sourced from environment.

    Security:
        - Explicit secret for session JWTs and magic-link digests.
        - Magic links are single-use and TTL-bounded.

    Notes:
        - `DATABASE_URL` overrides the Postgres DSN pieces (e.g. SQLite in tests).
        - Prefer the string convenience properties when composing URLs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown keys
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "Cinelist API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    ENV: Literal["development", "staging", "production"] = "development"
    ENABLE_DOCS: bool = True

    # ── Logging ───────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_FILE: Optional[Path] = None
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "14 days"
    REQUEST_ID_HEADER: str = "X-Request-ID"
    TRUST_CLIENT_REQUEST_IDS: bool = True

    # ── Security / JWT ────────────────────────────────────────
    JWT_SECRET_KEY: SecretStr = Field(...)
    JWT_ALGORITHM: Literal["HS256", "HS384", "HS512"] = "HS256"
    SESSION_TOKEN_EXPIRE_DAYS: int = Field(30, ge=1, le=365)
    MAGIC_LINK_TTL_MINUTES: int = Field(60, ge=5, le=24 * 60)
    MAGIC_LINK_RESEND_SECONDS: int = Field(60, ge=0, le=3600)

    # ── Redis (rate limiting; optional in dev) ────────────────
    REDIS_URL: Optional[str] = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT: float = Field(3.0, gt=0, le=30)

    # ── Database (PostgreSQL) ─────────────────────────────────
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = SecretStr("postgres")
    POSTGRES_DB: str = "cinelist"
    DATABASE_URL_OVERRIDE: Optional[str] = Field(None, alias="DATABASE_URL")

    # ── CORS ─────────────────────────────────────────────────
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = Field(
        default_factory=lambda: ["http://localhost:8000", "http://localhost:5173"]
    )

    # ── Email (magic links) ───────────────────────────────────
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[SecretStr] = None
    EMAIL_FROM: Optional[str] = None
    PUBLIC_BASE_URL: AnyHttpUrl = "http://localhost:5173"

    # ── Content provider (TMDB) ───────────────────────────────
    TMDB_BASE_URL: str = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL: str = "https://image.tmdb.org/t/p"
    TMDB_ACCESS_TOKEN: Optional[SecretStr] = None
    TMDB_LANGUAGE: str = "pt-BR"
    TMDB_TIMEOUT_SECONDS: float = Field(10.0, gt=0, le=120)

    # ── Client core ───────────────────────────────────────────
    API_BASE_URL: str = "http://localhost:8000/api/v1"
    CLIENT_STORAGE_PATH: Path = Path(".cinelist/storage.json")
    CLIENT_CACHE_KEY: str = "cinelist-storage"
    JOIN_REDIRECT_DELAY_SECONDS: float = Field(1.5, ge=0, le=30)

    # ── Validators / normalizers ──────────────────────────────
    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def _assemble_cors_origins(cls, v: str | List[str]):
        if isinstance(v, str):
            return _split_csv(v)
        return v

    @field_validator("API_BASE_URL", "TMDB_BASE_URL", "TMDB_IMAGE_BASE_URL", mode="before")
    @classmethod
    def _normalize_base_urls(cls, v) -> str:
        return _normalize_url_like(str(v or ""), require_scheme=False)

    # ── Derived / convenience properties ─────────────────────
    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def DATABASE_URL(self) -> str:
        """Sync-style DSN (Alembic offline mode, tooling)."""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def ASYNC_DATABASE_URL(self) -> str:
        """Async SQLAlchemy DSN (asyncpg for Postgres, aiosqlite for SQLite)."""
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite:///"):
            return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return url

    @property
    def public_base_url_str(self) -> str:
        """`PUBLIC_BASE_URL` as a plain string (invite & shared-list links)."""
        return str(self.PUBLIC_BASE_URL).rstrip("/")

    @property
    def smtp_enabled(self) -> bool:
        return bool(self.SMTP_HOST and self.EMAIL_FROM)


# Singleton instance
settings = Settings()
