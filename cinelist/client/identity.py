# cinelist/client/identity.py
from __future__ import annotations

"""
# Cinelist — Identity Service (client)

Keeps exactly one active session per client and drives the
`NoSession → Anonymous → Authenticated` lifecycle.

- `establish_session()` restores the stored session or creates an anonymous
  one. On the first check after an email sign-in completes it runs the
  anonymous → authenticated migration once, then clears the marker whatever
  the outcome.
- `begin_email_sign_in()` records the anonymous id as *pending migration*
  before asking the server for a magic link.
- `sign_out()` drops the session and immediately starts a fresh anonymous one.

Only a failure to establish any session at all is raised (`AuthError`);
migration failures go to the notifier and are otherwise ignored.
"""

import logging
from typing import Any, Callable, Optional
from uuid import UUID

from cinelist.client.api import ApiClient
from cinelist.client.migration import MigrationService
from cinelist.client.storage import LocalStorage
from cinelist.core.exceptions import AppException, AuthError, MigrationError
from cinelist.schemas.auth import Profile, SessionOut, derive_display_name

logger = logging.getLogger(__name__)

SESSION_KEY = "cinelist-session"
PENDING_MIGRATION_KEY = "cinelist-pending-migration"

Notifier = Callable[[str], Any]

__all__ = ["IdentityService", "SESSION_KEY", "PENDING_MIGRATION_KEY"]


def _log_notifier(message: str) -> None:
    logger.warning("notify: %s", message)


class IdentityService:
    def __init__(
        self,
        api: ApiClient,
        storage: LocalStorage,
        *,
        migration: Optional[MigrationService] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.api = api
        self.storage = storage
        self.migration = migration or MigrationService(api)
        self.notifier = notifier or _log_notifier
        self._profile: Optional[Profile] = None
        # Set when a pending marker was consumed by the last `establish_session`.
        self.migrated_from: Optional[UUID] = None

    # ─────────────────────────────────────────────────────────────
    # Session storage
    # ─────────────────────────────────────────────────────────────
    def _store(self, session: SessionOut) -> Profile:
        self.storage.set(SESSION_KEY, session.model_dump(mode="json"))
        self.api.token = session.access_token
        self._profile = session.user
        return session.user

    def _forget(self) -> None:
        self.storage.remove(SESSION_KEY)
        self.api.token = None
        self._profile = None

    def _pending_migration(self) -> Optional[UUID]:
        raw = self.storage.get(PENDING_MIGRATION_KEY)
        if not raw:
            return None
        try:
            return UUID(str(raw))
        except ValueError:
            return None

    async def _restore(self) -> Optional[Profile]:
        stored = self.storage.get(SESSION_KEY)
        token = stored.get("access_token") if isinstance(stored, dict) else None
        if not token:
            return None
        self.api.token = token
        try:
            profile = await self.api.get_session()
        except AuthError:
            logger.info("Stored session rejected; starting over")
            self._forget()
            return None
        except AppException as exc:
            raise AuthError("Could not verify the stored session", status_code=exc.status_code) from exc
        self._profile = profile
        return profile

    async def _start_anonymous(self) -> Profile:
        try:
            session = await self.api.create_anonymous_session()
        except AppException as exc:
            raise AuthError("Could not establish a session", status_code=exc.status_code) from exc
        return self._store(session)

    # ─────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────
    def current_profile(self) -> Optional[Profile]:
        return self._profile

    async def establish_session(self) -> UUID:
        self.migrated_from = None
        profile = await self._restore()
        if profile is None:
            return (await self._start_anonymous()).id

        if not profile.is_anonymous:
            await self._run_pending_migration(profile.id)
            if not profile.display_name:
                await self._backfill_display_name(profile)
        return profile.id

    async def _run_pending_migration(self, user_id: UUID) -> None:
        old_id = self._pending_migration()
        if old_id is None:
            return
        self.migrated_from = old_id
        try:
            if old_id != user_id:
                await self.migration.migrate(old_id, user_id)
        except MigrationError as exc:
            logger.error("Migration %s → %s failed: %s", old_id, user_id, exc.message)
            self.notifier("We couldn't move your saved titles to your account.")
        finally:
            # One attempt only; a permanently failing migration must not loop.
            self.storage.remove(PENDING_MIGRATION_KEY)

    async def _backfill_display_name(self, profile: Profile) -> None:
        name = derive_display_name(profile.email)
        try:
            self._profile = await self.api.update_profile(name)
        except AppException as exc:
            logger.warning("Display name backfill failed: %s", exc.message)
            self._profile = profile.model_copy(update={"display_name": name})

    async def begin_email_sign_in(self, email: str) -> None:
        email = (email or "").strip()
        if "@" not in email:
            raise AuthError("Invalid email address", status_code=422)
        if self._profile is not None and self._profile.is_anonymous:
            self.storage.set(PENDING_MIGRATION_KEY, str(self._profile.id))
        try:
            await self.api.request_magic_link(email)
        except AuthError:
            raise
        except AppException as exc:
            raise AuthError(exc.message, status_code=exc.status_code, details=exc.details) from exc

    async def complete_email_sign_in(self, token: str) -> Profile:
        """Swap the magic-link token for an authenticated session; migration runs on the next check."""
        try:
            session = await self.api.verify_magic_link(token)
        except AuthError:
            raise
        except AppException as exc:
            raise AuthError(exc.message, status_code=exc.status_code, details=exc.details) from exc
        return self._store(session)

    async def sign_out(self) -> UUID:
        if self.api.token:
            try:
                await self.api.logout()
            except AppException as exc:
                logger.info("Logout call failed (ignored): %s", exc.message)
        self._forget()
        self.storage.remove(PENDING_MIGRATION_KEY)
        return await self.establish_session()
