# cinelist/client/migration.py
from __future__ import annotations

"""Client side of the anonymous → authenticated data transfer."""

import logging
from typing import Optional
from uuid import UUID

from cinelist.client.api import ApiClient
from cinelist.core.exceptions import AppException, MigrationError
from cinelist.schemas.lists import MigrationResult

logger = logging.getLogger(__name__)

__all__ = ["MigrationService"]


class MigrationService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def migrate(self, old_user_id: Optional[UUID], new_user_id: Optional[UUID]) -> Optional[MigrationResult]:
        """Move every row owned by `old_user_id` to `new_user_id` in one remote transaction.

        Returns None (and makes no call) when either id is missing or both are
        equal. Any failure is raised as `MigrationError`; the server guarantees
        nothing was moved in that case.
        """
        if not old_user_id or not new_user_id or old_user_id == new_user_id:
            return None
        try:
            result = await self.api.migrate_user_data(old_user_id, new_user_id)
        except MigrationError:
            raise
        except AppException as exc:
            raise MigrationError(exc.message, status_code=exc.status_code, details=exc.details) from exc
        logger.info("Migrated %s → %s: %s", old_user_id, new_user_id, result.counts)
        return result
