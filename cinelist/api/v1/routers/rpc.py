# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ Cinelist · RPC (atomic procedures)                                        ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║  - POST /rpc/get_list_name      → Name preview before joining             ║
# ║  - POST /rpc/migrate_user_data  → Anonymous → authenticated transfer      ║
# ╚══════════════════════════════════════════════════════════════════════════╝
"""Callable procedures; each runs in its own transaction."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cinelist.api.http_utils import json_no_store, log_user_action
from cinelist.core.security import get_current_user
from cinelist.db.models.user import User
from cinelist.db.session import get_async_db
from cinelist.schemas.lists import ListName, ListNameRequest, MigrateRequest, MigrationResult
from cinelist.services import list_service, migration_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rpc", tags=["RPC"])


@router.post("/get_list_name", response_model=ListName)
async def get_list_name(
    payload: ListNameRequest,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    name = await list_service.get_list_name(db, payload.list_id)
    return json_no_store(ListName(id=payload.list_id, name=name))


@router.post("/migrate_user_data", response_model=MigrationResult)
async def migrate_user_data(
    payload: MigrateRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    # The transfer expires every loaded instance, `user` included.
    user_id = user.id
    counts = await migration_service.migrate_user_data(db, user, payload.old_user_id, payload.new_user_id)
    log_user_action(request, user_id, "migrate_user_data", old=payload.old_user_id, migrated=counts is not None)
    return json_no_store(MigrationResult(migrated=counts is not None, counts=counts or {}))
