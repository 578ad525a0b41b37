# cinelist/services/sharing.py
from __future__ import annotations

"""
Invite links for shared lists.

Invite URLs carry the role in plaintext: `/lists/{id}/join?role={editor|viewer}`.
Anyone holding the link can join with that role; `owner` can never be granted
this way because unknown or missing roles parse as `viewer`.
"""

from typing import Any, Optional
from urllib.parse import parse_qs, urlencode, urlparse
from uuid import UUID

from cinelist.core.config import settings
from cinelist.schemas.enums import InviteRole


def parse_invite_role(value: Any) -> InviteRole:
    """`editor`/`viewer` (case-insensitive); anything else is `viewer`."""
    return InviteRole.parse(value)


def build_invite_url(list_id: UUID | str, role: InviteRole | str, *, base_url: Optional[str] = None) -> str:
    """Deterministic function of `(list_id, role)`."""
    base = (base_url or settings.public_base_url_str).rstrip("/")
    return f"{base}/lists/{list_id}/join?{urlencode({'role': parse_invite_role(role).value})}"


def parse_invite_url(url: str) -> tuple[UUID, InviteRole]:
    """Extract `(list_id, role)` from an invite URL; raises `ValueError` if it is not one."""
    parsed = urlparse(url)
    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) < 3 or parts[-1] != "join" or parts[-3] != "lists":
        raise ValueError(f"not an invite url: {url!r}")
    role = parse_qs(parsed.query).get("role", [None])[0]
    return UUID(parts[-2]), parse_invite_role(role)


__all__ = ["parse_invite_role", "build_invite_url", "parse_invite_url"]
