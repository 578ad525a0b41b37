from __future__ import annotations

"""
Central enum definitions used across Cinelist.

Design notes
------------
• All enums subclass `str, PyEnum` for JSON-friendly serialization.
• VALUE STRINGS are **stable** once deployed (rows and invite URLs depend on them).
"""

from enum import Enum as PyEnum
from typing import Any


# ──────────────────────────────────────────────────────────────
# Lists
# ──────────────────────────────────────────────────────────────
class ListRole(str, PyEnum):
    """Caller's access level on a list, derived from the membership row."""
    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"

    @property
    def can_edit_items(self) -> bool:
        return self in (ListRole.OWNER, ListRole.EDITOR)

    @property
    def can_manage_list(self) -> bool:
        return self is ListRole.OWNER


class InviteRole(str, PyEnum):
    """Roles that may be granted through an invite link (never `owner`)."""
    EDITOR = "editor"
    VIEWER = "viewer"

    @classmethod
    def parse(cls, value: Any) -> "InviteRole":
        """Unrecognized or missing values fall back to `viewer`."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.VIEWER


# ──────────────────────────────────────────────────────────────
# Content
# ──────────────────────────────────────────────────────────────
class MediaType(str, PyEnum):
    """Content provider media kinds we store."""
    MOVIE = "movie"
    TV = "tv"


def enum_values(enum_cls) -> list[str]:
    """`values_callable` for SQLAlchemy `Enum` columns (store values, not names)."""
    return [m.value for m in enum_cls]


__all__ = ["ListRole", "InviteRole", "MediaType", "enum_values"]
