from __future__ import annotations

"""
📋 Cinelist — List, ListMember, ListItem (shared lists)
======================================================

A custom list with role-scoped memberships and its content items.

Design highlights
-----------------
• **Owner membership** is created in the same transaction as the list; the
  partial unique index below keeps at most one `owner` row per list.
• **Composite PK** `(list_id, user_id)` on memberships: one membership per user.
• **No uniqueness** on `(list_id, content_id, content_type)`: duplicates are
  allowed and readers take the earliest row.
• Deleting a list cascades to memberships and items (`ondelete="CASCADE"`).
"""

from uuid import uuid4

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import relationship

from cinelist.db.base_class import Base, utcnow
from cinelist.schemas.enums import ListRole, MediaType, enum_values


class List(Base):
    __tablename__ = "lists"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(200), nullable=False)
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    # ── Relationships ───────────────────────────────────────────────────────
    members = relationship(
        "ListMember",
        back_populates="list",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    items = relationship(
        "ListItem",
        back_populates="list",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ListItem.created_at",
    )


class ListMember(Base):
    __tablename__ = "list_members"

    # ── Composite identity ──────────────────────────────────────────────────
    list_id = Column(Uuid, ForeignKey("lists.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)

    role = Column(
        Enum(ListRole, name="list_role", native_enum=False, length=16, values_callable=enum_values),
        nullable=False,
    )
    member_name = Column(String(120), nullable=True, doc="Display label; may be backfilled from the profile.")
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    list = relationship("List", back_populates="members")

    __table_args__ = (
        Index(
            "uq_list_members_one_owner",
            "list_id",
            unique=True,
            postgresql_where=text("role = 'owner'"),
            sqlite_where=text("role = 'owner'"),
        ),
    )


class ListItem(Base):
    __tablename__ = "list_items"

    id = Column(Uuid, primary_key=True, default=uuid4)
    list_id = Column(Uuid, ForeignKey("lists.id", ondelete="CASCADE"), nullable=False, index=True)
    content_id = Column(Integer, nullable=False, doc="Content provider id.")
    content_type = Column(
        Enum(MediaType, name="media_type", native_enum=False, length=8, values_callable=enum_values),
        nullable=False,
    )
    added_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    list = relationship("List", back_populates="items")

    __table_args__ = (
        Index("ix_list_items_content", "content_id", "content_type"),
    )


__all__ = ["List", "ListMember", "ListItem"]
