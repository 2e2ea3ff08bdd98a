"""ORM models for users, groups, memberships, tracked sites, streaks and violations."""

from __future__ import annotations

import secrets
from datetime import datetime, timezone

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from lockedin.db.base import Base, UTCDateTime


def new_id() -> str:
    """Opaque 16-hex-char identifier."""
    return secrets.token_hex(8)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table. Usernames are stored lowercase."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(16), primary_key=True, default=new_id)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------


class Group(Base):
    """An accountability group. Joined via its invite code."""

    __tablename__ = "groups"

    id: Mapped[str] = mapped_column(String(16), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    invite_code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(16), ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


class GroupMember(Base):
    """Membership: one row per (group, user)."""

    __tablename__ = "group_members"

    group_id: Mapped[str] = mapped_column(
        String(16), ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(
        String(16), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    joined_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


class TrackedSite(Base):
    """A normalized domain that a group monitors."""

    __tablename__ = "tracked_sites"

    group_id: Mapped[str] = mapped_column(
        String(16), ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True
    )
    domain: Mapped[str] = mapped_column(String(253), primary_key=True, index=True)


# ---------------------------------------------------------------------------
# Accountability
# ---------------------------------------------------------------------------


class Streak(Base):
    """Current clean interval of one member in one group. broken_at NULL = alive."""

    __tablename__ = "streaks"

    group_id: Mapped[str] = mapped_column(
        String(16), ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(
        String(16), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    started_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    broken_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)


class Violation(Base):
    """Append-only record of one detected visit in one group."""

    __tablename__ = "violations"
    __table_args__ = (Index("idx_violations_group_user", "group_id", "user_id"),)

    id: Mapped[str] = mapped_column(String(16), primary_key=True, default=new_id)
    group_id: Mapped[str] = mapped_column(String(16), ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[str] = mapped_column(String(16), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    domain: Mapped[str] = mapped_column(String(253), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
