"""Streak tracking: per (group, member) clean-interval state.

States:
    Active  -- broken_at is NULL (initial state, set when the membership is created)
    Broken  -- broken_at holds the time of the most recent violation

Transitions:
    record_break: Active -> Broken, or Broken -> Broken with a newer broken_at.
                  started_at is kept so the interval that just ended stays visible.
    reset_streak: any -> Active, started_at rewound to the reset time.

Only the current interval is stored; earlier intervals are overwritten.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lockedin.db.models import GroupMember, Streak, User, utcnow
from lockedin.violations.recorder import last_violation_select

logger = structlog.get_logger()


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: str
    username: str
    started_at: datetime | None
    broken_at: datetime | None
    last_violation: datetime | None

    @property
    def active(self) -> bool:
        return self.broken_at is None


async def get_streak(db: AsyncSession, group_id: str, user_id: str) -> Streak | None:
    """Get the streak row for one member of one group."""
    result = await db.execute(
        select(Streak).where(Streak.group_id == group_id, Streak.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def record_break(
    db: AsyncSession,
    group_id: str,
    user_id: str,
    at: datetime | None = None,
) -> bool:
    """Mark the streak broken at ``at``. Safe to repeat; the latest break time wins.

    Returns False if the member has no streak row in this group.
    """
    at = at or utcnow()
    result = await db.execute(
        update(Streak)
        .where(Streak.group_id == group_id, Streak.user_id == user_id)
        .values(broken_at=at)
    )
    return result.rowcount > 0


async def reset_streak(
    db: AsyncSession,
    group_id: str,
    user_id: str,
    at: datetime | None = None,
) -> bool:
    """Start a fresh streak: started_at = ``at``, broken_at cleared.

    Always rewrites started_at, even on a streak that is still active.
    Returns False if the member has no streak row in this group.
    """
    at = at or utcnow()
    result = await db.execute(
        update(Streak)
        .where(Streak.group_id == group_id, Streak.user_id == user_id)
        .values(started_at=at, broken_at=None)
    )
    updated = result.rowcount > 0
    if updated:
        logger.info("streak_reset", group_id=group_id, user_id=user_id)
    else:
        logger.info("streak_reset_no_membership", group_id=group_id, user_id=user_id)
    return updated


async def get_leaderboard(db: AsyncSession, group_id: str) -> list[LeaderboardEntry]:
    """Members of a group, unbroken streaks first, then longest-running first."""
    last_violation = last_violation_select(group_id, User.id).correlate(User).scalar_subquery()
    result = await db.execute(
        select(
            User.id,
            User.username,
            Streak.started_at,
            Streak.broken_at,
            last_violation.label("last_violation"),
        )
        .select_from(GroupMember)
        .join(User, User.id == GroupMember.user_id)
        .outerjoin(
            Streak,
            and_(Streak.user_id == GroupMember.user_id, Streak.group_id == GroupMember.group_id),
        )
        .where(GroupMember.group_id == group_id)
        .order_by(
            Streak.broken_at.is_(None).desc(),
            Streak.started_at.asc(),
            User.username.asc(),
        )
    )
    return [
        LeaderboardEntry(
            user_id=row.id,
            username=row.username,
            started_at=row.started_at,
            broken_at=row.broken_at,
            last_violation=row.last_violation,
        )
        for row in result
    ]
