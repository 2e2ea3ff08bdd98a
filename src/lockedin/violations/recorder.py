"""Violation log: append-only audit trail of detected visits.

Writes come from visit detection. The read side is ``last_violation_select``
(shared with the leaderboard) and ``list_violations``, the per-group audit query.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lockedin.db.models import Violation, new_id, utcnow


async def record_violation(
    db: AsyncSession,
    group_id: str,
    user_id: str,
    domain: str,
    at: datetime | None = None,
) -> Violation:
    """Append one violation row. Repeat visits always produce new rows."""
    violation = Violation(
        id=new_id(),
        group_id=group_id,
        user_id=user_id,
        domain=domain,
        created_at=at or utcnow(),
    )
    db.add(violation)
    await db.flush()
    return violation


def last_violation_select(group_id: str, user_id: str | ColumnElement[str]) -> Select[tuple[datetime | None]]:
    """``max(created_at)`` of one member's violations in a group.

    ``user_id`` may be a column, in which case the caller correlates it as a scalar subquery.
    """
    return select(func.max(Violation.created_at)).where(
        Violation.group_id == group_id,
        Violation.user_id == user_id,
    )


async def last_violation_at(db: AsyncSession, group_id: str, user_id: str) -> datetime | None:
    result = await db.execute(last_violation_select(group_id, user_id))
    return result.scalar_one_or_none()


async def list_violations(db: AsyncSession, group_id: str, user_id: str | None = None) -> list[Violation]:
    """Violations in a group, oldest first, optionally for one member."""
    stmt = select(Violation).where(Violation.group_id == group_id)
    if user_id is not None:
        stmt = stmt.where(Violation.user_id == user_id)
    result = await db.execute(stmt.order_by(Violation.created_at.asc()))
    return list(result.scalars().all())
