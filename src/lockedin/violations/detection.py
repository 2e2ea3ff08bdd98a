"""Visit detection: turn one reported page visit into busts.

For every group the visitor belongs to that tracks the visited domain:
append a violation, break the visitor's streak, commit, then push a
``violation`` event to everyone watching that group. Groups are
independent units of work; a storage failure in one group is rolled back
and logged, and the remaining groups are still processed and notified.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lockedin.db.models import utcnow
from lockedin.groups.domains import normalize_domain
from lockedin.groups.service import matching_groups
from lockedin.streaks.service import record_break
from lockedin.users.service import get_user
from lockedin.violations.recorder import record_violation
from lockedin.ws.manager import GroupBroadcaster

logger = structlog.get_logger()

VIOLATION_EVENT = "violation"


@dataclass(frozen=True)
class VisitResult:
    busted: bool
    groups: int


async def report_visit(
    db: AsyncSession,
    broadcaster: GroupBroadcaster,
    user_id: str,
    domain: str,
) -> VisitResult:
    """Record a visit to ``domain`` by ``user_id`` in every group that tracks it."""
    domain = normalize_domain(domain)
    groups = await matching_groups(db, user_id, domain)
    if not groups:
        return VisitResult(busted=False, groups=0)

    user = await get_user(db, user_id)
    username = user.username if user else None
    # Plain values: a rollback below expires ORM instances.
    targets = [(group.id, group.name) for group in groups]

    for group_id, group_name in targets:
        now = utcnow()
        try:
            await record_violation(db, group_id, user_id, domain, now)
            await record_break(db, group_id, user_id, now)
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("violation_persist_failed", group_id=group_id, user_id=user_id, domain=domain)
            continue

        delivered = await broadcaster.publish(
            group_id,
            VIOLATION_EVENT,
            {
                "username": username,
                "domain": domain,
                "groupName": group_name,
                "groupId": group_id,
            },
        )
        logger.info(
            "violation_recorded",
            group_id=group_id,
            user_id=user_id,
            domain=domain,
            delivered=delivered,
        )

    return VisitResult(busted=True, groups=len(targets))
