"""Group registry business logic.

Rules:
- Creating a group also creates the creator's membership and streak
- Invite codes are server-generated and unique; a collision is retried, never surfaced
- Joining twice is harmless: the duplicate insert is swallowed and the streak is left alone
- Every membership has exactly one streak, written in the same transaction
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lockedin.config import get_settings
from lockedin.db.models import Group, GroupMember, Streak, TrackedSite, new_id, utcnow
from lockedin.exceptions import NotFoundError
from lockedin.groups.domains import normalize_domain, normalize_sites
from lockedin.groups.invite_codes import generate_unique_invite_code, normalize_invite_code
from lockedin.users.service import get_user

logger = structlog.get_logger()


async def get_group(db: AsyncSession, group_id: str) -> Group | None:
    """Get a group by ID."""
    result = await db.execute(select(Group).where(Group.id == group_id))
    return result.scalar_one_or_none()


async def get_group_by_code(db: AsyncSession, code: str | None) -> Group | None:
    """Get a group by invite code (case-insensitive)."""
    result = await db.execute(select(Group).where(Group.invite_code == normalize_invite_code(code)))
    return result.scalar_one_or_none()


async def create_group(
    db: AsyncSession,
    name: str,
    creator_id: str,
    sites: Iterable[str] | None = None,
) -> Group:
    """Create a group with its tracked sites; the creator joins with a fresh streak.

    Everything is flushed into the session's open transaction; the caller commits.
    """
    if await get_user(db, creator_id) is None:
        msg = "user not found"
        raise NotFoundError(msg)

    domains = normalize_sites(sites)
    attempts = get_settings().invite_code_max_attempts

    for attempt in range(1, attempts + 1):
        now = utcnow()
        group = Group(
            id=new_id(),
            name=name,
            invite_code=await generate_unique_invite_code(db),
            created_by=creator_id,
            created_at=now,
        )
        db.add(group)
        try:
            await db.flush()
        except IntegrityError:
            # Another request claimed the same code between our check and insert.
            await db.rollback()
            logger.warning("invite_code_collision", attempt=attempt)
            continue

        db.add_all([TrackedSite(group_id=group.id, domain=domain) for domain in domains])
        db.add(GroupMember(group_id=group.id, user_id=creator_id, joined_at=now))
        db.add(Streak(group_id=group.id, user_id=creator_id, started_at=now, broken_at=None))
        await db.flush()

        logger.info(
            "group_created",
            group_id=group.id,
            name=name,
            creator_id=creator_id,
            sites=len(domains),
        )
        return group

    msg = f"Could not allocate an invite code after {attempts} attempts"
    raise RuntimeError(msg)


async def join_group(db: AsyncSession, code: str | None, user_id: str) -> Group:
    """Join a group by invite code. Joining a group you are already in is a no-op."""
    group = await get_group_by_code(db, code)
    if group is None:
        msg = "invalid code"
        raise NotFoundError(msg)

    if await get_user(db, user_id) is None:
        msg = "user not found"
        raise NotFoundError(msg)

    group_id = group.id
    now = utcnow()
    db.add(GroupMember(group_id=group_id, user_id=user_id, joined_at=now))
    db.add(Streak(group_id=group_id, user_id=user_id, started_at=now, broken_at=None))
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.debug("join_group_already_member", group_id=group_id, user_id=user_id)
        rejoined = await get_group(db, group_id)
        if rejoined is None:
            msg = "invalid code"
            raise NotFoundError(msg) from None
        return rejoined

    logger.info("group_joined", group_id=group_id, user_id=user_id)
    return group


async def list_groups_for_user(db: AsyncSession, user_id: str) -> list[tuple[Group, datetime]]:
    """All groups the user belongs to, with the time they joined, oldest membership first."""
    result = await db.execute(
        select(Group, GroupMember.joined_at)
        .join(GroupMember, GroupMember.group_id == Group.id)
        .where(GroupMember.user_id == user_id)
        .order_by(GroupMember.joined_at.asc())
    )
    return [(row.Group, row.joined_at) for row in result]


async def matching_groups(db: AsyncSession, user_id: str, domain: str) -> list[Group]:
    """Groups the user is a member of that also track ``domain``.

    Evaluated as a single SELECT so membership and site lists come from one snapshot.
    """
    result = await db.execute(
        select(Group)
        .join(GroupMember, GroupMember.group_id == Group.id)
        .join(TrackedSite, TrackedSite.group_id == Group.id)
        .where(
            GroupMember.user_id == user_id,
            TrackedSite.domain == normalize_domain(domain),
        )
    )
    return list(result.scalars().all())


async def get_tracked_sites(db: AsyncSession, group_id: str) -> list[str]:
    result = await db.execute(
        select(TrackedSite.domain).where(TrackedSite.group_id == group_id).order_by(TrackedSite.domain.asc())
    )
    return list(result.scalars().all())
