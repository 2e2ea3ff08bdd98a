"""Leaderboard and streak reset endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lockedin.database import get_session
from lockedin.groups.service import get_tracked_sites
from lockedin.streaks.schemas import (
    LeaderboardMemberResponse,
    LeaderboardResponse,
    ResetStreakRequest,
    ResetStreakResponse,
)
from lockedin.streaks.service import get_leaderboard, reset_streak

router = APIRouter(prefix="/api", tags=["Streaks"])


@router.get("/leaderboard/{group_id}", response_model=LeaderboardResponse)
async def leaderboard_endpoint(
    group_id: str,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> LeaderboardResponse:
    """Group standings plus the sites the group tracks."""
    entries = await get_leaderboard(db, group_id)
    sites = await get_tracked_sites(db, group_id)
    members = [
        LeaderboardMemberResponse(
            id=e.user_id,
            username=e.username,
            started_at=e.started_at,
            broken_at=e.broken_at,
            last_violation=e.last_violation,
            active=e.active,
        )
        for e in entries
    ]
    return LeaderboardResponse(members=members, sites=sites)


@router.post("/reset-streak", response_model=ResetStreakResponse)
async def reset_streak_endpoint(
    body: ResetStreakRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> ResetStreakResponse:
    """Start the caller's streak over in one group."""
    await reset_streak(db, body.group_id, body.user_id)
    await db.commit()
    return ResetStreakResponse(ok=True)
