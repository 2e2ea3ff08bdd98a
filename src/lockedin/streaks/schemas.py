"""Pydantic schemas for streak and leaderboard endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ResetStreakRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    group_id: str = Field(..., alias="groupId")


class ResetStreakResponse(BaseModel):
    ok: bool = True


class LeaderboardMemberResponse(BaseModel):
    id: str
    username: str
    started_at: datetime | None = None
    broken_at: datetime | None = None
    last_violation: datetime | None = None
    active: bool


class LeaderboardResponse(BaseModel):
    members: list[LeaderboardMemberResponse]
    sites: list[str]
