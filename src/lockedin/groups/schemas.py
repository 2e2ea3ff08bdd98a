"""Pydantic schemas for group endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CreateGroupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=64)
    user_id: str = Field(..., alias="userId")
    sites: list[str] = Field(default_factory=list)


class JoinGroupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str
    user_id: str = Field(..., alias="userId")


class CreateGroupResponse(BaseModel):
    id: str
    name: str
    invite_code: str


class GroupResponse(BaseModel):
    id: str
    name: str
    invite_code: str
    created_by: str | None = None
    created_at: datetime | None = None


class MemberGroupResponse(GroupResponse):
    joined_at: datetime | None = None
