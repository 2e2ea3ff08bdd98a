"""Group endpoints: create, join by invite code, list a user's groups."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lockedin.database import get_session
from lockedin.db.models import Group
from lockedin.groups.schemas import (
    CreateGroupRequest,
    CreateGroupResponse,
    GroupResponse,
    JoinGroupRequest,
    MemberGroupResponse,
)
from lockedin.groups.service import create_group, join_group, list_groups_for_user

router = APIRouter(prefix="/api", tags=["Groups"])


def _build_group_response(group: Group) -> GroupResponse:
    return GroupResponse(
        id=group.id,
        name=group.name,
        invite_code=group.invite_code,
        created_by=group.created_by,
        created_at=group.created_at,
    )


@router.post("/groups", response_model=CreateGroupResponse)
async def create_group_endpoint(
    body: CreateGroupRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> CreateGroupResponse:
    """Create a group. The creator becomes its first member."""
    group = await create_group(db, body.name, body.user_id, body.sites)
    await db.commit()
    return CreateGroupResponse(id=group.id, name=group.name, invite_code=group.invite_code)


@router.post("/groups/join", response_model=GroupResponse)
async def join_group_endpoint(
    body: JoinGroupRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> GroupResponse:
    """Join a group via invite code. Re-joining returns the group unchanged."""
    group = await join_group(db, body.code, body.user_id)
    await db.commit()
    return _build_group_response(group)


@router.get("/groups/{user_id}", response_model=list[MemberGroupResponse])
async def list_groups_endpoint(
    user_id: str,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> list[MemberGroupResponse]:
    """Groups the user belongs to."""
    rows = await list_groups_for_user(db, user_id)
    return [
        MemberGroupResponse(**_build_group_response(group).model_dump(), joined_at=joined_at)
        for group, joined_at in rows
    ]
