"""Registration and login endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lockedin.database import get_session
from lockedin.users.schemas import LoginRequest, RegisterRequest, RegisterResponse, UserResponse
from lockedin.users.service import get_user_by_username, register_user

router = APIRouter(prefix="/api", tags=["Users"])


@router.post("/register", response_model=RegisterResponse)
async def register_endpoint(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> RegisterResponse:
    """Create a user. 400 if the username is too short, 409 if it is taken."""
    user = await register_user(db, body.username)
    await db.commit()
    return RegisterResponse(id=user.id, username=user.username)


@router.post("/login", response_model=UserResponse)
async def login_endpoint(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> UserResponse:
    """Look up an existing user by name."""
    user = await get_user_by_username(db, body.username)
    return UserResponse(id=user.id, username=user.username, created_at=user.created_at)
