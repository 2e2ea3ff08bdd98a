"""Pydantic schemas for registration and login."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    username: str | None = None


class LoginRequest(BaseModel):
    username: str | None = None


class RegisterResponse(BaseModel):
    id: str
    username: str


class UserResponse(BaseModel):
    id: str
    username: str
    created_at: datetime | None = None
