"""Pydantic schemas for the visit report endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ViolationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    domain: str


class ViolationResponse(BaseModel):
    busted: bool
    groups: int
