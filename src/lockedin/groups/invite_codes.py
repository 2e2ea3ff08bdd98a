"""Invite code generation for groups.

Codes are short alphanumeric strings (A-Z, 0-9), generated server-side
with a cryptographic random source. Lookups are case-insensitive.
"""

from __future__ import annotations

import secrets
import string

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lockedin.config import get_settings
from lockedin.db.models import Group

INVITE_CHARSET = string.ascii_uppercase + string.digits  # A-Z, 0-9


def generate_invite_code(length: int | None = None) -> str:
    """Generate a cryptographically random invite code."""
    if length is None:
        length = get_settings().invite_code_length
    return "".join(secrets.choice(INVITE_CHARSET) for _ in range(length))


def normalize_invite_code(code: str | None) -> str:
    """Normalize an invite code to uppercase for case-insensitive lookup."""
    return (code or "").strip().upper()


async def generate_unique_invite_code(db: AsyncSession) -> str:
    """Generate an invite code that doesn't already exist in the database."""
    attempts = get_settings().invite_code_max_attempts
    for _ in range(attempts):
        code = generate_invite_code()
        existing = await db.execute(select(Group.id).where(Group.invite_code == code))
        if existing.scalar_one_or_none() is None:
            return code
    msg = f"Failed to generate unique invite code after {attempts} attempts"
    raise RuntimeError(msg)
