"""Visit report endpoint called by the browser extension."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lockedin.database import get_session
from lockedin.dependencies import get_broadcaster
from lockedin.violations.detection import report_visit
from lockedin.violations.schemas import ViolationRequest, ViolationResponse
from lockedin.ws.manager import GroupBroadcaster

router = APIRouter(prefix="/api", tags=["Violations"])


@router.post("/violation", response_model=ViolationResponse)
async def violation_endpoint(
    body: ViolationRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
    broadcaster: GroupBroadcaster = Depends(get_broadcaster),  # noqa: B008
) -> ViolationResponse:
    """Report a visit to a tracked domain; busts the user in every matching group."""
    result = await report_visit(db, broadcaster, body.user_id, body.domain)
    return ViolationResponse(busted=result.busted, groups=result.groups)
