"""Update recipient endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_db
from services.recipients import resolve_recipients

from .schemas import RecipientsRequest, RecipientsResponse

router = APIRouter(tags=["recipients"])


@router.post("/recipients", response_model=RecipientsResponse)
async def recipients(
    payload: RecipientsRequest,
    session: AsyncSession = Depends(get_db),
) -> RecipientsResponse:
    users = await resolve_recipients(session, sender_email=payload.sender, text=payload.text)
    return RecipientsResponse(recipients=[user.email for user in users])
