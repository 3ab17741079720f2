"""Subscription and block endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_db
from services.block_guard import get_block_state
from services.relationship_store import find_user_by_email
from services.social_graph import create_block, create_subscription

from .schemas import BlockRequest, BlockStatusResponse, MutationResponse, SubscriptionRequest

router = APIRouter(tags=["relationships"])


@router.post(
    "/subscriptions",
    response_model=MutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def subscribe(
    payload: SubscriptionRequest,
    session: AsyncSession = Depends(get_db),
) -> MutationResponse:
    await create_subscription(
        session,
        requestor_email=payload.requestor,
        target_email=payload.target,
    )
    return MutationResponse(message="Subscription created successfully")


@router.post(
    "/blocks",
    response_model=MutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def block(
    payload: BlockRequest,
    session: AsyncSession = Depends(get_db),
) -> MutationResponse:
    await create_block(
        session,
        requestor_email=payload.requestor,
        target_email=payload.target,
    )
    return MutationResponse(message="User blocked successfully")


@router.post("/blocks/status", response_model=BlockStatusResponse)
async def block_status(
    payload: BlockRequest,
    session: AsyncSession = Depends(get_db),
) -> BlockStatusResponse:
    requestor = await find_user_by_email(session, payload.requestor)
    target = await find_user_by_email(session, payload.target)
    if requestor.id is None or target.id is None:
        raise ValueError("User record missing identifier")

    state = await get_block_state(session, viewer_id=requestor.id, target_id=target.id)
    return BlockStatusResponse(
        is_blocked=state.is_blocked,
        is_blocked_by=state.is_blocked_by,
    )
