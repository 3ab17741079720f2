"""Friendship endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_db
from services.social_graph import create_friendship, get_common_friends, get_friend_list

from .schemas import FriendListRequest, FriendListResponse, FriendPairRequest, MutationResponse

router = APIRouter(tags=["friends"])


@router.post(
    "/friends",
    response_model=MutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_friends(
    payload: FriendPairRequest,
    session: AsyncSession = Depends(get_db),
) -> MutationResponse:
    first_email, second_email = payload.friends
    await create_friendship(session, first_email=first_email, second_email=second_email)
    return MutationResponse(message="Friendship created successfully")


@router.post("/friends/list", response_model=FriendListResponse)
async def list_friends(
    payload: FriendListRequest,
    session: AsyncSession = Depends(get_db),
) -> FriendListResponse:
    friends = await get_friend_list(session, email=payload.email)
    emails = [friend.email for friend in friends]
    return FriendListResponse(friends=emails, count=len(emails))


@router.post("/friends/common", response_model=FriendListResponse)
async def list_common_friends(
    payload: FriendPairRequest,
    session: AsyncSession = Depends(get_db),
) -> FriendListResponse:
    first_email, second_email = payload.friends
    friends = await get_common_friends(
        session,
        first_email=first_email,
        second_email=second_email,
    )
    emails = [friend.email for friend in friends]
    return FriendListResponse(friends=emails, count=len(emails))
