"""Friendship, subscription and block operations addressed by email."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import BlockedError, BusinessRuleError
from models import User
from services.block_guard import is_blocked_either_way
from services.relationship_store import (
    atomic,
    canonical_pair,
    delete_friendship,
    delete_subscription,
    find_user_by_email,
    friends_of,
    insert_block,
    insert_friendship,
    insert_subscription,
)

logger = logging.getLogger(__name__)


def _require_user_id(user: User) -> int:
    if user.id is None:
        raise ValueError("User record missing identifier")
    return user.id


async def _resolve_pair(
    session: AsyncSession,
    first_email: str,
    second_email: str,
) -> tuple[User, User]:
    first = await find_user_by_email(session, first_email)
    second = await find_user_by_email(session, second_email)
    return first, second


async def create_friendship(
    session: AsyncSession,
    *,
    first_email: str,
    second_email: str,
) -> None:
    if first_email == second_email:
        raise BusinessRuleError("Cannot add yourself as a friend")

    first, second = await _resolve_pair(session, first_email, second_email)
    first_id = _require_user_id(first)
    second_id = _require_user_id(second)

    user1_id, user2_id = canonical_pair(first_id, second_id)
    async with atomic(session):
        if await is_blocked_either_way(session, user_id=first_id, other_user_id=second_id):
            logger.info("Friendship refused, users %s and %s are blocked", first_id, second_id)
            raise BlockedError()
        await insert_friendship(session, user1_id=user1_id, user2_id=user2_id)
    logger.info("Friendship created between users %s and %s", user1_id, user2_id)


async def create_subscription(
    session: AsyncSession,
    *,
    requestor_email: str,
    target_email: str,
) -> None:
    requestor, target = await _resolve_pair(session, requestor_email, target_email)
    requestor_id = _require_user_id(requestor)
    target_id = _require_user_id(target)

    async with atomic(session):
        if await is_blocked_either_way(session, user_id=requestor_id, other_user_id=target_id):
            logger.info(
                "Subscription refused, users %s and %s are blocked", requestor_id, target_id
            )
            raise BlockedError()
        await insert_subscription(
            session,
            subscriber_id=requestor_id,
            target_id=target_id,
        )
    logger.info("User %s subscribed to user %s", requestor_id, target_id)


async def create_block(
    session: AsyncSession,
    *,
    requestor_email: str,
    target_email: str,
) -> None:
    """Block ``target`` for ``requestor`` and sever every edge between them.

    The friendship and both subscription directions are removed and the block
    recorded in one transaction; if any step fails none of it is applied.
    """
    requestor, target = await _resolve_pair(session, requestor_email, target_email)
    blocker_id = _require_user_id(requestor)
    blocked_id = _require_user_id(target)

    user1_id, user2_id = canonical_pair(blocker_id, blocked_id)
    async with atomic(session):
        await delete_friendship(session, user1_id=user1_id, user2_id=user2_id)
        await delete_subscription(
            session,
            subscriber_id=blocker_id,
            target_id=blocked_id,
        )
        await delete_subscription(
            session,
            subscriber_id=blocked_id,
            target_id=blocker_id,
        )
        await insert_block(session, blocker_id=blocker_id, blocked_id=blocked_id)
    logger.info("User %s blocked user %s", blocker_id, blocked_id)


async def get_friend_list(session: AsyncSession, *, email: str) -> list[User]:
    user = await find_user_by_email(session, email)
    return await friends_of(session, _require_user_id(user))


async def get_common_friends(
    session: AsyncSession,
    *,
    first_email: str,
    second_email: str,
) -> list[User]:
    """Return the friends both users share, sorted by email."""
    if first_email == second_email:
        raise BusinessRuleError("Cannot get common friends with yourself")

    first, second = await _resolve_pair(session, first_email, second_email)
    first_friends = await friends_of(session, _require_user_id(first))
    second_friend_ids = {
        friend.id for friend in await friends_of(session, _require_user_id(second))
    }

    common: dict[int | None, User] = {}
    for friend in first_friends:
        if friend.id in second_friend_ids:
            common[friend.id] = friend
    return sorted(common.values(), key=lambda user: user.email)


__all__ = [
    "create_block",
    "create_friendship",
    "create_subscription",
    "get_common_friends",
    "get_friend_list",
]
