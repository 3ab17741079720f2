"""Persistence primitives for users and the three relationship tables.

Inserts go straight to the database and let its uniqueness constraints decide;
a duplicate surfaces as :class:`ConflictError`, anything else the database
rejects as :class:`DatabaseError`. Mutations never commit on their own: callers
group them with :func:`atomic`.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable, Sequence
from contextlib import asynccontextmanager
from typing import Any, cast

from sqlalchemy import and_, delete, insert, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from core.errors import ConflictError, DatabaseError, GraphError, UserNotFoundError
from db.errors import conflict_details, is_foreign_key_violation, is_unique_violation
from models import Friendship, Subscription, User, UserBlock

logger = logging.getLogger(__name__)


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _in(column: Any, values: Iterable[Any]) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column.in_(list(values)))


def canonical_pair(first_id: int, second_id: int) -> tuple[int, int]:
    """Order an unordered pair so the lower id comes first."""
    return (first_id, second_id) if first_id < second_id else (second_id, first_id)


def classify_store_error(error: SQLAlchemyError, *, action: str) -> GraphError:
    """Map a SQLAlchemy failure onto the error kind callers see."""
    if isinstance(error, IntegrityError):
        if is_unique_violation(error):
            return ConflictError(conflict_details(error))
        if is_foreign_key_violation(error):
            return DatabaseError(
                f"Failed to {action}",
                details="Referenced user does not exist",
            )
    return DatabaseError(f"Failed to {action}", details=str(getattr(error, "orig", error)))


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run the enclosed mutations as one transaction.

    Commits when the block exits cleanly. On any failure the transaction is
    rolled back; graph errors propagate unchanged and raw SQLAlchemy errors
    (including those raised by the commit itself) are classified first.
    """
    try:
        yield session
        await session.commit()
    except GraphError:
        await session.rollback()
        raise
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.warning("Transaction rolled back on commit failure: %s", exc)
        raise classify_store_error(exc, action="commit transaction") from exc


async def _execute(session: AsyncSession, statement: Any, *, action: str) -> Any:
    try:
        return await session.execute(statement)
    except SQLAlchemyError as exc:
        raise classify_store_error(exc, action=action) from exc


async def find_user_by_email(session: AsyncSession, email: str) -> User:
    result = await _execute(
        session,
        select(User).where(_eq(User.email, email)),
        action="fetch user",
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise UserNotFoundError(f"User not found: {email}")
    return user


async def find_users_by_emails(
    session: AsyncSession,
    emails: Iterable[str],
) -> list[User]:
    """Return the users whose email is in ``emails``; misses are skipped."""
    unique_emails = list(dict.fromkeys(emails))
    if not unique_emails:
        return []
    result = await _execute(
        session,
        select(User).where(_in(User.email, unique_emails)),
        action="fetch users by emails",
    )
    return list(result.scalars().all())


async def insert_friendship(
    session: AsyncSession,
    *,
    user1_id: int,
    user2_id: int,
) -> None:
    """Insert a canonical friendship row; ``user1_id`` must be the lower id."""
    await _execute(
        session,
        insert(Friendship).values(user1_id=user1_id, user2_id=user2_id),
        action="create friendship",
    )


async def delete_friendship(
    session: AsyncSession,
    *,
    user1_id: int,
    user2_id: int,
) -> int:
    result = await _execute(
        session,
        delete(Friendship).where(
            _eq(Friendship.user1_id, user1_id),
            _eq(Friendship.user2_id, user2_id),
        ),
        action="delete friendship",
    )
    return result.rowcount or 0


async def insert_subscription(
    session: AsyncSession,
    *,
    subscriber_id: int,
    target_id: int,
) -> None:
    await _execute(
        session,
        insert(Subscription).values(subscriber_id=subscriber_id, target_id=target_id),
        action="create subscription",
    )


async def delete_subscription(
    session: AsyncSession,
    *,
    subscriber_id: int,
    target_id: int,
) -> int:
    result = await _execute(
        session,
        delete(Subscription).where(
            _eq(Subscription.subscriber_id, subscriber_id),
            _eq(Subscription.target_id, target_id),
        ),
        action="delete subscription",
    )
    return result.rowcount or 0


async def insert_block(
    session: AsyncSession,
    *,
    blocker_id: int,
    blocked_id: int,
) -> None:
    await _execute(
        session,
        insert(UserBlock).values(blocker_id=blocker_id, blocked_id=blocked_id),
        action="create block",
    )


async def block_exists(
    session: AsyncSession,
    *,
    blocker_id: int,
    blocked_id: int,
) -> bool:
    result = await _execute(
        session,
        select(UserBlock.blocker_id).where(
            _eq(UserBlock.blocker_id, blocker_id),
            _eq(UserBlock.blocked_id, blocked_id),
        ),
        action="check block existence",
    )
    return result.first() is not None


async def blocks_between(
    session: AsyncSession,
    *,
    user_id: int,
    candidate_ids: Sequence[int],
) -> list[UserBlock]:
    """Return every block row between ``user_id`` and any candidate, either way.

    Issues one query regardless of how many candidates are given.
    """
    if not candidate_ids:
        return []
    result = await _execute(
        session,
        select(UserBlock).where(
            or_(
                and_(
                    _eq(UserBlock.blocker_id, user_id),
                    _in(UserBlock.blocked_id, candidate_ids),
                ),
                and_(
                    _in(UserBlock.blocker_id, candidate_ids),
                    _eq(UserBlock.blocked_id, user_id),
                ),
            )
        ),
        action="check bidirectional blocks",
    )
    return list(result.scalars().all())


async def friends_of(session: AsyncSession, user_id: int) -> list[User]:
    """Return the user's friends from both row orientations, ordered by email."""
    result = await _execute(
        session,
        select(User)
        .join(
            Friendship,
            or_(
                and_(
                    _eq(Friendship.user1_id, user_id),
                    _eq(Friendship.user2_id, User.id),
                ),
                and_(
                    _eq(Friendship.user2_id, user_id),
                    _eq(Friendship.user1_id, User.id),
                ),
            ),
        )
        .where(~_eq(User.id, user_id))
        .distinct()
        .order_by(User.email),
        action="fetch friends",
    )
    return list(result.scalars().all())


async def subscribers_of(session: AsyncSession, user_id: int) -> list[User]:
    result = await _execute(
        session,
        select(User)
        .join(Subscription, _eq(Subscription.subscriber_id, User.id))
        .where(_eq(Subscription.target_id, user_id))
        .order_by(User.email),
        action="fetch subscribers",
    )
    return list(result.scalars().all())


__all__ = [
    "atomic",
    "block_exists",
    "blocks_between",
    "canonical_pair",
    "classify_store_error",
    "delete_friendship",
    "delete_subscription",
    "find_user_by_email",
    "find_users_by_emails",
    "friends_of",
    "insert_block",
    "insert_friendship",
    "insert_subscription",
    "subscribers_of",
]
