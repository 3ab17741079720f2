"""Tests for friendship, subscription and block operations."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import (
    BlockedError,
    BusinessRuleError,
    ConflictError,
    ErrorKind,
    UserNotFoundError,
)
from models import Friendship, Subscription, UserBlock
from services import relationship_store as store
from services import social_graph
from services.block_guard import is_blocked_either_way


async def _friendship_rows(session: AsyncSession) -> list[tuple[int, int]]:
    rows = (await session.execute(select(Friendship))).scalars().all()
    return [(row.user1_id, row.user2_id) for row in rows]


async def _subscription_rows(session: AsyncSession) -> set[tuple[int, int]]:
    rows = (await session.execute(select(Subscription))).scalars().all()
    return {(row.subscriber_id, row.target_id) for row in rows}


@pytest.mark.asyncio
async def test_friendship_is_stored_canonically_either_way(make_users, db_session: AsyncSession):
    users = await make_users("first@example.com", "second@example.com")
    low, high = sorted(user.id for user in users.values())

    await social_graph.create_friendship(
        db_session,
        first_email="second@example.com",
        second_email="first@example.com",
    )
    assert await _friendship_rows(db_session) == [(low, high)]

    with pytest.raises(ConflictError) as excinfo:
        await social_graph.create_friendship(
            db_session,
            first_email="first@example.com",
            second_email="second@example.com",
        )
    assert excinfo.value.kind is ErrorKind.CONFLICT
    assert await _friendship_rows(db_session) == [(low, high)]


@pytest.mark.asyncio
async def test_cannot_friend_self_without_touching_store(monkeypatch):
    lookup = AsyncMock()
    monkeypatch.setattr(social_graph, "find_user_by_email", lookup)

    with pytest.raises(BusinessRuleError) as excinfo:
        await social_graph.create_friendship(
            AsyncMock(),
            first_email="same@example.com",
            second_email="same@example.com",
        )
    assert excinfo.value.kind is ErrorKind.BUSINESS
    lookup.assert_not_awaited()


@pytest.mark.asyncio
async def test_friendship_with_unknown_user_is_not_found(make_users, db_session: AsyncSession):
    await make_users("known@example.com")

    with pytest.raises(UserNotFoundError):
        await social_graph.create_friendship(
            db_session,
            first_email="known@example.com",
            second_email="ghost@example.com",
        )


@pytest.mark.asyncio
async def test_blocked_users_cannot_become_friends_or_subscribe(
    make_users,
    db_session: AsyncSession,
):
    await make_users("a@example.com", "b@example.com")
    await social_graph.create_block(
        db_session,
        requestor_email="a@example.com",
        target_email="b@example.com",
    )

    for first, second in (("a@example.com", "b@example.com"), ("b@example.com", "a@example.com")):
        with pytest.raises(BlockedError) as excinfo:
            await social_graph.create_friendship(db_session, first_email=first, second_email=second)
        assert excinfo.value.kind is ErrorKind.FORBIDDEN

        with pytest.raises(BlockedError):
            await social_graph.create_subscription(
                db_session,
                requestor_email=first,
                target_email=second,
            )

    assert await _friendship_rows(db_session) == []
    assert await _subscription_rows(db_session) == set()


@pytest.mark.asyncio
async def test_duplicate_subscription_is_conflict(make_users, db_session: AsyncSession):
    users = await make_users("fan@example.com", "star@example.com")

    await social_graph.create_subscription(
        db_session,
        requestor_email="fan@example.com",
        target_email="star@example.com",
    )
    await social_graph.create_subscription(
        db_session,
        requestor_email="star@example.com",
        target_email="fan@example.com",
    )
    with pytest.raises(ConflictError):
        await social_graph.create_subscription(
            db_session,
            requestor_email="fan@example.com",
            target_email="star@example.com",
        )

    fan = users["fan@example.com"].id
    star = users["star@example.com"].id
    assert await _subscription_rows(db_session) == {(fan, star), (star, fan)}


@pytest.mark.asyncio
async def test_block_severs_friendship_and_both_subscriptions(
    make_users,
    db_session: AsyncSession,
):
    users = await make_users("a@example.com", "b@example.com", "c@example.com")
    a = users["a@example.com"].id
    b = users["b@example.com"].id
    c = users["c@example.com"].id

    await social_graph.create_friendship(
        db_session, first_email="a@example.com", second_email="b@example.com"
    )
    await social_graph.create_friendship(
        db_session, first_email="a@example.com", second_email="c@example.com"
    )
    await social_graph.create_subscription(
        db_session, requestor_email="a@example.com", target_email="b@example.com"
    )
    await social_graph.create_subscription(
        db_session, requestor_email="b@example.com", target_email="a@example.com"
    )
    await social_graph.create_subscription(
        db_session, requestor_email="c@example.com", target_email="a@example.com"
    )

    await social_graph.create_block(
        db_session,
        requestor_email="b@example.com",
        target_email="a@example.com",
    )

    assert [user.id for user in await store.friends_of(db_session, a)] == [c]
    assert await store.friends_of(db_session, b) == []
    assert await _subscription_rows(db_session) == {(c, a)}
    assert await is_blocked_either_way(db_session, user_id=a, other_user_id=b)
    assert await is_blocked_either_way(db_session, user_id=b, other_user_id=a)

    blocks = (await db_session.execute(select(UserBlock))).scalars().all()
    assert [(row.blocker_id, row.blocked_id) for row in blocks] == [(b, a)]


@pytest.mark.asyncio
async def test_repeated_block_is_conflict_and_changes_nothing(
    make_users,
    db_session: AsyncSession,
):
    users = await make_users("a@example.com", "b@example.com")
    a = users["a@example.com"].id
    b = users["b@example.com"].id

    await social_graph.create_block(
        db_session, requestor_email="a@example.com", target_email="b@example.com"
    )

    # Rows written behind the guard's back must survive a failed cascade.
    low, high = store.canonical_pair(a, b)
    async with store.atomic(db_session):
        await store.insert_friendship(db_session, user1_id=low, user2_id=high)
        await store.insert_subscription(db_session, subscriber_id=b, target_id=a)

    with pytest.raises(ConflictError) as excinfo:
        await social_graph.create_block(
            db_session, requestor_email="a@example.com", target_email="b@example.com"
        )
    assert excinfo.value.message == "User is already blocked"

    assert await _friendship_rows(db_session) == [(low, high)]
    assert await _subscription_rows(db_session) == {(b, a)}


@pytest.mark.asyncio
async def test_reverse_block_is_allowed(make_users, db_session: AsyncSession):
    await make_users("a@example.com", "b@example.com")

    await social_graph.create_block(
        db_session, requestor_email="a@example.com", target_email="b@example.com"
    )
    await social_graph.create_block(
        db_session, requestor_email="b@example.com", target_email="a@example.com"
    )

    blocks = (await db_session.execute(select(UserBlock))).scalars().all()
    assert len(blocks) == 2


@pytest.mark.asyncio
async def test_block_unknown_user_is_not_found(make_users, db_session: AsyncSession):
    await make_users("a@example.com")

    with pytest.raises(UserNotFoundError):
        await social_graph.create_block(
            db_session, requestor_email="a@example.com", target_email="ghost@example.com"
        )


@pytest.mark.asyncio
async def test_friend_list_is_sorted_by_email(make_users, db_session: AsyncSession):
    await make_users("me@example.com", "zed@example.com", "amy@example.com")
    for other in ("zed@example.com", "amy@example.com"):
        await social_graph.create_friendship(
            db_session, first_email="me@example.com", second_email=other
        )

    friends = await social_graph.get_friend_list(db_session, email="me@example.com")
    assert [friend.email for friend in friends] == ["amy@example.com", "zed@example.com"]

    with pytest.raises(UserNotFoundError):
        await social_graph.get_friend_list(db_session, email="ghost@example.com")


@pytest.mark.asyncio
async def test_common_friends_intersection(make_users, db_session: AsyncSession):
    await make_users(
        "a@example.com",
        "b@example.com",
        "c@example.com",
        "d@example.com",
        "e@example.com",
    )
    for first, second in (
        ("a@example.com", "c@example.com"),
        ("a@example.com", "d@example.com"),
        ("b@example.com", "c@example.com"),
        ("b@example.com", "e@example.com"),
    ):
        await social_graph.create_friendship(db_session, first_email=first, second_email=second)

    common = await social_graph.get_common_friends(
        db_session,
        first_email="a@example.com",
        second_email="b@example.com",
    )
    assert [user.email for user in common] == ["c@example.com"]


@pytest.mark.asyncio
async def test_common_friends_with_self_is_rejected_before_store(monkeypatch):
    lookup = AsyncMock()
    monkeypatch.setattr(social_graph, "find_user_by_email", lookup)

    with pytest.raises(BusinessRuleError):
        await social_graph.get_common_friends(
            AsyncMock(),
            first_email="x@example.com",
            second_email="x@example.com",
        )
    lookup.assert_not_awaited()


@pytest.mark.asyncio
async def test_block_check_runs_inside_the_insert_transaction(
    monkeypatch,
    make_users,
    db_session: AsyncSession,
):
    await make_users("a@example.com", "b@example.com")
    in_transaction = False
    checked_inside: list[bool] = []

    @asynccontextmanager
    async def tracking_atomic(session):
        nonlocal in_transaction
        async with store.atomic(session) as scoped:
            in_transaction = True
            try:
                yield scoped
            finally:
                in_transaction = False

    async def tracking_guard(session, *, user_id, other_user_id):
        checked_inside.append(in_transaction)
        return await is_blocked_either_way(session, user_id=user_id, other_user_id=other_user_id)

    monkeypatch.setattr(social_graph, "atomic", tracking_atomic)
    monkeypatch.setattr(social_graph, "is_blocked_either_way", tracking_guard)

    await social_graph.create_friendship(
        db_session,
        first_email="a@example.com",
        second_email="b@example.com",
    )
    await social_graph.create_subscription(
        db_session,
        requestor_email="a@example.com",
        target_email="b@example.com",
    )

    assert checked_inside == [True, True]
    assert len(await _friendship_rows(db_session)) == 1


@pytest.mark.asyncio
async def test_blocked_friendship_leaves_session_usable(make_users, db_session: AsyncSession):
    await make_users("a@example.com", "b@example.com", "c@example.com")
    await social_graph.create_block(
        db_session,
        requestor_email="a@example.com",
        target_email="b@example.com",
    )

    with pytest.raises(BlockedError):
        await social_graph.create_friendship(
            db_session,
            first_email="b@example.com",
            second_email="a@example.com",
        )
    await social_graph.create_friendship(
        db_session,
        first_email="a@example.com",
        second_email="c@example.com",
    )

    assert len(await _friendship_rows(db_session)) == 1
