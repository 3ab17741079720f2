"""Database seed script for local development.

Usage:
    python scripts/seed.py

Creates a handful of users and a small relationship graph. Safe to run
repeatedly: existing users are reused and relations that already exist are
skipped.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from core.errors import ConflictError  # noqa: E402
from db.session import AsyncSessionMaker  # noqa: E402
from models import User  # noqa: E402
from services.social_graph import (  # noqa: E402
    create_block,
    create_friendship,
    create_subscription,
)


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


@dataclass(frozen=True)
class SeedPlan:
    emails: Sequence[str]
    friendships: Sequence[tuple[str, str]]
    subscriptions: Sequence[tuple[str, str]]
    blocks: Sequence[tuple[str, str]]


SEED_PLAN = SeedPlan(
    emails=(
        "andy@example.com",
        "john@example.com",
        "lisa@example.com",
        "kate@example.com",
        "common@example.com",
    ),
    friendships=(
        ("andy@example.com", "john@example.com"),
        ("andy@example.com", "common@example.com"),
        ("john@example.com", "common@example.com"),
    ),
    subscriptions=(("lisa@example.com", "john@example.com"),),
    blocks=(("andy@example.com", "kate@example.com"),),
)


async def get_or_create_user(session: AsyncSession, email: str) -> User:
    result = await session.execute(select(User).where(_eq(User.email, email)))
    user = result.scalar_one_or_none()
    if user:
        return user

    user = User(email=email)
    session.add(user)
    await session.flush()
    return user


async def _apply(label: str, operation: Any, pairs: Sequence[tuple[str, str]]) -> int:
    created = 0
    for first, second in pairs:
        async with AsyncSessionMaker() as session:
            try:
                await operation(session, first, second)
            except ConflictError:
                continue
            created += 1
    print(f"   {label}: {created} created, {len(pairs) - created} already present")
    return created


async def seed(plan: SeedPlan = SEED_PLAN) -> None:
    async with AsyncSessionMaker() as session:
        for email in plan.emails:
            await get_or_create_user(session, email)
        await session.commit()

    print("Seed data inserted.")
    print("   Users:", ", ".join(plan.emails))
    await _apply(
        "Friendships",
        lambda session, a, b: create_friendship(session, first_email=a, second_email=b),
        plan.friendships,
    )
    await _apply(
        "Subscriptions",
        lambda session, a, b: create_subscription(session, requestor_email=a, target_email=b),
        plan.subscriptions,
    )
    await _apply(
        "Blocks",
        lambda session, a, b: create_block(session, requestor_email=a, target_email=b),
        plan.blocks,
    )


if __name__ == "__main__":
    asyncio.run(seed())
