"""Bidirectional block visibility checks.

A block in either direction makes two users invisible to each other for
friendship and subscription purposes, so every check here looks both ways.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from services.relationship_store import block_exists, blocks_between


@dataclass(slots=True)
class BlockState:
    is_blocked: bool
    is_blocked_by: bool


async def get_block_state(
    session: AsyncSession,
    *,
    viewer_id: int,
    target_id: int,
) -> BlockState:
    if viewer_id == target_id:
        return BlockState(is_blocked=False, is_blocked_by=False)

    rows = await blocks_between(session, user_id=viewer_id, candidate_ids=[target_id])
    is_blocked = any(
        row.blocker_id == viewer_id and row.blocked_id == target_id for row in rows
    )
    is_blocked_by = any(
        row.blocker_id == target_id and row.blocked_id == viewer_id for row in rows
    )
    return BlockState(is_blocked=is_blocked, is_blocked_by=is_blocked_by)


async def is_blocked_either_way(
    session: AsyncSession,
    *,
    user_id: int,
    other_user_id: int,
) -> bool:
    if await block_exists(session, blocker_id=user_id, blocked_id=other_user_id):
        return True
    return await block_exists(session, blocker_id=other_user_id, blocked_id=user_id)


async def are_blocked_batch(
    session: AsyncSession,
    *,
    sender_id: int,
    candidate_ids: Sequence[int],
) -> dict[int, bool]:
    """Map each candidate id to whether it and the sender block each other.

    Duplicate ids collapse into one entry. The lookup is a single query over
    both directions however many candidates there are.
    """
    unique_ids = list(dict.fromkeys(candidate_ids))
    if not unique_ids:
        return {}

    blocked = dict.fromkeys(unique_ids, False)
    rows = await blocks_between(session, user_id=sender_id, candidate_ids=unique_ids)
    for row in rows:
        blocked[row.counterpart(sender_id)] = True
    return blocked
