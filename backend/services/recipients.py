"""Notification audience for a user's update."""

from __future__ import annotations

import logging
import re

from sqlalchemy.ext.asyncio import AsyncSession

from models import User
from services.block_guard import are_blocked_batch
from services.relationship_store import (
    find_user_by_email,
    find_users_by_emails,
    friends_of,
    subscribers_of,
)

logger = logging.getLogger(__name__)

EMAIL_MENTION_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")


def extract_mentioned_emails(text: str) -> list[str]:
    """Return email-shaped tokens in ``text``, first occurrence order, no repeats."""
    return list(dict.fromkeys(EMAIL_MENTION_PATTERN.findall(text)))


async def resolve_recipients(
    session: AsyncSession,
    *,
    sender_email: str,
    text: str,
) -> list[User]:
    """Collect everyone who should receive ``text`` from the sender.

    The audience is the sender's friends, their subscribers, and any user
    mentioned by email in the text unless a block exists between that user
    and the sender in either direction. Mentions that match no user are
    ignored. A sender who mentions themself is included like any other
    mentioned user.
    """
    sender = await find_user_by_email(session, sender_email)
    if sender.id is None:
        raise ValueError("User record missing identifier")

    mentioned_emails = extract_mentioned_emails(text)
    mentioned_users = await find_users_by_emails(session, mentioned_emails)

    recipients: dict[int | None, User] = {}
    for friend in await friends_of(session, sender.id):
        recipients[friend.id] = friend
    for subscriber in await subscribers_of(session, sender.id):
        recipients[subscriber.id] = subscriber

    if mentioned_users:
        by_email = {user.email: user for user in mentioned_users}
        unique_mentions = {
            by_email[email].id: by_email[email]
            for email in mentioned_emails
            if email in by_email and by_email[email].id is not None
        }
        blocked = await are_blocked_batch(
            session,
            sender_id=sender.id,
            candidate_ids=list(unique_mentions),
        )
        for user_id, user in unique_mentions.items():
            if blocked.get(user_id, False):
                logger.debug(
                    "Dropping mentioned user %s, blocked with sender %s",
                    user_id,
                    sender.id,
                )
                continue
            recipients[user_id] = user

    return list(recipients.values())


__all__ = ["EMAIL_MENTION_PATTERN", "extract_mentioned_emails", "resolve_recipients"]
