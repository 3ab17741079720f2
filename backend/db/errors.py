"""Database error helpers."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

RELATION_CONFLICT_DETAILS = {
    "friendships": "Friendship already exists",
    "subscriptions": "Subscription already exists",
    "user_blocks": "User is already blocked",
    "users": "Email address already exists",
}


def _sqlstate(error: IntegrityError) -> str | None:
    original = getattr(error, "orig", None)
    return getattr(original, "sqlstate", None) or getattr(original, "pgcode", None)


def is_unique_violation(error: IntegrityError) -> bool:
    """Return True when the IntegrityError indicates a unique-constraint conflict."""
    if _sqlstate(error) == "23505":
        return True
    message = str(getattr(error, "orig", None) or error).lower()
    return "duplicate key" in message or "unique constraint" in message


def is_foreign_key_violation(error: IntegrityError) -> bool:
    """Return True when the IntegrityError references a missing parent row."""
    if _sqlstate(error) == "23503":
        return True
    message = str(getattr(error, "orig", None) or error).lower()
    return "foreign key" in message


def conflict_details(error: IntegrityError) -> str:
    """Describe which relation a unique violation collided with."""
    message = str(getattr(error, "orig", None) or error).lower()
    for table, details in RELATION_CONFLICT_DETAILS.items():
        if table in message:
            return details
    return "Duplicate entry"


__all__ = ["is_unique_violation", "is_foreign_key_violation", "conflict_details"]
