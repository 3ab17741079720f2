"""Directed block between two users."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, func
from sqlmodel import Field, SQLModel


class UserBlock(SQLModel, table=True):
    """``blocker_id`` has blocked ``blocked_id``.

    Visibility checks treat the row as hiding both users from each other;
    the reverse index serves lookups from the blocked side.
    """

    __tablename__ = "user_blocks"
    __table_args__ = (
        CheckConstraint("blocker_id <> blocked_id", name="ck_user_blocks_no_self_block"),
        Index("ix_user_blocks_blocked_blocker", "blocked_id", "blocker_id"),
    )

    blocker_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    )
    blocked_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    )
    created_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), server_default=func.now(), nullable=False),
    )

    def counterpart(self, user_id: int) -> int:
        """Return the other side of the block as seen from ``user_id``."""
        return self.blocked_id if self.blocker_id == user_id else self.blocker_id
