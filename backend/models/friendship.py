"""Friendship relationship model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, func
from sqlmodel import Field, SQLModel


class Friendship(SQLModel, table=True):
    """Unordered user pair stored with the lower id in ``user1_id``."""

    __tablename__ = "friendships"
    __table_args__ = (
        CheckConstraint("user1_id < user2_id", name="ck_friendships_canonical_order"),
        Index("ix_friendships_user2_user1", "user2_id", "user1_id"),
    )

    user1_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    user2_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    created_at: datetime | None = Field(
        default=None,
        sa_column=Column(
            DateTime(timezone=True),
            server_default=func.now(),
            nullable=False,
        ),
    )
