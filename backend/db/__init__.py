"""Database helpers."""

from .errors import conflict_details, is_foreign_key_violation, is_unique_violation
from .session import AsyncSessionMaker, async_engine, create_engine

__all__ = [
    "AsyncSessionMaker",
    "async_engine",
    "create_engine",
    "conflict_details",
    "is_foreign_key_violation",
    "is_unique_violation",
]
