"""SQLModel models package."""

from .friendship import Friendship
from .subscription import Subscription
from .user import User
from .user_block import UserBlock

__all__ = [
    "User",
    "Friendship",
    "Subscription",
    "UserBlock",
]
