"""Business logic services."""

from .block_guard import BlockState, are_blocked_batch, get_block_state, is_blocked_either_way
from .rate_limiter import (
    RateLimitMiddleware,
    RateLimiter,
    get_rate_limiter,
    set_rate_limiter,
)
from .recipients import extract_mentioned_emails, resolve_recipients
from .social_graph import (
    create_block,
    create_friendship,
    create_subscription,
    get_common_friends,
    get_friend_list,
)

__all__ = [
    "BlockState",
    "are_blocked_batch",
    "get_block_state",
    "is_blocked_either_way",
    "create_block",
    "create_friendship",
    "create_subscription",
    "get_common_friends",
    "get_friend_list",
    "extract_mentioned_emails",
    "resolve_recipients",
    "RateLimiter",
    "RateLimitMiddleware",
    "get_rate_limiter",
    "set_rate_limiter",
]
