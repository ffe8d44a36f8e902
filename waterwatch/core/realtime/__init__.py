# Local application imports
from waterwatch.core.realtime.change_feed import (
    ChangeCallback,
    ChangeEvent,
    ChangeFeed,
    ChangeType,
    RedisChangeFeed,
    Subscription,
)
from waterwatch.core.realtime.redis_client import create_redis_client

__all__ = [
    "ChangeCallback",
    "ChangeEvent",
    "ChangeFeed",
    "ChangeType",
    "RedisChangeFeed",
    "Subscription",
    "create_redis_client",
]
