# Third-party imports
import redis.asyncio as redis


def create_redis_client(url: str) -> redis.Redis:
    """Build an asyncio Redis client backed by its own connection pool."""
    connection_pool = redis.ConnectionPool.from_url(url, decode_responses=True)
    return redis.Redis(connection_pool=connection_pool)
