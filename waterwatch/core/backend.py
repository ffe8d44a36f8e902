"""
The backend client: database sessions plus the real-time change feed.

Constructed once per process (in the app lifespan), stored on ``app.state`` and
handed to every consumer. Nothing in the services layer builds its own engine
or Redis connection.
"""

# Third-party imports
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

# Local application imports
from waterwatch.core.db import create_async_engine, create_session_factory
from waterwatch.core.monitoring import get_logger
from waterwatch.core.realtime import ChangeFeed, RedisChangeFeed, create_redis_client
from waterwatch import models  # noqa: F401  registers every table on Base.metadata
from waterwatch.models.base import Base
from waterwatch.settings import settings

logger = get_logger(__name__)


class BackendClient:
    def __init__(self, engine: AsyncEngine, change_feed: ChangeFeed):
        self.engine = engine
        self.session_factory: async_sessionmaker[AsyncSession] = create_session_factory(engine)
        self.change_feed = change_feed
        self._opened = False

    @classmethod
    def from_settings(cls) -> "BackendClient":
        engine = create_async_engine()
        change_feed = RedisChangeFeed(
            create_redis_client(settings.REDIS_URL),
            prefix=settings.REALTIME_CHANNEL_PREFIX,
        )
        return cls(engine, change_feed)

    @property
    def is_open(self) -> bool:
        return self._opened

    async def open(self, create_schema: bool = False) -> None:
        """Verify the database answers; optionally create missing tables."""
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if create_schema:
                await conn.run_sync(Base.metadata.create_all)
        self._opened = True
        logger.info("Backend client opened")

    async def close(self) -> None:
        await self.change_feed.close()
        await self.engine.dispose()
        self._opened = False
        logger.info("Backend client closed")
