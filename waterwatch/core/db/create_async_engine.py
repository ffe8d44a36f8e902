# Third-party imports
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine as sa_create_async_engine

# Local application imports
from waterwatch.settings import settings


def create_async_engine(url: str | None = None) -> AsyncEngine:
    """Build the asynchronous engine for the configured database URI."""
    return sa_create_async_engine(
        url or settings.SQLALCHEMY_ASYNC_DATABASE_URI,
        echo=settings.DEBUG_MODE and settings.ENVIRONMENT != "production",
        future=True,
    )
