# Standard library imports
from collections.abc import AsyncGenerator

# Third-party imports
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


# Dependency to get an async session from the backend client built in the app lifespan
async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.backend.session_factory() as session:
        yield session
