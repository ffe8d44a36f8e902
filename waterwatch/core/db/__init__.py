# Local application imports
from waterwatch.core.db.create_async_engine import create_async_engine
from waterwatch.core.db.get_async_session import create_session_factory, get_async_session

__all__ = [
    "create_async_engine",
    "create_session_factory",
    "get_async_session",
]
