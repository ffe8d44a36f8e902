#!/usr/bin/env python
"""
Create the database tables for Community Water Watch.

Run from the project root: ``python -m scripts.create_tables``.
"""

# Standard library imports
import asyncio
import sys

# Third-party imports
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

# Local application imports
from waterwatch import models  # noqa: F401  registers every table on Base.metadata
from waterwatch.core.db import create_async_engine
from waterwatch.core.monitoring import get_logger
from waterwatch.models.base import Base

logger = get_logger(__name__)


async def create_tables() -> None:
    """Create all missing tables and list what the database now holds"""
    engine = create_async_engine()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            table_names = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    except SQLAlchemyError as e:
        logger.error(f"Error creating tables: {e}")
        sys.exit(1)
    finally:
        await engine.dispose()

    logger.info("All tables created successfully")
    for table_name in sorted(table_names):
        logger.info(f"  - {table_name}")


if __name__ == "__main__":
    asyncio.run(create_tables())
