"""
Database initialization module.
Create tables for every registered model.
"""

import asyncio

from billboard_api.core.database import engine
from billboard_api.core.logging import get_logger, setup_logging
from billboard_api.models import Base

logger = get_logger(__name__)


async def init_db() -> None:
    """Initialize database by creating all tables."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_created", tables=sorted(Base.metadata.tables))
    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise


async def drop_db() -> None:
    """Drop all database tables. Use with caution!"""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("database_tables_dropped")
    except Exception as e:
        logger.error("database_drop_failed", error=str(e))
        raise


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_db())
