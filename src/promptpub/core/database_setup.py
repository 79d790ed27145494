"""Database table creation and management."""

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine

from .database import Base
from ..models import prompt  # noqa: F401  registers tables on Base.metadata

logger = structlog.get_logger(__name__)


async def create_all_tables(engine: AsyncEngine) -> None:
    """Create all application tables.

    Tables come from the ORM metadata, so every model imported by
    ``promptpub.models.prompt`` is created here together with its indexes.

    Args:
        engine: AsyncEngine instance for database operations
    """
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
            logger.info(
                "All database tables created successfully",
                tables=sorted(Base.metadata.tables),
            )
        except Exception as e:
            logger.error("Failed to create database tables", error=str(e))
            raise


async def drop_all_tables(engine: AsyncEngine) -> None:
    """Drop all application tables.

    WARNING: This will delete all data!
    Use only for development/testing.

    Args:
        engine: AsyncEngine instance for database operations
    """
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.drop_all)
            logger.warning("All database tables dropped")
        except Exception as e:
            logger.error("Failed to drop database tables", error=str(e))
            raise


async def recreate_all_tables(engine: AsyncEngine) -> None:
    """Drop and recreate all tables.

    WARNING: This will delete all data!
    Use only for development/testing.

    Args:
        engine: AsyncEngine instance for database operations
    """
    logger.warning("Recreating all database tables - ALL DATA WILL BE LOST!")

    await drop_all_tables(engine)
    await create_all_tables(engine)

    logger.info("Database tables recreated successfully")
